"""Exception hierarchy for py-load-scholar.

Callers catch the narrowest class they can act on: the pipeline isolates
``SearchError`` per author and treats ``DuplicateError`` as a benign
outcome, while ``error_response`` maps everything onto an outward status.
"""

from __future__ import annotations


class ScholarSyncError(Exception):
    """Base for all py-load-scholar exceptions."""


class ValidationError(ScholarSyncError):
    """Bad input shape, raised before any network or database call."""


class SearchError(ScholarSyncError):
    """Search client failures."""


class TransportError(SearchError):
    """Timeout, connection, or other transport-level failure."""


class RemoteError(SearchError):
    """The search API answered but reported an error itself."""


class StorageError(ScholarSyncError):
    """Persistence failures."""


class DuplicateError(StorageError):
    """The external identifier already exists at the storage layer."""


class StorageConnectionError(StorageError):
    """The database could not be reached."""


def error_status(exc: BaseException) -> int:
    """Returns the HTTP-style status code that describes ``exc``."""
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, RemoteError):
        return 502
    if isinstance(exc, (TransportError, StorageConnectionError)):
        return 503
    return 500


def error_response(exc: BaseException) -> dict:
    """
    Builds the error payload returned to callers.

    The payload always carries ``success: false`` so that it is shaped
    consistently with the success response.
    """
    status = error_status(exc)
    message = str(exc) or "Internal Server Error"
    if isinstance(exc, StorageConnectionError):
        message = "Database connection failed"
    return {"success": False, "error": message, "status": status}
