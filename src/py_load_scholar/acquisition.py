"""
Search client module for querying Google Scholar through SerpAPI.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

import requests

from py_load_scholar.config import settings
from py_load_scholar.errors import RemoteError, TransportError
from py_load_scholar.utils import get_logger

logger = get_logger(__name__)


class SearchClient(ABC):
    """Abstract Base Class for a scholarly search backend."""

    @abstractmethod
    def search(self, query: str, start: int = 0, **options: Any) -> dict:
        """
        Runs a free-form query and returns the raw JSON response.

        Args:
            query: The search query string.
            start: Pagination offset (0, 10, 20, ...).
            options: Extra engine parameters, passed through unchanged.

        Raises:
            TransportError: On timeout or any transport-level failure.
            RemoteError: When the remote API reports an error.
        """
        raise NotImplementedError

    @abstractmethod
    def search_by_author(self, author_name: str, start: int = 0) -> dict:
        """Searches for items authored by `author_name`."""
        raise NotImplementedError

    @abstractmethod
    def get_cited_by(self, cites_id: str, start: int = 0) -> dict:
        """Retrieves the articles citing a publication."""
        raise NotImplementedError

    @abstractmethod
    def get_all_versions(self, cluster_id: str) -> dict:
        """Retrieves all versions of a publication."""
        raise NotImplementedError


class SerpApiScholarClient(SearchClient):
    """Search client for the SerpAPI `google_scholar` engine."""

    ENGINE = "google_scholar"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        page_size: Optional[int] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.serpapi_api_key
        self.base_url = base_url or settings.serpapi_base_url
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self.page_size = page_size or settings.results_per_page
        if not self.api_key:
            logger.warning("SERP_API_KEY not configured. Searches will be rejected by SerpAPI.")

    def _request(self, params: dict) -> dict:
        """
        Sends a single GET request and translates failures into the
        TransportError / RemoteError categories. No retries are attempted.
        """
        params = {"engine": self.ENGINE, "api_key": self.api_key, **params}
        try:
            response = requests.get(self.base_url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as e:
            raise RemoteError(f"SerpAPI Error: {_remote_error_message(e.response) or e}") from e
        except requests.RequestException as e:
            raise TransportError(f"Network Error: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise RemoteError("SerpAPI Error: response was not valid JSON") from e

        if not isinstance(body, dict):
            raise RemoteError("SerpAPI Error: unexpected response shape")
        if body.get("error"):
            raise RemoteError(f"SerpAPI Error: {body['error']}")
        return body

    def search(self, query: str, start: int = 0, **options: Any) -> dict:
        logger.info(f"Searching Google Scholar: \"{query}\" (offset: {start})")
        params = {"q": query, "start": start, "num": self.page_size, **options}
        return self._request(params)

    def search_by_author(self, author_name: str, start: int = 0) -> dict:
        return self.search(f'author:"{author_name}"', start)

    def search_by_date_range(self, query: str, year_from: int, year_to: int, start: int = 0) -> dict:
        """Runs `query` restricted to publications between two years, inclusive."""
        return self.search(query, start, as_ylo=year_from, as_yhi=year_to)

    def get_cited_by(self, cites_id: str, start: int = 0) -> dict:
        logger.info(f"Fetching citations for: {cites_id}")
        return self._request({"cites": cites_id, "start": start, "num": self.page_size})

    def get_all_versions(self, cluster_id: str) -> dict:
        logger.info(f"Fetching versions for cluster: {cluster_id}")
        return self._request({"cluster": cluster_id, "num": self.page_size})


def _remote_error_message(response: Optional[requests.Response]) -> Optional[str]:
    """Pulls the `error` field out of an HTTP error response, if it has one."""
    if response is None:
        return None
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("error")
    return None
