"""
Parser for SerpAPI Google Scholar results.

Every function here is pure and tolerant of malformed input: a bad item
yields a best-effort record with missing fields, never an exception.
Invalid records are dropped by `filter_valid_publications`.
"""
from __future__ import annotations

import re
from typing import Any, Iterable, List, Optional

from py_load_scholar.models import (
    ArticleRow,
    PublicationInfo,
    PublicationRecord,
    SearchMetadata,
)

SUMMARY_SEPARATOR = " - "
YEAR_RE = re.compile(r"\b(19|20)\d{2}\b")
# The ", " that usually precedes the year.
YEAR_PREFIX_RE = re.compile(r",?\s*$")
WHITESPACE_RE = re.compile(r"\s+")


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    """Returns non-empty strings (and stringified ids) unchanged, else None."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    return value if isinstance(value, str) and value else None


def _strip_or_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def parse_publication_info(summary: Optional[str]) -> PublicationInfo:
    """
    Splits a publication-info summary into its structured parts.

    Format: "Author1, Author2 - Source, Year - Publisher"
    Example: "JL Harper - Population biology of plants., 1977 - cabdirect.org"
    """
    if not isinstance(summary, str) or not summary.strip():
        return PublicationInfo()

    parts = summary.split(SUMMARY_SEPARATOR)

    authors = _strip_or_none(parts[0])

    journal = None
    year = None
    if len(parts) > 1:
        source_year = parts[1].strip()
        match = YEAR_RE.search(source_year)
        if match:
            year = int(match.group(0))
            prefix = YEAR_PREFIX_RE.sub("", source_year[: match.start()], count=1)
            journal = (prefix + source_year[match.end() :]).strip() or None
        else:
            journal = source_year or None

    publisher = _strip_or_none(parts[2]) if len(parts) > 2 else None

    return PublicationInfo(authors=authors, journal=journal, year=year, publisher=publisher)


def extract_pdf_url(resources: Any) -> Optional[str]:
    """Returns the link of the first resource whose format is PDF."""
    if not isinstance(resources, list):
        return None

    for resource in resources:
        resource = _as_dict(resource)
        file_format = resource.get("file_format")
        if isinstance(file_format, str) and file_format.upper() == "PDF":
            return _as_str(resource.get("link"))
    return None


def _citation_count(cited_by: dict) -> int:
    total = cited_by.get("total")
    if isinstance(total, bool) or not isinstance(total, int) or total < 0:
        return 0
    return total


def parse_organic_result(result: Any) -> PublicationRecord:
    """Parses a single organic result from SerpAPI into a PublicationRecord."""
    result = _as_dict(result)
    publication_info = _as_dict(result.get("publication_info"))
    info = parse_publication_info(publication_info.get("summary"))

    inline_links = _as_dict(result.get("inline_links"))
    cited_by = _as_dict(inline_links.get("cited_by"))
    versions = _as_dict(inline_links.get("versions"))

    return PublicationRecord(
        external_id=_as_str(result.get("result_id")),
        title=_as_str(result.get("title")),
        authors_text=info.authors,
        publication_year=info.year,
        journal=info.journal,
        publisher=info.publisher,
        abstract=_as_str(result.get("snippet")),
        article_url=_as_str(result.get("link")),
        pdf_url=extract_pdf_url(result.get("resources")),
        citation_count=_citation_count(cited_by),
        cites_id=_as_str(cited_by.get("cites_id")),
        cluster_id=_as_str(versions.get("cluster_id")),
    )


def parse_organic_results(results: Any) -> List[PublicationRecord]:
    """Parses a list of organic results, preserving their order."""
    if not isinstance(results, list):
        return []
    return [parse_organic_result(result) for result in results]


def is_valid_publication(record: PublicationRecord) -> bool:
    """A record is valid when it has both a title and an external id."""
    return bool(record.title and record.external_id)


def filter_valid_publications(records: Iterable[PublicationRecord]) -> List[PublicationRecord]:
    return [record for record in records if is_valid_publication(record)]


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """Collapses whitespace runs to a single space and trims the ends."""
    if not value:
        return None
    return WHITESPACE_RE.sub(" ", value).strip() or None


def prepare_for_database(record: PublicationRecord) -> ArticleRow:
    """
    Sanitizes a valid record's free-text fields and maps it onto the
    `articles` table columns.
    """
    return ArticleRow(
        google_scholar_id=record.external_id,
        paper_title=sanitize_string(record.title),
        authors=sanitize_string(record.authors_text),
        publication_year=record.publication_year,
        journal=sanitize_string(record.journal),
        article_url=record.article_url,
        abstract_text=sanitize_string(record.abstract),
        citation_count=record.citation_count or 0,
        cites_id=record.cites_id,
        pdf_url=record.pdf_url,
        cluster_id=record.cluster_id,
        publisher=sanitize_string(record.publisher),
    )


def calculate_current_page(start: Any) -> int:
    """Converts a pagination offset into a 1-indexed page number."""
    if isinstance(start, str) and start.isdigit():
        start = int(start)
    if isinstance(start, bool) or not isinstance(start, int) or start < 0:
        start = 0
    return start // 10 + 1


def extract_metadata(search_data: Any) -> SearchMetadata:
    """Extracts search-level metadata from a full SerpAPI response."""
    search_data = _as_dict(search_data)
    information = _as_dict(search_data.get("search_information"))
    parameters = _as_dict(search_data.get("search_parameters"))

    total_results = information.get("total_results")
    time_taken = information.get("time_taken_displayed")

    return SearchMetadata(
        total_results=total_results if isinstance(total_results, int) and not isinstance(total_results, bool) else 0,
        time_taken=time_taken if isinstance(time_taken, (int, float)) and not isinstance(time_taken, bool) else 0,
        query=_as_str(parameters.get("q")),
        current_page=calculate_current_page(parameters.get("start", 0)),
        has_next=bool(_as_dict(search_data.get("pagination")).get("next")),
    )
