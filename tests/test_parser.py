"""
Unit tests for the SerpAPI result parser and validity filter.
"""
import pytest

from py_load_scholar.models import PublicationRecord
from py_load_scholar.parser import (
    calculate_current_page,
    extract_metadata,
    extract_pdf_url,
    filter_valid_publications,
    is_valid_publication,
    parse_organic_result,
    parse_organic_results,
    parse_publication_info,
    prepare_for_database,
    sanitize_string,
)


@pytest.mark.parametrize(
    "authors, journal, year, publisher",
    [
        ("JL Harper", "Population biology of plants.", 1977, "cabdirect.org"),
        ("A Smith, B Jones", "Nature", 2021, "nature.com"),
        ("X", "Some Journal", 1999, "Some Press"),
    ],
)
def test_parse_publication_info_three_parts(authors, journal, year, publisher):
    info = parse_publication_info(f"{authors} - {journal}, {year} - {publisher}")
    assert info.authors == authors
    assert info.journal == journal
    assert info.year == year
    assert info.publisher == publisher


def test_parse_publication_info_without_year():
    info = parse_publication_info("A Author -  Journal of Things  - publisher.org")
    assert info.year is None
    assert info.journal == "Journal of Things"
    assert info.publisher == "publisher.org"


def test_parse_publication_info_ignores_non_century_numbers():
    """Only 19xx and 20xx count as a year."""
    info = parse_publication_info("A Author - Proceedings 1850 vol 2150 - press")
    assert info.year is None
    assert info.journal == "Proceedings 1850 vol 2150"


def test_parse_publication_info_year_only_segment():
    info = parse_publication_info("A Author - 2005 - press")
    assert info.year == 2005
    assert info.journal is None


def test_parse_publication_info_keeps_digits_inside_other_tokens():
    """Only the standalone year and its leading comma are removed from the journal."""
    info = parse_publication_info("A - Proceedings of SIGIR2019, 2019 - acm.org")
    assert info.year == 2019
    assert info.journal == "Proceedings of SIGIR2019"
    assert info.publisher == "acm.org"


def test_parse_publication_info_year_mid_segment():
    info = parse_publication_info("A Author - Nature, 2012 vol 3 - nature.com")
    assert info.year == 2012
    assert info.journal == "Nature vol 3"


def test_parse_publication_info_two_segments():
    info = parse_publication_info("A Author - Journal, 2010")
    assert info.authors == "A Author"
    assert info.journal == "Journal"
    assert info.year == 2010
    assert info.publisher is None


def test_parse_publication_info_ignores_extra_segments():
    info = parse_publication_info("A - B, 2001 - C - D")
    assert info.publisher == "C"


@pytest.mark.parametrize("summary", [None, "", "   ", 12345, {"summary": "x"}])
def test_parse_publication_info_absent_summary(summary):
    info = parse_publication_info(summary)
    assert info.authors is None
    assert info.journal is None
    assert info.year is None
    assert info.publisher is None


def test_extract_pdf_url_picks_first_pdf_case_insensitively():
    resources = [
        {"title": "example.org", "file_format": "HTML", "link": "https://example.org/page"},
        {"title": "mirror", "file_format": "pdf", "link": "https://mirror.org/a.pdf"},
        {"title": "example.org", "file_format": "PDF", "link": "https://example.org/b.pdf"},
    ]
    assert extract_pdf_url(resources) == "https://mirror.org/a.pdf"


def test_extract_pdf_url_independent_of_non_pdf_ordering():
    pdf = {"file_format": "Pdf", "link": "https://example.org/a.pdf"}
    others = [{"file_format": "HTML", "link": "x"}, {"file_format": "DOC", "link": "y"}]
    assert extract_pdf_url(others + [pdf]) == "https://example.org/a.pdf"
    assert extract_pdf_url([others[1], pdf, others[0]]) == "https://example.org/a.pdf"


@pytest.mark.parametrize("resources", [None, [], "not-a-list", [{"file_format": "HTML", "link": "x"}], [None, 3]])
def test_extract_pdf_url_absent(resources):
    assert extract_pdf_url(resources) is None


def test_parse_organic_result_full(organic_result_factory):
    item = organic_result_factory(
        resources=[{"file_format": "PDF", "link": "https://example.org/abc123.pdf"}]
    )
    record = parse_organic_result(item)

    assert record.external_id == "abc123"
    assert record.title == "Population biology of plants"
    assert record.authors_text == "JL Harper"
    assert record.journal == "Population biology of plants."
    assert record.publication_year == 1977
    assert record.publisher == "cabdirect.org"
    assert record.article_url == "https://example.org/abc123"
    assert record.pdf_url == "https://example.org/abc123.pdf"
    assert record.citation_count == 42
    assert record.cites_id == "cites-abc123"
    assert record.cluster_id == "cluster-abc123"
    # Raw text is kept until the record is prepared for the database.
    assert record.abstract == "An   abstract\nwith  messy whitespace. "


def test_parse_organic_result_defaults_citation_count(organic_result_factory):
    record = parse_organic_result(organic_result_factory(cited_by_total=None))
    assert record.citation_count == 0
    assert record.cites_id is None


def test_parse_organic_result_negative_citation_count(organic_result_factory):
    record = parse_organic_result(organic_result_factory(cited_by_total=-5))
    assert record.citation_count == 0


@pytest.mark.parametrize("item", [None, "garbage", 42, {}, {"publication_info": "oops", "inline_links": []}])
def test_parse_organic_result_never_raises(item):
    record = parse_organic_result(item)
    assert record.external_id is None
    assert record.title is None
    assert record.citation_count == 0


def test_parse_organic_results_non_list():
    assert parse_organic_results(None) == []
    assert parse_organic_results({"a": 1}) == []


def test_is_valid_publication():
    assert is_valid_publication(PublicationRecord(external_id="id", title="t")) is True
    assert is_valid_publication(PublicationRecord(external_id="id", title="")) is False
    assert is_valid_publication(PublicationRecord(external_id="", title="t")) is False
    assert is_valid_publication(PublicationRecord(title="t")) is False
    assert is_valid_publication(PublicationRecord(external_id="id")) is False


def test_filter_valid_publications_preserves_order():
    records = [
        PublicationRecord(external_id="1", title="one"),
        PublicationRecord(external_id=None, title="no id"),
        PublicationRecord(external_id="3", title="three"),
        PublicationRecord(external_id="4", title=None),
    ]
    assert [r.external_id for r in filter_valid_publications(records)] == ["1", "3"]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("  hello   world \n", "hello world"),
        ("a\tb\n\nc", "a b c"),
        ("", None),
        (None, None),
    ],
)
def test_sanitize_string(raw, expected):
    assert sanitize_string(raw) == expected


def test_prepare_for_database_sanitizes_text(organic_result_factory):
    record = parse_organic_result(organic_result_factory(title="  A   spaced\ttitle "))
    row = prepare_for_database(record)

    assert row.google_scholar_id == "abc123"
    assert row.paper_title == "A spaced title"
    assert row.abstract_text == "An abstract with messy whitespace."
    assert row.citation_count == 42
    assert row.cluster_id == "cluster-abc123"


def test_extract_metadata():
    response = {
        "search_information": {"total_results": 1234, "time_taken_displayed": 0.05},
        "search_parameters": {"q": 'author:"JL Harper"', "start": 20},
        "pagination": {"next": "https://serpapi.com/search?start=30"},
    }
    metadata = extract_metadata(response)
    assert metadata.total_results == 1234
    assert metadata.time_taken == 0.05
    assert metadata.query == 'author:"JL Harper"'
    assert metadata.current_page == 3
    assert metadata.has_next is True


def test_extract_metadata_empty_response():
    metadata = extract_metadata({})
    assert metadata.total_results == 0
    assert metadata.query is None
    assert metadata.current_page == 1
    assert metadata.has_next is False


@pytest.mark.parametrize("start, page", [(0, 1), (9, 1), (10, 2), ("30", 4), (None, 1), (-10, 1)])
def test_calculate_current_page(start, page):
    assert calculate_current_page(start) == page
