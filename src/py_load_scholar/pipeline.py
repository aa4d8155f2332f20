"""
The fetch -> parse -> filter -> dedupe -> save pipeline for a triple of authors.
"""
from __future__ import annotations

import threading
from typing import Callable, Iterable, List, Optional

from pydantic import ValidationError as ModelValidationError

from py_load_scholar.acquisition import SearchClient
from py_load_scholar.config import settings
from py_load_scholar.db import DatabaseAdapter
from py_load_scholar.errors import DuplicateError, StorageError, ValidationError
from py_load_scholar.models import (
    AuthorSummary,
    PublicationRecord,
    RunArticleRef,
    RunSummary,
    SavedArticleRef,
)
from py_load_scholar.parser import (
    extract_metadata,
    filter_valid_publications,
    parse_organic_results,
    prepare_for_database,
)
from py_load_scholar.utils import get_logger

logger = get_logger(__name__)

AUTHORS_PER_RUN = 3
NO_RESULTS_ERROR = "No articles found"


def parse_author_list(raw: Optional[str]) -> List[str]:
    """Splits a comma-separated string into trimmed, non-empty author names."""
    if not raw:
        return []
    return [name.strip() for name in raw.split(",") if name.strip()]


class AuthorArticlePipeline:
    """
    Fetches each author's first page of Google Scholar results and saves up
    to `max_saves_per_author` articles that are not yet stored.

    All collaborators are passed in explicitly so that a run never depends
    on module-level state.
    """

    def __init__(
        self,
        search_client: SearchClient,
        adapter: DatabaseAdapter,
        parse_results: Callable[[object], List[PublicationRecord]] = parse_organic_results,
        max_saves_per_author: Optional[int] = None,
        author_delay: Optional[float] = None,
        wake_event: Optional[threading.Event] = None,
    ):
        self.search_client = search_client
        self.adapter = adapter
        self.parse_results = parse_results
        self.max_saves_per_author = (
            max_saves_per_author if max_saves_per_author is not None else settings.max_saves_per_author
        )
        self.author_delay = author_delay if author_delay is not None else settings.author_delay_seconds
        # Setting the event from another thread ends the current inter-author
        # pause early. It never aborts a run.
        self.wake_event = wake_event or threading.Event()

    def run(self, author_names: Iterable[str]) -> RunSummary:
        """
        Processes exactly three authors, strictly one after another.

        Raises:
            ValidationError: If the input does not hold exactly three
                non-empty names. Nothing is fetched or stored in that case.
        """
        names = [name.strip() for name in author_names if name and name.strip()]
        if len(names) != AUTHORS_PER_RUN:
            raise ValidationError(
                f"Exactly {AUTHORS_PER_RUN} author names are required, separated by commas"
            )

        self.wake_event.clear()
        logger.info(f"Fetching articles for authors: {', '.join(names)}")
        summary = RunSummary()

        for index, author_name in enumerate(names):
            author_summary = AuthorSummary(author=author_name)
            try:
                self._process_author(author_name, author_summary, summary)
            except Exception as e:
                logger.error(f"Error processing {author_name}: {e}", exc_info=True)
                author_summary.error = str(e) or e.__class__.__name__
            summary.authors.append(author_summary)

            if index < len(names) - 1:
                self._pause()

        logger.info(
            f"Run complete: fetched={summary.total_fetched} saved={summary.total_saved} "
            f"already_exists={summary.total_already_exists}"
        )
        return summary

    def _pause(self):
        if self.author_delay > 0:
            self.wake_event.wait(self.author_delay)

    def _process_author(self, author_name: str, author_summary: AuthorSummary, summary: RunSummary):
        logger.info(f"Searching for: {author_name}")
        search_data = self.search_client.search_by_author(author_name, 0)

        organic_results = search_data.get("organic_results") if isinstance(search_data, dict) else None
        if not organic_results:
            logger.warning(f"No results found for {author_name}")
            author_summary.error = NO_RESULTS_ERROR
            return

        metadata = extract_metadata(search_data)
        logger.info(
            f"Google Scholar reports {metadata.total_results} results for {author_name}; "
            f"using page {metadata.current_page} ({len(organic_results)} items)"
        )

        valid_articles = filter_valid_publications(self.parse_results(organic_results))
        author_summary.fetched = len(valid_articles)
        summary.total_fetched += len(valid_articles)

        for article in valid_articles:
            if author_summary.saved >= self.max_saves_per_author:
                break

            if self.adapter.exists_by_external_id(article.external_id):
                logger.warning(f"Article already exists: {article.title}")
                self._count_existing(author_summary, summary)
                continue

            try:
                row = prepare_for_database(article)
            except ModelValidationError as e:
                logger.error(f"Skipping article {article.external_id}: {e}")
                continue

            try:
                article_id = self.adapter.insert_article(row)
            except DuplicateError:
                logger.warning(f"Article already exists: {row.paper_title}")
                self._count_existing(author_summary, summary)
                continue
            except StorageError as e:
                logger.error(f"Error saving article: {e}")
                continue

            logger.info(f"Saved article: {row.paper_title}")
            author_summary.saved += 1
            summary.total_saved += 1
            author_summary.articles.append(
                SavedArticleRef(
                    id=article_id,
                    google_scholar_id=row.google_scholar_id,
                    title=row.paper_title,
                    citation_count=row.citation_count,
                )
            )
            summary.articles_saved.append(
                RunArticleRef(article_id=article_id, title=row.paper_title, author_searched=author_name)
            )

    @staticmethod
    def _count_existing(author_summary: AuthorSummary, summary: RunSummary):
        author_summary.already_exists += 1
        summary.total_already_exists += 1
