"""
Pydantic models for representing Google Scholar publication data.

These models correspond to the SerpAPI response items, the `articles`
table, and the summary produced by a pipeline run.
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class PublicationInfo(BaseModel):
    """Fields derived from the free-text `publication_info.summary`."""
    authors: Optional[str] = None
    journal: Optional[str] = None
    year: Optional[int] = None
    publisher: Optional[str] = None


class PublicationRecord(BaseModel):
    """
    A normalized publication parsed from one SerpAPI organic result.

    Text fields keep the raw source text; sanitization happens only when
    the record is prepared for the database.
    """
    external_id: Optional[str] = Field(None, description="Google Scholar result id. Primary dedupe key.")
    title: Optional[str] = None
    authors_text: Optional[str] = None
    publication_year: Optional[int] = Field(None, ge=1900, le=2099)
    journal: Optional[str] = None
    publisher: Optional[str] = None
    abstract: Optional[str] = None
    article_url: Optional[str] = None
    pdf_url: Optional[str] = None
    citation_count: int = Field(0, ge=0)
    cites_id: Optional[str] = Field(None, description="Id for a follow-up 'cited by' query.")
    cluster_id: Optional[str] = Field(None, description="Id for a follow-up 'all versions' query.")


class ArticleRow(BaseModel):
    """
    A sanitized, database-ready article.
    Corresponds to the writable columns of the 'articles' table.
    """
    google_scholar_id: str
    paper_title: str
    authors: Optional[str] = None
    publication_year: Optional[int] = None
    journal: Optional[str] = None
    article_url: Optional[str] = None
    abstract_text: Optional[str] = None
    citation_count: int = Field(0, ge=0)
    cites_id: Optional[str] = None
    pdf_url: Optional[str] = None
    cluster_id: Optional[str] = None
    publisher: Optional[str] = None


class StoredArticle(ArticleRow):
    """An article row read back from the database."""
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None


class YearCount(BaseModel):
    publication_year: int
    count: int


class ArticleStatistics(BaseModel):
    """Aggregate figures over all non-deleted articles."""
    total_articles: int = 0
    total_citations: int = 0
    average_citations: int = 0
    articles_by_year: List[YearCount] = Field(default_factory=list)


class SearchMetadata(BaseModel):
    """Search-level information from a SerpAPI response."""
    total_results: int = 0
    time_taken: float = 0
    query: Optional[str] = None
    current_page: int = 1
    has_next: bool = False


class SavedArticleRef(BaseModel):
    """Reference to an article saved while processing one author."""
    id: int
    google_scholar_id: str
    title: str
    citation_count: int = 0


class RunArticleRef(BaseModel):
    """Flat, run-level reference to a saved article."""
    article_id: int
    title: str
    author_searched: str


class AuthorSummary(BaseModel):
    """Per-author portion of a run's result."""
    author: str
    fetched: int = 0
    saved: int = 0
    already_exists: int = 0
    error: Optional[str] = None
    articles: List[SavedArticleRef] = Field(default_factory=list)


class RunSummary(BaseModel):
    """The ephemeral result of one pipeline run. Never persisted."""
    authors: List[AuthorSummary] = Field(default_factory=list)
    total_fetched: int = 0
    total_saved: int = 0
    total_already_exists: int = 0
    articles_saved: List[RunArticleRef] = Field(default_factory=list)

    def to_response(self) -> dict:
        """Renders the structured success payload returned to callers."""
        return {
            "success": True,
            "message": f"Processed {len(self.authors)} authors",
            "summary": {
                "total_fetched": self.total_fetched,
                "total_saved": self.total_saved,
                "total_already_exists": self.total_already_exists,
            },
            "authors": [a.model_dump(exclude_none=True) for a in self.authors],
            "articles_saved": [a.model_dump() for a in self.articles_saved],
        }
