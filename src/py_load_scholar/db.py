"""
Database adapter interface and implementations for storing articles.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

import psycopg2
import psycopg2.errors
import psycopg2.extras

from py_load_scholar.errors import DuplicateError, StorageConnectionError, StorageError
from py_load_scholar.models import ArticleRow, ArticleStatistics, StoredArticle, YearCount

ARTICLES_TABLE = "articles"

# Columns the pipeline writes; the rest are maintained by the database.
WRITABLE_COLUMNS = list(ArticleRow.model_fields.keys())

REQUIRED_COLUMNS = WRITABLE_COLUMNS + ["id", "created_at", "updated_at", "deleted_at"]


class DatabaseAdapter(ABC):
    """Abstract Base Class for database connectors."""

    @abstractmethod
    def connect(self):
        """Establish a connection to the database."""
        raise NotImplementedError

    @abstractmethod
    def validate_schema(self):
        """Validate that the target schema exists and is correctly configured."""
        raise NotImplementedError

    @abstractmethod
    def exists_by_external_id(self, google_scholar_id: str) -> bool:
        """True iff a non-deleted article with this external id is stored."""
        raise NotImplementedError

    @abstractmethod
    def insert_article(self, article: ArticleRow) -> int:
        """
        Insert a new article and return its assigned id.

        Raises:
            DuplicateError: If the external id already exists.
            StorageError: For any other storage failure.
        """
        raise NotImplementedError

    @abstractmethod
    def execute_sql(self, sql_statement: str):
        """Execute a raw SQL statement."""
        raise NotImplementedError


class PostgreSQLAdapter(DatabaseAdapter):
    """Database adapter for PostgreSQL."""

    def __init__(self, connection_params: dict):
        self.connection_params = connection_params
        self.conn = None

    def connect(self):
        """Establish a connection to the PostgreSQL database."""
        try:
            self.conn = psycopg2.connect(**self.connection_params)
        except psycopg2.OperationalError as e:
            raise StorageConnectionError(f"Could not connect to PostgreSQL: {e}") from e

    def _ensure_connection(self):
        if not self.conn:
            self.connect()

    def _fetch(self, sql: str, params: tuple = ()) -> List[dict]:
        """Runs a read query and returns its rows as dictionaries."""
        self._ensure_connection()
        try:
            with self.conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cursor:
                cursor.execute(sql, params)
                rows = cursor.fetchall()
            self.conn.commit()
        except psycopg2.Error as e:
            self.conn.rollback()
            raise StorageError(f"Query failed: {e}") from e
        return [dict(row) for row in rows]

    def ping(self) -> bool:
        """Returns True when the database answers a trivial query."""
        try:
            self._fetch("SELECT 1 AS ok;")
        except StorageError:
            return False
        return True

    def validate_schema(self):
        """
        Validates that the `articles` table exists with every column the
        application reads or writes.

        Raises:
            RuntimeError: If the table or one of its columns is missing.
        """
        rows = self._fetch(
            """
            SELECT column_name FROM information_schema.columns
            WHERE table_schema = current_schema() AND table_name = %s;
            """,
            (ARTICLES_TABLE,),
        )
        if not rows:
            raise RuntimeError(f"Table '{ARTICLES_TABLE}' does not exist")

        existing = {row["column_name"] for row in rows}
        for column in REQUIRED_COLUMNS:
            if column not in existing:
                raise RuntimeError(f"Column '{column}' does not exist in table '{ARTICLES_TABLE}'")

    def exists_by_external_id(self, google_scholar_id: str) -> bool:
        rows = self._fetch(
            """
            SELECT COUNT(*) AS count FROM articles
            WHERE google_scholar_id = %s AND deleted_at IS NULL;
            """,
            (google_scholar_id,),
        )
        return rows[0]["count"] > 0

    def insert_article(self, article: ArticleRow) -> int:
        """
        Inserts a single article row.

        The uniqueness constraint on `google_scholar_id` is the last line of
        dedupe: a caller's existence check can race with another insert, so
        a violation here is reported as DuplicateError rather than a failure.
        """
        self._ensure_connection()

        columns_str = ", ".join(WRITABLE_COLUMNS)
        placeholders = ", ".join(["%s"] * len(WRITABLE_COLUMNS))
        sql = f"INSERT INTO articles ({columns_str}) VALUES ({placeholders}) RETURNING id;"
        values = tuple(getattr(article, col) for col in WRITABLE_COLUMNS)

        try:
            with self.conn.cursor() as cursor:
                cursor.execute(sql, values)
                article_id = cursor.fetchone()[0]
            self.conn.commit()
        except psycopg2.errors.UniqueViolation as e:
            self.conn.rollback()
            raise DuplicateError(
                f"Article with google_scholar_id '{article.google_scholar_id}' already exists"
            ) from e
        except psycopg2.Error as e:
            self.conn.rollback()
            raise StorageError(f"Failed to insert article '{article.google_scholar_id}': {e}") from e
        return article_id

    def find_by_external_id(self, google_scholar_id: str) -> Optional[StoredArticle]:
        rows = self._fetch(
            "SELECT * FROM articles WHERE google_scholar_id = %s AND deleted_at IS NULL;",
            (google_scholar_id,),
        )
        return StoredArticle(**rows[0]) if rows else None

    def find_by_id(self, article_id: int) -> Optional[StoredArticle]:
        rows = self._fetch(
            "SELECT * FROM articles WHERE id = %s AND deleted_at IS NULL;",
            (article_id,),
        )
        return StoredArticle(**rows[0]) if rows else None

    def find_all(self, limit: int = 10, offset: int = 0) -> List[StoredArticle]:
        """Lists non-deleted articles, newest first."""
        rows = self._fetch(
            """
            SELECT * FROM articles
            WHERE deleted_at IS NULL
            ORDER BY created_at DESC, id DESC
            LIMIT %s OFFSET %s;
            """,
            (limit, offset),
        )
        return [StoredArticle(**row) for row in rows]

    def search_by_title(self, search_term: str, limit: int = 10, offset: int = 0) -> List[StoredArticle]:
        """Case-insensitive title search, most cited first."""
        rows = self._fetch(
            """
            SELECT * FROM articles
            WHERE paper_title ILIKE %s AND deleted_at IS NULL
            ORDER BY citation_count DESC, id ASC
            LIMIT %s OFFSET %s;
            """,
            (f"%{search_term}%", limit, offset),
        )
        return [StoredArticle(**row) for row in rows]

    def count(self) -> int:
        rows = self._fetch("SELECT COUNT(*) AS total FROM articles WHERE deleted_at IS NULL;")
        return rows[0]["total"]

    def get_statistics(self) -> ArticleStatistics:
        """Aggregates citation figures and the ten most recent publication years."""
        totals = self._fetch(
            """
            SELECT COUNT(*) AS total_articles,
                   COALESCE(SUM(citation_count), 0) AS total_citations,
                   COALESCE(AVG(citation_count), 0) AS average_citations
            FROM articles
            WHERE deleted_at IS NULL;
            """
        )[0]
        by_year = self._fetch(
            """
            SELECT publication_year, COUNT(*) AS count
            FROM articles
            WHERE publication_year IS NOT NULL AND deleted_at IS NULL
            GROUP BY publication_year
            ORDER BY publication_year DESC
            LIMIT 10;
            """
        )
        return ArticleStatistics(
            total_articles=totals["total_articles"],
            total_citations=int(totals["total_citations"]),
            average_citations=round(float(totals["average_citations"])),
            articles_by_year=[YearCount(**row) for row in by_year],
        )

    def execute_sql(self, sql_statement: str):
        """Executes a multi-statement SQL string."""
        self._ensure_connection()
        with self.conn.cursor() as cursor:
            cursor.execute(sql_statement)
        self.conn.commit()

    def close(self):
        """Closes the database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
