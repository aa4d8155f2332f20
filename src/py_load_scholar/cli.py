"""
Command-line interface for py-load-scholar.
"""
from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer

from py_load_scholar.config import settings
from py_load_scholar.errors import ValidationError, error_response
from py_load_scholar.pipeline import AuthorArticlePipeline, parse_author_list
from py_load_scholar.utils import get_db_adapter, get_logger, get_search_client


logger = get_logger(__name__)

app = typer.Typer(
    help="A daily pipeline that saves new Google Scholar articles for a triple of authors."
)


def _echo_json(payload: dict):
    typer.echo(json.dumps(payload, indent=2, default=str))


@app.command()
def initialize(
    db_schema_file: Path = typer.Option(
        "schemas/scholar_schema.sql",
        "--schema",
        "-s",
        help="Path to the SQL file containing the database schema.",
        dir_okay=False,
    )
):
    """
    Initialize the database schema by executing an SQL script.
    """
    logger.info("--- Initializing Database Schema ---")
    adapter = None
    try:
        adapter = get_db_adapter()
        logger.info(f"Connecting to PostgreSQL at {adapter.connection_params['host']}...")

        logger.info(f"Reading schema from '{db_schema_file}'...")
        with open(db_schema_file, "r", encoding="utf-8") as f:
            sql_script = f.read()

        adapter.execute_sql(sql_script)

        logger.info("Database schema initialized successfully.")

    except FileNotFoundError:
        logger.error(f"Error: Schema file not found at '{db_schema_file}'")
        raise typer.Exit(code=1)
    except Exception as e:
        logger.error(f"An error occurred during database initialization: {e}", exc_info=True)
        raise typer.Exit(code=1)
    finally:
        if adapter:
            adapter.close()


@app.command()
def fetch_articles(
    authors: str = typer.Option(
        ...,
        "--authors",
        "-a",
        help="Comma-separated list of exactly 3 author names.",
    ),
):
    """
    Fetch and save up to 3 new articles for each of 3 authors.
    """
    author_list = parse_author_list(authors)
    adapter = None
    try:
        adapter = get_db_adapter()
        pipeline = AuthorArticlePipeline(get_search_client(), adapter)
        summary = pipeline.run(author_list)
    except ValidationError as e:
        logger.error(str(e))
        _echo_json(error_response(e))
        raise typer.Exit(code=2)
    except Exception as e:
        logger.critical("A critical error occurred during fetch-articles", exc_info=True)
        _echo_json(error_response(e))
        raise typer.Exit(code=1)
    finally:
        if adapter:
            adapter.close()

    _echo_json(summary.to_response())


@app.command()
def health():
    """
    Report database reachability and whether the SerpAPI key is configured.
    """
    adapter = get_db_adapter()
    try:
        connected = adapter.ping()
    finally:
        adapter.close()

    payload = {
        "success": connected,
        "status": "OK" if connected else "ERROR",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "connected" if connected else "disconnected",
        "serpApiKey": "configured" if settings.serpapi_api_key else "missing",
    }
    _echo_json(payload)
    if not connected:
        raise typer.Exit(code=1)


@app.command()
def stats():
    """
    Print aggregate statistics over the stored articles.
    """
    adapter = get_db_adapter()
    try:
        statistics = adapter.get_statistics()
    except Exception as e:
        logger.error(f"Could not compute statistics: {e}")
        _echo_json(error_response(e))
        raise typer.Exit(code=1)
    finally:
        adapter.close()

    _echo_json({"success": True, "statistics": statistics.model_dump()})


@app.command()
def list_articles(
    limit: int = typer.Option(10, "--limit", min=1, help="Number of articles to return."),
    offset: int = typer.Option(0, "--offset", min=0, help="Number of articles to skip."),
    title: Optional[str] = typer.Option(None, "--title", help="Only articles whose title contains this text."),
):
    """
    List stored articles, newest first, or search them by title.
    """
    adapter = get_db_adapter()
    try:
        if title:
            articles = adapter.search_by_title(title, limit=limit, offset=offset)
        else:
            articles = adapter.find_all(limit=limit, offset=offset)
        total = adapter.count()
    except Exception as e:
        logger.error(f"Could not list articles: {e}")
        _echo_json(error_response(e))
        raise typer.Exit(code=1)
    finally:
        adapter.close()

    _echo_json(
        {
            "success": True,
            "total": total,
            "articles": [article.model_dump(mode="json") for article in articles],
        }
    )


if __name__ == "__main__":
    app()
