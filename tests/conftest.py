"""
Pytest configuration and shared fixtures.
"""
import shutil
from pathlib import Path
from typing import Generator

import pytest

from py_load_scholar.config import settings
from py_load_scholar.db import PostgreSQLAdapter


SCHEMA_PATH = Path(__file__).parent.parent / "schemas" / "scholar_schema.sql"


def pytest_configure(config):
    """
    Register a custom marker for integration tests.
    """
    config.addinivalue_line(
        "markers", "integration: mark a test as an integration test"
    )


@pytest.fixture(scope="session")
def test_db_adapter(request) -> Generator[PostgreSQLAdapter, None, None]:
    """
    Creates a temporary database for the test session, and provides a
    connected adapter to it.
    """
    if shutil.which("pg_ctl") is None:
        pytest.skip("PostgreSQL binaries not available, skipping integration tests.")

    from pytest_postgresql.janitor import DatabaseJanitor

    postgresql_proc = request.getfixturevalue("postgresql_proc")

    # Use the DatabaseJanitor to create and drop a database for the session
    janitor = DatabaseJanitor(
        user=postgresql_proc.user,
        host=postgresql_proc.host,
        port=postgresql_proc.port,
        password=postgresql_proc.password,
        dbname="tests",
        version=postgresql_proc.version,
    )
    janitor.init()

    db_connection_info = {
        "host": postgresql_proc.host,
        "port": postgresql_proc.port,
        "user": postgresql_proc.user,
        "password": postgresql_proc.password,
        "dbname": "tests",
    }

    # Override the application's default settings
    settings.db_host = db_connection_info["host"]
    settings.db_port = db_connection_info["port"]
    settings.db_user = db_connection_info["user"]
    settings.db_password = db_connection_info["password"] or ""
    settings.db_name = db_connection_info["dbname"]

    adapter = PostgreSQLAdapter(connection_params=db_connection_info)
    adapter.connect()

    yield adapter

    adapter.close()
    janitor.drop()


@pytest.fixture(scope="function")
def db_with_schema(test_db_adapter: PostgreSQLAdapter):
    """
    Fixture to provide a database adapter with a clean, pre-loaded schema
    for each test function.
    """
    with test_db_adapter.conn.cursor() as cursor:
        cursor.execute("DROP SCHEMA public CASCADE;")
        cursor.execute("CREATE SCHEMA public;")
    test_db_adapter.conn.commit()

    with open(SCHEMA_PATH, "r", encoding="utf-8") as f:
        sql_script = f.read()
    test_db_adapter.execute_sql(sql_script)

    yield test_db_adapter


def make_organic_result(
    result_id="abc123",
    title="Population biology of plants",
    summary="JL Harper - Population biology of plants., 1977 - cabdirect.org",
    cited_by_total=42,
    resources=None,
):
    """Builds one SerpAPI organic result shaped like the live API's output."""
    result = {
        "position": 0,
        "title": title,
        "result_id": result_id,
        "link": f"https://example.org/{result_id}",
        "snippet": "An   abstract\nwith  messy whitespace. ",
        "publication_info": {"summary": summary},
        "inline_links": {
            "cited_by": {"total": cited_by_total, "cites_id": f"cites-{result_id}"},
            "versions": {"total": 3, "cluster_id": f"cluster-{result_id}"},
        },
    }
    if cited_by_total is None:
        del result["inline_links"]["cited_by"]
    if resources is not None:
        result["resources"] = resources
    return result


@pytest.fixture
def organic_result_factory():
    return make_organic_result
