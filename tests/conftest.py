"""
Pytest configuration and fixtures for Insert Batcher tests.
"""
import logging
import os

import pytest


# Define test markers
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "core: tests that don't require database connections"
    )
    config.addinivalue_line(
        "markers", "db: tests that require actual database connections"
    )
    config.addinivalue_line(
        "markers", "postgres: tests that require PostgreSQL database connections"
    )


def has_postgres_connection():
    """Check if PostgreSQL connection is available."""
    required_vars = ["PGHOST", "PGPORT", "PGUSER", "PGDATABASE"]
    for var in required_vars:
        if not os.environ.get(var):
            return False

    try:
        import psycopg2
        conn = psycopg2.connect(
            host=os.environ["PGHOST"],
            port=os.environ["PGPORT"],
            user=os.environ["PGUSER"],
            dbname=os.environ["PGDATABASE"],
            password=os.environ.get("PGPASSWORD", ""),
            connect_timeout=5,
        )
        conn.close()
        return True
    except Exception:
        return False


def pytest_collection_modifyitems(config, items):
    """Skip PostgreSQL tests when no server is reachable."""
    if not any("postgres" in item.keywords for item in items):
        return
    if has_postgres_connection():
        return
    skip_postgres = pytest.mark.skip(reason="PostgreSQL connection not available")
    for item in items:
        if "postgres" in item.keywords:
            item.add_marker(skip_postgres)


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers the CLI installs so later tests don't log to closed streams."""
    yield
    logging.getLogger("insert_batcher").handlers.clear()
