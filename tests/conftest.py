"""
Pytest fixtures shared by the DB tests.

Unit tests need none of this; see tests/__init__.py for how to run each group.
"""

import os
import pytest


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "db: marks tests as requiring database (deselect with '-m \"not db\"')"
    )


def _start_postgres_container():
    from testcontainers.postgres import PostgresContainer

    container = PostgresContainer(
        image="postgres:16-alpine",
        username="testuser",
        password="testpass",
        dbname="repomatch_test",
    )
    container.start()
    return container


@pytest.fixture(scope="session")
def test_database():
    """
    URL of an empty PostgreSQL database, shared by the whole session.

    TEST_DATABASE_URL wins when set; otherwise a container is started and
    stopped around the session. Each test class creates and drops the tables
    it needs.
    """
    if os.environ.get("TEST_DATABASE_URL"):
        from tests import check_db_available
        if not check_db_available():
            pytest.skip("External database not available")
        yield os.environ["TEST_DATABASE_URL"]
        return

    try:
        container = _start_postgres_container()
    except Exception as e:
        pytest.skip(f"Could not start test database container: {e}")

    try:
        yield container.get_connection_url()
    finally:
        container.stop()
