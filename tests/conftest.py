"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For standard test utilities, see tests/__init__.py
"""

import os
import pytest


@pytest.fixture
def session_factory(tmp_path):
    """Fresh SQLite database per test, with all tables created."""
    from tests import make_sqlite_session_factory

    factory = make_sqlite_session_factory(str(tmp_path / "quality.db"))
    yield factory
    factory.kw["bind"].dispose()


@pytest.fixture
def clock():
    from tests import FakeClock
    return FakeClock()


@pytest.fixture(scope="session")
def test_database():
    """
    Session-scoped PostgreSQL URL for `db` tests.

    Uses TEST_DATABASE_URL when set, otherwise starts a PostgreSQL container
    with testcontainers. Skips when neither is possible.
    """
    from tests import SKIP_DB_TESTS, is_database_available

    if SKIP_DB_TESTS:
        pytest.skip("SKIP_DB_TESTS is set")

    external_url = os.environ.get("TEST_DATABASE_URL")
    if external_url:
        if is_database_available(external_url):
            yield external_url
            return
        pytest.skip("External database not available")

    try:
        from testcontainers.postgres import PostgresContainer
    except ImportError:
        pytest.skip("testcontainers not installed")

    try:
        postgres = PostgresContainer(
            image="postgres:16",
            username="testuser",
            password="testpass",
            dbname="answerquality_test",
        )
        postgres.start()
    except Exception as e:
        pytest.skip(f"Could not start test database container: {e}")

    db_url = postgres.get_connection_url()
    print(f"\n✓ Test database started: {db_url}")

    yield db_url

    postgres.stop()
    print("\n✓ Test database stopped")


@pytest.fixture
def pg_session_factory(test_database):
    """Session factory on PostgreSQL with a clean schema per test."""
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker
    from database.models import Base

    engine = create_engine(test_database)
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(engine)
    engine.dispose()
