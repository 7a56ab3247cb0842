"""
Shared fixtures for integration tests.

Provides a PostgreSQL connection pool with migrations applied and clean
tables per test. Database tests are skipped when PostgreSQL is unreachable.
"""

from collections.abc import Generator

import pytest
from psycopg_pool import ConnectionPool

from tests.database import clean_tables, open_test_pool


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for integration tests."""
    pool = open_test_pool()
    yield pool
    pool.close()


@pytest.fixture
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Clean registrations and events before each test."""
    clean_tables(pool)
    yield
