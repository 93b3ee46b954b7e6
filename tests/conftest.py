"""
Film Ledger — Test Configuration (conftest.py)
==============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_repository: AsyncMock with the LedgerRepository spec (no DB)
    ├── make_user:       UserRecord factory for mocked reads
    ├── engine:          aiosqlite engine on a temp file, schema created
    ├── repository:      SqlAlchemyLedgerRepository bound to `engine`
    └── seed:            inserts ORM rows and returns them with ids assigned
"""

import os

# Override settings for testing BEFORE any package imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests
os.environ["RECONCILE_TIMEOUT_SECONDS"] = "2"
os.environ["RECONCILE_CONCURRENCY"] = "4"

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from film_ledger.database import (
    build_engine,
    build_session_factory,
    create_schema,
    session_scope,
)
from film_ledger.repositories.base import LedgerRepository
from film_ledger.repositories.sqlalchemy_repository import SqlAlchemyLedgerRepository
from film_ledger.schemas.records import UserRecord


# ══════════════════════════════════════════════════════════════════════════
# Mocked storage
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_repository():
    """
    Provides a mock repository.

    What:    AsyncMock restricted to the LedgerRepository interface; every
             method is awaitable and records its calls.

    Usage:
        async def test_x(mock_repository, make_user):
            mock_repository.get_user.return_value = make_user(favor="action")
    """
    return AsyncMock(spec=LedgerRepository)


@pytest.fixture
def make_user():
    """Factory for UserRecord instances with sensible defaults."""

    def _make(**overrides):
        data = {
            "id": 5,
            "name": "critic",
            "favor": None,
            "movie_ids": None,
            "review_count": 0,
            "words_count": 0,
            "version": 0,
        }
        data.update(overrides)
        return UserRecord(**data)

    return _make


# ══════════════════════════════════════════════════════════════════════════
# Real storage (SQLite file per test)
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine(tmp_path):
    """
    Provides an async SQLite engine with every table created.

    A file (not :memory:) so each session gets its own connection to the
    same database.
    """
    eng = build_engine(url=f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    await create_schema(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def repository(session_factory):
    return SqlAlchemyLedgerRepository(session_factory)


@pytest.fixture
def seed(session_factory):
    """
    Inserts ORM objects in one transaction.

    Usage:
        user, review = await seed(User(name="a"), Review(user_id=1, title="t"))
    """

    async def _seed(*rows):
        async with session_scope(session_factory) as session:
            for row in rows:
                session.add(row)
                # Flush one by one so later rows can reference earlier ids
                await session.flush()
        return rows

    return _seed
