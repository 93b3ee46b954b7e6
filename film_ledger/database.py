"""
Film Ledger — Database Session Management
=========================================

What:  Async SQLAlchemy engine, session factory and transactional scope.
How:   build_engine() creates an async engine with connection pooling;
       session_scope() yields a session that commits on success and rolls
       back on error.
Who:   Used by SqlAlchemyLedgerRepository (one scope per repository call)
       and by create_core() / tests to assemble the engine.

Connection Pooling Strategy:
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for bursts (total max = 30)
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

    SQLite URLs (tests) skip the server pool arguments.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from film_ledger.config import Settings, settings as default_settings


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models share this metadata, which create_schema() uses to build
    the tables.
    """
    pass


# ── Engine Configuration ──────────────────────────────────────────────────
def build_engine(
    url: Optional[str] = None,
    config: Optional[Settings] = None,
) -> AsyncEngine:
    """
    Create the async engine that owns the connection pool.

    Args:
        url:    Overrides config.database_url (tests pass a SQLite file URL)
        config: Settings instance; defaults to the module singleton
    """
    config = config or default_settings
    url = url or config.database_url

    if url.startswith("sqlite"):
        return create_async_engine(url, echo=config.log_level == "DEBUG")

    return create_async_engine(
        url,
        pool_size=config.db_pool_size,
        max_overflow=config.db_max_overflow,
        pool_pre_ping=config.db_pool_pre_ping,
        pool_recycle=3600,
        # SQL echo is only useful while debugging
        echo=config.log_level == "DEBUG",
    )


# ── Session Factory ───────────────────────────────────────────────────────
def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Creates new AsyncSession instances bound to `engine`.

    expire_on_commit=False keeps loaded attributes readable after commit,
    which the repository relies on when it converts rows into records.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# ── Session Scope ─────────────────────────────────────────────────────────
@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    Provide a transactional session for one unit of work.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the caller (the caller performs queries)
        3. On success: commits the transaction
        4. On error: rolls back the transaction and re-raises
        5. Always: closes the session (returns connection to pool)

    Example usage:
        async with session_scope(factory) as session:
            user = await session.get(User, user_id)
    """
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except BaseException:
            # Rollback on anything, including cancellation by wait_for()
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def create_schema(engine: AsyncEngine) -> None:
    """
    What:  Creates every table declared on Base.metadata that is missing.
    When:  Tests and local bootstrap; production schemas are managed outside
           this package.
    """
    # Model modules register their tables on import
    import film_ledger.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine(engine: AsyncEngine) -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called by LedgerCore.aclose() during shutdown.
    """
    await engine.dispose()
