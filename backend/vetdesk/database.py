"""
VetDesk Backend — Database Session Management
===============================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
Why:   Centralizes all database connection logic in one place.
How:   Creates an async engine with connection pooling, provides a session
       dependency that commits on success and rolls back on error.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Engine is created at module import; sessions are created per-request.

Transaction boundary:
    One request is one transaction. Services only flush; the dependency
    below commits once after the handler returns. A visit created together
    with its treatments and notes is therefore persisted atomically, and any
    exception raised mid-way discards every row written by the request.
"""

from typing import Any, AsyncGenerator, Awaitable, Callable, Dict

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from vetdesk.config import settings


def _engine_options(url: str) -> Dict[str, Any]:
    """Pool options for server databases; SQLite picks its own pool."""
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: attributes stay readable after the request commits
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic reads for migrations
    and the test suite uses to create the schema.
    """
    pass


# ── After-Commit Callbacks ────────────────────────────────────────────────
_AFTER_COMMIT = "after_commit_callbacks"


def run_after_commit(session: AsyncSession, callback: Callable[[], Awaitable[Any]]) -> None:
    """
    Queues `callback` to run once the request transaction has committed.

    Used for side effects that cannot be rolled back, such as deleting a
    replaced object from storage. Dropped if the transaction rolls back.
    """
    session.info.setdefault(_AFTER_COMMIT, []).append(callback)


async def run_after_commit_callbacks(session: AsyncSession) -> None:
    for callback in session.info.pop(_AFTER_COMMIT, []):
        await callback()


def discard_after_commit_callbacks(session: AsyncSession) -> None:
    session.info.pop(_AFTER_COMMIT, None)


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction, then runs after-commit callbacks
        4. On error: rolls back the transaction and re-raises
        5. Always: closes the session (returns connection to pool)
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            discard_after_commit_callbacks(session)
            await session.rollback()
            raise
        else:
            await run_after_commit_callbacks(session)
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """Closes all pooled connections. Called during application shutdown."""
    await engine.dispose()
