"""Database Session Manager — async engine, per-unit-of-work sessions, readiness check.

Invariants:
    - A session that raises is rolled back before the error leaves session()
    - SQLAlchemy failures leave as PersistenceError; domain errors pass through untouched
    - Pooled engines use pool_pre_ping; SQLite (tests) gets the driver's default pool

Design Decisions:
    - Module-level db_manager set by the lifespan: REST handlers reach it through
      get_db, channel handlers through get_db_manager().session per inbound frame
    - expire_on_commit=False: enriched payloads are built from rows after commit
      without another round-trip
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine,
)

from socialhub.core.errors import PersistenceError

logger = logging.getLogger(__name__)

# Most specific first: IntegrityError and OperationalError are DBAPIErrors.
_FAILURE_KINDS: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "Integrity constraint violated", "commit"),
    (OperationalError, "Connection or operational error", "execute"),
    (DBAPIError, "Database driver error", "query"),
    (SQLAlchemyError, "Database operation failed", "unknown"),
)


def _engine_options(database_url: str, pool_size: int, max_overflow: int) -> dict:
    if database_url.startswith("sqlite"):
        return {}
    return {
        "pool_pre_ping": True,
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_recycle": 3600,
    }


def _as_persistence_error(exc: SQLAlchemyError) -> PersistenceError:
    for kind, message, operation in _FAILURE_KINDS:
        if isinstance(exc, kind):
            return PersistenceError(message, operation)
    return PersistenceError("Database operation failed", "unknown")


class DatabaseSessionManager:
    """Owns the engine and hands out rollback-safe sessions."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        self.engine: AsyncEngine = create_async_engine(
            database_url, **_engine_options(database_url, pool_size, max_overflow),
        )
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self._session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                error = _as_persistence_error(e)
                logger.error(
                    f"{type(e).__name__} during {error.operation}: {e}",
                    extra={"error_code": error.code},
                )
                raise error from e

    async def health_check(self) -> bool:
        """True when a trivial query round-trips."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
        except (PersistenceError, OSError) as e:
            logger.error(f"DB health check failed: {e}")
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


def get_db_manager() -> DatabaseSessionManager:
    if db_manager is None:
        raise RuntimeError("Database not initialized")
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    async with get_db_manager().session() as session:
        yield session
