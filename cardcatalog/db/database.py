"""
Database engine and session management.

Provides async SQLAlchemy engine and session factory for FastAPI.
"""

import logging
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from cardcatalog.config import settings
from cardcatalog.models.db import Base
from cardcatalog.models.failure import ConflictError

logger = logging.getLogger(__name__)


def enable_sqlite_foreign_keys(async_engine: AsyncEngine) -> None:
    """
    Turn on FK enforcement for every new SQLite connection.

    SQLite ignores ON DELETE CASCADE unless the pragma is set per connection.
    No-op for other backends.
    """
    if async_engine.dialect.name != "sqlite":
        return

    @event.listens_for(async_engine.sync_engine, "connect")
    def _set_pragma(dbapi_connection: Any, _connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)
enable_sqlite_foreign_keys(engine)

# Session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a request-scoped database session.

    Commits when the handler returns, rolls back on storage errors.

    Usage in FastAPI:
        @app.get("/cards")
        async def list_cards(session: AsyncSession = Depends(get_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise


async def flush_or_conflict(session: AsyncSession, message: str) -> None:
    """
    Flush pending writes, translating uniqueness violations.

    The session is rolled back before ConflictError propagates, so the
    whole unit of work is abandoned.
    """
    try:
        await session.flush()
    except IntegrityError as e:
        await session.rollback()
        logger.warning("Constraint violation: %s (%s)", message, e.orig)
        raise ConflictError(message, detail=type(e.orig).__name__) from e


async def init_db() -> None:
    """
    Initialize database tables.

    Creates all tables defined in the ORM models.
    Should be called once at application startup.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db() -> None:
    """
    Drop all database tables.

    WARNING: Destroys all data. Use only for testing.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
