"""
Database configuration and session management.

Provides SQLAlchemy async engine setup, session factory, and dependency
injection for database sessions in FastAPI routes.
"""

from pathlib import Path
from typing import AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    AsyncEngine,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.pool import StaticPool

from skillz.core.config import settings
from skillz.core.logging_config import get_logger
from skillz.models.base import Base


logger = get_logger(__name__)


def get_async_engine() -> AsyncEngine:
    """
    Create and configure the async SQLAlchemy engine.

    For SQLite:
    - Uses StaticPool (single file or in-memory database)
    - Enables check_same_thread=False for async compatibility
    - Turns on foreign key enforcement for every connection

    Returns:
        Configured AsyncEngine instance
    """
    engine_kwargs: dict = {"echo": False}

    if settings.is_sqlite:
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        engine_kwargs["poolclass"] = StaticPool

    engine = create_async_engine(settings.database_url, **engine_kwargs)

    # SQLite ignores ON DELETE clauses unless foreign keys are enabled.
    if settings.is_sqlite:
        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ANN001
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


# Global async engine instance
engine = get_async_engine()


# Async session factory
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,  # Don't expire objects after commit
    autoflush=False,
)


def _ensure_sqlite_directory() -> None:
    """Create the parent directory of a file-backed SQLite database."""
    database = make_url(settings.database_url).database
    if database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)


async def init_db() -> None:
    """
    Initialize the database.

    Creates missing tables when DATABASE_CREATE_ALL is enabled.
    """
    # Import models to ensure metadata is populated before create_all()
    from skillz import models  # noqa: F401

    if settings.is_sqlite:
        _ensure_sqlite_directory()

    async with engine.begin() as conn:
        if settings.database_create_all:
            await conn.run_sync(Base.metadata.create_all)
        await conn.execute(text("SELECT 1"))

    logger.info(
        "Database initialized",
        extra={"create_all": settings.database_create_all},
    )


async def close_db() -> None:
    """
    Close the database connection.

    Should be called at application shutdown.
    """
    await engine.dispose()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function to get database session.

    Commits when the request handler succeeds and rolls back on any
    exception.

    Yields:
        AsyncSession instance for database operations
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
