"""Database configuration and session management.

Provides async SQLAlchemy engine and session factory.
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from catalog_api.infrastructure.config import settings


def build_engine(database_url: str, **kwargs: Any) -> AsyncEngine:
    """Create an async engine for the catalog database.

    SQLite has no row locks, so every SQLite transaction is opened with
    ``BEGIN IMMEDIATE``. That takes the database write lock up front and
    makes a read-then-write sequence exclusive against other connections.

    Args:
        database_url: SQLAlchemy async URL.
        **kwargs: Passed through to ``create_async_engine``.

    Returns:
        Configured async engine.
    """
    async_engine = create_async_engine(database_url, **kwargs)

    if async_engine.dialect.name == "sqlite":

        @event.listens_for(async_engine.sync_engine, "connect")
        def _disable_driver_begin(dbapi_connection, connection_record) -> None:
            # The driver would otherwise defer BEGIN until the first write
            dbapi_connection.isolation_level = None

        @event.listens_for(async_engine.sync_engine, "begin")
        def _begin_immediate(conn) -> None:
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    return async_engine


# Create async engine
engine = build_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)

# Session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

# Base class for models
Base = declarative_base()


async def init_models() -> None:
    """Create database tables if they don't exist."""
    # Register models on the metadata before create_all
    import catalog_api.catalog.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session.

    The session is committed when the request handler returns and rolled
    back if it raises.

    Yields:
        AsyncSession for database operations.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
