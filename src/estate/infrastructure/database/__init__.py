"""
Database Infrastructure
=======================

Manages database connections, session lifecycle, and engine configuration.

Uses SQLAlchemy 2.0 async sessions. The engine is owned by the lazy
connection factory and only comes into existence when a request first
needs a session.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from estate.infrastructure.database.base import Base
from estate.infrastructure.database.factory import (
    ConnectionHandle,
    LazyConnectionFactory,
    acquire_connection,
    build_engine,
    get_connection_factory,
    normalize_database_url,
    redact_database_url,
    reset_connection_factory,
    set_connection_factory,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Async generator for database sessions.

    For use with FastAPI's Depends() - FastAPI handles the lifecycle.

    Usage in FastAPI:
        @router.get("/listings")
        @force_dynamic
        async def list_listings(session: AsyncSession = Depends(get_session)):
            result = await session.execute(select(ListingModel))
            return result.scalars().all()

    Yields:
        AsyncSession: SQLAlchemy async session

    Raises:
        MissingConfigurationException: DATABASE_URL is not set
        DatabaseConnectionException: The datastore is unreachable
    """
    handle = await acquire_connection()

    async with handle.session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def get_session_context() -> AsyncGenerator[AsyncSession, None]:
    """
    Context manager for database sessions outside of request handling.

    Usage:
        async with get_session_context() as session:
            ...
    """
    handle = await acquire_connection()

    async with handle.session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_tables() -> None:
    """
    Create all database tables.

    This should only be used for development/testing.
    Production should use migrations (Alembic).
    """
    handle = await acquire_connection()
    async with handle.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_database() -> None:
    """
    Dispose of the cached connection, if one was ever made.

    Should be called during application shutdown.
    """
    await get_connection_factory().close()


__all__ = [
    "Base",
    "ConnectionHandle",
    "LazyConnectionFactory",
    "acquire_connection",
    "build_engine",
    "close_database",
    "create_tables",
    "get_connection_factory",
    "get_session",
    "get_session_context",
    "normalize_database_url",
    "redact_database_url",
    "reset_connection_factory",
    "set_connection_factory",
]
