"""
Lazy Connection Factory
=======================

Acquires the datastore engine on first use instead of at import time.

The hosting platform imports and inspects the application during its build
phase, when ``DATABASE_URL`` is deliberately absent. Reading configuration or
opening a connection as a side effect of import would break that phase, so
all of it happens inside ``acquire()``:

1. Return the cached handle when one is present and valid.
2. Otherwise read ``DATABASE_URL`` (fail with MissingConfigurationException).
3. Build the engine and verify it with ``SELECT 1`` under a timeout
   (fail with DatabaseConnectionException).
4. Publish the handle and return it.

Steps 2-4 run as one shared task, so concurrent first callers wait on the
same attempt and see the same handle or the same error within one timeout.
"""

import asyncio
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from pydantic import ValidationError

from estate.config import Settings, get_settings, invalid_configuration
from estate.core.exceptions import DatabaseConnectionException
from estate.infrastructure.database.base import Base
from estate.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

SettingsProvider = Callable[[], Settings]
EngineBuilder = Callable[[str, Settings], AsyncEngine]


@dataclass
class ConnectionHandle:
    """A verified engine plus the session factory bound to it."""

    engine: AsyncEngine
    session_maker: async_sessionmaker[AsyncSession]
    created_at: datetime
    connect_timeout: float
    valid: bool = True


def normalize_database_url(database_url: str) -> str:
    """Map plain Postgres URLs onto the asyncpg driver."""
    for prefix in ("postgres://", "postgresql://"):
        if database_url.startswith(prefix):
            database_url = "postgresql+asyncpg://" + database_url[len(prefix):]
            break
    if database_url.startswith("postgresql+asyncpg://"):
        # asyncpg spells it ssl, libpq spells it sslmode
        database_url = database_url.replace("sslmode=", "ssl=")
    return database_url


def redact_database_url(database_url: str) -> str:
    """Render a URL for logs with the password hidden."""
    try:
        return make_url(database_url).render_as_string(hide_password=True)
    except Exception:
        return "<unparseable database url>"


def _consume_result(task: "asyncio.Task[ConnectionHandle]") -> None:
    # Every waiter may have gone away; keep asyncio from logging the error
    if not task.cancelled():
        task.exception()


def build_engine(database_url: str, settings: Settings) -> AsyncEngine:
    """Create the async engine. Does not connect."""
    url = make_url(normalize_database_url(database_url))

    options = {
        "echo": settings.debug,
        "pool_pre_ping": True,  # Verify connections before using
    }
    if url.get_backend_name() != "sqlite":
        options["pool_size"] = settings.db_pool_size
        options["max_overflow"] = settings.db_max_overflow

    return create_async_engine(url, **options)


class LazyConnectionFactory:
    """
    Process-wide owner of the datastore connection.

    Construction is free of side effects: no settings are read and no
    engine is built until ``acquire()`` is awaited.
    """

    def __init__(
        self,
        settings_provider: Optional[SettingsProvider] = None,
        engine_builder: Optional[EngineBuilder] = None,
    ):
        self._settings_provider = settings_provider or get_settings
        self._engine_builder = engine_builder or build_engine
        self._handle: Optional[ConnectionHandle] = None
        self._connecting: Optional["asyncio.Task[ConnectionHandle]"] = None
        self.connect_count = 0

    @property
    def handle(self) -> Optional[ConnectionHandle]:
        """The cached handle, if any. Never connects."""
        return self._handle

    @property
    def is_connected(self) -> bool:
        return self._handle is not None and self._handle.valid

    async def acquire(self) -> ConnectionHandle:
        """
        Return a ready-to-use connection handle.

        Returns:
            ConnectionHandle: Cached or newly established handle

        Raises:
            MissingConfigurationException: DATABASE_URL is unbound or empty
            InvalidConfigurationException: A bound setting fails validation
            DatabaseConnectionException: The datastore could not be reached in time
        """
        handle = self._handle
        if handle is not None and handle.valid:
            return handle

        # No await between the check and the assignment, so only one task starts
        task = self._connecting
        if task is None:
            task = asyncio.ensure_future(self._connect_and_publish())
            task.add_done_callback(_consume_result)
            self._connecting = task

        # A cancelled caller must not cancel the attempt the others wait on
        return await asyncio.shield(task)

    async def _connect_and_publish(self) -> ConnectionHandle:
        try:
            handle = await self._connect()
            self._handle = handle
            return handle
        finally:
            self._connecting = None

    async def _connect(self) -> ConnectionHandle:
        try:
            settings = self._settings_provider()
        except ValidationError as e:
            raise invalid_configuration(e) from e
        database_url = settings.require("database_url")
        timeout = settings.db_connect_timeout_seconds

        try:
            engine = self._engine_builder(database_url, settings)
        except Exception as e:
            raise DatabaseConnectionException(
                f"Could not create engine: {e}",
                {"database": redact_database_url(database_url)}
            ) from e

        start = time.perf_counter()
        try:
            await asyncio.wait_for(
                self._verify(engine, create_tables=settings.db_create_tables),
                timeout=timeout
            )
        except asyncio.TimeoutError as e:
            await engine.dispose()
            raise DatabaseConnectionException(
                f"Connection not established within {timeout}s",
                {"database": redact_database_url(database_url), "timeout_seconds": timeout}
            ) from e
        except Exception as e:
            await engine.dispose()
            raise DatabaseConnectionException(
                f"Connection failed: {e}",
                {"database": redact_database_url(database_url)}
            ) from e

        self.connect_count += 1
        logger.info(
            "Database connection established",
            extra={
                "database": redact_database_url(database_url),
                "connect_ms": round((time.perf_counter() - start) * 1000, 2),
            }
        )

        return ConnectionHandle(
            engine=engine,
            session_maker=async_sessionmaker(
                bind=engine,
                class_=AsyncSession,
                expire_on_commit=False,  # Prevent lazy loading after commit
                autoflush=False,
            ),
            created_at=datetime.now(timezone.utc),
            connect_timeout=timeout,
        )

    @staticmethod
    async def _verify(engine: AsyncEngine, create_tables: bool = False) -> None:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            if create_tables:
                await conn.run_sync(Base.metadata.create_all)

    async def health_check(self) -> bool:
        """
        Ping the cached handle.

        Returns False without connecting when nothing is cached. A failed
        ping invalidates the handle so the next ``acquire()`` reconnects.
        """
        handle = self._handle
        if handle is None or not handle.valid:
            return False

        try:
            await asyncio.wait_for(self._verify(handle.engine), timeout=handle.connect_timeout)
        except Exception as e:
            logger.warning(
                "Database health check failed, dropping cached connection",
                extra={"error": str(e)}
            )
            await self.invalidate(handle)
            return False
        return True

    async def invalidate(self, expected: Optional[ConnectionHandle] = None) -> None:
        """
        Drop and dispose the cached handle.

        With ``expected`` given, only that handle is dropped. A newer handle
        published in the meantime stays cached.
        """
        handle = self._handle
        if expected is not None and handle is not expected:
            return
        self._handle = None

        if handle is not None:
            handle.valid = False
            await handle.engine.dispose()
            logger.info("Database connection disposed")

    async def close(self) -> None:
        await self.invalidate()


# Explicitly owned singleton, created on first use
_factory: Optional[LazyConnectionFactory] = None
_factory_lock = threading.Lock()


def get_connection_factory() -> LazyConnectionFactory:
    """Get (creating if needed) the process-wide connection factory."""
    global _factory
    if _factory is None:
        with _factory_lock:
            if _factory is None:
                _factory = LazyConnectionFactory()
    return _factory


def set_connection_factory(factory: Optional[LazyConnectionFactory]) -> None:
    """Substitute the process-wide factory (tests, alternative backends)."""
    global _factory
    with _factory_lock:
        _factory = factory


def reset_connection_factory() -> None:
    """Forget the process-wide factory. Does not dispose its engine."""
    set_connection_factory(None)


async def acquire_connection() -> ConnectionHandle:
    """Acquire the datastore connection through the process-wide factory."""
    return await get_connection_factory().acquire()
