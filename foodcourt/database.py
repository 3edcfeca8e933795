"""
Database Connection Module
Handles the PostgreSQL connection using the SQLAlchemy async engine and
tracks whether the store is reachable.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from foodcourt.core.config import Settings

logger = logging.getLogger(__name__)


# Base class for all our models
class Base(DeclarativeBase):
    pass


class StoreError(Exception):
    """A data store operation failed."""

    def __init__(self, message: str, *, connection_lost: bool = False):
        super().__init__(message)
        self.message = message
        self.connection_lost = connection_lost


class StoreUnavailableError(StoreError):
    """The store is disconnected and no fallback is allowed."""


def is_connection_error(exc: BaseException) -> bool:
    """True when the error means the connection itself is gone."""
    if isinstance(exc, (OperationalError, InterfaceError)):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


def _engine_kwargs(settings: Settings) -> dict:
    url = settings.sqlalchemy_url
    kwargs: dict = {"echo": settings.db_echo, "pool_pre_ping": True}
    if url.startswith("postgresql"):
        kwargs.update(
            pool_size=5,
            max_overflow=10,
            connect_args={"connect_timeout": settings.db_connect_timeout},
        )
    return kwargs


class DataStore:
    """
    Wraps the async engine and exposes the connectivity state.

    The state is latched by ``connect()`` at startup and afterwards kept
    current by ``check()`` (called from the monitor loop) and by
    ``mark_disconnected()`` when a request hits a connection error.
    """

    def __init__(self, settings: Settings, engine: Optional[AsyncEngine] = None):
        self.settings = settings
        self.engine = engine or create_async_engine(settings.sqlalchemy_url, **_engine_kwargs(settings))
        self._session_maker = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self._connected = False
        self.last_error: Optional[str] = None

    @property
    def connected(self) -> bool:
        return self._connected

    async def _ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def connect(self) -> bool:
        """Probe the store once; never raises."""
        try:
            await asyncio.wait_for(self._ping(), timeout=self.settings.db_connect_timeout)
        except Exception as e:
            self._connected = False
            self.last_error = str(e) or type(e).__name__
            logger.error(f"❌ Database connection failed: {self.last_error}")
            if self.settings.fallback_enabled:
                logger.warning("⚠️ Running in mock mode without database")
            return False

        self._connected = True
        self.last_error = None
        logger.info("✅ Connected to database")
        return True

    async def check(self) -> bool:
        """Re-evaluate connectivity, logging only on state changes."""
        was_connected = self._connected
        try:
            await asyncio.wait_for(self._ping(), timeout=self.settings.db_connect_timeout)
        except Exception as e:
            self._connected = False
            self.last_error = str(e) or type(e).__name__
            if was_connected:
                logger.error(f"❌ Database connection lost: {self.last_error}")
            return False

        self._connected = True
        self.last_error = None
        if not was_connected:
            logger.info("✅ Database connection restored")
            await self.init_schema()
        return True

    def mark_disconnected(self, reason: str) -> None:
        if self._connected:
            logger.error(f"❌ Database marked disconnected: {reason}")
        self._connected = False
        self.last_error = reason

    async def run_monitor(self, interval: float) -> None:
        """Poll connectivity forever; cancelled on shutdown."""
        while True:
            await asyncio.sleep(interval)
            await self.check()

    async def init_schema(self) -> None:
        """
        Create all tables in the database.
        Called at startup and whenever the connection comes back.
        """
        # Registers the tables on Base.metadata
        from foodcourt import models  # noqa: F401

        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            logger.error(f"Failed to create tables: {e}")
            return
        logger.info("✅ Database tables ready")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Yield a database session and ensure cleanup.
        SQLAlchemy errors are converted to StoreError.
        """
        async with self._session_maker() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                lost = is_connection_error(e)
                if lost:
                    self.mark_disconnected(str(e))
                raise StoreError(str(e), connection_lost=lost) from e

    async def dispose(self) -> None:
        await self.engine.dispose()
