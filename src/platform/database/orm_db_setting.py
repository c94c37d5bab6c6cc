"""
SQLAlchemy async engine and session management with Read-Write Separation

This module provides:
1. AsyncEngineManager: Manages separate read/write engines with event loop awareness
2. Base declarative model and table creation for local development
3. Database class (session factory used by repositories through DI)

Read-Write Separation:
- Write operations (capacity ledger, registration writes): always use primary database
- Read operations (listings, rolls, dashboard): use read replica if configured

Configuration:
- DATABASE_URL: Optional SQLAlchemy async URL overriding the POSTGRES_* fields
- POSTGRES_REPLICA_SERVER / POSTGRES_REPLICA_PORT: Optional read replica
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger


# =============================================================================
# Event-loop-aware Engine Manager
# =============================================================================


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.close()


class AsyncEngineManager:
    """
    Manages SQLAlchemy async engines with event loop awareness.

    Supports read-write separation:
    - Write engine: connects to primary database
    - Read engine: connects to read replica (falls back to primary if not configured)

    Ensures engines are always bound to the current event loop to prevent
    "Task got Future attached to a different loop" errors.
    """

    def __init__(self) -> None:
        self._write_engine: Optional[AsyncEngine] = None
        self._read_engine: Optional[AsyncEngine] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._write_session_maker: Optional[async_sessionmaker[AsyncSession]] = None
        self._read_session_maker: Optional[async_sessionmaker[AsyncSession]] = None

    def get_engine(self, *, read_only: bool = False) -> AsyncEngine:
        """
        Get engine for current event loop, creating new one if needed

        Args:
            read_only: If True, return read engine (replica), otherwise write engine (primary)
        """
        try:
            current_loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop running, create engine without loop tracking
            if read_only:
                if self._read_engine is None:
                    self._read_engine = self._create_engine(read_only=True)
                return self._read_engine
            if self._write_engine is None:
                self._write_engine = self._create_engine(read_only=False)
            return self._write_engine

        if self._loop is not current_loop:
            if self._write_engine is not None or self._read_engine is not None:
                Logger.base.warning('🔄 [DB] Event loop changed, disposing old engines...')
                self.reset()

            Logger.base.info(f'🔗 [DB] Creating engines for event loop {id(current_loop)}')
            self._write_engine = self._create_engine(read_only=False)
            self._read_engine = self._create_engine(read_only=True)
            self._loop = current_loop

        engine = self._read_engine if read_only else self._write_engine
        assert engine is not None
        return engine

    def get_session_maker(self, *, read_only: bool = False) -> async_sessionmaker[AsyncSession]:
        engine = self.get_engine(read_only=read_only)

        if read_only:
            if self._read_session_maker is None:
                self._read_session_maker = async_sessionmaker(
                    engine, class_=AsyncSession, expire_on_commit=False
                )
            return self._read_session_maker

        if self._write_session_maker is None:
            self._write_session_maker = async_sessionmaker(
                engine, class_=AsyncSession, expire_on_commit=False
            )
        return self._write_session_maker

    async def dispose(self) -> None:
        """Dispose engines bound to the current loop (shutdown and test teardown)"""
        for engine in {self._write_engine, self._read_engine}:
            if engine is not None:
                await engine.dispose()
        self.reset()

    def reset(self) -> None:
        self._write_engine = None
        self._read_engine = None
        self._write_session_maker = None
        self._read_session_maker = None
        self._loop = None

    def _create_engine(self, *, read_only: bool) -> AsyncEngine:
        """
        Create new async engine.

        The read engine uses a larger pool for read-heavy workloads.
        SQLite URLs skip pool sizing and get foreign keys switched on.
        """
        url = settings.DATABASE_READ_URL_ASYNC if read_only else settings.DATABASE_URL_ASYNC

        if url.startswith('sqlite'):
            engine = create_async_engine(url, echo=False, connect_args={'timeout': 30})
            event.listen(engine.sync_engine, 'connect', _enable_sqlite_foreign_keys)
            return engine

        return create_async_engine(
            url,
            echo=False,
            pool_size=settings.DB_POOL_SIZE_READ if read_only else settings.DB_POOL_SIZE_WRITE,
            max_overflow=settings.DB_POOL_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_pre_ping=settings.DB_POOL_PRE_PING,
        )


# Global engine manager
engine_manager = AsyncEngineManager()


def get_engine(*, read_only: bool = False) -> AsyncEngine:
    """Get event-loop-aware engine (read_only: use replica if available)"""
    return engine_manager.get_engine(read_only=read_only)


def get_session_maker(*, read_only: bool = False) -> async_sessionmaker[AsyncSession]:
    """Get event-loop-aware session maker (read_only: use replica if available)"""
    return engine_manager.get_session_maker(read_only=read_only)


# =============================================================================
# Base Model
# =============================================================================


class Base(DeclarativeBase):
    pass


# =============================================================================
# Table Creation
# =============================================================================


async def create_db_and_tables() -> None:
    """Create database tables if they don't exist (development and tests, prod uses alembic)"""
    # Models register themselves on Base.metadata when imported
    import src.service.registration.driven_adapter.model  # noqa: F401

    try:
        async with get_engine().begin() as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)
    except Exception as e:
        error_msg = str(e).lower()
        if any(
            keyword in error_msg
            for keyword in ['already exists', 'duplicate key', 'unique constraint']
        ):
            Logger.base.info('Tables already exist, skipping creation')
        else:
            Logger.base.error(f'Error creating tables: {e}')
            raise


async def drop_db_and_tables() -> None:
    import src.service.registration.driven_adapter.model  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# =============================================================================
# Database Class (for DI)
# =============================================================================


class Database:
    """
    Session factory for dependency injection using AsyncEngineManager

    Delegates to AsyncEngineManager for event-loop-aware engine management
    and read-write separation support.
    """

    def __init__(self, *, read_only: bool = False) -> None:
        self._read_only = read_only

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Context manager for database sessions

        Note: Automatically handles rollback on exception
        """
        session_maker = get_session_maker(read_only=self._read_only)
        async with session_maker() as session:
            yield session
