"""Async database engine and session lifecycle management.

A single engine and session factory are created lazily through
``_DatabaseManager`` and shared for the lifetime of the process. Sessions
handed out by ``get_async_session`` commit on success and roll back on error.
When ``log_config.enable_sql_logging`` is on, queries slower than
``slow_query_threshold_ms`` are logged with sanitized parameters.
"""

import threading
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any
from weakref import WeakKeyDictionary

from loguru import logger
from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.engine.interfaces import DBAPICursor, ExecutionContext
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.core.config import get_settings
from src.core.context import RequestContext
from src.core.error_context import sanitize_sql_params

POOL_RECYCLE_SECONDS = 3600
COMMAND_TIMEOUT_SECONDS = 60

_query_start_times: WeakKeyDictionary[ExecutionContext, float] = WeakKeyDictionary()


def _before_cursor_execute(
    _conn: Connection,
    _cursor: DBAPICursor,
    _statement: str,
    _parameters: Any,  # noqa: ANN401 - SQLAlchemy event signature
    context: ExecutionContext,
    _executemany: bool,
) -> None:
    _query_start_times[context] = time.perf_counter()


def _after_cursor_execute(
    _conn: Connection,
    _cursor: DBAPICursor,
    statement: str,
    parameters: Any,  # noqa: ANN401 - SQLAlchemy event signature
    context: ExecutionContext,
    _executemany: bool,
) -> None:
    start_time = _query_start_times.pop(context, None)
    if start_time is None:
        return

    duration_ms = (time.perf_counter() - start_time) * 1000
    threshold_ms = get_settings().log_config.slow_query_threshold_ms
    if duration_ms < threshold_ms:
        return

    logger.warning(
        "Slow query detected: {:.2f}ms",
        duration_ms,
        query=" ".join(statement.split())[:500],
        parameters=sanitize_sql_params(parameters),
        threshold_ms=threshold_ms,
        correlation_id=RequestContext.get_correlation_id(),
    )


def create_database_engine(database_url: str | None = None) -> AsyncEngine:
    """Create an async SQLAlchemy engine with connection pooling.

    Args:
        database_url: Optional database URL overriding the configured one.

    Returns:
        AsyncEngine: Configured async engine instance.
    """
    settings = get_settings()
    db_config = settings.database_config

    engine = create_async_engine(
        database_url or db_config.database_url,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_pre_ping=db_config.pool_pre_ping,
        echo=db_config.echo,
        pool_recycle=POOL_RECYCLE_SECONDS,
        connect_args={"command_timeout": COMMAND_TIMEOUT_SECONDS},
    )

    if settings.log_config.enable_sql_logging:
        event.listen(engine.sync_engine, "before_cursor_execute", _before_cursor_execute)
        event.listen(engine.sync_engine, "after_cursor_execute", _after_cursor_execute)

    logger.info(
        "Created database engine - pool_size: {}, max_overflow: {}, sql_logging: {}",
        db_config.pool_size,
        db_config.max_overflow,
        settings.log_config.enable_sql_logging,
    )
    return engine


class _DatabaseManager:
    """Holds the process-wide engine and session factory."""

    def __init__(self) -> None:
        self._engine: AsyncEngine | None = None
        self._async_session_factory: async_sessionmaker[AsyncSession] | None = None
        self._lock = threading.Lock()

    def get_engine(self) -> AsyncEngine:
        if self._engine is None:
            with self._lock:
                if self._engine is None:
                    self._engine = create_database_engine()
        return self._engine

    def get_session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._async_session_factory is None:
            with self._lock:
                if self._async_session_factory is None:
                    self._async_session_factory = async_sessionmaker(
                        self.get_engine(),
                        class_=AsyncSession,
                        expire_on_commit=False,
                    )
        return self._async_session_factory

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("Database engine disposed")
        self.reset()

    def reset(self) -> None:
        self._engine = None
        self._async_session_factory = None


_db_manager = _DatabaseManager()


def get_engine() -> AsyncEngine:
    """Get or create the global async engine instance."""
    return _db_manager.get_engine()


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the global async session factory."""
    return _db_manager.get_session_factory()


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Provide a session that commits on success and rolls back on error.

    Yields:
        AsyncSession: Database session for performing operations.
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            logger.debug("Database session rolled back due to error")
            raise


async def close_database() -> None:
    """Dispose of the engine; called on application shutdown."""
    await _db_manager.close()


async def check_database_connection() -> tuple[bool, str | None]:
    """Check that the database answers a trivial query.

    Returns:
        tuple[bool, str | None]: Health flag and the error message on failure.
    """
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        return False, str(e)
    else:
        return True, None
