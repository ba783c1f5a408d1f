"""Async SQLAlchemy engine, connection pool and session management."""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncGenerator
from typing import Any

import structlog
from sqlalchemy import event, exc, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from poketactix.config import Settings
from poketactix.db.base import Base

logger = structlog.get_logger()

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _engine_kwargs(settings: Settings) -> dict[str, Any]:
    """Translate pool settings into create_async_engine() arguments for the URL's dialect."""
    url = make_url(settings.database_url)
    if url.get_backend_name() == "sqlite":
        kwargs: dict[str, Any] = {"echo": False}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        return kwargs

    min_connections = min(settings.db_min_connections, settings.db_max_connections)
    return {
        "echo": False,
        "pool_size": min_connections,
        "max_overflow": settings.db_max_connections - min_connections,
        "pool_recycle": settings.db_max_lifetime,
        "pool_pre_ping": True,
        "pool_timeout": settings.db_connect_timeout,
        "connect_args": {"statement_cache_size": 0, "timeout": settings.db_connect_timeout},
    }


def _install_sqlite_pragmas(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection: Any, _record: Any) -> None:  # noqa: ANN401
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _mark_idle(record: Any) -> None:  # noqa: ANN401
    record.info["idle_since"] = time.monotonic()


def _expire_idle(record: Any, idle_timeout: float) -> None:  # noqa: ANN401
    """Reject a checkout whose connection sat in the pool past ``idle_timeout``."""
    idle_since = record.info.pop("idle_since", None)
    if idle_since is not None and time.monotonic() - idle_since > idle_timeout:
        # The pool reconnects and retries the checkout.
        raise exc.DisconnectionError("connection exceeded idle timeout")


def _install_idle_timeout(engine: AsyncEngine, idle_timeout: int) -> None:
    """Discard pooled connections that sat unused longer than ``idle_timeout`` seconds."""

    @event.listens_for(engine.sync_engine, "checkin")
    def _on_checkin(_dbapi_connection: Any, record: Any) -> None:  # noqa: ANN401
        _mark_idle(record)

    @event.listens_for(engine.sync_engine, "checkout")
    def _on_checkout(_dbapi_connection: Any, record: Any, _proxy: Any) -> None:  # noqa: ANN401
        _expire_idle(record, idle_timeout)


async def init_db(settings: Settings) -> None:
    """Initialize the database engine and session factory, then ping the database.

    Raises:
        RuntimeError: If the startup ping fails or times out.
    """
    global _engine, _session_factory  # noqa: PLW0603
    engine = create_async_engine(settings.database_url, **_engine_kwargs(settings))
    if engine.dialect.name == "sqlite":
        _install_sqlite_pragmas(engine)
    else:
        _install_idle_timeout(engine, settings.db_idle_timeout)

    try:
        await asyncio.wait_for(_ping(engine), timeout=settings.db_connect_timeout)
    except (exc.SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
        await engine.dispose()
        msg = f"Database ping failed: {e}"
        raise RuntimeError(msg) from e

    _engine = engine
    _session_factory = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    logger.info(
        "database_initialized",
        dialect=engine.dialect.name,
        max_connections=settings.db_max_connections,
        min_connections=settings.db_min_connections,
    )


async def _ping(engine: AsyncEngine) -> None:
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def create_schema() -> None:
    """Create all tables directly from the ORM metadata (local runs and tests)."""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of the database engine."""
    global _engine, _session_factory  # noqa: PLW0603
    if _engine:
        await _engine.dispose()
        _engine = None
        _session_factory = None


def get_engine() -> AsyncEngine:
    """Get the async engine instance."""
    if _engine is None:
        msg = "Database not initialized. Call init_db() first."
        raise RuntimeError(msg)
    return _engine


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session (FastAPI dependency).

    Work not committed by the caller is rolled back when the session closes,
    including when the request task is cancelled.
    """
    if _session_factory is None:
        msg = "Database not initialized. Call init_db() first."
        raise RuntimeError(msg)
    async with _session_factory() as session:
        yield session
