"""Async SQLAlchemy session management."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator, Awaitable, Callable, TypeVar

import structlog
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from ..core.config import get_settings

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# MySQL client error codes for dropped or unusable connections.
RECOVERABLE_MYSQL_CODES = {2006, 2013, 2014, 2027, 2055}
RECOVERABLE_MESSAGES = (
    "server has gone away",
    "lost connection",
    "connection reset",
    "broken pipe",
    "packets out of order",
    "protocol",
)


class Base(DeclarativeBase):
    """Declarative base for SQLAlchemy models."""


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None
_schema_ready = False


def get_engine() -> AsyncEngine:
    """Return a singleton async engine bound to the configured database."""

    global _engine
    if _engine is None:
        settings = get_settings()
        if not settings.database_url:
            raise RuntimeError("DATABASE_URL is not configured")
        options: dict[str, object] = {"future": True, "pool_pre_ping": True}
        if not settings.database_url.startswith("sqlite"):
            options.update(
                pool_size=settings.database_pool_size,
                max_overflow=settings.database_max_overflow,
                pool_recycle=settings.database_pool_recycle_seconds,
            )
        _engine = create_async_engine(settings.database_url, **options)
    return _engine


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Return a lazily initialised session factory."""

    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an async session."""

    if not _schema_ready:
        await init_db()
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        yield session


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Create tables for all registered models if they do not exist."""

    global _schema_ready
    # Import models to ensure metadata is populated before create_all.
    from .. import models  # noqa: F401

    target = engine or get_engine()
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    if engine is None:
        _schema_ready = True


async def dispose_engine() -> None:
    global _engine, _session_factory, _schema_ready
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
    _schema_ready = False


@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Commit the work done inside the block, or roll it back on any error."""

    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise


def is_recoverable_error(exc: BaseException) -> bool:
    """Return True for errors caused by a dead connection rather than by the query."""

    if isinstance(exc, DBAPIError):
        if exc.connection_invalidated:
            return True
        orig = exc.orig
        args = getattr(orig, "args", ())
        if args and isinstance(args[0], int) and args[0] in RECOVERABLE_MYSQL_CODES:
            return True
        message = str(orig).lower()
    elif isinstance(exc, (ConnectionResetError, BrokenPipeError)):
        return True
    else:
        return False
    return any(marker in message for marker in RECOVERABLE_MESSAGES)


async def run_with_retry(session: AsyncSession, operation: Callable[[], Awaitable[T]]) -> T:
    """Run a read once more after resetting the pool when the connection dropped."""

    try:
        return await operation()
    except (DBAPIError, ConnectionResetError, BrokenPipeError) as exc:
        if not is_recoverable_error(exc):
            raise
        logger.warning("db.connection_reset", error=str(exc))
        await session.rollback()
        bind = session.bind
        if isinstance(bind, AsyncEngine):
            await bind.dispose()
        return await operation()
