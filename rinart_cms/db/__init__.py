"""Database session and metadata helpers."""

from .session import (
    Base,
    dispose_engine,
    get_engine,
    get_session,
    get_sessionmaker,
    init_db,
    is_recoverable_error,
    run_with_retry,
    transaction,
)

__all__ = [
    "Base",
    "dispose_engine",
    "get_engine",
    "get_session",
    "get_sessionmaker",
    "init_db",
    "is_recoverable_error",
    "run_with_retry",
    "transaction",
]
