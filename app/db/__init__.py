"""Database package — async SQLAlchemy engine, session factory, Executor."""
from app.db.base import async_session_factory, engine, get_db
from app.db.executor import DuplicateKeyError, Executor, SessionExecutor, get_executor

__all__ = [
    "DuplicateKeyError",
    "Executor",
    "SessionExecutor",
    "async_session_factory",
    "engine",
    "get_db",
    "get_executor",
]
