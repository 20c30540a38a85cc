"""Database layer - engine, base classes and column types."""

from books_kernel.db.base import Base, TrackedBase, UUIDString
from books_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from books_kernel.db.types import ClassCode, LongText, MoneyAmount, ShortCode

__all__ = [
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "get_session_factory",
    "session_scope",
    "create_tables",
    "reset_engine",
    "Base",
    "TrackedBase",
    "UUIDString",
    "MoneyAmount",
    "LongText",
    "ShortCode",
    "ClassCode",
]
