"""
Structured JSON logging for the books kernel.

Every logger obtained through ``get_logger`` lives under the
``books_kernel`` namespace and, once ``configure_logging`` has run, writes
one JSON object per line:

    {"ts": ..., "level": "INFO", "logger": "books_kernel.modules.assets.service",
     "message": "depreciation_committed", "asset_id": "...", "fiscal_year": 2024, ...}

``message`` is a stable event name; the figures travel as ``extra`` fields.
Request-scoped identifiers (company, asset, actor, correlation id) are
carried by ``LogContext`` and stamped on every line emitted inside a
``LogContext.bind(...)`` block.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any, TextIO
from uuid import UUID

_LOGGER_PREFIX = "books_kernel"

CONTEXT_FIELDS = ("correlation_id", "company_id", "asset_id", "actor_id")

_context: ContextVar[Mapping[str, str]] = ContextVar("books_log_context", default={})


class LogContext:
    """
    Request-scoped log fields, safe across threads and asyncio tasks.

    Only the names in ``CONTEXT_FIELDS`` are kept; anything else is ignored.
    Values are stored as strings so UUIDs can be passed straight in.
    """

    @staticmethod
    def _merged(fields: Mapping[str, Any]) -> dict[str, str]:
        merged = dict(_context.get())
        for name, value in fields.items():
            if name in CONTEXT_FIELDS and value is not None:
                merged[name] = str(value)
        return merged

    @classmethod
    def set(cls, **fields: Any) -> None:
        """Add or replace fields for the rest of the current context."""
        _context.set(cls._merged(fields))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return dict(_context.get())

    @classmethod
    def clear(cls) -> None:
        _context.set({})

    @classmethod
    @contextmanager
    def bind(cls, **fields: Any) -> Iterator[type["LogContext"]]:
        """Set fields for the duration of a ``with`` block, then restore."""
        token = _context.set(cls._merged(fields))
        try:
            yield cls
        finally:
            _context.reset(token)


# Attributes every LogRecord has; anything else on a record came from extra=
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "taskName"}


def _to_json(value: Any) -> Any:
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: base keys, context fields, extras, exception."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                payload.setdefault(key, value)

        exc = record.exc_info[1] if record.exc_info else None
        if exc is not None:
            payload["exc_type"] = type(exc).__name__
            payload["exc_message"] = str(exc)
            code = getattr(exc, "code", None)
            if code is not None:
                payload["exc_code"] = code
            # BooksError subclasses carry their details as public attributes
            for key, value in vars(exc).items():
                if not key.startswith("_"):
                    payload[f"exc_{key}"] = value
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_to_json)


def get_logger(name: str) -> logging.Logger:
    """Logger ``books_kernel.<name>``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_configure_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: TextIO | None = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the ``books_kernel`` logger.

    Idempotent: only the first call in a process (or after
    ``reset_logging``) has any effect.
    """
    global _configured
    with _configure_lock:
        if _configured:
            return
        _configured = True

        if handler is None:
            handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredFormatter())

        books_logger = logging.getLogger(_LOGGER_PREFIX)
        books_logger.setLevel(level)
        books_logger.propagate = False
        books_logger.addHandler(handler)


def reset_logging() -> None:
    """Undo ``configure_logging``. FOR TESTING ONLY."""
    global _configured
    with _configure_lock:
        _configured = False
        books_logger = logging.getLogger(_LOGGER_PREFIX)
        books_logger.handlers.clear()
        books_logger.setLevel(logging.WARNING)
        books_logger.propagate = True
