"""Task-local logging context for adding fields to log records."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

_context: ContextVar[dict[str, Any] | None] = ContextVar("log_context", default=None)


class LogContext:
    """Context-variable storage for log context fields.

    Each asyncio task sees its own copy, so concurrent store operations do
    not bleed fields into each other's records.
    """

    @classmethod
    def set(cls, **kwargs: Any) -> None:
        _context.set({**cls.get(), **kwargs})

    @classmethod
    def get(cls) -> dict[str, Any]:
        return dict(_context.get() or {})

    @classmethod
    def clear(cls) -> None:
        _context.set({})


class ContextFilter(logging.Filter):
    """Injects LogContext fields into log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in LogContext.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Context manager that sets logging context fields.

    Fields are injected into log records via ContextFilter, which must
    be attached to the handler (see setup_logging).
    """
    token = _context.set({**LogContext.get(), **kwargs})
    try:
        yield
    finally:
        _context.reset(token)


@contextmanager
def log_entity_context(entity: str, entity_id: str | None = None, **kwargs: Any) -> Iterator[None]:
    """Convenience context manager for store operations on one record."""
    fields: dict[str, Any] = {"entity": entity, **kwargs}
    if entity_id is not None:
        fields["entity_id"] = entity_id
        fields.setdefault("correlation_id", entity_id)
    with log_context(**fields):
        yield
