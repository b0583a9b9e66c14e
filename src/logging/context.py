# src/logging/context.py — v2
"""Contextual logging support: attach collection and operation to log records."""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

_collection: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "collection", default=None
)
_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)


@dataclass
class LogContext:
    """Snapshot of current logging context."""

    collection: str | None = None
    operation: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(collection=_collection.get(), operation=_operation.get())


@contextmanager
def operation_context(operation: str, collection: str | None = None) -> Iterator[None]:
    """Scope log context to one Datastore operation.

    Context variables are task-local, so concurrent operations on the same
    event loop do not see each other's values.
    """
    op_token = _operation.set(operation)
    col_token = _collection.set(collection)
    try:
        yield
    finally:
        _collection.reset(col_token)
        _operation.reset(op_token)


def clear_context() -> None:
    """Reset all context variables."""
    _collection.set(None)
    _operation.set(None)
