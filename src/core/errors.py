# src/core/errors.py — v1
"""Error taxonomy shared by the adapters and the Datastore.

Adapters translate driver exceptions into these types so callers can pick a
retry strategy without importing redis or pymongo.
"""

from __future__ import annotations


class DatastoreError(Exception):
    """Base class for every error raised by books_datastore."""

    retryable: bool = False


class BackendConnectionError(DatastoreError):
    """Cache or document store could not be reached or authenticated."""

    retryable = True

    def __init__(self, backend: str, message: str) -> None:
        self.backend = backend
        super().__init__(f"{backend}: {message}")


class SerializationError(DatastoreError):
    """Payload could not be converted to or from its wire representation."""


class NotFoundError(DatastoreError):
    """Record is absent from the store (and, for reads, from the cache)."""

    def __init__(self, collection: str, record_id: str) -> None:
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"Record {record_id!r} not found in {collection!r}")


class CommandError(DatastoreError):
    """Backend rejected an operation (duplicate key, malformed query)."""

    def __init__(self, backend: str, message: str) -> None:
        self.backend = backend
        super().__init__(f"{backend}: {message}")
