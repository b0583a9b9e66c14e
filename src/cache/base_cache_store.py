# src/cache/base_cache_store.py — v2
"""Abstract key/value cache interface consumed by the Datastore."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseCacheStore(ABC):
    """Unified interface for cache backends.

    Values are strings (serialized payloads). Implementations translate driver
    failures into BackendConnectionError / CommandError.
    """

    @abstractmethod
    async def set(self, key: str, value: str, ttl: int | None = None) -> None:
        """Store a value, optionally expiring after ``ttl`` seconds."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value, or None when absent or expired."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a key. Absent keys are not an error."""

    @abstractmethod
    async def delete_many(self, keys: list[str]) -> None:
        """Remove several keys. Absent keys are not an error."""

    @abstractmethod
    async def flush_all(self) -> None:
        """Remove every key in the cache database."""

    @abstractmethod
    async def list_keys(self, prefix: str) -> list[str]:
        """List live keys starting with ``prefix``."""

    async def close(self) -> None:
        """Release connections. No-op by default."""
