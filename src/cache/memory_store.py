# src/cache/memory_store.py — v1
"""In-process cache store (CACHE_BACKEND=memory).

Dict-backed with lazy TTL expiry. Intended for local runs and tests; nothing
is shared between processes.
"""

from __future__ import annotations

import time
from typing import Callable

from books_datastore.cache.base_cache_store import BaseCacheStore


class MemoryCacheStore(BaseCacheStore):
    """Cache store keeping ``key -> (value, expires_at)`` in a dict."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: dict[str, tuple[str, float | None]] = {}
        self._clock = clock

    def _live(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl: int | None = None) -> None:
        expires_at = None if ttl is None else self._clock() + ttl
        self._entries[key] = (value, expires_at)

    async def get(self, key: str) -> str | None:
        return self._live(key)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def delete_many(self, keys: list[str]) -> None:
        for key in keys:
            self._entries.pop(key, None)

    async def flush_all(self) -> None:
        self._entries.clear()

    async def list_keys(self, prefix: str) -> list[str]:
        return [
            key for key in list(self._entries)
            if key.startswith(prefix) and self._live(key) is not None
        ]
