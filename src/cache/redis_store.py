# src/cache/redis_store.py — v2
"""Redis-based cache store (CACHE_BACKEND=redis).

Requires 'redis' package: pip install redis.
Uses the asyncio client so every call is a suspension point.
"""

from __future__ import annotations

import logging
import re
from contextlib import asynccontextmanager
from typing import AsyncIterator

from books_datastore.cache.base_cache_store import BaseCacheStore
from books_datastore.core.errors import BackendConnectionError, CommandError

logger = logging.getLogger(__name__)

_BACKEND = "redis"
_GLOB_SPECIAL = re.compile(r"([\\*?\[\]])")


def escape_glob(text: str) -> str:
    """Escape Redis glob metacharacters so ``text`` matches literally."""
    return _GLOB_SPECIAL.sub(r"\\\1", text)


class RedisCacheStore(BaseCacheStore):
    """Redis-backed cache store shared by all Datastore operations."""

    def __init__(self, redis_url: str, scan_count: int = 500) -> None:
        try:
            import redis.asyncio as aioredis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install redis"
            ) from e

        self._client = aioredis.from_url(redis_url, decode_responses=True)
        self._scan_count = scan_count

    @asynccontextmanager
    async def _translate_errors(self, operation: str) -> AsyncIterator[None]:
        from redis import exceptions as redis_errors

        try:
            yield
        except (
            redis_errors.ConnectionError,
            redis_errors.TimeoutError,
            redis_errors.AuthenticationError,
        ) as e:
            raise BackendConnectionError(_BACKEND, f"{operation} failed: {e}") from e
        except redis_errors.RedisError as e:
            raise CommandError(_BACKEND, f"{operation} rejected: {e}") from e

    async def set(self, key: str, value: str, ttl: int | None = None) -> None:
        async with self._translate_errors("SET"):
            await self._client.set(key, value, ex=ttl)

    async def get(self, key: str) -> str | None:
        async with self._translate_errors("GET"):
            return await self._client.get(key)

    async def delete(self, key: str) -> None:
        async with self._translate_errors("DEL"):
            await self._client.delete(key)

    async def delete_many(self, keys: list[str]) -> None:
        # DEL with no arguments is a Redis syntax error
        if not keys:
            return
        async with self._translate_errors("DEL"):
            await self._client.delete(*keys)

    async def flush_all(self) -> None:
        async with self._translate_errors("FLUSHDB"):
            await self._client.flushdb()

    async def list_keys(self, prefix: str) -> list[str]:
        """SCAN for keys matching ``prefix*`` (non-blocking for the server)."""
        keys: list[str] = []
        async with self._translate_errors("SCAN"):
            async for key in self._client.scan_iter(
                match=f"{escape_glob(prefix)}*", count=self._scan_count
            ):
                keys.append(key)
        return keys

    async def close(self) -> None:
        """Close the Redis connection pool."""
        await self._client.aclose()
