# src/cache/cache_factory.py — v3
"""Factory for cache store instantiation."""

from __future__ import annotations

from books_datastore.cache.base_cache_store import BaseCacheStore
from books_datastore.config.settings import Settings


def create_cache_store(settings: Settings | None = None) -> BaseCacheStore:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to the memory backend.

    Returns:
        Configured BaseCacheStore implementation.
    """
    backend = "memory" if settings is None else settings.cache_backend

    if backend == "memory":
        from books_datastore.cache.memory_store import MemoryCacheStore
        return MemoryCacheStore()

    if backend == "redis":
        from books_datastore.cache.redis_store import RedisCacheStore
        if settings is None or not settings.redis_url:
            raise ValueError("REDIS_URL must be set when CACHE_BACKEND=redis")
        return RedisCacheStore(redis_url=settings.redis_url)

    raise ValueError(f"Unsupported cache backend: {backend!r}")
