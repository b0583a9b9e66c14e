# src/datastore/datastore_factory.py — v1
"""Factory: build a Datastore with both backends from configuration."""

from __future__ import annotations

from books_datastore.cache.cache_factory import create_cache_store
from books_datastore.config.settings import Settings
from books_datastore.datastore.datastore import Datastore
from books_datastore.documents.document_store_factory import create_document_store


def create_datastore(settings: Settings | None = None) -> Datastore:
    """Instantiate the configured document store and cache behind a Datastore.

    Args:
        settings: Application settings. None selects the memory backends.

    Returns:
        Datastore owning both adapters.
    """
    if settings is None:
        return Datastore(documents=create_document_store(), cache=create_cache_store())
    return Datastore(
        documents=create_document_store(settings),
        cache=create_cache_store(settings),
        cache_namespace=settings.cache_namespace,
        default_ttl=settings.cache_default_ttl,
    )
