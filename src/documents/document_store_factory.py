# src/documents/document_store_factory.py — v1
"""Factory: instantiate the document store from configuration."""

from __future__ import annotations

import logging

from books_datastore.config.settings import Settings
from books_datastore.documents.base_document_store import BaseDocumentStore

logger = logging.getLogger(__name__)


class UnsupportedDocumentStoreError(ValueError):
    """Raised when a document backend is not supported."""


def create_document_store(settings: Settings | None = None) -> BaseDocumentStore:
    """Instantiate the configured document store.

    Args:
        settings: Application settings (DOCUMENT_BACKEND). Defaults to memory.

    Returns:
        Configured BaseDocumentStore instance.

    Raises:
        UnsupportedDocumentStoreError: If the backend is not supported.
        ValueError: If MONGODB_URI is missing for the mongodb backend.
    """
    backend = "memory" if settings is None else settings.document_backend

    if backend == "memory":
        from books_datastore.documents.memory_store import MemoryDocumentStore
        return MemoryDocumentStore()

    if backend == "mongodb":
        from books_datastore.documents.mongo_store import MongoDocumentStore
        if settings is None or not settings.mongodb_uri:
            raise ValueError("MONGODB_URI must be set when DOCUMENT_BACKEND=mongodb")
        logger.debug("Using MongoDB database %r", settings.mongodb_database)
        return MongoDocumentStore(
            uri=settings.mongodb_uri,
            database=settings.mongodb_database,
            timeout_ms=settings.mongodb_timeout_ms,
        )

    raise UnsupportedDocumentStoreError(
        f"Unsupported document backend: {backend!r}. Available: mongodb, memory"
    )
