# src/documents/base_document_store.py — v1
"""Abstract document store interface consumed by the Datastore.

Documents are plain dicts keyed by a caller-assigned string ``_id``; every
operation is scoped to a named collection.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

Document = dict[str, Any]


class BaseDocumentStore(ABC):
    """Unified interface for document database backends."""

    # --- Create ---

    @abstractmethod
    async def insert_one(self, collection: str, document: Document) -> str:
        """Insert a document. Returns its ``_id``."""

    @abstractmethod
    async def insert_many(self, collection: str, documents: list[Document]) -> list[str]:
        """Insert documents in order. Returns their ``_id`` values."""

    # --- Read ---

    @abstractmethod
    async def find_by_id(self, collection: str, record_id: str) -> Document | None:
        """Fetch one document, or None."""

    @abstractmethod
    async def find_by_ids(self, collection: str, record_ids: list[str]) -> list[Document]:
        """Fetch every document whose ``_id`` is in ``record_ids``."""

    @abstractmethod
    async def find_all(self, collection: str) -> list[Document]:
        """Fetch the whole collection (no pagination)."""

    @abstractmethod
    async def find_referencing(
        self,
        collection: str,
        child_collection: str,
        foreign_field: str,
        child_ids: list[str],
    ) -> list[Document]:
        """Documents of ``collection`` referenced by any of ``child_ids``.

        A child references a parent when ``child[foreign_field] == parent._id``
        (``foreign_field`` is a dotted path such as ``data.bookstore_id``).
        """

    # --- Update ---

    @abstractmethod
    async def update_by_id(
        self, collection: str, record_id: str, fields: Document
    ) -> Document | None:
        """``$set`` the given (possibly dotted) fields.

        Returns the document after the update, or None if nothing matched.
        """

    # --- Delete ---

    @abstractmethod
    async def delete_by_id(self, collection: str, record_id: str) -> Document | None:
        """Delete one document. Returns it, or None if nothing matched."""

    @abstractmethod
    async def delete_by_ids(self, collection: str, record_ids: list[str]) -> int:
        """Delete by id set. Returns the number deleted."""

    @abstractmethod
    async def delete_all(self, collection: str) -> int:
        """Empty the collection. Returns the number deleted."""

    async def close(self) -> None:
        """Release connections. No-op by default."""
