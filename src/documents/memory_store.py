# src/documents/memory_store.py — v1
"""In-process document store (DOCUMENT_BACKEND=memory).

Collections are dicts of deep-copied documents, so callers never share
mutable state with the store.
"""

from __future__ import annotations

import copy
from typing import Any

from books_datastore.core.errors import CommandError
from books_datastore.documents.base_document_store import BaseDocumentStore, Document

_BACKEND = "memory"


def _get_path(document: Document, path: str) -> Any:
    value: Any = document
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value


def _set_path(document: Document, path: str, value: Any) -> None:
    *parents, leaf = path.split(".")
    target = document
    for part in parents:
        target = target.setdefault(part, {})
        if not isinstance(target, dict):
            raise CommandError(_BACKEND, f"Cannot set {path!r}: {part!r} is not a document")
    target[leaf] = copy.deepcopy(value)


class MemoryDocumentStore(BaseDocumentStore):
    """Dict-backed document store mirroring the MongoDB adapter's semantics."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, Document]] = {}

    def _table(self, collection: str) -> dict[str, Document]:
        return self._collections.setdefault(collection, {})

    async def insert_one(self, collection: str, document: Document) -> str:
        record_id = document.get("_id")
        if not isinstance(record_id, str):
            raise CommandError(_BACKEND, "Document requires a string '_id'")
        table = self._table(collection)
        if record_id in table:
            raise CommandError(
                _BACKEND, f"Duplicate key {record_id!r} in {collection!r}"
            )
        table[record_id] = copy.deepcopy(document)
        return record_id

    async def insert_many(self, collection: str, documents: list[Document]) -> list[str]:
        # Ordered insert: documents before a duplicate stay inserted
        return [await self.insert_one(collection, doc) for doc in documents]

    async def find_by_id(self, collection: str, record_id: str) -> Document | None:
        document = self._table(collection).get(record_id)
        return copy.deepcopy(document) if document is not None else None

    async def find_by_ids(self, collection: str, record_ids: list[str]) -> list[Document]:
        wanted = set(record_ids)
        return [
            copy.deepcopy(doc) for key, doc in self._table(collection).items()
            if key in wanted
        ]

    async def find_all(self, collection: str) -> list[Document]:
        return [copy.deepcopy(doc) for doc in self._table(collection).values()]

    async def find_referencing(
        self,
        collection: str,
        child_collection: str,
        foreign_field: str,
        child_ids: list[str],
    ) -> list[Document]:
        children = await self.find_by_ids(child_collection, child_ids)
        parent_ids = {_get_path(child, foreign_field) for child in children}
        return [
            copy.deepcopy(doc) for key, doc in self._table(collection).items()
            if key in parent_ids
        ]

    async def update_by_id(
        self, collection: str, record_id: str, fields: Document
    ) -> Document | None:
        if "_id" in fields:
            raise CommandError(_BACKEND, "The '_id' field is immutable")
        document = self._table(collection).get(record_id)
        if document is None:
            return None
        for path, value in fields.items():
            _set_path(document, path, value)
        return copy.deepcopy(document)

    async def delete_by_id(self, collection: str, record_id: str) -> Document | None:
        return self._table(collection).pop(record_id, None)

    async def delete_by_ids(self, collection: str, record_ids: list[str]) -> int:
        table = self._table(collection)
        return sum(1 for key in record_ids if table.pop(key, None) is not None)

    async def delete_all(self, collection: str) -> int:
        table = self._table(collection)
        count = len(table)
        table.clear()
        return count
