# src/documents/mongo_store.py — v1
"""MongoDB document store adapter.

Uses pymongo's native asyncio client (AsyncMongoClient).
Requires: pip install pymongo.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from books_datastore.core.errors import (
    BackendConnectionError,
    CommandError,
    SerializationError,
)
from books_datastore.documents.base_document_store import BaseDocumentStore, Document

logger = logging.getLogger(__name__)

_BACKEND = "mongodb"
# MongoDB server error code for AuthenticationFailed
_AUTH_FAILED = 18


class MongoDocumentStore(BaseDocumentStore):
    """Document store backed by a MongoDB database."""

    def __init__(
        self,
        uri: str,
        database: str = "books",
        timeout_ms: int = 5000,
    ) -> None:
        try:
            from pymongo import AsyncMongoClient
        except ImportError as e:
            raise ImportError(
                "pymongo>=4.10 required: pip install pymongo"
            ) from e

        self._client: Any = AsyncMongoClient(uri, serverSelectionTimeoutMS=timeout_ms)
        self._db = self._client[database]

    def _collection(self, name: str) -> Any:
        return self._db[name]

    @asynccontextmanager
    async def _translate_errors(self, operation: str) -> AsyncIterator[None]:
        from bson.errors import BSONError
        from pymongo import errors as mongo_errors

        try:
            yield
        except mongo_errors.ConnectionFailure as e:
            raise BackendConnectionError(_BACKEND, f"{operation} failed: {e}") from e
        except mongo_errors.OperationFailure as e:
            if e.code == _AUTH_FAILED:
                raise BackendConnectionError(
                    _BACKEND, f"{operation} failed: {e}"
                ) from e
            raise CommandError(_BACKEND, f"{operation} rejected: {e}") from e
        except BSONError as e:
            raise SerializationError(f"{operation}: {e}") from e
        except mongo_errors.PyMongoError as e:
            raise CommandError(_BACKEND, f"{operation} rejected: {e}") from e

    # --- Create ---

    async def insert_one(self, collection: str, document: Document) -> str:
        async with self._translate_errors("insert_one"):
            result = await self._collection(collection).insert_one(dict(document))
        return result.inserted_id

    async def insert_many(self, collection: str, documents: list[Document]) -> list[str]:
        if not documents:
            return []
        async with self._translate_errors("insert_many"):
            result = await self._collection(collection).insert_many(
                [dict(d) for d in documents], ordered=True
            )
        return list(result.inserted_ids)

    # --- Read ---

    async def find_by_id(self, collection: str, record_id: str) -> Document | None:
        async with self._translate_errors("find_one"):
            return await self._collection(collection).find_one({"_id": record_id})

    async def find_by_ids(self, collection: str, record_ids: list[str]) -> list[Document]:
        async with self._translate_errors("find"):
            cursor = self._collection(collection).find({"_id": {"$in": record_ids}})
            return await cursor.to_list()

    async def find_all(self, collection: str) -> list[Document]:
        async with self._translate_errors("find"):
            cursor = self._collection(collection).find({})
            return await cursor.to_list()

    async def find_referencing(
        self,
        collection: str,
        child_collection: str,
        foreign_field: str,
        child_ids: list[str],
    ) -> list[Document]:
        pipeline = [
            {
                "$lookup": {
                    "from": child_collection,
                    "localField": "_id",
                    "foreignField": foreign_field,
                    "as": "children",
                }
            },
            {"$match": {"children._id": {"$in": child_ids}}},
            {"$project": {"children": 0}},
        ]
        async with self._translate_errors("aggregate"):
            cursor = await self._collection(collection).aggregate(pipeline)
            return await cursor.to_list()

    # --- Update ---

    async def update_by_id(
        self, collection: str, record_id: str, fields: Document
    ) -> Document | None:
        from pymongo import ReturnDocument

        async with self._translate_errors("find_one_and_update"):
            return await self._collection(collection).find_one_and_update(
                {"_id": record_id},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )

    # --- Delete ---

    async def delete_by_id(self, collection: str, record_id: str) -> Document | None:
        async with self._translate_errors("find_one_and_delete"):
            return await self._collection(collection).find_one_and_delete(
                {"_id": record_id}
            )

    async def delete_by_ids(self, collection: str, record_ids: list[str]) -> int:
        async with self._translate_errors("delete_many"):
            result = await self._collection(collection).delete_many(
                {"_id": {"$in": record_ids}}
            )
        return result.deleted_count

    async def delete_all(self, collection: str) -> int:
        async with self._translate_errors("delete_many"):
            result = await self._collection(collection).delete_many({})
        return result.deleted_count

    async def close(self) -> None:
        """Close the MongoDB client."""
        await self._client.close()
