# src/datastore/datastore.py — v1
"""Datastore: cache-consistency orchestration over a cache and a document store.

Policy, per operation:

- create/update: cache first, then store (write-through).
- read: cache first; on a miss fall back to the store. A miss does NOT refill
  the cache; only create/update write cache entries.
- delete: store first, then cache.
- clear: empties one collection but flushes the WHOLE cache database.

Nothing is transactional. The first error aborts the call and is raised
unchanged; work already committed on the other backend (or by earlier items
of a batch) is not rolled back.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TypeVar

from books_datastore.cache.base_cache_store import BaseCacheStore
from books_datastore.core.errors import NotFoundError, SerializationError
from books_datastore.core.models import Cached, RecordPatch, StorableRecord
from books_datastore.documents.base_document_store import BaseDocumentStore
from books_datastore.logging.context import operation_context

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=StorableRecord)
ParentT = TypeVar("ParentT", bound=StorableRecord)


class Datastore:
    """Create/read/update/delete records across cache and document store.

    The Datastore owns both adapter handles; build it once and share it.
    Operations hold no locks, so concurrent writers to one id race and the
    last write on each backend wins independently.
    """

    def __init__(
        self,
        documents: BaseDocumentStore,
        cache: BaseCacheStore,
        cache_namespace: str = "books",
        default_ttl: int | None = None,
    ) -> None:
        if default_ttl is not None and default_ttl <= 0:
            raise ValueError(f"default_ttl must be > 0 seconds, got {default_ttl}")
        self._documents = documents
        self._cache = cache
        self._namespace = cache_namespace
        self._default_ttl = default_ttl

    @property
    def documents(self) -> BaseDocumentStore:
        return self._documents

    @property
    def cache(self) -> BaseCacheStore:
        return self._cache

    # --- Key derivation ---

    def _key(self, derived_key: str, cache_namespace: str | None) -> str:
        return f"{cache_namespace or self._namespace}:{derived_key}"

    def _ttl(self, ttl: int | None) -> int | None:
        """Resolve a per-call TTL against the default.

        ``None`` means the Datastore default, so with a default set there is no
        per-call way to write an entry without expiry.
        """
        if ttl is not None and ttl <= 0:
            raise ValueError(f"ttl must be > 0 seconds, got {ttl}")
        return self._default_ttl if ttl is None else ttl

    async def _write_cache(
        self, record: StorableRecord, ttl: int | None, cache_namespace: str | None
    ) -> None:
        derived_key, value = record.serialize_for_cache()
        await self._cache.set(self._key(derived_key, cache_namespace), value, ttl)

    # --- Create ---

    async def create_one(
        self,
        collection: str,
        record: RecordT,
        ttl: int | None = None,
        cache_namespace: str | None = None,
    ) -> RecordT:
        """Write ``record`` to the cache, then insert it in ``collection``.

        ``ttl`` overrides the Datastore default for this entry and must be > 0.
        """
        ttl = self._ttl(ttl)
        with operation_context("create_one", collection):
            document = record.to_document()
            await self._write_cache(record, ttl, cache_namespace)
            await self._documents.insert_one(collection, document)
            logger.debug("Created %s", record.id)
            return record

    async def create_many(
        self,
        collection: str,
        records: list[RecordT],
        ttl: int | None = None,
        cache_namespace: str | None = None,
    ) -> list[RecordT]:
        """create_one for each record in order; stops at the first failure."""
        ttl = self._ttl(ttl)
        with operation_context("create_many", collection):
            for position, record in enumerate(records):
                try:
                    document = record.to_document()
                    await self._write_cache(record, ttl, cache_namespace)
                    await self._documents.insert_one(collection, document)
                except Exception:
                    logger.error(
                        "Batch create aborted at item %d (%s); %d item(s) committed",
                        position, record.id, position,
                    )
                    raise
            logger.debug("Created %d record(s)", len(records))
            return records

    # --- Read ---

    async def read(
        self,
        collection: str,
        record_id: str,
        record_type: type[RecordT],
        cache_namespace: str | None = None,
    ) -> Cached[RecordT]:
        """Cache-first read of one record.

        Returns:
            ``Cached.hit`` when the cache held a decodable entry, otherwise
            ``Cached.miss`` with the record loaded from the store.

        Raises:
            NotFoundError: Neither backend holds ``record_id``.
        """
        with operation_context("read", collection):
            key = self._key(record_type.cache_key_for(record_id), cache_namespace)
            value = await self._cache.get(key)
            if value is not None:
                try:
                    record = record_type.from_cache(record_id, value)
                except SerializationError as e:
                    logger.warning("Ignoring undecodable cache entry %s: %s", key, e)
                else:
                    logger.debug("Cache hit %s", key)
                    return Cached.hit(record)

            document = await self._documents.find_by_id(collection, record_id)
            if document is None:
                raise NotFoundError(collection, record_id)
            logger.debug("Cache miss %s, served from store", key)
            return Cached.miss(record_type.from_document(document))

    async def read_all(
        self, collection: str, record_type: type[RecordT]
    ) -> list[RecordT]:
        """Every record of ``collection``, straight from the store."""
        with operation_context("read_all", collection):
            documents = await self._documents.find_all(collection)
            return [record_type.from_document(doc) for doc in documents]

    async def read_many_by_ids(
        self, collection: str, record_ids: list[str], record_type: type[RecordT]
    ) -> list[RecordT]:
        """Records whose id is in ``record_ids``, straight from the store.

        Unknown ids are silently absent from the result.
        """
        with operation_context("read_many_by_ids", collection):
            documents = await self._documents.find_by_ids(collection, list(record_ids))
            return [record_type.from_document(doc) for doc in documents]

    async def read_all_cached(
        self, record_type: type[RecordT], cache_namespace: str | None = None
    ) -> list[RecordT]:
        """Every live cache entry of ``record_type``, without touching the store.

        Keys expiring between the listing and the read are skipped, and so are
        entries that no longer decode (logged at WARNING).
        """
        with operation_context("read_all_cached"):
            prefix = self._key(record_type.cache_prefix, cache_namespace)
            records: list[RecordT] = []
            for key in await self._cache.list_keys(prefix):
                value = await self._cache.get(key)
                if value is None:
                    continue
                try:
                    records.append(record_type.from_cache(key[len(prefix):], value))
                except SerializationError as e:
                    logger.warning("Ignoring undecodable cache entry %s: %s", key, e)
            return records

    async def read_parent(
        self,
        record: StorableRecord,
        parent_collection: str,
        parent_type: type[ParentT],
    ) -> ParentT:
        """Load the record that ``record``'s foreign key points at.

        Raises:
            ValueError: The record kind has no parent field.
            NotFoundError: The parent is not in ``parent_collection``.
        """
        parent_id = record.get_parent_id()
        if parent_id is None:
            raise ValueError(f"{type(record).__name__} has no parent field")
        with operation_context("read_parent", parent_collection):
            document = await self._documents.find_by_id(parent_collection, parent_id)
            if document is None:
                raise NotFoundError(parent_collection, parent_id)
            return parent_type.from_document(document)

    async def read_parents_of(
        self,
        child_type: type[StorableRecord],
        child_collection: str,
        child_ids: list[str],
        parent_collection: str,
        parent_type: type[ParentT],
    ) -> list[ParentT]:
        """Parents referenced by at least one of ``child_ids``."""
        if child_type.parent_field is None:
            raise ValueError(f"{child_type.__name__} has no parent field")
        with operation_context("read_parents_of", parent_collection):
            documents = await self._documents.find_referencing(
                parent_collection,
                child_collection,
                f"data.{child_type.parent_field}",
                list(child_ids),
            )
            return [parent_type.from_document(doc) for doc in documents]

    # --- Update ---

    async def update_one(
        self,
        collection: str,
        record: RecordT,
        ttl: int | None = None,
        cache_namespace: str | None = None,
    ) -> RecordT:
        """Overwrite the cache entry, then ``$set`` the stored payload.

        ``ttl`` overrides the Datastore default for this entry and must be > 0.
        """
        ttl = self._ttl(ttl)
        with operation_context("update_one", collection):
            document = record.to_document()
            await self._write_cache(record, ttl, cache_namespace)
            updated = await self._documents.update_by_id(
                collection, record.id, {"data": document["data"]}
            )
            if updated is None:
                logger.warning(
                    "Update of %s matched no stored document; cache now holds it alone",
                    record.id,
                )
            return record

    async def update_many(
        self,
        collection: str,
        patches: Mapping[str, RecordPatch],
        record_type: type[RecordT],
        ttl: int | None = None,
        cache_namespace: str | None = None,
    ) -> list[RecordT]:
        """Apply a patch per id; the cache is refreshed from the patched documents.

        Each id is written to the store first; its cache entry is rebuilt from
        the document the store returns.

        Raises:
            SerializationError: A patch names unknown fields or bad values.
            ValueError: ``ttl`` is zero or negative.
            NotFoundError: An id is not in the store. Earlier ids stay updated.
        """
        ttl = self._ttl(ttl)
        with operation_context("update_many", collection):
            validated = {
                record_id: patch.validate_for(record_type)
                for record_id, patch in patches.items()
            }
            updated: list[RecordT] = []
            for record_id, patch in validated.items():
                document = await self._documents.update_by_id(
                    collection, record_id, patch.to_set_document()
                )
                if document is None:
                    raise NotFoundError(collection, record_id)
                record = record_type.from_document(document)
                await self._write_cache(record, ttl, cache_namespace)
                updated.append(record)
            return updated

    # --- Delete ---

    async def delete(
        self,
        collection: str,
        record_id: str,
        record_type: type[StorableRecord],
        cache_namespace: str | None = None,
    ) -> None:
        """Delete from the store, then the cache. Absent ids are not an error."""
        with operation_context("delete", collection):
            removed = await self._documents.delete_by_id(collection, record_id)
            if removed is None:
                logger.debug("Delete of %s matched no stored document", record_id)
            await self._cache.delete(
                self._key(record_type.cache_key_for(record_id), cache_namespace)
            )

    async def delete_many(
        self,
        collection: str,
        record_ids: list[str],
        record_type: type[StorableRecord],
        cache_namespace: str | None = None,
    ) -> None:
        """Delete an id set from the store, then from the cache."""
        with operation_context("delete_many", collection):
            await self._documents.delete_by_ids(collection, list(record_ids))
            await self._cache.delete_many(
                [
                    self._key(record_type.cache_key_for(record_id), cache_namespace)
                    for record_id in record_ids
                ]
            )

    async def clear(self, collection: str) -> None:
        """Empty ``collection`` and flush the entire cache database.

        The cache flush is not scoped to ``collection`` or to the namespace:
        entries of every collection sharing the cache are dropped too.
        """
        with operation_context("clear", collection):
            deleted = await self._documents.delete_all(collection)
            logger.info(
                "Cleared %d document(s); flushing entire cache database", deleted
            )
            await self._cache.flush_all()

    # --- Lifecycle ---

    async def close(self) -> None:
        """Close both adapters."""
        await self._cache.close()
        await self._documents.close()

    async def __aenter__(self) -> Datastore:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
