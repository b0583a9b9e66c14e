# tests/unit/documents/test_unit_memory_document_store.py — v1
"""Tests for documents/memory_store.py — dict-backed document store."""

from __future__ import annotations

import pytest

from books_datastore.core.errors import CommandError


def _doc(record_id: str, **data) -> dict:
    return {"_id": record_id, "data": data}


class TestInsert:
    @pytest.mark.asyncio
    async def test_insert_and_find(self, memory_documents):
        assert await memory_documents.insert_one("books", _doc("b1", name="Dune")) == "b1"
        assert await memory_documents.find_by_id("books", "b1") == _doc("b1", name="Dune")

    @pytest.mark.asyncio
    async def test_duplicate_key(self, memory_documents):
        await memory_documents.insert_one("books", _doc("b1"))
        with pytest.raises(CommandError, match="Duplicate"):
            await memory_documents.insert_one("books", _doc("b1"))

    @pytest.mark.asyncio
    async def test_missing_id(self, memory_documents):
        with pytest.raises(CommandError, match="_id"):
            await memory_documents.insert_one("books", {"data": {}})

    @pytest.mark.asyncio
    async def test_insert_many_is_ordered(self, memory_documents):
        with pytest.raises(CommandError):
            await memory_documents.insert_many(
                "books", [_doc("b1"), _doc("b2"), _doc("b1"), _doc("b3")]
            )
        remaining = {doc["_id"] for doc in await memory_documents.find_all("books")}
        assert remaining == {"b1", "b2"}

    @pytest.mark.asyncio
    async def test_collections_are_isolated(self, memory_documents):
        await memory_documents.insert_one("books", _doc("x"))
        assert await memory_documents.find_by_id("bookstores", "x") is None

    @pytest.mark.asyncio
    async def test_stored_copy_is_detached(self, memory_documents):
        document = _doc("b1", name="Dune")
        await memory_documents.insert_one("books", document)
        document["data"]["name"] = "mutated"
        found = await memory_documents.find_by_id("books", "b1")
        assert found["data"]["name"] == "Dune"


class TestRead:
    @pytest.mark.asyncio
    async def test_find_by_ids(self, memory_documents):
        await memory_documents.insert_many("books", [_doc("b1"), _doc("b2"), _doc("b3")])
        found = await memory_documents.find_by_ids("books", ["b1", "b3", "zz"])
        assert sorted(doc["_id"] for doc in found) == ["b1", "b3"]

    @pytest.mark.asyncio
    async def test_find_all_empty(self, memory_documents):
        assert await memory_documents.find_all("books") == []

    @pytest.mark.asyncio
    async def test_find_referencing(self, memory_documents):
        await memory_documents.insert_many(
            "bookstores", [_doc("s1"), _doc("s2"), _doc("s3")]
        )
        await memory_documents.insert_many(
            "books",
            [_doc("b1", bookstore_id="s1"), _doc("b2", bookstore_id="s2")],
        )
        parents = await memory_documents.find_referencing(
            "bookstores", "books", "data.bookstore_id", ["b2", "unknown"]
        )
        assert [doc["_id"] for doc in parents] == ["s2"]


class TestUpdate:
    @pytest.mark.asyncio
    async def test_dotted_set(self, memory_documents):
        await memory_documents.insert_one("books", _doc("b1", name="Dune", author="X"))
        updated = await memory_documents.update_by_id("books", "b1", {"data.name": "Dune Messiah"})
        assert updated == _doc("b1", name="Dune Messiah", author="X")

    @pytest.mark.asyncio
    async def test_replace_subdocument(self, memory_documents):
        await memory_documents.insert_one("books", _doc("b1", name="Dune", author="X"))
        updated = await memory_documents.update_by_id("books", "b1", {"data": {"name": "Y"}})
        assert updated == _doc("b1", name="Y")

    @pytest.mark.asyncio
    async def test_no_match_returns_none(self, memory_documents):
        assert await memory_documents.update_by_id("books", "nope", {"data.name": "x"}) is None

    @pytest.mark.asyncio
    async def test_id_is_immutable(self, memory_documents):
        await memory_documents.insert_one("books", _doc("b1"))
        with pytest.raises(CommandError, match="immutable"):
            await memory_documents.update_by_id("books", "b1", {"_id": "b2"})


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_by_id_returns_document(self, memory_documents):
        await memory_documents.insert_one("books", _doc("b1"))
        assert await memory_documents.delete_by_id("books", "b1") == _doc("b1")
        assert await memory_documents.delete_by_id("books", "b1") is None

    @pytest.mark.asyncio
    async def test_delete_by_ids_counts(self, memory_documents):
        await memory_documents.insert_many("books", [_doc("b1"), _doc("b2")])
        assert await memory_documents.delete_by_ids("books", ["b1", "b2", "b3"]) == 2

    @pytest.mark.asyncio
    async def test_delete_all(self, memory_documents):
        await memory_documents.insert_many("books", [_doc("b1"), _doc("b2")])
        await memory_documents.insert_one("bookstores", _doc("s1"))
        assert await memory_documents.delete_all("books") == 2
        assert await memory_documents.find_all("books") == []
        assert await memory_documents.find_by_id("bookstores", "s1") is not None
