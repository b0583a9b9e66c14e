# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides sample book/bookstore records, a controllable clock and Datastore
instances wired to the in-process memory backends. No external services.
"""

from __future__ import annotations

import pytest

from books_datastore.cache.memory_store import MemoryCacheStore
from books_datastore.core.models import Book, BookRecord, Bookstore, BookstoreRecord
from books_datastore.datastore.datastore import Datastore
from books_datastore.documents.memory_store import MemoryDocumentStore


class FakeClock:
    """Monotonic clock advanced by hand, for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# === FIXTURES: Sample data ===


@pytest.fixture
def sample_book() -> BookRecord:
    """Minimal valid BookRecord."""
    return BookRecord(
        id="b1",
        data=Book(name="Dune", author="Herrick", bookstore_id="s1"),
    )


@pytest.fixture
def sample_books() -> list[BookRecord]:
    """Three books; the last two share a bookstore."""
    return [
        BookRecord(
            id="b1", data=Book(name="Dune", author="Herrick", bookstore_id="s1")
        ),
        BookRecord(
            id="b2",
            data=Book(name="East of Eden", author="John Steinbeck", bookstore_id="s2"),
        ),
        BookRecord(
            id="b3",
            data=Book(
                name="The Grapes of Wrath", author="John Steinbeck", bookstore_id="s2"
            ),
        ),
    ]


@pytest.fixture
def sample_bookstores() -> list[BookstoreRecord]:
    return [
        BookstoreRecord(
            id="s1", data=Bookstore(name="Arrakis Books", address="1 Dune Rd", number="555-0101")
        ),
        BookstoreRecord(
            id="s2", data=Bookstore(name="Salinas Reads", address="2 Valley St", number="555-0102")
        ),
        BookstoreRecord(
            id="s3", data=Bookstore(name="Empty Shelf", address="3 Nowhere Ave", number="555-0103")
        ),
    ]


# === FIXTURES: Backends ===


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_cache(clock: FakeClock) -> MemoryCacheStore:
    return MemoryCacheStore(clock=clock)


@pytest.fixture
def memory_documents() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def datastore(
    memory_documents: MemoryDocumentStore, memory_cache: MemoryCacheStore
) -> Datastore:
    """Datastore over the memory backends, namespace 'books', no default TTL."""
    return Datastore(documents=memory_documents, cache=memory_cache)
