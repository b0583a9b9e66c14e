# src/core/models.py — v1
"""Record models: the storable-record contract, book domain payloads, patches
and the Hit/Miss read wrapper.

Every type that flows through the Datastore subclasses StorableRecord. The
store holds ``{"_id": id, "data": payload}``; the cache holds the payload JSON
under ``cache_prefix + id``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from books_datastore.core.errors import SerializationError

PayloadT = TypeVar("PayloadT", bound=BaseModel)
RecordT = TypeVar("RecordT", bound="StorableRecord")


# === STORABLE RECORD CONTRACT ===


class StorableRecord(BaseModel, Generic[PayloadT]):
    """Identifiable record with a serializable payload.

    Subclasses bind the payload type and set ``cache_prefix`` so that keys of
    different record kinds never collide in a shared cache.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    cache_prefix: ClassVar[str] = "record_"
    parent_field: ClassVar[str | None] = None

    id: str = Field(alias="_id", min_length=1)
    data: PayloadT

    def get_id(self) -> str:
        return self.id

    def get_payload(self) -> PayloadT:
        return self.data

    def get_parent_id(self) -> str | None:
        """Foreign key to the parent record, if this kind has one."""
        if self.parent_field is None:
            return None
        return getattr(self.data, self.parent_field)

    @classmethod
    def payload_type(cls) -> type[BaseModel]:
        return cls.model_fields["data"].annotation  # type: ignore[return-value]

    @classmethod
    def cache_key_for(cls, record_id: str) -> str:
        """Derive the cache key for an id without building a record."""
        return f"{cls.cache_prefix}{record_id}"

    def derive_cache_key(self) -> str:
        return self.cache_key_for(self.id)

    def serialize_for_cache(self) -> tuple[str, str]:
        """Return ``(key, payload_json)`` ready for a cache SET.

        Raises:
            SerializationError: If the payload cannot be dumped to JSON.
        """
        try:
            value = self.data.model_dump_json()
        except PydanticSerializationError as e:
            raise SerializationError(
                f"Cannot serialize payload of {self.id!r}: {e}"
            ) from e
        return self.derive_cache_key(), value

    def to_document(self) -> dict[str, Any]:
        """Store document: ``{"_id": ..., "data": {...}}``."""
        try:
            return self.model_dump(by_alias=True, mode="json")
        except PydanticSerializationError as e:
            raise SerializationError(
                f"Cannot serialize record {self.id!r}: {e}"
            ) from e

    @classmethod
    def from_cache(cls: type[RecordT], record_id: str, value: str) -> RecordT:
        """Rebuild a record from its id and cached payload JSON."""
        try:
            return cls.model_validate({"_id": record_id, "data": json.loads(value)})
        except (json.JSONDecodeError, TypeError, ValidationError) as e:
            raise SerializationError(
                f"Cannot decode cached {cls.__name__} {record_id!r}: {e}"
            ) from e

    @classmethod
    def from_document(cls: type[RecordT], document: dict[str, Any]) -> RecordT:
        """Rebuild a record from a store document."""
        try:
            return cls.model_validate(document)
        except ValidationError as e:
            raise SerializationError(
                f"Cannot decode {cls.__name__} document "
                f"{document.get('_id')!r}: {e}"
            ) from e


# === BOOK DOMAIN ===


class Book(BaseModel):
    """Book payload; ``bookstore_id`` points at the owning bookstore."""

    name: str
    author: str
    bookstore_id: str


class Bookstore(BaseModel):
    """Bookstore payload."""

    name: str
    address: str
    number: str


class BookRecord(StorableRecord[Book]):
    cache_prefix: ClassVar[str] = "book_"
    parent_field: ClassVar[str | None] = "bookstore_id"


class BookstoreRecord(StorableRecord[Bookstore]):
    cache_prefix: ClassVar[str] = "bookstore_"


# === PARTIAL UPDATES ===


class RecordPatch(BaseModel):
    """Explicit partial update naming the payload fields that change."""

    changes: dict[str, Any] = Field(min_length=1)

    def validate_for(self, record_type: type[StorableRecord]) -> RecordPatch:
        """Check field names and value types against the record's payload.

        Raises:
            SerializationError: Unknown field or value of the wrong type.
        """
        fields = record_type.payload_type().model_fields
        unknown = sorted(set(self.changes) - set(fields))
        if unknown:
            raise SerializationError(
                f"Patch names unknown {record_type.__name__} fields: {unknown}"
            )
        validated: dict[str, Any] = {}
        for name, value in self.changes.items():
            try:
                validated[name] = TypeAdapter(fields[name].annotation).validate_python(value)
            except ValidationError as e:
                raise SerializationError(
                    f"Invalid value for {record_type.__name__}.{name}: {e}"
                ) from e
        return RecordPatch(changes=validated)

    def to_set_document(self) -> dict[str, Any]:
        """Dotted ``$set`` document scoped to the payload."""
        return {f"data.{name}": value for name, value in self.changes.items()}


# === READ RESULT ===


class CacheState(str, Enum):
    HIT = "hit"
    MISS = "miss"


@dataclass(frozen=True)
class Cached(Generic[RecordT]):
    """Read result tagged with where the value came from."""

    state: CacheState
    data: RecordT

    @classmethod
    def hit(cls, data: RecordT) -> Cached[RecordT]:
        return cls(CacheState.HIT, data)

    @classmethod
    def miss(cls, data: RecordT) -> Cached[RecordT]:
        return cls(CacheState.MISS, data)

    @property
    def is_hit(self) -> bool:
        return self.state is CacheState.HIT

    @property
    def is_miss(self) -> bool:
        return self.state is CacheState.MISS
