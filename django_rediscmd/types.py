"""Type aliases and value objects for django-rediscmd.

Key and value aliases are compatible with redis-py and valkey-py type
systems, defined locally to avoid a runtime dependency on either library
for type annotations.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import StrEnum
from typing import Any, NamedTuple, TypeAlias

# =============================================================================
# Types matching redis-py / valkey-py
# =============================================================================

# Key types - str keys are sent UTF-8 encoded
KeyT: TypeAlias = str | bytes

# Raw byte values, passed through unchanged
BytesT: TypeAlias = bytes | bytearray | memoryview

# Numeric values, sent as canonical decimal text
NumberT: TypeAlias = int | float | Decimal

# Anything a command accepts as a value; non-text, non-numeric objects are serialized
ValueT: TypeAlias = BytesT | str | NumberT | Any


class ResponseShape(StrEnum):
    """Reply shapes a command can declare and a connector can report."""

    NONE = "none"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    BULK = "bulk"
    MULTI_BULK = "multi_bulk"
    MULTI_BULK_WITH_SCORES = "multi_bulk_with_scores"
    STATUS = "status"
    MAPPING = "mapping"


class KeyType(StrEnum):
    """Redis key data types, as returned by ``TYPE``."""

    NONE = "none"
    STRING = "string"
    LIST = "list"
    SET = "set"
    ZSET = "zset"
    HASH = "hash"


class RawResult(NamedTuple):
    """A reply as handed back by a connector, tagged with its shape."""

    shape: ResponseShape
    value: Any


class ScoredEntry(NamedTuple):
    """A sorted-set member together with its score."""

    member: bytes
    score: float


@dataclass(frozen=True)
class ObjectInfo:
    """Parsed ``DEBUG OBJECT`` reply.

    Only the fields every server version reports get attributes; the full
    reply is available in ``fields``.
    """

    refcount: int | None
    encoding: str | None
    serialized_length: int | None
    lru_seconds_idle: int | None
    fields: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_status(cls, status: str) -> ObjectInfo:
        fields: dict[str, str] = {}
        for token in status.split():
            name, sep, value = token.partition(":")
            if sep:
                fields[name] = value

        def _int(name: str) -> int | None:
            value = fields.get(name)
            return int(value) if value is not None and value.lstrip("-").isdigit() else None

        return cls(
            refcount=_int("refcount"),
            encoding=fields.get("encoding"),
            serialized_length=_int("serializedlength"),
            lru_seconds_idle=_int("lru_seconds_idle"),
            fields=fields,
        )


class ServerInfo(Mapping[str, str]):
    """Read-only view over an ``INFO`` reply."""

    def __init__(self, fields: Mapping[str, str]) -> None:
        self._fields = dict(fields)

    @classmethod
    def from_text(cls, text: str) -> ServerInfo:
        fields: dict[str, str] = {}
        for line in text.splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            name, sep, value = line.partition(":")
            if sep:
                fields[name] = value
        return cls(fields)

    def __getitem__(self, name: str) -> str:
        return self._fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"ServerInfo({self._fields!r})"

    @property
    def role(self) -> str | None:
        return self._fields.get("role")

    @property
    def version(self) -> str | None:
        return self._fields.get("redis_version")
