"""Vendor-neutral type vocabulary.

``LogicalType`` is what entity declarations speak; each dialect maps it to a
native column type. ``IndexKind`` and ``GenerationType`` mirror the index and
identity options an entity can declare.
"""

from __future__ import annotations

from enum import Enum


class LogicalType(str, Enum):
    """Logical column types."""

    STRING = "STRING"       # variable length text
    CHAR = "CHAR"           # fixed length text
    TEXT = "TEXT"           # unbounded text
    INT8 = "INT8"
    INT16 = "INT16"
    INT32 = "INT32"
    INT64 = "INT64"
    FLOAT32 = "FLOAT32"
    FLOAT64 = "FLOAT64"
    DECIMAL = "DECIMAL"
    BOOLEAN = "BOOLEAN"
    DATE = "DATE"
    DATETIME = "DATETIME"
    TIME = "TIME"
    BINARY = "BINARY"


class IndexKind(str, Enum):
    """Index access methods."""

    BTREE = "BTREE"
    HASH = "HASH"
    FULLTEXT = "FULLTEXT"
    SPATIAL = "SPATIAL"


class GenerationType(str, Enum):
    """Primary key generation strategies."""

    AUTO = "AUTO"
    IDENTITY = "IDENTITY"
    SEQUENCE = "SEQUENCE"
    ASSIGNED = "ASSIGNED"
    UUID = "UUID"

    @property
    def auto_increment(self) -> bool:
        return self in (GenerationType.AUTO, GenerationType.IDENTITY)


__all__ = [
    "LogicalType",
    "IndexKind",
    "GenerationType",
]
