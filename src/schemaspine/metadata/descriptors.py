"""
Table, column and index descriptors.

Descriptors describe a table either as declared (parsed from an entity type)
or as found (read from the live catalog). They are frozen once built; the
only way to assemble one incrementally is :class:`TableBuilder`, whose
``build()`` checks the structural invariants before handing out an
immutable :class:`TableDescriptor`.

Manifesto:
    - **Immutable after build:** Cached descriptors are shared across threads
    - **Validated once:** Duplicate columns and dangling index references
      are rejected at build time, not at DDL time
    - **Zero means unspecified:** ``length``, ``precision`` and ``scale`` of 0
      defer to the dialect's fallback

Architecture:
    ::

        TableBuilder("orders")
          .add_column(ColumnDescriptor("id", LogicalType.INT64, primary_key=True))
          .add_column(ColumnDescriptor("sku", LogicalType.STRING, length=64))
          .add_index(IndexDescriptor("idx_orders_sku", ("sku",)))
          .build()  ──────────────▶  TableDescriptor (frozen)
                                       ├── columns            (declaration order)
                                       ├── indexes
                                       └── primary_key_columns

Guardrails:
    ❌ DON'T: Mutate a descriptor with object.__setattr__
    ✅ DO: Derive a variant with ``dataclasses.replace`` or ``with_changes``

Tags:
    metadata, descriptor, immutable, builder, schemaspine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from schemaspine.core.errors import MetadataError
from schemaspine.metadata.types import IndexKind, LogicalType


@dataclass(frozen=True, slots=True)
class ColumnDescriptor:
    """
    One column.

    ``raw_definition`` replaces every other derived attribute when rendering
    (the dialect emits ``<name> <raw_definition>``). ``native_type`` is an
    explicit vendor type on the declaration side and the catalog type on the
    introspection side.
    """

    name: str
    logical_type: LogicalType | None = None
    length: int = 0
    precision: int = 0
    scale: int = 0
    nullable: bool = True
    unique: bool = False
    auto_increment: bool = False
    primary_key: bool = False
    default_value: str | None = None
    comment: str | None = None
    raw_definition: str | None = None
    native_type: str | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise MetadataError("Column name must not be empty")
        for attr in ("length", "precision", "scale"):
            if getattr(self, attr) < 0:
                raise MetadataError(
                    f"Column {self.name}: {attr} must be >= 0, got {getattr(self, attr)}"
                )
        if self.logical_type is None and not self.native_type and not self.raw_definition:
            raise MetadataError(
                f"Column {self.name}: a logical type, native type or raw definition is required"
            )

    def with_changes(self, **changes: Any) -> ColumnDescriptor:
        return replace(self, **changes)


@dataclass(frozen=True, slots=True)
class IndexDescriptor:
    """One secondary index; ``columns`` keeps key order."""

    name: str
    columns: tuple[str, ...]
    unique: bool = False
    kind: IndexKind = IndexKind.BTREE
    comment: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise MetadataError("Index name must not be empty")
        if not isinstance(self.columns, tuple):
            object.__setattr__(self, "columns", tuple(self.columns))
        if not self.columns:
            raise MetadataError(f"Index {self.name} must reference at least one column")


@dataclass(frozen=True, slots=True)
class TableDescriptor:
    """A whole table. Build through :class:`TableBuilder`."""

    name: str
    columns: tuple[ColumnDescriptor, ...]
    indexes: tuple[IndexDescriptor, ...] = ()
    primary_key_columns: tuple[str, ...] = ()
    schema: str | None = None
    comment: str | None = None
    engine: str = "InnoDB"
    charset: str = "utf8mb4"
    collate: str | None = None
    auto_maintain: bool = True

    def __post_init__(self) -> None:
        for attr in ("columns", "indexes", "primary_key_columns"):
            value = getattr(self, attr)
            if not isinstance(value, tuple):
                object.__setattr__(self, attr, tuple(value))
        _validate_table(self)

    def column(self, name: str) -> ColumnDescriptor | None:
        """Case-insensitive column lookup."""
        wanted = name.lower()
        for col in self.columns:
            if col.name.lower() == wanted:
                return col
        return None

    def index(self, name: str) -> IndexDescriptor | None:
        """Case-insensitive index lookup."""
        wanted = name.lower()
        for idx in self.indexes:
            if idx.name.lower() == wanted:
                return idx
        return None

    @property
    def column_names(self) -> list[str]:
        return [col.name for col in self.columns]


def _validate_table(table: TableDescriptor) -> None:
    if not table.name or not table.name.strip():
        raise MetadataError("Table name must not be empty")

    seen: set[str] = set()
    for col in table.columns:
        key = col.name.lower()
        if key in seen:
            raise MetadataError(f"Duplicate column {col.name} in table {table.name}")
        seen.add(key)

    for pk in table.primary_key_columns:
        if pk.lower() not in seen:
            raise MetadataError(
                f"Primary key column {pk} is not a column of table {table.name}"
            )

    index_names: set[str] = set()
    for idx in table.indexes:
        if idx.name.lower() in index_names:
            raise MetadataError(f"Duplicate index {idx.name} in table {table.name}")
        index_names.add(idx.name.lower())
        for col_name in idx.columns:
            if col_name.lower() not in seen:
                raise MetadataError(
                    f"Index {idx.name} references unknown column {col_name} "
                    f"in table {table.name}"
                )


@dataclass
class TableBuilder:
    """
    Mutable assembly surface for :class:`TableDescriptor`.

    Primary key columns are forced non-nullable; ``add_column`` with
    ``primary_key=True`` also registers the column in the key.

    Example:
        >>> table = (
        ...     TableBuilder("sys_user")
        ...     .add_column(ColumnDescriptor("id", LogicalType.INT64, primary_key=True))
        ...     .add_column(ColumnDescriptor("username", LogicalType.STRING, length=50))
        ...     .build()
        ... )
        >>> table.primary_key_columns
        ('id',)
    """

    name: str
    schema: str | None = None
    comment: str | None = None
    engine: str = "InnoDB"
    charset: str = "utf8mb4"
    collate: str | None = None
    auto_maintain: bool = True
    _columns: list[ColumnDescriptor] = field(default_factory=list)
    _indexes: list[IndexDescriptor] = field(default_factory=list)
    _primary_key: list[str] = field(default_factory=list)

    def add_column(self, column: ColumnDescriptor) -> TableBuilder:
        if column.primary_key:
            if column.nullable:
                column = column.with_changes(nullable=False)
            if column.name not in self._primary_key:
                self._primary_key.append(column.name)
        self._columns.append(column)
        return self

    def add_index(self, index: IndexDescriptor) -> TableBuilder:
        self._indexes.append(index)
        return self

    def add_primary_key(self, column_name: str) -> TableBuilder:
        """Mark an already added column as part of the primary key."""
        for pos, col in enumerate(self._columns):
            if col.name.lower() == column_name.lower():
                self._columns[pos] = col.with_changes(primary_key=True, nullable=False)
                if col.name not in self._primary_key:
                    self._primary_key.append(col.name)
                return self
        raise MetadataError(
            f"Primary key column {column_name} is not a column of table {self.name}"
        )

    def build(self) -> TableDescriptor:
        return TableDescriptor(
            name=self.name,
            columns=tuple(self._columns),
            indexes=tuple(self._indexes),
            primary_key_columns=tuple(self._primary_key),
            schema=self.schema,
            comment=self.comment,
            engine=self.engine,
            charset=self.charset,
            collate=self.collate,
            auto_maintain=self.auto_maintain,
        )


__all__ = [
    "ColumnDescriptor",
    "IndexDescriptor",
    "TableDescriptor",
    "TableBuilder",
]
