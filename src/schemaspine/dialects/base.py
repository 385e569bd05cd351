"""DDL dialect abstraction.

Every supported database is one ``Dialect``: a stateless object that renders
table descriptors into vendor SQL and produces the catalog queries the
inspector runs. The diff engine and the executor only ever talk to this
contract, so adding a vendor means adding a dialect and a registry entry.

Manifesto:
    DDL differs between vendors in a handful of well-known places: identifier
    quoting, auto-increment syntax, where comments live, type names and the
    precision a type gets when none is declared. Everything else (column
    ordering, constraint layout, statement order) is shared.

    - **Pure:** No I/O, no state; safe to share across threads
    - **Closed variance:** Vendor differences are class attributes and a few
      overridden methods on ``BaseDialect``
    - **Uniform rows:** Catalog queries alias their columns so the inspector
      reads every vendor the same way

Architecture::

    ┌──────────────────────────────────────────────────────────────────┐
    │                         BaseDialect                               │
    │  column_definition · generate_* · introspection query shape       │
    └──────────────────────────────────────────────────────────────────┘
          │            │              │             │            │
    ┌──────────┐ ┌────────────┐ ┌────────────┐ ┌──────────┐ ┌──────────┐
    │  MySQL   │ │ PostgreSQL │ │ SQL Server │ │  Oracle  │ │    H2    │
    │ `a``b`   │ │ "a""b"     │ │ [a]]b]     │ │ "a""b"   │ │ `a``b`   │
    │ AUTO_INC │ │ IDENTITY   │ │ IDENTITY   │ │ (none)   │ │ IDENTITY │
    │ inline   │ │ COMMENT ON │ │ ext. prop  │ │COMMENT ON│ │ inline   │
    └──────────┘ └────────────┘ └────────────┘ └──────────┘ └──────────┘

Introspection row shape (lower-case aliases):
    columns      column_name, data_type, char_length, numeric_precision,
                 numeric_scale, is_nullable, column_default, column_comment,
                 is_auto_increment
    indexes      index_name, column_name, is_unique, index_kind, ordinal
    primary key  column_name, ordinal
    exists       table_count

Guardrails:
    ❌ DON'T: Branch on vendor names in the differ or executor
    ✅ DO: Add a dialect method and override it per vendor

    ❌ DON'T: Interpolate names into catalog queries unescaped
    ✅ DO: Use ``literal()`` which doubles embedded single quotes

Tags:
    dialect, ddl, sql, portability, database, schemaspine, multi-backend

Doc-Types:
    - API Reference
    - Architecture Documentation
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from schemaspine.metadata.descriptors import ColumnDescriptor, IndexDescriptor, TableDescriptor
from schemaspine.metadata.types import IndexKind, LogicalType

_PARENS = re.compile(r"\(.*\)")
_SPACES = re.compile(r"\s+")


@runtime_checkable
class Dialect(Protocol):
    """DDL dialect contract.

    Methods that take ``schema`` accept None for "the connection's default".
    Every method is pure and returns SQL text (or a list of statements).
    """

    @property
    def name(self) -> str:
        """Registry name (e.g. ``'mysql'``)."""
        ...

    # -- DDL statements ----------------------------------------------------

    def generate_create_table(self, table: TableDescriptor) -> str: ...

    def generate_add_column(
        self, table: str, column: ColumnDescriptor, schema: str | None = None
    ) -> str: ...

    def generate_modify_column(
        self,
        table: str,
        column: ColumnDescriptor,
        schema: str | None = None,
        previous: ColumnDescriptor | None = None,
    ) -> str: ...

    def generate_drop_column(self, table: str, column_name: str, schema: str | None = None) -> str: ...

    def generate_create_index(self, table: str, index: IndexDescriptor, schema: str | None = None) -> str: ...

    def generate_drop_index(self, table: str, index_name: str, schema: str | None = None) -> str: ...

    def comment_statements(self, table: TableDescriptor) -> list[str]:
        """Follow-up statements persisting comments a CREATE TABLE cannot carry."""
        ...

    def column_comment_statements(
        self, table: str, column: ColumnDescriptor, schema: str | None = None
    ) -> list[str]: ...

    # -- Catalog queries ---------------------------------------------------

    def table_exists_query(self, table: str, schema: str | None = None) -> str: ...

    def schema_introspection_query(self, table: str, schema: str | None = None) -> str: ...

    def index_introspection_query(self, table: str, schema: str | None = None) -> str: ...

    def primary_key_introspection_query(self, table: str, schema: str | None = None) -> str: ...

    # -- Fragments ---------------------------------------------------------

    def map_logical_type(
        self, logical_type: LogicalType, length: int = 0, precision: int = 0, scale: int = 0
    ) -> str: ...

    def escape_identifier(self, name: str) -> str: ...

    def auto_increment_fragment(self) -> str: ...

    def primary_key_fragment(self, columns: Sequence[str]) -> str: ...

    def unique_fragment(self, columns: Sequence[str]) -> str: ...

    def not_null_fragment(self) -> str: ...

    def default_value_fragment(self, value: str) -> str: ...

    def comment_fragment(self, comment: str | None) -> str: ...

    # -- Comparison helpers ------------------------------------------------

    def column_type(self, column: ColumnDescriptor) -> str: ...

    def catalog_type(self, column: ColumnDescriptor) -> str: ...

    def canonical_type(self, native: str) -> str: ...

    def effective_index_kind(self, kind: IndexKind) -> IndexKind: ...

    def index_kind_from_catalog(self, value: str | None) -> IndexKind: ...


# =========================================================================
# Shared implementation
# =========================================================================


class BaseDialect:
    """Shared rendering. Subclasses set the class attributes and override
    the handful of statements whose shape differs."""

    dialect_name: str = ""
    product_names: tuple[str, ...] = ()

    # Native type names per logical type.
    type_names: dict[LogicalType, str] = {}
    # Fallback length for length-bearing types when none is declared.
    default_lengths: dict[LogicalType, int] = {
        LogicalType.STRING: 255,
        LogicalType.CHAR: 1,
    }
    # Fallback (precision, scale) for DECIMAL; None renders the bare type name.
    default_decimal: tuple[int, int] | None = (10, 2)
    # Catalog type spellings folded onto the names this dialect renders.
    type_aliases: dict[str, str] = {}
    # Index kinds the vendor honours; others collapse to BTREE.
    supported_index_kinds: frozenset[IndexKind] = frozenset({IndexKind.BTREE})

    auto_increment_sql: str = ""
    auto_increment_before_not_null: bool = False
    add_column_keyword: str = "ADD COLUMN"
    inline_comments: bool = False

    @property
    def name(self) -> str:
        return self.dialect_name

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    # -- Identifiers and literals -----------------------------------------

    def escape_identifier(self, name: str) -> str:
        return '"' + name.replace('"', '""') + '"'

    def literal(self, value: str) -> str:
        """Single-quoted SQL string literal."""
        return "'" + value.replace("'", "''") + "'"

    def qualified_name(self, table: str, schema: str | None = None) -> str:
        if schema:
            return f"{self.escape_identifier(schema)}.{self.escape_identifier(table)}"
        return self.escape_identifier(table)

    def _column_list(self, columns: Sequence[str]) -> str:
        return ", ".join(self.escape_identifier(col) for col in columns)

    # -- Fragments ---------------------------------------------------------

    def auto_increment_fragment(self) -> str:
        return self.auto_increment_sql

    def primary_key_fragment(self, columns: Sequence[str]) -> str:
        return f"PRIMARY KEY ({self._column_list(columns)})"

    def unique_fragment(self, columns: Sequence[str]) -> str:
        return f"UNIQUE ({self._column_list(columns)})"

    def not_null_fragment(self) -> str:
        return "NOT NULL"

    def default_value_fragment(self, value: str) -> str:
        return f"DEFAULT {value}"

    def comment_fragment(self, comment: str | None) -> str:
        if not self.inline_comments or not comment:
            return ""
        return f"COMMENT {self.literal(comment)}"

    # -- Types -------------------------------------------------------------

    def map_logical_type(
        self, logical_type: LogicalType, length: int = 0, precision: int = 0, scale: int = 0
    ) -> str:
        base = self.type_names[logical_type]
        if logical_type in self.default_lengths:
            return f"{base}({length or self.default_lengths[logical_type]})"
        if logical_type is LogicalType.DECIMAL:
            if precision > 0:
                return f"{base}({precision},{scale})"
            if self.default_decimal is not None:
                return f"{base}({self.default_decimal[0]},{self.default_decimal[1]})"
        return base

    def column_type(self, column: ColumnDescriptor) -> str:
        if column.native_type:
            return column.native_type
        if column.logical_type is None:
            raise ValueError(f"Column {column.name} has no type")
        return self.map_logical_type(
            column.logical_type, column.length, column.precision, column.scale
        )

    def catalog_type(self, column: ColumnDescriptor) -> str:
        """Type of a column read from the catalog, as compared against the model."""
        return column.native_type or self.column_type(column)

    def canonical_type(self, native: str) -> str:
        """Type name without size arguments, upper-cased, aliases folded."""
        base = _SPACES.sub(" ", _PARENS.sub("", native)).strip().upper()
        return self.type_aliases.get(base, base)

    def effective_index_kind(self, kind: IndexKind) -> IndexKind:
        return kind if kind in self.supported_index_kinds else IndexKind.BTREE

    def index_kind_from_catalog(self, value: str | None) -> IndexKind:
        if value:
            try:
                return self.effective_index_kind(IndexKind(value.strip().upper()))
            except ValueError:
                pass
        return IndexKind.BTREE

    # -- Column definitions ------------------------------------------------

    def column_definition(self, column: ColumnDescriptor, *, inline_unique: bool = False) -> str:
        """``<name> <type> [constraints]``, or ``<name> <raw>`` for raw definitions."""
        name = self.escape_identifier(column.name)
        if column.raw_definition:
            return f"{name} {column.raw_definition}"

        parts = [name, self.column_type(column)]
        auto = self.auto_increment_fragment() if column.auto_increment else ""
        if auto and self.auto_increment_before_not_null:
            parts.append(auto)
        if not column.nullable:
            parts.append(self.not_null_fragment())
        if auto and not self.auto_increment_before_not_null:
            parts.append(auto)
        if column.default_value is not None:
            parts.append(self.default_value_fragment(column.default_value))
        if inline_unique and column.unique and not column.primary_key:
            parts.append("UNIQUE")
        comment = self.comment_fragment(column.comment)
        if comment:
            parts.append(comment)
        return " ".join(parts)

    # -- CREATE TABLE ------------------------------------------------------

    def create_table_prefix(self, table: TableDescriptor) -> str:
        return f"CREATE TABLE {self.qualified_name(table.name, table.schema)}"

    def table_options(self, table: TableDescriptor) -> str:
        return ""

    def generate_create_table(self, table: TableDescriptor) -> str:
        lines = [f"  {self.column_definition(col)}" for col in table.columns]
        if table.primary_key_columns:
            lines.append(f"  {self.primary_key_fragment(table.primary_key_columns)}")
        for col in table.columns:
            if col.unique and not col.primary_key and not col.raw_definition:
                lines.append(f"  {self.unique_fragment([col.name])}")
        body = ",\n".join(lines)
        return f"{self.create_table_prefix(table)} (\n{body}\n){self.table_options(table)}"

    # -- ALTER TABLE -------------------------------------------------------

    def generate_add_column(
        self, table: str, column: ColumnDescriptor, schema: str | None = None
    ) -> str:
        return (
            f"ALTER TABLE {self.qualified_name(table, schema)} {self.add_column_keyword} "
            f"{self.column_definition(column, inline_unique=True)}"
        )

    def generate_modify_column(
        self,
        table: str,
        column: ColumnDescriptor,
        schema: str | None = None,
        previous: ColumnDescriptor | None = None,
    ) -> str:
        return (
            f"ALTER TABLE {self.qualified_name(table, schema)} ALTER COLUMN "
            f"{self.column_definition(column)}"
        )

    def generate_drop_column(self, table: str, column_name: str, schema: str | None = None) -> str:
        return (
            f"ALTER TABLE {self.qualified_name(table, schema)} DROP COLUMN "
            f"{self.escape_identifier(column_name)}"
        )

    # -- Indexes -----------------------------------------------------------

    def generate_create_index(self, table: str, index: IndexDescriptor, schema: str | None = None) -> str:
        unique = "UNIQUE " if index.unique else ""
        return (
            f"CREATE {unique}INDEX {self.escape_identifier(index.name)} "
            f"ON {self.qualified_name(table, schema)} ({self._column_list(index.columns)})"
        )

    def generate_drop_index(self, table: str, index_name: str, schema: str | None = None) -> str:
        return f"DROP INDEX {self.escape_identifier(index_name)}"

    # -- Comments ----------------------------------------------------------

    def comment_statements(self, table: TableDescriptor) -> list[str]:
        return []

    def column_comment_statements(
        self, table: str, column: ColumnDescriptor, schema: str | None = None
    ) -> list[str]:
        return []

    # -- Catalog queries ---------------------------------------------------

    def table_exists_query(self, table: str, schema: str | None = None) -> str:
        raise NotImplementedError

    def schema_introspection_query(self, table: str, schema: str | None = None) -> str:
        raise NotImplementedError

    def index_introspection_query(self, table: str, schema: str | None = None) -> str:
        raise NotImplementedError

    def primary_key_introspection_query(self, table: str, schema: str | None = None) -> str:
        raise NotImplementedError


class CommentOnDialect(BaseDialect):
    """Dialects that persist comments with ``COMMENT ON ... IS``."""

    def comment_statements(self, table: TableDescriptor) -> list[str]:
        statements = []
        qualified = self.qualified_name(table.name, table.schema)
        if table.comment:
            statements.append(f"COMMENT ON TABLE {qualified} IS {self.literal(table.comment)}")
        for col in table.columns:
            statements.extend(self.column_comment_statements(table.name, col, table.schema))
        return statements

    def column_comment_statements(
        self, table: str, column: ColumnDescriptor, schema: str | None = None
    ) -> list[str]:
        if not column.comment:
            return []
        target = f"{self.qualified_name(table, schema)}.{self.escape_identifier(column.name)}"
        return [f"COMMENT ON COLUMN {target} IS {self.literal(column.comment)}"]


__all__ = [
    "Dialect",
    "BaseDialect",
    "CommentOnDialect",
]
