"""
Schema inspector.

Reads the live catalog through the dialect's introspection queries and
assembles a current :class:`TableDescriptor`. A missing table is reported as
the :data:`ABSENT` sentinel, never as an empty descriptor, because the differ
creates absent tables but never mistakes an empty one for a new one.

Manifesto:
    - **One shape for every vendor:** Dialect queries alias catalog columns,
      so parsing here has no vendor branches
    - **Physical order:** Index columns are ordered by catalog ordinal
    - **Wrapped failures:** Any driver error becomes ``IntrospectionError``

Architecture:
    ::

        inspect(conn, "orders")
          ├── table_exists_query           → 0 → ABSENT
          ├── schema_introspection_query   → ColumnDescriptor per row
          ├── primary_key_introspection    → primary_key_columns
          └── index_introspection_query    → rows grouped by index name

Tags:
    introspection, catalog, information-schema, schemaspine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from typing import Any, Final

from schemaspine.core.errors import IntrospectionError, MetadataError
from schemaspine.core.logging import get_logger
from schemaspine.core.protocols import Connection
from schemaspine.dialects.base import Dialect
from schemaspine.metadata.descriptors import (
    ColumnDescriptor,
    IndexDescriptor,
    TableBuilder,
    TableDescriptor,
)

logger = get_logger(__name__)


class _Absent:
    """Sentinel type for a table that does not exist."""

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT: Final = _Absent()


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().upper() in ("YES", "Y", "TRUE", "1")


def _size(value: Any) -> int:
    """Catalog sizes: None and SQL Server's -1 (MAX) mean unspecified."""
    if value is None:
        return 0
    try:
        size = int(value)
    except (TypeError, ValueError):
        return 0
    return size if size > 0 else 0


class SchemaInspector:
    """Reads one table's live structure through a dialect."""

    def __init__(self, dialect: Dialect):
        self._dialect = dialect

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    def _query(self, conn: Connection, sql: str, table: str, schema: str | None) -> list[dict[str, Any]]:
        try:
            return conn.query(sql)
        except Exception as exc:
            raise IntrospectionError(
                f"Failed to read catalog for table {table}: {exc}", cause=exc
            ).with_context(table=table, schema=schema, dialect=self._dialect.name, statement=sql) from exc

    def table_exists(self, conn: Connection, table: str, schema: str | None = None) -> bool:
        rows = self._query(conn, self._dialect.table_exists_query(table, schema), table, schema)
        if not rows:
            return False
        row = rows[0]
        count = row.get("table_count", next(iter(row.values()), 0))
        return _size(count) > 0

    def inspect(
        self, conn: Connection, table: str, schema: str | None = None
    ) -> TableDescriptor | _Absent:
        """Current descriptor of ``table``, or :data:`ABSENT`."""
        if not self.table_exists(conn, table, schema):
            logger.debug("table.absent", table=table, schema=schema)
            return ABSENT

        dialect = self._dialect
        column_rows = self._query(conn, dialect.schema_introspection_query(table, schema), table, schema)
        pk_rows = self._query(conn, dialect.primary_key_introspection_query(table, schema), table, schema)
        index_rows = self._query(conn, dialect.index_introspection_query(table, schema), table, schema)

        pk_rows = sorted(pk_rows, key=lambda r: _size(r.get("ordinal")))
        primary_key = [str(r["column_name"]) for r in pk_rows]
        pk_lookup = {name.lower() for name in primary_key}

        builder = TableBuilder(name=table, schema=schema)
        try:
            for row in column_rows:
                name = str(row["column_name"])
                default = row.get("column_default")
                builder.add_column(
                    ColumnDescriptor(
                        name=name,
                        native_type=str(row["data_type"]),
                        length=_size(row.get("char_length")),
                        precision=_size(row.get("numeric_precision")),
                        scale=_size(row.get("numeric_scale")),
                        nullable=_flag(row.get("is_nullable")),
                        auto_increment=_flag(row.get("is_auto_increment")),
                        primary_key=name.lower() in pk_lookup,
                        default_value=None if default is None else str(default).strip(),
                        comment=row.get("column_comment") or None,
                    )
                )
            for index in self._group_indexes(index_rows):
                builder.add_index(index)
            descriptor = builder.build()
        except (KeyError, ValueError, MetadataError) as exc:
            raise IntrospectionError(
                f"Unexpected catalog row shape for table {table}: {exc}", cause=exc
            ).with_context(table=table, schema=schema, dialect=dialect.name) from exc

        logger.debug(
            "table.inspected",
            table=table,
            columns=len(descriptor.columns),
            indexes=len(descriptor.indexes),
        )
        return descriptor

    def _group_indexes(self, rows: list[dict[str, Any]]) -> list[IndexDescriptor]:
        grouped: dict[str, list[dict[str, Any]]] = {}
        for row in rows:
            grouped.setdefault(str(row["index_name"]), []).append(row)

        indexes = []
        for name, members in grouped.items():
            members.sort(key=lambda r: _size(r.get("ordinal")))
            first = members[0]
            indexes.append(
                IndexDescriptor(
                    name=name,
                    columns=tuple(str(r["column_name"]) for r in members),
                    unique=_flag(first.get("is_unique")),
                    kind=self._dialect.index_kind_from_catalog(first.get("index_kind")),
                )
            )
        return indexes


__all__ = [
    "ABSENT",
    "SchemaInspector",
]
