"""Tests for live-table introspection."""

from __future__ import annotations

import pytest

from conftest import FakeDatabase
from schemaspine.core.errors import IntrospectionError
from schemaspine.dialects import MySQLDialect, PostgreSQLDialect
from schemaspine.metadata import ColumnDescriptor, IndexDescriptor, IndexKind, LogicalType, TableBuilder
from schemaspine.reconcile import ABSENT, SchemaInspector


class ScriptedConnection:
    """Returns fixed rows per query kind, keyed by the dialect's SQL."""

    def __init__(self, dialect, table, *, exists=1, columns=(), pk=(), indexes=()):
        self._rows = {
            dialect.table_exists_query(table): [{"table_count": exists}],
            dialect.schema_introspection_query(table): list(columns),
            dialect.primary_key_introspection_query(table): list(pk),
            dialect.index_introspection_query(table): list(indexes),
        }

    def execute(self, sql: str) -> int:
        raise AssertionError("inspector must not execute statements")

    def query(self, sql: str):
        return self._rows[sql]


def _column_row(name, data_type, *, length=None, precision=None, scale=None, nullable="YES", auto="NO"):
    return {
        "column_name": name,
        "data_type": data_type,
        "char_length": length,
        "numeric_precision": precision,
        "numeric_scale": scale,
        "is_nullable": nullable,
        "column_default": None,
        "column_comment": "",
        "is_auto_increment": auto,
    }


class TestInspect:
    def test_absent_table(self) -> None:
        dialect = MySQLDialect()
        conn = ScriptedConnection(dialect, "orders", exists=0)
        assert SchemaInspector(dialect).inspect(conn, "orders") is ABSENT

    def test_columns_and_primary_key(self) -> None:
        dialect = MySQLDialect()
        conn = ScriptedConnection(
            dialect,
            "orders",
            columns=[
                _column_row("id", "bigint", precision=19, nullable="NO", auto="YES"),
                _column_row("code", "varchar", length=30),
                _column_row("blob", "longtext", length=-1),
            ],
            pk=[{"column_name": "id", "ordinal": 1}],
        )
        table = SchemaInspector(dialect).inspect(conn, "orders")
        assert table.column_names == ["id", "code", "blob"]
        assert table.primary_key_columns == ("id",)
        id_col = table.column("id")
        assert (id_col.native_type, id_col.nullable, id_col.auto_increment, id_col.primary_key) == (
            "bigint",
            False,
            True,
            True,
        )
        assert table.column("code").length == 30
        assert table.column("blob").length == 0
        assert table.column("code").comment is None

    def test_index_rows_grouped_by_name_and_ordered(self) -> None:
        dialect = PostgreSQLDialect()
        conn = ScriptedConnection(
            dialect,
            "orders",
            columns=[_column_row("a", "integer"), _column_row("b", "integer")],
            indexes=[
                {"index_name": "idx_ab", "column_name": "a", "is_unique": "NO", "index_kind": "BTREE", "ordinal": 2},
                {"index_name": "idx_ab", "column_name": "b", "is_unique": "NO", "index_kind": "BTREE", "ordinal": 1},
                {"index_name": "uk_a", "column_name": "a", "is_unique": True, "index_kind": "HASH", "ordinal": 1},
            ],
        )
        table = SchemaInspector(dialect).inspect(conn, "orders")
        assert table.index("idx_ab").columns == ("b", "a")
        uk = table.index("uk_a")
        assert uk.unique
        assert uk.kind is IndexKind.HASH

    def test_round_trip_through_fake_catalog(self) -> None:
        dialect = MySQLDialect()
        desired = (
            TableBuilder("orders")
            .add_column(ColumnDescriptor("id", LogicalType.INT64, primary_key=True, auto_increment=True))
            .add_column(ColumnDescriptor("ref", LogicalType.STRING, length=40, nullable=False))
            .add_index(IndexDescriptor("idx_ref", ("ref",), unique=True))
            .build()
        )
        table = SchemaInspector(dialect).inspect(FakeDatabase(dialect, [desired]), "orders")
        assert table.column("ref").length == 40
        assert table.index("idx_ref").unique


class TestErrors:
    def test_query_failure_is_introspection_error(self) -> None:
        dialect = MySQLDialect()
        db = FakeDatabase(dialect, fail_queries=True)
        with pytest.raises(IntrospectionError) as exc_info:
            SchemaInspector(dialect).inspect(db, "orders")
        assert exc_info.value.context.table == "orders"
        assert exc_info.value.context.statement == dialect.table_exists_query("orders")
        assert isinstance(exc_info.value.cause, RuntimeError)

    def test_malformed_row_is_introspection_error(self) -> None:
        dialect = MySQLDialect()
        conn = ScriptedConnection(dialect, "orders", columns=[{"data_type": "int"}])
        with pytest.raises(IntrospectionError, match="Unexpected catalog row"):
            SchemaInspector(dialect).inspect(conn, "orders")

    def test_table_exists(self) -> None:
        dialect = MySQLDialect()
        inspector = SchemaInspector(dialect)
        assert inspector.table_exists(ScriptedConnection(dialect, "t"), "t")
        assert not inspector.table_exists(ScriptedConnection(dialect, "t", exists=0), "t")
