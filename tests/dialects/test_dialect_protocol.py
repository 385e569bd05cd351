"""Tests for the Dialect abstraction shared by every vendor."""

from __future__ import annotations

import pytest

from schemaspine.dialects import (
    Dialect,
    H2Dialect,
    MySQLDialect,
    OracleDialect,
    PostgreSQLDialect,
    SQLServerDialect,
    get_dialect,
)
from schemaspine.metadata import ColumnDescriptor, IndexDescriptor, IndexKind, LogicalType, TableBuilder


# =========================================================================
# Fixtures
# =========================================================================


@pytest.fixture(params=["mysql", "postgresql", "sqlserver", "oracle", "h2"])
def dialect(request: pytest.FixtureRequest) -> Dialect:
    """Parametric fixture: run each test against every dialect."""
    return get_dialect(request.param)


@pytest.fixture
def users():
    return (
        TableBuilder("users")
        .add_column(ColumnDescriptor("id", LogicalType.INT64, primary_key=True, auto_increment=True))
        .add_column(ColumnDescriptor("email", LogicalType.STRING, length=120, unique=True))
        .add_column(ColumnDescriptor("created", LogicalType.DATETIME, nullable=False))
        .build()
    )


# =========================================================================
# Protocol conformance
# =========================================================================


class TestProtocol:
    """Verify all concrete dialects implement the Dialect protocol."""

    def test_isinstance(self, dialect: Dialect) -> None:
        assert isinstance(dialect, Dialect)

    def test_name(self, dialect: Dialect) -> None:
        assert isinstance(dialect.name, str)
        assert len(dialect.name) > 0

    def test_every_logical_type_maps(self, dialect: Dialect) -> None:
        for logical in LogicalType:
            assert dialect.map_logical_type(logical)

    def test_introspection_queries_render(self, dialect: Dialect) -> None:
        for method in (
            dialect.table_exists_query,
            dialect.schema_introspection_query,
            dialect.index_introspection_query,
            dialect.primary_key_introspection_query,
        ):
            sql = method("orders", None)
            assert "orders" in sql
            assert sql.lstrip().upper().startswith("SELECT")


# =========================================================================
# Shared rendering
# =========================================================================


class TestCreateTable:
    def test_every_column_and_primary_key(self, dialect: Dialect, users) -> None:
        sql = dialect.generate_create_table(users)
        for name in ("id", "email", "created"):
            assert dialect.escape_identifier(name) in sql
        assert f"PRIMARY KEY ({dialect.escape_identifier('id')})" in sql

    def test_unique_column_becomes_table_constraint(self, dialect: Dialect, users) -> None:
        sql = dialect.generate_create_table(users)
        assert f"UNIQUE ({dialect.escape_identifier('email')})" in sql

    def test_not_null(self, dialect: Dialect, users) -> None:
        sql = dialect.generate_create_table(users)
        created = [line for line in sql.splitlines() if dialect.escape_identifier("created") in line]
        assert "NOT NULL" in created[0]

    def test_raw_definition_used_verbatim(self, dialect: Dialect) -> None:
        table = (
            TableBuilder("t")
            .add_column(ColumnDescriptor("x", raw_definition="VARCHAR(10) DEFAULT 'a'"))
            .build()
        )
        sql = dialect.generate_create_table(table)
        assert f"{dialect.escape_identifier('x')} VARCHAR(10) DEFAULT 'a'" in sql

    def test_native_type_override(self, dialect: Dialect) -> None:
        table = TableBuilder("t").add_column(ColumnDescriptor("doc", native_type="JSON")).build()
        assert f"{dialect.escape_identifier('doc')} JSON" in dialect.generate_create_table(table)


class TestAlter:
    def test_add_column(self, dialect: Dialect) -> None:
        column = ColumnDescriptor("nickname", LogicalType.STRING, length=40)
        sql = dialect.generate_add_column("users", column)
        assert sql.startswith(f"ALTER TABLE {dialect.escape_identifier('users')} ADD")
        assert dialect.escape_identifier("nickname") in sql

    def test_drop_column(self, dialect: Dialect) -> None:
        sql = dialect.generate_drop_column("users", "legacy")
        assert sql == (
            f"ALTER TABLE {dialect.escape_identifier('users')} "
            f"DROP COLUMN {dialect.escape_identifier('legacy')}"
        )

    def test_modify_column_mentions_new_type(self, dialect: Dialect) -> None:
        column = ColumnDescriptor("name", LogicalType.STRING, length=100)
        sql = dialect.generate_modify_column("users", column)
        assert "100" in sql
        assert dialect.escape_identifier("name") in sql

    def test_schema_qualified(self, dialect: Dialect) -> None:
        sql = dialect.generate_drop_column("users", "x", "app")
        assert dialect.qualified_name("users", "app") in sql
        assert dialect.qualified_name("users", "app").startswith(dialect.escape_identifier("app"))


class TestIndexes:
    def test_create_unique_index(self, dialect: Dialect) -> None:
        index = IndexDescriptor("uk_users_email", ("email",), unique=True)
        sql = dialect.generate_create_index("users", index)
        assert "UNIQUE INDEX" in sql
        assert dialect.escape_identifier("uk_users_email") in sql

    def test_composite_column_order_kept(self, dialect: Dialect) -> None:
        index = IndexDescriptor("idx_ab", ("b", "a"))
        sql = dialect.generate_create_index("t", index)
        assert sql.index(dialect.escape_identifier("b")) < sql.index(dialect.escape_identifier("a"))

    def test_drop_index_names_index(self, dialect: Dialect) -> None:
        assert "DROP INDEX" in dialect.generate_drop_index("users", "idx_old")

    def test_unsupported_kind_collapses_to_btree(self) -> None:
        assert OracleDialect().effective_index_kind(IndexKind.FULLTEXT) is IndexKind.BTREE
        assert MySQLDialect().effective_index_kind(IndexKind.FULLTEXT) is IndexKind.FULLTEXT


# =========================================================================
# Escaping
# =========================================================================


class TestEscaping:
    @pytest.mark.parametrize(
        "dialect_type,expected",
        [
            (MySQLDialect, "`we``ird`"),
            (H2Dialect, "`we``ird`"),
            (PostgreSQLDialect, '"we`ird"'),
            (OracleDialect, '"we`ird"'),
            (SQLServerDialect, "[we`ird]"),
        ],
    )
    def test_backtick(self, dialect_type: type, expected: str) -> None:
        assert dialect_type().escape_identifier("we`ird") == expected

    def test_double_quote_doubled(self) -> None:
        assert PostgreSQLDialect().escape_identifier('a"b') == '"a""b"'

    def test_bracket_doubled(self) -> None:
        assert SQLServerDialect().escape_identifier("a]b") == "[a]]b]"

    def test_literal_quotes_doubled(self, dialect: Dialect) -> None:
        assert "O''Brien" in dialect.table_exists_query("O'Brien")
