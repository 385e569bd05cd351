"""H2 dialect (MySQL compatibility mode quoting, inline comments)."""

from __future__ import annotations

from schemaspine.dialects.base import BaseDialect
from schemaspine.metadata.descriptors import TableDescriptor
from schemaspine.metadata.types import LogicalType


class H2Dialect(BaseDialect):
    """H2 dialect.

    Type fallbacks: ``VARCHAR(255)``, ``DECIMAL(19,2)``. Catalog lookups
    compare names with ``UPPER()`` on both sides because H2 folds unquoted
    names to upper case.
    """

    dialect_name = "h2"
    product_names = ("H2",)

    type_names = {
        LogicalType.STRING: "VARCHAR",
        LogicalType.CHAR: "CHAR",
        LogicalType.TEXT: "CLOB",
        LogicalType.INT8: "TINYINT",
        LogicalType.INT16: "SMALLINT",
        LogicalType.INT32: "INT",
        LogicalType.INT64: "BIGINT",
        LogicalType.FLOAT32: "REAL",
        LogicalType.FLOAT64: "DOUBLE",
        LogicalType.DECIMAL: "DECIMAL",
        LogicalType.BOOLEAN: "BOOLEAN",
        LogicalType.DATE: "DATE",
        LogicalType.DATETIME: "TIMESTAMP",
        LogicalType.TIME: "TIME",
        LogicalType.BINARY: "BLOB",
    }
    default_decimal = (19, 2)
    type_aliases = {
        "INTEGER": "INT",
        "CHARACTER VARYING": "VARCHAR",
        "CHARACTER": "CHAR",
        "CHARACTER LARGE OBJECT": "CLOB",
        "BINARY LARGE OBJECT": "BLOB",
        "DOUBLE PRECISION": "DOUBLE",
        "NUMERIC": "DECIMAL",
        "TIMESTAMP WITHOUT TIME ZONE": "TIMESTAMP",
        "TIME WITHOUT TIME ZONE": "TIME",
    }

    auto_increment_sql = "IDENTITY"
    auto_increment_before_not_null = True
    inline_comments = True

    def escape_identifier(self, name: str) -> str:
        return "`" + name.replace("`", "``") + "`"

    def table_options(self, table: TableDescriptor) -> str:
        if table.comment:
            return f" COMMENT {self.literal(table.comment)}"
        return ""

    # -- Catalog queries ---------------------------------------------------

    def _where(self, table: str, schema: str | None, alias: str = "") -> str:
        prefix = f"{alias}." if alias else ""
        clause = f"UPPER({prefix}TABLE_NAME) = UPPER({self.literal(table)})"
        if schema:
            clause += f" AND UPPER({prefix}TABLE_SCHEMA) = UPPER({self.literal(schema)})"
        return clause

    def table_exists_query(self, table: str, schema: str | None = None) -> str:
        return (
            "SELECT COUNT(*) AS table_count FROM INFORMATION_SCHEMA.TABLES "
            f"WHERE {self._where(table, schema)}"
        )

    def schema_introspection_query(self, table: str, schema: str | None = None) -> str:
        return (
            "SELECT COLUMN_NAME AS column_name, DATA_TYPE AS data_type, "
            "CHARACTER_MAXIMUM_LENGTH AS char_length, NUMERIC_PRECISION AS numeric_precision, "
            "NUMERIC_SCALE AS numeric_scale, IS_NULLABLE AS is_nullable, "
            "COLUMN_DEFAULT AS column_default, REMARKS AS column_comment, "
            "IS_IDENTITY AS is_auto_increment "
            "FROM INFORMATION_SCHEMA.COLUMNS "
            f"WHERE {self._where(table, schema)} ORDER BY ORDINAL_POSITION"
        )

    def index_introspection_query(self, table: str, schema: str | None = None) -> str:
        return (
            "SELECT INDEX_NAME AS index_name, COLUMN_NAME AS column_name, "
            "CASE WHEN NON_UNIQUE THEN 'NO' ELSE 'YES' END AS is_unique, "
            "'BTREE' AS index_kind, ORDINAL_POSITION AS ordinal "
            "FROM INFORMATION_SCHEMA.INDEXES "
            f"WHERE {self._where(table, schema)} AND INDEX_NAME NOT LIKE 'PRIMARY%' "
            "ORDER BY INDEX_NAME, ORDINAL_POSITION"
        )

    def primary_key_introspection_query(self, table: str, schema: str | None = None) -> str:
        return (
            "SELECT kcu.COLUMN_NAME AS column_name, kcu.ORDINAL_POSITION AS ordinal "
            "FROM INFORMATION_SCHEMA.TABLE_CONSTRAINTS tc "
            "JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE kcu "
            "ON kcu.CONSTRAINT_NAME = tc.CONSTRAINT_NAME AND kcu.TABLE_SCHEMA = tc.TABLE_SCHEMA "
            f"WHERE tc.CONSTRAINT_TYPE = 'PRIMARY KEY' AND {self._where(table, schema, 'tc')} "
            "ORDER BY kcu.ORDINAL_POSITION"
        )
