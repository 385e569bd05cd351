"""Oracle dialect.

No auto-increment fragment: sequences and triggers are left to the caller,
so auto-increment is neither rendered nor compared. Identifiers are always
quoted, so catalog lookups match names exactly as declared.
"""

from __future__ import annotations

import re

from schemaspine.dialects.base import CommentOnDialect
from schemaspine.metadata.descriptors import ColumnDescriptor, TableDescriptor
from schemaspine.metadata.types import LogicalType

_NUMBER_ARGS = re.compile(r"\(\s*(\d+)\s*(?:,\s*(\d+)\s*)?\)")


class OracleDialect(CommentOnDialect):
    """Oracle dialect.

    Type fallbacks: ``VARCHAR2(255)``; ``DECIMAL`` without precision renders
    a bare ``NUMBER``. Integer and float widths exist only as ``NUMBER``
    precision, so ``NUMBER`` keeps its arguments when types are compared.
    ``MODIFY`` only mentions nullability when it changes, because Oracle
    rejects restating the current constraint.
    """

    dialect_name = "oracle"
    product_names = ("Oracle",)

    type_names = {
        LogicalType.STRING: "VARCHAR2",
        LogicalType.CHAR: "CHAR",
        LogicalType.TEXT: "CLOB",
        LogicalType.INT8: "NUMBER(3)",
        LogicalType.INT16: "NUMBER(5)",
        LogicalType.INT32: "NUMBER(10)",
        LogicalType.INT64: "NUMBER(19)",
        LogicalType.FLOAT32: "NUMBER(7,2)",
        LogicalType.FLOAT64: "NUMBER(15,2)",
        LogicalType.DECIMAL: "NUMBER",
        LogicalType.BOOLEAN: "NUMBER(1)",
        LogicalType.DATE: "DATE",
        LogicalType.DATETIME: "TIMESTAMP",
        LogicalType.TIME: "TIMESTAMP",
        LogicalType.BINARY: "BLOB",
    }
    default_decimal = None
    type_aliases = {
        "VARCHAR": "VARCHAR2",
        "NVARCHAR2": "VARCHAR2",
        "INTEGER": "NUMBER",
        "DECIMAL": "NUMBER",
        "NUMERIC": "NUMBER",
        "TIMESTAMP WITH TIME ZONE": "TIMESTAMP",
        "TIMESTAMP WITH LOCAL TIME ZONE": "TIMESTAMP",
    }

    auto_increment_sql = ""
    add_column_keyword = "ADD"

    def catalog_type(self, column: ColumnDescriptor) -> str:
        native = super().catalog_type(column)
        if column.precision > 0 and "(" not in native and super().canonical_type(native) == "NUMBER":
            if column.scale > 0:
                return f"{native}({column.precision},{column.scale})"
            return f"{native}({column.precision})"
        return native

    def canonical_type(self, native: str) -> str:
        base = super().canonical_type(native)
        match = _NUMBER_ARGS.search(native)
        if base != "NUMBER" or match is None:
            return base
        precision, scale = match.group(1), match.group(2)
        if scale and int(scale) > 0:
            return f"NUMBER({int(precision)},{int(scale)})"
        return f"NUMBER({int(precision)})"

    def create_table_prefix(self, table: TableDescriptor) -> str:
        return f"CREATE TABLE {self.qualified_name(table.name, table.schema)}"

    def generate_modify_column(
        self,
        table: str,
        column: ColumnDescriptor,
        schema: str | None = None,
        previous: ColumnDescriptor | None = None,
    ) -> str:
        parts = [self.escape_identifier(column.name), self.column_type(column)]
        if column.default_value is not None:
            parts.append(self.default_value_fragment(column.default_value))
        if previous is None or previous.nullable != column.nullable:
            parts.append("NULL" if column.nullable else self.not_null_fragment())
        return f"ALTER TABLE {self.qualified_name(table, schema)} MODIFY {' '.join(parts)}"

    # -- Catalog queries ---------------------------------------------------

    def table_exists_query(self, table: str, schema: str | None = None) -> str:
        if schema:
            return (
                "SELECT COUNT(*) AS table_count FROM ALL_TABLES "
                f"WHERE OWNER = {self.literal(schema)} AND TABLE_NAME = {self.literal(table)}"
            )
        return (
            "SELECT COUNT(*) AS table_count FROM USER_TABLES "
            f"WHERE TABLE_NAME = {self.literal(table)}"
        )

    def schema_introspection_query(self, table: str, schema: str | None = None) -> str:
        columns = (
            "SELECT c.COLUMN_NAME AS column_name, c.DATA_TYPE AS data_type, "
            "c.CHAR_LENGTH AS char_length, c.DATA_PRECISION AS numeric_precision, "
            "c.DATA_SCALE AS numeric_scale, "
            "CASE c.NULLABLE WHEN 'Y' THEN 'YES' ELSE 'NO' END AS is_nullable, "
            "c.DATA_DEFAULT AS column_default, cc.COMMENTS AS column_comment, "
            "'NO' AS is_auto_increment "
        )
        if schema:
            return columns + (
                "FROM ALL_TAB_COLUMNS c LEFT JOIN ALL_COL_COMMENTS cc "
                "ON cc.OWNER = c.OWNER AND cc.TABLE_NAME = c.TABLE_NAME "
                "AND cc.COLUMN_NAME = c.COLUMN_NAME "
                f"WHERE c.OWNER = {self.literal(schema)} AND c.TABLE_NAME = {self.literal(table)} "
                "ORDER BY c.COLUMN_ID"
            )
        return columns + (
            "FROM USER_TAB_COLUMNS c LEFT JOIN USER_COL_COMMENTS cc "
            "ON cc.TABLE_NAME = c.TABLE_NAME AND cc.COLUMN_NAME = c.COLUMN_NAME "
            f"WHERE c.TABLE_NAME = {self.literal(table)} "
            "ORDER BY c.COLUMN_ID"
        )

    def index_introspection_query(self, table: str, schema: str | None = None) -> str:
        select = (
            "SELECT i.INDEX_NAME AS index_name, ic.COLUMN_NAME AS column_name, "
            "CASE i.UNIQUENESS WHEN 'UNIQUE' THEN 'YES' ELSE 'NO' END AS is_unique, "
            "i.INDEX_TYPE AS index_kind, ic.COLUMN_POSITION AS ordinal "
        )
        if schema:
            return select + (
                "FROM ALL_INDEXES i JOIN ALL_IND_COLUMNS ic "
                "ON ic.INDEX_OWNER = i.OWNER AND ic.INDEX_NAME = i.INDEX_NAME "
                f"WHERE i.TABLE_OWNER = {self.literal(schema)} AND i.TABLE_NAME = {self.literal(table)} "
                "AND i.INDEX_NAME NOT IN (SELECT con.INDEX_NAME FROM ALL_CONSTRAINTS con "
                f"WHERE con.OWNER = {self.literal(schema)} AND con.TABLE_NAME = {self.literal(table)} "
                "AND con.CONSTRAINT_TYPE = 'P' AND con.INDEX_NAME IS NOT NULL) "
                "ORDER BY i.INDEX_NAME, ic.COLUMN_POSITION"
            )
        return select + (
            "FROM USER_INDEXES i JOIN USER_IND_COLUMNS ic ON ic.INDEX_NAME = i.INDEX_NAME "
            f"WHERE i.TABLE_NAME = {self.literal(table)} "
            "AND i.INDEX_NAME NOT IN (SELECT con.INDEX_NAME FROM USER_CONSTRAINTS con "
            f"WHERE con.TABLE_NAME = {self.literal(table)} "
            "AND con.CONSTRAINT_TYPE = 'P' AND con.INDEX_NAME IS NOT NULL) "
            "ORDER BY i.INDEX_NAME, ic.COLUMN_POSITION"
        )

    def primary_key_introspection_query(self, table: str, schema: str | None = None) -> str:
        if schema:
            return (
                "SELECT cc.COLUMN_NAME AS column_name, cc.POSITION AS ordinal "
                "FROM ALL_CONSTRAINTS con JOIN ALL_CONS_COLUMNS cc "
                "ON cc.OWNER = con.OWNER AND cc.CONSTRAINT_NAME = con.CONSTRAINT_NAME "
                f"WHERE con.OWNER = {self.literal(schema)} AND con.TABLE_NAME = {self.literal(table)} "
                "AND con.CONSTRAINT_TYPE = 'P' ORDER BY cc.POSITION"
            )
        return (
            "SELECT cc.COLUMN_NAME AS column_name, cc.POSITION AS ordinal "
            "FROM USER_CONSTRAINTS con JOIN USER_CONS_COLUMNS cc "
            "ON cc.CONSTRAINT_NAME = con.CONSTRAINT_NAME "
            f"WHERE con.TABLE_NAME = {self.literal(table)} "
            "AND con.CONSTRAINT_TYPE = 'P' ORDER BY cc.POSITION"
        )
