"""Microsoft SQL Server dialect.

Bracket identifiers, ``IDENTITY(1,1)`` ahead of ``NOT NULL`` and comments
stored as ``MS_Description`` extended properties. Tables without a schema
live in ``dbo``.
"""

from __future__ import annotations

from schemaspine.dialects.base import BaseDialect
from schemaspine.metadata.descriptors import ColumnDescriptor, TableDescriptor
from schemaspine.metadata.types import LogicalType

DEFAULT_SCHEMA = "dbo"


class SQLServerDialect(BaseDialect):
    """SQL Server dialect.

    Type fallbacks: ``NVARCHAR(255)``, ``DECIMAL(18,2)``, ``VARBINARY(MAX)``.
    ``ALTER COLUMN`` only restates type and nullability; SQL Server rejects
    identity and default clauses there.
    """

    dialect_name = "sqlserver"
    product_names = ("Microsoft SQL Server",)

    type_names = {
        LogicalType.STRING: "NVARCHAR",
        LogicalType.CHAR: "NCHAR",
        LogicalType.TEXT: "NVARCHAR(MAX)",
        LogicalType.INT8: "TINYINT",
        LogicalType.INT16: "SMALLINT",
        LogicalType.INT32: "INT",
        LogicalType.INT64: "BIGINT",
        LogicalType.FLOAT32: "REAL",
        LogicalType.FLOAT64: "FLOAT",
        LogicalType.DECIMAL: "DECIMAL",
        LogicalType.BOOLEAN: "BIT",
        LogicalType.DATE: "DATE",
        LogicalType.DATETIME: "DATETIME2",
        LogicalType.TIME: "TIME",
        LogicalType.BINARY: "VARBINARY",
    }
    default_decimal = (18, 2)
    type_aliases = {
        "INTEGER": "INT",
        "NUMERIC": "DECIMAL",
        "NATIONAL CHARACTER VARYING": "NVARCHAR",
    }

    auto_increment_sql = "IDENTITY(1,1)"
    auto_increment_before_not_null = True
    add_column_keyword = "ADD"

    def escape_identifier(self, name: str) -> str:
        return "[" + name.replace("]", "]]") + "]"

    def literal(self, value: str) -> str:
        return "N'" + value.replace("'", "''") + "'"

    def map_logical_type(
        self, logical_type: LogicalType, length: int = 0, precision: int = 0, scale: int = 0
    ) -> str:
        if logical_type is LogicalType.BINARY:
            return f"VARBINARY({length or 'MAX'})"
        return super().map_logical_type(logical_type, length, precision, scale)

    def create_table_prefix(self, table: TableDescriptor) -> str:
        schema = table.schema or DEFAULT_SCHEMA
        return (
            "IF NOT EXISTS (SELECT * FROM sys.tables t JOIN sys.schemas s "
            f"ON s.schema_id = t.schema_id WHERE t.name = {self.literal(table.name)} "
            f"AND s.name = {self.literal(schema)}) "
            f"CREATE TABLE {self.qualified_name(table.name, table.schema)}"
        )

    def generate_modify_column(
        self,
        table: str,
        column: ColumnDescriptor,
        schema: str | None = None,
        previous: ColumnDescriptor | None = None,
    ) -> str:
        nullability = "NULL" if column.nullable else self.not_null_fragment()
        return (
            f"ALTER TABLE {self.qualified_name(table, schema)} ALTER COLUMN "
            f"{self.escape_identifier(column.name)} {self.column_type(column)} {nullability}"
        )

    def generate_drop_index(self, table: str, index_name: str, schema: str | None = None) -> str:
        return f"DROP INDEX {self.escape_identifier(index_name)} ON {self.qualified_name(table, schema)}"

    # -- Comments ----------------------------------------------------------

    def _description(self, comment: str, schema: str | None, table: str, column: str | None = None) -> str:
        sql = (
            "EXEC sp_addextendedproperty "
            f"@name = N'MS_Description', @value = {self.literal(comment)}, "
            f"@level0type = N'SCHEMA', @level0name = {self.literal(schema or DEFAULT_SCHEMA)}, "
            f"@level1type = N'TABLE', @level1name = {self.literal(table)}"
        )
        if column is not None:
            sql += f", @level2type = N'COLUMN', @level2name = {self.literal(column)}"
        return sql

    def comment_statements(self, table: TableDescriptor) -> list[str]:
        statements = []
        if table.comment:
            statements.append(self._description(table.comment, table.schema, table.name))
        for col in table.columns:
            statements.extend(self.column_comment_statements(table.name, col, table.schema))
        return statements

    def column_comment_statements(
        self, table: str, column: ColumnDescriptor, schema: str | None = None
    ) -> list[str]:
        if not column.comment:
            return []
        return [self._description(column.comment, schema, table, column.name)]

    # -- Catalog queries ---------------------------------------------------

    def table_exists_query(self, table: str, schema: str | None = None) -> str:
        return (
            "SELECT COUNT(*) AS table_count FROM INFORMATION_SCHEMA.TABLES "
            f"WHERE TABLE_SCHEMA = {self.literal(schema or DEFAULT_SCHEMA)} "
            f"AND TABLE_NAME = {self.literal(table)} AND TABLE_TYPE = 'BASE TABLE'"
        )

    def schema_introspection_query(self, table: str, schema: str | None = None) -> str:
        owner = schema or DEFAULT_SCHEMA
        return (
            "SELECT c.COLUMN_NAME AS column_name, c.DATA_TYPE AS data_type, "
            "c.CHARACTER_MAXIMUM_LENGTH AS char_length, c.NUMERIC_PRECISION AS numeric_precision, "
            "c.NUMERIC_SCALE AS numeric_scale, c.IS_NULLABLE AS is_nullable, "
            "c.COLUMN_DEFAULT AS column_default, CAST(ep.value AS NVARCHAR(4000)) AS column_comment, "
            "CASE WHEN COLUMNPROPERTY(OBJECT_ID(QUOTENAME(c.TABLE_SCHEMA) + '.' + QUOTENAME(c.TABLE_NAME)), "
            "c.COLUMN_NAME, 'IsIdentity') = 1 THEN 'YES' ELSE 'NO' END AS is_auto_increment "
            "FROM INFORMATION_SCHEMA.COLUMNS c "
            "LEFT JOIN sys.extended_properties ep "
            "ON ep.major_id = OBJECT_ID(QUOTENAME(c.TABLE_SCHEMA) + '.' + QUOTENAME(c.TABLE_NAME)) "
            "AND ep.minor_id = COLUMNPROPERTY(OBJECT_ID(QUOTENAME(c.TABLE_SCHEMA) + '.' + "
            "QUOTENAME(c.TABLE_NAME)), c.COLUMN_NAME, 'ColumnId') "
            "AND ep.name = 'MS_Description' "
            f"WHERE c.TABLE_SCHEMA = {self.literal(owner)} AND c.TABLE_NAME = {self.literal(table)} "
            "ORDER BY c.ORDINAL_POSITION"
        )

    def index_introspection_query(self, table: str, schema: str | None = None) -> str:
        owner = schema or DEFAULT_SCHEMA
        return (
            "SELECT i.name AS index_name, c.name AS column_name, "
            "CASE WHEN i.is_unique = 1 THEN 'YES' ELSE 'NO' END AS is_unique, "
            "i.type_desc AS index_kind, ic.key_ordinal AS ordinal "
            "FROM sys.indexes i "
            "JOIN sys.index_columns ic ON ic.object_id = i.object_id AND ic.index_id = i.index_id "
            "JOIN sys.columns c ON c.object_id = ic.object_id AND c.column_id = ic.column_id "
            "JOIN sys.tables t ON t.object_id = i.object_id "
            "JOIN sys.schemas s ON s.schema_id = t.schema_id "
            f"WHERE t.name = {self.literal(table)} AND s.name = {self.literal(owner)} "
            "AND i.is_primary_key = 0 AND i.type > 0 AND ic.key_ordinal > 0 "
            "ORDER BY i.name, ic.key_ordinal"
        )

    def primary_key_introspection_query(self, table: str, schema: str | None = None) -> str:
        return (
            "SELECT kcu.COLUMN_NAME AS column_name, kcu.ORDINAL_POSITION AS ordinal "
            "FROM INFORMATION_SCHEMA.TABLE_CONSTRAINTS tc "
            "JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE kcu "
            "ON kcu.CONSTRAINT_NAME = tc.CONSTRAINT_NAME AND kcu.TABLE_SCHEMA = tc.TABLE_SCHEMA "
            "WHERE tc.CONSTRAINT_TYPE = 'PRIMARY KEY' "
            f"AND tc.TABLE_SCHEMA = {self.literal(schema or DEFAULT_SCHEMA)} "
            f"AND tc.TABLE_NAME = {self.literal(table)} "
            "ORDER BY kcu.ORDINAL_POSITION"
        )
