"""MySQL / MariaDB dialect: backtick quoting, inline comments, table options."""

from __future__ import annotations

from schemaspine.dialects.base import BaseDialect
from schemaspine.metadata.descriptors import ColumnDescriptor, IndexDescriptor, TableDescriptor
from schemaspine.metadata.types import IndexKind, LogicalType


class MySQLDialect(BaseDialect):
    """MySQL dialect.

    Type fallbacks: ``VARCHAR(255)``, ``DECIMAL(10,2)``; booleans are
    ``TINYINT(1)``. ``CREATE TABLE`` carries ``ENGINE``, ``DEFAULT CHARSET``,
    optional ``COLLATE`` and the table comment.
    """

    dialect_name = "mysql"
    product_names = ("MySQL", "MariaDB")

    type_names = {
        LogicalType.STRING: "VARCHAR",
        LogicalType.CHAR: "CHAR",
        LogicalType.TEXT: "TEXT",
        LogicalType.INT8: "TINYINT",
        LogicalType.INT16: "SMALLINT",
        LogicalType.INT32: "INT",
        LogicalType.INT64: "BIGINT",
        LogicalType.FLOAT32: "FLOAT",
        LogicalType.FLOAT64: "DOUBLE",
        LogicalType.DECIMAL: "DECIMAL",
        LogicalType.BOOLEAN: "TINYINT(1)",
        LogicalType.DATE: "DATE",
        LogicalType.DATETIME: "DATETIME",
        LogicalType.TIME: "TIME",
        LogicalType.BINARY: "BLOB",
    }
    default_decimal = (10, 2)
    type_aliases = {
        "INTEGER": "INT",
        "BOOL": "TINYINT",
        "BOOLEAN": "TINYINT",
        "NUMERIC": "DECIMAL",
        "DOUBLE PRECISION": "DOUBLE",
    }
    supported_index_kinds = frozenset(IndexKind)

    auto_increment_sql = "AUTO_INCREMENT"
    inline_comments = True

    def escape_identifier(self, name: str) -> str:
        return "`" + name.replace("`", "``") + "`"

    def create_table_prefix(self, table: TableDescriptor) -> str:
        return f"CREATE TABLE IF NOT EXISTS {self.qualified_name(table.name, table.schema)}"

    def table_options(self, table: TableDescriptor) -> str:
        options = f" ENGINE={table.engine or 'InnoDB'} DEFAULT CHARSET={table.charset or 'utf8mb4'}"
        if table.collate:
            options += f" COLLATE={table.collate}"
        if table.comment:
            options += f" COMMENT={self.literal(table.comment)}"
        return options

    def generate_modify_column(
        self,
        table: str,
        column: ColumnDescriptor,
        schema: str | None = None,
        previous: ColumnDescriptor | None = None,
    ) -> str:
        return (
            f"ALTER TABLE {self.qualified_name(table, schema)} MODIFY COLUMN "
            f"{self.column_definition(column)}"
        )

    def generate_create_index(self, table: str, index: IndexDescriptor, schema: str | None = None) -> str:
        target = f"{self.escape_identifier(index.name)} ON {self.qualified_name(table, schema)}"
        columns = self._column_list(index.columns)
        if index.kind in (IndexKind.FULLTEXT, IndexKind.SPATIAL):
            return f"CREATE {index.kind.value} INDEX {target} ({columns})"
        unique = "UNIQUE " if index.unique else ""
        sql = f"CREATE {unique}INDEX {target} ({columns}) USING {index.kind.value}"
        if index.comment:
            sql += f" COMMENT {self.literal(index.comment)}"
        return sql

    def generate_drop_index(self, table: str, index_name: str, schema: str | None = None) -> str:
        return f"DROP INDEX {self.escape_identifier(index_name)} ON {self.qualified_name(table, schema)}"

    # -- Catalog queries ---------------------------------------------------

    def _schema_predicate(self, schema: str | None) -> str:
        return f"TABLE_SCHEMA = {self.literal(schema)}" if schema else "TABLE_SCHEMA = DATABASE()"

    def table_exists_query(self, table: str, schema: str | None = None) -> str:
        return (
            "SELECT COUNT(*) AS table_count FROM information_schema.TABLES "
            f"WHERE {self._schema_predicate(schema)} AND TABLE_NAME = {self.literal(table)}"
        )

    def schema_introspection_query(self, table: str, schema: str | None = None) -> str:
        return (
            "SELECT COLUMN_NAME AS column_name, DATA_TYPE AS data_type, "
            "CHARACTER_MAXIMUM_LENGTH AS char_length, NUMERIC_PRECISION AS numeric_precision, "
            "NUMERIC_SCALE AS numeric_scale, IS_NULLABLE AS is_nullable, "
            "COLUMN_DEFAULT AS column_default, COLUMN_COMMENT AS column_comment, "
            "CASE WHEN EXTRA LIKE '%auto_increment%' THEN 'YES' ELSE 'NO' END AS is_auto_increment "
            "FROM information_schema.COLUMNS "
            f"WHERE {self._schema_predicate(schema)} AND TABLE_NAME = {self.literal(table)} "
            "ORDER BY ORDINAL_POSITION"
        )

    def index_introspection_query(self, table: str, schema: str | None = None) -> str:
        return (
            "SELECT INDEX_NAME AS index_name, COLUMN_NAME AS column_name, "
            "CASE WHEN NON_UNIQUE = 0 THEN 'YES' ELSE 'NO' END AS is_unique, "
            "INDEX_TYPE AS index_kind, SEQ_IN_INDEX AS ordinal "
            "FROM information_schema.STATISTICS "
            f"WHERE {self._schema_predicate(schema)} AND TABLE_NAME = {self.literal(table)} "
            "AND INDEX_NAME <> 'PRIMARY' "
            "ORDER BY INDEX_NAME, SEQ_IN_INDEX"
        )

    def primary_key_introspection_query(self, table: str, schema: str | None = None) -> str:
        return (
            "SELECT COLUMN_NAME AS column_name, ORDINAL_POSITION AS ordinal "
            "FROM information_schema.KEY_COLUMN_USAGE "
            f"WHERE {self._schema_predicate(schema)} AND TABLE_NAME = {self.literal(table)} "
            "AND CONSTRAINT_NAME = 'PRIMARY' "
            "ORDER BY ORDINAL_POSITION"
        )
