"""PostgreSQL dialect.

Double-quote identifiers, ``GENERATED BY DEFAULT AS IDENTITY`` columns and
comments persisted through ``COMMENT ON`` follow-up statements. Catalog
queries default to the ``public`` schema.
"""

from __future__ import annotations

from schemaspine.dialects.base import CommentOnDialect
from schemaspine.metadata.descriptors import ColumnDescriptor, IndexDescriptor, TableDescriptor
from schemaspine.metadata.types import IndexKind, LogicalType

# FULLTEXT and SPATIAL map onto the GIN and GiST access methods.
_ACCESS_METHODS = {
    IndexKind.BTREE: "BTREE",
    IndexKind.HASH: "HASH",
    IndexKind.FULLTEXT: "GIN",
    IndexKind.SPATIAL: "GIST",
}
_KINDS_BY_METHOD = {method: kind for kind, method in _ACCESS_METHODS.items()}


class PostgreSQLDialect(CommentOnDialect):
    """PostgreSQL dialect.

    Type fallbacks: ``VARCHAR(255)``, ``NUMERIC(10,2)``. A column change is a
    single ``ALTER TABLE`` combining ``TYPE``, ``SET/DROP NOT NULL``, the
    default and, when it flips, the identity property.
    """

    dialect_name = "postgresql"
    product_names = ("PostgreSQL",)

    type_names = {
        LogicalType.STRING: "VARCHAR",
        LogicalType.CHAR: "CHAR",
        LogicalType.TEXT: "TEXT",
        LogicalType.INT8: "SMALLINT",
        LogicalType.INT16: "SMALLINT",
        LogicalType.INT32: "INTEGER",
        LogicalType.INT64: "BIGINT",
        LogicalType.FLOAT32: "REAL",
        LogicalType.FLOAT64: "DOUBLE PRECISION",
        LogicalType.DECIMAL: "NUMERIC",
        LogicalType.BOOLEAN: "BOOLEAN",
        LogicalType.DATE: "DATE",
        LogicalType.DATETIME: "TIMESTAMP",
        LogicalType.TIME: "TIME",
        LogicalType.BINARY: "BYTEA",
    }
    default_decimal = (10, 2)
    type_aliases = {
        "CHARACTER VARYING": "VARCHAR",
        "CHARACTER": "CHAR",
        "BPCHAR": "CHAR",
        "INT": "INTEGER",
        "INT4": "INTEGER",
        "INT8": "BIGINT",
        "INT2": "SMALLINT",
        "FLOAT4": "REAL",
        "FLOAT8": "DOUBLE PRECISION",
        "DECIMAL": "NUMERIC",
        "BOOL": "BOOLEAN",
        "TIMESTAMP WITHOUT TIME ZONE": "TIMESTAMP",
        "TIME WITHOUT TIME ZONE": "TIME",
    }
    supported_index_kinds = frozenset(IndexKind)

    auto_increment_sql = "GENERATED BY DEFAULT AS IDENTITY"

    def create_table_prefix(self, table: TableDescriptor) -> str:
        return f"CREATE TABLE IF NOT EXISTS {self.qualified_name(table.name, table.schema)}"

    def generate_modify_column(
        self,
        table: str,
        column: ColumnDescriptor,
        schema: str | None = None,
        previous: ColumnDescriptor | None = None,
    ) -> str:
        name = self.escape_identifier(column.name)
        clauses = [f"ALTER COLUMN {name} TYPE {self.column_type(column)}"]
        clauses.append(
            f"ALTER COLUMN {name} {'DROP NOT NULL' if column.nullable else 'SET NOT NULL'}"
        )
        if column.default_value is not None:
            clauses.append(f"ALTER COLUMN {name} SET DEFAULT {column.default_value}")
        if previous is not None and previous.auto_increment != column.auto_increment:
            if column.auto_increment:
                clauses.append(f"ALTER COLUMN {name} ADD {self.auto_increment_sql}")
            else:
                clauses.append(f"ALTER COLUMN {name} DROP IDENTITY IF EXISTS")
        return f"ALTER TABLE {self.qualified_name(table, schema)} " + ", ".join(clauses)

    def generate_create_index(self, table: str, index: IndexDescriptor, schema: str | None = None) -> str:
        unique = "UNIQUE " if index.unique else ""
        return (
            f"CREATE {unique}INDEX {self.escape_identifier(index.name)} "
            f"ON {self.qualified_name(table, schema)} "
            f"USING {_ACCESS_METHODS[index.kind]} ({self._column_list(index.columns)})"
        )

    def generate_drop_index(self, table: str, index_name: str, schema: str | None = None) -> str:
        return f"DROP INDEX IF EXISTS {self.qualified_name(index_name, schema)}"

    def index_kind_from_catalog(self, value: str | None) -> IndexKind:
        return _KINDS_BY_METHOD.get((value or "").strip().upper(), IndexKind.BTREE)

    # -- Catalog queries ---------------------------------------------------

    def table_exists_query(self, table: str, schema: str | None = None) -> str:
        return (
            "SELECT COUNT(*) AS table_count FROM information_schema.tables "
            f"WHERE table_schema = {self.literal(schema or 'public')} "
            f"AND table_name = {self.literal(table)}"
        )

    def schema_introspection_query(self, table: str, schema: str | None = None) -> str:
        return (
            "SELECT c.column_name AS column_name, c.data_type AS data_type, "
            "c.character_maximum_length AS char_length, c.numeric_precision AS numeric_precision, "
            "c.numeric_scale AS numeric_scale, c.is_nullable AS is_nullable, "
            "c.column_default AS column_default, "
            "col_description(format('%I.%I', c.table_schema, c.table_name)::regclass, "
            "c.ordinal_position) AS column_comment, "
            "CASE WHEN c.is_identity = 'YES' OR c.column_default LIKE 'nextval%' "
            "THEN 'YES' ELSE 'NO' END AS is_auto_increment "
            "FROM information_schema.columns c "
            f"WHERE c.table_schema = {self.literal(schema or 'public')} "
            f"AND c.table_name = {self.literal(table)} "
            "ORDER BY c.ordinal_position"
        )

    def index_introspection_query(self, table: str, schema: str | None = None) -> str:
        return (
            "SELECT i.relname AS index_name, a.attname AS column_name, "
            "CASE WHEN ix.indisunique THEN 'YES' ELSE 'NO' END AS is_unique, "
            "UPPER(am.amname) AS index_kind, k.ordinal AS ordinal "
            "FROM pg_class t "
            "JOIN pg_namespace n ON n.oid = t.relnamespace "
            "JOIN pg_index ix ON ix.indrelid = t.oid "
            "JOIN pg_class i ON i.oid = ix.indexrelid "
            "JOIN pg_am am ON am.oid = i.relam "
            "JOIN LATERAL unnest(ix.indkey) WITH ORDINALITY AS k(attnum, ordinal) ON TRUE "
            "JOIN pg_attribute a ON a.attrelid = t.oid AND a.attnum = k.attnum "
            f"WHERE n.nspname = {self.literal(schema or 'public')} "
            f"AND t.relname = {self.literal(table)} AND NOT ix.indisprimary "
            "ORDER BY i.relname, k.ordinal"
        )

    def primary_key_introspection_query(self, table: str, schema: str | None = None) -> str:
        return (
            "SELECT kcu.column_name AS column_name, kcu.ordinal_position AS ordinal "
            "FROM information_schema.table_constraints tc "
            "JOIN information_schema.key_column_usage kcu "
            "ON kcu.constraint_name = tc.constraint_name "
            "AND kcu.table_schema = tc.table_schema AND kcu.table_name = tc.table_name "
            "WHERE tc.constraint_type = 'PRIMARY KEY' "
            f"AND tc.table_schema = {self.literal(schema or 'public')} "
            f"AND tc.table_name = {self.literal(table)} "
            "ORDER BY kcu.ordinal_position"
        )
