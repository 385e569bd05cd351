"""
Shared pytest fixtures and fakes for schemaspine tests.

This module provides:
- ``FakeDatabase``: an in-memory catalog that answers a dialect's
  introspection queries from ``TableDescriptor`` objects and records every
  executed statement
- ``FakeProvider``: a ``ConnectionProvider`` over a ``FakeDatabase``
- Autouse cleanup of the process-wide guard, registry, metadata and
  settings caches

Usage:
    def test_something(fake_mysql):
        fake_mysql.add(existing_table)
        maintainer = SchemaMaintainer(FakeProvider(fake_mysql, "MySQL"))
"""

import sys
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

import pytest

# Ensure schemaspine package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from schemaspine.core.settings import MaintenanceSettings, clear_settings_cache
from schemaspine.dialects import MySQLDialect, dialect_registry
from schemaspine.dialects.base import Dialect
from schemaspine.maintenance.guard import reset_table_guard
from schemaspine.metadata.descriptors import TableDescriptor
from schemaspine.metadata.parser import clear_metadata_cache


# =============================================================================
# Fakes
# =============================================================================


class FakeDatabase:
    """Answers catalog queries for the tables it holds; records DDL."""

    def __init__(
        self,
        dialect: Dialect,
        tables: list[TableDescriptor] | None = None,
        *,
        fail_on: str | None = None,
        fail_queries: bool = False,
    ):
        self.dialect = dialect
        self.tables: list[TableDescriptor] = list(tables or [])
        self.fail_on = fail_on
        self.fail_queries = fail_queries
        self.executed: list[str] = []
        self.queries: list[str] = []
        self.entered = threading.Event()
        self.gate: threading.Event | None = None

    def add(self, table: TableDescriptor) -> None:
        self.tables.append(table)

    # -- Connection protocol ----------------------------------------------

    def execute(self, sql: str) -> int:
        if self.fail_on and self.fail_on in sql:
            raise RuntimeError(f"simulated failure: {sql}")
        self.executed.append(sql)
        return 0

    def query(self, sql: str) -> list[dict[str, Any]]:
        self.queries.append(sql)
        self.entered.set()
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.fail_queries:
            raise RuntimeError("catalog unavailable")
        for table in self.tables:
            rows = self._answer(table, sql)
            if rows is not None:
                return rows
        return []

    # -- Catalog rows ------------------------------------------------------

    def _answer(self, table: TableDescriptor, sql: str) -> list[dict[str, Any]] | None:
        d = self.dialect
        if sql == d.table_exists_query(table.name, table.schema):
            return [{"table_count": 1}]
        if sql == d.schema_introspection_query(table.name, table.schema):
            return [
                {
                    "column_name": col.name,
                    "data_type": col.native_type or d.column_type(col),
                    "char_length": col.length or None,
                    "numeric_precision": col.precision or None,
                    "numeric_scale": col.scale or None,
                    "is_nullable": "YES" if col.nullable else "NO",
                    "column_default": col.default_value,
                    "column_comment": col.comment,
                    "is_auto_increment": "YES" if col.auto_increment else "NO",
                }
                for col in table.columns
            ]
        if sql == d.primary_key_introspection_query(table.name, table.schema):
            return [
                {"column_name": name, "ordinal": pos}
                for pos, name in enumerate(table.primary_key_columns, start=1)
            ]
        if sql == d.index_introspection_query(table.name, table.schema):
            return [
                {
                    "index_name": idx.name,
                    "column_name": col,
                    "is_unique": "YES" if idx.unique else "NO",
                    "index_kind": idx.kind.value,
                    "ordinal": pos,
                }
                for idx in table.indexes
                for pos, col in enumerate(idx.columns, start=1)
            ]
        return None


class FakeProvider:
    """ConnectionProvider over a FakeDatabase."""

    def __init__(self, database: FakeDatabase, product_name: str = "MySQL"):
        self.database = database
        self._product_name = product_name
        self.opened = 0

    @property
    def product_name(self) -> str:
        return self._product_name

    @contextmanager
    def connection(self) -> Iterator[FakeDatabase]:
        self.opened += 1
        yield self.database


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_process_state():
    """Isolate tests from each other's guard, caches and settings."""
    reset_table_guard()
    dialect_registry.clear_cache()
    clear_metadata_cache()
    clear_settings_cache()
    yield
    reset_table_guard()
    dialect_registry.clear_cache()
    clear_metadata_cache()
    clear_settings_cache()


@pytest.fixture
def fake_mysql() -> FakeDatabase:
    return FakeDatabase(MySQLDialect())


@pytest.fixture
def settings() -> MaintenanceSettings:
    """Settings isolated from the environment and any .env file."""
    return MaintenanceSettings(_env_file=None)
