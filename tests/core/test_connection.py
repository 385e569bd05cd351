"""Tests for the SQLAlchemy and DB-API connection providers."""

from __future__ import annotations

import sqlite3

import pytest
from sqlalchemy import create_engine

from schemaspine.core.connection import DBAPIConnectionProvider, SQLAlchemyConnectionProvider
from schemaspine.core.protocols import Connection, ConnectionProvider


@pytest.fixture
def engine():
    engine = create_engine("sqlite://")
    yield engine
    engine.dispose()


class TestSQLAlchemyProvider:
    def test_protocol(self, engine) -> None:
        provider = SQLAlchemyConnectionProvider(engine)
        assert isinstance(provider, ConnectionProvider)
        with provider.connection() as conn:
            assert isinstance(conn, Connection)

    def test_product_name_from_engine(self, engine) -> None:
        assert SQLAlchemyConnectionProvider(engine).product_name == "sqlite"
        assert SQLAlchemyConnectionProvider(engine, product_name="H2").product_name == "H2"

    def test_execute_and_query(self, engine) -> None:
        provider = SQLAlchemyConnectionProvider(engine)
        with provider.connection() as conn:
            conn.execute("CREATE TABLE t (ID INTEGER, Note TEXT)")
            conn.execute("INSERT INTO t VALUES (1, 'it''s 100% :literal')")
            rows = conn.query("SELECT ID, Note FROM t")
        assert rows == [{"id": 1, "note": "it's 100% :literal"}]

    def test_ddl_committed_across_connections(self, engine) -> None:
        provider = SQLAlchemyConnectionProvider(engine)
        with provider.connection() as conn:
            conn.execute("CREATE TABLE kept (id INTEGER)")
        with provider.connection() as conn:
            rows = conn.query("SELECT COUNT(*) AS table_count FROM sqlite_master WHERE name = 'kept'")
        assert rows == [{"table_count": 1}]


class TestDBAPIProvider:
    def test_execute_and_query(self, tmp_path) -> None:
        path = tmp_path / "db.sqlite"
        provider = DBAPIConnectionProvider(lambda: sqlite3.connect(path), "SQLite")
        with provider.connection() as conn:
            conn.execute("CREATE TABLE t (Name TEXT)")
            conn.execute("INSERT INTO t VALUES ('a')")
        with provider.connection() as conn:
            assert conn.query("SELECT Name FROM t") == [{"name": "a"}]

    def test_connection_closed(self) -> None:
        class Recorder:
            closed = False

            def close(self) -> None:
                Recorder.closed = True

        provider = DBAPIConnectionProvider(Recorder, "PostgreSQL")
        with provider.connection():
            pass
        assert Recorder.closed
        assert provider.product_name == "PostgreSQL"
