"""Connection providers.

Manifesto:
    Callers already own a connection pool, either a SQLAlchemy ``Engine``
    or a DB-API ``connect()`` callable. These adapters turn either into a
    :class:`~schemaspine.core.protocols.ConnectionProvider` without the
    engine importing a driver.

Features:
    - ``SQLAlchemyConnectionProvider``: engine-backed, product name from the
      SQLAlchemy dialect
    - ``DBAPIConnectionProvider``: any PEP 249 factory plus an explicit product
      name

Tags:
    connection, sqlalchemy, dbapi, schemaspine

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy.engine import Connection as SAConnection
from sqlalchemy.engine import Engine

from schemaspine.core.logging import get_logger

logger = get_logger(__name__)


def _lower_keys(row: dict[str, Any]) -> dict[str, Any]:
    return {str(key).lower(): value for key, value in row.items()}


# =============================================================================
# SQLAlchemy
# =============================================================================


class SQLAlchemyConnection:
    """Wraps a SQLAlchemy connection; statements are sent to the driver verbatim."""

    def __init__(self, conn: SAConnection):
        self._conn = conn.execution_options(no_parameters=True)

    def execute(self, sql: str) -> int:
        result = self._conn.exec_driver_sql(sql)
        self._conn.commit()
        return result.rowcount

    def query(self, sql: str) -> list[dict[str, Any]]:
        result = self._conn.exec_driver_sql(sql)
        rows = [_lower_keys(dict(row)) for row in result.mappings()]
        self._conn.rollback()
        return rows


class SQLAlchemyConnectionProvider:
    """Connection provider backed by a SQLAlchemy ``Engine``.

    Example:
        >>> from sqlalchemy import create_engine
        >>> provider = SQLAlchemyConnectionProvider(create_engine("mysql+pymysql://..."))
        >>> provider.product_name
        'mysql'
    """

    def __init__(self, engine: Engine, *, product_name: str | None = None):
        self._engine = engine
        self._product_name = product_name

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def product_name(self) -> str:
        return self._product_name or self._engine.dialect.name

    @contextmanager
    def connection(self) -> Iterator[SQLAlchemyConnection]:
        with self._engine.connect() as conn:
            yield SQLAlchemyConnection(conn)


# =============================================================================
# DB-API
# =============================================================================


class DBAPIConnection:
    """Wraps a PEP 249 connection."""

    def __init__(self, conn: Any):
        self._conn = conn

    def execute(self, sql: str) -> int:
        cursor = self._conn.cursor()
        try:
            cursor.execute(sql)
            self._conn.commit()
            return cursor.rowcount
        finally:
            cursor.close()

    def query(self, sql: str) -> list[dict[str, Any]]:
        cursor = self._conn.cursor()
        try:
            cursor.execute(sql)
            names = [str(col[0]).lower() for col in cursor.description or ()]
            return [dict(zip(names, row)) for row in cursor.fetchall()]
        finally:
            cursor.close()


class DBAPIConnectionProvider:
    """Connection provider around a DB-API ``connect()`` callable.

    The product name cannot be discovered portably through DB-API, so it is
    passed in (``"PostgreSQL"``, ``"Oracle"`` ...).
    """

    def __init__(self, factory: Callable[[], Any], product_name: str):
        self._factory = factory
        self._product_name = product_name

    @property
    def product_name(self) -> str:
        return self._product_name

    @contextmanager
    def connection(self) -> Iterator[DBAPIConnection]:
        conn = self._factory()
        try:
            yield DBAPIConnection(conn)
        finally:
            try:
                conn.close()
            except Exception as exc:  # noqa: BLE001
                logger.warning("connection.close_failed", error=str(exc))


__all__ = [
    "SQLAlchemyConnection",
    "SQLAlchemyConnectionProvider",
    "DBAPIConnection",
    "DBAPIConnectionProvider",
]
