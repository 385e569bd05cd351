"""Dialect registry and factory.

Manifesto:
    Callers hand over whatever product name their driver reports
    ("PostgreSQL", "Microsoft SQL Server", "mssql", "H2 2.2.224" ...) and get
    the matching dialect back. Vendor names never appear outside this module
    and the dialect classes themselves.

Features:
    - ``DialectRegistry`` with pre-registered defaults and aliases
    - Matching: exact, then case-insensitive, then substring either way, in
      registration order
    - One cached instance per product name; ``register()`` invalidates it
    - ``dialect_registry`` module singleton and ``get_dialect()`` shortcut

Examples:
    >>> get_dialect("PostgreSQL 16.2").name
    'postgresql'
    >>> dialect_registry.is_supported("db2")
    False

Tags:
    dialect, registry, factory, singleton, schemaspine

Doc-Types:
    api-reference
"""

from __future__ import annotations

import threading
from collections.abc import Callable

from schemaspine.core.errors import UnsupportedDatabaseError
from schemaspine.core.logging import get_logger
from schemaspine.dialects.base import Dialect
from schemaspine.dialects.h2 import H2Dialect
from schemaspine.dialects.mysql import MySQLDialect
from schemaspine.dialects.oracle import OracleDialect
from schemaspine.dialects.postgresql import PostgreSQLDialect
from schemaspine.dialects.sqlserver import SQLServerDialect

logger = get_logger(__name__)

DialectFactory = Callable[[], Dialect]


class DialectRegistry:
    """
    Registry mapping product names to dialect factories.

    Pre-registered names, in matching order:
    ``MySQL``, ``PostgreSQL``, ``Microsoft SQL Server``, ``Oracle``, ``H2``,
    then the aliases ``mysql``, ``mariadb``, ``postgresql``, ``postgres``,
    ``sqlserver``, ``mssql``, ``oracle``, ``h2``.
    """

    def __init__(self):
        self._factories: dict[str, DialectFactory] = {}
        self._cache: dict[str, Dialect] = {}
        self._lock = threading.RLock()
        self._register_defaults()

    def _register_defaults(self) -> None:
        """Register default dialects."""
        self._factories["MySQL"] = MySQLDialect
        self._factories["PostgreSQL"] = PostgreSQLDialect
        self._factories["Microsoft SQL Server"] = SQLServerDialect
        self._factories["Oracle"] = OracleDialect
        self._factories["H2"] = H2Dialect
        self._factories["mysql"] = MySQLDialect
        self._factories["mariadb"] = MySQLDialect
        self._factories["postgresql"] = PostgreSQLDialect
        self._factories["postgres"] = PostgreSQLDialect  # Alias
        self._factories["sqlserver"] = SQLServerDialect
        self._factories["mssql"] = SQLServerDialect  # SQLAlchemy dialect name
        self._factories["oracle"] = OracleDialect
        self._factories["h2"] = H2Dialect

    def register(self, name: str, implementation: type | Dialect) -> None:
        """Register a dialect class (instantiated on resolve) or a ready instance."""
        if isinstance(implementation, type):
            factory: DialectFactory = implementation
        else:
            factory = lambda: implementation  # noqa: E731
        with self._lock:
            self._factories[name] = factory
            self._cache.clear()
        logger.debug("dialect.registered", name=name)

    def _match(self, product_name: str) -> str | None:
        if product_name in self._factories:
            return product_name
        lowered = product_name.lower()
        for key in self._factories:
            if key.lower() == lowered:
                return key
        for key in self._factories:
            candidate = key.lower()
            if candidate in lowered or lowered in candidate:
                return key
        return None

    def resolve(self, product_name: str) -> Dialect:
        """Dialect for a database product name.

        Raises:
            UnsupportedDatabaseError: no registered name matches
        """
        if not product_name or not product_name.strip():
            raise UnsupportedDatabaseError(product_name or "", self.list_supported())
        with self._lock:
            cached = self._cache.get(product_name)
            if cached is not None:
                return cached
            key = self._match(product_name.strip())
            if key is None:
                raise UnsupportedDatabaseError(product_name, self.list_supported())
            dialect = self._factories[key]()
            self._cache[product_name] = dialect
        logger.debug("dialect.resolved", product=product_name, dialect=dialect.name)
        return dialect

    def is_supported(self, product_name: str) -> bool:
        if not product_name or not product_name.strip():
            return False
        with self._lock:
            return self._match(product_name.strip()) is not None

    def list_supported(self) -> list[str]:
        """Registered names in registration order."""
        with self._lock:
            return list(self._factories)

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()


# Global registry
dialect_registry = DialectRegistry()


def get_dialect(product_name: str) -> Dialect:
    """
    Resolve a dialect from the global registry.

    Usage:
        dialect = get_dialect("MySQL")
        dialect = get_dialect(engine.dialect.name)
    """
    return dialect_registry.resolve(product_name)


def register_dialect(name: str, implementation: type | Dialect) -> None:
    """Register a dialect on the global registry."""
    dialect_registry.register(name, implementation)


__all__ = [
    "DialectRegistry",
    "dialect_registry",
    "get_dialect",
    "register_dialect",
]
