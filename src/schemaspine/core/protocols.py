"""
Connection protocols for schemaspine.

The engine never imports a database driver. Everything it needs from a
database is expressed here: run a statement, run a catalog query, and say
which product sits on the other end.

Manifesto:
    - **Decoupling:** The inspector and executor depend on shape, not drivers
    - **Testability:** A recording fake satisfies the protocol in tests
    - **One unit per table:** Providers hand out one connection per table

Architecture:
    ::

        ConnectionProvider
          ├── product_name         → "MySQL", "PostgreSQL", "mssql" ...
          └── connection()         → context manager
                 │
                 ▼
        Connection
          ├── execute(sql) -> int  → DDL, returns driver rowcount
          └── query(sql)   -> rows → list of dicts, lower-cased keys

        Implementations (schemaspine.core.connection):
          DBAPIConnectionProvider       any PEP 249 connect() callable
          SQLAlchemyConnectionProvider  sqlalchemy Engine

Guardrails:
    ❌ DON'T: Pass driver connections straight to the inspector
    ✅ DO: Wrap them in a provider so rows come back as lower-cased dicts

Tags:
    protocol, connection, database, schemaspine, contracts

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Connection(Protocol):
    """
    Minimal synchronous connection used by the inspector and executor.

    Rows returned by ``query`` are dicts keyed by lower-cased column labels,
    so dialect queries can alias catalog columns to a uniform row shape.
    """

    def execute(self, sql: str) -> int:
        """Execute one statement and return the driver rowcount."""
        ...

    def query(self, sql: str) -> list[dict[str, Any]]:
        """Run a query and return every row."""
        ...


@runtime_checkable
class ConnectionProvider(Protocol):
    """Hands out a connection per table unit."""

    @property
    def product_name(self) -> str:
        """Database product name used for dialect resolution."""
        ...

    def connection(self) -> AbstractContextManager[Connection]:
        """Acquire a connection, released when the context exits."""
        ...


__all__ = [
    "Connection",
    "ConnectionProvider",
]
