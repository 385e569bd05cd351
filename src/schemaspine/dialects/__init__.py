"""Vendor DDL dialects and the registry that resolves them.

ARCHITECTURE
────────────
::

    registry.py    product name → Dialect (cached per name)
    base.py        Dialect protocol + shared BaseDialect rendering
    mysql.py       MySQL / MariaDB
    postgresql.py  PostgreSQL
    sqlserver.py   Microsoft SQL Server
    oracle.py      Oracle
    h2.py          H2
"""

from schemaspine.dialects.base import BaseDialect, Dialect
from schemaspine.dialects.h2 import H2Dialect
from schemaspine.dialects.mysql import MySQLDialect
from schemaspine.dialects.oracle import OracleDialect
from schemaspine.dialects.postgresql import PostgreSQLDialect
from schemaspine.dialects.registry import (
    DialectRegistry,
    dialect_registry,
    get_dialect,
    register_dialect,
)
from schemaspine.dialects.sqlserver import SQLServerDialect

__all__ = [
    "BaseDialect",
    "Dialect",
    "H2Dialect",
    "MySQLDialect",
    "OracleDialect",
    "PostgreSQLDialect",
    "SQLServerDialect",
    "DialectRegistry",
    "dialect_registry",
    "get_dialect",
    "register_dialect",
]
