"""
schemaspine - declarative table reconciliation.

Declare tables as annotated classes, point a connection provider at a
database, and let the maintainer bring the live table in line:

    from schemaspine import SchemaMaintainer, SQLAlchemyConnectionProvider

    maintainer = SchemaMaintainer(SQLAlchemyConnectionProvider(engine))
    result = maintainer.maintain_one(Order)
"""

__version__ = "0.1.0"

from schemaspine.core.connection import DBAPIConnectionProvider, SQLAlchemyConnectionProvider
from schemaspine.core.errors import (
    ConfigError,
    MetadataError,
    SchemaSpineError,
    UnsupportedDatabaseError,
)
from schemaspine.core.logging import configure_logging, get_logger
from schemaspine.core.settings import MaintenanceSettings, get_settings
from schemaspine.dialects import get_dialect, register_dialect
from schemaspine.maintenance import (
    BatchResult,
    MaintenanceResult,
    Outcome,
    SchemaMaintainer,
    ValidationReport,
)
from schemaspine.metadata import Column, Id, Index, Transient, index, table

__all__ = [
    "__version__",
    "DBAPIConnectionProvider",
    "SQLAlchemyConnectionProvider",
    "ConfigError",
    "MetadataError",
    "SchemaSpineError",
    "UnsupportedDatabaseError",
    "configure_logging",
    "get_logger",
    "MaintenanceSettings",
    "get_settings",
    "get_dialect",
    "register_dialect",
    "BatchResult",
    "MaintenanceResult",
    "Outcome",
    "SchemaMaintainer",
    "ValidationReport",
    "Column",
    "Id",
    "Index",
    "Transient",
    "index",
    "table",
]
