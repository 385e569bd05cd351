"""Core primitives: errors, logging, settings and the connection boundary."""

from schemaspine.core.errors import (
    ConfigError,
    DatabaseError,
    ErrorCategory,
    ErrorContext,
    ExecutionError,
    IntrospectionError,
    MetadataError,
    MissingConnectionError,
    SchemaSpineError,
    UnsupportedDatabaseError,
)
from schemaspine.core.protocols import Connection, ConnectionProvider
from schemaspine.core.settings import MaintenanceSettings, clear_settings_cache, get_settings

__all__ = [
    "ConfigError",
    "DatabaseError",
    "ErrorCategory",
    "ErrorContext",
    "ExecutionError",
    "IntrospectionError",
    "MetadataError",
    "MissingConnectionError",
    "SchemaSpineError",
    "UnsupportedDatabaseError",
    "Connection",
    "ConnectionProvider",
    "MaintenanceSettings",
    "clear_settings_cache",
    "get_settings",
]
