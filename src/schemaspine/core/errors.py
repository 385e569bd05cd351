"""
Structured error types for schema reconciliation.

Every failure the engine can produce is a ``SchemaSpineError`` subclass
carrying a category, structured context (table, dialect, statement) and an
optional chained cause. The orchestrator relies on the category to decide
what happens to a table unit: configuration errors stop the caller, metadata
errors skip the entity, introspection and execution errors fail the table.

Manifesto:
    - **Typed Error Hierarchy:** One error type per failure domain
    - **No Automatic Retry:** DDL is never retried, every error is final
    - **Rich Context:** Errors carry the table and statement they concern
    - **Error Chaining:** Driver exceptions survive as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                     SchemaSpineError                         │
        │               (category, context, cause)                     │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  ConfigError          MetadataError      DatabaseError       │
        │  (CONFIG)             (METADATA)         (DATABASE)          │
        │     │                                       │                │
        │  UnsupportedDatabase                  IntrospectionError     │
        │  MissingConnection                    ExecutionError         │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> error = ExecutionError("ALTER failed")
    >>> error.with_context(table="orders", statement="ALTER TABLE ...")
    ExecutionError('ALTER failed', category=EXECUTION)
    >>> error.to_dict()["context"]["table"]
    'orders'

Guardrails:
    ❌ DON'T: Raise bare Exception from dialects or the executor
    ✅ DO: Wrap driver errors with ``cause=`` so the root cause is kept

    ❌ DON'T: Catch ConfigError inside the orchestrator
    ✅ DO: Let misconfiguration surface synchronously to the caller

Tags:
    error-handling, exception-hierarchy, error-context, schemaspine

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories used for routing and result classification."""

    CONFIG = "CONFIG"                # Unsupported database, missing connection
    METADATA = "METADATA"            # Malformed entity declarations
    DATABASE = "DATABASE"            # Generic driver failure
    INTROSPECTION = "INTROSPECTION"  # Catalog queries failed
    EXECUTION = "EXECUTION"          # DDL statement failed
    INTERNAL = "INTERNAL"            # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only fields that are set appear in ``to_dict()``; anything that does not
    fit the typed fields goes into ``metadata``.

    Attributes:
        table: Table name the failure concerns
        schema: Schema or owner qualifier
        dialect: Dialect name (``mysql``, ``postgresql`` ...)
        entity: Qualified name of the declared entity type
        statement: SQL text that was being executed
        metadata: Additional key-value pairs
    """

    table: str | None = None
    schema: str | None = None
    dialect: str | None = None
    entity: str | None = None
    statement: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["table", "schema", "dialect", "entity", "statement"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class SchemaSpineError(Exception):
    """
    Base exception for all schemaspine errors.

    Subclasses set ``default_category`` so callers rarely pass a category
    explicitly. ``retryable`` is kept on the instance for callers that
    schedule their own retries; the engine itself never retries.

    Examples:
        >>> error = SchemaSpineError("boom")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>

        >>> try:
        ...     raise RuntimeError("driver gone")
        ... except RuntimeError as e:
        ...     error = SchemaSpineError("wrapped", cause=e)
        >>> error.cause
        RuntimeError('driver gone')
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> SchemaSpineError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ExecutionError("Failed").with_context(
                table="orders",
                statement="ALTER TABLE orders ...",
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS (raised synchronously, never retryable)
# =============================================================================


class ConfigError(SchemaSpineError):
    """Invalid or missing configuration."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class UnsupportedDatabaseError(ConfigError):
    """No dialect is registered for the database product."""

    def __init__(self, product_name: str, supported: list[str] | None = None):
        message = f"Unsupported database: {product_name}"
        if supported:
            message += f". Supported: {', '.join(supported)}"
        super().__init__(message)
        self.product_name = product_name
        self.supported = supported or []


class MissingConnectionError(ConfigError):
    """No connection provider was configured."""

    def __init__(self, message: str = "No connection provider configured"):
        super().__init__(message)


# =============================================================================
# METADATA ERRORS
# =============================================================================


class MetadataError(SchemaSpineError):
    """
    Entity declarations could not be turned into a table descriptor.

    The orchestrator skips the entity and reports a warning result.
    """

    default_category = ErrorCategory.METADATA
    default_retryable = False


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(SchemaSpineError):
    """Database operation error."""

    default_category = ErrorCategory.DATABASE


class IntrospectionError(DatabaseError):
    """Reading the live catalog failed."""

    default_category = ErrorCategory.INTROSPECTION


class ExecutionError(DatabaseError):
    """A DDL statement failed; later statements for the table were not run."""

    default_category = ErrorCategory.EXECUTION

    @property
    def statement(self) -> str | None:
        return self.context.statement


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "SchemaSpineError",
    # Config
    "ConfigError",
    "UnsupportedDatabaseError",
    "MissingConnectionError",
    # Metadata
    "MetadataError",
    # Database
    "DatabaseError",
    "IntrospectionError",
    "ExecutionError",
]
