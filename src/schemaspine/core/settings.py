"""Maintenance settings.

Manifesto:
    Destructive behaviour must be opt-in and visible in one place.
    ``MaintenanceSettings`` gathers every switch the orchestrator honours
    (drop policies, dry-run, worker pool size, SQL echo) and reads them from
    ``SCHEMA_SPINE_*`` environment variables or a ``.env`` file.

Features:
    - **MaintenanceSettings:** pydantic-settings model with safe defaults
    - **get_settings():** Cached instance for the process
    - **clear_settings_cache():** Reset between tests

Examples:
    >>> import os
    >>> os.environ["SCHEMA_SPINE_ALLOW_DROP_COLUMN"] = "true"
    >>> clear_settings_cache()
    >>> get_settings().allow_drop_column
    True

Tags:
    settings, configuration, pydantic, environment, schemaspine

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MaintenanceSettings(BaseSettings):
    """Table maintenance configuration.

    Fields
    ──────
    enabled                  : Master switch; when off every call is SKIPPED
    database_type            : Force a dialect instead of the connection's product name
    default_schema           : Schema used when an entity declares none
    allow_drop_column        : Emit DROP COLUMN for columns absent from the model
    allow_drop_index         : Emit DROP INDEX for indexes absent from the model
    dry_run                  : Render statements without executing them
    print_sql                : Log every statement at INFO instead of DEBUG
    async_enabled            : Run *_async calls on the worker pool
    async_max_workers        : Worker pool size
    async_thread_name_prefix : Worker thread name prefix
    """

    model_config = SettingsConfigDict(
        env_prefix="SCHEMA_SPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Switches ─────────────────────────────────────────────────
    enabled: bool = True
    database_type: str | None = None
    default_schema: str | None = None

    # ── Destructive policies ─────────────────────────────────────
    allow_drop_column: bool = Field(default=False)
    allow_drop_index: bool = Field(default=True)

    # ── Execution ────────────────────────────────────────────────
    dry_run: bool = False
    print_sql: bool = True

    # ── Async ────────────────────────────────────────────────────
    async_enabled: bool = True
    async_max_workers: int = Field(default=4, ge=1)
    async_thread_name_prefix: str = "table-maintenance-"

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"


_settings_cache: dict[str, MaintenanceSettings] = {}


def get_settings(*, _force_reload: bool = False) -> MaintenanceSettings:
    """Load, validate, and cache a :class:`MaintenanceSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = MaintenanceSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


__all__ = [
    "MaintenanceSettings",
    "get_settings",
    "clear_settings_cache",
]
