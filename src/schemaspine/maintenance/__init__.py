"""Orchestration: guard, run, and report table maintenance.

ARCHITECTURE
────────────
::

    service.py  SchemaMaintainer (sync, batch, async entry points)
    guard.py    TableGuard (one reconciliation per table at a time)
    results.py  MaintenanceResult, BatchResult, ValidationReport
"""

from schemaspine.maintenance.guard import (
    GuardState,
    GuardStatus,
    TableGuard,
    reset_table_guard,
    table_guard,
)
from schemaspine.maintenance.results import (
    BatchResult,
    MaintenanceResult,
    Outcome,
    ValidationReport,
)
from schemaspine.maintenance.service import SchemaMaintainer

__all__ = [
    "GuardState",
    "GuardStatus",
    "TableGuard",
    "reset_table_guard",
    "table_guard",
    "BatchResult",
    "MaintenanceResult",
    "Outcome",
    "ValidationReport",
    "SchemaMaintainer",
]
