"""Maintenance result types."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from schemaspine.core.errors import SchemaSpineError
from schemaspine.reconcile.actions import Action


class Outcome(str, Enum):
    SUCCESS = "SUCCESS"
    SKIPPED = "SKIPPED"  # benign: not an entity, disabled, or already in progress
    FAILURE = "FAILURE"


@dataclass(slots=True)
class MaintenanceResult:
    """Result of reconciling one table."""

    table_name: str
    outcome: Outcome
    message: str
    execution_time_ms: int = 0
    actions: list[Action] = field(default_factory=list)
    statements: list[str] = field(default_factory=list)
    conflict_started_at: datetime | None = None
    error: SchemaSpineError | None = None

    @property
    def success(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "table_name": self.table_name,
            "outcome": self.outcome.value,
            "message": self.message,
            "execution_time_ms": self.execution_time_ms,
            "actions": [action.describe() for action in self.actions],
            "statements": list(self.statements),
        }
        if self.conflict_started_at is not None:
            result["conflict_started_at"] = self.conflict_started_at.isoformat()
        if self.error is not None:
            result["error"] = self.error.to_dict()
        return result


@dataclass(slots=True)
class BatchResult:
    """Results of a batch, in input order."""

    results: list[MaintenanceResult] = field(default_factory=list)

    def _count(self, outcome: Outcome) -> int:
        return sum(1 for r in self.results if r.outcome is outcome)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def success_count(self) -> int:
        return self._count(Outcome.SUCCESS)

    @property
    def failure_count(self) -> int:
        return self._count(Outcome.FAILURE)

    @property
    def skipped_count(self) -> int:
        return self._count(Outcome.SKIPPED)

    @property
    def failures(self) -> list[MaintenanceResult]:
        return [r for r in self.results if r.outcome is Outcome.FAILURE]

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "success": self.success_count,
            "failure": self.failure_count,
            "skipped": self.skipped_count,
            "results": [r.to_dict() for r in self.results],
        }


@dataclass(slots=True)
class ValidationReport:
    """Read-only comparison of an entity against its live table."""

    table_name: str
    exists: bool
    issues: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return self.exists and not self.issues

    @property
    def message(self) -> str:
        if not self.exists:
            return f"Table {self.table_name} does not exist"
        if not self.issues:
            return "Table structure matches"
        return "; ".join(self.issues)


__all__ = [
    "Outcome",
    "MaintenanceResult",
    "BatchResult",
    "ValidationReport",
]
