"""Per-table concurrency guard.

WHY
───
Two callers reconciling ``orders`` at the same time would both see the
same drift and both emit the same ALTER, and the second one fails or, worse,
half-applies. The guard lets exactly one of them run; the other gets the
status of the run in progress and reports a benign skip.

ARCHITECTURE
────────────
::

    TableGuard()
      ├── .try_acquire(table)   ─ atomic check-and-set → None | conflicting status
      ├── .release(table, ...)  ─ IN_PROGRESS → COMPLETED(success|failure)
      ├── .status(table)        ─ IDLE when never seen
      └── .reset()              ─ forget everything (tests)

    States: IDLE → IN_PROGRESS → COMPLETED → (next try_acquire) IN_PROGRESS

BEST PRACTICES
──────────────
- Always release in a ``finally``.
- Key by the resolved table name (schema-qualified when a schema is set).

Example::

    conflict = table_guard.try_acquire("orders")
    if conflict is None:
        try:
            reconcile()
        finally:
            table_guard.release("orders", success=True)
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import Enum


def utcnow() -> datetime:
    """Return timezone-aware UTC datetime."""
    return datetime.now(UTC)


class GuardState(str, Enum):
    IDLE = "IDLE"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


@dataclass(frozen=True, slots=True)
class GuardStatus:
    """Snapshot of one table's maintenance state."""

    table: str
    state: GuardState = GuardState.IDLE
    started_at: datetime | None = None
    finished_at: datetime | None = None
    success: bool | None = None
    error: str | None = None

    @property
    def in_progress(self) -> bool:
        return self.state is GuardState.IN_PROGRESS


class TableGuard:
    """Process-wide map of table → :class:`GuardStatus` with atomic transitions."""

    def __init__(self):
        self._lock = threading.Lock()
        self._statuses: dict[str, GuardStatus] = {}

    def try_acquire(self, table: str) -> GuardStatus | None:
        """Mark ``table`` IN_PROGRESS.

        Returns:
            None when acquired, otherwise the status of the run holding it
        """
        with self._lock:
            current = self._statuses.get(table)
            if current is not None and current.in_progress:
                return current
            self._statuses[table] = GuardStatus(
                table=table, state=GuardState.IN_PROGRESS, started_at=utcnow()
            )
            return None

    def release(self, table: str, *, success: bool, error: str | None = None) -> GuardStatus:
        """Mark ``table`` COMPLETED with the run's outcome."""
        with self._lock:
            current = self._statuses.get(table) or GuardStatus(table=table, started_at=utcnow())
            status = replace(
                current,
                state=GuardState.COMPLETED,
                finished_at=utcnow(),
                success=success,
                error=error,
            )
            self._statuses[table] = status
            return status

    def status(self, table: str) -> GuardStatus:
        with self._lock:
            return self._statuses.get(table) or GuardStatus(table=table)

    def active(self) -> list[GuardStatus]:
        """Tables currently IN_PROGRESS."""
        with self._lock:
            return [s for s in self._statuses.values() if s.in_progress]

    def reset(self) -> None:
        """Forget every status (primarily for testing)."""
        with self._lock:
            self._statuses.clear()


# Process-wide guard
table_guard = TableGuard()


def reset_table_guard() -> None:
    table_guard.reset()


__all__ = [
    "GuardState",
    "GuardStatus",
    "TableGuard",
    "table_guard",
    "reset_table_guard",
    "utcnow",
]
