"""Reconciliation pipeline: inspect the live table, diff, execute.

ARCHITECTURE
────────────
::

    inspector.py  live catalog → TableDescriptor | ABSENT
    differ.py     (desired, current) → [Action]
    actions.py    Action / ActionKind
    executor.py   [Action] → SQL → ExecutionReport
"""

from schemaspine.reconcile.actions import Action, ActionKind
from schemaspine.reconcile.differ import column_differences, diff_tables, index_matches
from schemaspine.reconcile.executor import ExecutionReport, MigrationExecutor
from schemaspine.reconcile.inspector import ABSENT, SchemaInspector

__all__ = [
    "Action",
    "ActionKind",
    "column_differences",
    "diff_tables",
    "index_matches",
    "ExecutionReport",
    "MigrationExecutor",
    "ABSENT",
    "SchemaInspector",
]
