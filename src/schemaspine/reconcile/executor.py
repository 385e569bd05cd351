"""Migration executor.

Manifesto:
    DDL is not transactional on every vendor, so the executor does the only
    honest thing: run statements one by one in action order, stop at the
    first failure and report exactly what was applied. Nothing is rolled
    back and nothing is retried.

ARCHITECTURE
────────────
::

    MigrationExecutor(dialect)
      ├── .render(action)        ─ action → [statement, comment statements...]
      ├── .plan(actions)         ─ every statement, nothing executed
      └── .apply(conn, actions)  ─ execute sequentially → ExecutionReport
                                    first failure stops the table

Tags:
    executor, ddl, migration, schemaspine

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from schemaspine.core.errors import ExecutionError
from schemaspine.core.logging import get_logger
from schemaspine.core.protocols import Connection
from schemaspine.dialects.base import Dialect
from schemaspine.reconcile.actions import Action, ActionKind

logger = get_logger(__name__)


@dataclass(slots=True)
class ExecutionReport:
    """Outcome of applying one table's actions.

    ``statements`` lists what was executed successfully (or, on a dry run,
    everything that would have been).
    """

    table: str
    success: bool
    actions: list[Action] = field(default_factory=list)
    statements: list[str] = field(default_factory=list)
    failed_statement: str | None = None
    error: ExecutionError | None = None
    dry_run: bool = False


class MigrationExecutor:
    """Renders actions through a dialect and executes them in order."""

    def __init__(self, dialect: Dialect, *, print_sql: bool = True, dry_run: bool = False):
        self._dialect = dialect
        self._print_sql = print_sql
        self._dry_run = dry_run

    def render(self, action: Action) -> list[str]:
        """SQL statements for one action, including follow-up comment statements."""
        d = self._dialect
        kind = action.kind
        if kind is ActionKind.CREATE_TABLE:
            return [d.generate_create_table(action.table_descriptor)] + d.comment_statements(
                action.table_descriptor
            )
        if kind is ActionKind.ADD_COLUMN:
            return [d.generate_add_column(action.table, action.column, action.schema)] + (
                d.column_comment_statements(action.table, action.column, action.schema)
            )
        if kind is ActionKind.MODIFY_COLUMN:
            return [
                d.generate_modify_column(action.table, action.column, action.schema, action.previous)
            ]
        if kind is ActionKind.DROP_COLUMN:
            return [d.generate_drop_column(action.table, action.column_name, action.schema)]
        if kind is ActionKind.CREATE_INDEX:
            return [d.generate_create_index(action.table, action.index, action.schema)]
        if kind is ActionKind.DROP_INDEX:
            return [d.generate_drop_index(action.table, action.index_name, action.schema)]
        raise ValueError(f"Unknown action kind: {kind}")

    def plan(self, actions: Sequence[Action]) -> list[str]:
        return [sql for action in actions for sql in self.render(action)]

    def _echo(self, sql: str, table: str) -> None:
        if self._print_sql:
            logger.info("sql.execute", table=table, sql=sql)
        else:
            logger.debug("sql.execute", table=table, sql=sql)

    def apply(self, conn: Connection, actions: Sequence[Action]) -> ExecutionReport:
        """Execute ``actions`` in order; stop at the first failing statement."""
        table = actions[0].table if actions else ""
        report = ExecutionReport(table=table, success=True, actions=list(actions), dry_run=self._dry_run)

        if self._dry_run:
            report.statements = self.plan(actions)
            for sql in report.statements:
                logger.info("sql.dry_run", table=table, sql=sql)
            return report

        for action in actions:
            for sql in self.render(action):
                self._echo(sql, table)
                try:
                    conn.execute(sql)
                except Exception as exc:
                    error = ExecutionError(
                        f"{action.describe()} failed: {exc}", cause=exc
                    ).with_context(
                        table=action.table,
                        schema=action.schema,
                        dialect=self._dialect.name,
                        statement=sql,
                        action=action.kind.value,
                    )
                    logger.error(
                        "statement.failed",
                        table=action.table,
                        action=action.kind.value,
                        sql=sql,
                        error=str(exc),
                        applied=len(report.statements),
                    )
                    report.success = False
                    report.failed_statement = sql
                    report.error = error
                    return report
                report.statements.append(sql)
        return report


__all__ = [
    "ExecutionReport",
    "MigrationExecutor",
]
