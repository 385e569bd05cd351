"""Schema maintenance orchestrator.

Manifesto:
    One entry point turns "make the table for this class look right" into
    resolve → guard → inspect → diff → execute. Sync, batch and async calls
    all run the same pipeline under the same drop policy, so the answer
    never depends on how the caller asked.

    Configuration problems (no provider, unsupported database) surface
    synchronously from the constructor. Everything that can go wrong for a
    single table comes back as a :class:`MaintenanceResult`.

ARCHITECTURE
────────────
::

    SchemaMaintainer(provider, settings=..., guard=...)
      ├── .maintain_one(Entity)          → MaintenanceResult
      ├── .maintain_many([...])          → BatchResult (input order)
      ├── .maintain_one_async(Entity)    → Future[MaintenanceResult]
      ├── .maintain_many_async([...])    → Future[BatchResult]
      ├── .plan(Entity) / .plan_sql(...) → actions / statements, nothing executed
      ├── .validate(Entity)              → ValidationReport (read-only)
      ├── .status(table)                 → GuardStatus
      └── .shutdown()                    → stop the worker pool

    maintain_one
      ├── disabled / not an entity / auto_maintain=False → SKIPPED
      ├── guard held by another caller                   → SKIPPED (+ started_at)
      ├── inspect ─▶ diff ─▶ execute                     → SUCCESS
      └── introspection / execution error                → FAILURE

Examples:
    >>> with SchemaMaintainer(SQLAlchemyConnectionProvider(engine)) as maintainer:
    ...     result = maintainer.maintain_one(Order)
    >>> result.outcome
    <Outcome.SUCCESS: 'SUCCESS'>

Tags:
    orchestrator, maintenance, async, batch, schemaspine

Doc-Types:
    - API Reference
    - Architecture Documentation
"""

from __future__ import annotations

import threading
import time
from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import replace

from schemaspine.core.errors import (
    ConfigError,
    DatabaseError,
    MetadataError,
    MissingConnectionError,
    SchemaSpineError,
)
from schemaspine.core.logging import LogContext, get_logger
from schemaspine.core.protocols import ConnectionProvider
from schemaspine.core.settings import MaintenanceSettings, get_settings
from schemaspine.dialects.base import Dialect
from schemaspine.dialects.registry import DialectRegistry, dialect_registry
from schemaspine.maintenance.guard import GuardStatus, TableGuard, table_guard
from schemaspine.maintenance.results import (
    BatchResult,
    MaintenanceResult,
    Outcome,
    ValidationReport,
)
from schemaspine.metadata.descriptors import TableDescriptor
from schemaspine.metadata.parser import resolve_table
from schemaspine.reconcile.actions import Action
from schemaspine.reconcile.differ import column_differences, diff_tables, index_matches
from schemaspine.reconcile.executor import MigrationExecutor
from schemaspine.reconcile.inspector import ABSENT, SchemaInspector

logger = get_logger(__name__)


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _entity_name(entity_type: type) -> str:
    return getattr(entity_type, "__qualname__", repr(entity_type))


def _completed(result: MaintenanceResult | BatchResult) -> Future:
    future: Future = Future()
    future.set_result(result)
    return future


class SchemaMaintainer:
    """Reconciles entity classes against a live database."""

    def __init__(
        self,
        connection_provider: ConnectionProvider | None,
        *,
        dialect: Dialect | None = None,
        settings: MaintenanceSettings | None = None,
        guard: TableGuard | None = None,
        registry: DialectRegistry | None = None,
    ):
        if connection_provider is None:
            raise MissingConnectionError()
        self._provider = connection_provider
        self._settings = settings or get_settings()
        self._guard = guard or table_guard
        if dialect is None:
            product = self._settings.database_type or connection_provider.product_name
            dialect = (registry or dialect_registry).resolve(product)
        self._dialect = dialect
        self._inspector = SchemaInspector(dialect)
        self._executor = MigrationExecutor(
            dialect,
            print_sql=self._settings.print_sql,
            dry_run=self._settings.dry_run,
        )
        self._pool: ThreadPoolExecutor | None = None
        self._pool_lock = threading.Lock()
        self._closed = False

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def settings(self) -> MaintenanceSettings:
        return self._settings

    # =========================================================================
    # Resolution
    # =========================================================================

    def _desired(self, entity_type: type) -> TableDescriptor | MaintenanceResult:
        """Desired table for ``entity_type`` or the SKIPPED result explaining why not."""
        name = _entity_name(entity_type)
        if not self._settings.enabled:
            return MaintenanceResult(name, Outcome.SKIPPED, "Table maintenance is disabled")
        try:
            desired = resolve_table(entity_type)
        except MetadataError as exc:
            logger.warning("entity.invalid", entity=name, error=exc.message)
            return MaintenanceResult(name, Outcome.SKIPPED, f"Invalid entity metadata: {exc.message}", error=exc)
        if desired is None:
            return MaintenanceResult(name, Outcome.SKIPPED, f"{name} is not a table entity")
        if not desired.auto_maintain:
            return MaintenanceResult(desired.name, Outcome.SKIPPED, "Auto maintenance disabled for table")
        if desired.schema is None and self._settings.default_schema:
            desired = replace(desired, schema=self._settings.default_schema)
        return desired

    @staticmethod
    def _guard_key(name: str, schema: str | None) -> str:
        if schema:
            return f"{schema}.{name}".lower()
        return name.lower()

    def _diff(self, desired: TableDescriptor, current) -> list[Action]:
        return diff_tables(
            desired,
            current,
            self._dialect,
            allow_drop_columns=self._settings.allow_drop_column,
            allow_drop_indexes=self._settings.allow_drop_index,
        )

    # =========================================================================
    # Sync
    # =========================================================================

    def maintain_one(self, entity_type: type) -> MaintenanceResult:
        """Reconcile the table of one entity class."""
        start = time.perf_counter()
        resolved = self._desired(entity_type)
        if isinstance(resolved, MaintenanceResult):
            logger.debug("table.skipped", entity=_entity_name(entity_type), reason=resolved.message)
            return resolved
        desired = resolved

        key = self._guard_key(desired.name, desired.schema)
        conflict = self._guard.try_acquire(key)
        if conflict is not None:
            logger.info("table.in_progress", table=desired.name, started_at=conflict.started_at)
            return MaintenanceResult(
                desired.name,
                Outcome.SKIPPED,
                "Maintenance already in progress",
                execution_time_ms=_elapsed_ms(start),
                conflict_started_at=conflict.started_at,
            )

        result: MaintenanceResult | None = None
        try:
            with LogContext(table=desired.name, dialect=self._dialect.name):
                result = self._reconcile(desired, start)
            return result
        finally:
            failed = result is None or result.outcome is Outcome.FAILURE
            self._guard.release(
                key,
                success=not failed,
                error=(result.message if result is not None else "interrupted") if failed else None,
            )

    def _reconcile(self, desired: TableDescriptor, start: float) -> MaintenanceResult:
        try:
            with self._provider.connection() as conn:
                current = self._inspector.inspect(conn, desired.name, desired.schema)
                actions = self._diff(desired, current)
                if not actions:
                    logger.info("table.up_to_date")
                    return MaintenanceResult(
                        desired.name,
                        Outcome.SUCCESS,
                        "Table is up to date",
                        execution_time_ms=_elapsed_ms(start),
                    )
                logger.info("diff.computed", actions=[a.describe() for a in actions])
                report = self._executor.apply(conn, actions)
        except ConfigError:
            raise
        except SchemaSpineError as exc:
            return self._failure(desired, exc, start)
        except Exception as exc:
            error = DatabaseError(f"Connection failure: {exc}", cause=exc).with_context(
                table=desired.name, schema=desired.schema, dialect=self._dialect.name
            )
            return self._failure(desired, error, start)

        if not report.success:
            return MaintenanceResult(
                desired.name,
                Outcome.FAILURE,
                report.error.message if report.error else "Statement failed",
                execution_time_ms=_elapsed_ms(start),
                actions=report.actions,
                statements=report.statements,
                error=report.error,
            )

        verb = "Planned" if report.dry_run else "Applied"
        message = f"{verb} {len(report.statements)} statement(s) for {len(actions)} action(s)"
        logger.info("table.maintained", statements=len(report.statements), dry_run=report.dry_run)
        return MaintenanceResult(
            desired.name,
            Outcome.SUCCESS,
            message,
            execution_time_ms=_elapsed_ms(start),
            actions=report.actions,
            statements=report.statements,
        )

    def _failure(self, desired: TableDescriptor, exc: SchemaSpineError, start: float) -> MaintenanceResult:
        logger.error("table.failed", error=exc.message, category=exc.category.value)
        return MaintenanceResult(
            desired.name,
            Outcome.FAILURE,
            exc.message,
            execution_time_ms=_elapsed_ms(start),
            error=exc,
        )

    def _maintain_isolated(self, entity_type: type) -> MaintenanceResult:
        """``maintain_one`` that never raises; batch entries are independent."""
        try:
            return self.maintain_one(entity_type)
        except Exception as exc:
            logger.exception("entity.unexpected_error", entity=_entity_name(entity_type))
            error = exc if isinstance(exc, SchemaSpineError) else SchemaSpineError(str(exc), cause=exc)
            return MaintenanceResult(_entity_name(entity_type), Outcome.FAILURE, error.message, error=error)

    def maintain_many(self, entity_types: Iterable[type]) -> BatchResult:
        """Reconcile each entity in turn; one failure never stops the rest."""
        batch = BatchResult([self._maintain_isolated(t) for t in entity_types])
        logger.info(
            "batch.completed",
            total=batch.total,
            success=batch.success_count,
            failure=batch.failure_count,
            skipped=batch.skipped_count,
        )
        return batch

    # =========================================================================
    # Async
    # =========================================================================

    def _get_pool(self) -> ThreadPoolExecutor:
        with self._pool_lock:
            if self._closed:
                raise RuntimeError("SchemaMaintainer has been shut down")
            if self._pool is None:
                self._pool = ThreadPoolExecutor(
                    max_workers=self._settings.async_max_workers,
                    thread_name_prefix=self._settings.async_thread_name_prefix,
                )
            return self._pool

    def maintain_one_async(self, entity_type: type) -> Future:
        """Submit one entity to the worker pool.

        With ``async_enabled=False`` the work runs on the calling thread and
        an already-completed future is returned.
        """
        if not self._settings.async_enabled:
            return _completed(self._maintain_isolated(entity_type))
        return self._get_pool().submit(self._maintain_isolated, entity_type)

    def maintain_many_async(self, entity_types: Iterable[type]) -> Future:
        """Submit every entity; the returned future resolves to a :class:`BatchResult`."""
        entity_types = list(entity_types)
        if not self._settings.async_enabled:
            return _completed(self.maintain_many(entity_types))

        batch: Future = Future()
        if not entity_types:
            batch.set_result(BatchResult())
            return batch

        futures = [self._get_pool().submit(self._maintain_isolated, t) for t in entity_types]
        remaining = [len(futures)]
        lock = threading.Lock()

        def _on_done(_: Future) -> None:
            with lock:
                remaining[0] -= 1
                if remaining[0]:
                    return
            batch.set_result(BatchResult([f.result() for f in futures]))

        for future in futures:
            future.add_done_callback(_on_done)
        return batch

    # =========================================================================
    # Read-only
    # =========================================================================

    def plan(self, entity_type: type) -> list[Action]:
        """Actions ``maintain_one`` would take, without executing anything."""
        resolved = self._desired(entity_type)
        if isinstance(resolved, MaintenanceResult):
            return []
        with self._provider.connection() as conn:
            current = self._inspector.inspect(conn, resolved.name, resolved.schema)
        return self._diff(resolved, current)

    def plan_sql(self, entity_type: type) -> list[str]:
        return self._executor.plan(self.plan(entity_type))

    def validate(self, entity_type: type) -> ValidationReport:
        """Compare an entity with its live table and list every discrepancy."""
        desired = resolve_table(entity_type)
        if desired is None:
            raise MetadataError(f"{_entity_name(entity_type)} is not a table entity")
        if desired.schema is None and self._settings.default_schema:
            desired = replace(desired, schema=self._settings.default_schema)

        with self._provider.connection() as conn:
            current = self._inspector.inspect(conn, desired.name, desired.schema)
        if current is ABSENT:
            return ValidationReport(desired.name, exists=False, issues=[f"Missing table: {desired.name}"])

        issues = []
        for column in desired.columns:
            live = current.column(column.name)
            if live is None:
                issues.append(f"Missing column: {column.name}")
                continue
            reasons = column_differences(column, live, self._dialect)
            if reasons:
                issues.append(f"Column mismatch: {column.name} ({', '.join(reasons)})")
        for index in desired.indexes:
            live_index = current.index(index.name)
            if live_index is None:
                issues.append(f"Missing index: {index.name}")
            elif not index_matches(index, live_index, self._dialect):
                issues.append(f"Index mismatch: {index.name}")
        return ValidationReport(desired.name, exists=True, issues=issues)

    def status(self, table: str, schema: str | None = None) -> GuardStatus:
        """Guard status for ``table`` in ``schema``, or in ``default_schema`` when omitted."""
        return self._guard.status(self._guard_key(table, schema or self._settings.default_schema))

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def shutdown(self, wait: bool = True) -> None:
        """Stop the worker pool; later async calls raise."""
        with self._pool_lock:
            self._closed = True
            pool, self._pool = self._pool, None
        if pool is not None:
            pool.shutdown(wait=wait)
            logger.debug("maintainer.shutdown")

    def __enter__(self) -> SchemaMaintainer:
        return self

    def __exit__(self, *args) -> None:
        self.shutdown()


__all__ = [
    "SchemaMaintainer",
]
