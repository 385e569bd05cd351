"""Tests for the SchemaMaintainer orchestrator."""

from __future__ import annotations

import threading
from decimal import Decimal
from typing import Annotated

import pytest

from conftest import FakeDatabase, FakeProvider
from schemaspine.core.errors import (
    ExecutionError,
    IntrospectionError,
    MetadataError,
    MissingConnectionError,
    UnsupportedDatabaseError,
)
from schemaspine.core.settings import MaintenanceSettings
from schemaspine.maintenance import GuardState, Outcome, SchemaMaintainer, TableGuard
from schemaspine.metadata import (
    Column,
    ColumnDescriptor,
    Id,
    Index,
    LogicalType,
    TableBuilder,
    resolve_table,
    table,
)
from schemaspine.reconcile import ActionKind


# =============================================================================
# Entities
# =============================================================================


@table("sys_user")
class SysUser:
    id: Annotated[int, Id()]
    username: Annotated[str, Column(length=50, unique=True, nullable=False)]


@table("orders", indexes=[Index("customer_ref")])
class Order:
    id: Annotated[int, Id()]
    customer_ref: Annotated[str, Column(length=40)]
    total: Annotated[Decimal, Column(precision=12, scale=2)]


@table(auto_maintain=False)
class ArchivedOrder:
    id: Annotated[int, Id()]


@table()
class Broken:
    name: str = "no markers"


class PlainObject:
    id: int = 0


def _live_orders(*, customer_ref_length: int = 40, extra: ColumnDescriptor | None = None, indexed: bool = True):
    """``orders`` as it exists in the database."""
    builder = (
        TableBuilder("orders")
        .add_column(ColumnDescriptor("id", LogicalType.INT64, primary_key=True, auto_increment=True))
        .add_column(ColumnDescriptor("customer_ref", LogicalType.STRING, length=customer_ref_length))
        .add_column(ColumnDescriptor("total", LogicalType.DECIMAL, precision=12, scale=2))
    )
    if extra is not None:
        builder.add_column(extra)
    if indexed:
        builder.add_index(resolve_table(Order).indexes[0])
    return builder.build()


def _settings(**overrides) -> MaintenanceSettings:
    return MaintenanceSettings(_env_file=None, **overrides)


@pytest.fixture
def db(fake_mysql: FakeDatabase) -> FakeDatabase:
    return fake_mysql


@pytest.fixture
def maintainer(db: FakeDatabase, settings: MaintenanceSettings):
    with SchemaMaintainer(FakeProvider(db, "MySQL"), settings=settings, guard=TableGuard()) as m:
        yield m


# =============================================================================
# Configuration
# =============================================================================


class TestConfiguration:
    def test_missing_provider(self, settings) -> None:
        with pytest.raises(MissingConnectionError):
            SchemaMaintainer(None, settings=settings)

    def test_unsupported_product(self, db, settings) -> None:
        with pytest.raises(UnsupportedDatabaseError, match="SQLite"):
            SchemaMaintainer(FakeProvider(db, "SQLite"), settings=settings)

    def test_database_type_overrides_product_name(self, db) -> None:
        m = SchemaMaintainer(FakeProvider(db, "SQLite"), settings=_settings(database_type="postgresql"))
        assert m.dialect.name == "postgresql"

    def test_product_name_selects_dialect(self, maintainer) -> None:
        assert maintainer.dialect.name == "mysql"


# =============================================================================
# maintain_one
# =============================================================================


class TestMaintainOne:
    def test_creates_absent_table(self, maintainer, db) -> None:
        result = maintainer.maintain_one(SysUser)
        assert result.outcome is Outcome.SUCCESS
        assert result.table_name == "sys_user"
        assert len(db.executed) == 1
        assert db.executed[0].startswith("CREATE TABLE IF NOT EXISTS `sys_user`")
        assert not any("INDEX" in sql for sql in db.executed)
        assert [a.kind for a in result.actions] == [ActionKind.CREATE_TABLE]
        assert result.statements == db.executed
        assert result.execution_time_ms >= 0

    def test_matching_table_is_untouched(self, maintainer, db) -> None:
        db.add(_live_orders())
        result = maintainer.maintain_one(Order)
        assert result.outcome is Outcome.SUCCESS
        assert result.message == "Table is up to date"
        assert db.executed == []

    def test_widens_drifted_column(self, maintainer, db) -> None:
        db.add(_live_orders(customer_ref_length=20))
        result = maintainer.maintain_one(Order)
        assert result.outcome is Outcome.SUCCESS
        assert db.executed == ["ALTER TABLE `orders` MODIFY COLUMN `customer_ref` VARCHAR(40)"]

    def test_missing_index_created(self, maintainer, db) -> None:
        db.add(_live_orders(indexed=False))
        maintainer.maintain_one(Order)
        assert db.executed == [
            "CREATE INDEX `idx_orders_customer_ref` ON `orders` (`customer_ref`) USING BTREE"
        ]

    def test_extra_column_kept_by_default(self, maintainer, db) -> None:
        db.add(_live_orders(extra=ColumnDescriptor("legacy_flag", LogicalType.BOOLEAN)))
        result = maintainer.maintain_one(Order)
        assert result.outcome is Outcome.SUCCESS
        assert not any("legacy_flag" in sql for sql in db.executed)

    def test_extra_column_dropped_when_allowed(self, db) -> None:
        db.add(_live_orders(extra=ColumnDescriptor("legacy_flag", LogicalType.BOOLEAN)))
        m = SchemaMaintainer(FakeProvider(db), settings=_settings(allow_drop_column=True))
        m.maintain_one(Order)
        assert db.executed == ["ALTER TABLE `orders` DROP COLUMN `legacy_flag`"]

    def test_default_schema_applied(self, db) -> None:
        m = SchemaMaintainer(FakeProvider(db), settings=_settings(default_schema="app"))
        result = m.maintain_one(SysUser)
        assert result.outcome is Outcome.SUCCESS
        assert db.executed[0].startswith("CREATE TABLE IF NOT EXISTS `app`.`sys_user`")
        assert "TABLE_SCHEMA = 'app'" in db.queries[0]

    def test_dry_run_executes_nothing(self, db) -> None:
        m = SchemaMaintainer(FakeProvider(db), settings=_settings(dry_run=True))
        result = m.maintain_one(SysUser)
        assert result.outcome is Outcome.SUCCESS
        assert result.message.startswith("Planned 1 statement")
        assert len(result.statements) == 1
        assert db.executed == []


class TestSkips:
    def test_disabled(self, db) -> None:
        provider = FakeProvider(db)
        result = SchemaMaintainer(provider, settings=_settings(enabled=False)).maintain_one(SysUser)
        assert result.outcome is Outcome.SKIPPED
        assert provider.opened == 0

    def test_not_an_entity(self, maintainer, db) -> None:
        result = maintainer.maintain_one(PlainObject)
        assert result.outcome is Outcome.SKIPPED
        assert "not a table entity" in result.message
        assert db.queries == []

    def test_auto_maintain_disabled(self, maintainer, db) -> None:
        assert maintainer.maintain_one(ArchivedOrder).outcome is Outcome.SKIPPED
        assert db.queries == []

    def test_invalid_metadata_is_skipped_with_error(self, maintainer) -> None:
        result = maintainer.maintain_one(Broken)
        assert result.outcome is Outcome.SKIPPED
        assert isinstance(result.error, MetadataError)


class TestFailures:
    def test_statement_failure(self, db, settings) -> None:
        db.fail_on = "CREATE TABLE"
        guard = TableGuard()
        m = SchemaMaintainer(FakeProvider(db), settings=settings, guard=guard)
        result = m.maintain_one(SysUser)
        assert result.outcome is Outcome.FAILURE
        assert isinstance(result.error, ExecutionError)
        assert result.statements == []
        status = guard.status("sys_user")
        assert (status.state, status.success) == (GuardState.COMPLETED, False)

    def test_introspection_failure(self, db, maintainer) -> None:
        db.fail_queries = True
        result = maintainer.maintain_one(Order)
        assert result.outcome is Outcome.FAILURE
        assert isinstance(result.error, IntrospectionError)
        assert db.executed == []

    def test_guard_released_after_success(self, maintainer) -> None:
        maintainer.maintain_one(SysUser)
        status = maintainer.status("sys_user")
        assert (status.state, status.success) == (GuardState.COMPLETED, True)


class TestConcurrentCalls:
    def test_second_caller_skips_while_first_runs(self, db, settings) -> None:
        db.add(_live_orders(customer_ref_length=20))
        db.gate = threading.Event()
        m = SchemaMaintainer(FakeProvider(db), settings=settings)
        results = {}

        worker = threading.Thread(target=lambda: results.setdefault("first", m.maintain_one(Order)))
        worker.start()
        assert db.entered.wait(timeout=5)

        second = m.maintain_one(Order)
        db.gate.set()
        worker.join(timeout=5)

        assert second.outcome is Outcome.SKIPPED
        assert second.conflict_started_at is not None
        assert results["first"].outcome is Outcome.SUCCESS
        assert len(db.executed) == 1

    def test_status_follows_default_schema(self, db) -> None:
        db.gate = threading.Event()
        m = SchemaMaintainer(FakeProvider(db), settings=_settings(default_schema="app"), guard=TableGuard())

        worker = threading.Thread(target=m.maintain_one, args=(SysUser,))
        worker.start()
        assert db.entered.wait(timeout=5)
        try:
            assert m.status("sys_user").state is GuardState.IN_PROGRESS
            assert m.status("SYS_USER", schema="APP").state is GuardState.IN_PROGRESS
            assert m.status("sys_user", schema="other").state is GuardState.IDLE
        finally:
            db.gate.set()
            worker.join(timeout=5)

        assert m.status("sys_user").state is GuardState.COMPLETED


# =============================================================================
# Batch and async
# =============================================================================


class TestBatch:
    def test_counts_and_order(self, db, maintainer) -> None:
        db.fail_on = "`orders`"
        batch = maintainer.maintain_many([SysUser, PlainObject, Order])
        assert [r.outcome for r in batch.results] == [Outcome.SUCCESS, Outcome.SKIPPED, Outcome.FAILURE]
        assert (batch.success_count, batch.skipped_count, batch.failure_count) == (1, 1, 1)
        assert batch.to_dict()["total"] == 3

    def test_empty(self, maintainer) -> None:
        assert maintainer.maintain_many([]).total == 0


class TestAsync:
    def test_disabled_returns_completed_future(self, db) -> None:
        m = SchemaMaintainer(FakeProvider(db), settings=_settings(async_enabled=False))
        future = m.maintain_one_async(SysUser)
        assert future.done()
        assert future.result().outcome is Outcome.SUCCESS

    def test_disabled_batch_future(self, db) -> None:
        m = SchemaMaintainer(FakeProvider(db), settings=_settings(async_enabled=False))
        future = m.maintain_many_async([SysUser, PlainObject])
        assert future.done()
        assert future.result().skipped_count == 1

    def test_pool_runs_one(self, maintainer) -> None:
        result = maintainer.maintain_one_async(SysUser).result(timeout=5)
        assert result.outcome is Outcome.SUCCESS

    def test_pool_runs_batch_in_input_order(self, db, maintainer) -> None:
        db.add(_live_orders())
        batch = maintainer.maintain_many_async([Order, SysUser, ArchivedOrder]).result(timeout=5)
        assert [r.table_name for r in batch.results] == ["orders", "sys_user", "archived_order"]
        assert (batch.success_count, batch.skipped_count) == (2, 1)

    def test_empty_batch(self, maintainer) -> None:
        assert maintainer.maintain_many_async([]).result(timeout=5).total == 0

    def test_shutdown_rejects_new_work(self, maintainer) -> None:
        maintainer.shutdown()
        with pytest.raises(RuntimeError, match="shut down"):
            maintainer.maintain_one_async(SysUser)


# =============================================================================
# Read-only operations
# =============================================================================


class TestPlanAndValidate:
    def test_plan_does_not_execute(self, maintainer, db) -> None:
        db.add(_live_orders(customer_ref_length=20))
        actions = maintainer.plan(Order)
        assert [a.kind for a in actions] == [ActionKind.MODIFY_COLUMN]
        assert maintainer.plan_sql(Order) == [
            "ALTER TABLE `orders` MODIFY COLUMN `customer_ref` VARCHAR(40)"
        ]
        assert db.executed == []

    def test_validate_absent(self, maintainer) -> None:
        report = maintainer.validate(SysUser)
        assert not report.exists
        assert not report.valid
        assert report.issues == ["Missing table: sys_user"]

    def test_validate_matching(self, maintainer, db) -> None:
        db.add(_live_orders())
        report = maintainer.validate(Order)
        assert report.valid
        assert report.message == "Table structure matches"

    def test_validate_lists_issues(self, maintainer, db) -> None:
        db.add(_live_orders(customer_ref_length=20, indexed=False))
        report = maintainer.validate(Order)
        assert not report.valid
        assert report.issues[0].startswith("Column mismatch: customer_ref")
        assert report.issues[1] == "Missing index: idx_orders_customer_ref"
        assert db.executed == []

    def test_validate_non_entity(self, maintainer) -> None:
        with pytest.raises(MetadataError):
            maintainer.validate(PlainObject)
