"""
Diff engine.

Compares a desired table with the live one and returns the minimal ordered
list of actions that brings the live table in line. The comparison is
dialect-aware only through the dialect's canonical type names and effective
index kinds, so the same code serves every vendor.

Manifesto:
    - **Idempotent:** Reconciling an unchanged model yields no actions
    - **Non-destructive by default:** Columns are only dropped when the caller
      passes ``allow_drop_columns=True``
    - **Unspecified is not drift:** Length, precision and scale are compared
      only when the model sets them
    - **Deterministic order:** ADD, MODIFY, DROP columns, then DROP, CREATE
      indexes

Architecture:
    ::

        diff_tables(desired, current, dialect)
          current is ABSENT ──▶ CREATE_TABLE + CREATE_INDEX per index
          otherwise:
            columns   missing → ADD     differing → MODIFY    extra → DROP*
            indexes   extra → DROP**    missing → CREATE      changed → DROP + CREATE

        *  only with allow_drop_columns
        ** only with allow_drop_indexes, and never for an index that backs a
           declared unique column

Examples:
    >>> actions = diff_tables(desired, ABSENT, MySQLDialect())
    >>> [a.kind.value for a in actions]
    ['CREATE_TABLE']

Tags:
    diff, reconciliation, schema-drift, idempotence, schemaspine

Doc-Types:
    - API Reference
    - Architecture Documentation
"""

from __future__ import annotations

from schemaspine.core.logging import get_logger
from schemaspine.dialects.base import Dialect
from schemaspine.metadata.descriptors import ColumnDescriptor, IndexDescriptor, TableDescriptor
from schemaspine.reconcile.actions import Action
from schemaspine.reconcile.inspector import ABSENT, _Absent

logger = get_logger(__name__)


def column_differences(
    desired: ColumnDescriptor, current: ColumnDescriptor, dialect: Dialect
) -> list[str]:
    """Human-readable reasons ``current`` does not match ``desired``; empty when equal."""
    if desired.raw_definition:
        return []

    reasons = []
    wanted_type = dialect.canonical_type(dialect.column_type(desired))
    live_type = dialect.canonical_type(dialect.catalog_type(current))
    # An unsized declared type accepts any live size.
    if wanted_type != live_type and not live_type.startswith(wanted_type + "("):
        reasons.append(f"type {live_type} -> {wanted_type}")
    if desired.nullable != current.nullable:
        reasons.append(f"nullable {current.nullable} -> {desired.nullable}")
    if dialect.auto_increment_fragment() and desired.auto_increment != current.auto_increment:
        reasons.append(f"auto_increment {current.auto_increment} -> {desired.auto_increment}")
    for attr in ("length", "precision", "scale"):
        wanted = getattr(desired, attr)
        live = getattr(current, attr)
        if wanted > 0 and wanted != live:
            reasons.append(f"{attr} {live} -> {wanted}")
    return reasons


def index_matches(desired: IndexDescriptor, current: IndexDescriptor, dialect: Dialect) -> bool:
    return (
        [c.lower() for c in desired.columns] == [c.lower() for c in current.columns]
        and desired.unique == current.unique
        and dialect.effective_index_kind(desired.kind) == dialect.effective_index_kind(current.kind)
    )


def _backs_unique_column(index: IndexDescriptor, desired: TableDescriptor) -> bool:
    if not index.unique or len(index.columns) != 1:
        return False
    column = desired.column(index.columns[0])
    return column is not None and (column.unique or column.primary_key)


def diff_tables(
    desired: TableDescriptor,
    current: TableDescriptor | _Absent,
    dialect: Dialect,
    *,
    allow_drop_columns: bool = False,
    allow_drop_indexes: bool = True,
) -> list[Action]:
    """Ordered actions turning ``current`` into ``desired``."""
    table, schema = desired.name, desired.schema

    if current is ABSENT or isinstance(current, _Absent):
        actions = [Action.create_table(desired)]
        actions.extend(Action.create_index(table, idx, schema) for idx in desired.indexes)
        return actions

    added: list[Action] = []
    modified: list[Action] = []
    dropped: list[Action] = []

    for column in desired.columns:
        live = current.column(column.name)
        if live is None:
            added.append(Action.add_column(table, column, schema))
            continue
        reasons = column_differences(column, live, dialect)
        if reasons:
            logger.debug("column.drift", table=table, column=column.name, reasons=reasons)
            modified.append(Action.modify_column(table, column, previous=live, schema=schema))

    for live in current.columns:
        if desired.column(live.name) is None:
            if allow_drop_columns:
                dropped.append(Action.drop_column(table, live.name, schema))
            else:
                logger.debug("column.retained", table=table, column=live.name)

    index_drops: list[Action] = []
    index_creates: list[Action] = []

    for live_index in current.indexes:
        wanted = desired.index(live_index.name)
        if wanted is None:
            if allow_drop_indexes and not _backs_unique_column(live_index, desired):
                index_drops.append(Action.drop_index(table, live_index.name, schema))
        elif not index_matches(wanted, live_index, dialect):
            index_drops.append(Action.drop_index(table, live_index.name, schema))
            index_creates.append(Action.create_index(table, wanted, schema))

    for wanted in desired.indexes:
        if current.index(wanted.name) is None:
            index_creates.append(Action.create_index(table, wanted, schema))

    return added + modified + dropped + index_drops + index_creates


__all__ = [
    "column_differences",
    "index_matches",
    "diff_tables",
]
