"""Reconciliation actions.

An ``Action`` is one DDL operation the differ decided on. It carries the
descriptor it needs and nothing vendor-specific; the executor asks the
dialect to render it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from schemaspine.metadata.descriptors import ColumnDescriptor, IndexDescriptor, TableDescriptor


class ActionKind(str, Enum):
    CREATE_TABLE = "CREATE_TABLE"
    ADD_COLUMN = "ADD_COLUMN"
    MODIFY_COLUMN = "MODIFY_COLUMN"
    DROP_COLUMN = "DROP_COLUMN"
    CREATE_INDEX = "CREATE_INDEX"
    DROP_INDEX = "DROP_INDEX"


@dataclass(frozen=True, slots=True)
class Action:
    """One DDL operation against ``table``.

    Build through the classmethod constructors; each sets exactly the
    payload its kind needs. ``previous`` holds the live column a
    ``MODIFY_COLUMN`` replaces.
    """

    kind: ActionKind
    table: str
    schema: str | None = None
    table_descriptor: TableDescriptor | None = None
    column: ColumnDescriptor | None = None
    previous: ColumnDescriptor | None = None
    column_name: str | None = None
    index: IndexDescriptor | None = None
    index_name: str | None = None

    @classmethod
    def create_table(cls, table: TableDescriptor) -> Action:
        return cls(ActionKind.CREATE_TABLE, table.name, table.schema, table_descriptor=table)

    @classmethod
    def add_column(cls, table: str, column: ColumnDescriptor, schema: str | None = None) -> Action:
        return cls(ActionKind.ADD_COLUMN, table, schema, column=column, column_name=column.name)

    @classmethod
    def modify_column(
        cls,
        table: str,
        column: ColumnDescriptor,
        previous: ColumnDescriptor | None = None,
        schema: str | None = None,
    ) -> Action:
        return cls(
            ActionKind.MODIFY_COLUMN, table, schema,
            column=column, previous=previous, column_name=column.name,
        )

    @classmethod
    def drop_column(cls, table: str, column_name: str, schema: str | None = None) -> Action:
        return cls(ActionKind.DROP_COLUMN, table, schema, column_name=column_name)

    @classmethod
    def create_index(cls, table: str, index: IndexDescriptor, schema: str | None = None) -> Action:
        return cls(ActionKind.CREATE_INDEX, table, schema, index=index, index_name=index.name)

    @classmethod
    def drop_index(cls, table: str, index_name: str, schema: str | None = None) -> Action:
        return cls(ActionKind.DROP_INDEX, table, schema, index_name=index_name)

    @property
    def target(self) -> str | None:
        """Column or index name the action touches (None for CREATE_TABLE)."""
        return self.column_name or self.index_name

    def describe(self) -> str:
        if self.kind is ActionKind.CREATE_TABLE:
            return f"create table {self.table}"
        noun = "index" if self.kind in (ActionKind.CREATE_INDEX, ActionKind.DROP_INDEX) else "column"
        verb = self.kind.value.split("_", 1)[0].lower()
        return f"{verb} {noun} {self.table}.{self.target}"


__all__ = [
    "ActionKind",
    "Action",
]
