"""
Persistence markers for entity declarations.

Entities are plain classes. ``@table`` marks a class as persistent;
members become columns when annotated with a ``Column`` or ``Id`` marker,
either inside ``typing.Annotated`` or as the attribute's default value.

Manifesto:
    - **Declarative:** The class body is the schema
    - **Opt-in columns:** Unmarked members are ignored, like ``Transient``
    - **Inert markers:** Markers only carry data; the parser interprets them

Examples:
    >>> from typing import Annotated
    >>> @table(name="sys_user", comment="Users")
    ... @index(columns=["email"], unique=True)
    ... class SysUser:
    ...     id: Annotated[int, Id(strategy=GenerationType.IDENTITY)]
    ...     username: Annotated[str, Column(length=50, nullable=False, unique=True)]
    ...     email: str | None = Column(length=128)
    ...     session_cache: Annotated[dict, Transient()]

Guardrails:
    ❌ DON'T: Expect unmarked members to become columns
    ✅ DO: Mark every persisted member with Column or Id

Tags:
    metadata, markers, declarative, annotated, schemaspine

Doc-Types:
    - API Reference
    - Entity Declaration Guide
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

from schemaspine.metadata.types import GenerationType, IndexKind, LogicalType

T = TypeVar("T", bound=type)

TABLE_ATTR = "__schemaspine_table__"
INDEXES_ATTR = "__schemaspine_indexes__"


@dataclass(frozen=True, slots=True)
class Column:
    """
    Column marker.

    ``type`` overrides the inferred logical type, ``native_type`` bypasses
    type mapping entirely and ``definition`` replaces the whole column
    definition after the name.
    """

    name: str | None = None
    type: LogicalType | None = None
    native_type: str | None = None
    length: int = 0
    precision: int = 0
    scale: int = 0
    nullable: bool = True
    unique: bool = False
    default: str | None = None
    auto_increment: bool = False
    comment: str | None = None
    definition: str | None = None


@dataclass(frozen=True, slots=True)
class Id:
    """Primary key marker. Combine with ``Column`` to tune the column itself."""

    strategy: GenerationType = GenerationType.AUTO
    sequence_name: str | None = None


@dataclass(frozen=True, slots=True)
class Transient:
    """Excludes a member from persistence."""


@dataclass(frozen=True, slots=True)
class Index:
    """
    Index declaration. ``columns`` accepts a sequence or a comma separated
    string; unnamed indexes are named ``idx_<table>_<columns>``.
    """

    columns: Sequence[str] | str
    name: str | None = None
    unique: bool = False
    kind: IndexKind = IndexKind.BTREE
    comment: str | None = None

    @property
    def column_list(self) -> tuple[str, ...]:
        if isinstance(self.columns, str):
            return tuple(part.strip() for part in self.columns.split(",") if part.strip())
        return tuple(self.columns)


@dataclass(frozen=True, slots=True)
class TableOptions:
    """What ``@table`` records on a class."""

    name: str | None = None
    schema: str | None = None
    comment: str | None = None
    engine: str = "InnoDB"
    charset: str = "utf8mb4"
    collate: str | None = None
    auto_maintain: bool = True
    indexes: tuple[Index, ...] = field(default_factory=tuple)


def table(
    name: str | None = None,
    *,
    schema: str | None = None,
    comment: str | None = None,
    engine: str = "InnoDB",
    charset: str = "utf8mb4",
    collate: str | None = None,
    auto_maintain: bool = True,
    indexes: Sequence[Index] = (),
) -> Callable[[T], T]:
    """Mark a class as a persistent table."""

    def decorator(cls: T) -> T:
        setattr(
            cls,
            TABLE_ATTR,
            TableOptions(
                name=name,
                schema=schema,
                comment=comment,
                engine=engine,
                charset=charset,
                collate=collate,
                auto_maintain=auto_maintain,
                indexes=tuple(indexes),
            ),
        )
        return cls

    return decorator


def index(
    columns: Sequence[str] | str,
    *,
    name: str | None = None,
    unique: bool = False,
    kind: IndexKind = IndexKind.BTREE,
    comment: str | None = None,
) -> Callable[[T], T]:
    """Attach an index to a class. Repeatable; decorators apply bottom-up."""

    def decorator(cls: T) -> T:
        existing = list(cls.__dict__.get(INDEXES_ATTR, ()))
        existing.insert(0, Index(columns=columns, name=name, unique=unique, kind=kind, comment=comment))
        setattr(cls, INDEXES_ATTR, tuple(existing))
        return cls

    return decorator


def table_options(cls: type) -> TableOptions | None:
    """The ``@table`` options declared on ``cls`` itself, or None."""
    return cls.__dict__.get(TABLE_ATTR)


def declared_indexes(cls: type) -> tuple[Index, ...]:
    """Indexes from ``@table(indexes=...)`` followed by ``@index`` decorators."""
    options = table_options(cls)
    from_table = options.indexes if options else ()
    return tuple(from_table) + tuple(cls.__dict__.get(INDEXES_ATTR, ()))


__all__ = [
    "Column",
    "Id",
    "Transient",
    "Index",
    "TableOptions",
    "table",
    "index",
    "table_options",
    "declared_indexes",
]
