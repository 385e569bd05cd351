"""Entity declarations and the descriptors parsed from them.

ARCHITECTURE
────────────
::

    markers.py      @table, @index, Column, Id, Transient
    parser.py       class → TableDescriptor (cached per class)
    descriptors.py  frozen Table/Column/Index descriptors + TableBuilder
    types.py        LogicalType, IndexKind, GenerationType
"""

from schemaspine.metadata.descriptors import (
    ColumnDescriptor,
    IndexDescriptor,
    TableBuilder,
    TableDescriptor,
)
from schemaspine.metadata.markers import Column, Id, Index, Transient, index, table
from schemaspine.metadata.parser import (
    clear_metadata_cache,
    parse_entity,
    resolve_table,
    to_snake_case,
)
from schemaspine.metadata.types import GenerationType, IndexKind, LogicalType

__all__ = [
    "ColumnDescriptor",
    "IndexDescriptor",
    "TableBuilder",
    "TableDescriptor",
    "Column",
    "Id",
    "Index",
    "Transient",
    "index",
    "table",
    "clear_metadata_cache",
    "parse_entity",
    "resolve_table",
    "to_snake_case",
    "GenerationType",
    "IndexKind",
    "LogicalType",
]
