"""
models
======

Record types produced and consumed by the comparison and search engine.

Every output record carries a ``kind`` tag so reporting code can switch on
it instead of on the Python type:

- schema pass: ``additional_table``, ``additional_field``, ``field_attribute``
- data pass: ``row_divergence``, ``record_count_mismatch``, ``table_failure``
- search: ``table_name``, ``field_name``, ``field_value`` (plus ``table_failure``)
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field as dc_field
from typing import Optional, Tuple, Union

SIDE_A = "A"
SIDE_B = "B"


@dataclass(frozen=True)
class FieldDescriptor:
    """Catalog entry for one field of a table.

    Attributes
    ----------
    name:
        Field name as reported by the data source.
    type:
        Engine type name (e.g. ``TEXT``, ``INTEGER``, ``VARCHAR``).
    size:
        Declared size, ``0`` when the engine reports none.
    default:
        Default value expression, ``None`` when unset.
    required:
        True when the field rejects NULL.
    allow_empty:
        True when zero-length strings are accepted.
    """

    name: str
    type: str = ""
    size: int = 0
    default: Optional[str] = None
    required: bool = False
    allow_empty: bool = True


@dataclass(frozen=True)
class AdditionalTable:
    """A table present in one source only."""

    side: str
    table: str
    kind: str = dc_field(default="additional_table", init=False)


@dataclass(frozen=True)
class AdditionalField:
    """A field present in one source's copy of a table only."""

    side: str
    table: str
    field: str
    kind: str = dc_field(default="additional_field", init=False)


@dataclass(frozen=True)
class FieldAttributeDifference:
    """A compared attribute of a common field differs between sources."""

    table: str
    field: str
    attribute: str
    value_a: object
    value_b: object
    kind: str = dc_field(default="field_attribute", init=False)


@dataclass(frozen=True)
class RowSnapshot:
    """Full row values captured at a 1-based position of a table scan."""

    row_index: int
    values: Tuple[str, ...]


@dataclass(frozen=True)
class RowDivergence:
    """Rows of one table that differ between sources.

    ``pairs`` holds ``(snapshot_a, snapshot_b)`` tuples in scan order and never
    exceeds the stop threshold; ``truncated`` is True when the scan stopped
    because a further differing row was found after the threshold was hit.
    """

    table: str
    fields: Tuple[str, ...]
    pairs: Tuple[Tuple[RowSnapshot, RowSnapshot], ...]
    truncated: bool = False
    kind: str = dc_field(default="row_divergence", init=False)


@dataclass(frozen=True)
class RecordCountMismatch:
    """One cursor ended while the other still had rows.

    ``row_index`` is the number of rows read from both sides when the shorter
    cursor ran out; ``longer_side`` names the source that had more rows.
    """

    table: str
    row_index: int
    longer_side: str
    kind: str = dc_field(default="record_count_mismatch", init=False)


@dataclass(frozen=True)
class TableScanFailure:
    """A table's scan was aborted by a read failure; the run continued."""

    table: str
    reason: str
    kind: str = dc_field(default="table_failure", init=False)


@dataclass(frozen=True)
class TableNameMatch:
    table: str
    kind: str = dc_field(default="table_name", init=False)


@dataclass(frozen=True)
class FieldNameMatch:
    table: str
    field: str
    kind: str = dc_field(default="field_name", init=False)


@dataclass(frozen=True)
class FieldValueMatch:
    """A cell matched the search pattern. ``value`` is never shortened."""

    table: str
    field: str
    row: int
    value: str
    kind: str = dc_field(default="field_value", init=False)


SchemaRecord = Union[AdditionalTable, AdditionalField, FieldAttributeDifference]
DataRecord = Union[RowDivergence, RecordCountMismatch, TableScanFailure]
Match = Union[TableNameMatch, FieldNameMatch, FieldValueMatch]
SearchRecord = Union[TableNameMatch, FieldNameMatch, FieldValueMatch, TableScanFailure]
