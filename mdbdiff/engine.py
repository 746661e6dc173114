"""
engine
======

Runs the schema pass and the data pass against two data sources.

- :func:`diff_schema` yields additional tables, additional fields and field
  attribute differences
- :func:`diff_data` yields one :class:`~mdbdiff.models.RowDivergence` per
  table with differing rows, plus record-count mismatch and table failure
  notices
- :func:`compare` runs both and collects a :class:`ComparisonReport`

Both passes are lazy generators: work stops as soon as the caller stops
iterating, and cursors are closed on every exit path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from .errors import CursorReadFailure
from .filters import DEFAULT_RESERVED_PREFIX, TableFilter, select_tables
from .models import (
    DataRecord,
    RecordCountMismatch,
    RowDivergence,
    SchemaRecord,
    TableScanFailure,
)
from .row_diff import DEFAULT_STOP_THRESHOLD, RowDiffScanner, TableScanResult
from .schema_diff import attribute_set, common_fields, common_tables, field_set_diff, table_set_diff
from .sources.base import DataSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompareOptions:
    """Switches and policies for a comparison run."""

    schema: bool = True
    data: bool = True
    stop_threshold: int = DEFAULT_STOP_THRESHOLD
    case_sensitive_names: bool = False
    compare_allow_empty: bool = False
    reserved_prefix: str = DEFAULT_RESERVED_PREFIX
    table_filter: Optional[TableFilter] = None


@dataclass
class ComparisonReport:
    """Everything found by :func:`compare`, in discovery order."""

    schema: List[SchemaRecord] = field(default_factory=list)
    divergences: List[RowDivergence] = field(default_factory=list)
    count_mismatches: List[RecordCountMismatch] = field(default_factory=list)
    failures: List[TableScanFailure] = field(default_factory=list)
    tables_compared: int = 0

    @property
    def has_differences(self) -> bool:
        return bool(self.schema or self.divergences or self.count_mismatches)


def _tables(source: DataSource, options: CompareOptions) -> List[str]:
    return select_tables(source.list_tables(), options.reserved_prefix, options.table_filter)


def diff_schema(
    source_a: DataSource,
    source_b: DataSource,
    options: CompareOptions = CompareOptions(),
) -> Iterator[SchemaRecord]:
    """Yield schema differences: table set first, then fields per common table."""
    tables_a = _tables(source_a, options)
    tables_b = _tables(source_b, options)
    yield from table_set_diff(tables_a, tables_b, options.case_sensitive_names)

    attributes = attribute_set(options.compare_allow_empty)
    for table_a, table_b in common_tables(tables_a, tables_b, options.case_sensitive_names, options.reserved_prefix):
        logger.debug("comparing fields of %s", table_a)
        yield from field_set_diff(
            table_a,
            source_a.list_fields(table_a),
            source_b.list_fields(table_b),
            attributes,
            options.case_sensitive_names,
        )


def scan_table(
    source_a: DataSource,
    source_b: DataSource,
    table_a: str,
    table_b: str,
    scanner: RowDiffScanner,
    case_sensitive_names: bool = False,
) -> Optional[TableScanResult]:
    """Open both cursors over the common fields of one table and scan it.

    Returns None when the two tables share no fields.
    """
    pairs = common_fields(source_a.list_fields(table_a), source_b.list_fields(table_b), case_sensitive_names)
    if not pairs:
        logger.info("no common fields in %s, skipping data comparison", table_a)
        return None
    fields_a = [a for a, _ in pairs]
    fields_b = [b for _, b in pairs]
    with source_a.open_cursor(table_a, fields_a) as cursor_a, source_b.open_cursor(table_b, fields_b) as cursor_b:
        return scanner.scan(table_a, fields_a, cursor_a, cursor_b)


def diff_data(
    source_a: DataSource,
    source_b: DataSource,
    options: CompareOptions = CompareOptions(),
) -> Iterator[DataRecord]:
    """Yield data differences for every common table, in source A's order.

    Per table, a :class:`RecordCountMismatch` (if any) precedes the
    :class:`RowDivergence` (if any). A :class:`CursorReadFailure` ends that
    table's scan with a :class:`TableScanFailure` and the next table is
    scanned; every other error propagates.
    """
    scanner = RowDiffScanner(options.stop_threshold)
    tables_a = _tables(source_a, options)
    tables_b = _tables(source_b, options)
    for table_a, table_b in common_tables(tables_a, tables_b, options.case_sensitive_names, options.reserved_prefix):
        logger.debug("comparing rows of %s", table_a)
        try:
            result = scan_table(source_a, source_b, table_a, table_b, scanner, options.case_sensitive_names)
        except CursorReadFailure as exc:
            logger.warning("data comparison of %s aborted: %s", table_a, exc)
            yield TableScanFailure(table=table_a, reason=str(exc))
            continue
        if result is None:
            continue
        if result.count_mismatch is not None:
            yield result.count_mismatch
        if result.divergence is not None:
            yield result.divergence


def compare(
    source_a: DataSource,
    source_b: DataSource,
    options: CompareOptions = CompareOptions(),
) -> ComparisonReport:
    """Run the enabled passes and collect their output into a report."""
    report = ComparisonReport()
    report.tables_compared = len(
        common_tables(
            _tables(source_a, options),
            _tables(source_b, options),
            options.case_sensitive_names,
            options.reserved_prefix,
        )
    )
    if options.schema:
        logger.info("schema pass: %s vs %s", source_a.label, source_b.label)
        report.schema.extend(diff_schema(source_a, source_b, options))
    if options.data:
        logger.info("data pass: %s vs %s", source_a.label, source_b.label)
        for record in diff_data(source_a, source_b, options):
            if record.kind == "row_divergence":
                report.divergences.append(record)
            elif record.kind == "record_count_mismatch":
                report.count_mismatches.append(record)
            else:
                report.failures.append(record)
    return report
