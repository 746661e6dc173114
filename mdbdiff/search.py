"""
search
======

Regular-expression search over one data source.

For each table (catalog order, reserved tables skipped) the stream holds,
in this order:

1. a :class:`~mdbdiff.models.TableNameMatch` if the table name matches
2. :class:`~mdbdiff.models.FieldNameMatch` entries in schema order
3. :class:`~mdbdiff.models.FieldValueMatch` entries, row by row, column by column

Values are returned in full; shortening long values is left to reporting.
A table whose rows cannot be read yields a
:class:`~mdbdiff.models.TableScanFailure` and the search moves on.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator, Optional

from .errors import CursorReadFailure, InvalidPattern
from .filters import DEFAULT_RESERVED_PREFIX, TableFilter, select_tables
from .models import FieldNameMatch, FieldValueMatch, SearchRecord, TableNameMatch, TableScanFailure
from .sources.base import DataSource

logger = logging.getLogger(__name__)


def compile_pattern(pattern: str, ignore_case: bool = False) -> re.Pattern[str]:
    """Compile *pattern*, raising :class:`InvalidPattern` when it is malformed."""
    try:
        return re.compile(pattern, re.IGNORECASE if ignore_case else 0)
    except re.error as exc:
        raise InvalidPattern(pattern, str(exc)) from exc


def search(
    source: DataSource,
    pattern: str,
    table_names: bool = True,
    field_names: bool = True,
    field_values: bool = True,
    ignore_case: bool = False,
    reserved_prefix: str = DEFAULT_RESERVED_PREFIX,
    table_filter: Optional[TableFilter] = None,
) -> Iterator[SearchRecord]:
    """Search *source* for *pattern* and yield match records lazily.

    The pattern is compiled before this function returns, so a malformed
    pattern raises :class:`InvalidPattern` even if the result is never
    iterated.
    """
    rx = compile_pattern(pattern, ignore_case)
    return _search(source, rx, table_names, field_names, field_values, reserved_prefix, table_filter)


def _search(
    source: DataSource,
    rx: re.Pattern[str],
    table_names: bool,
    field_names: bool,
    field_values: bool,
    reserved_prefix: str,
    table_filter: Optional[TableFilter],
) -> Iterator[SearchRecord]:
    for table in select_tables(source.list_tables(), reserved_prefix, table_filter):
        logger.debug("searching table %s", table)
        if table_names and rx.search(table):
            yield TableNameMatch(table=table)

        if not (field_names or field_values):
            continue
        names = [f.name for f in source.list_fields(table)]

        if field_names:
            for name in names:
                if rx.search(name):
                    yield FieldNameMatch(table=table, field=name)

        if not field_values or not names:
            continue
        try:
            with source.open_cursor(table, names) as cursor:
                row = 0
                while not cursor.at_end():
                    row += 1
                    values = cursor.next_row()
                    for name, value in zip(names, values):
                        if rx.search(value):
                            yield FieldValueMatch(table=table, field=name, row=row, value=value)
        except CursorReadFailure as exc:
            logger.warning("search of %s aborted: %s", table, exc)
            yield TableScanFailure(table=table, reason=str(exc))
