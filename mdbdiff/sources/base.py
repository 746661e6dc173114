"""
base
====

Data-source interfaces used by the engine.

A data source is a read-only catalog plus forward-only row cursors:

- :meth:`DataSource.list_tables` returns table names in catalog order
- :meth:`DataSource.list_fields` returns :class:`~mdbdiff.models.FieldDescriptor` entries
- :meth:`DataSource.open_cursor` returns a :class:`RowCursor` bound to an
  explicit, ordered field list

Cursors and sources are context managers so every exit path closes them.
"""

from __future__ import annotations

import abc
from typing import Any, List, Optional, Sequence, Tuple

from ..errors import CursorReadFailure
from ..models import FieldDescriptor


def stringify(value: Any) -> str:
    """Return the text form of a cell value used for comparison and search.

    ``None`` becomes an empty string and binary values become lowercase hex.
    """
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    return str(value)


class RowCursor(abc.ABC):
    """Forward-only, single-pass iterator over the rows of one table."""

    table: str = ""

    @abc.abstractmethod
    def at_end(self) -> bool:
        """Return True when no further rows are available."""

    @abc.abstractmethod
    def next_row(self) -> Tuple[str, ...]:
        """Return the next row as stringified values.

        Raises
        ------
        CursorReadFailure
            If the fetch fails or the cursor is already at its end.
        """

    def close(self) -> None:
        """Release the underlying resources. Safe to call more than once."""

    def __enter__(self) -> "RowCursor":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class DbApiRowCursor(RowCursor):
    """:class:`RowCursor` over a DB-API 2.0 cursor with one row of look-ahead.

    DB-API cursors have no end-of-data flag, so the next row is fetched on
    demand by :meth:`at_end` and handed out by :meth:`next_row`.
    """

    _NOT_FETCHED = object()

    def __init__(self, table: str, cursor: Any) -> None:
        self.table = table
        self._cursor = cursor
        self._pending: Any = self._NOT_FETCHED
        self._closed = False

    def _fetch(self) -> Optional[Sequence[Any]]:
        try:
            return self._cursor.fetchone()
        except Exception as exc:
            raise CursorReadFailure(self.table, str(exc)) from exc

    def at_end(self) -> bool:
        if self._closed:
            return True
        if self._pending is self._NOT_FETCHED:
            self._pending = self._fetch()
        return self._pending is None

    def next_row(self) -> Tuple[str, ...]:
        if self.at_end():
            raise CursorReadFailure(self.table, "read past end of data")
        row = self._pending
        self._pending = self._NOT_FETCHED
        return tuple(stringify(v) for v in row)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._cursor.close()


class DataSource(abc.ABC):
    """A read-only tabular store exposing a catalog and row cursors."""

    label: str = ""

    @abc.abstractmethod
    def list_tables(self) -> List[str]:
        """Return table names in catalog order."""

    @abc.abstractmethod
    def list_fields(self, table: str) -> List[FieldDescriptor]:
        """Return the fields of *table* in schema order.

        Raises
        ------
        SchemaLookupFailure
            If *table* does not exist.
        """

    @abc.abstractmethod
    def open_cursor(self, table: str, fields: Sequence[str]) -> RowCursor:
        """Open a cursor yielding *fields* of *table* in the given order.

        Raises
        ------
        SchemaLookupFailure
            If the table or one of the fields does not exist.
        """

    def close(self) -> None:
        """Release the connection. Safe to call more than once."""

    def __enter__(self) -> "DataSource":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def quote_identifier(name: str, left: str = '"', right: str = '"') -> str:
    """Quote a table or field name for use in a SELECT statement."""
    return f"{left}{name.replace(right, right + right)}{right}"


def select_statement(table: str, fields: Sequence[str], left: str = '"', right: str = '"') -> str:
    """Build ``SELECT <fields> FROM <table>`` with every identifier quoted."""
    cols = ", ".join(quote_identifier(f, left, right) for f in fields)
    return f"SELECT {cols} FROM {quote_identifier(table, left, right)}"
