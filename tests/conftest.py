"""Shared fixtures: an in-memory data source and a SQLite database builder."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pytest

from mdbdiff.errors import CursorReadFailure, SchemaLookupFailure
from mdbdiff.models import FieldDescriptor
from mdbdiff.sources.base import DataSource, RowCursor, stringify


class FakeCursor(RowCursor):
    """Cursor over a list of rows; can fail when reaching a given row."""

    def __init__(self, table: str, rows: List[Tuple], fail_at: Optional[int] = None) -> None:
        self.table = table
        self._rows = rows
        self._pos = 0
        self._fail_at = fail_at
        self.fetched = 0
        self.closed = False

    def at_end(self) -> bool:
        return self._pos >= len(self._rows)

    def next_row(self) -> Tuple[str, ...]:
        if self.at_end():
            raise CursorReadFailure(self.table, "read past end of data")
        if self._fail_at is not None and self._pos + 1 == self._fail_at:
            raise CursorReadFailure(self.table, "disk I/O error")
        row = self._rows[self._pos]
        self._pos += 1
        self.fetched += 1
        return tuple(stringify(v) for v in row)

    def close(self) -> None:
        self.closed = True


class FakeSource(DataSource):
    """In-memory data source.

    ``tables`` maps a table name to ``(fields, rows)``; rows hold values for
    every field in schema order. ``fail_at`` maps a table name to the 1-based
    row whose fetch raises :class:`CursorReadFailure`.
    """

    def __init__(
        self,
        tables: Dict[str, Tuple[List[FieldDescriptor], List[Tuple]]],
        label: str = "fake",
        fail_at: Optional[Dict[str, int]] = None,
    ) -> None:
        self.tables = tables
        self.label = label
        self.fail_at = fail_at or {}
        self.cursors: List[FakeCursor] = []

    def list_tables(self) -> List[str]:
        return list(self.tables)

    def list_fields(self, table: str) -> List[FieldDescriptor]:
        if table not in self.tables:
            raise SchemaLookupFailure(table, "table not found")
        return list(self.tables[table][0])

    def open_cursor(self, table: str, fields: Sequence[str]) -> RowCursor:
        schema, rows = self.tables[table]
        names = [f.name for f in schema]
        missing = [f for f in fields if f not in names]
        if missing:
            raise SchemaLookupFailure(table, f"no such field: {missing[0]}")
        idx = [names.index(f) for f in fields]
        projected = [tuple(row[i] for i in idx) for row in rows]
        cursor = FakeCursor(table, projected, self.fail_at.get(table))
        self.cursors.append(cursor)
        return cursor


def text_fields(*names: str) -> List[FieldDescriptor]:
    """Return TEXT(255) descriptors for *names*."""
    return [FieldDescriptor(name=n, type="TEXT", size=255) for n in names]


@pytest.fixture
def make_sqlite(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a factory that builds a SQLite file from a SQL script."""

    def _make(name: str, script: str) -> Path:
        path = tmp_path / name
        conn = sqlite3.connect(path)
        try:
            conn.executescript(script)
            conn.commit()
        finally:
            conn.close()
        return path

    return _make
