"""
sqlite
======

:class:`~mdbdiff.sources.base.DataSource` backed by a SQLite database file.

Catalog details:

- tables come from ``sqlite_master`` in creation order; SQLite's own
  ``sqlite_%`` tables are hidden
- fields come from ``PRAGMA table_info``; ``size`` is parsed from a declared
  ``TYPE(n)`` and ``allow_empty`` is always True (SQLite has no such flag)
"""

from __future__ import annotations

import logging
import re
import sqlite3
from pathlib import Path
from typing import List, Sequence, Union

from ..errors import CursorReadFailure, SchemaLookupFailure, SourceUnavailable
from ..models import FieldDescriptor
from .base import DataSource, DbApiRowCursor, RowCursor, select_statement

logger = logging.getLogger(__name__)

Q_LIST_TABLES = """
SELECT name
FROM sqlite_master
WHERE type = 'table'
  AND name NOT LIKE 'sqlite\\_%' ESCAPE '\\'
ORDER BY rowid;
"""

_SIZE_RE = re.compile(r"\(\s*(\d+)")


def parse_type_size(declared: str) -> int:
    """Return the first size argument of a declared type, ``0`` if none.

    >>> parse_type_size("VARCHAR(50)")
    50
    >>> parse_type_size("NUMERIC(10, 2)")
    10
    >>> parse_type_size("TEXT")
    0
    """
    m = _SIZE_RE.search(declared or "")
    return int(m.group(1)) if m else 0


class SqliteSource(DataSource):
    """Read-only SQLite data source."""

    def __init__(self, path: Union[Path, str], label: str = "") -> None:
        self.path = Path(path)
        self.label = label or self.path.name
        if not self.path.is_file():
            raise SourceUnavailable(f"database file not found: {self.path}")
        self._conn = None
        try:
            self._conn = sqlite3.connect(f"file:{self.path.as_posix()}?mode=ro", uri=True)
            self._conn.execute("SELECT 1 FROM sqlite_master LIMIT 1").fetchall()
        except sqlite3.Error as exc:
            self.close()
            raise SourceUnavailable(f"cannot open {self.path}: {exc}") from exc
        logger.debug("opened sqlite source %s", self.path)

    def list_tables(self) -> List[str]:
        try:
            return [row[0] for row in self._conn.execute(Q_LIST_TABLES)]
        except sqlite3.Error as exc:
            raise SourceUnavailable(f"cannot read catalog of {self.path}: {exc}") from exc

    def list_fields(self, table: str) -> List[FieldDescriptor]:
        rows = self._conn.execute(f"PRAGMA table_info({_pragma_arg(table)})").fetchall()
        if not rows:
            raise SchemaLookupFailure(table, "table not found")
        fields: List[FieldDescriptor] = []
        for _cid, name, decl_type, notnull, dflt_value, _pk in rows:
            fields.append(
                FieldDescriptor(
                    name=name,
                    type=(decl_type or "").upper(),
                    size=parse_type_size(decl_type or ""),
                    default=None if dflt_value is None else str(dflt_value),
                    required=bool(notnull),
                    allow_empty=True,
                )
            )
        return fields

    def open_cursor(self, table: str, fields: Sequence[str]) -> RowCursor:
        sql = select_statement(table, fields)
        cur = self._conn.cursor()
        try:
            cur.execute(sql)
        except sqlite3.OperationalError as exc:
            cur.close()
            raise SchemaLookupFailure(table, str(exc)) from exc
        except sqlite3.DatabaseError as exc:
            # corrupt pages and the like: only this table is lost
            cur.close()
            raise CursorReadFailure(table, str(exc)) from exc
        return DbApiRowCursor(table, cur)

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None


def _pragma_arg(name: str) -> str:
    return "'" + name.replace("'", "''") + "'"
