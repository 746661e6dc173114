"""
access
======

:class:`~mdbdiff.sources.base.DataSource` for Microsoft Access files
(``.mdb`` / ``.accdb``) through ``pyodbc`` and the Access ODBC driver.

Both user and system tables are listed, so ``MSys*`` tables reach the
engine and are dropped by its reserved-prefix policy. ODBC does not expose
Access's "Allow Zero Length" property, so ``allow_empty`` is reported as
True for every field; leave ``compare_allow_empty`` off for these sources.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence, Union

import pyodbc

from ..errors import SchemaLookupFailure, SourceUnavailable
from ..models import FieldDescriptor
from .base import DataSource, DbApiRowCursor, RowCursor, select_statement

logger = logging.getLogger(__name__)

DEFAULT_DRIVER = "Microsoft Access Driver (*.mdb, *.accdb)"
TABLE_TYPES = ("TABLE", "SYSTEM TABLE")


def connection_string(path: Path, driver: str = DEFAULT_DRIVER) -> str:
    """Return an ODBC connection string for the Access file at *path*."""
    return f"DRIVER={{{driver}}};DBQ={path};ReadOnly=1;"


class AccessSource(DataSource):
    """Read-only Access database opened via ODBC."""

    def __init__(self, path: Union[Path, str], label: str = "", driver: str = DEFAULT_DRIVER) -> None:
        self.path = Path(path)
        self.label = label or self.path.name
        if not self.path.is_file():
            raise SourceUnavailable(f"database file not found: {self.path}")
        try:
            self._conn = pyodbc.connect(connection_string(self.path.resolve(), driver), readonly=True)
        except pyodbc.Error as exc:
            raise SourceUnavailable(f"cannot open {self.path}: {exc}") from exc
        logger.debug("opened access source %s", self.path)

    def list_tables(self) -> List[str]:
        cur = self._conn.cursor()
        try:
            return [row.table_name for row in cur.tables() if row.table_type in TABLE_TYPES]
        except pyodbc.Error as exc:
            raise SourceUnavailable(f"cannot read catalog of {self.path}: {exc}") from exc
        finally:
            cur.close()

    def list_fields(self, table: str) -> List[FieldDescriptor]:
        cur = self._conn.cursor()
        try:
            # SQLColumns treats the name as a LIKE pattern, so "_" matches any character
            rows = [r for r in cur.columns(table=table).fetchall() if r.table_name.lower() == table.lower()]
        except pyodbc.Error as exc:
            raise SchemaLookupFailure(table, str(exc)) from exc
        finally:
            cur.close()
        if not rows:
            raise SchemaLookupFailure(table, "table not found")
        rows.sort(key=lambda r: r.ordinal_position)
        return [
            FieldDescriptor(
                name=r.column_name,
                type=(r.type_name or "").upper(),
                size=int(r.column_size or 0),
                default=r.column_def,
                required=r.nullable == pyodbc.SQL_NO_NULLS,
                allow_empty=True,
            )
            for r in rows
        ]

    def open_cursor(self, table: str, fields: Sequence[str]) -> RowCursor:
        cur = self._conn.cursor()
        try:
            cur.execute(select_statement(table, fields, "[", "]"))
        except pyodbc.Error as exc:
            cur.close()
            raise SchemaLookupFailure(table, str(exc)) from exc
        return DbApiRowCursor(table, cur)

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
