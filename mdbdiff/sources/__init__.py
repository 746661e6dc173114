"""Data-source adapters.

- :class:`~mdbdiff.sources.sqlite.SqliteSource` (stdlib ``sqlite3``)
- :class:`~mdbdiff.sources.access.AccessSource` (``pyodbc``, optional ``access`` extra)
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

from ..errors import SourceUnavailable
from .base import DataSource, DbApiRowCursor, RowCursor, stringify
from .sqlite import SqliteSource

ACCESS_SUFFIXES = {".mdb", ".accdb"}
SQLITE_SUFFIXES = {".db", ".sqlite", ".sqlite3"}


def open_source(path: Union[Path, str], label: str = "") -> DataSource:
    """Open the data source at *path*, choosing the adapter by file suffix.

    Raises
    ------
    SourceUnavailable
        If the suffix is unknown, the file is missing, or the driver for it
        is not installed.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix in SQLITE_SUFFIXES:
        return SqliteSource(path, label=label)
    if suffix in ACCESS_SUFFIXES:
        try:
            from .access import AccessSource
        except ImportError as exc:
            raise SourceUnavailable(
                f"pyodbc is required for {path.name}; install with `pip install mdbdiff[access]`"
            ) from exc
        return AccessSource(path, label=label)
    raise SourceUnavailable(f"unsupported database file type: {path}")


__all__ = [
    "DataSource",
    "DbApiRowCursor",
    "RowCursor",
    "SqliteSource",
    "open_source",
    "stringify",
]
