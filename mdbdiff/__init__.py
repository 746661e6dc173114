"""
mdbdiff
=======

Compare two tabular databases (Access ``.mdb``/``.accdb`` or SQLite files)
and search one of them for a pattern.

Modules:

- :mod:`mdbdiff.schema_diff` (table and field set differences)
- :mod:`mdbdiff.row_diff` (bounded, positional row comparison)
- :mod:`mdbdiff.search` (table/field/value pattern search)
- :mod:`mdbdiff.engine` (runs the passes against two data sources)
- :mod:`mdbdiff.reporting` (text and Markdown rendering)
- :mod:`mdbdiff.cli` (command-line entry point)
"""

from .engine import ComparisonReport, CompareOptions, compare, diff_data, diff_schema
from .errors import (
    CursorReadFailure,
    InvalidOption,
    InvalidPattern,
    MdbDiffError,
    SchemaLookupFailure,
    SourceUnavailable,
)
from .search import search

__all__ = [
    "ComparisonReport",
    "CompareOptions",
    "compare",
    "diff_data",
    "diff_schema",
    "search",
    "MdbDiffError",
    "SourceUnavailable",
    "SchemaLookupFailure",
    "CursorReadFailure",
    "InvalidOption",
    "InvalidPattern",
]
