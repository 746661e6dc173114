"""
errors
======

Exception hierarchy shared by the data sources and the engine.

- :class:`SourceUnavailable` aborts the whole run.
- :class:`SchemaLookupFailure` propagates immediately (catalog changed under us).
- :class:`CursorReadFailure` aborts only the table being scanned.
- :class:`InvalidPattern` is raised before any scanning starts.
- :class:`InvalidOption` rejects a run option such as a stop threshold below 1.
"""

from __future__ import annotations


class MdbDiffError(Exception):
    """Base class for all mdbdiff errors."""


class SourceUnavailable(MdbDiffError):
    """A data source cannot be opened or read."""


class SchemaLookupFailure(MdbDiffError):
    """A table or field named by the catalog could not be found."""

    def __init__(self, table: str, detail: str = "") -> None:
        self.table = table
        self.detail = detail
        msg = f"schema lookup failed for table {table!r}"
        super().__init__(f"{msg}: {detail}" if detail else msg)


class CursorReadFailure(MdbDiffError):
    """Fetching a row failed in the middle of a table scan."""

    def __init__(self, table: str, detail: str = "") -> None:
        self.table = table
        self.detail = detail
        msg = f"cursor read failed for table {table!r}"
        super().__init__(f"{msg}: {detail}" if detail else msg)


class InvalidPattern(MdbDiffError):
    """A search or filter pattern is not a valid regular expression."""

    def __init__(self, pattern: str, detail: str = "") -> None:
        self.pattern = pattern
        super().__init__(f"invalid pattern {pattern!r}: {detail}")


class InvalidOption(MdbDiffError):
    """A run option has a value outside its allowed range."""

    def __init__(self, option: str, value: object, detail: str = "") -> None:
        self.option = option
        self.value = value
        super().__init__(f"invalid {option} {value!r}: {detail}" if detail else f"invalid {option} {value!r}")
