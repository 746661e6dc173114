"""
filters
=======

Table selection helpers shared by the schema pass, the data pass and search.

Two layers are applied, in this order:

1. the reserved-prefix policy: names starting with the internal-table
   prefix (``MSys`` by default, case-sensitive) are never compared or searched
2. optional include/exclude patterns (:class:`TableFilter`)

Patterns support:

- SQL LIKE wildcards ``%`` and ``_`` (default)
- regular expressions when prefixed with ``re:``

Examples:

- include: ``["tb_%"]``
- exclude: ``["tmp%", "re:^zz_.*$"]``
"""

from __future__ import annotations

import fnmatch
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .errors import InvalidPattern

DEFAULT_RESERVED_PREFIX = "MSys"


def is_reserved(name: str, prefix: str = DEFAULT_RESERVED_PREFIX) -> bool:
    """Return True if *name* is an internal table (case-sensitive prefix check)."""
    return bool(prefix) and name.startswith(prefix)


def sql_like_to_fnmatch(pattern: str) -> str:
    """Convert SQL LIKE patterns (% and _) to fnmatch syntax (* and ?)."""
    return pattern.replace("%", "*").replace("_", "?")


def matches_pattern(name: str, pattern: str, case_sensitive: bool = False) -> bool:
    """Return True if *name* matches *pattern* (LIKE by default, regex via ``re:``)."""
    if pattern.startswith("re:"):
        flags = 0 if case_sensitive else re.IGNORECASE
        return re.search(pattern[3:], name, flags) is not None
    fm = sql_like_to_fnmatch(pattern)
    if case_sensitive:
        return fnmatch.fnmatchcase(name, fm)
    return fnmatch.fnmatchcase(name.lower(), fm.lower())


def validate_patterns(patterns: Sequence[str]) -> None:
    """Raise :class:`InvalidPattern` for any ``re:`` pattern that does not compile."""
    for p in patterns:
        if p.startswith("re:"):
            try:
                re.compile(p[3:])
            except re.error as exc:
                raise InvalidPattern(p, str(exc)) from exc


@dataclass(frozen=True)
class TableFilter:
    """Include/exclude patterns for table selection."""

    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    case_sensitive: bool = False

    def __post_init__(self) -> None:
        validate_patterns(list(self.include) + list(self.exclude))

    def accepts(self, name: str) -> bool:
        """Return True if *name* passes the include and exclude patterns.

        Include patterns keep a table if it matches *any* include pattern.
        Exclude patterns drop a table if it matches *any* exclude pattern.
        """
        if self.include and not any(matches_pattern(name, p, self.case_sensitive) for p in self.include):
            return False
        if any(matches_pattern(name, p, self.case_sensitive) for p in self.exclude):
            return False
        return True


def select_tables(
    tables: Sequence[str],
    reserved_prefix: str = DEFAULT_RESERVED_PREFIX,
    table_filter: Optional[TableFilter] = None,
) -> List[str]:
    """Return *tables* minus reserved and filtered-out names, order preserved."""
    out = [t for t in tables if not is_reserved(t, reserved_prefix)]
    if table_filter is not None:
        out = [t for t in out if table_filter.accepts(t)]
    return out
