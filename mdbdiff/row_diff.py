"""
row_diff
========

Bounded, positional row comparison of one table in two sources.

Rows are aligned purely by fetch order: row *n* of source A is compared with
row *n* of source B. There is no key-based matching, so the result is only
meaningful when both sources return rows in the same order (for Access and
SQLite that is usually insertion order, but neither engine guarantees it
without an ORDER BY).

A row counts as divergent as soon as one field differs; the whole row from
both sides is captured. Collection stops at the stop threshold: when one
more divergent row is found after that, the result is marked truncated and
no further rows are read.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .models import SIDE_A, SIDE_B, RecordCountMismatch, RowDivergence, RowSnapshot
from .sources.base import RowCursor

logger = logging.getLogger(__name__)

DEFAULT_STOP_THRESHOLD = 3


@dataclass(frozen=True)
class TableScanResult:
    """Outcome of scanning one table.

    ``divergence`` is None when no rows differed. ``count_mismatch`` is set
    when one cursor ran out before the other; it is independent of
    ``divergence``.
    """

    table: str
    rows_compared: int
    divergence: Optional[RowDivergence] = None
    count_mismatch: Optional[RecordCountMismatch] = None


def first_difference(row_a: Sequence[str], row_b: Sequence[str]) -> Optional[int]:
    """Return the index of the first differing value, or None if rows are equal."""
    for i, (va, vb) in enumerate(zip(row_a, row_b)):
        if va != vb:
            return i
    if len(row_a) != len(row_b):
        return min(len(row_a), len(row_b))
    return None


class RowDiffScanner:
    """Drive two cursors in lockstep and collect divergent row pairs.

    Parameters
    ----------
    stop_threshold:
        Maximum number of row pairs kept per table. Must be at least 1.
    """

    def __init__(self, stop_threshold: int = DEFAULT_STOP_THRESHOLD) -> None:
        if stop_threshold < 1:
            raise ValueError(f"stop_threshold must be >= 1, got {stop_threshold}")
        self.stop_threshold = stop_threshold

    def scan(
        self,
        table: str,
        fields: Sequence[str],
        cursor_a: RowCursor,
        cursor_b: RowCursor,
    ) -> TableScanResult:
        """Scan *table* and return its :class:`TableScanResult`.

        The cursors must be open against *fields* in exactly this order. They
        are not closed here; callers own them.

        Raises
        ------
        CursorReadFailure
            If either cursor fails while fetching.
        """
        row_index = 0
        pairs: List[Tuple[RowSnapshot, RowSnapshot]] = []
        truncated = False
        mismatch: Optional[RecordCountMismatch] = None

        while True:
            end_a = cursor_a.at_end()
            end_b = cursor_b.at_end()
            if end_a or end_b:
                if end_a != end_b:
                    mismatch = RecordCountMismatch(
                        table=table,
                        row_index=row_index,
                        longer_side=SIDE_B if end_a else SIDE_A,
                    )
                    logger.info("record count mismatch in %s after %d row(s)", table, row_index)
                break

            row_index += 1
            row_a = cursor_a.next_row()
            row_b = cursor_b.next_row()

            if first_difference(row_a, row_b) is None:
                continue
            if len(pairs) == self.stop_threshold:
                truncated = True
                logger.debug("stop threshold %d reached in %s at row %d", self.stop_threshold, table, row_index)
                break
            pairs.append((RowSnapshot(row_index, tuple(row_a)), RowSnapshot(row_index, tuple(row_b))))

        divergence = None
        if pairs:
            divergence = RowDivergence(table=table, fields=tuple(fields), pairs=tuple(pairs), truncated=truncated)
        return TableScanResult(table=table, rows_compared=row_index, divergence=divergence, count_mismatch=mismatch)
