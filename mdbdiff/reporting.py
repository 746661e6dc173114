"""
reporting
=========

Text and Markdown rendering of comparison and search results.

This module only consumes the records produced by the engine; it never
touches a data source. Output layout:

- ``report.txt``: schema differences, count mismatches, failures
- ``data/<table>.txt``: side-by-side divergent rows per table (``_2``, ``_3``
  suffixes when two table names map to the same file name)
- ``SUMMARY.md``: contents plus relative links to the per-table files

Primary API
-----------
- :func:`write_report`
- :func:`render_matches_text`
"""

from __future__ import annotations

import datetime as dt
import os
import re
from pathlib import Path
from typing import Iterable, List, Sequence, Set, Tuple

from .engine import ComparisonReport
from .models import RowDivergence, SchemaRecord, SearchRecord

DISPLAY_VALUE_LIMIT = 200


def safe_name(value: str) -> str:
    """Return a filesystem-safe version of *value*.

    >>> safe_name("tb General$2025")
    'tb_General_2025'
    >>> safe_name("")
    'unnamed'
    """
    out = re.sub(r"[^A-Za-z0-9._-]+", "_", value).strip("_")
    return out or "unnamed"


def write_text(path: Path, content: str) -> None:
    """Write UTF-8 text to *path* with normalized newlines."""
    path.parent.mkdir(parents=True, exist_ok=True)
    content = content.replace("\r\n", "\n").replace("\r", "\n")
    path.write_text(content, encoding="utf-8")


def rel_link(from_file: Path, to_file: Path) -> str:
    """Create a portable relative link for Markdown."""
    return os.path.relpath(to_file, start=from_file.parent).replace("\\", "/")


def md_anchor(title: str) -> str:
    """Create an approximate GitHub-style markdown anchor from a section title."""
    return re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")


def display_value(value: str, limit: int = DISPLAY_VALUE_LIMIT) -> str:
    """Shorten *value* for display, flattening line breaks."""
    value = value.replace("\r\n", " ").replace("\n", " ").replace("\r", " ")
    if len(value) <= limit:
        return value
    return value[:limit] + f"... ({len(value)} chars)"


def render_schema_text(records: Iterable[SchemaRecord], label_a: str = "A", label_b: str = "B") -> str:
    """Render schema records as one line each."""
    labels = {"A": label_a, "B": label_b}
    lines: List[str] = []
    for r in records:
        if r.kind == "additional_table":
            lines.append(f"Table only in {labels[r.side]}: {r.table}")
        elif r.kind == "additional_field":
            lines.append(f"Field only in {labels[r.side]}: {r.table}.{r.field}")
        elif r.kind == "field_attribute":
            lines.append(f"Field {r.table}.{r.field}: {r.attribute} {r.value_a!r} -> {r.value_b!r}")
    return "\n".join(lines) + ("\n" if lines else "")


def _layout(rows: Sequence[Tuple[str, ...]]) -> List[str]:
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    return ["  ".join(cell.ljust(w) for cell, w in zip(row, widths)).rstrip() for row in rows]


def render_divergence_text(divergence: RowDivergence, label_a: str = "A", label_b: str = "B") -> str:
    """Render divergent rows as a field / A / B table per row pair.

    Fields whose values differ are flagged with ``*``.
    """
    lines = [f"Table: {divergence.table}"]
    for snap_a, snap_b in divergence.pairs:
        lines.append("")
        lines.append(f"Row {snap_a.row_index}")
        rows: List[Tuple[str, ...]] = [("", "Field", label_a, label_b)]
        for name, va, vb in zip(divergence.fields, snap_a.values, snap_b.values):
            flag = "*" if va != vb else ""
            rows.append((flag, name, display_value(va), display_value(vb)))
        lines.extend(_layout(rows))
    if divergence.truncated:
        lines.append("")
        lines.append(f"(stopped after {len(divergence.pairs)} differing rows; more rows differ)")
    return "\n".join(lines) + "\n"


def render_matches_text(records: Iterable[SearchRecord]) -> str:
    """Render search records, one line each."""
    lines: List[str] = []
    for r in records:
        if r.kind == "table_name":
            lines.append(f"Table name: {r.table}")
        elif r.kind == "field_name":
            lines.append(f"Field name: {r.table}.{r.field}")
        elif r.kind == "field_value":
            lines.append(f"Value: {r.table}.{r.field} row {r.row}: {display_value(r.value)}")
        elif r.kind == "table_failure":
            lines.append(f"Failed: {r.table}: {r.reason}")
    return "\n".join(lines) + ("\n" if lines else "")


def generate_summary_md(out_dir: Path, header_lines: List[str], sections: List[Tuple[str, List[Path]]]) -> Path:
    """Generate a Markdown summary linking to the per-table files.

    Parameters
    ----------
    out_dir:
        Output directory where ``SUMMARY.md`` is written.
    header_lines:
        Bullet-style lines to include near the top (sources/options).
    sections:
        A list of ``(title, files)`` tuples. Each file should be a path under
        ``out_dir``.

    Returns
    -------
    pathlib.Path
        The path to the generated ``SUMMARY.md``.
    """
    summary_path = out_dir / "SUMMARY.md"
    now = dt.datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    lines: List[str] = []
    lines.append("# Database Diff Summary\n\n")
    lines.append(f"_Generated: {now}_\n\n")

    if header_lines:
        for h in header_lines:
            lines.append(h + "\n")
        lines.append("\n")

    lines.append("## Contents\n")
    for title, _ in sections:
        lines.append(f"- [{title}](#{md_anchor(title)})\n")
    lines.append("\n")

    for title, files in sections:
        lines.append(f"## {title}\n\n")
        if not files:
            lines.append("- No differences\n\n")
            continue
        for f in files:
            lines.append(f"- [{f.name}]({rel_link(summary_path, f)})\n")
        lines.append("\n")

    write_text(summary_path, "".join(lines))
    return summary_path


def write_report(
    out_dir: Path,
    report: ComparisonReport,
    header_lines: List[str],
    label_a: str = "A",
    label_b: str = "B",
) -> Path:
    """Write ``report.txt``, per-table divergence files and ``SUMMARY.md``.

    Returns the path of ``SUMMARY.md``.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    report_lines: List[str] = ["== Database Diff Report ==\n"]
    report_lines.extend(h.lstrip("- ") + "\n" for h in header_lines)
    report_lines.append("\n")

    report_lines.append("-- Schema --\n")
    report_lines.append(render_schema_text(report.schema, label_a, label_b) or "none\n")
    report_lines.append("\n-- Record counts --\n")
    if report.count_mismatches:
        for m in report.count_mismatches:
            longer = label_a if m.longer_side == "A" else label_b
            report_lines.append(f"{m.table}: {longer} has more rows (other side ended after {m.row_index})\n")
    else:
        report_lines.append("none\n")
    if report.failures:
        report_lines.append("\n-- Failed tables --\n")
        for f in report.failures:
            report_lines.append(f"{f.table}: {f.reason}\n")

    data_files: List[Path] = []
    used: Set[str] = set()
    for divergence in report.divergences:
        stem = safe_name(divergence.table)
        name, n = stem, 1
        # "Order Lines" and "Order_Lines" share a safe name
        while name.lower() in used:
            n += 1
            name = f"{stem}_{n}"
        used.add(name.lower())
        path = out_dir / "data" / f"{name}.txt"
        write_text(path, render_divergence_text(divergence, label_a, label_b))
        data_files.append(path)
    report_lines.append(f"\nTables with differing rows: {len(data_files)} file(s) -> data/\n")

    report_path = out_dir / "report.txt"
    write_text(report_path, "".join(report_lines))

    sections = [
        ("Report", [report_path]),
        ("Differing rows", data_files),
    ]
    return generate_summary_md(out_dir, header_lines, sections)
