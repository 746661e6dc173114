"""
cli
===

Command-line entry point.

Compare two databases::

    mdbdiff compare --config config.yml
    mdbdiff compare --source-a old.mdb --source-b new.mdb --out out_prod_vs_test
    mdbdiff compare --source-a a.db --source-b b.db --no-data --exclude "tmp%"

Search one database::

    mdbdiff search "^Cust" --source customers.mdb
    mdbdiff search "smith" --source customers.mdb --no-tables --no-fields --ignore-case

Exit codes: ``0`` nothing found, ``1`` differences or matches found,
``2`` a source could not be opened or a pattern is invalid.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from .config import (
    load_config,
    read_options,
    read_search_options,
    read_table_filter,
    resolve_source,
)
from .engine import compare
from .errors import MdbDiffError
from .reporting import render_matches_text, write_report
from .search import search
from .sources import open_source


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", type=Path, default=None, help="Path to a YAML config file")
    parser.add_argument(
        "--include",
        action="append",
        default=[],
        help="Include table pattern (repeatable). SQL LIKE (% _) or regex via re:...",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        help="Exclude table pattern (repeatable). SQL LIKE (% _) or regex via re:...",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdbdiff",
        description="Compare two Access/SQLite databases or search one for a pattern.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    cmp_parser = subparsers.add_parser("compare", help="Compare schema and data of two databases")
    _add_common_args(cmp_parser)
    cmp_parser.add_argument("--source-a", default=None, help="First database file")
    cmp_parser.add_argument("--source-b", default=None, help="Second database file")
    cmp_parser.add_argument("--out", default=None, help="Override out_dir from config")
    cmp_parser.add_argument("--no-schema", action="store_true", help="Disable schema comparison")
    cmp_parser.add_argument("--no-data", action="store_true", help="Disable row comparison")
    cmp_parser.add_argument("--stop-threshold", type=int, default=None, help="Differing rows kept per table")
    cmp_parser.add_argument("--case-sensitive-names", action="store_true", help="Compare table/field names as-is")

    search_parser = subparsers.add_parser("search", help="Search table names, field names and values")
    _add_common_args(search_parser)
    search_parser.add_argument("pattern", help="Regular expression to search for")
    search_parser.add_argument("--source", default=None, help="Database file (defaults to source_a from config)")
    search_parser.add_argument("--no-tables", action="store_true", help="Do not search table names")
    search_parser.add_argument("--no-fields", action="store_true", help="Do not search field names")
    search_parser.add_argument("--no-values", action="store_true", help="Do not search cell values")
    search_parser.add_argument("--ignore-case", action="store_true", help="Case-insensitive matching")

    return parser


def run_compare(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    table_filter = read_table_filter(cfg, args)
    options = read_options(cfg, args, table_filter)
    path_a = resolve_source(cfg, args, "a")
    path_b = resolve_source(cfg, args, "b")
    out_root = Path(args.out or cfg.get("out_dir", "out")).resolve()

    header: List[str] = [
        f"- Source A: `{path_a}`",
        f"- Source B: `{path_b}`",
        f"- Options: schema={options.schema} data={options.data} stop_threshold={options.stop_threshold} "
        f"case_sensitive_names={options.case_sensitive_names}",
        f"- Table filters: include={table_filter.include or '[]'} exclude={table_filter.exclude or '[]'}",
    ]

    print(f"Opening {path_a} and {path_b}...")
    with open_source(path_a, label="A") as source_a, open_source(path_b, label="B") as source_b:
        print("Comparing...")
        report = compare(source_a, source_b, options)

    summary = write_report(out_root, report, header, label_a=path_a.name, label_b=path_b.name)
    print("\nDone.")
    print(f"Tables compared : {report.tables_compared}")
    print(f"Schema changes  : {len(report.schema)}")
    print(f"Differing tables: {len(report.divergences)}")
    if report.failures:
        print(f"Failed tables   : {len(report.failures)}")
    print(f"Report : {out_root / 'report.txt'}")
    print(f"Summary: {summary}")
    return 1 if report.has_differences else 0


def run_search(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    table_filter = read_table_filter(cfg, args)
    options = read_options(cfg, args, table_filter)
    search_options = read_search_options(cfg, args)
    path = Path(args.source) if args.source else resolve_source(cfg, args, "a")

    found = 0
    with open_source(path) as source:
        records = search(
            source,
            args.pattern,
            table_names=search_options.table_names,
            field_names=search_options.field_names,
            field_values=search_options.field_values,
            ignore_case=search_options.ignore_case,
            reserved_prefix=options.reserved_prefix,
            table_filter=table_filter,
        )
        for record in records:
            print(render_matches_text([record]), end="")
            if record.kind != "table_failure":
                found += 1
    print(f"\n{found} match(es)")
    return 1 if found else 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the CLI entry-point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )
    try:
        if args.command == "compare":
            return run_compare(args)
        return run_search(args)
    except MdbDiffError as exc:
        print(f"ERROR: {exc}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
