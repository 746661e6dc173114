"""
config
======

YAML configuration and CLI override handling.

Example ``config.yml``::

    out_dir: out
    source_a: data/old.mdb
    source_b: data/new.mdb

    options:
      schema: true
      data: true
      stop_threshold: 3
      case_sensitive_names: false
      compare_allow_empty: false
      reserved_prefix: MSys

    table_filter:
      include: ["tb_%"]
      exclude: ["tmp%", "re:^zz_"]
      case_sensitive: false

    search:
      table_names: true
      field_names: true
      field_values: true
      ignore_case: false

Precedence for source paths: environment (``MDBDIFF_SOURCE_A``,
``MDBDIFF_SOURCE_B``) > CLI flags > config file. For everything else CLI
flags override the config file, and ``--include`` / ``--exclude`` extend the
configured patterns.
"""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .engine import CompareOptions
from .errors import InvalidOption
from .filters import DEFAULT_RESERVED_PREFIX, TableFilter
from .row_diff import DEFAULT_STOP_THRESHOLD

ENV_PREFIX = "MDBDIFF_"


@dataclass(frozen=True)
class SearchOptions:
    """Which parts of a source the search inspects."""

    table_names: bool = True
    field_names: bool = True
    field_values: bool = True
    ignore_case: bool = False


def load_config(path: Optional[Path]) -> Dict[str, Any]:
    """Load a YAML config file; ``None`` means no config (empty dict)."""
    if path is None:
        return {}
    if not path.exists():
        raise SystemExit(f"ERROR: config not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def deep_get(d: Dict[str, Any], keys: List[str], default: Any = None) -> Any:
    """Safely get nested dict value with default."""
    cur: Any = d
    for k in keys:
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return cur


def get_env_var(name: str) -> Optional[str]:
    """Return ``MDBDIFF_<NAME>`` from the environment, or None when unset/empty."""
    return os.environ.get(f"{ENV_PREFIX}{name.upper()}") or None


def resolve_source(cfg: Dict[str, Any], args: argparse.Namespace, side: str) -> Path:
    """Return the path of source ``a`` or ``b``.

    Raises
    ------
    SystemExit
        If no value is found, with a hint naming the env var and CLI flag.
    """
    key = f"source_{side}"
    value = get_env_var(key) or getattr(args, key, None) or cfg.get(key)
    if not value:
        raise SystemExit(
            f"ERROR: missing {key}. Set it in the config file, "
            f"via {ENV_PREFIX}{key.upper()}, or with --source-{side}."
        )
    return Path(value)


def read_options(cfg: Dict[str, Any], args: argparse.Namespace, table_filter: Optional[TableFilter] = None) -> CompareOptions:
    """Build :class:`CompareOptions` from config plus CLI overrides.

    Raises
    ------
    InvalidOption
        If the stop threshold is below 1.
    """
    threshold = getattr(args, "stop_threshold", None)
    if threshold is None:
        threshold = int(deep_get(cfg, ["options", "stop_threshold"], DEFAULT_STOP_THRESHOLD))
    if threshold < 1:
        raise InvalidOption("stop_threshold", threshold, "must be at least 1")
    case_sensitive = bool(deep_get(cfg, ["options", "case_sensitive_names"], False))
    if getattr(args, "case_sensitive_names", False):
        case_sensitive = True
    return CompareOptions(
        schema=bool(deep_get(cfg, ["options", "schema"], True)) and not getattr(args, "no_schema", False),
        data=bool(deep_get(cfg, ["options", "data"], True)) and not getattr(args, "no_data", False),
        stop_threshold=threshold,
        case_sensitive_names=case_sensitive,
        compare_allow_empty=bool(deep_get(cfg, ["options", "compare_allow_empty"], False)),
        reserved_prefix=str(deep_get(cfg, ["options", "reserved_prefix"], DEFAULT_RESERVED_PREFIX)),
        table_filter=table_filter,
    )


def read_table_filter(cfg: Dict[str, Any], args: argparse.Namespace) -> TableFilter:
    """Build the table filter; CLI patterns are appended to configured ones."""
    includes = list(deep_get(cfg, ["table_filter", "include"], []) or [])
    excludes = list(deep_get(cfg, ["table_filter", "exclude"], []) or [])
    includes.extend(getattr(args, "include", None) or [])
    excludes.extend(getattr(args, "exclude", None) or [])
    return TableFilter(
        include=includes,
        exclude=excludes,
        case_sensitive=bool(deep_get(cfg, ["table_filter", "case_sensitive"], False)),
    )


def read_search_options(cfg: Dict[str, Any], args: argparse.Namespace) -> SearchOptions:
    """Build :class:`SearchOptions` from config plus ``--no-*`` CLI switches."""
    return SearchOptions(
        table_names=bool(deep_get(cfg, ["search", "table_names"], True)) and not getattr(args, "no_tables", False),
        field_names=bool(deep_get(cfg, ["search", "field_names"], True)) and not getattr(args, "no_fields", False),
        field_values=bool(deep_get(cfg, ["search", "field_values"], True)) and not getattr(args, "no_values", False),
        ignore_case=bool(deep_get(cfg, ["search", "ignore_case"], False)) or getattr(args, "ignore_case", False),
    )
