"""
schema_diff
===========

Structural comparison of two catalogs.

- :func:`table_set_diff`: tables present in one source only
- :func:`common_tables`: tables present in both, in source A's order
- :func:`field_set_diff`: per common table, missing fields and attribute changes
- :func:`common_fields`: fields present in both, in source A's order

Name comparison is case-insensitive unless ``case_sensitive=True``. Every
function here is pure and returns results in a deterministic order, so
running the schema pass twice on unchanged inputs yields identical output.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterator, List, Sequence, Tuple

from .filters import DEFAULT_RESERVED_PREFIX, is_reserved
from .models import (
    SIDE_A,
    SIDE_B,
    AdditionalField,
    AdditionalTable,
    FieldAttributeDifference,
    FieldDescriptor,
)

# (attribute name, accessor) pairs compared for every common field.
COMPARED_ATTRIBUTES: Tuple[Tuple[str, Callable[[FieldDescriptor], object]], ...] = (
    ("type", lambda f: f.type),
    ("size", lambda f: f.size),
    ("default", lambda f: f.default),
    ("required", lambda f: f.required),
)
ALLOW_EMPTY_ATTRIBUTE: Tuple[str, Callable[[FieldDescriptor], object]] = (
    "allow_empty",
    lambda f: f.allow_empty,
)


def attribute_set(compare_allow_empty: bool = False) -> Tuple[Tuple[str, Callable[[FieldDescriptor], object]], ...]:
    """Return the attributes compared by :func:`field_set_diff`.

    ``allow_empty`` is off by default because some drivers report it
    unreliably.
    """
    if compare_allow_empty:
        return COMPARED_ATTRIBUTES + (ALLOW_EMPTY_ATTRIBUTE,)
    return COMPARED_ATTRIBUTES


def name_key(case_sensitive: bool) -> Callable[[str], str]:
    """Return the function used to compare names under the given case mode."""
    if case_sensitive:
        return lambda s: s
    return str.casefold


def table_set_diff(
    tables_a: Sequence[str],
    tables_b: Sequence[str],
    case_sensitive: bool = False,
) -> Iterator[AdditionalTable]:
    """Yield the symmetric difference of two table-name lists.

    A-only names come first (in A's order), then B-only names (in B's order).
    """
    key = name_key(case_sensitive)
    keys_a = {key(t) for t in tables_a}
    keys_b = {key(t) for t in tables_b}
    for t in tables_a:
        if key(t) not in keys_b:
            yield AdditionalTable(side=SIDE_A, table=t)
    for t in tables_b:
        if key(t) not in keys_a:
            yield AdditionalTable(side=SIDE_B, table=t)


def common_tables(
    tables_a: Sequence[str],
    tables_b: Sequence[str],
    case_sensitive: bool = False,
    reserved_prefix: str = DEFAULT_RESERVED_PREFIX,
) -> List[Tuple[str, str]]:
    """Return ``(name_in_a, name_in_b)`` for tables present in both sources.

    Order follows source A; reserved tables are skipped.
    """
    key = name_key(case_sensitive)
    by_key_b: Dict[str, str] = {}
    for t in tables_b:
        by_key_b.setdefault(key(t), t)
    out: List[Tuple[str, str]] = []
    for t in tables_a:
        if is_reserved(t, reserved_prefix):
            continue
        match = by_key_b.get(key(t))
        if match is not None:
            out.append((t, match))
    return out


def field_set_diff(
    table: str,
    fields_a: Sequence[FieldDescriptor],
    fields_b: Sequence[FieldDescriptor],
    attributes: Sequence[Tuple[str, Callable[[FieldDescriptor], object]]] = COMPARED_ATTRIBUTES,
    case_sensitive: bool = False,
) -> Iterator[AdditionalField | FieldAttributeDifference]:
    """Compare the field lists of one table.

    For each field of A, in order: if B has it, yield one
    :class:`FieldAttributeDifference` per differing attribute; otherwise yield
    :class:`AdditionalField` for side A. Fields of B never matched are then
    yielded as :class:`AdditionalField` for side B, in B's order.
    """
    key = name_key(case_sensitive)
    lookup_b: Dict[str, FieldDescriptor] = {}
    for f in fields_b:
        lookup_b.setdefault(key(f.name), f)
    remaining_b = [f.name for f in fields_b]

    for fa in fields_a:
        fb = lookup_b.get(key(fa.name))
        if fb is None:
            yield AdditionalField(side=SIDE_A, table=table, field=fa.name)
            continue
        for attr, get in attributes:
            va, vb = get(fa), get(fb)
            if va != vb:
                yield FieldAttributeDifference(table=table, field=fa.name, attribute=attr, value_a=va, value_b=vb)
        if fb.name in remaining_b:
            remaining_b.remove(fb.name)

    for name in remaining_b:
        yield AdditionalField(side=SIDE_B, table=table, field=name)


def common_fields(
    fields_a: Sequence[FieldDescriptor],
    fields_b: Sequence[FieldDescriptor],
    case_sensitive: bool = False,
) -> List[Tuple[str, str]]:
    """Return ``(name_in_a, name_in_b)`` for fields present in both, in A's order.

    The A names are the comparison field list; the B names are the same fields
    spelled the way source B reports them, used to open B's cursor.
    """
    key = name_key(case_sensitive)
    by_key_b: Dict[str, str] = {}
    for f in fields_b:
        by_key_b.setdefault(key(f.name), f.name)
    out: List[Tuple[str, str]] = []
    for f in fields_a:
        match = by_key_b.get(key(f.name))
        if match is not None:
            out.append((f.name, match))
    return out
