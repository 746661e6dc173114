"""Unit tests for filters module."""

import pytest

from mdbdiff.errors import InvalidPattern
from mdbdiff.filters import (
    TableFilter,
    is_reserved,
    matches_pattern,
    select_tables,
    sql_like_to_fnmatch,
)


class TestSqlLikeToFnmatch:
    """Tests for sql_like_to_fnmatch function."""

    def test_percent_to_asterisk(self) -> None:
        assert sql_like_to_fnmatch("tb%") == "tb*"

    def test_underscore_to_question(self) -> None:
        assert sql_like_to_fnmatch("tb_A") == "tb?A"


class TestMatchesPattern:
    """Tests for matches_pattern function."""

    def test_like_pattern(self) -> None:
        assert matches_pattern("tb_General", "tb_%")
        assert not matches_pattern("Orders", "tb_%")

    def test_regex_pattern(self) -> None:
        assert matches_pattern("Orders2024", "re:^Orders\\d{4}$")
        assert not matches_pattern("Orders", "re:^Orders\\d{4}$")

    def test_case_insensitive_by_default(self) -> None:
        assert matches_pattern("TB_GENERAL", "tb_%")
        assert matches_pattern("orders", "re:^ORDERS$")

    def test_case_sensitive_when_enabled(self) -> None:
        assert not matches_pattern("TB_GENERAL", "tb_%", case_sensitive=True)
        assert not matches_pattern("orders", "re:^ORDERS$", case_sensitive=True)


class TestTableFilter:
    """Tests for TableFilter and select_tables."""

    def test_reserved_prefix(self) -> None:
        assert is_reserved("MSysObjects")
        assert not is_reserved("msysObjects")
        assert not is_reserved("Orders", prefix="")

    def test_select_tables_keeps_order(self) -> None:
        tables = ["Zeta", "MSysACEs", "Alpha", "tmpLoad"]
        tf = TableFilter(exclude=["tmp%"])
        assert select_tables(tables, table_filter=tf) == ["Zeta", "Alpha"]

    def test_include_and_exclude(self) -> None:
        tf = TableFilter(include=["tb_%", "Orders"], exclude=["%Old"])
        assert [t for t in ["tb_A", "tb_Old", "Orders", "Misc"] if tf.accepts(t)] == ["tb_A", "Orders"]

    def test_invalid_regex_raises(self) -> None:
        with pytest.raises(InvalidPattern):
            TableFilter(include=["re:(bad"])
