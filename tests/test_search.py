"""Unit tests for search module."""

import pytest

from conftest import FakeSource, text_fields

from mdbdiff.errors import InvalidPattern
from mdbdiff.filters import TableFilter
from mdbdiff.models import FieldNameMatch, FieldValueMatch, TableNameMatch
from mdbdiff.search import search


@pytest.fixture
def source() -> FakeSource:
    return FakeSource(
        {
            "Customers": (
                text_fields("CustID", "Name", "Notes"),
                [(1, "Ann", None), (2, "Customer Bob", "Cust-VIP")],
            ),
            "CustomerOrders": (text_fields("OrderID", "CustID"), [(10, 1)]),
            "MSysACEs": (text_fields("Cust"), [("Cust",)]),
            "Products": (text_fields("Name"), [("Widget",)]),
        }
    )


class TestSearch:
    """Tests for search function."""

    def test_table_name_matches_skip_reserved(self, source: FakeSource) -> None:
        """Test ^Cust matches both customer tables and not MSysACEs."""
        result = list(search(source, "^Cust", field_names=False, field_values=False))
        assert result == [TableNameMatch(table="Customers"), TableNameMatch(table="CustomerOrders")]

    def test_stream_grouped_per_table(self, source: FakeSource) -> None:
        """Test table, then field-name, then value matches for each table in turn."""
        result = list(search(source, "^Cust"))
        assert result == [
            TableNameMatch(table="Customers"),
            FieldNameMatch(table="Customers", field="CustID"),
            FieldValueMatch(table="Customers", field="Name", row=2, value="Customer Bob"),
            FieldValueMatch(table="Customers", field="Notes", row=2, value="Cust-VIP"),
            TableNameMatch(table="CustomerOrders"),
            FieldNameMatch(table="CustomerOrders", field="CustID"),
        ]

    def test_value_search_covers_all_fields(self, source: FakeSource) -> None:
        """Test values are scanned row by row, column by column, 1-based rows."""
        result = list(search(source, "^(1|Ann)$", table_names=False, field_names=False))
        assert [(r.table, r.field, r.row, r.value) for r in result] == [
            ("Customers", "CustID", 1, "1"),
            ("Customers", "Name", 1, "Ann"),
            ("CustomerOrders", "CustID", 1, "1"),
        ]

    def test_full_value_returned(self) -> None:
        """Test a 500-character match comes back untruncated."""
        long_value = "x" * 250 + "needle" + "y" * 244
        src = FakeSource({"t": (text_fields("memo"), [(long_value,)])})
        (match,) = list(search(src, "needle", table_names=False, field_names=False))
        assert len(match.value) == 500
        assert match.value == long_value

    def test_ignore_case(self, source: FakeSource) -> None:
        result = list(search(source, "widget", table_names=False, field_names=False, ignore_case=True))
        assert result == [FieldValueMatch(table="Products", field="Name", row=1, value="Widget")]
        assert list(search(source, "widget", table_names=False, field_names=False)) == []

    def test_invalid_pattern_raised_before_scanning(self, source: FakeSource) -> None:
        """Test a malformed pattern fails at call time, before any cursor opens."""
        with pytest.raises(InvalidPattern):
            search(source, "(unclosed")
        assert source.cursors == []

    def test_read_failure_reported_and_search_continues(self) -> None:
        src = FakeSource(
            {"a": (text_fields("v"), [("hit",), ("hit",)]), "b": (text_fields("v"), [("hit",)])},
            fail_at={"a": 2},
        )
        result = list(search(src, "hit", table_names=False, field_names=False))
        assert [r.kind for r in result] == ["field_value", "table_failure", "field_value"]
        assert result[2].table == "b"
        assert all(c.closed for c in src.cursors)

    def test_table_filter(self, source: FakeSource) -> None:
        result = list(
            search(source, "^Cust", field_names=False, field_values=False, table_filter=TableFilter(exclude=["%Orders"]))
        )
        assert result == [TableNameMatch(table="Customers")]

    def test_abandoned_stream_closes_cursor(self, source: FakeSource) -> None:
        """Test stopping iteration mid-table releases the open cursor."""
        gen = search(source, ".", table_names=False, field_names=False)
        next(gen)
        gen.close()
        assert len(source.cursors) == 1
        assert source.cursors[0].closed
