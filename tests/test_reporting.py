from pathlib import Path

from mdbdiff.engine import ComparisonReport
from mdbdiff.models import (
    AdditionalField,
    AdditionalTable,
    FieldAttributeDifference,
    FieldValueMatch,
    RecordCountMismatch,
    RowDivergence,
    RowSnapshot,
    TableNameMatch,
)
from mdbdiff.reporting import (
    display_value,
    md_anchor,
    rel_link,
    render_divergence_text,
    render_matches_text,
    render_schema_text,
    safe_name,
    write_report,
)

DIVERGENCE = RowDivergence(
    table="tb General",
    fields=("A", "B", "C"),
    pairs=((RowSnapshot(1, ("Hello", "Kitty", "Goodbye")), RowSnapshot(1, ("Hello1", "Kitty", "Goodbye"))),),
    truncated=True,
)


def test_safe_name_replaces_and_trims() -> None:
    assert safe_name("tb General$2025") == "tb_General_2025"
    assert safe_name("") == "unnamed"


def test_rel_link_and_md_anchor(tmp_path: Path) -> None:
    from_file = tmp_path / "SUMMARY.md"
    to_file = tmp_path / "data" / "t.txt"
    assert rel_link(from_file, to_file) == "data/t.txt"
    assert md_anchor("Differing rows!") == "differing-rows"


def test_display_value_truncates_at_200() -> None:
    assert display_value("abc") == "abc"
    shown = display_value("x" * 500)
    assert shown.startswith("x" * 200 + "...")
    assert "(500 chars)" in shown
    assert display_value("a\nb") == "a b"


def test_render_schema_text_uses_labels() -> None:
    text = render_schema_text(
        [
            AdditionalTable(side="A", table="Old"),
            AdditionalField(side="B", table="t", field="f"),
            FieldAttributeDifference(table="t", field="g", attribute="size", value_a=10, value_b=20),
        ],
        "old.mdb",
        "new.mdb",
    )
    assert "Table only in old.mdb: Old" in text
    assert "Field only in new.mdb: t.f" in text
    assert "size 10 -> 20" in text


def test_render_divergence_flags_changed_fields() -> None:
    text = render_divergence_text(DIVERGENCE, "old", "new")
    lines = text.splitlines()
    assert lines[0] == "Table: tb General"
    assert any(line.startswith("*") and "Hello1" in line for line in lines)
    assert any(line.lstrip().startswith("B") and "Kitty" in line for line in lines)
    assert "more rows differ" in text


def test_render_matches_truncates_only_for_display() -> None:
    match = FieldValueMatch(table="t", field="memo", row=3, value="y" * 500)
    text = render_matches_text([TableNameMatch(table="t"), match])
    assert "Table name: t" in text
    assert "t.memo row 3" in text
    assert "y" * 201 not in text
    assert len(match.value) == 500


def test_write_report_creates_files(tmp_path: Path) -> None:
    report = ComparisonReport(
        schema=[AdditionalTable(side="A", table="Old")],
        divergences=[DIVERGENCE],
        count_mismatches=[RecordCountMismatch(table="Orders", row_index=2, longer_side="B")],
    )
    out_dir = tmp_path / "out"
    summary = write_report(out_dir, report, ["- Source A: `a.db`"], "a.db", "b.db")

    content = summary.read_text(encoding="utf-8")
    assert "# Database Diff Summary" in content
    assert "## Differing rows" in content
    assert "data/tb_General.txt" in content

    report_text = (out_dir / "report.txt").read_text(encoding="utf-8")
    assert "Source A: `a.db`" in report_text
    assert "Table only in a.db: Old" in report_text
    assert "Orders: b.db has more rows" in report_text
    assert (out_dir / "data" / "tb_General.txt").exists()


def test_write_report_keeps_colliding_table_files_apart(tmp_path: Path) -> None:
    """Test tables whose safe names collide each get their own data file."""
    first = RowDivergence(
        table="Order Lines",
        fields=("qty",),
        pairs=((RowSnapshot(1, ("1",)), RowSnapshot(1, ("2",))),),
        truncated=False,
    )
    second = RowDivergence(
        table="Order_Lines",
        fields=("qty",),
        pairs=((RowSnapshot(4, ("7",)), RowSnapshot(4, ("8",))),),
        truncated=False,
    )
    out_dir = tmp_path / "out"
    summary = write_report(out_dir, ComparisonReport(divergences=[first, second]), [], "a.db", "b.db")

    data_dir = out_dir / "data"
    assert sorted(p.name for p in data_dir.iterdir()) == ["Order_Lines.txt", "Order_Lines_2.txt"]
    assert (data_dir / "Order_Lines.txt").read_text(encoding="utf-8").startswith("Table: Order Lines\n")
    assert (data_dir / "Order_Lines_2.txt").read_text(encoding="utf-8").startswith("Table: Order_Lines\n")
    content = summary.read_text(encoding="utf-8")
    assert "(data/Order_Lines.txt)" in content
    assert "(data/Order_Lines_2.txt)" in content
    assert "Tables with differing rows: 2 file(s)" in (out_dir / "report.txt").read_text(encoding="utf-8")
