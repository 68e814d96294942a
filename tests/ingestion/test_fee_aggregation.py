"""Tests for folding fee collection rows into one receipt per (date, head)."""

from datetime import date
from decimal import Decimal

from cashbook_ingestion.domain.fee_aggregation import aggregate_fee_rows, fee_notes
from cashbook_kernel.domain.records import BookSegment, EntryKind


def fee_row(date_text: str, rpt: str, **amounts: str) -> dict[str, str]:
    return {"Date": date_text, "Rpt": rpt, **amounts}


class TestAggregateFeeRows:
    def test_same_date_and_head_are_summed(self):
        records = aggregate_fee_rows([fee_row("01/04/25", "101", Adm="10"), fee_row("01/04/25", "102", Adm="15")])

        assert len(records) == 1
        (record,) = records
        assert record.amount == Decimal("25")
        assert record.category == "Adm Fee"
        assert record.kind is EntryKind.RECEIPT
        assert record.reference_no == "Cash"
        assert record.notes == "College Fee Collection, Rpt No From: 101 To: 102"
        assert record.fiscal_year == "25-26"

    def test_zero_and_blank_cells_produce_nothing(self):
        records = aggregate_fee_rows([fee_row("01/04/25", "101", Adm="0", Lib="", Lab="  ", Fine="abc")])
        assert records == []

    def test_one_record_per_head_and_date_in_first_seen_order(self):
        records = aggregate_fee_rows(
            [
                fee_row("01/04/25", "101", Lib="50", Adm="100"),
                fee_row("02/04/25", "150", Adm="100"),
                fee_row("01/04/25", "103", Adm="100"),
            ]
        )
        assert [(r.date, r.category, r.amount) for r in records] == [
            (date(2025, 4, 1), "Adm Fee", Decimal("200")),
            (date(2025, 4, 1), "Lib Fee", Decimal("50")),
            (date(2025, 4, 2), "Adm Fee", Decimal("100")),
        ]

    def test_receipt_range_uses_min_and_max(self):
        (record,) = aggregate_fee_rows(
            [fee_row("01/04/25", n, Tution="1") for n in ("154", "101", "120")]
        )
        assert record.notes.endswith("Rpt No From: 101 To: 154")

    def test_unparseable_date_skipped_and_logged(self, captured_logs):
        records = aggregate_fee_rows([fee_row("not a date", "1", Adm="5"), fee_row("5-Apr-25", "2", Adm="7")])

        assert [(r.date, r.amount) for r in records] == [(date(2025, 4, 5), Decimal("7"))]
        assert any(r["message"] == "fee_row_skipped" for r in captured_logs())

    def test_thousands_separator(self):
        (record,) = aggregate_fee_rows([fee_row("01/04/25", "1", Adm="1,250.50")])
        assert record.amount == Decimal("1250.50")

    def test_settings_are_honoured(self):
        (record,) = aggregate_fee_rows(
            [fee_row("01/04/25", "", Bus="30")],
            fee_heads=("Bus",),
            segment=BookSegment.UNAIDED,
            reference_sentinel="Counter",
            category_suffix=" Charges",
            notes_prefix="Bus Collection",
        )
        assert record.category == "Bus Charges"
        assert record.reference_no == "Counter"
        assert record.book_segment is BookSegment.UNAIDED
        assert record.notes == "Bus Collection"


def test_fee_notes():
    assert fee_notes("P", [3, 1, 2]) == "P, Rpt No From: 1 To: 3"
    assert fee_notes("P", []) == "P"
