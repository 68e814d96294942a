"""
Tests for ImportService: file -> aggregated records -> store.

Files are written to tmp_path; the store is the in-memory SQLite store
from conftest.
"""

from decimal import Decimal

import pytest

from cashbook_ingestion.domain.layouts import (
    CASH_BOOK_REPORT_V1,
    FEE_COLLECTION_V1,
    SALARY_DEDUCTION_V1,
)
from cashbook_ingestion.services import ImportService
from cashbook_kernel.domain.records import BookSegment, EntryKind
from cashbook_kernel.exceptions import UnknownColumnLayoutError, UnsupportedSourceFormatError
from cashbook_kernel.services.record_store import ALL_ENTRIES, EntryFilter

FEE_CSV = (
    "Sl No,Student Name,Date,Rpt,Adm,Lib\n"
    "1,A,01/04/25,101,500,50\n"
    "2,B,01/04/25,102,500,0\n"
    "3,C,02/04/25,103,,75\n"
)

SALARY_CSV = (
    "Date,Month,Year,Gross_Salary,IT_Deduction,PT_Deduction,"
    "GSLIC_Deduction,LIC_Deduction,FBF_Deduction,Total_Deductions\n"
    "30-04-25,April,2025,40000,1000,200,0,0,0,1200\n"
    "30-04-25,April,2025,35000,500,200,0,0,0,700\n"
)


@pytest.fixture
def import_service(store) -> ImportService:
    return ImportService(store)


@pytest.fixture
def fee_file(tmp_path):
    path = tmp_path / "fees.csv"
    path.write_text(FEE_CSV, encoding="utf-8")
    return path


class TestImportFile:
    def test_fee_file_is_aggregated_and_stored(self, import_service, store, fee_file):
        outcome = import_service.import_file(fee_file)

        assert outcome.layout is FEE_COLLECTION_V1
        assert outcome.segment is BookSegment.AIDED
        assert (outcome.imported, outcome.failed) == (3, 0)

        stored = {(r.date.isoformat(), r.category): r for r in store.query(ALL_ENTRIES)}
        assert stored[("2025-04-01", "Adm Fee")].amount == Decimal("1000")
        assert stored[("2025-04-01", "Adm Fee")].notes == "College Fee Collection, Rpt No From: 101 To: 102"
        assert stored[("2025-04-01", "Lib Fee")].amount == Decimal("50")
        assert stored[("2025-04-02", "Lib Fee")].reference_no == "Cash"

    def test_reimport_skips_duplicates(self, import_service, store, fee_file):
        import_service.import_file(fee_file)
        second = import_service.import_file(fee_file)

        assert second.imported == 0
        assert len(second.skipped_duplicates) == 3
        assert len(store.query(ALL_ENTRIES)) == 3

    def test_reimport_without_skipping_writes_again(self, import_service, store, fee_file):
        import_service.import_file(fee_file)
        second = import_service.import_file(fee_file, skip_duplicates=False)

        assert second.imported == 3
        assert len(store.query(ALL_ENTRIES)) == 6

    def test_duplicates_checked_within_target_segment_only(self, import_service, store, fee_file):
        import_service.import_file(fee_file, segment="aided")
        outcome = import_service.import_file(fee_file, segment="unaided")

        assert outcome.imported == 3
        assert len(store.query(EntryFilter(segment=BookSegment.UNAIDED))) == 3

    def test_salary_file(self, import_service, store, tmp_path):
        path = tmp_path / "salary.csv"
        path.write_text(SALARY_CSV, encoding="utf-8")

        outcome = import_service.import_file(path)

        assert outcome.layout is SALARY_DEDUCTION_V1
        (summary,) = outcome.salary_summary
        assert (summary.month, summary.employee_count, summary.gross_salary) == ("April", 2, Decimal("75000"))
        kinds = [(r.kind, r.category) for r in outcome.result.results]
        assert kinds == [
            (EntryKind.RECEIPT, "Govt Salary Grants"),
            (EntryKind.RECEIPT, "I Tax"),
            (EntryKind.RECEIPT, "P Tax"),
            (EntryKind.PAYMENT, "Govt Salary Account"),
            (EntryKind.PAYMENT, "Receivable Account"),
        ]

    def test_cash_book_report_file(self, import_service, store, tmp_path):
        path = tmp_path / "cash_book.csv"
        path.write_text(
            ",".join(CASH_BOOK_REPORT_V1.columns) + "\n"
            "1,01/04/25,R1,100.00,Fees,n1,02/04/25,C9,40.00,Rent,n2\n",
            encoding="utf-8",
        )

        outcome = import_service.import_file(path, segment=BookSegment.UNAIDED)

        assert outcome.layout is CASH_BOOK_REPORT_V1
        assert outcome.imported == 2
        assert {r.book_segment for r in store.query(ALL_ENTRIES)} == {BookSegment.UNAIDED}

    def test_empty_aggregation_writes_nothing(self, import_service, store, tmp_path, captured_logs):
        path = tmp_path / "fees.csv"
        path.write_text("Date,Rpt,Adm\n01/04/25,1,0\n", encoding="utf-8")

        outcome = import_service.import_file(path)

        assert (outcome.imported, outcome.failed) == (0, 0)
        assert store.query(ALL_ENTRIES) == []
        assert any(r["message"] == "import_file_nothing_to_write" for r in captured_logs())

    def test_logs_carry_source_file(self, import_service, fee_file, captured_logs):
        import_service.import_file(fee_file)
        completed = [r for r in captured_logs() if r["message"] == "import_file_completed"]
        assert completed[0]["source_file"] == "fees.csv"
        assert completed[0]["imported"] == 3

    def test_outcome_to_dict(self, import_service, fee_file):
        data = import_service.import_file(fee_file).to_dict()
        assert data["layout"] == "FEE_COLLECTION_V1"
        assert data["segment"] == "aided"
        assert data["imported"] == 3


class TestPreviewAndErrors:
    def test_preview_writes_nothing(self, import_service, store, fee_file):
        preview = import_service.preview_file(fee_file)

        assert preview.source_rows == 3
        assert len(preview.records) == 3
        assert preview.total_amount == Decimal("1125")
        assert store.query(ALL_ENTRIES) == []

    def test_preview_reports_duplicates(self, import_service, fee_file):
        import_service.import_file(fee_file)
        preview = import_service.preview_file(fee_file)
        assert preview.records == ()
        assert len(preview.duplicates) == 3

    def test_unsupported_suffix(self, import_service, tmp_path):
        path = tmp_path / "fees.pdf"
        path.write_bytes(b"%PDF")
        with pytest.raises(UnsupportedSourceFormatError) as exc_info:
            import_service.import_file(path)
        assert exc_info.value.source_format == ".pdf"

    def test_unknown_layout(self, import_service, tmp_path):
        path = tmp_path / "other.csv"
        path.write_text("Foo,Bar\n1,2\n", encoding="utf-8")
        with pytest.raises(UnknownColumnLayoutError):
            import_service.import_file(path)

    def test_probe(self, import_service, fee_file):
        probe = import_service.probe_source(fee_file)
        assert probe.row_count == 3
        assert "Rpt" in probe.columns
