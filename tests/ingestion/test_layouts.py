"""Tests for column layout detection."""

import pytest

from cashbook_ingestion.domain.layouts import (
    CASH_BOOK_REPORT_V1,
    FEE_COLLECTION_V1,
    SALARY_DEDUCTION_V1,
    detect_layout,
    header_keywords,
)
from cashbook_kernel.exceptions import UnknownColumnLayoutError


class TestDetectLayout:
    def test_fee_sheet(self):
        assert detect_layout(["Sl No", "Student Name", "Date", "Rpt", "Adm"]) is FEE_COLLECTION_V1

    def test_salary_sheet_wins_over_partial_matches(self):
        assert detect_layout(SALARY_DEDUCTION_V1.columns) is SALARY_DEDUCTION_V1

    def test_cash_book_export(self):
        assert detect_layout(CASH_BOOK_REPORT_V1.columns) is CASH_BOOK_REPORT_V1

    def test_header_whitespace_ignored(self):
        assert detect_layout([" Date ", "Rpt "]) is FEE_COLLECTION_V1

    def test_unknown_layout(self):
        with pytest.raises(UnknownColumnLayoutError) as exc_info:
            detect_layout(["Foo", "Bar"])
        assert exc_info.value.code == "UNKNOWN_COLUMN_LAYOUT"
        assert exc_info.value.columns == ("Foo", "Bar")

    def test_missing_columns(self):
        assert SALARY_DEDUCTION_V1.missing(["Date", "Month"]) == ("Year", "Gross_Salary")


def test_header_keywords_are_lower_case():
    keywords = header_keywords()
    assert "gross_salary" in keywords
    assert "r.amount" in keywords
    assert "Rpt" not in keywords
