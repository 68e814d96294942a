"""Pure ingestion logic: column layouts and the row aggregators."""

from cashbook_ingestion.domain.cash_book_rows import parse_cash_book_rows
from cashbook_ingestion.domain.fee_aggregation import aggregate_fee_rows
from cashbook_ingestion.domain.layouts import (
    CASH_BOOK_REPORT_V1,
    FEE_COLLECTION_V1,
    LAYOUTS,
    SALARY_DEDUCTION_V1,
    ColumnLayout,
    LayoutKind,
    detect_layout,
)
from cashbook_ingestion.domain.salary_aggregation import (
    MonthlySalarySummary,
    SalaryAggregation,
    aggregate_salary_rows,
)

__all__ = [
    "CASH_BOOK_REPORT_V1",
    "FEE_COLLECTION_V1",
    "LAYOUTS",
    "SALARY_DEDUCTION_V1",
    "ColumnLayout",
    "LayoutKind",
    "MonthlySalarySummary",
    "SalaryAggregation",
    "aggregate_fee_rows",
    "aggregate_salary_rows",
    "detect_layout",
    "parse_cash_book_rows",
]
