"""Tests for the monthly salary sequence."""

from datetime import date
from decimal import Decimal

from cashbook_ingestion.domain.salary_aggregation import aggregate_salary_rows
from cashbook_kernel.domain.records import EntryKind


def salary_row(**overrides) -> dict[str, str]:
    row = {
        "Date": "31-05-25",
        "Month": "May",
        "Year": "2025",
        "Gross_Salary": "50000",
        "IT_Deduction": "1000",
        "PT_Deduction": "200",
        "GSLIC_Deduction": "300",
        "LIC_Deduction": "400",
        "FBF_Deduction": "50",
        "Total_Deductions": "1950",
    }
    row.update(overrides)
    return row


class TestAggregateSalaryRows:
    def test_fixed_emission_order(self):
        result = aggregate_salary_rows([salary_row(), salary_row()])

        assert [(r.kind, r.category) for r in result.records] == [
            (EntryKind.RECEIPT, "Govt Salary Grants"),
            (EntryKind.RECEIPT, "I Tax"),
            (EntryKind.RECEIPT, "P Tax"),
            (EntryKind.RECEIPT, "Lic"),
            (EntryKind.RECEIPT, "Gslic"),
            (EntryKind.RECEIPT, "Fbf"),
            (EntryKind.PAYMENT, "Govt Salary Account"),
            (EntryKind.PAYMENT, "Receivable Account"),
        ]

    def test_totals_summed_per_month(self):
        result = aggregate_salary_rows([salary_row(), salary_row(Gross_Salary="25000")])
        by_category = {r.category: r for r in result.records}

        assert by_category["Govt Salary Grants"].amount == Decimal("75000")
        assert by_category["Govt Salary Account"].amount == Decimal("75000")
        assert by_category["Receivable Account"].amount == Decimal("3900")
        assert by_category["Govt Salary Grants"].reference_no == "Grant"
        assert by_category["I Tax"].reference_no == "Deduction"
        assert by_category["Govt Salary Account"].reference_no == "Salary"
        assert by_category["I Tax"].notes == "Staff I Tax Deduction For The Month Of May 2025"
        assert all(r.date == date(2025, 5, 31) for r in result.records)
        assert all(r.fiscal_year == "25-26" for r in result.records)

    def test_non_positive_lines_omitted(self):
        result = aggregate_salary_rows([salary_row(FBF_Deduction="0", LIC_Deduction="")])
        categories = [r.category for r in result.records]
        assert "Fbf" not in categories
        assert "Lic" not in categories
        assert len(categories) == 6

    def test_months_grouped_separately(self):
        result = aggregate_salary_rows(
            [salary_row(), salary_row(Date="30-06-25", Month="June"), salary_row()]
        )
        assert [(s.month, s.employee_count) for s in result.summary] == [("May", 2), ("June", 1)]
        assert len(result.records) == 16

    def test_summary_totals(self):
        (summary,) = aggregate_salary_rows([salary_row(), salary_row()]).summary
        assert summary.gross_salary == Decimal("100000")
        assert summary.total_deductions == Decimal("3900")
        assert summary.entry_date == date(2025, 5, 31)

    def test_rows_without_period_skipped(self):
        result = aggregate_salary_rows([salary_row(Month=""), salary_row(Date="")])
        assert result.records == ()
        assert result.summary == ()

    def test_unparseable_month_date_in_summary_only(self, captured_logs):
        result = aggregate_salary_rows([salary_row(Date="sometime")])
        assert result.records == ()
        assert result.summary[0].entry_date is None
        assert any(r["message"] == "salary_month_skipped" for r in captured_logs())
