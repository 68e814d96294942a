"""
Salary deduction aggregation.

One source row is one employee's salary line for a month.  Rows are
grouped by (Month, Year) and each month becomes a fixed sequence of
receipts and payments:

    receipt  Govt Salary Grants    gross salary            (Grant)
    receipt  I Tax                 income tax deducted     (Deduction)
    receipt  P Tax                 professional tax        (Deduction)
    receipt  Lic                   LIC premium             (Deduction)
    receipt  Gslic                 GSLIC premium           (Deduction)
    receipt  Fbf                   FBF contribution        (Deduction)
    payment  Govt Salary Account   gross salary            (Salary)
    payment  Receivable Account    total deductions        (Deduction)

The order is part of the contract: reports list same-bucket entries in
insertion order.  Lines whose total is not positive are left out.

ZERO I/O.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from cashbook_kernel.db.types import ZERO, to_decimal
from cashbook_kernel.domain.fiscal_year import resolve_fiscal_year
from cashbook_kernel.domain.ledger_dates import parse_import_date
from cashbook_kernel.domain.records import BookSegment, CashRecord, EntryKind
from cashbook_kernel.logging_config import get_logger

logger = get_logger("ingestion.salary_aggregation")

# Source column -> MonthlySalarySummary attribute
_TOTAL_COLUMNS: dict[str, str] = {
    "Gross_Salary": "gross_salary",
    "IT_Deduction": "it_deduction",
    "PT_Deduction": "pt_deduction",
    "GSLIC_Deduction": "gslic_deduction",
    "LIC_Deduction": "lic_deduction",
    "FBF_Deduction": "fbf_deduction",
    "Total_Deductions": "total_deductions",
}


@dataclass(frozen=True)
class SalaryLine:
    """One emitted line of the monthly sequence."""

    kind: EntryKind
    category: str
    total_field: str
    reference_no: str
    notes_template: str


SALARY_LINES: tuple[SalaryLine, ...] = (
    SalaryLine(EntryKind.RECEIPT, "Govt Salary Grants", "gross_salary", "Grant",
               "Received Staff Salary Grants For The Month Of {month} {year}"),
    SalaryLine(EntryKind.RECEIPT, "I Tax", "it_deduction", "Deduction",
               "Staff I Tax Deduction For The Month Of {month} {year}"),
    SalaryLine(EntryKind.RECEIPT, "P Tax", "pt_deduction", "Deduction",
               "Staff P Tax Deduction For The Month Of {month} {year}"),
    SalaryLine(EntryKind.RECEIPT, "Lic", "lic_deduction", "Deduction",
               "Staff Lic Deduction For The Month Of {month} {year}"),
    SalaryLine(EntryKind.RECEIPT, "Gslic", "gslic_deduction", "Deduction",
               "Staff Gslic Deduction For The Month Of {month} {year}"),
    SalaryLine(EntryKind.RECEIPT, "Fbf", "fbf_deduction", "Deduction",
               "Staff Fbf Deduction For The Month Of {month} {year}"),
    SalaryLine(EntryKind.PAYMENT, "Govt Salary Account", "gross_salary", "Salary",
               "Disbursed Staff Salary For The Month Of {month} {year}"),
    SalaryLine(EntryKind.PAYMENT, "Receivable Account", "total_deductions", "Deduction",
               "Staff Salary Deductions Receivable For The Month Of {month} {year}"),
)


@dataclass(frozen=True)
class MonthlySalarySummary:
    """Totals for one (month, year) group."""

    month: str
    year: str
    date_text: str
    entry_date: date | None
    employee_count: int
    gross_salary: Decimal
    it_deduction: Decimal
    pt_deduction: Decimal
    gslic_deduction: Decimal
    lic_deduction: Decimal
    fbf_deduction: Decimal
    total_deductions: Decimal


@dataclass(frozen=True)
class SalaryAggregation:
    records: tuple[CashRecord, ...]
    summary: tuple[MonthlySalarySummary, ...]


def _number(value: Any) -> Decimal:
    """Blank or unparseable cells count as zero."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return ZERO
    try:
        return to_decimal(value)
    except ValueError:
        return ZERO


def aggregate_salary_rows(
    rows: Iterable[Mapping[str, Any]],
    segment: BookSegment = BookSegment.AIDED,
) -> SalaryAggregation:
    """
    Group salary rows by (Month, Year) and emit the monthly sequence.

    A month takes the date of its first row.  Rows missing Date, Month or
    Year are skipped.  A month whose date cannot be parsed still appears in
    the summary but produces no records.
    """
    months: dict[tuple[str, str], dict[str, Any]] = {}

    for row_number, row in enumerate(rows, start=1):
        date_text = str(row.get("Date") or "").strip()
        month = str(row.get("Month") or "").strip()
        year = str(row.get("Year") or "").strip()
        if not (date_text and month and year):
            logger.debug("salary_row_skipped", extra={"row": row_number, "reason": "missing_period"})
            continue

        group = months.setdefault(
            (month, year),
            {"date_text": date_text, "employee_count": 0, **{f: ZERO for f in _TOTAL_COLUMNS.values()}},
        )
        for column, total_field in _TOTAL_COLUMNS.items():
            group[total_field] += _number(row.get(column))
        group["employee_count"] += 1

    records: list[CashRecord] = []
    summaries: list[MonthlySalarySummary] = []
    for (month, year), group in months.items():
        entry_date = parse_import_date(group["date_text"])
        summaries.append(
            MonthlySalarySummary(
                month=month,
                year=year,
                date_text=group["date_text"],
                entry_date=entry_date,
                employee_count=group["employee_count"],
                **{f: group[f] for f in _TOTAL_COLUMNS.values()},
            )
        )
        if entry_date is None:
            logger.warning(
                "salary_month_skipped",
                extra={"month": month, "year": year, "reason": "unparseable_date", "value": group["date_text"]},
            )
            continue

        for line in SALARY_LINES:
            amount = group[line.total_field]
            if amount <= 0:
                continue
            records.append(
                CashRecord(
                    date=entry_date,
                    kind=line.kind,
                    amount=amount,
                    category=line.category,
                    reference_no=line.reference_no,
                    notes=line.notes_template.format(month=month, year=year),
                    book_segment=segment,
                    fiscal_year=resolve_fiscal_year(entry_date),
                )
            )

    logger.info(
        "salary_rows_aggregated",
        extra={"month_count": len(summaries), "record_count": len(records)},
    )
    return SalaryAggregation(records=tuple(records), summary=tuple(summaries))
