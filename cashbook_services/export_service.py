"""
CSV rendering of cash book views.

The side-by-side cash book export is the same layout the importer reads
back (CASH_BOOK_REPORT_V1), so export followed by import reproduces the
same records and totals.  Renderers consume the builders' output as is and
never recompute balances.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Sequence

from cashbook_kernel.db.types import format_money
from cashbook_kernel.domain.cash_book import CashBookReport, side_by_side_rows
from cashbook_kernel.domain.ledger_dates import format_ledger_date
from cashbook_kernel.domain.records import CashRecord, EntryKind
from cashbook_kernel.logging_config import get_logger
from cashbook_services.report_service import LedgerSummary

logger = get_logger("services.export_service")

CASH_BOOK_HEADER = (
    "Sl No",
    "R.Date", "R.Chq", "R.Amount", "R.Heads", "R.Notes",
    "P.Date", "P.Chq", "P.Amount", "P.Heads", "P.Notes",
)
TRANSACTIONS_HEADER = ("Date", "Type", "Cheque No", "Amount", "Head of Accounts", "Notes")
LEDGER_SUMMARY_HEADER = ("Type", "Ledger Name", "Transaction Count", "Total Amount")

_KIND_LABELS = {EntryKind.RECEIPT: "Receipt", EntryKind.PAYMENT: "Payment"}


def _side(record: CashRecord | None) -> list[str]:
    if record is None:
        return ["", "", "", "", ""]
    return [
        format_ledger_date(record.date),
        record.reference_no or "",
        format_money(record.amount),
        record.category,
        record.notes or "",
    ]


def _render(header: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def render_cash_book_csv(report: CashBookReport) -> str:
    """Side-by-side cash book: one row per receipt/payment pair of a date."""
    rows = [
        [str(row.sl_no), *_side(row.receipt), *_side(row.payment)]
        for row in side_by_side_rows(report.buckets)
    ]
    logger.debug("cash_book_csv_rendered", extra={"row_count": len(rows)})
    return _render(CASH_BOOK_HEADER, rows)


def render_transactions_csv(records: Iterable[CashRecord]) -> str:
    """Plain list, one row per record, in the order given."""
    rows = [
        [
            format_ledger_date(r.date),
            _KIND_LABELS[r.kind],
            r.reference_no or "",
            format_money(r.amount),
            r.category,
            r.notes or "",
        ]
        for r in records
    ]
    return _render(TRANSACTIONS_HEADER, rows)


def render_ledger_summary_csv(summaries: Iterable[LedgerSummary]) -> str:
    """Type, head, count and total per ledger."""
    rows = [
        [_KIND_LABELS[s.kind], s.category, str(s.count), format_money(s.total)]
        for s in summaries
    ]
    return _render(LEDGER_SUMMARY_HEADER, rows)


def export_file_name(prefix: str, fiscal_year: str | None) -> str:
    """"Cash_Book_Report_25-26.csv"; non-alphanumerics in the prefix become "_"."""
    safe = "".join(ch if ch.isalnum() else "_" for ch in prefix)
    return f"{safe}_{fiscal_year or 'All'}.csv"
