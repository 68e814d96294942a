"""
Cash book report re-import.

Reads the side-by-side export (Sl No, R.Date, R.Chq, R.Amount, R.Heads,
R.Notes, P.Date, P.Chq, P.Amount, P.Heads, P.Notes) back into records: each
row yields up to one receipt and one payment.  Exporting a cash book and
importing the file reproduces the same totals.

ZERO I/O.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from cashbook_kernel.db.types import to_decimal
from cashbook_kernel.domain.fiscal_year import resolve_fiscal_year
from cashbook_kernel.domain.ledger_dates import parse_import_date
from cashbook_kernel.domain.records import BookSegment, CashRecord, EntryKind
from cashbook_kernel.logging_config import get_logger

logger = get_logger("ingestion.cash_book_rows")

_SIDES: tuple[tuple[str, EntryKind], ...] = (
    ("R", EntryKind.RECEIPT),
    ("P", EntryKind.PAYMENT),
)


def _side_record(
    row: Mapping[str, Any],
    prefix: str,
    kind: EntryKind,
    segment: BookSegment,
) -> CashRecord | None:
    date_text = str(row.get(f"{prefix}.Date") or "").strip()
    amount_text = str(row.get(f"{prefix}.Amount") or "").strip()
    if not date_text or not amount_text:
        return None
    try:
        amount = to_decimal(amount_text)
    except ValueError:
        return None
    if amount <= 0:
        return None
    entry_date = parse_import_date(date_text)
    if entry_date is None:
        return None
    return CashRecord(
        date=entry_date,
        kind=kind,
        amount=amount,
        category=str(row.get(f"{prefix}.Heads") or "").strip(),
        reference_no=str(row.get(f"{prefix}.Chq") or "").strip() or None,
        notes=str(row.get(f"{prefix}.Notes") or "").strip() or None,
        book_segment=segment,
        fiscal_year=resolve_fiscal_year(entry_date),
    )


def parse_cash_book_rows(
    rows: Iterable[Mapping[str, Any]],
    segment: BookSegment = BookSegment.AIDED,
) -> list[CashRecord]:
    """
    Receipts and payments from side-by-side rows, in file order (the
    receipt of a row before its payment).

    A side is read only when its date parses and its amount is positive;
    total rows and blank padding cells fall out naturally.
    """
    records: list[CashRecord] = []
    for row_number, row in enumerate(rows, start=1):
        found = False
        for prefix, kind in _SIDES:
            record = _side_record(row, prefix, kind, segment)
            if record is not None:
                records.append(record)
                found = True
        if not found:
            logger.debug("cash_book_row_empty", extra={"row": row_number})
    logger.info("cash_book_rows_parsed", extra={"record_count": len(records)})
    return records
