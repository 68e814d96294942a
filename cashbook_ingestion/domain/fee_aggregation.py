"""
Fee collection aggregation.

One source row is one student receipt: a date, a receipt number ("Rpt")
and an amount per fee head column.  Rows are folded into one receipt per
(date, head) carrying the summed amount and the receipt-number range.

ZERO I/O.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from cashbook_kernel.db.types import ZERO, to_decimal
from cashbook_kernel.domain.fiscal_year import resolve_fiscal_year
from cashbook_kernel.domain.ledger_dates import parse_import_date
from cashbook_kernel.domain.ordering import FEE_HEADS
from cashbook_kernel.domain.records import BookSegment, CashRecord, EntryKind
from cashbook_kernel.logging_config import get_logger

logger = get_logger("ingestion.fee_aggregation")

DEFAULT_REFERENCE_SENTINEL = "Cash"
DEFAULT_CATEGORY_SUFFIX = " Fee"
DEFAULT_NOTES_PREFIX = "College Fee Collection"


@dataclass
class _FeeGroup:
    entry_date: date
    head: str
    total: Decimal = ZERO
    receipt_numbers: list[int] = field(default_factory=list)


def _positive_amount(value: Any) -> Decimal | None:
    """Strictly positive amount, or None for blank, zero or unparseable cells."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        amount = to_decimal(value)
    except ValueError:
        return None
    return amount if amount > 0 else None


def _receipt_number(value: Any) -> int | None:
    text = str(value or "").strip()
    try:
        return int(text)
    except ValueError:
        return None


def fee_notes(prefix: str, receipt_numbers: Sequence[int]) -> str:
    """"College Fee Collection, Rpt No From: 101 To: 154"."""
    if not receipt_numbers:
        return prefix
    return f"{prefix}, Rpt No From: {min(receipt_numbers)} To: {max(receipt_numbers)}"


def aggregate_fee_rows(
    rows: Iterable[Mapping[str, Any]],
    fee_heads: Sequence[str] = FEE_HEADS,
    segment: BookSegment = BookSegment.AIDED,
    reference_sentinel: str = DEFAULT_REFERENCE_SENTINEL,
    category_suffix: str = DEFAULT_CATEGORY_SUFFIX,
    notes_prefix: str = DEFAULT_NOTES_PREFIX,
) -> list[CashRecord]:
    """
    Fold fee rows into one receipt per (date, head).

    Records come out in the order their (date, head) group was first seen.
    Blank, zero and unparseable amount cells are ignored; rows whose date
    cannot be parsed are skipped and logged.
    """
    groups: dict[tuple[date, str], _FeeGroup] = {}

    for row_number, row in enumerate(rows, start=1):
        entry_date = parse_import_date(row.get("Date"))
        if entry_date is None:
            logger.warning(
                "fee_row_skipped",
                extra={"row": row_number, "reason": "unparseable_date", "value": row.get("Date")},
            )
            continue
        receipt_number = _receipt_number(row.get("Rpt"))

        for head in fee_heads:
            amount = _positive_amount(row.get(head))
            if amount is None:
                continue
            group = groups.setdefault((entry_date, head), _FeeGroup(entry_date, head))
            group.total += amount
            if receipt_number is not None:
                group.receipt_numbers.append(receipt_number)

    records = [
        CashRecord(
            date=group.entry_date,
            kind=EntryKind.RECEIPT,
            amount=group.total,
            category=f"{group.head}{category_suffix}",
            reference_no=reference_sentinel,
            notes=fee_notes(notes_prefix, group.receipt_numbers),
            book_segment=segment,
            fiscal_year=resolve_fiscal_year(group.entry_date),
        )
        for group in groups.values()
    ]
    logger.info(
        "fee_rows_aggregated",
        extra={"group_count": len(records), "total": sum((r.amount for r in records), ZERO)},
    )
    return records
