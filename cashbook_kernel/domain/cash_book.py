"""
Date-Bucketed Report Builder.

Responsibility:
    Groups ledger-ordered records by calendar date and computes each date's
    opening balance, receipt and payment totals and closing balance.  The
    side-by-side and list shapes are views over the same buckets; exporters
    render them verbatim and never recompute a balance.

Architecture position:
    Kernel > Domain -- pure functions, zero I/O.  Callers order records with
    ``order_records`` first.

Invariants enforced:
    - Buckets are emitted in ascending date order; within a bucket receipts
      and payments keep their ledger order.
    - First bucket opening == carried_in_balance; every later opening ==
      previous closing.
    - closing == opening + receipts of the date - payments of the date.
    - Pagination: building page 2 with carried_in_balance equal to the
      closing balance of everything before it yields the same closing
      balances as building the whole set once.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from cashbook_kernel.db.types import ZERO
from cashbook_kernel.domain.records import CashRecord, EntryKind

OPENING_BALANCE_LABEL = "By Opening Balance"


@dataclass(frozen=True)
class DateBucket:
    """One date of the cash book."""

    date: date
    receipts: tuple[CashRecord, ...]
    payments: tuple[CashRecord, ...]
    opening_balance: Decimal
    total_receipts: Decimal
    total_payments: Decimal
    closing_balance: Decimal
    opening_folded: bool = False

    @property
    def displayed_receipts_total(self) -> Decimal:
        """
        Receipts total as printed on the "Total" row.

        The folded (first) bucket adds its opening balance so the receipt
        side balances against payments plus closing balance.
        """
        if self.opening_folded:
            return self.total_receipts + self.opening_balance
        return self.total_receipts

    @property
    def shows_opening_line(self) -> bool:
        """Unfolded buckets print a separate "By Opening Balance" line."""
        return not self.opening_folded

    @property
    def row_count(self) -> int:
        return max(len(self.receipts), len(self.payments))


@dataclass(frozen=True)
class CashBookReport:
    """Buckets for one view plus the balance carried into it."""

    buckets: tuple[DateBucket, ...]
    carried_in_balance: Decimal = ZERO

    @property
    def closing_balance(self) -> Decimal:
        if not self.buckets:
            return self.carried_in_balance
        return self.buckets[-1].closing_balance

    @property
    def total_receipts(self) -> Decimal:
        return sum((b.total_receipts for b in self.buckets), ZERO)

    @property
    def total_payments(self) -> Decimal:
        return sum((b.total_payments for b in self.buckets), ZERO)

    @property
    def is_empty(self) -> bool:
        return not self.buckets


def build_date_buckets(
    ordered_records: Sequence[CashRecord],
    carried_in_balance: Decimal = ZERO,
    fold_opening_balance: bool = True,
) -> list[DateBucket]:
    """
    Group ``ordered_records`` by date.

    Args:
        ordered_records: Records already in ledger order.
        carried_in_balance: Balance of the records excluded from this view
            and preceding it (a prior page, or the entries before a search
            window).
        fold_opening_balance: Mark the first bucket as folding its opening
            balance into the displayed receipts total.
    """
    grouped: dict[date, tuple[list[CashRecord], list[CashRecord]]] = {}
    for record in ordered_records:
        receipts, payments = grouped.setdefault(record.date, ([], []))
        if record.kind is EntryKind.RECEIPT:
            receipts.append(record)
        else:
            payments.append(record)

    buckets = []
    opening = carried_in_balance
    for position, bucket_date in enumerate(sorted(grouped)):
        receipts, payments = grouped[bucket_date]
        total_receipts = sum((r.amount for r in receipts), ZERO)
        total_payments = sum((p.amount for p in payments), ZERO)
        closing = opening + total_receipts - total_payments
        buckets.append(
            DateBucket(
                date=bucket_date,
                receipts=tuple(receipts),
                payments=tuple(payments),
                opening_balance=opening,
                total_receipts=total_receipts,
                total_payments=total_payments,
                closing_balance=closing,
                opening_folded=fold_opening_balance and position == 0,
            )
        )
        opening = closing
    return buckets


def build_cash_book(
    ordered_records: Sequence[CashRecord],
    carried_in_balance: Decimal = ZERO,
    fold_opening_balance: bool = True,
) -> CashBookReport:
    buckets = build_date_buckets(ordered_records, carried_in_balance, fold_opening_balance)
    return CashBookReport(buckets=tuple(buckets), carried_in_balance=carried_in_balance)


# Views


@dataclass(frozen=True)
class SideBySideRow:
    """Receipt and payment at the same row index of a date; either may be absent."""

    sl_no: int
    date: date
    receipt: CashRecord | None
    payment: CashRecord | None


@dataclass(frozen=True)
class ListRow:
    """One record with the balance after it."""

    record: CashRecord
    balance: Decimal


def side_by_side_rows(buckets: Sequence[DateBucket]) -> Iterator[SideBySideRow]:
    """Dense shape.  Serial numbers run across the whole report."""
    sl_no = 1
    for bucket in buckets:
        for i in range(bucket.row_count):
            yield SideBySideRow(
                sl_no=sl_no,
                date=bucket.date,
                receipt=bucket.receipts[i] if i < len(bucket.receipts) else None,
                payment=bucket.payments[i] if i < len(bucket.payments) else None,
            )
            sl_no += 1


def list_rows(buckets: Sequence[DateBucket]) -> Iterator[ListRow]:
    """
    Plain chronological shape.

    Within a date receipts come before payments, matching the order in
    which the bucket totals accumulate.
    """
    for bucket in buckets:
        balance = bucket.opening_balance
        for record in bucket.receipts + bucket.payments:
            balance += record.signed_amount
            yield ListRow(record=record, balance=balance)
