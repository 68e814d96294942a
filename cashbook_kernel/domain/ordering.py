"""
Record Ordering & Balance Calculator.

Responsibility:
    The single total order over cash records and the balance arithmetic that
    reads positions in that order.  Every consumer (pagination, date
    grouping, ledger views, exports) sorts through ``order_records``; none
    re-implements tie-breaks.

Architecture position:
    Kernel > Domain -- pure functions, zero I/O.

Invariants enforced:
    - Order: date ascending, then category priority (known categories in list
      order, unknown categories equal-ranked after all known ones), then
      created_at ascending, then kind, category, amount, reference number,
      notes and id.  Same set in, same order out, whatever the input order,
      saved or not.
    - closing_balance_at(records, n - 1) == total receipts - total payments,
      exactly.  Accumulation is Decimal; nothing is rounded here.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal

from cashbook_kernel.db.types import ZERO
from cashbook_kernel.domain.records import CashRecord, EntryKind

SALARY_CATEGORIES: tuple[str, ...] = (
    "Govt Salary Grants",
    "I Tax",
    "P Tax",
    "Lic",
    "Gslic",
    "Fbf",
    "Govt Salary Account",
    "Receivable Account",
)

FEE_HEADS: tuple[str, ...] = (
    "Adm",
    "Tution",
    "RR",
    "Ass",
    "Sports",
    "Mag",
    "ID",
    "Lib",
    "Lab",
    "DVP",
    "SWF",
    "TWF",
    "NSS",
    "Fine",
)

DEFAULT_CATEGORY_PRIORITY: tuple[str, ...] = SALARY_CATEGORIES + tuple(
    f"{head} Fee" for head in FEE_HEADS
)

# Stands in for a missing created_at so unsaved records sort after saved ones.
_NOT_CREATED = datetime.max.replace(tzinfo=UTC)


class CategoryRanker:
    """Maps a category to its tie-break rank."""

    def __init__(self, priority: Sequence[str] = DEFAULT_CATEGORY_PRIORITY):
        self._ranks = {}
        for position, category in enumerate(priority):
            self._ranks.setdefault(category, position)
        self._unknown = len(self._ranks)

    def rank(self, category: str) -> int:
        return self._ranks.get(category, self._unknown)


def ledger_sort_key(record: CashRecord, ranker: CategoryRanker) -> tuple:
    created_at = record.created_at or _NOT_CREATED
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    return (
        record.date,
        ranker.rank(record.category),
        created_at,
        record.kind.value,
        record.category,
        record.amount,
        record.reference_no or "",
        record.notes or "",
        str(record.id) if record.id is not None else "",
    )


def order_records(
    records: Iterable[CashRecord],
    category_priority: Sequence[str] = DEFAULT_CATEGORY_PRIORITY,
) -> list[CashRecord]:
    """Return a new list in ledger order (oldest first)."""
    ranker = CategoryRanker(category_priority)
    return sorted(records, key=lambda r: ledger_sort_key(r, ranker))


def _check_index(records: Sequence[CashRecord], index: int) -> None:
    if not 0 <= index < len(records):
        raise IndexError(f"Index {index} out of range for {len(records)} records")


def running_balance_at(ordered_records: Sequence[CashRecord], index: int) -> Decimal:
    """
    Signed sum of the records from ``index`` to the end.

    With records listed newest first this is the balance remaining after
    the record at ``index``, the "remaining balance" column of ledger views.
    """
    _check_index(ordered_records, index)
    return sum((r.signed_amount for r in ordered_records[index:]), ZERO)


def closing_balance_at(ordered_records: Sequence[CashRecord], index: int) -> Decimal:
    """Signed sum of the records from the start through ``index`` (oldest first)."""
    _check_index(ordered_records, index)
    return sum((r.signed_amount for r in ordered_records[: index + 1]), ZERO)


def running_balances(
    ordered_records: Sequence[CashRecord],
    carried_in_balance: Decimal = ZERO,
) -> list[Decimal]:
    """Closing balance after each record, in one pass."""
    balances = []
    balance = carried_in_balance
    for record in ordered_records:
        balance += record.signed_amount
        balances.append(balance)
    return balances


def remaining_balances(newest_first: Sequence[CashRecord]) -> list[Decimal]:
    """
    ``running_balance_at`` for every index of a newest-first list, in one
    reverse pass.
    """
    balances = [ZERO] * len(newest_first)
    balance = ZERO
    for index in range(len(newest_first) - 1, -1, -1):
        balance += newest_first[index].signed_amount
        balances[index] = balance
    return balances


def net_balance(records: Iterable[CashRecord]) -> Decimal:
    return sum((r.signed_amount for r in records), ZERO)


@dataclass(frozen=True)
class LedgerTotals:
    """Receipt and payment totals of a record set."""

    receipts: Decimal
    payments: Decimal
    receipt_count: int
    payment_count: int

    @property
    def net(self) -> Decimal:
        return self.receipts - self.payments


def ledger_totals(records: Iterable[CashRecord]) -> LedgerTotals:
    receipts = payments = ZERO
    receipt_count = payment_count = 0
    for record in records:
        if record.kind is EntryKind.RECEIPT:
            receipts += record.amount
            receipt_count += 1
        else:
            payments += record.amount
            payment_count += 1
    return LedgerTotals(receipts, payments, receipt_count, payment_count)
