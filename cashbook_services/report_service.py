"""
CashBookReportService -- read-only cash book, ledger and dashboard views.

Responsibility:
    Loads records through a (cached) RecordStore, puts them in ledger order
    and hands them to the pure builders in ``cashbook_kernel.domain``:
    date buckets for the cash book, per-head totals for the ledger list,
    newest-first running balances for a single ledger, and the dashboard
    counters.

Architecture position:
    Services -- read side.  No writes, no ORM; every balance is computed
    by the kernel domain functions.

Invariants enforced:
    - A page of the cash book opens with the net balance of every record
      ordered before it, so page-by-page rendering reproduces the unsplit
      book.
    - A search-filtered cash book opens with the net balance of the
      records ordered before its first match.
    - All monetary amounts are Decimal.

Failure modes:
    - ValueError for page < 1 or page_size < 1.
    - Store errors propagate unchanged.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from typing import Any

from cashbook_kernel.db.types import ZERO, format_money
from cashbook_kernel.domain.cash_book import CashBookReport, build_cash_book
from cashbook_kernel.domain.clock import Clock, SystemClock
from cashbook_kernel.domain.fiscal_year import fiscal_year_options
from cashbook_kernel.domain.ledger_dates import format_ledger_date
from cashbook_kernel.domain.ordering import (
    DEFAULT_CATEGORY_PRIORITY,
    LedgerTotals,
    ledger_totals,
    net_balance,
    order_records,
    remaining_balances,
)
from cashbook_kernel.domain.records import CashRecord, EntryKind
from cashbook_kernel.logging_config import get_logger
from cashbook_kernel.services.record_store import ALL_ENTRIES, EntryFilter, RecordStore

logger = get_logger("services.report_service")

DEFAULT_PAGE_SIZE = 50
RECENT_ENTRY_COUNT = 5


def matches_search(record: CashRecord, search: str) -> bool:
    """
    Case-insensitive substring match on head, notes and cheque number, and
    a plain substring match on the dd/mm/yy date and the amount.
    """
    needle = search.strip()
    if not needle:
        return True
    lowered = needle.lower()
    return (
        lowered in record.category.lower()
        or lowered in (record.notes or "").lower()
        or lowered in (record.reference_no or "").lower()
        or needle in format_ledger_date(record.date)
        or needle in format_money(record.amount)
    )


@dataclass(frozen=True)
class CashBookPage:
    """One page of the cash book."""

    report: CashBookReport
    page: int
    page_size: int
    total_records: int

    @property
    def page_count(self) -> int:
        return max(1, -(-self.total_records // self.page_size))

    @property
    def has_next(self) -> bool:
        return self.page < self.page_count

    @property
    def has_previous(self) -> bool:
        return self.page > 1


@dataclass(frozen=True)
class LedgerSummary:
    """Totals of one head of account on one side of the book."""

    category: str
    kind: EntryKind
    total: Decimal
    count: int


@dataclass(frozen=True)
class LedgerLine:
    """One ledger row: the record and the balance remaining after it."""

    record: CashRecord
    remaining_balance: Decimal


@dataclass(frozen=True)
class LedgerDetail:
    category: str
    kind: EntryKind | None
    lines: tuple[LedgerLine, ...]
    total: Decimal

    @property
    def count(self) -> int:
        return len(self.lines)


@dataclass(frozen=True)
class DashboardSummary:
    """Counters shown on the landing page."""

    totals: LedgerTotals
    receipt_ledger_count: int
    payment_ledger_count: int
    today_entries: int
    this_week_entries: int
    this_month_entries: int
    recent_entries: tuple[CashRecord, ...] = field(default_factory=tuple)

    @property
    def closing_balance(self) -> Decimal:
        return self.totals.net


class CashBookReportService:
    """
    Read-side report orchestration.

    Contract:
        Every method takes an ``EntryFilter`` (fiscal year, segment, ...)
        and returns a frozen report DTO.  Nothing is written.
    """

    def __init__(
        self,
        store: RecordStore,
        clock: Clock | None = None,
        category_priority: Sequence[str] = DEFAULT_CATEGORY_PRIORITY,
        fold_opening_balance: bool = True,
        page_size: int = DEFAULT_PAGE_SIZE,
        fiscal_years_back: int = 5,
        fiscal_years_forward: int = 2,
    ):
        self._store = store
        self._clock = clock or SystemClock()
        self._category_priority = tuple(category_priority)
        self._fold_opening_balance = fold_opening_balance
        self._page_size = page_size
        self._fiscal_years_back = fiscal_years_back
        self._fiscal_years_forward = fiscal_years_forward

    @classmethod
    def from_settings(cls, store: RecordStore, settings: Any, clock: Clock | None = None) -> CashBookReportService:
        """Build from a ``CashbookSettings``."""
        return cls(
            store,
            clock,
            category_priority=settings.category_priority,
            page_size=settings.page_size,
            fiscal_years_back=settings.fiscal_years_back,
            fiscal_years_forward=settings.fiscal_years_forward,
        )

    @property
    def page_size(self) -> int:
        return self._page_size

    def fiscal_year_options(self) -> list[str]:
        """Selectable fiscal year labels around the current one, oldest first."""
        return fiscal_year_options(self._clock, self._fiscal_years_back, self._fiscal_years_forward)

    def _ordered(self, entry_filter: EntryFilter) -> list[CashRecord]:
        return order_records(self._store.query(entry_filter), self._category_priority)

    # =========================================================================
    # Cash book
    # =========================================================================

    def cash_book(
        self,
        entry_filter: EntryFilter = ALL_ENTRIES,
        page: int | None = None,
        page_size: int | None = None,
    ) -> CashBookPage:
        """
        Date-bucketed cash book, whole or one page of records.

        ``page`` is 1-based; None renders every record on one page.
        ``page_size`` defaults to the configured page size.
        """
        ordered = self._ordered(entry_filter)
        if page_size is None:
            page_size = self._page_size
        if page is None:
            window, carried_in = ordered, ZERO
            page, page_size = 1, max(len(ordered), 1)
        else:
            if page < 1 or page_size < 1:
                raise ValueError(f"Invalid page {page} / page_size {page_size}")
            start = (page - 1) * page_size
            window = ordered[start : start + page_size]
            carried_in = net_balance(ordered[:start])

        report = build_cash_book(window, carried_in, self._fold_opening_balance)
        logger.info(
            "cash_book_built",
            extra={
                "fiscal_year": entry_filter.fiscal_year,
                "page": page,
                "record_count": len(window),
                "bucket_count": len(report.buckets),
                "carried_in_balance": str(carried_in),
            },
        )
        return CashBookPage(report=report, page=page, page_size=page_size, total_records=len(ordered))

    def filtered_cash_book(
        self,
        entry_filter: EntryFilter = ALL_ENTRIES,
        search: str = "",
        kind: EntryKind | None = None,
    ) -> CashBookReport:
        """
        Cash book of the records matching ``search`` and ``kind``.

        The first bucket opens with the net balance of every record ordered
        before the first match; records between matches are not counted.
        """
        ordered = self._ordered(entry_filter)
        first_match = None
        matches: list[CashRecord] = []
        for position, record in enumerate(ordered):
            if kind is not None and record.kind is not EntryKind(kind):
                continue
            if not matches_search(record, search):
                continue
            if first_match is None:
                first_match = position
            matches.append(record)

        carried_in = net_balance(ordered[:first_match]) if first_match is not None else ZERO
        logger.debug(
            "filtered_cash_book_built",
            extra={"search": search, "match_count": len(matches), "carried_in_balance": str(carried_in)},
        )
        return build_cash_book(matches, carried_in, self._fold_opening_balance)

    def transactions(
        self,
        entry_filter: EntryFilter = ALL_ENTRIES,
        search: str = "",
        kind: EntryKind | None = None,
    ) -> list[LedgerLine]:
        """Newest-first transaction list with the balance remaining after each row."""
        newest_first = [
            r
            for r in reversed(self._ordered(entry_filter))
            if (kind is None or r.kind is EntryKind(kind)) and matches_search(r, search)
        ]
        return [
            LedgerLine(record, balance)
            for record, balance in zip(newest_first, remaining_balances(newest_first))
        ]

    # =========================================================================
    # Ledgers
    # =========================================================================

    def ledger_summaries(
        self,
        entry_filter: EntryFilter = ALL_ENTRIES,
        search: str = "",
    ) -> list[LedgerSummary]:
        """Per (kind, head) totals sorted by head name; ``search`` filters on the head."""
        totals: dict[tuple[EntryKind, str], tuple[Decimal, int]] = {}
        for record in self._store.query(entry_filter):
            key = (record.kind, record.category)
            total, count = totals.get(key, (ZERO, 0))
            totals[key] = (total + record.amount, count + 1)

        needle = search.strip().lower()
        summaries = [
            LedgerSummary(category=category, kind=kind, total=total, count=count)
            for (kind, category), (total, count) in totals.items()
            if needle in category.lower()
        ]
        summaries.sort(key=lambda s: (s.category.lower(), s.kind.value))
        return summaries

    def ledger_detail(
        self,
        category: str,
        kind: EntryKind | None = None,
        entry_filter: EntryFilter = ALL_ENTRIES,
    ) -> LedgerDetail:
        """
        Every record of one head, newest first, with the remaining balance.

        With ``kind`` None both sides of the head are listed together.
        """
        narrowed = entry_filter.narrow(category=category, kind=kind)
        newest_first = list(reversed(self._ordered(narrowed)))
        lines = tuple(
            LedgerLine(record, balance)
            for record, balance in zip(newest_first, remaining_balances(newest_first))
        )
        return LedgerDetail(
            category=category,
            kind=kind,
            lines=lines,
            total=sum((r.amount for r in newest_first), ZERO),
        )

    # =========================================================================
    # Dashboard
    # =========================================================================

    def dashboard_summary(self, entry_filter: EntryFilter = ALL_ENTRIES) -> DashboardSummary:
        records = self._store.query(entry_filter)
        today = self._clock.now().date()
        week_start = today - timedelta(days=today.weekday())

        receipt_heads = {r.category for r in records if r.kind is EntryKind.RECEIPT}
        payment_heads = {r.category for r in records if r.kind is EntryKind.PAYMENT}
        summary = DashboardSummary(
            totals=ledger_totals(records),
            receipt_ledger_count=len(receipt_heads),
            payment_ledger_count=len(payment_heads),
            today_entries=sum(1 for r in records if r.date == today),
            this_week_entries=sum(1 for r in records if week_start <= r.date <= today),
            this_month_entries=sum(
                1 for r in records if (r.date.year, r.date.month) == (today.year, today.month)
            ),
            recent_entries=tuple(self._store.recent(entry_filter, RECENT_ENTRY_COUNT)),
        )
        logger.info(
            "dashboard_summary_built",
            extra={
                "fiscal_year": entry_filter.fiscal_year,
                "receipt_count": summary.totals.receipt_count,
                "payment_count": summary.totals.payment_count,
                "closing_balance": str(summary.closing_balance),
            },
        )
        return summary

    def search(self, entry_filter: EntryFilter, search: str) -> list[CashRecord]:
        """Matching records, newest first.  A blank search matches nothing."""
        if not search.strip():
            return []
        return [r for r in reversed(self._ordered(entry_filter)) if matches_search(r, search)]
