"""
Pure domain layer.

Fiscal years, ledger ordering, balances, date buckets, duplicate detection
and draft validation.  Nothing here touches the database or the wall clock;
"now" arrives through a Clock.
"""

from cashbook_kernel.domain.cash_book import (
    CashBookReport,
    DateBucket,
    ListRow,
    SideBySideRow,
    build_cash_book,
    build_date_buckets,
    list_rows,
    side_by_side_rows,
)
from cashbook_kernel.domain.clock import Clock, FixedClock, SystemClock
from cashbook_kernel.domain.dtos import ValidationError
from cashbook_kernel.domain.duplicates import (
    find_duplicate,
    is_duplicate,
    is_import_duplicate,
    partition_import_duplicates,
)
from cashbook_kernel.domain.fiscal_year import (
    current_fiscal_year,
    describe_fiscal_year,
    fiscal_year_date_range,
    fiscal_year_display,
    fiscal_year_options,
    resolve_fiscal_year,
)
from cashbook_kernel.domain.ledger_dates import (
    format_ledger_date,
    parse_import_date,
    parse_ledger_date,
)
from cashbook_kernel.domain.ordering import (
    DEFAULT_CATEGORY_PRIORITY,
    LedgerTotals,
    closing_balance_at,
    ledger_totals,
    order_records,
    remaining_balances,
    running_balance_at,
    running_balances,
)
from cashbook_kernel.domain.records import (
    BookSegment,
    CashRecord,
    EntryDraft,
    EntryKind,
    SegmentSelector,
    segment_filter,
    storage_segment,
)
from cashbook_kernel.domain.validation import draft_to_record, validate_draft

__all__ = [
    "BookSegment",
    "CashBookReport",
    "CashRecord",
    "Clock",
    "DEFAULT_CATEGORY_PRIORITY",
    "DateBucket",
    "EntryDraft",
    "EntryKind",
    "FixedClock",
    "LedgerTotals",
    "ListRow",
    "SegmentSelector",
    "SideBySideRow",
    "SystemClock",
    "ValidationError",
    "build_cash_book",
    "build_date_buckets",
    "closing_balance_at",
    "current_fiscal_year",
    "describe_fiscal_year",
    "draft_to_record",
    "find_duplicate",
    "fiscal_year_date_range",
    "fiscal_year_display",
    "fiscal_year_options",
    "format_ledger_date",
    "is_duplicate",
    "is_import_duplicate",
    "ledger_totals",
    "list_rows",
    "order_records",
    "parse_import_date",
    "parse_ledger_date",
    "partition_import_duplicates",
    "remaining_balances",
    "resolve_fiscal_year",
    "running_balance_at",
    "running_balances",
    "segment_filter",
    "side_by_side_rows",
    "storage_segment",
    "validate_draft",
]
