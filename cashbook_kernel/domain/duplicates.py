"""
Duplicate Detector.

Two unrelated notions of "duplicate":

    submission duplicate  -- same fields as a record created moments ago
                             (double-click protection).  Advisory only:
                             never raises, never blocks.
    import duplicate      -- same date, kind, category and notes as ANY
                             existing record with the amount within a
                             tolerance, regardless of when it was created
                             (re-importing the same file).

Both are evaluated against records already fetched; nothing here queries
the store.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta
from decimal import Decimal

from cashbook_kernel.db.base import ensure_utc
from cashbook_kernel.domain.records import CashRecord

DEFAULT_WINDOW_MS = 5000
DEFAULT_IMPORT_TOLERANCE = Decimal("0.01")


def _optional(value: str | None) -> str | None:
    """Absent and empty compare equal."""
    return value if value else None


def _same_fields(candidate: CashRecord, existing: CashRecord) -> bool:
    return (
        candidate.date == existing.date
        and candidate.kind == existing.kind
        and candidate.amount == existing.amount
        and candidate.category == existing.category
        and _optional(candidate.reference_no) == _optional(existing.reference_no)
        and _optional(candidate.notes) == _optional(existing.notes)
    )


def find_duplicate(
    candidate: CashRecord,
    recent_records: Iterable[CashRecord],
    now: datetime,
    window_ms: int = DEFAULT_WINDOW_MS,
) -> CashRecord | None:
    """
    First record in ``recent_records`` that matches ``candidate`` field for
    field and was created within ``window_ms`` of ``now``.

    Records without a creation timestamp never match.  Amounts compare
    numerically, so 100 and 100.00 are equal.
    """
    window = timedelta(milliseconds=window_ms)
    now = ensure_utc(now)
    for existing in recent_records:
        created_at = ensure_utc(existing.created_at)
        if created_at is None:
            continue
        if abs(now - created_at) > window:
            continue
        if _same_fields(candidate, existing):
            return existing
    return None


def is_duplicate(
    candidate: CashRecord,
    recent_records: Iterable[CashRecord],
    now: datetime,
    window_ms: int = DEFAULT_WINDOW_MS,
) -> bool:
    return find_duplicate(candidate, recent_records, now, window_ms) is not None


def is_import_duplicate(
    candidate: CashRecord,
    existing_records: Iterable[CashRecord],
    tolerance: Decimal = DEFAULT_IMPORT_TOLERANCE,
) -> bool:
    """Time-independent match used to skip rows that were imported before."""
    for existing in existing_records:
        if (
            candidate.date == existing.date
            and candidate.kind == existing.kind
            and candidate.category == existing.category
            and _optional(candidate.notes) == _optional(existing.notes)
            and abs(candidate.amount - existing.amount) < tolerance
        ):
            return True
    return False


def partition_import_duplicates(
    candidates: Iterable[CashRecord],
    existing_records: Iterable[CashRecord],
    tolerance: Decimal = DEFAULT_IMPORT_TOLERANCE,
) -> tuple[list[CashRecord], list[CashRecord]]:
    """
    Split ``candidates`` into (fresh, duplicates).

    Only stored records are compared against; two identical rows inside the
    same batch are both kept.
    """
    existing = list(existing_records)
    fresh, duplicates = [], []
    for candidate in candidates:
        if is_import_duplicate(candidate, existing, tolerance):
            duplicates.append(candidate)
        else:
            fresh.append(candidate)
    return fresh, duplicates
