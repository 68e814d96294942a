"""
Records -- the canonical cash book unit and its enums.

Responsibility:
    CashRecord is the immutable, fully-validated representation of one
    receipt or payment.  EntryDraft is the loose shape accepted from forms and
    importers before validation.  Book segments are modelled as a two-variant
    storage enum plus a three-way selector used by callers.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  The ORM model converts to and from
    CashRecord at the persistence boundary.

Invariants enforced:
    - amount is a Decimal; signed_amount is +amount for receipts and -amount
      for payments.
    - fiscal_year is stamped from date by the validation layer; records built
      elsewhere carry whatever the store returned.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from cashbook_kernel.domain.ledger_dates import format_ledger_date


class EntryKind(str, Enum):
    """Direction of a cash movement."""

    RECEIPT = "receipt"
    PAYMENT = "payment"


class BookSegment(str, Enum):
    """Storage partition tag for the two independently reportable sub-ledgers."""

    AIDED = "aided"
    UNAIDED = "unaided"


class SegmentSelector(str, Enum):
    """Caller-facing segment choice.  BOTH is never stored."""

    AIDED = "aided"
    UNAIDED = "unaided"
    BOTH = "both"


def _as_selector(value: SegmentSelector | BookSegment | str) -> SegmentSelector:
    """Raises ValueError for an unknown segment name."""
    if isinstance(value, SegmentSelector):
        return value
    if isinstance(value, BookSegment):
        return SegmentSelector(value.value)
    return SegmentSelector(str(value).strip().lower())


def storage_segment(
    selector: SegmentSelector | BookSegment | str | None,
    default: BookSegment = BookSegment.AIDED,
) -> BookSegment:
    """
    Segment to write a new record into.

    BOTH and "not given" collapse to ``default``.
    """
    if selector is None:
        return default
    selector = _as_selector(selector)
    if selector is SegmentSelector.BOTH:
        return default
    return BookSegment(selector.value)


def segment_filter(selector: SegmentSelector | BookSegment | str | None) -> BookSegment | None:
    """Segment restriction for reads.  None means every segment."""
    if selector is None:
        return None
    selector = _as_selector(selector)
    if selector is SegmentSelector.BOTH:
        return None
    return BookSegment(selector.value)


@dataclass(frozen=True)
class CashRecord:
    """
    One receipt or payment.

    ``id``, ``created_at`` and ``updated_at`` are None until the record store
    assigns them.
    """

    date: date
    kind: EntryKind
    amount: Decimal
    category: str
    reference_no: str | None = None
    notes: str | None = None
    book_segment: BookSegment = BookSegment.AIDED
    fiscal_year: str | None = None
    id: UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_receipt(self) -> bool:
        return self.kind is EntryKind.RECEIPT

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.is_receipt else -self.amount

    def with_changes(self, **changes: Any) -> CashRecord:
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id) if self.id else None,
            "date": format_ledger_date(self.date),
            "type": self.kind.value,
            "cheque_no": self.reference_no,
            "amount": str(self.amount),
            "head_of_accounts": self.category,
            "notes": self.notes,
            "cb_type": self.book_segment.value,
            "financial_year": self.fiscal_year,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class EntryDraft:
    """
    Unvalidated entry as received from a form, an API body or an importer.

    Every field is optional and loosely typed; ``validate_draft`` decides
    what is acceptable.  ``extra`` keeps any source columns the caller wants
    echoed back in error reports.
    """

    date: date | str | None = None
    kind: EntryKind | str | None = None
    amount: Decimal | int | float | str | None = None
    category: str | None = None
    reference_no: str | None = None
    notes: str | None = None
    book_segment: SegmentSelector | BookSegment | str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> EntryDraft:
        """
        Build a draft from a wire-shaped dict.

        Recognises both the field names used here and the column names of
        the transactions API (``type``, ``cheque_no``, ``head_of_accounts``,
        ``cb_type``).
        """

        def pick(*keys: str) -> Any:
            for key in keys:
                if key in data and data[key] is not None:
                    return data[key]
            return None

        return cls(
            date=pick("date"),
            kind=pick("kind", "type"),
            amount=pick("amount"),
            category=pick("category", "head_of_accounts"),
            reference_no=pick("reference_no", "cheque_no"),
            notes=pick("notes"),
            book_segment=pick("book_segment", "cb_type"),
        )

    def to_dict(self) -> dict[str, Any]:
        def wire(value: Any) -> Any:
            if isinstance(value, Enum):
                return value.value
            if isinstance(value, date):
                return format_ledger_date(value)
            if isinstance(value, Decimal):
                return str(value)
            return value

        return {
            "date": wire(self.date),
            "type": wire(self.kind),
            "cheque_no": self.reference_no,
            "amount": wire(self.amount),
            "head_of_accounts": self.category,
            "notes": self.notes,
            "cb_type": wire(self.book_segment),
        }


def record_to_draft(record: CashRecord) -> EntryDraft:
    return EntryDraft(
        date=record.date,
        kind=record.kind,
        amount=record.amount,
        category=record.category,
        reference_no=record.reference_no,
        notes=record.notes,
        book_segment=record.book_segment,
    )
