"""
Module: cashbook_kernel.models.cash_entry
Responsibility: ORM persistence for cash book entries (receipts and payments).
Architecture position: Kernel > Models.  May import from db/ and the pure
    domain record types only.

Invariants enforced:
    - amount > 0 (CHECK constraint; validation rejects it earlier).
    - kind is 'receipt' or 'payment'; book_segment is 'aided' or 'unaided'.
    - fiscal_year is derived from entry_date by the record store on every
      write that touches the date; it is stored only for filtering.

Failure modes:
    - IntegrityError from the database if a CHECK constraint is violated.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from cashbook_kernel.db.base import TimestampedBase, ensure_utc
from cashbook_kernel.domain.records import BookSegment, CashRecord, EntryKind


class CashEntryModel(TimestampedBase):
    """
    One stored receipt or payment.

    Converted to and from the immutable ``CashRecord`` at the store boundary;
    nothing above the record store sees this class.
    """

    __tablename__ = "cash_entries"

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_cash_entries_amount_positive"),
        CheckConstraint("kind IN ('receipt', 'payment')", name="ck_cash_entries_kind"),
        CheckConstraint(
            "book_segment IN ('aided', 'unaided')",
            name="ck_cash_entries_book_segment",
        ),
        Index("idx_cash_entries_fiscal_year", "fiscal_year"),
        Index("idx_cash_entries_book_segment", "book_segment"),
        Index("idx_cash_entries_fy_segment", "fiscal_year", "book_segment"),
        Index("idx_cash_entries_entry_date", "entry_date"),
        Index("idx_cash_entries_kind", "kind"),
        Index("idx_cash_entries_category", "category"),
        Index("idx_cash_entries_category_kind", "category", "kind"),
        Index("idx_cash_entries_fy_segment_kind", "fiscal_year", "book_segment", "kind"),
    )

    # Calendar date, no time zone
    entry_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )

    # receipt | payment
    kind: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
    )

    # Cheque or receipt number; forms require it, storage does not
    reference_no: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(38, 9),
        nullable=False,
    )

    # Head of account
    category: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    notes: Mapped[str | None] = mapped_column(
        String(4000),
        nullable=True,
    )

    # aided | unaided
    book_segment: Mapped[str] = mapped_column(
        String(10),
        default=BookSegment.AIDED.value,
        nullable=False,
    )

    # "25-26"
    fiscal_year: Mapped[str | None] = mapped_column(
        String(5),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<CashEntry {self.entry_date} {self.kind} {self.amount} {self.category!r}>"

    def to_record(self) -> CashRecord:
        return CashRecord(
            id=self.id,
            date=self.entry_date,
            kind=EntryKind(self.kind),
            amount=self.amount,
            category=self.category,
            reference_no=self.reference_no,
            notes=self.notes,
            book_segment=BookSegment(self.book_segment),
            fiscal_year=self.fiscal_year,
            created_at=ensure_utc(self.created_at),
            updated_at=ensure_utc(self.updated_at),
        )

    @classmethod
    def from_record(cls, record: CashRecord) -> "CashEntryModel":
        model = cls(
            entry_date=record.date,
            kind=record.kind.value,
            reference_no=record.reference_no,
            amount=record.amount,
            category=record.category,
            notes=record.notes,
            book_segment=record.book_segment.value,
            fiscal_year=record.fiscal_year,
        )
        if record.id is not None:
            model.id = record.id
        return model
