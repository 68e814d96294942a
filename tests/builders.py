"""Record and draft builders shared by the test modules."""

from datetime import date, datetime
from decimal import Decimal

from cashbook_kernel.domain.fiscal_year import resolve_fiscal_year
from cashbook_kernel.domain.records import BookSegment, CashRecord, EntryDraft, EntryKind


def make_record(
    entry_date: date,
    kind: EntryKind,
    amount: str | int | Decimal,
    category: str = "Misc",
    reference_no: str | None = "Chq1",
    notes: str | None = "note",
    segment: BookSegment = BookSegment.AIDED,
    created_at: datetime | None = None,
) -> CashRecord:
    return CashRecord(
        date=entry_date,
        kind=kind,
        amount=Decimal(str(amount)),
        category=category,
        reference_no=reference_no,
        notes=notes,
        book_segment=segment,
        fiscal_year=resolve_fiscal_year(entry_date),
        created_at=created_at,
    )


def receipt(entry_date: date, amount, category: str = "Misc", **kwargs) -> CashRecord:
    return make_record(entry_date, EntryKind.RECEIPT, amount, category, **kwargs)


def payment(entry_date: date, amount, category: str = "Misc", **kwargs) -> CashRecord:
    return make_record(entry_date, EntryKind.PAYMENT, amount, category, **kwargs)


def make_draft(**overrides) -> EntryDraft:
    fields = {
        "date": "05/04/25",
        "kind": "receipt",
        "amount": "100",
        "category": "Adm Fee",
        "reference_no": "Cash",
        "notes": "College Fee Collection",
    }
    fields.update(overrides)
    return EntryDraft(**fields)
