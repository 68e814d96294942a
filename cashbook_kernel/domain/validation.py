"""EntryValidator -- Pure validation of entry drafts."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from cashbook_kernel.db.types import to_decimal
from cashbook_kernel.domain.dtos import ValidationError
from cashbook_kernel.domain.fiscal_year import resolve_fiscal_year
from cashbook_kernel.domain.ledger_dates import coerce_ledger_date
from cashbook_kernel.domain.records import (
    BookSegment,
    CashRecord,
    EntryDraft,
    EntryKind,
    storage_segment,
)
from cashbook_kernel.exceptions import EntryValidationError
from cashbook_kernel.logging_config import get_logger

logger = get_logger("domain.validation")

# Form-level required fields.  Storage allows reference_no and notes to be
# null; entry forms and batch imports do not.
REQUIRED_FIELDS: tuple[str, ...] = (
    "date",
    "kind",
    "amount",
    "category",
    "reference_no",
    "notes",
)

AMOUNT_DECIMAL_PLACES = 2


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def validate_required_fields(
    draft: EntryDraft,
    required_fields: tuple[str, ...] = REQUIRED_FIELDS,
) -> list[ValidationError]:
    """Every required field must be present and non-blank."""
    errors = []
    for field in required_fields:
        if _is_blank(getattr(draft, field)):
            errors.append(
                ValidationError(
                    code="MISSING_REQUIRED_FIELD",
                    message=f"Required field missing: {field}",
                    field=field,
                )
            )
    return errors


def validate_date(value: Any) -> list[ValidationError]:
    if coerce_ledger_date(value) is None:
        return [
            ValidationError(
                code="INVALID_DATE",
                message=f"Date must be a valid dd/mm/yy date: {value!r}",
                field="date",
            )
        ]
    return []


def parse_kind(value: Any) -> EntryKind | None:
    if isinstance(value, EntryKind):
        return value
    if not isinstance(value, str):
        return None
    try:
        return EntryKind(value.strip().lower())
    except ValueError:
        return None


def validate_kind(value: Any) -> list[ValidationError]:
    if parse_kind(value) is None:
        return [
            ValidationError(
                code="INVALID_KIND",
                message=f"Type must be 'receipt' or 'payment': {value!r}",
                field="kind",
            )
        ]
    return []


def validate_amount(
    value: Any,
    max_decimal_places: int | None = AMOUNT_DECIMAL_PLACES,
) -> list[ValidationError]:
    """
    Amount must parse to a finite number greater than zero.

    Entry forms also cap the fraction digits; batch imports pass
    ``max_decimal_places=None``.
    """
    try:
        amount = to_decimal(value)
    except ValueError:
        return [
            ValidationError(
                code="INVALID_AMOUNT",
                message=f"Amount must be a valid number: {value!r}",
                field="amount",
            )
        ]

    if amount <= 0:
        return [
            ValidationError(
                code="NON_POSITIVE_AMOUNT",
                message="Amount must be greater than zero",
                field="amount",
                details={"amount": str(amount)},
            )
        ]

    if max_decimal_places is not None:
        exponent = amount.normalize().as_tuple().exponent
        if isinstance(exponent, int) and -exponent > max_decimal_places:
            return [
                ValidationError(
                    code="INVALID_AMOUNT",
                    message=f"Amount allows at most {max_decimal_places} decimal places",
                    field="amount",
                    details={"amount": str(amount)},
                )
            ]
    return []


def validate_segment(value: Any) -> list[ValidationError]:
    if value is None:
        return []
    try:
        storage_segment(value)
    except ValueError:
        return [
            ValidationError(
                code="INVALID_SEGMENT",
                message=f"Unknown book segment: {value!r}",
                field="book_segment",
            )
        ]
    return []


def validate_draft(
    draft: EntryDraft,
    max_decimal_places: int | None = AMOUNT_DECIMAL_PLACES,
) -> list[ValidationError]:
    """
    Validate a draft for creation.

    Missing fields are reported once each; format checks only run on the
    fields that are present.
    """
    errors = validate_required_fields(draft)
    missing = {e.field for e in errors}

    if "date" not in missing:
        errors.extend(validate_date(draft.date))
    if "kind" not in missing:
        errors.extend(validate_kind(draft.kind))
    if "amount" not in missing:
        errors.extend(validate_amount(draft.amount, max_decimal_places))
    errors.extend(validate_segment(draft.book_segment))

    if errors:
        logger.debug(
            "draft_validation_failed",
            extra={"error_count": len(errors), "error_codes": [e.code for e in errors]},
        )
    return errors


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def draft_to_record(
    draft: EntryDraft,
    default_segment: BookSegment = BookSegment.AIDED,
    max_decimal_places: int | None = AMOUNT_DECIMAL_PLACES,
) -> CashRecord:
    """
    Validate ``draft`` and build the canonical record with its fiscal year
    stamped.

    Raises:
        EntryValidationError: the draft failed validation.
    """
    errors = validate_draft(draft, max_decimal_places)
    if errors:
        raise EntryValidationError(tuple(errors))

    entry_date: date = coerce_ledger_date(draft.date)
    amount: Decimal = to_decimal(draft.amount)
    return CashRecord(
        date=entry_date,
        kind=parse_kind(draft.kind),
        amount=amount,
        category=str(draft.category).strip(),
        reference_no=_clean(draft.reference_no),
        notes=_clean(draft.notes),
        book_segment=storage_segment(draft.book_segment, default_segment),
        fiscal_year=resolve_fiscal_year(entry_date),
    )
