"""
EntryService -- single-entry lifecycle (create, edit, delete).

Responsibility:
    Validates drafts, runs the advisory duplicate check and writes through
    the record store inside a transaction.

Architecture position:
    Kernel > Services -- imperative shell around the pure validation and
    duplicate-detection functions.

Invariants enforced:
    - Validation failures block the write (EntryValidationError).
    - The duplicate check never blocks: it returns NEEDS_CONFIRMATION and the
      caller resubmits with ``confirmed=True``.
    - kind never changes after creation (ImmutableFieldError).
    - fiscal_year follows date on every update.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Any
from uuid import UUID

from cashbook_kernel.db.types import to_decimal
from cashbook_kernel.domain.clock import Clock, SystemClock
from cashbook_kernel.domain.dtos import ValidationError
from cashbook_kernel.domain.duplicates import DEFAULT_WINDOW_MS, find_duplicate
from cashbook_kernel.domain.ledger_dates import coerce_ledger_date
from cashbook_kernel.domain.records import (
    BookSegment,
    CashRecord,
    EntryDraft,
    SegmentSelector,
    segment_filter,
    storage_segment,
)
from cashbook_kernel.domain.validation import (
    draft_to_record,
    parse_kind,
    validate_amount,
    validate_date,
    validate_segment,
)
from cashbook_kernel.exceptions import (
    EntryNotFoundError,
    EntryValidationError,
    ImmutableFieldError,
)
from cashbook_kernel.logging_config import LogContext, get_logger
from cashbook_kernel.services.record_store import EntryFilter, RecordStore

logger = get_logger("services.entry_service")


class CreateStatus(str, Enum):
    CREATED = "created"
    NEEDS_CONFIRMATION = "needs_confirmation"


@dataclass(frozen=True)
class CreateEntryResult:
    """
    Outcome of ``create_entry``.

    ``record`` is the stored record when CREATED and None otherwise;
    ``duplicate_of`` is the recent record that matched when
    NEEDS_CONFIRMATION.
    """

    status: CreateStatus
    record: CashRecord | None = None
    duplicate_of: CashRecord | None = None

    @property
    def created(self) -> bool:
        return self.status is CreateStatus.CREATED


class EntryService:
    """Create, edit and delete individual cash book entries."""

    def __init__(
        self,
        store: RecordStore,
        clock: Clock | None = None,
        default_segment: BookSegment = BookSegment.AIDED,
        duplicate_window_ms: int = DEFAULT_WINDOW_MS,
    ):
        self._store = store
        self._clock = clock or SystemClock()
        self._default_segment = default_segment
        self._duplicate_window_ms = duplicate_window_ms

    @classmethod
    def from_settings(cls, store: RecordStore, settings: Any, clock: Clock | None = None) -> EntryService:
        """Build from a ``CashbookSettings``."""
        return cls(
            store,
            clock,
            default_segment=settings.default_segment,
            duplicate_window_ms=settings.duplicate_window_ms,
        )

    def create_entry(self, draft: EntryDraft, confirmed: bool = False) -> CreateEntryResult:
        """
        Validate and store one entry.

        Raises:
            EntryValidationError: the draft is invalid.  Nothing is written.
        """
        record = draft_to_record(draft, self._default_segment)

        if not confirmed:
            duplicate = self._recent_duplicate(record)
            if duplicate is not None:
                logger.warning(
                    "entry_possible_duplicate",
                    extra={
                        "duplicate_of": str(duplicate.id),
                        "category": record.category,
                        "amount": record.amount,
                    },
                )
                return CreateEntryResult(
                    status=CreateStatus.NEEDS_CONFIRMATION,
                    duplicate_of=duplicate,
                )

        with LogContext.bind(segment=record.book_segment.value, fiscal_year=record.fiscal_year):
            stored = self._store.run_in_transaction(lambda store: store.insert(record))
            logger.info(
                "entry_created",
                extra={
                    "entry_id": str(stored.id),
                    "kind": stored.kind.value,
                    "category": stored.category,
                    "amount": stored.amount,
                    "confirmed_duplicate": confirmed,
                },
            )
        return CreateEntryResult(status=CreateStatus.CREATED, record=stored)

    def _recent_duplicate(self, record: CashRecord) -> CashRecord | None:
        now = self._clock.now()
        window = timedelta(milliseconds=self._duplicate_window_ms)
        recent = self._store.query(
            EntryFilter(
                segment=record.book_segment,
                kind=record.kind,
                category=record.category,
                created_after=now - window,
            )
        )
        return find_duplicate(record, recent, now, self._duplicate_window_ms)

    def update_entry(self, entry_id: UUID, patch: Mapping[str, Any]) -> CashRecord:
        """
        Apply a partial edit.

        ``patch`` uses CashRecord field names.  Values are validated the same
        way as on creation; a date change re-stamps the fiscal year.

        Raises:
            ImmutableFieldError: patch tries to change ``kind``.
            EntryValidationError: a patched value is invalid.
            EntryNotFoundError: no entry with ``entry_id``.
        """
        cleaned = self._clean_patch(entry_id, patch)
        updated = self._store.run_in_transaction(lambda store: store.update(entry_id, cleaned))
        if updated is None:
            raise EntryNotFoundError(entry_id)
        logger.info(
            "entry_updated",
            extra={"entry_id": str(entry_id), "fields": sorted(cleaned)},
        )
        return updated

    def _clean_patch(self, entry_id: UUID, patch: Mapping[str, Any]) -> dict[str, Any]:
        if "kind" in patch:
            current = self._store.get(entry_id)
            if current is None:
                raise EntryNotFoundError(entry_id)
            if parse_kind(patch["kind"]) is not current.kind:
                raise ImmutableFieldError("kind")

        errors: list[ValidationError] = []
        cleaned: dict[str, Any] = {}
        for field, value in patch.items():
            if field == "kind":
                continue
            if field == "date":
                errors.extend(validate_date(value))
                cleaned["date"] = coerce_ledger_date(value)
            elif field == "amount":
                field_errors = validate_amount(value)
                errors.extend(field_errors)
                if not field_errors:
                    cleaned["amount"] = to_decimal(value)
            elif field == "book_segment":
                field_errors = validate_segment(value)
                errors.extend(field_errors)
                if not field_errors:
                    cleaned["book_segment"] = storage_segment(value, self._default_segment)
            elif field == "category":
                if value is None or not str(value).strip():
                    errors.append(
                        ValidationError(
                            code="MISSING_REQUIRED_FIELD",
                            message="Required field missing: category",
                            field="category",
                        )
                    )
                else:
                    cleaned["category"] = str(value).strip()
            elif field in ("reference_no", "notes"):
                text = str(value).strip() if value is not None else ""
                cleaned[field] = text or None
            else:
                errors.append(
                    ValidationError(
                        code="UNKNOWN_FIELD",
                        message=f"Unknown field: {field}",
                        field=field,
                    )
                )
        if errors:
            raise EntryValidationError(tuple(errors))
        return cleaned

    def delete_entry(self, entry_id: UUID) -> None:
        """
        Raises:
            EntryNotFoundError: no entry with ``entry_id``.
        """
        deleted = self._store.run_in_transaction(lambda store: store.delete(entry_id))
        if not deleted:
            raise EntryNotFoundError(entry_id)
        logger.info("entry_deleted", extra={"entry_id": str(entry_id)})

    def delete_entries(
        self,
        segment: SegmentSelector | str | None = SegmentSelector.BOTH,
        fiscal_year: str | None = None,
    ) -> int:
        """Permanently delete every entry in the segment and fiscal year.  Returns the count."""
        entry_filter = EntryFilter(fiscal_year=fiscal_year, segment=segment_filter(segment))
        count = self._store.run_in_transaction(lambda store: store.delete_where(entry_filter))
        logger.warning(
            "entries_deleted",
            extra={
                "count": count,
                "segment": entry_filter.segment.value if entry_filter.segment else None,
                "fiscal_year": fiscal_year,
            },
        )
        return count

    def most_recent_date(self) -> date | None:
        """Date of the most recently created entry, used to prefill the next form."""
        latest = self._store.recent(limit=1)
        return latest[0].date if latest else None
