"""Tests for single-entry create / update / delete."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from cashbook_kernel.domain.records import BookSegment, EntryKind, SegmentSelector
from cashbook_kernel.exceptions import (
    EntryNotFoundError,
    EntryValidationError,
    ImmutableFieldError,
)
from cashbook_kernel.services.entry_service import CreateStatus, EntryService
from tests.builders import make_draft


class TestCreateEntry:
    def test_creates_and_logs(self, entry_service, store, captured_logs):
        result = entry_service.create_entry(make_draft())

        assert result.status is CreateStatus.CREATED
        assert result.created
        assert result.record.fiscal_year == "25-26"
        assert len(store.query()) == 1

        logs = captured_logs()
        created = [r for r in logs if r["message"] == "entry_created"]
        assert created and created[0]["fiscal_year"] == "25-26"
        assert created[0]["segment"] == "aided"

    def test_invalid_draft_writes_nothing(self, entry_service, store):
        with pytest.raises(EntryValidationError):
            entry_service.create_entry(make_draft(amount="-3"))
        assert store.query() == []

    def test_resubmission_within_window_needs_confirmation(self, entry_service, store, clock):
        first = entry_service.create_entry(make_draft())
        clock.advance(2)

        second = entry_service.create_entry(make_draft())

        assert second.status is CreateStatus.NEEDS_CONFIRMATION
        assert not second.created
        assert second.duplicate_of.id == first.record.id
        assert len(store.query()) == 1

    def test_confirmed_resubmission_is_written(self, entry_service, store, clock):
        entry_service.create_entry(make_draft())
        clock.advance(2)

        result = entry_service.create_entry(make_draft(), confirmed=True)

        assert result.created
        assert len(store.query()) == 2

    def test_resubmission_after_window_is_written(self, entry_service, store, clock):
        entry_service.create_entry(make_draft())
        clock.advance(10)

        assert entry_service.create_entry(make_draft()).created

    def test_different_amount_is_not_duplicate(self, entry_service, clock):
        entry_service.create_entry(make_draft())
        clock.advance(1)
        assert entry_service.create_entry(make_draft(amount="100.01")).created

    def test_both_selector_writes_default_segment(self, store, clock):
        service = EntryService(store, clock, default_segment=BookSegment.UNAIDED)
        result = service.create_entry(make_draft(book_segment="both"))
        assert result.record.book_segment is BookSegment.UNAIDED


class TestUpdateEntry:
    def test_updates_and_restamps_fiscal_year(self, entry_service):
        created = entry_service.create_entry(make_draft()).record

        updated = entry_service.update_entry(created.id, {"date": "10/03/25", "amount": "75.25", "notes": " edited "})

        assert updated.date == date(2025, 3, 10)
        assert updated.fiscal_year == "24-25"
        assert updated.amount == Decimal("75.25")
        assert updated.notes == "edited"

    def test_kind_change_rejected(self, entry_service):
        created = entry_service.create_entry(make_draft()).record
        with pytest.raises(ImmutableFieldError) as exc_info:
            entry_service.update_entry(created.id, {"kind": "payment"})
        assert exc_info.value.field == "kind"

    def test_same_kind_is_allowed(self, entry_service):
        created = entry_service.create_entry(make_draft()).record
        updated = entry_service.update_entry(created.id, {"kind": "receipt", "category": "Lib Fee"})
        assert updated.kind is EntryKind.RECEIPT
        assert updated.category == "Lib Fee"

    def test_invalid_values_rejected(self, entry_service):
        created = entry_service.create_entry(make_draft()).record
        with pytest.raises(EntryValidationError) as exc_info:
            entry_service.update_entry(created.id, {"date": "99/99/99", "amount": "0", "colour": "red"})
        assert [e.code for e in exc_info.value.errors] == ["INVALID_DATE", "NON_POSITIVE_AMOUNT", "UNKNOWN_FIELD"]

    def test_missing_entry(self, entry_service):
        with pytest.raises(EntryNotFoundError):
            entry_service.update_entry(uuid4(), {"notes": "x"})


class TestDelete:
    def test_delete_entry(self, entry_service, store):
        created = entry_service.create_entry(make_draft()).record
        entry_service.delete_entry(created.id)
        assert store.get(created.id) is None

    def test_delete_missing(self, entry_service):
        with pytest.raises(EntryNotFoundError):
            entry_service.delete_entry(uuid4())

    def test_delete_entries_by_segment_and_year(self, entry_service, clock):
        entry_service.create_entry(make_draft())
        clock.advance(10)
        entry_service.create_entry(make_draft(book_segment="unaided"))
        clock.advance(10)
        entry_service.create_entry(make_draft(date="01/02/25"))

        assert entry_service.delete_entries(SegmentSelector.AIDED, "25-26") == 1
        assert entry_service.delete_entries(SegmentSelector.BOTH) == 2


class TestMostRecentDate:
    def test_none_when_empty(self, entry_service):
        assert entry_service.most_recent_date() is None

    def test_latest_created_wins_over_latest_date(self, entry_service, clock):
        entry_service.create_entry(make_draft(date="30/04/25"))
        clock.advance(10)
        entry_service.create_entry(make_draft(date="02/04/25"))
        assert entry_service.most_recent_date() == date(2025, 4, 2)
