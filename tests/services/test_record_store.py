"""Tests for SqlAlchemyRecordStore against in-memory SQLite."""

from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from cashbook_kernel.domain.records import BookSegment, EntryKind
from cashbook_kernel.services.record_store import EntryFilter, RecordStore, SqlAlchemyRecordStore
from tests.builders import payment, receipt

D1 = date(2025, 4, 1)


class TestInsertAndGet:
    def test_satisfies_protocol(self, store):
        assert isinstance(store, RecordStore)

    def test_insert_assigns_id_timestamps_and_fiscal_year(self, store, clock):
        stored = store.insert(receipt(date(2026, 2, 1), "100.50").with_changes(fiscal_year=None))

        assert stored.id is not None
        assert stored.created_at == clock.now()
        assert stored.updated_at == clock.now()
        assert stored.fiscal_year == "25-26"
        assert store.get(stored.id).amount == Decimal("100.50")

    def test_get_missing(self, store):
        assert store.get(uuid4()) is None


class TestUpdateAndDelete:
    def test_date_change_restamps_fiscal_year(self, store, clock):
        stored = store.insert(receipt(D1, 10))
        clock.advance(5)

        updated = store.update(stored.id, {"date": date(2025, 3, 31)})

        assert updated.fiscal_year == "24-25"
        assert updated.updated_at == clock.now()
        assert updated.created_at == stored.created_at

    def test_unknown_field_rejected(self, store):
        stored = store.insert(receipt(D1, 10))
        with pytest.raises(ValueError):
            store.update(stored.id, {"kind": "payment"})

    def test_update_missing_returns_none(self, store):
        assert store.update(uuid4(), {"notes": "x"}) is None

    def test_delete(self, store):
        stored = store.insert(receipt(D1, 10))
        assert store.delete(stored.id) is True
        assert store.delete(stored.id) is False

    def test_delete_where_returns_count(self, store):
        store.insert(receipt(D1, 10))
        store.insert(receipt(D1, 20, segment=BookSegment.UNAIDED))
        store.insert(receipt(date(2024, 5, 1), 30))

        removed = store.delete_where(EntryFilter(fiscal_year="25-26", segment=BookSegment.AIDED))

        assert removed == 1
        assert len(store.query()) == 2


class TestQuery:
    def test_filters(self, store):
        store.insert(receipt(D1, 10, "Adm Fee"))
        store.insert(payment(D1, 5, "Rent"))
        store.insert(receipt(date(2025, 4, 3), 7, "Adm Fee", segment=BookSegment.UNAIDED))

        assert len(store.query(EntryFilter(kind=EntryKind.RECEIPT))) == 2
        assert len(store.query(EntryFilter(category="Rent"))) == 1
        assert len(store.query(EntryFilter(segment=BookSegment.UNAIDED))) == 1
        assert len(store.query(EntryFilter(date_from=date(2025, 4, 2)))) == 1
        assert len(store.query(EntryFilter(date_to=D1))) == 2

    def test_created_after(self, store, clock):
        store.insert(receipt(D1, 10))
        clock.advance(60)
        later = store.insert(receipt(D1, 20))

        found = store.query(EntryFilter(created_after=clock.now() - timedelta(seconds=5)))

        assert [r.id for r in found] == [later.id]

    def test_recent_newest_first(self, store, clock):
        first = store.insert(receipt(D1, 1))
        clock.advance()
        second = store.insert(receipt(D1, 2))
        clock.advance()
        third = store.insert(receipt(D1, 3))

        assert [r.id for r in store.recent(limit=2)] == [third.id, second.id]
        assert store.recent(limit=10)[-1].id == first.id


class TestRunInTransaction:
    def test_commits(self, store, session):
        store.run_in_transaction(lambda s: s.insert(receipt(D1, 10)))
        session.rollback()
        assert len(store.query()) == 1

    def test_failure_rolls_back_everything(self, store, captured_logs):
        def write_then_fail(s: SqlAlchemyRecordStore):
            s.insert(receipt(D1, 10))
            s.insert(receipt(D1, 20))
            raise RuntimeError("disk full")

        with pytest.raises(RuntimeError):
            store.run_in_transaction(write_then_fail)

        assert store.query() == []
        assert any(r["message"] == "record_store_transaction_rolled_back" for r in captured_logs())
