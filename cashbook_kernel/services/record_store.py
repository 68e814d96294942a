"""
RecordStore -- the append/query collaborator behind every cash book operation.

Responsibility:
    Persists CashRecords and answers filtered queries.  ``RecordStore`` is
    the structural protocol the services depend on; ``SqlAlchemyRecordStore``
    is the SQLAlchemy implementation.

Architecture position:
    Kernel > Services -- imperative shell.  Converts between CashEntryModel
    and CashRecord so nothing above this layer handles ORM instances.

Invariants enforced:
    - Write methods only flush.  ``run_in_transaction`` is the commit
      boundary: it commits when the callable returns and rolls back
      everything the callable wrote when it raises.
    - fiscal_year is recomputed whenever a write sets the date.
    - created_at and updated_at come from the injected Clock.

Failure modes:
    - SQLAlchemy errors propagate unchanged after rollback.
    - ValueError from ``update`` for a field that cannot be patched.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Protocol, TypeVar, runtime_checkable
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from cashbook_kernel.domain.clock import Clock, SystemClock
from cashbook_kernel.domain.fiscal_year import resolve_fiscal_year
from cashbook_kernel.domain.records import BookSegment, CashRecord, EntryKind
from cashbook_kernel.logging_config import get_logger
from cashbook_kernel.models.cash_entry import CashEntryModel

logger = get_logger("services.record_store")

T = TypeVar("T")

# CashRecord field -> column, for patchable fields
PATCHABLE_FIELDS: dict[str, str] = {
    "date": "entry_date",
    "amount": "amount",
    "category": "category",
    "reference_no": "reference_no",
    "notes": "notes",
    "book_segment": "book_segment",
}


@dataclass(frozen=True)
class EntryFilter:
    """
    Query filter.  Every None field means "no restriction".

    Frozen and hashable so it can key the read-through cache.
    """

    fiscal_year: str | None = None
    segment: BookSegment | None = None
    kind: EntryKind | None = None
    category: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    created_after: datetime | None = None

    def narrow(self, **changes: Any) -> EntryFilter:
        return replace(self, **changes)


ALL_ENTRIES = EntryFilter()


@runtime_checkable
class RecordStore(Protocol):
    """Minimum store contract used by the services."""

    def insert(self, record: CashRecord) -> CashRecord: ...

    def get(self, entry_id: UUID) -> CashRecord | None: ...

    def update(self, entry_id: UUID, patch: Mapping[str, Any]) -> CashRecord | None: ...

    def delete(self, entry_id: UUID) -> bool: ...

    def delete_where(self, entry_filter: EntryFilter) -> int: ...

    def query(self, entry_filter: EntryFilter = ALL_ENTRIES) -> list[CashRecord]: ...

    def recent(self, entry_filter: EntryFilter = ALL_ENTRIES, limit: int = 5) -> list[CashRecord]: ...

    def run_in_transaction(self, fn: Callable[[RecordStore], T]) -> T: ...


class SqlAlchemyRecordStore:
    """
    RecordStore over a SQLAlchemy Session.

    The caller owns the session; this class never closes it.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self.session = session
        self._clock = clock or SystemClock()

    # Writes

    def insert(self, record: CashRecord) -> CashRecord:
        now = self._clock.now()
        model = CashEntryModel.from_record(
            record.with_changes(fiscal_year=resolve_fiscal_year(record.date))
        )
        model.created_at = now
        model.updated_at = now
        self.session.add(model)
        self.session.flush()
        logger.debug(
            "entry_inserted",
            extra={"entry_id": str(model.id), "kind": model.kind, "category": model.category},
        )
        return model.to_record()

    def update(self, entry_id: UUID, patch: Mapping[str, Any]) -> CashRecord | None:
        unknown = set(patch) - set(PATCHABLE_FIELDS)
        if unknown:
            raise ValueError(f"Fields cannot be patched: {sorted(unknown)}")

        model = self.session.get(CashEntryModel, entry_id)
        if model is None:
            return None

        for field, value in patch.items():
            if field == "book_segment":
                value = BookSegment(value).value
            setattr(model, PATCHABLE_FIELDS[field], value)
        if "date" in patch:
            model.fiscal_year = resolve_fiscal_year(model.entry_date)
        model.updated_at = self._clock.now()
        self.session.flush()
        logger.debug(
            "entry_updated",
            extra={"entry_id": str(entry_id), "fields": sorted(patch)},
        )
        return model.to_record()

    def delete(self, entry_id: UUID) -> bool:
        model = self.session.get(CashEntryModel, entry_id)
        if model is None:
            return False
        self.session.delete(model)
        self.session.flush()
        return True

    def delete_where(self, entry_filter: EntryFilter) -> int:
        stmt = delete(CashEntryModel)
        for condition in self._conditions(entry_filter):
            stmt = stmt.where(condition)
        result = self.session.execute(stmt.execution_options(synchronize_session="fetch"))
        return result.rowcount or 0

    def run_in_transaction(self, fn: Callable[[SqlAlchemyRecordStore], T]) -> T:
        """
        Run ``fn(self)`` and commit.  Any exception rolls the whole
        transaction back and is re-raised.
        """
        try:
            result = fn(self)
            self.session.commit()
        except Exception:
            self.session.rollback()
            logger.warning("record_store_transaction_rolled_back", exc_info=True)
            raise
        return result

    # Reads

    def get(self, entry_id: UUID) -> CashRecord | None:
        model = self.session.get(CashEntryModel, entry_id)
        return model.to_record() if model is not None else None

    def query(self, entry_filter: EntryFilter = ALL_ENTRIES) -> list[CashRecord]:
        """Matching records by date then creation time.  Ledger order is applied by the caller."""
        stmt = select(CashEntryModel)
        for condition in self._conditions(entry_filter):
            stmt = stmt.where(condition)
        stmt = stmt.order_by(
            CashEntryModel.entry_date,
            CashEntryModel.created_at,
            CashEntryModel.id,
        )
        return [m.to_record() for m in self.session.scalars(stmt)]

    def recent(self, entry_filter: EntryFilter = ALL_ENTRIES, limit: int = 5) -> list[CashRecord]:
        """Most recently created records first."""
        stmt = select(CashEntryModel)
        for condition in self._conditions(entry_filter):
            stmt = stmt.where(condition)
        stmt = stmt.order_by(CashEntryModel.created_at.desc(), CashEntryModel.id.desc()).limit(limit)
        return [m.to_record() for m in self.session.scalars(stmt)]

    @staticmethod
    def _conditions(entry_filter: EntryFilter) -> list:
        conditions = []
        if entry_filter.fiscal_year is not None:
            conditions.append(CashEntryModel.fiscal_year == entry_filter.fiscal_year)
        if entry_filter.segment is not None:
            conditions.append(CashEntryModel.book_segment == BookSegment(entry_filter.segment).value)
        if entry_filter.kind is not None:
            conditions.append(CashEntryModel.kind == EntryKind(entry_filter.kind).value)
        if entry_filter.category is not None:
            conditions.append(CashEntryModel.category == entry_filter.category)
        if entry_filter.date_from is not None:
            conditions.append(CashEntryModel.entry_date >= entry_filter.date_from)
        if entry_filter.date_to is not None:
            conditions.append(CashEntryModel.entry_date <= entry_filter.date_to)
        if entry_filter.created_after is not None:
            conditions.append(CashEntryModel.created_at >= entry_filter.created_after)
        return conditions
