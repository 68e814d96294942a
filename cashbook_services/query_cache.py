"""
CachedRecordStore -- read-through cache in front of a RecordStore.

Responsibility:
    Keeps the results of ``query`` and ``recent`` keyed by the frozen
    ``EntryFilter`` so that report pages, ledger summaries and the dashboard
    built from the same filter hit the store once.

Architecture position:
    Services -- wraps any ``RecordStore`` and satisfies the same protocol,
    so the kernel services can be handed the cache instead of the store.

Invariants enforced:
    - Every write (insert, update, delete, delete_where and
      run_in_transaction) drops every cached key, whether or not the write
      succeeded.
    - Cached lists are returned as copies; callers cannot mutate the cache.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, TypeVar
from uuid import UUID

from cashbook_kernel.domain.records import CashRecord
from cashbook_kernel.logging_config import get_logger
from cashbook_kernel.services.record_store import ALL_ENTRIES, EntryFilter, RecordStore

logger = get_logger("services.query_cache")

T = TypeVar("T")


class CachedRecordStore:
    """RecordStore decorator caching filtered reads."""

    def __init__(self, store: RecordStore):
        self._store = store
        self._queries: dict[EntryFilter, list[CashRecord]] = {}
        self._recent: dict[tuple[EntryFilter, int], list[CashRecord]] = {}
        self.hits = 0
        self.misses = 0

    @property
    def store(self) -> RecordStore:
        return self._store

    def invalidate(self) -> None:
        if self._queries or self._recent:
            logger.debug(
                "query_cache_invalidated",
                extra={"query_keys": len(self._queries), "recent_keys": len(self._recent)},
            )
        self._queries.clear()
        self._recent.clear()

    # Reads

    def query(self, entry_filter: EntryFilter = ALL_ENTRIES) -> list[CashRecord]:
        cached = self._queries.get(entry_filter)
        if cached is None:
            self.misses += 1
            cached = self._store.query(entry_filter)
            self._queries[entry_filter] = cached
        else:
            self.hits += 1
        return list(cached)

    def recent(self, entry_filter: EntryFilter = ALL_ENTRIES, limit: int = 5) -> list[CashRecord]:
        key = (entry_filter, limit)
        cached = self._recent.get(key)
        if cached is None:
            self.misses += 1
            cached = self._store.recent(entry_filter, limit)
            self._recent[key] = cached
        else:
            self.hits += 1
        return list(cached)

    def get(self, entry_id: UUID) -> CashRecord | None:
        return self._store.get(entry_id)

    # Writes

    def insert(self, record: CashRecord) -> CashRecord:
        try:
            return self._store.insert(record)
        finally:
            self.invalidate()

    def update(self, entry_id: UUID, patch: Mapping[str, Any]) -> CashRecord | None:
        try:
            return self._store.update(entry_id, patch)
        finally:
            self.invalidate()

    def delete(self, entry_id: UUID) -> bool:
        try:
            return self._store.delete(entry_id)
        finally:
            self.invalidate()

    def delete_where(self, entry_filter: EntryFilter) -> int:
        try:
            return self._store.delete_where(entry_filter)
        finally:
            self.invalidate()

    def run_in_transaction(self, fn: Callable[[CachedRecordStore], T]) -> T:
        """Run ``fn`` against this cache inside the wrapped store's transaction."""
        try:
            return self._store.run_in_transaction(lambda _store: fn(self))
        finally:
            self.invalidate()
