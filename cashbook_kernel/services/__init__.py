"""Kernel services: the record store and the write-side orchestration."""

from cashbook_kernel.services.bulk_import_service import (
    BulkImportFailure,
    BulkImportResult,
    BulkImportService,
)
from cashbook_kernel.services.entry_service import (
    CreateEntryResult,
    CreateStatus,
    EntryService,
)
from cashbook_kernel.services.record_store import (
    ALL_ENTRIES,
    EntryFilter,
    RecordStore,
    SqlAlchemyRecordStore,
)

__all__ = [
    "ALL_ENTRIES",
    "BulkImportFailure",
    "BulkImportResult",
    "BulkImportService",
    "CreateEntryResult",
    "CreateStatus",
    "EntryFilter",
    "EntryService",
    "RecordStore",
    "SqlAlchemyRecordStore",
]
