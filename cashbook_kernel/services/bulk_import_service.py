"""
BulkImportService -- Bulk Import Orchestrator.

Responsibility:
    Applies a batch of candidate entries to the record store.  Each
    candidate is validated independently; invalid ones are reported with
    their batch index and skipped, valid ones are written together.

Architecture position:
    Kernel > Services -- imperative shell.  Called by the ingestion
    ImportService and directly by API-style callers.

Invariants enforced:
    - Validation runs before the transaction opens, so a validation failure
      can never roll back accepted rows.
    - All accepted rows are written inside one ``run_in_transaction`` call:
      a store failure part way through leaves nothing behind and propagates
      to the caller as a single failure.
    - imported + failed == len(candidates).

Failure modes:
    - EmptyImportBatchError for an empty batch.
    - Store / driver errors propagate after rollback.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from cashbook_kernel.domain.dtos import ValidationError
from cashbook_kernel.domain.records import BookSegment, CashRecord, EntryDraft, record_to_draft
from cashbook_kernel.domain.validation import draft_to_record, validate_draft
from cashbook_kernel.exceptions import EmptyImportBatchError
from cashbook_kernel.logging_config import LogContext, get_logger
from cashbook_kernel.services.record_store import RecordStore

logger = get_logger("services.bulk_import")


@dataclass(frozen=True)
class BulkImportFailure:
    """One rejected candidate."""

    index: int
    candidate: EntryDraft
    errors: tuple[ValidationError, ...]

    @property
    def message(self) -> str:
        return "; ".join(e.message for e in self.errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "entry": self.candidate.to_dict(),
            "error": self.message,
        }


@dataclass(frozen=True)
class BulkImportResult:
    """Counts plus per-row detail."""

    imported: int
    failed: int
    results: tuple[CashRecord, ...] = field(default_factory=tuple)
    errors: tuple[BulkImportFailure, ...] = field(default_factory=tuple)

    @property
    def summary(self) -> str:
        return f"{self.imported} imported, {self.failed} failed"

    def to_dict(self) -> dict[str, Any]:
        return {
            "imported": self.imported,
            "failed": self.failed,
            "results": [r.to_dict() for r in self.results],
            "errors": [e.to_dict() for e in self.errors],
        }


class BulkImportService:
    """Validate-then-write batch import."""

    def __init__(self, store: RecordStore, default_segment: BookSegment = BookSegment.AIDED):
        self._store = store
        self._default_segment = default_segment

    def bulk_import(self, candidates: Sequence[EntryDraft | CashRecord]) -> BulkImportResult:
        """
        Import ``candidates``.

        Raises:
            EmptyImportBatchError: ``candidates`` is empty.
        """
        if not candidates:
            raise EmptyImportBatchError()

        batch_id = str(uuid4())
        with LogContext.bind(batch_id=batch_id):
            logger.info("bulk_import_started", extra={"candidate_count": len(candidates)})

            accepted: list[CashRecord] = []
            failures: list[BulkImportFailure] = []
            for index, candidate in enumerate(candidates):
                draft = record_to_draft(candidate) if isinstance(candidate, CashRecord) else candidate
                errors = validate_draft(draft, max_decimal_places=None)
                if errors:
                    failures.append(BulkImportFailure(index, draft, tuple(errors)))
                    logger.warning(
                        "bulk_import_row_rejected",
                        extra={"index": index, "error_codes": [e.code for e in errors]},
                    )
                    continue
                accepted.append(
                    draft_to_record(draft, self._default_segment, max_decimal_places=None)
                )

            stored: list[CashRecord] = []
            if accepted:
                stored = self._store.run_in_transaction(
                    lambda store: [store.insert(record) for record in accepted]
                )

            result = BulkImportResult(
                imported=len(stored),
                failed=len(failures),
                results=tuple(stored),
                errors=tuple(failures),
            )
            logger.info(
                "bulk_import_completed",
                extra={"imported": result.imported, "failed": result.failed},
            )
            return result
