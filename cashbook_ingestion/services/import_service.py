"""
ImportService -- file -> aggregated records -> record store.

Responsibility:
    Reads a fee, salary or cash book file through a source adapter, folds
    the raw rows into canonical records with the layout's aggregator, drops
    rows that were imported before and hands the rest to BulkImportService.

Architecture position:
    Ingestion > Services -- imperative shell.  Adapters do the file I/O,
    the domain aggregators are pure, BulkImportService owns the write.

Invariants enforced:
    - ``preview_file`` never writes.
    - Import-duplicates are compared against stored records of the target
      segment only; two identical rows in the same file are both kept.
    - An empty aggregation is reported, not written (no empty batch).

Failure modes:
    - UnsupportedSourceFormatError for an extension with no adapter.
    - UnknownColumnLayoutError when the header matches no known layout.
    - Store errors propagate from BulkImportService after rollback.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any

from cashbook_ingestion.adapters.base import SourceAdapter, SourceProbe
from cashbook_ingestion.adapters.csv_adapter import CsvSourceAdapter
from cashbook_ingestion.adapters.xlsx_adapter import XlsxSourceAdapter
from cashbook_ingestion.domain.cash_book_rows import parse_cash_book_rows
from cashbook_ingestion.domain.fee_aggregation import (
    DEFAULT_CATEGORY_SUFFIX,
    DEFAULT_NOTES_PREFIX,
    DEFAULT_REFERENCE_SENTINEL,
    aggregate_fee_rows,
)
from cashbook_ingestion.domain.layouts import ColumnLayout, LayoutKind, detect_layout
from cashbook_ingestion.domain.salary_aggregation import (
    MonthlySalarySummary,
    aggregate_salary_rows,
)
from cashbook_kernel.domain.duplicates import (
    DEFAULT_IMPORT_TOLERANCE,
    partition_import_duplicates,
)
from cashbook_kernel.domain.ordering import FEE_HEADS
from cashbook_kernel.domain.records import (
    BookSegment,
    CashRecord,
    SegmentSelector,
    storage_segment,
)
from cashbook_kernel.exceptions import UnsupportedSourceFormatError
from cashbook_kernel.logging_config import LogContext, get_logger
from cashbook_kernel.services.bulk_import_service import BulkImportResult, BulkImportService
from cashbook_kernel.services.record_store import EntryFilter, RecordStore

logger = get_logger("ingestion.import_service")


def _default_adapters() -> dict[str, SourceAdapter]:
    return {
        ".csv": CsvSourceAdapter(),
        ".xlsx": XlsxSourceAdapter(),
    }


@dataclass(frozen=True)
class ImportPreview:
    """What an import would write, without writing it."""

    layout: ColumnLayout
    segment: BookSegment
    source_rows: int
    records: tuple[CashRecord, ...]
    duplicates: tuple[CashRecord, ...] = field(default_factory=tuple)
    salary_summary: tuple[MonthlySalarySummary, ...] = field(default_factory=tuple)

    @property
    def total_amount(self) -> Decimal:
        return sum((r.amount for r in self.records), Decimal("0"))


@dataclass(frozen=True)
class ImportOutcome:
    """Result of ``import_file``."""

    layout: ColumnLayout
    segment: BookSegment
    result: BulkImportResult
    skipped_duplicates: tuple[CashRecord, ...] = field(default_factory=tuple)
    salary_summary: tuple[MonthlySalarySummary, ...] = field(default_factory=tuple)

    @property
    def imported(self) -> int:
        return self.result.imported

    @property
    def failed(self) -> int:
        return self.result.failed

    def to_dict(self) -> dict[str, Any]:
        return {
            "layout": self.layout.name,
            "segment": self.segment.value,
            "skipped_duplicates": len(self.skipped_duplicates),
            **self.result.to_dict(),
        }


class ImportService:
    """Orchestrates read -> aggregate -> de-duplicate -> bulk import."""

    def __init__(
        self,
        store: RecordStore,
        bulk_import_service: BulkImportService | None = None,
        adapters: dict[str, SourceAdapter] | None = None,
        default_segment: BookSegment = BookSegment.AIDED,
        fee_heads: Sequence[str] = FEE_HEADS,
        fee_reference_sentinel: str = DEFAULT_REFERENCE_SENTINEL,
        fee_category_suffix: str = DEFAULT_CATEGORY_SUFFIX,
        fee_notes_prefix: str = DEFAULT_NOTES_PREFIX,
        duplicate_tolerance: Decimal = DEFAULT_IMPORT_TOLERANCE,
    ):
        self._store = store
        self._bulk = bulk_import_service or BulkImportService(store, default_segment)
        self._adapters = adapters if adapters is not None else _default_adapters()
        self._default_segment = default_segment
        self._fee_heads = tuple(fee_heads)
        self._fee_reference_sentinel = fee_reference_sentinel
        self._fee_category_suffix = fee_category_suffix
        self._fee_notes_prefix = fee_notes_prefix
        self._duplicate_tolerance = duplicate_tolerance

    @classmethod
    def from_settings(cls, store: RecordStore, settings: Any) -> ImportService:
        """Build from a ``CashbookSettings``."""
        return cls(
            store,
            default_segment=settings.default_segment,
            fee_heads=settings.fee_heads,
            fee_reference_sentinel=settings.fee_reference_sentinel,
            fee_category_suffix=settings.fee_category_suffix,
            fee_notes_prefix=settings.fee_notes_prefix,
            duplicate_tolerance=settings.import_duplicate_tolerance,
        )

    # Reading

    def _adapter(self, source_path: Path) -> SourceAdapter:
        adapter = self._adapters.get(source_path.suffix.lower())
        if adapter is None:
            raise UnsupportedSourceFormatError(source_path.suffix or source_path.name)
        return adapter

    def probe_source(self, source_path: Path | str, options: dict[str, Any] | None = None) -> SourceProbe:
        """Preview source file: row count, columns, sample data."""
        source_path = Path(source_path)
        return self._adapter(source_path).probe(source_path, options or {})

    def read_rows(self, source_path: Path | str, options: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Read all raw rows from source. Returns list of dicts."""
        source_path = Path(source_path)
        return list(self._adapter(source_path).read(source_path, options or {}))

    # Aggregation

    def aggregate(
        self,
        rows: Sequence[Mapping[str, Any]],
        layout: ColumnLayout | None = None,
        segment: BookSegment | None = None,
    ) -> tuple[ColumnLayout, list[CashRecord], tuple[MonthlySalarySummary, ...]]:
        """
        Fold raw rows into records with the aggregator for ``layout``.

        When ``layout`` is None it is detected from the first row's columns.
        """
        segment = segment or self._default_segment
        if layout is None:
            layout = detect_layout(rows[0].keys() if rows else ())

        summary: tuple[MonthlySalarySummary, ...] = ()
        if layout.kind == LayoutKind.FEE_COLLECTION:
            records = aggregate_fee_rows(
                rows,
                fee_heads=self._fee_heads,
                segment=segment,
                reference_sentinel=self._fee_reference_sentinel,
                category_suffix=self._fee_category_suffix,
                notes_prefix=self._fee_notes_prefix,
            )
        elif layout.kind == LayoutKind.SALARY_DEDUCTION:
            aggregation = aggregate_salary_rows(rows, segment=segment)
            records = list(aggregation.records)
            summary = aggregation.summary
        else:
            records = parse_cash_book_rows(rows, segment=segment)
        return layout, records, summary

    def _split_duplicates(
        self, records: Iterable[CashRecord], segment: BookSegment
    ) -> tuple[list[CashRecord], list[CashRecord]]:
        existing = self._store.query(EntryFilter(segment=segment))
        return partition_import_duplicates(records, existing, self._duplicate_tolerance)

    # Entry points

    def preview_file(
        self,
        source_path: Path | str,
        layout: ColumnLayout | None = None,
        segment: SegmentSelector | BookSegment | str | None = SegmentSelector.BOTH,
        options: dict[str, Any] | None = None,
    ) -> ImportPreview:
        """Everything ``import_file`` does up to the write."""
        target = storage_segment(segment, self._default_segment)
        rows = self.read_rows(source_path, options)
        layout, records, summary = self.aggregate(rows, layout, target)
        fresh, duplicates = self._split_duplicates(records, target)
        return ImportPreview(
            layout=layout,
            segment=target,
            source_rows=len(rows),
            records=tuple(fresh),
            duplicates=tuple(duplicates),
            salary_summary=summary,
        )

    def import_file(
        self,
        source_path: Path | str,
        layout: ColumnLayout | None = None,
        segment: SegmentSelector | BookSegment | str | None = SegmentSelector.BOTH,
        skip_duplicates: bool = True,
        options: dict[str, Any] | None = None,
    ) -> ImportOutcome:
        """
        Read, aggregate and import ``source_path``.

        With ``skip_duplicates`` records matching a stored record (same date,
        kind, category, notes and amount within tolerance) are left out and
        returned in ``skipped_duplicates``.
        """
        source_path = Path(source_path)
        target = storage_segment(segment, self._default_segment)

        with LogContext.bind(source_file=source_path.name, segment=target.value):
            rows = self.read_rows(source_path, options)
            layout, records, summary = self.aggregate(rows, layout, target)
            logger.info(
                "import_file_aggregated",
                extra={"layout": layout.name, "source_rows": len(rows), "record_count": len(records)},
            )

            duplicates: list[CashRecord] = []
            if skip_duplicates:
                records, duplicates = self._split_duplicates(records, target)
                if duplicates:
                    logger.info("import_duplicates_skipped", extra={"count": len(duplicates)})

            if records:
                result = self._bulk.bulk_import(records)
            else:
                result = BulkImportResult(imported=0, failed=0)
                logger.info("import_file_nothing_to_write")

            outcome = ImportOutcome(
                layout=layout,
                segment=target,
                result=result,
                skipped_duplicates=tuple(duplicates),
                salary_summary=summary,
            )
            logger.info(
                "import_file_completed",
                extra={
                    "imported": outcome.imported,
                    "failed": outcome.failed,
                    "skipped_duplicates": len(duplicates),
                },
            )
            return outcome
