"""
Typed exception hierarchy for the cash book.

Every exception carries a machine-readable ``code`` class attribute and keeps
its context as attributes, so callers catch by type and render by code
instead of parsing messages.

    CashbookError (base)
    |
    +-- EntryError
    |   +-- EntryNotFoundError
    |   +-- EntryValidationError
    |   +-- ImmutableFieldError
    |
    +-- FiscalYearError
    |   +-- InvalidFiscalYearError
    |
    +-- IngestionError
    |   +-- EmptyImportBatchError
    |   +-- UnsupportedSourceFormatError
    |   +-- UnknownColumnLayoutError
    |
    +-- ConfigurationError

Per-record problems inside bulk operations are NOT raised; they are reported
as ``ValidationError`` DTOs (see ``cashbook_kernel.domain.dtos``). Store and
driver failures (SQLAlchemy errors) are infrastructure errors and propagate
unchanged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from cashbook_kernel.domain.dtos import ValidationError


class CashbookError(Exception):
    """Base exception for all cash book errors."""

    code: str = "CASHBOOK_ERROR"


# Entry-related exceptions


class EntryError(CashbookError):
    """Base exception for cash entry errors."""

    code: str = "ENTRY_ERROR"


class EntryNotFoundError(EntryError):
    """No entry exists with the given id."""

    code: str = "ENTRY_NOT_FOUND"

    def __init__(self, entry_id: Any):
        self.entry_id = entry_id
        super().__init__(f"Entry not found: {entry_id}")


class EntryValidationError(EntryError):
    """A single-entry write was rejected by validation."""

    code: str = "ENTRY_VALIDATION_FAILED"

    def __init__(self, errors: tuple[ValidationError, ...]):
        self.errors = tuple(errors)
        summary = "; ".join(e.message for e in self.errors)
        super().__init__(f"Entry validation failed: {summary}")


class ImmutableFieldError(EntryError):
    """An update tried to change a field that never changes after creation."""

    code: str = "IMMUTABLE_FIELD"

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Field {field!r} cannot be changed after creation")


# Fiscal year exceptions


class FiscalYearError(CashbookError):
    """Base exception for fiscal year errors."""

    code: str = "FISCAL_YEAR_ERROR"


class InvalidFiscalYearError(FiscalYearError):
    """A fiscal year label is not of the form ``YY-YY`` with consecutive years."""

    code: str = "INVALID_FISCAL_YEAR"

    def __init__(self, label: Any):
        self.label = label
        super().__init__(f"Invalid fiscal year label: {label!r}")


# Ingestion exceptions


class IngestionError(CashbookError):
    """Base exception for import errors."""

    code: str = "INGESTION_ERROR"


class EmptyImportBatchError(IngestionError):
    """A bulk import was called with no candidates."""

    code: str = "EMPTY_IMPORT_BATCH"

    def __init__(self) -> None:
        super().__init__("Bulk import requires at least one candidate entry")


class UnsupportedSourceFormatError(IngestionError):
    """No adapter is registered for the source file format."""

    code: str = "UNSUPPORTED_SOURCE_FORMAT"

    def __init__(self, source_format: str):
        self.source_format = source_format
        super().__init__(f"No adapter for source format {source_format!r}")


class UnknownColumnLayoutError(IngestionError):
    """The header row matches none of the known import layouts."""

    code: str = "UNKNOWN_COLUMN_LAYOUT"

    def __init__(self, columns: tuple[str, ...]):
        self.columns = columns
        super().__init__(f"Unrecognised column layout: {', '.join(columns)}")


# Configuration exceptions


class ConfigurationError(CashbookError):
    """A settings file is malformed or carries unknown keys."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, message: str, source: str | None = None):
        self.source = source
        super().__init__(message)
