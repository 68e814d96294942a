"""Ingestion services: file import orchestration."""

from cashbook_ingestion.services.import_service import (
    ImportOutcome,
    ImportPreview,
    ImportService,
)

__all__ = [
    "ImportOutcome",
    "ImportPreview",
    "ImportService",
]
