"""Source adapters for cash book imports (file I/O only, no DB)."""

from cashbook_ingestion.adapters.base import SourceAdapter, SourceProbe
from cashbook_ingestion.adapters.csv_adapter import CsvSourceAdapter
from cashbook_ingestion.adapters.xlsx_adapter import XlsxSourceAdapter

__all__ = [
    "SourceAdapter",
    "SourceProbe",
    "CsvSourceAdapter",
    "XlsxSourceAdapter",
]
