"""
XLSX source adapter for fee, salary and cash book sheets.

Supports flexible layout:
  - sheet by index (0-based) or name
  - header row by index or auto-detect (scans first N rows for known column names)
  - skip_rows before header
  - normalizes cell values (strip, blank->empty string, dates->dd/mm/yy)

Auto-detect looks for a row containing at least 2 column names from the
known import layouts (Date, Rpt, Month, Gross_Salary, R.Date, ...), so a
title block above the header is skipped.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterator

from cashbook_ingestion.adapters.base import SourceProbe
from cashbook_ingestion.domain.layouts import header_keywords
from cashbook_kernel.domain.ledger_dates import format_ledger_date

_HEADER_KEYWORDS = header_keywords()


def _normalize_header_cell(value: Any) -> str:
    """Normalize a cell value for header matching or key use."""
    if value is None:
        return ""
    s = str(value).strip()
    s = re.sub(r"\s+", " ", s).strip()
    return s


def _cell_value(row: Any, col_idx: int) -> str:
    """Cell value from an openpyxl row (0-based column index) as text."""
    try:
        cell = row[col_idx]
    except (IndexError, TypeError):
        return ""
    v = cell.value if cell is not None else None
    if v is None:
        return ""
    if isinstance(v, datetime):
        return format_ledger_date(v.date())
    if isinstance(v, date):
        return format_ledger_date(v)
    if isinstance(v, float) and v == int(v):
        return str(int(v))
    return str(v).strip()


def _row_keyword_count(row: Any, max_cols: int = 40) -> int:
    found = set()
    for c in range(max_cols):
        v = _cell_value(row, c).lower()
        if v in _HEADER_KEYWORDS:
            found.add(v)
    return len(found)


def _detect_header_row(rows: list, max_search: int = 15, min_keywords: int = 2) -> int:
    """Return 0-based row index of the first row that looks like a header."""
    for i, row in enumerate(rows[:max_search]):
        if _row_keyword_count(row) >= min_keywords:
            return i
    return 0


def _column_count(row: Any) -> int:
    """Number of cells up to the last non-empty one."""
    n = 0
    for c in range(60):
        if _cell_value(row, c) != "":
            n = c + 1
    return max(n, 1)


def _headers(header_row: Any) -> list[str]:
    headers: list[str] = []
    for c in range(_column_count(header_row)):
        key = _normalize_header_cell(_cell_value(header_row, c)) or f"Column_{c + 1}"
        base = key
        cnt = 0
        while key in headers:
            cnt += 1
            key = f"{base}_{cnt}"
        headers.append(key)
    return headers


def _load_workbook(source_path: Path) -> Any:
    try:
        import openpyxl
    except ImportError as e:
        raise ImportError("XLSX support requires openpyxl. Install with: pip install openpyxl") from e
    return openpyxl.load_workbook(source_path, read_only=True, data_only=True)


class XlsxSourceAdapter:
    """
    Read .xlsx files as one dict per row, keyed by the header row.

    source_options:
      sheet: 0-based sheet index (int) or sheet name (str). Default: active sheet.
      skip_rows: rows to skip at the top of the sheet. Default: 0.
      header_row: 0-based row index (after skip_rows) used as header when
        auto_detect_header is false.
      auto_detect_header: scan the first 15 rows for the header (default true).
    """

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        wb = _load_workbook(source_path)
        try:
            sheet = self._get_sheet(wb, options)
            rows = list(sheet.iter_rows(min_row=1 + int(options.get("skip_rows", 0)), max_row=100_000))
            if not rows:
                return

            hi = self._header_index(rows, options)
            headers = _headers(rows[hi])
            for row in rows[hi + 1 :]:
                vals = [_cell_value(row, c) for c in range(len(headers))]
                if not any(vals):
                    continue
                yield dict(zip(headers, vals))
        finally:
            wb.close()

    def probe(self, source_path: Path, options: dict[str, Any]) -> SourceProbe:
        wb = _load_workbook(source_path)
        try:
            sheet = self._get_sheet(wb, options)
            rows = list(sheet.iter_rows(min_row=1 + int(options.get("skip_rows", 0)), max_row=500))
            if not rows:
                return SourceProbe(row_count=0, columns=(), sample_rows=())

            hi = self._header_index(rows, options)
            headers = _headers(rows[hi])
            sample = []
            for row in rows[hi + 1 : hi + 6]:
                vals = [_cell_value(row, c) for c in range(len(headers))]
                if any(vals):
                    sample.append(dict(zip(headers, vals)))
            return SourceProbe(
                row_count=len(rows) - hi - 1,
                columns=tuple(headers),
                sample_rows=tuple(sample),
            )
        finally:
            wb.close()

    def _header_index(self, rows: list, options: dict[str, Any]) -> int:
        header_row_idx = options.get("header_row")
        if options.get("auto_detect_header", True):
            return _detect_header_row(rows)
        return int(header_row_idx) if header_row_idx is not None else 0

    def _get_sheet(self, wb: Any, options: dict[str, Any]) -> Any:
        sheet_ref = options.get("sheet")
        if sheet_ref is None:
            return wb.active
        if isinstance(sheet_ref, int):
            return wb.worksheets[sheet_ref]
        return wb[sheet_ref]
