"""
CSV source adapter.

Uses csv.DictReader. Configurable: delimiter, encoding, quoting, skip_rows.
Handles BOM via utf-8-sig when encoding is utf-8. Streams rows.

Rows whose field count differs from the header are skipped and logged at
WARNING, never raised: exports often end in blank or partial rows.
"""

from __future__ import annotations

import csv
from collections.abc import Iterable
from itertools import chain
from pathlib import Path
from typing import Any, Iterator

from cashbook_ingestion.adapters.base import SourceProbe
from cashbook_kernel.logging_config import get_logger

logger = get_logger("ingestion.csv_adapter")

_QUOTING = {
    "minimal": csv.QUOTE_MINIMAL,
    "all": csv.QUOTE_ALL,
    "nonnumeric": csv.QUOTE_NONNUMERIC,
    "none": csv.QUOTE_NONE,
}


def _get_encoding(options: dict[str, Any]) -> str:
    enc = options.get("encoding", "utf-8")
    if enc.lower() == "utf-8":
        return "utf-8-sig"  # Strip BOM if present
    return enc


def _get_quoting(options: dict[str, Any]) -> int:
    q = options.get("quoting", "minimal")
    if isinstance(q, int):
        return q
    return _QUOTING.get(str(q).lower(), csv.QUOTE_MINIMAL)


def _clean_header(name: str | None) -> str:
    return (name or "").replace("\ufeff", "").strip()


def _row_shape_ok(row: dict[str | None, Any]) -> bool:
    # DictReader files surplus fields under None and pads short rows with None
    if None in row:
        return False
    return all(value is not None for value in row.values())


class CsvSourceAdapter:
    """Read CSV files as one dict per row. Streams; does not load entire file."""

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        encoding = _get_encoding(options)
        skip_rows = int(options.get("skip_rows", 0))

        with source_path.open("r", encoding=encoding, newline="") as f:
            for _ in range(skip_rows):
                next(f, None)
            yield from self.read_lines(f, options, source_name=source_path.name)

    def read_text(self, text: str, options: dict[str, Any] | None = None) -> Iterator[dict[str, Any]]:
        """Same as ``read`` over text already in memory (uploads, tests)."""
        options = options or {}
        lines = text.lstrip("\ufeff").splitlines(keepends=True)
        yield from self.read_lines(lines[int(options.get("skip_rows", 0)):], options)

    def read_lines(
        self,
        lines: Iterable[str],
        options: dict[str, Any],
        source_name: str = "<text>",
    ) -> Iterator[dict[str, Any]]:
        delimiter = options.get("delimiter", ",")
        quoting = _get_quoting(options)

        reader = csv.DictReader(lines, delimiter=delimiter, quoting=quoting)
        if reader.fieldnames is None:
            return
        reader.fieldnames = [_clean_header(name) for name in reader.fieldnames]

        for row in reader:
            if not _row_shape_ok(row):
                logger.warning(
                    "csv_row_skipped",
                    extra={
                        "source": source_name,
                        "line": reader.line_num,
                        "reason": "field_count_mismatch",
                        "expected_fields": len(reader.fieldnames),
                    },
                )
                continue
            yield {key: value.strip() if isinstance(value, str) else value for key, value in row.items()}

    def probe(self, source_path: Path, options: dict[str, Any]) -> SourceProbe:
        encoding = _get_encoding(options)
        delimiter = options.get("delimiter", ",")
        sample_size = 5

        sample: list[dict[str, Any]] = []
        count = 0
        with source_path.open("r", encoding=encoding, newline="") as f:
            for _ in range(int(options.get("skip_rows", 0))):
                next(f, None)
            first = next(f, None)
            if first is None:
                return SourceProbe(
                    row_count=0,
                    columns=(),
                    sample_rows=(),
                    encoding=encoding,
                    detected_delimiter=delimiter,
                )
            header = next(csv.reader([first], delimiter=delimiter), [])
            columns = tuple(_clean_header(h) for h in header)
            for row in self.read_lines(chain([first], f), options, source_name=source_path.name):
                if len(sample) < sample_size:
                    sample.append(row)
                count += 1

        return SourceProbe(
            row_count=count,
            columns=columns,
            sample_rows=tuple(sample),
            encoding=encoding,
            detected_delimiter=delimiter,
        )
