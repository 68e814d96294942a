"""
CashbookSettings schema.

The frozen runtime settings object.  YAML files are parsed into it by the
loader; nothing else constructs it from raw data.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from decimal import Decimal

from cashbook_kernel.domain.records import BookSegment


@dataclass(frozen=True)
class CashbookSettings:
    """Runtime settings for the cash book."""

    database_url: str
    default_segment: BookSegment
    duplicate_window_ms: int
    import_duplicate_tolerance: Decimal
    category_priority: tuple[str, ...]
    fee_heads: tuple[str, ...]
    fee_reference_sentinel: str
    fee_category_suffix: str
    fee_notes_prefix: str
    fiscal_years_back: int
    fiscal_years_forward: int
    page_size: int

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))

    def fee_category(self, head: str) -> str:
        """"Adm" -> "Adm Fee"."""
        return f"{head}{self.fee_category_suffix}"
