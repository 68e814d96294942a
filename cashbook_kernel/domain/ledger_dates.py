"""
Ledger dates -- the ``dd/mm/yy`` wire format and the import date formats.

Dates are plain calendar dates (no time zone).  The two-digit year always
means 20yy.  Strings are parsed once at the boundary; everything past it
works on ``datetime.date``.
"""

from __future__ import annotations

import re
from datetime import date

CENTURY = 2000

_LEDGER_DATE = re.compile(r"^(\d{2})/(\d{2})/(\d{2})$")
_NUMERIC_DASHED = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{2})$")
_MONTH_NAME_DASHED = re.compile(r"^(\d{1,2})-([A-Za-z]{3})-(\d{2})$")

MONTH_ABBREVIATIONS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}


def _build(day: int, month: int, yy: int) -> date | None:
    try:
        return date(CENTURY + yy, month, day)
    except ValueError:
        return None


def parse_ledger_date(value: str | None) -> date | None:
    """
    Parse ``dd/mm/yy``.  Returns None for anything else, including impossible
    calendar dates such as ``31/02/25``.
    """
    if not isinstance(value, str):
        return None
    match = _LEDGER_DATE.match(value.strip())
    if not match:
        return None
    day, month, yy = (int(g) for g in match.groups())
    return _build(day, month, yy)


def format_ledger_date(value: date) -> str:
    """Render a date as ``dd/mm/yy``."""
    return f"{value.day:02d}/{value.month:02d}/{value.year % 100:02d}"


def parse_import_date(value: str | None) -> date | None:
    """
    Parse a date cell from an import file.

    Accepted: ``dd/mm/yy``, ``dd-Mon-yy`` (fee and cash book exports, month
    name case-insensitive) and ``dd-mm-yy`` (salary sheets).
    """
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None

    parsed = parse_ledger_date(text)
    if parsed is not None:
        return parsed

    match = _MONTH_NAME_DASHED.match(text)
    if match:
        month = MONTH_ABBREVIATIONS.get(match.group(2).lower())
        if month is None:
            return None
        return _build(int(match.group(1)), month, int(match.group(3)))

    match = _NUMERIC_DASHED.match(text)
    if match:
        day, month, yy = (int(g) for g in match.groups())
        return _build(day, month, yy)

    return None


def coerce_ledger_date(value: date | str | None) -> date | None:
    """Accept either a ``date`` or a ``dd/mm/yy`` string."""
    if isinstance(value, date):
        return value
    return parse_ledger_date(value)
