"""
Financial Year Resolver.

The financial year runs from 1 April to 31 March and is labelled by its two
two-digit years joined by a hyphen: 15/04/25 and 10/02/26 are both "25-26".
Year halves wrap modulo 100, so April 2099 belongs to "99-00".

Pure functions; "now" comes from an injected Clock.
"""

from __future__ import annotations

import re
from datetime import date

from cashbook_kernel.domain.clock import Clock
from cashbook_kernel.domain.ledger_dates import CENTURY, coerce_ledger_date
from cashbook_kernel.exceptions import InvalidFiscalYearError

FISCAL_YEAR_START_MONTH = 4

_LABEL = re.compile(r"^(\d{2})-(\d{2})$")


def _label(start_yy: int) -> str:
    return f"{start_yy % 100:02d}-{(start_yy + 1) % 100:02d}"


def fiscal_year_start(value: date) -> int:
    """Calendar year (four digits) in which the fiscal year of ``value`` starts."""
    if value.month < FISCAL_YEAR_START_MONTH:
        return value.year - 1
    return value.year


def resolve_fiscal_year(value: date | str | None) -> str | None:
    """
    Map a calendar date to its fiscal year label.

    Accepts a ``date`` or a ``dd/mm/yy`` string.  Strings that are not valid
    ``dd/mm/yy`` dates yield None rather than a guess.
    """
    parsed = coerce_ledger_date(value)
    if parsed is None:
        return None
    return _label(fiscal_year_start(parsed))


def parse_fiscal_year(label: str) -> int:
    """
    Return the two-digit start year of a label.

    Raises:
        InvalidFiscalYearError: not ``YY-YY`` or the halves are not consecutive.
    """
    match = _LABEL.match(label or "")
    if not match:
        raise InvalidFiscalYearError(label)
    start, end = int(match.group(1)), int(match.group(2))
    if (start + 1) % 100 != end:
        raise InvalidFiscalYearError(label)
    return start


def is_fiscal_year_label(label: str) -> bool:
    try:
        parse_fiscal_year(label)
    except InvalidFiscalYearError:
        return False
    return True


def current_fiscal_year(clock: Clock) -> str:
    return _label(fiscal_year_start(clock.now().date()))


def fiscal_year_options(clock: Clock, years_back: int = 5, years_forward: int = 2) -> list[str]:
    """Labels from ``years_back`` before to ``years_forward`` after the current one, oldest first."""
    current = fiscal_year_start(clock.now().date())
    return [_label(current + offset) for offset in range(-years_back, years_forward + 1)]


def fiscal_year_display(label: str) -> str:
    """"25-26" -> "2025-26"."""
    start = parse_fiscal_year(label)
    return f"{CENTURY + start}-{label[3:]}"


def fiscal_year_date_range(label: str) -> tuple[date, date]:
    """First and last day of the fiscal year, inclusive."""
    start_year = CENTURY + parse_fiscal_year(label)
    return (
        date(start_year, FISCAL_YEAR_START_MONTH, 1),
        date(start_year + 1, FISCAL_YEAR_START_MONTH - 1, 31),
    )


def describe_fiscal_year(label: str) -> str:
    """"25-26" -> "01/04/2025 to 31/03/2026"."""
    first, last = fiscal_year_date_range(label)
    return f"{first:%d/%m/%Y} to {last:%d/%m/%Y}"
