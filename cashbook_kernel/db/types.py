"""
Module: cashbook_kernel.db.types
Responsibility: Money helpers shared by the domain, the importers and the
    renderers.

Invariants enforced:
    - No floats for money anywhere.  Amounts are Decimal end to end;
      accumulation is exact and rounding to two places happens only at the
      display boundary through round_money().
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

DISPLAY_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP

ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """
    Convert an amount from the wire into an exact Decimal.

    Strings may carry thousands separators ("1,250.50").  Floats go through
    ``str()`` so 0.1 stays 0.1 instead of its binary expansion.

    Raises:
        ValueError: value is empty, not numeric, or not finite.
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise ValueError(f"Not an amount: {value!r}")
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    else:
        text = str(value if value is not None else "").replace(",", "").strip()
        if not text:
            raise ValueError("Empty amount")
        try:
            result = Decimal(text)
        except InvalidOperation as exc:
            raise ValueError(f"Not an amount: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Not a finite amount: {value!r}")
    return result


def round_money(value: Decimal, decimal_places: int = DISPLAY_DECIMAL_PLACES) -> Decimal:
    """Round for display.  The only sanctioned rounding function."""
    quantizer = Decimal(10) ** -decimal_places
    return value.quantize(quantizer, rounding=DEFAULT_ROUNDING)


def format_money(value: Decimal) -> str:
    """Render an amount with exactly two fraction digits ("1250.50")."""
    return f"{round_money(value):.2f}"
