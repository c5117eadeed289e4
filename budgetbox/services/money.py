"""Money / rounding / display helpers.

Centralized so insights, savings projections and routers use identical
rounding and masking semantics.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

MASKED_VALUE = "****"
MASKED_PERCENT = "**%"


def round2(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def parse_percent(raw: Optional[str]) -> Optional[float]:
    """Parse a user-entered percent string ("5", " 4.5 ", "3%").

    Returns None when the text is absent, blank or not a number; callers treat
    that the same as "not provided".
    """
    if raw is None:
        return None
    text = raw.strip().rstrip("%").strip()
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if value != value or value in (float("inf"), float("-inf")):
        return None
    return value


def format_money(amount: float, symbol: str) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def format_percent(value: float) -> str:
    # Whole-number display truncates toward zero
    return f"{int(value)}%"


def round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
