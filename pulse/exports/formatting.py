from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List

CENT = Decimal("0.01")
DOLLAR = Decimal("1")


def format_currency(amount: Decimal | float | int) -> str:
    """Whole dollars, thousands separated: Decimal('1234.5') -> '$1,235'."""
    d = Decimal(str(amount)).quantize(DOLLAR, rounding=ROUND_HALF_UP)
    sign = "-" if d < 0 else ""
    return f"{sign}${abs(d):,.0f}"


def format_percent(rate: float) -> str:
    return f"{rate:.1f}%"


def currency_number(amount: Decimal) -> float:
    return float(amount.quantize(CENT, rounding=ROUND_HALF_UP))


def series_amounts(rows: List[Dict[str, Any]], *keys: str) -> List[Dict[str, Any]]:
    """Copy series rows, turning Decimal amounts under ``keys`` into JSON numbers."""
    out: List[Dict[str, Any]] = []
    for r in rows:
        o = dict(r)
        for k in keys:
            if isinstance(o.get(k), Decimal):
                o[k] = currency_number(o[k])
        out.append(o)
    return out
