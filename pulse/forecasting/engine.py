from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, FrozenSet, List

from pulse.calendar.anchor import CalendarAnchor, month_start
from pulse.forecasting.assumptions import ProjectionAssumptions, validate_assumptions
from pulse.records.parsing import ZERO
from pulse.records.schema import Quote, is_converted

CONFIDENCE_LEVELS = ("low", "medium", "high")


@dataclass(frozen=True)
class QuoteHistory:
    quotes: int
    converted: int
    converted_value: Decimal
    lookback_days: int

    @property
    def conversion_rate(self) -> float | None:
        return self.converted / self.quotes if self.quotes else None

    @property
    def avg_converted_value(self) -> Decimal:
        return self.converted_value / self.converted if self.converted else ZERO

    @property
    def monthly_volume(self) -> float:
        return self.quotes * 30.0 / self.lookback_days


def summarize_history(
    quotes: List[Quote], anchor: CalendarAnchor, lookback_days: int,
    statuses: FrozenSet[str] = frozenset(),
) -> QuoteHistory:
    """Trailing-window totals over quotes sent in [today - lookback, today]."""
    first = anchor.days_back(lookback_days)
    recent = [
        q for q in quotes
        if q.sent_date is not None and first <= anchor.local_date(q.sent_date) <= anchor.today
    ]
    converted = [q for q in recent if is_converted(q, statuses)]
    return QuoteHistory(
        quotes=len(recent),
        converted=len(converted),
        converted_value=sum((q.total_dollars for q in converted), ZERO),
        lookback_days=lookback_days,
    )


def _confidence(history: QuoteHistory, k: int, a: ProjectionAssumptions) -> str:
    if history.quotes >= a.high_confidence_quotes:
        level = 2
    elif history.quotes >= a.medium_confidence_quotes:
        level = 1
    else:
        level = 0
    # the far half of the horizon is less certain
    if k > (a.horizon_months + 1) // 2:
        level = max(0, level - 1)
    return CONFIDENCE_LEVELS[level]


def project_months(
    history: QuoteHistory, today: date, assumptions: ProjectionAssumptions | None = None
) -> List[Dict[str, Any]]:
    """Project converted revenue for the months following ``today``'s month.

    This is a rough linear forecast, not a statistical model:
    - volume starts at the trailing monthly quote rate and grows linearly
    - conversion rate and average converted value are held flat at their
      trailing averages (default rate when there is no history)
    - revenue = projected quotes * conversion rate * average converted value
    """
    a = assumptions or ProjectionAssumptions()
    validate_assumptions(a)

    rate = history.conversion_rate
    if rate is None:
        rate = a.default_conversion_rate
    avg_value = float(history.avg_converted_value)
    base = history.monthly_volume

    rows: List[Dict[str, Any]] = []
    for k in range(1, a.horizon_months + 1):
        first = month_start(today, k)
        projected_quotes = max(0.0, base * (1.0 + a.growth_per_month * (k - 1)))
        rows.append({
            "month": first.strftime("%b %Y"),
            "key": first.strftime("%Y-%m"),
            "projectedQuotes": round(projected_quotes, 1),
            "conversionRate": round(rate * 100, 1),
            "avgConvertedValue": round(avg_value, 2),
            "projected": round(projected_quotes * rate * avg_value, 2),
            "confidence": _confidence(history, k, a),
        })
    return rows
