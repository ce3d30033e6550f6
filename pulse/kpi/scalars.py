from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, FrozenSet, Iterable, List

from pulse.calendar.anchor import CalendarAnchor
from pulse.records.parsing import ZERO
from pulse.records.schema import Job, Quote, is_converted

TENTH = Decimal("0.1")
RECURRING = "RECURRING"


def round_1(value: Decimal) -> float:
    return float(value.quantize(TENTH, rounding=ROUND_HALF_UP))


def safe_rate(num: int, den: int) -> float:
    """Percentage num/den*100 to one decimal; 0.0 when den is 0."""
    if not den:
        return 0.0
    return round_1(Decimal(num) * 100 / Decimal(den))


def sum_dollars(quotes: Iterable[Quote]) -> Decimal:
    return sum((q.total_dollars for q in quotes), ZERO)


def sum_value(jobs: Iterable[Job]) -> Decimal:
    return sum((j.value for j in jobs), ZERO)


def compute_quote_kpis(
    quotes: List[Quote], anchor: CalendarAnchor, statuses: FrozenSet[str] = frozenset()
) -> Dict[str, Any]:
    sent_today = [q for q in quotes if anchor.is_today(q.sent_date)]
    converted_today = [q for q in quotes if anchor.is_today(q.converted_date)]
    converted_week = [q for q in quotes if anchor.is_this_week(q.converted_date)]
    sent_week = [q for q in quotes if anchor.is_this_week(q.sent_date)]
    sent_last_week = [q for q in quotes if anchor.is_last_week(q.sent_date)]
    converted_last_week = [q for q in sent_last_week if is_converted(q, statuses)]
    sent_30 = [q for q in quotes if anchor.is_last_30_days(q.sent_date)]
    converted_30 = [q for q in sent_30 if is_converted(q, statuses)]

    return {
        "quotes_sent_today": len(sent_today),
        "converted_today": len(converted_today),
        "converted_amount_today": sum_dollars(converted_today),
        "converted_this_week": len(converted_week),
        "converted_amount_this_week": sum_dollars(converted_week),
        "quotes_this_week": len(sent_week),
        "cvr_this_week": safe_rate(len(converted_week), len(sent_week)),
        "quotes_last_week": len(sent_last_week),
        "converted_last_week": len(converted_last_week),
        "cvr_last_week": safe_rate(len(converted_last_week), len(sent_last_week)),
        "quotes_last_30_days": len(sent_30),
        "converted_last_30_days": len(converted_30),
        "cvr_30_day": safe_rate(len(converted_30), len(sent_30)),
        "avg_qpd_30_day": round_1(Decimal(len(sent_30)) / 30),
    }


def compute_job_kpis(jobs: List[Job], anchor: CalendarAnchor, recurring_year: int) -> Dict[str, Any]:
    recurring = [
        j for j in jobs
        if j.job_type == RECURRING and j.date is not None and j.date.year == recurring_year
    ]
    return {
        "recurring_revenue": sum_value(recurring),
        "next_month_otb": sum_value(j for j in jobs if anchor.is_next_month(j.date)),
        "this_month_otb": sum_value(j for j in jobs if anchor.is_this_month(j.date)),
        "this_week_otb": sum_value(j for j in jobs if anchor.is_this_week(j.date)),
    }
