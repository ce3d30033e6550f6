from __future__ import annotations
from datetime import date, timedelta
from typing import Any, Dict, FrozenSet, List, Optional

from pulse.calendar.anchor import CalendarAnchor, in_range, midnight, month_start
from pulse.kpi.scalars import safe_rate, sum_dollars, sum_value
from pulse.records.parsing import ZERO
from pulse.records.schema import Job, Quote, is_converted

HISTORY_WEEKS = 12
OTB_MONTHS = 6
DAY_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
UNKNOWN_SALESPERSON = "unknown"


def weekly_historical(
    quotes: List[Quote], anchor: CalendarAnchor, statuses: FrozenSet[str] = frozenset(),
    weeks: int = HISTORY_WEEKS,
) -> List[Dict[str, Any]]:
    """Rolling 7-day buckets ending at ``now``, oldest first."""
    out: List[Dict[str, Any]] = []
    for i in range(weeks - 1, -1, -1):
        end = anchor.now - timedelta(days=7 * i)
        start = end - timedelta(days=7)
        sent = [q for q in quotes if in_range(q.sent_date, start, end)]
        converted = sum(1 for q in sent if is_converted(q, statuses))
        out.append({
            "weekStart": start.date().isoformat(),
            "weekEnding": end.date().isoformat(),
            "sent": len(sent),
            "converted": converted,
            "cvr": safe_rate(converted, len(sent)),
        })
    return out


def daily_this_week(
    quotes: List[Quote], anchor: CalendarAnchor, statuses: FrozenSet[str] = frozenset()
) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    sunday = anchor.week_start.date()
    for offset in range(7):
        day = sunday + timedelta(days=offset)
        start, end = midnight(day, anchor.tz), midnight(day + timedelta(days=1), anchor.tz)
        sent = [q for q in quotes if in_range(q.sent_date, start, end)]
        sent_converted = sum(1 for q in sent if is_converted(q, statuses))
        converted_on_day = sum(1 for q in quotes if in_range(q.converted_date, start, end))
        out.append({
            "date": day.isoformat(),
            "label": DAY_LABELS[offset],
            "sent": len(sent),
            "converted": converted_on_day,
            "cvr": safe_rate(sent_converted, len(sent)),
        })
    return out


def otb_by_month(jobs: List[Job], anchor: CalendarAnchor, months: int = OTB_MONTHS) -> List[Dict[str, Any]]:
    """Job value per calendar month: the current month then the next ``months - 1``."""
    out: List[Dict[str, Any]] = []
    for k in range(months):
        first = month_start(anchor.today, k)
        start = midnight(first, anchor.tz)
        end = midnight(month_start(anchor.today, k + 1), anchor.tz)
        out.append({
            "month": first.strftime("%b %Y"),
            "key": first.strftime("%Y-%m"),
            "amount": sum_value(j for j in jobs if in_range(j.date, start, end)),
        })
    return out


def otb_by_week(jobs: List[Job], anchor: CalendarAnchor, weeks: int) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    sunday = anchor.week_start.date()
    for k in range(weeks):
        first = sunday + timedelta(days=7 * k)
        start = midnight(first, anchor.tz)
        end = midnight(first + timedelta(days=7), anchor.tz)
        out.append({
            "weekStart": first.isoformat(),
            "amount": sum_value(j for j in jobs if in_range(j.date, start, end)),
        })
    return out


def salesperson_stats(
    quotes: List[Quote], statuses: FrozenSet[str] = frozenset(), limit: Optional[int] = None
) -> List[Dict[str, Any]]:
    """Per-salesperson totals over quotes with a sent date.

    Names are grouped case/whitespace-insensitively; the first spelling seen is
    kept for display. Sorted by converted value, highest first.
    """
    groups: Dict[str, Dict[str, Any]] = {}
    for q in quotes:
        if q.sent_date is None:
            continue
        key = q.salesperson or UNKNOWN_SALESPERSON
        g = groups.get(key)
        if g is None:
            g = groups[key] = {
                "name": q.salesperson_display or "Unknown",
                "quotesSent": 0,
                "quotesConverted": 0,
                "valueSent": ZERO,
                "valueConverted": ZERO,
            }
        g["quotesSent"] += 1
        g["valueSent"] += q.total_dollars
        if is_converted(q, statuses):
            g["quotesConverted"] += 1
            g["valueConverted"] += q.total_dollars

    rows = []
    for g in groups.values():
        rows.append({**g, "conversionRate": safe_rate(g["quotesConverted"], g["quotesSent"])})
    rows.sort(key=lambda r: (-r["valueConverted"], r["name"].lower()))
    return rows[:limit] if limit else rows


def salesperson_stats_this_week(
    quotes: List[Quote], anchor: CalendarAnchor, statuses: FrozenSet[str] = frozenset()
) -> List[Dict[str, Any]]:
    return salesperson_stats([q for q in quotes if anchor.is_this_week(q.sent_date)], statuses)


def year_to_date_monthly(quotes: List[Quote], anchor: CalendarAnchor) -> List[Dict[str, Any]]:
    """Quotes sent and converted per calendar month, January through the current month.

    ``converted`` counts conversions dated in the month, whichever month the
    quote was sent in, so ``cvr`` can exceed 100 in a busy closing month.
    """
    out: List[Dict[str, Any]] = []
    jan = date(anchor.today.year, 1, 1)
    for k in range(anchor.today.month):
        first = month_start(jan, k)
        start = midnight(first, anchor.tz)
        end = midnight(month_start(jan, k + 1), anchor.tz)
        sent = sum(1 for q in quotes if in_range(q.sent_date, start, end))
        converted = sum(1 for q in quotes if in_range(q.converted_date, start, end))
        out.append({
            "month": first.strftime("%b"),
            "key": first.strftime("%Y-%m"),
            "sent": sent,
            "converted": converted,
            "cvr": safe_rate(converted, sent),
        })
    return out


def quarter_value_flow(
    quotes: List[Quote], anchor: CalendarAnchor, statuses: FrozenSet[str] = frozenset()
) -> Dict[str, Any]:
    """Waterfall of quote value sent this quarter: sent, minus not converted, leaves converted."""
    quarter = (anchor.today.month - 1) // 3 + 1
    first = date(anchor.today.year, 3 * quarter - 2, 1)
    start = midnight(first, anchor.tz)
    end = midnight(month_start(first, 3), anchor.tz)
    sent = [q for q in quotes if in_range(q.sent_date, start, end)]
    converted = [q for q in sent if is_converted(q, statuses)]
    value_sent = sum_dollars(sent)
    value_converted = sum_dollars(converted)
    return {
        "quarter": f"Q{quarter} {first.year}",
        "quarterStart": first.isoformat(),
        "quotesSent": len(sent),
        "quotesConverted": len(converted),
        "conversionRate": safe_rate(len(converted), len(sent)),
        "steps": [
            {"label": f"Q{quarter} Start", "value": ZERO, "cumulative": ZERO},
            {"label": "Quotes Sent", "value": value_sent, "cumulative": value_sent},
            {"label": "Not Converted", "value": value_converted - value_sent, "cumulative": value_converted},
            {"label": "Converted", "value": value_converted, "cumulative": value_converted},
        ],
    }


def recent_converted_quotes(
    quotes: List[Quote], anchor: CalendarAnchor, limit: Optional[int] = None
) -> List[Dict[str, Any]]:
    """Quotes converted this week, newest conversion first."""
    rows = [q for q in quotes if anchor.is_this_week(q.converted_date)]
    rows.sort(key=lambda q: (q.converted_date, q.quote_number or ""), reverse=True)
    return [
        {
            "quoteNumber": q.quote_number,
            "clientName": q.client_name,
            "salesperson": q.salesperson_display,
            "amount": q.total_dollars,
            "status": q.status,
            "dateConverted": anchor.local_date(q.converted_date).isoformat(),
        }
        for q in rows[:limit]
    ]
