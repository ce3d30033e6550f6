from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any, Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def resolve_now(now: Any, tz: tzinfo) -> datetime:
    """Validate the caller-supplied reference time and express it in ``tz``.

    Unlike row dates, a bad ``now`` is a programming error and raises.
    """
    if now is None:
        raise ValueError("now is required")
    if isinstance(now, str):
        try:
            now = date_parser.isoparse(now.strip())
        except ValueError as exc:
            raise ValueError(f"now is not an ISO-8601 timestamp: {now!r}") from exc
    if not isinstance(now, datetime):
        raise TypeError(f"now must be a datetime or ISO-8601 string, got {type(now).__name__}")
    if now.tzinfo is None:
        return now.replace(tzinfo=tz)
    return now.astimezone(tz)


def midnight(d: date, tz: tzinfo) -> datetime:
    return datetime.combine(d, time(), tzinfo=tz)


def month_start(d: date, offset: int = 0) -> date:
    return date(d.year, d.month, 1) + relativedelta(months=offset)


@dataclass(frozen=True)
class CalendarAnchor:
    """Every date boundary used by the aggregator, resolved once per call."""

    tz: tzinfo
    now: datetime
    today: date
    week_start: datetime
    week_end: datetime
    last_week_start: datetime
    thirty_days_ago: date
    month_start: datetime
    next_month_start: datetime
    month_after_next_start: datetime

    @classmethod
    def from_now(cls, now: Any, tz: tzinfo) -> "CalendarAnchor":
        current = resolve_now(now, tz)
        today = current.date()
        # isoweekday: Mon=1..Sun=7, so Sunday maps to 0 days back
        sunday = today - timedelta(days=today.isoweekday() % 7)
        week_start = midnight(sunday, tz)
        return cls(
            tz=tz,
            now=current,
            today=today,
            week_start=week_start,
            week_end=midnight(sunday + timedelta(days=7), tz),
            last_week_start=midnight(sunday - timedelta(days=7), tz),
            thirty_days_ago=today - timedelta(days=30),
            month_start=midnight(month_start(today), tz),
            next_month_start=midnight(month_start(today, 1), tz),
            month_after_next_start=midnight(month_start(today, 2), tz),
        )

    def local_date(self, d: datetime) -> date:
        return d.astimezone(self.tz).date()

    def is_today(self, d: Optional[datetime]) -> bool:
        return d is not None and self.local_date(d) == self.today

    def is_this_week(self, d: Optional[datetime]) -> bool:
        return in_range(d, self.week_start, self.week_end)

    def is_last_week(self, d: Optional[datetime]) -> bool:
        return in_range(d, self.last_week_start, self.week_start)

    def is_last_30_days(self, d: Optional[datetime]) -> bool:
        if d is None:
            return False
        return self.thirty_days_ago <= self.local_date(d) <= self.today

    def is_this_month(self, d: Optional[datetime]) -> bool:
        return in_range(d, self.month_start, self.next_month_start)

    def is_next_month(self, d: Optional[datetime]) -> bool:
        return in_range(d, self.next_month_start, self.month_after_next_start)

    def days_back(self, days: int) -> date:
        return self.today - timedelta(days=days)


def in_range(d: Optional[datetime], start: datetime, end: datetime) -> bool:
    """Half-open ``start <= d < end``; None is never in range."""
    return d is not None and start <= d < end
