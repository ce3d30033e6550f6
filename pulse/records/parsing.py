from __future__ import annotations
import math
import re
from datetime import date, datetime, time, tzinfo
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from dateutil import parser as date_parser

ZERO = Decimal("0")
# amounts at or above 10**16 dollars are treated as corrupt
MAX_AMOUNT_EXPONENT = 15

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
# warehouse timestamps always lead with a full calendar date
_DATE_PREFIX = re.compile(r"^\d{4}-\d{1,2}-\d{1,2}")


def _localize(dt: datetime, tz: tzinfo) -> Optional[datetime]:
    try:
        if dt.tzinfo is None:
            return dt.replace(tzinfo=tz)
        return dt.astimezone(tz)
    except (OverflowError, ValueError):
        return None


def parse_timestamp(value: Any, tz: tzinfo) -> Optional[datetime]:
    """Parse a warehouse date/timestamp into an aware datetime in ``tz``.

    - None, empty strings, unsupported types and unparsable text -> None
    - date-only values ('YYYY-MM-DD' or ``date``) -> midnight in ``tz``
    - naive datetimes are wall-clock times in ``tz``; aware ones are converted
    - BigQuery wrappers like {"value": "2025-06-27"} are unwrapped
    - '2025-06-27 17:05:33.000000 UTC' style strings are parsed with dateutil
    """
    if value is None:
        return None
    if isinstance(value, dict):
        return parse_timestamp(value.get("value"), tz)
    if isinstance(value, datetime):
        return _localize(value, tz)
    if isinstance(value, date):
        return datetime.combine(value, time(), tzinfo=tz)
    if not isinstance(value, str):
        return None
    s = value.strip()
    if not s or not _DATE_PREFIX.match(s):
        return None
    if _DATE_ONLY.match(s):
        try:
            return datetime.combine(date.fromisoformat(s), time(), tzinfo=tz)
        except ValueError:
            return None
    try:
        dt = date_parser.isoparse(s)
    except ValueError:
        try:
            dt = date_parser.parse(s)
        except (ValueError, OverflowError):
            return None
    return _localize(dt, tz)


def parse_amount(value: Any) -> Decimal:
    """Coerce a currency value to Decimal; anything unusable counts as 0."""
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, (int, float)):
        try:
            d = Decimal(str(value))
        except ValueError:
            # ints past the interpreter's str() digit limit
            return ZERO
    elif isinstance(value, str):
        try:
            d = Decimal(value.strip().replace(",", "").lstrip("$"))
        except InvalidOperation:
            return ZERO
    else:
        return ZERO
    if not d.is_finite() or d.adjusted() > MAX_AMOUNT_EXPONENT:
        return ZERO
    return d


def parse_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def normalize_name(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s.lower() if s else None


def clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None
