from __future__ import annotations
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, tzinfo
from decimal import Decimal
from typing import Any, Dict, FrozenSet, Optional, Tuple

from pulse.records.parsing import (
    ZERO, clean_text, normalize_name, parse_amount, parse_float, parse_timestamp
)

# canonical field -> accepted source keys, canonical first
QUOTE_FIELDS: Dict[str, Tuple[str, ...]] = {
    "quote_number": ("quote_number", "Quote_Number"),
    "client_name": ("client_name", "Client_Name"),
    "salesperson": ("salesperson", "Salesperson", "SalesPerson"),
    "status": ("status", "Status"),
    "total_dollars": ("total_dollars", "Total_Dollars"),
    "created_at": ("created_at", "Created_At"),
    "sent_date": ("sent_date", "Sent_Date"),
    "converted_date": ("converted_date", "Converted_Date"),
    "days_to_convert": ("days_to_convert", "Days_To_Convert"),
}

JOB_FIELDS: Dict[str, Tuple[str, ...]] = {
    "job_number": ("Job_Number", "job_number"),
    "client_name": ("Client_name", "Client_Name", "client_name"),
    "date": ("Date", "date", "job_date"),
    "value": ("Calculated_Value", "calculated_value"),
    "job_type": ("Job_type", "Job_Type", "job_type"),
    "salesperson": ("SalesPerson", "salesperson", "Salesperson"),
    "date_converted": ("Date_Converted", "date_converted"),
}


@dataclass(frozen=True)
class Quote:
    quote_number: Optional[str] = None
    client_name: Optional[str] = None
    salesperson: Optional[str] = None  # normalized key (trimmed, lower-case)
    salesperson_display: Optional[str] = None
    status: Optional[str] = None
    total_dollars: Decimal = ZERO
    created_at: Optional[datetime] = None
    sent_date: Optional[datetime] = None
    converted_date: Optional[datetime] = None
    days_to_convert: Optional[float] = None
    malformed_dates: int = 0


@dataclass(frozen=True)
class Job:
    job_number: Optional[str] = None
    client_name: Optional[str] = None
    date: Optional[datetime] = None
    value: Decimal = ZERO
    job_type: Optional[str] = None
    salesperson: Optional[str] = None
    date_converted: Optional[datetime] = None
    malformed_dates: int = 0


def _pick(row: Mapping, keys: Tuple[str, ...]) -> Any:
    for k in keys:
        v = row.get(k)
        if v is not None:
            return v
    return None


def _extract(row: Any, fields: Dict[str, Tuple[str, ...]]) -> Dict[str, Any]:
    if not isinstance(row, Mapping):
        return {name: None for name in fields}
    return {name: _pick(row, keys) for name, keys in fields.items()}


def _date_field(raw: Any, tz: tzinfo) -> Tuple[Optional[datetime], int]:
    parsed = parse_timestamp(raw, tz)
    bad = 1 if (raw is not None and raw != "" and parsed is None) else 0
    return parsed, bad


def normalize_quote(row: Any, tz: tzinfo) -> Quote:
    r = _extract(row, QUOTE_FIELDS)
    created, b1 = _date_field(r["created_at"], tz)
    sent, b2 = _date_field(r["sent_date"], tz)
    converted, b3 = _date_field(r["converted_date"], tz)
    status = normalize_name(r["status"])
    return Quote(
        quote_number=clean_text(r["quote_number"]),
        client_name=clean_text(r["client_name"]),
        salesperson=normalize_name(r["salesperson"]),
        salesperson_display=clean_text(r["salesperson"]),
        status=status,
        total_dollars=parse_amount(r["total_dollars"]),
        created_at=created,
        sent_date=sent,
        converted_date=converted,
        days_to_convert=parse_float(r["days_to_convert"]),
        malformed_dates=b1 + b2 + b3,
    )


def normalize_job(row: Any, tz: tzinfo) -> Job:
    r = _extract(row, JOB_FIELDS)
    when, b1 = _date_field(r["date"], tz)
    converted, b2 = _date_field(r["date_converted"], tz)
    jt = clean_text(r["job_type"])
    return Job(
        job_number=clean_text(r["job_number"]),
        client_name=clean_text(r["client_name"]),
        date=when,
        value=parse_amount(r["value"]),
        job_type=jt.upper() if jt else None,
        salesperson=normalize_name(r["salesperson"]),
        date_converted=converted,
        malformed_dates=b1 + b2,
    )


def is_converted(q: Quote, statuses: FrozenSet[str] = frozenset()) -> bool:
    if q.converted_date is not None:
        return True
    return q.status is not None and q.status in statuses
