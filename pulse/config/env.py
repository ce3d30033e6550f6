from __future__ import annotations
import os
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_TIMEZONE = "America/New_York"


@dataclass(frozen=True)
class AggregatorConfig:
    timezone: str = DEFAULT_TIMEZONE
    recurring_year: int = 2026
    otb_weeks: int = 8
    # statuses that count as converted even without a converted_date; empty = date only
    converted_statuses: FrozenSet[str] = field(default_factory=frozenset)
    salesperson_limit: int = 10

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def statuses(self) -> FrozenSet[str]:
        """Converted statuses in the trimmed lower-case form quotes are stored in."""
        return normalize_statuses(self.converted_statuses)


def validate_config(c: AggregatorConfig) -> None:
    try:
        ZoneInfo(c.timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"unknown timezone: {c.timezone!r}") from exc
    if not (1 <= c.otb_weeks <= 26):
        raise ValueError("otb_weeks must be between 1 and 26")
    if not (2000 <= c.recurring_year <= 2100):
        raise ValueError("recurring_year must be between 2000 and 2100")
    if c.salesperson_limit < 1:
        raise ValueError("salesperson_limit must be positive")
    if isinstance(c.converted_statuses, str) or not all(isinstance(s, str) for s in c.converted_statuses):
        raise ValueError("converted_statuses must be a collection of strings")


def normalize_statuses(values: Iterable[str]) -> FrozenSet[str]:
    return frozenset(s.strip().lower() for s in values if s and s.strip())


def _parse_statuses(raw: str) -> FrozenSet[str]:
    return normalize_statuses(raw.split(","))


def get_aggregator_config() -> AggregatorConfig:
    cfg = AggregatorConfig(
        timezone=os.getenv("PULSE_TIMEZONE", DEFAULT_TIMEZONE),
        recurring_year=int(os.getenv("PULSE_RECURRING_YEAR", "2026")),
        otb_weeks=int(os.getenv("PULSE_OTB_WEEKS", "8")),
        converted_statuses=_parse_statuses(os.getenv("PULSE_CONVERTED_STATUSES", "")),
        salesperson_limit=int(os.getenv("PULSE_SALESPERSON_LIMIT", "10")),
    )
    validate_config(cfg)
    return cfg


@dataclass(frozen=True)
class APIConfig:
    api_key: str | None = None


def get_api_config() -> APIConfig:
    return APIConfig(api_key=os.getenv("PULSE_API_KEY") or None)
