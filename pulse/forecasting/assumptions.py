from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class ProjectionAssumptions:
    # Volume growth, applied linearly: month k gets base * (1 + growth * (k - 1))
    growth_per_month: float = 0.10
    # Used only when the lookback window has no quotes at all
    default_conversion_rate: float = 0.30
    lookback_days: int = 90
    horizon_months: int = 6

    # Sample-size thresholds for the confidence label
    high_confidence_quotes: int = 100
    medium_confidence_quotes: int = 30


def validate_assumptions(a: ProjectionAssumptions) -> None:
    if not (-0.5 <= a.growth_per_month <= 1.0):
        raise ValueError("monthly growth must be between -50% and 100%")
    if not (0.0 <= a.default_conversion_rate <= 1.0):
        raise ValueError("default conversion rate must be between 0 and 100%")
    if not (30 <= a.lookback_days <= 365):
        raise ValueError("lookback must be between 30 and 365 days")
    if not (1 <= a.horizon_months <= 24):
        raise ValueError("horizon must be between 1 and 24 months")
    if a.medium_confidence_quotes > a.high_confidence_quotes:
        raise ValueError("medium confidence threshold cannot exceed the high threshold")
