from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List

from pulse.exports.formatting import currency_number, format_currency, format_percent, series_amounts

CURRENCY_FIELDS = {
    "convertedAmountToday": "converted_amount_today",
    "convertedAmountThisWeek": "converted_amount_this_week",
    "recurringRevenue": "recurring_revenue",
    "nextMonthOTB": "next_month_otb",
    "thisMonthOTB": "this_month_otb",
    "thisWeekOTB": "this_week_otb",
}

RATE_FIELDS = {
    "cvrThisWeek": "cvr_this_week",
    "cvrLastWeek": "cvr_last_week",
    "cvr30Day": "cvr_30_day",
}

SCALAR_FIELDS = {
    "quotesSentToday": "quotes_sent_today",
    "convertedToday": "converted_today",
    "convertedThisWeek": "converted_this_week",
    "quotesThisWeek": "quotes_this_week",
    "quotesLastWeek": "quotes_last_week",
    "convertedLastWeek": "converted_last_week",
    "quotesLast30Days": "quotes_last_30_days",
    "convertedLast30Days": "converted_last_30_days",
    "avgQPD30Day": "avg_qpd_30_day",
    "recurringYear": "recurring_year",
}


@dataclass(frozen=True)
class KPIReport:
    """Raw KPI values. Currency stays Decimal until ``to_dict``."""

    quotes_sent_today: int
    converted_today: int
    converted_amount_today: Decimal
    converted_this_week: int
    converted_amount_this_week: Decimal
    quotes_this_week: int
    cvr_this_week: float
    quotes_last_week: int
    converted_last_week: int
    cvr_last_week: float
    quotes_last_30_days: int
    converted_last_30_days: int
    cvr_30_day: float
    avg_qpd_30_day: float
    recurring_revenue: Decimal
    recurring_year: int
    next_month_otb: Decimal
    this_month_otb: Decimal
    this_week_otb: Decimal
    weekly_historical: List[Dict[str, Any]] = field(default_factory=list)
    daily_this_week: List[Dict[str, Any]] = field(default_factory=list)
    otb_by_month: List[Dict[str, Any]] = field(default_factory=list)
    otb_by_week: List[Dict[str, Any]] = field(default_factory=list)
    monthly_projections: List[Dict[str, Any]] = field(default_factory=list)
    salespersons: List[Dict[str, Any]] = field(default_factory=list)
    salespersons_this_week: List[Dict[str, Any]] = field(default_factory=list)
    year_to_date_monthly: List[Dict[str, Any]] = field(default_factory=list)
    quarter_value_flow: Dict[str, Any] = field(default_factory=dict)
    recent_converted_quotes: List[Dict[str, Any]] = field(default_factory=list)
    data_quality: Dict[str, int] = field(default_factory=dict)
    anchors: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready view: raw numbers under metric keys, strings under ``display``."""
        out: Dict[str, Any] = {}
        for key, attr in SCALAR_FIELDS.items():
            out[key] = getattr(self, attr)
        for key, attr in RATE_FIELDS.items():
            out[key] = getattr(self, attr)
        for key, attr in CURRENCY_FIELDS.items():
            out[key] = currency_number(getattr(self, attr))
        if self.recurring_year == 2026:
            out["recurringRevenue2026"] = out["recurringRevenue"]

        out["weeklyHistorical"] = [dict(r) for r in self.weekly_historical]
        out["dailyThisWeek"] = [dict(r) for r in self.daily_this_week]
        out["otbByMonth"] = series_amounts(self.otb_by_month, "amount")
        out["otbByWeek"] = series_amounts(self.otb_by_week, "amount")
        out["monthlyProjections"] = [dict(r) for r in self.monthly_projections]
        out["salespersons"] = series_amounts(self.salespersons, "valueSent", "valueConverted")
        out["salespersonsThisWeek"] = series_amounts(
            self.salespersons_this_week, "valueSent", "valueConverted"
        )
        out["yearToDateMonthly"] = [dict(r) for r in self.year_to_date_monthly]
        flow = dict(self.quarter_value_flow)
        flow["steps"] = series_amounts(flow.get("steps", []), "value", "cumulative")
        out["quarterValueFlow"] = flow
        out["recentConvertedQuotes"] = series_amounts(self.recent_converted_quotes, "amount")
        out["dataQuality"] = dict(self.data_quality)
        out["anchors"] = dict(self.anchors)

        display: Dict[str, str] = {}
        for key, attr in CURRENCY_FIELDS.items():
            display[key] = format_currency(getattr(self, attr))
        for key, attr in RATE_FIELDS.items():
            display[key] = format_percent(getattr(self, attr))
        out["display"] = display
        return out
