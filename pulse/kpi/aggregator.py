from __future__ import annotations
import logging
from typing import Any, Dict, List, Sequence

from pulse.calendar.anchor import CalendarAnchor
from pulse.config.env import AggregatorConfig, validate_config
from pulse.forecasting.assumptions import ProjectionAssumptions
from pulse.forecasting.engine import project_months, summarize_history
from pulse.kpi.report import KPIReport
from pulse.kpi.scalars import compute_job_kpis, compute_quote_kpis
from pulse.kpi.series import (
    daily_this_week, otb_by_month, otb_by_week, quarter_value_flow, recent_converted_quotes,
    salesperson_stats, salesperson_stats_this_week, weekly_historical, year_to_date_monthly,
)
from pulse.records.schema import Job, Quote, normalize_job, normalize_quote

logger = logging.getLogger(__name__)


def _require_rows(name: str, rows: Any) -> Sequence[Any]:
    if not isinstance(rows, (list, tuple)):
        raise TypeError(f"{name} must be a list of records, got {type(rows).__name__}")
    return rows


def _data_quality(quotes: List[Quote], jobs: List[Job]) -> Dict[str, int]:
    return {
        "totalQuotes": len(quotes),
        "quotesWithSentDate": sum(1 for q in quotes if q.sent_date is not None),
        "quotesWithUnparsableDates": sum(1 for q in quotes if q.malformed_dates),
        "totalJobs": len(jobs),
        "jobsWithDate": sum(1 for j in jobs if j.date is not None),
        "jobsWithUnparsableDate": sum(1 for j in jobs if j.malformed_dates),
    }


def _anchor_view(a: CalendarAnchor) -> Dict[str, str]:
    return {
        "now": a.now.isoformat(),
        "today": a.today.isoformat(),
        "weekStart": a.week_start.isoformat(),
        "weekEnd": a.week_end.isoformat(),
        "thirtyDaysAgo": a.thirty_days_ago.isoformat(),
        "timezone": str(a.tz),
    }


def compute_kpis(
    quotes: Sequence[Any],
    jobs: Sequence[Any],
    now: Any,
    config: AggregatorConfig | None = None,
    assumptions: ProjectionAssumptions | None = None,
) -> KPIReport:
    """Derive every dashboard KPI from raw quote/job rows.

    Pure and deterministic: ``now`` is resolved once into a CalendarAnchor and
    every window below is measured against it. Malformed rows are excluded or
    counted as zero; a missing/invalid ``now`` or non-list input raises.
    """
    cfg = config or AggregatorConfig()
    validate_config(cfg)
    _require_rows("quotes", quotes)
    _require_rows("jobs", jobs)

    tz = cfg.tz
    anchor = CalendarAnchor.from_now(now, tz)
    logger.debug(
        "KPI anchors: today=%s week=[%s, %s) thirty_days_ago=%s",
        anchor.today, anchor.week_start, anchor.week_end, anchor.thirty_days_ago,
    )

    qs = [normalize_quote(r, tz) for r in quotes]
    js = [normalize_job(r, tz) for r in jobs]
    statuses = cfg.statuses

    k: Dict[str, Any] = {}
    k.update(compute_quote_kpis(qs, anchor, statuses))
    k.update(compute_job_kpis(js, anchor, cfg.recurring_year))

    proj = assumptions or ProjectionAssumptions()
    history = summarize_history(qs, anchor, proj.lookback_days, statuses)

    report = KPIReport(
        **k,
        recurring_year=cfg.recurring_year,
        weekly_historical=weekly_historical(qs, anchor, statuses),
        daily_this_week=daily_this_week(qs, anchor, statuses),
        otb_by_month=otb_by_month(js, anchor),
        otb_by_week=otb_by_week(js, anchor, cfg.otb_weeks),
        monthly_projections=project_months(history, anchor.today, proj),
        salespersons=salesperson_stats(qs, statuses, limit=cfg.salesperson_limit),
        salespersons_this_week=salesperson_stats_this_week(qs, anchor, statuses),
        year_to_date_monthly=year_to_date_monthly(qs, anchor),
        quarter_value_flow=quarter_value_flow(qs, anchor, statuses),
        recent_converted_quotes=recent_converted_quotes(qs, anchor),
        data_quality=_data_quality(qs, js),
        anchors=_anchor_view(anchor),
    )
    logger.info(
        "Computed KPIs for %s from %d quotes and %d jobs (sent today=%d, this week=%d)",
        anchor.today, len(qs), len(js), report.quotes_sent_today, report.quotes_this_week,
    )
    return report
