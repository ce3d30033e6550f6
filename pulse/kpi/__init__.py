"""KPI aggregation.

- aggregator.py: compute_kpis entry point
- scalars.py: counts, rates and currency sums over day/week/30-day/month windows
- series.py: weekly history, daily week view, OTB buckets, salesperson tables
- report.py: KPIReport and its JSON view
"""

from .aggregator import compute_kpis
from .report import KPIReport

__all__ = ["compute_kpis", "KPIReport"]
