"""Pink's Pulse: sales KPI aggregation for the business dashboard."""

__version__ = "0.1.0"
