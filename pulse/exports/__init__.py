"""Serialization boundary for the KPI report.

- formatting.py: '$1,235' / '12.5%' display strings and JSON-safe numbers
"""
