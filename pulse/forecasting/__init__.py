"""Forward revenue projections (rough linear forecast).

- assumptions.py: projection knobs and guardrails
- engine.py: trailing-history summary and month-by-month projection
"""
