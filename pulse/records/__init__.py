"""Input records: fixed-schema normalization of warehouse rows.

- parsing.py: timestamp/amount/name coercion that never raises
- schema.py: Quote and Job records plus the conversion rule
"""
