"""Calendar anchoring: reference-timezone 'today', Sunday weeks, month ranges."""
