"""Timestamp helpers — normalize stored datetimes to aware UTC.

Invariants:
    - Naive datetimes are interpreted as UTC (SQLite drops tzinfo on round-trip)
    - Comparisons in core always happen between aware datetimes
"""

from datetime import datetime, timezone


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_strictly_after(value: datetime | None, reference: datetime | None) -> bool:
    """True iff value > reference. A missing reference counts as 'everything is after'."""
    if value is None:
        return False
    if reference is None:
        return True
    return as_utc(value) > as_utc(reference)
