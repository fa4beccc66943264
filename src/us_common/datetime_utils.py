"""UTC date/time utilities."""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Return today's date in UTC, the reference for past/future date checks."""
    return utc_now().date()
