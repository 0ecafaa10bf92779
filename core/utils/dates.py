"""
Date utilities

Ledger dates are calendar dates stored as ISO strings (YYYY-MM-DD).
Timestamps (created_at, audit) are stored in UTC.
"""

from datetime import date, datetime, timezone


def now_utc() -> datetime:
    """Return the current UTC time (timezone aware)

    Shorthand for datetime.now(timezone.utc).
    """
    return datetime.now(timezone.utc)


def today_utc() -> date:
    """Return today's date in UTC"""
    return now_utc().date()


def to_date(value: date | datetime | str | None) -> date | None:
    """Normalize a date-like value

    Args:
        value: date, datetime, ISO string ("2024-01-31" or a full timestamp) or None

    Returns:
        date (None stays None)

    Raises:
        ValueError: string is not an ISO date
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError as e:
        raise ValueError(f"Invalid date: {value!r} (expected YYYY-MM-DD)") from e


def to_iso(value: date | datetime | str | None) -> str | None:
    """Return the YYYY-MM-DD string used in storage"""
    normalized = to_date(value)
    return normalized.isoformat() if normalized else None


def days_between(start: date, end: date) -> int:
    """Whole days from start to end (negative when end is earlier)

    Example:
        >>> days_between(date(2024, 1, 1), date(2024, 2, 15))
        45
    """
    return (end - start).days
