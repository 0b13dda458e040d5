"""
Datetime utilities.

Provides timezone-aware datetime functions.
"""

from datetime import UTC, date, datetime, time, timedelta


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        Current datetime in UTC with timezone awareness
    """
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """
    Normalize datetime to aware UTC.

    Naive values (e.g. read back from SQLite) are taken as UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def first_day_of_month(value: datetime | date) -> date:
    """First calendar day of the month containing value."""
    if isinstance(value, datetime):
        value = ensure_utc(value).date()
    return value.replace(day=1)


def end_of_day(day: date) -> datetime:
    """Exclusive upper bound of a UTC calendar day (next midnight)."""
    return datetime.combine(day + timedelta(days=1), time.min, tzinfo=UTC)


def business_weekday(day: date) -> int:
    """
    ISO weekday with the weekend folded onto Monday.

    Returns 1..5 for Monday..Friday; Saturday and Sunday map to 1.
    """
    weekday = day.isoweekday()
    if weekday > 5:
        return 1
    return weekday
