"""UTC datetime and stay-date utilities."""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-aware datetime.

    This function should be used instead of datetime.now() or datetime.utcnow()
    to ensure all timestamps are timezone-aware and stored in UTC.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Return the current calendar date in UTC."""
    return utc_now().date()


def nights_between(check_in: date, check_out: date) -> int:
    """
    Number of nights in the half-open stay [check_in, check_out).

    Example:
        >>> nights_between(date(2025, 1, 10), date(2025, 1, 12))
        2
    """
    return (check_out - check_in).days
