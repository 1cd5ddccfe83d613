"""Timestamp formatting and date arithmetic utilities."""

from datetime import date, datetime
from typing import Optional, Union

# Months are measured as 30-day blocks throughout the pipeline
DAYS_PER_MONTH = 30

DateLike = Union[date, datetime, str]


def now() -> str:
    """Compact local timestamp for directory and file names (e.g. 20251114_123456)."""
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def now_exact() -> str:
    """ISO 8601 timestamp with microseconds, used for event logs."""
    return datetime.now().isoformat()


def to_date(value: Optional[DateLike]) -> Optional[date]:
    """
    Coerce a date-like value to a date.

    Accepts date, datetime, or an ISO 8601 string (date or datetime form).
    None passes through unchanged.

    Raises:
        ValueError: If a string cannot be parsed as ISO 8601
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1]
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return date.fromisoformat(text[:10])


def months_between(start: date, end: date) -> float:
    """
    Months elapsed from start to end, in 30-day months.

    Negative when end precedes start.

    Examples:
        >>> months_between(date(2024, 1, 1), date(2024, 1, 31))
        1.0
    """
    return (end - start).days / DAYS_PER_MONTH


def format_month_year(value: DateLike) -> str:
    """Format a date as '{ThreeLetterMonth} {FullYear}' (e.g. 'Jan 2024')."""
    return to_date(value).strftime("%b %Y")


def format_timestamp(iso_timestamp: str, relative: bool = False) -> str:
    """
    Format ISO 8601 timestamp to readable format.

    Args:
        iso_timestamp: ISO 8601 formatted timestamp string
        relative: If True, show relative time (e.g., "2h ago")
                 If False, show absolute time (e.g., "2025-11-13 18:45:40")

    Returns:
        Human-readable timestamp, or the input unchanged if it cannot be parsed
    """
    try:
        dt = datetime.fromisoformat(iso_timestamp)
    except (ValueError, TypeError):
        return iso_timestamp

    if relative:
        return _format_relative_time(dt)
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def _format_relative_time(dt: datetime) -> str:
    """Format datetime as compact relative time (e.g., "30s ago", "2h ago", "5d ago")."""
    diff = datetime.now() - dt

    if diff.total_seconds() < 0:
        diff = -diff
        suffix = "from now"
    else:
        suffix = "ago"

    seconds = int(diff.total_seconds())
    minutes = seconds // 60
    hours = minutes // 60

    if seconds < 60:
        return f"{seconds}s {suffix}"
    elif minutes < 60:
        return f"{minutes}m {suffix}"
    elif hours < 24:
        return f"{hours}h {suffix}"
    else:
        return f"{diff.days}d {suffix}"
