"""Display formatting helpers shared by the section snippets."""

from datetime import date
from typing import Optional

from cvsmith.utils.timestamp import format_month_year

PRESENT = "Present"
DEFAULT_SKILL_CATEGORY = "Other"


def format_resume_date(value: Optional[date]) -> str:
    """'Jan 2024' style date; None means ongoing and renders as 'Present'."""
    if value is None:
        return PRESENT
    return format_month_year(value)


def format_date_range(start: Optional[date], end: Optional[date]) -> str:
    """
    Date range for a section heading.

    Examples:
        >>> format_date_range(date(2020, 3, 1), None)
        'Mar 2020 -- Present'
        >>> format_date_range(None, date(2019, 6, 1))
        'Jun 2019'
        >>> format_date_range(None, None)
        ''
    """
    if start is None:
        return format_month_year(end) if end is not None else ""
    return f"{format_resume_date(start)} -- {format_resume_date(end)}"


def format_gpa(gpa: Optional[float]) -> str:
    return f"{gpa:.2f}" if gpa else ""


def format_category(category: Optional[str]) -> str:
    """Skill category heading: first letter capitalized, blank becomes 'Other'."""
    category = (category or "").strip()
    if not category:
        return DEFAULT_SKILL_CATEGORY
    return category[0].upper() + category[1:]
