"""
Date helpers for academic-session validation.

All comparisons are made on calendar dates; any time-of-day component of a
datetime input is dropped (truncated to midnight).
"""
from datetime import date, datetime
from typing import Optional, Tuple, Union

from school_admin.core.config import settings
from school_admin.core.errors import InvalidDateRange

DateLike = Union[date, datetime, str]


def parse_date(value: Optional[DateLike]) -> Optional[date]:
    """Return the calendar date of ``value`` or None if it is missing or unparseable."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            return None
    return None


def is_valid_date(value: Optional[DateLike]) -> bool:
    return parse_date(value) is not None


def days_between(start: DateLike, end: DateLike) -> int:
    s, e = parse_date(start), parse_date(end)
    if s is None or e is None:
        return 0
    return abs((e - s).days)


def validate_date_range(
    start: Optional[DateLike],
    end: Optional[DateLike],
    min_days: Optional[int] = None,
    max_days: Optional[int] = None,
) -> Tuple[date, date]:
    """
    Validate a session range and return it as (start, end) dates.

    Raises InvalidDateRange naming the first rule that fails. Durations of
    exactly ``min_days`` and ``max_days`` are accepted.
    """
    min_days = settings.SESSION_MIN_DAYS if min_days is None else min_days
    max_days = settings.SESSION_MAX_DAYS if max_days is None else max_days

    if start in (None, "") or end in (None, ""):
        raise InvalidDateRange("Both start date and end date are required")

    start_date = parse_date(start)
    if start_date is None:
        raise InvalidDateRange("Invalid start date format")

    end_date = parse_date(end)
    if end_date is None:
        raise InvalidDateRange("Invalid end date format")

    if start_date >= end_date:
        raise InvalidDateRange("Start date must be before end date")

    duration = (end_date - start_date).days
    if duration < min_days:
        raise InvalidDateRange(f"Session duration must be at least {min_days} days")
    if duration > max_days:
        raise InvalidDateRange(f"Session duration cannot exceed {max_days} days")

    return start_date, end_date


def date_ranges_overlap(range1: Tuple[DateLike, DateLike], range2: Tuple[DateLike, DateLike]) -> bool:
    """Inclusive overlap test; ranges with an unparseable bound never overlap."""
    s1, e1 = (parse_date(v) for v in range1)
    s2, e2 = (parse_date(v) for v in range2)
    if None in (s1, e1, s2, e2):
        return False
    return s1 <= e2 and s2 <= e1


def is_date_in_range(value: DateLike, start: DateLike, end: DateLike) -> bool:
    d, s, e = parse_date(value), parse_date(start), parse_date(end)
    if None in (d, s, e):
        return False
    return s <= d <= e
