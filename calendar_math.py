"""
calendar_math.py
Month arithmetic on plain calendar dates (no time of day, no timezone).
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

from errors import InvalidDate


def as_date(value, field: str = "date") -> date:
    """
    Drop any time component so comparisons are day-exact.
    datetime is a subclass of date, so it must be checked first.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise InvalidDate(value, field)


def parse_iso(value, field: str = "date") -> date:
    """
    Parse YYYY-MM-DD (a trailing time part is accepted and dropped).
    Impossible dates such as 2024-02-30 are rejected, never rolled over.
    """
    if isinstance(value, date):
        return as_date(value, field)
    if not isinstance(value, str):
        raise InvalidDate(value, field)
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise InvalidDate(value, field) from None


def first_of_month(d: date) -> date:
    return as_date(d).replace(day=1)


def first_of_next_month(d: date) -> date:
    d = as_date(d)
    if d.month == 12:
        return date(d.year + 1, 1, 1)
    return date(d.year, d.month + 1, 1)


def last_day_of_month(d: date) -> date:
    return first_of_next_month(d) - timedelta(days=1)


def months_between(start: date, end: date) -> int:
    """Calendar-month boundaries crossed from start's month to end's month."""
    start, end = as_date(start), as_date(end)
    return (end.year - start.year) * 12 + (end.month - start.month)


def add_months(start: date, months: int) -> date:
    """
    Add months while keeping day in valid range (e.g., Jan 31 + 1 month => Feb 28/29).
    """
    start = as_date(start)
    y = start.year + (start.month - 1 + months) // 12
    m = (start.month - 1 + months) % 12 + 1
    last_day = last_day_of_month(date(y, m, 1))
    day = min(start.day, last_day.day)
    return date(y, m, day)
