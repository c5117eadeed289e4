"""Calendar helpers shared by savings projections, insights and reminders.

All month arithmetic is calendar based: adding a month to Jan 31 lands on the
last day of February, and month spans count whole calendar months.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime
from typing import TypeVar

D = TypeVar("D", date, datetime)


def naive_local(value: D) -> D:
    """Drop timezone info, converting aware values to local wall-clock time.

    Stored dates and the default ``datetime.now()`` are naive local times, so
    every datetime entering the domain goes through here before comparison.
    """
    if getattr(value, "tzinfo", None) is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def add_months(value: D, months: int) -> D:
    total = value.year * 12 + (value.month - 1) + months
    year, month = divmod(total, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def calendar_month_span(start: date | datetime, end: date | datetime) -> int:
    """Calendar months from start's month to end's month, inclusive of both.

    Only year and month take part; a start in the current month yields 1.
    """
    return (end.year - start.year) * 12 + (end.month - start.month) + 1


def whole_months_between(start: datetime, end: datetime) -> int:
    """Number of complete months elapsed from start to end (0 if end <= start)."""
    if end <= start:
        return 0
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if add_months(start, months) > end:
        months -= 1
    return max(0, months)


def month_key(value: date | datetime) -> tuple[int, int]:
    return (value.year, value.month)


def previous_month_key(value: date | datetime) -> tuple[int, int]:
    if value.month == 1:
        return (value.year - 1, 12)
    return (value.year, value.month - 1)
