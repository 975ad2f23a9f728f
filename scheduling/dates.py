"""
Date and time-of-day helpers: weekday expansion, view ranges, HH:MM labels.
"""

import calendar
from datetime import date, time, timedelta
from typing import List, Optional, Tuple, Union

from .weekdays import WeekdayLike, canonicalize


TimeLike = Union[time, str]


def parse_time(value: TimeLike) -> time:
    """
    Parse ``HH:MM`` or ``HH:MM:SS`` into a ``time``; ``time`` values pass through.

    Raises:
        ValueError: If the value is not a valid time of day
    """
    if isinstance(value, time):
        return value
    parts = str(value).strip().split(':')
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time: {value!r}")
    try:
        numbers = [int(part) for part in parts]
    except ValueError:
        raise ValueError(f"Invalid time: {value!r}") from None
    return time(*numbers)


def format_time(value: TimeLike) -> str:
    """Zero-padded ``HH:MM`` label."""
    parsed = parse_time(value)
    return f"{parsed.hour:02d}:{parsed.minute:02d}"


def to_minutes(value: TimeLike) -> int:
    parsed = parse_time(value)
    return parsed.hour * 60 + parsed.minute


def from_minutes(minutes: int) -> time:
    return time(minutes // 60, minutes % 60)


def dates_for_weekday(
    start_date: Optional[date],
    end_date: Optional[date],
    weekday: WeekdayLike
) -> List[date]:
    """
    Every date in ``[start_date, end_date]`` that falls on ``weekday``.

    Args:
        start_date: First date of the range (inclusive)
        end_date: Last date of the range (inclusive)
        weekday: Canonical weekday or any label ``canonicalize`` understands

    Returns:
        Ascending list of matching dates; empty when the range is missing or
        inverted, or the weekday is not recognised
    """
    target = canonicalize(weekday)
    if target is None or start_date is None or end_date is None:
        return []

    dates = []
    current_date = start_date

    days_until_target = (target.number - current_date.weekday()) % 7
    current_date += timedelta(days=days_until_target)

    while current_date <= end_date:
        dates.append(current_date)
        current_date += timedelta(days=7)

    return dates


def days_in_range(start_date: date, end_date: date) -> List[date]:
    """Every date from ``start_date`` to ``end_date`` inclusive."""
    return [
        start_date + timedelta(days=offset)
        for offset in range((end_date - start_date).days + 1)
    ]


def week_bounds(day: date) -> Tuple[date, date]:
    """Monday and Sunday of the week containing ``day``."""
    monday = day - timedelta(days=day.weekday())
    return monday, monday + timedelta(days=6)


def month_bounds(day: date) -> Tuple[date, date]:
    """First and last day of the month containing ``day``."""
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last)
