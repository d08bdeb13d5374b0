"""Calendar period boundaries (Monday-start weeks, calendar months)."""

from __future__ import annotations

import calendar
from datetime import date, timedelta


def week_bounds(day: date) -> tuple[date, date]:
    """Monday and Sunday of the week containing ``day``."""
    start = day - timedelta(days=day.weekday())
    return start, start + timedelta(days=6)


def shift_months(day: date, months: int) -> date:
    """First day of the month ``months`` away from ``day``'s month."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def month_bounds(day: date) -> tuple[date, date]:
    """First and last day of the calendar month containing ``day``."""
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last)


def trailing_weeks(today: date, count: int) -> list[tuple[int, date, date]]:
    """(weeks_ago, start, end) for the last ``count`` weeks, oldest first."""
    this_monday, _ = week_bounds(today)
    weeks = []
    for weeks_ago in reversed(range(count)):
        start = this_monday - timedelta(days=7 * weeks_ago)
        weeks.append((weeks_ago, start, start + timedelta(days=6)))
    return weeks


def trailing_months(today: date, count: int) -> list[tuple[int, date, date]]:
    """(months_ago, start, end) for the last ``count`` months, oldest first."""
    months = []
    for months_ago in reversed(range(count)):
        start, end = month_bounds(shift_months(today, -months_ago))
        months.append((months_ago, start, end))
    return months
