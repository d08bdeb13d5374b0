"""Weekly and monthly rollups with period-over-period comparison."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Iterable, Optional

from weighttrack.tracking.bucketing import bucket
from weighttrack.tracking.models import (
    DailyPoint,
    PeriodComparison,
    PeriodReport,
    PeriodSummary,
    TrendDirection,
    WeightObservation,
)
from weighttrack.tracking.periods import month_bounds, shift_months, week_bounds
from weighttrack.tracking.trends import DEFAULT_DEADBAND, classify_direction


@dataclass
class WeekProgress:
    """Progress within the current Monday-Sunday week."""

    week_start: date
    week_end: date
    weekly_change: float
    weekly_average: Optional[float]
    best_day: Optional[DailyPoint]
    days_logged: int
    direction: TrendDirection

    def to_dict(self) -> dict[str, Any]:
        return {
            "week_start": self.week_start.isoformat(),
            "week_end": self.week_end.isoformat(),
            "weekly_change": self.weekly_change,
            "weekly_average": self.weekly_average,
            "best_day": self.best_day.to_dict() if self.best_day else None,
            "days_logged": self.days_logged,
            "direction": self.direction.value,
        }


def filter_period(
    observations: Iterable[WeightObservation],
    period_start: date,
    period_end: date,
) -> list[WeightObservation]:
    """Observations dated within ``[period_start, period_end]``."""
    return [obs for obs in observations if period_start <= obs.date <= period_end]


def summarize(
    observations: Iterable[WeightObservation],
    period_start: date,
    period_end: date,
) -> PeriodSummary:
    """
    Summarize one calendar period.

    Observations are bucketed by day before aggregating, so extra entries on
    one day never over-weight the period average. The total change is the
    last daily average minus the first, not a sum of daily deltas.

    Args:
        observations: Raw observations in any order
        period_start: First day of the period (inclusive)
        period_end: Last day of the period (inclusive)

    Returns:
        PeriodSummary; average_weight and total_change are None without data
    """
    if period_end < period_start:
        raise ValueError(f"period_end {period_end} is before period_start {period_start}")

    entries = filter_period(observations, period_start, period_end)
    if not entries:
        return PeriodSummary(
            period_start=period_start,
            period_end=period_end,
            average_weight=None,
            total_change=None,
            days_logged=0,
            entry_count=0,
        )

    daily = bucket(entries)
    weights = [p.weight for p in daily]
    average = math.fsum(weights) / len(weights)
    total_change = weights[-1] - weights[0] if len(weights) > 1 else 0.0

    return PeriodSummary(
        period_start=period_start,
        period_end=period_end,
        average_weight=round(average, 1),
        total_change=round(total_change, 1),
        days_logged=len(daily),
        entry_count=len(entries),
    )


def compare(current: PeriodSummary, previous: PeriodSummary) -> PeriodComparison:
    """
    Compare a period against the one before it.

    ``is_improvement`` requires both adherence and direction: days logged
    must not drop, and when both periods have weight data the average must
    be flat or down. More logging with a smaller loss can therefore still
    count as an improvement.
    """
    more_days_logged = current.days_logged >= previous.days_logged
    days_change = current.days_logged - previous.days_logged

    if current.average_weight is None or previous.average_weight is None:
        return PeriodComparison(
            weight_change=None,
            days_logged_change=days_change,
            is_improvement=more_days_logged,
        )

    weight_change = round(current.average_weight - previous.average_weight, 1)
    return PeriodComparison(
        weight_change=weight_change,
        days_logged_change=days_change,
        is_improvement=more_days_logged and weight_change <= 0,
    )


def _report(
    observations: list[WeightObservation],
    current_bounds: tuple[date, date],
    previous_bounds: tuple[date, date],
) -> PeriodReport:
    current = summarize(observations, *current_bounds)
    previous = summarize(observations, *previous_bounds)
    return PeriodReport(current=current, previous=previous, comparison=compare(current, previous))


def weekly_summary(observations: Iterable[WeightObservation], today: date) -> PeriodReport:
    """This week versus last week (Monday-Sunday)."""
    current_start, current_end = week_bounds(today)
    previous = week_bounds(current_start - timedelta(days=7))
    return _report(list(observations), (current_start, current_end), previous)


def monthly_summary(observations: Iterable[WeightObservation], today: date) -> PeriodReport:
    """This calendar month versus the previous one."""
    previous = month_bounds(shift_months(today, -1))
    return _report(list(observations), month_bounds(today), previous)


def this_week_progress(
    observations: Iterable[WeightObservation],
    today: date,
    deadband: float = DEFAULT_DEADBAND,
) -> WeekProgress:
    """Change, average and best (lowest) day of the current week."""
    week_start, week_end = week_bounds(today)
    daily = bucket(filter_period(observations, week_start, week_end))

    if not daily:
        return WeekProgress(
            week_start=week_start,
            week_end=week_end,
            weekly_change=0.0,
            weekly_average=None,
            best_day=None,
            days_logged=0,
            direction=TrendDirection.STABLE,
        )

    weekly_change = round(daily[-1].weight - daily[0].weight, 2)
    average = math.fsum(p.weight for p in daily) / len(daily)
    return WeekProgress(
        week_start=week_start,
        week_end=week_end,
        weekly_change=weekly_change,
        weekly_average=round(average, 1),
        best_day=min(daily, key=lambda p: p.weight),
        days_logged=len(daily),
        direction=classify_direction(weekly_change, deadband),
    )
