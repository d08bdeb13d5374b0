"""Multi-period trend direction and linear-regression projection.

Weekly and monthly trends average in two levels (observations -> daily
averages -> period average), the same way period summaries do. Direction
uses a 0.1-unit deadband so rounding noise reads as "stable".

Projection fits an ordinary least-squares line through the most recent
points (x = calendar days, y = weight) and extrapolates it forward. Points
outside the plausibility band are dropped; the band is policy, not physics,
and comes from settings.
"""

from __future__ import annotations

import logging
import math
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence

import numpy as np

from weighttrack.tracking.bucketing import bucket
from weighttrack.tracking.models import (
    DailyPoint,
    ProjectionBounds,
    SeriesPoint,
    TrendDirection,
    TrendPeriod,
    TrendPoint,
    WeightObservation,
)
from weighttrack.tracking.periods import trailing_months, trailing_weeks

logger = logging.getLogger(__name__)

DEFAULT_DEADBAND = 0.1
DEFAULT_LOOKBACK_WEEKS = 4
DEFAULT_LOOKBACK_MONTHS = 3
DEFAULT_REGRESSION_POINTS = 10


def classify_direction(average_change: float, deadband: float = DEFAULT_DEADBAND) -> TrendDirection:
    """
    Classify a change as up, down or stable.

    Example:
        >>> classify_direction(-0.05)
        <TrendDirection.STABLE: 'stable'>
        >>> classify_direction(-0.15)
        <TrendDirection.DOWN: 'down'>
    """
    if average_change < -deadband:
        return TrendDirection.DOWN
    if average_change > deadband:
        return TrendDirection.UP
    return TrendDirection.STABLE


def _week_label(weeks_ago: int) -> str:
    if weeks_ago == 0:
        return "This Week"
    if weeks_ago == 1:
        return "Last Week"
    return f"{weeks_ago} Weeks Ago"


def _month_label(months_ago: int, month_start: date) -> str:
    if months_ago == 0:
        return "This Month"
    return month_start.strftime("%b %y")


def _period_average(observations: list[WeightObservation], start: date, end: date) -> Optional[float]:
    daily = bucket(obs for obs in observations if start <= obs.date <= end)
    if not daily:
        return None
    return round(math.fsum(p.weight for p in daily) / len(daily), 1)


def _build_trend(
    label: str,
    observations: list[WeightObservation],
    periods: list[tuple[str, date, date]],
    deadband: float,
) -> Optional[TrendPeriod]:
    """Assemble a trend from (label, start, end) periods listed oldest first."""
    points: list[TrendPoint] = []
    for period_label, start, end in periods:
        value = _period_average(observations, start, end)
        if value is not None:
            points.append(TrendPoint(label=period_label, period_start=start, value=value))

    if not points:
        return None

    for prev, curr in zip(points, points[1:]):
        curr.change = round(curr.value - prev.value, 1)
        curr.change_percent = round(curr.change / prev.value * 100, 1) if prev.value > 0 else None

    changes = [p.change for p in points if p.change is not None]
    average_change = round(math.fsum(changes) / len(changes), 2) if changes else 0.0
    total_change = round(points[-1].value - points[0].value, 1) if len(points) >= 2 else 0.0

    return TrendPeriod(
        label=label,
        points=points,
        average_change=average_change,
        total_change=total_change,
        direction=classify_direction(average_change, deadband),
    )


def weekly_trend(
    observations: Iterable[WeightObservation],
    today: date,
    lookback_weeks: int = DEFAULT_LOOKBACK_WEEKS,
    deadband: float = DEFAULT_DEADBAND,
) -> Optional[TrendPeriod]:
    """
    Trend over the last ``lookback_weeks`` Monday-Sunday weeks.

    Returns:
        TrendPeriod, or None when no week in the window has data
    """
    periods = [
        (_week_label(weeks_ago), start, end)
        for weeks_ago, start, end in trailing_weeks(today, lookback_weeks)
    ]
    return _build_trend(
        f"Weekly Trend (Last {lookback_weeks} Weeks)", list(observations), periods, deadband
    )


def monthly_trend(
    observations: Iterable[WeightObservation],
    today: date,
    lookback_months: int = DEFAULT_LOOKBACK_MONTHS,
    deadband: float = DEFAULT_DEADBAND,
) -> Optional[TrendPeriod]:
    """
    Trend over the last ``lookback_months`` calendar months.

    Returns:
        TrendPeriod, or None when no month in the window has data
    """
    periods = [
        (_month_label(months_ago, start), start, end)
        for months_ago, start, end in trailing_months(today, lookback_months)
    ]
    return _build_trend(
        f"Monthly Trend (Last {lookback_months} Months)", list(observations), periods, deadband
    )


def regression(
    points: Sequence[DailyPoint],
    max_points: int = DEFAULT_REGRESSION_POINTS,
) -> Optional[tuple[float, float, date]]:
    """
    Least-squares line through the most recent points.

    Args:
        points: Daily points in any order
        max_points: How many of the most recent points to fit

    Returns:
        (slope per day, intercept, origin date) where x is days since the
        origin, or None with fewer than two points or a single distinct day
    """
    if max_points <= 0:
        raise ValueError(f"max_points must be positive, got {max_points}")
    recent = sorted(points, key=lambda p: p.date)[-max_points:]
    if len(recent) < 2:
        return None

    origin = recent[0].date
    x = np.array([(p.date - origin).days for p in recent], dtype=float)
    y = np.array([p.weight for p in recent], dtype=float)
    if x.max() == x.min():
        return None

    slope, intercept = np.polyfit(x, y, 1)
    return float(slope), float(intercept), origin


def project(
    series: Sequence[DailyPoint],
    horizon_days: int,
    bounds: Optional[ProjectionBounds] = None,
    max_points: int = DEFAULT_REGRESSION_POINTS,
) -> list[SeriesPoint]:
    """
    Extrapolate the recent linear trend ``horizon_days`` past the last point.

    Args:
        series: Observed daily points in any order
        horizon_days: Days to project after the last observed date
        bounds: Plausibility band; projected weights outside it are dropped
        max_points: Number of most recent points used for the fit

    Returns:
        Projected SeriesPoints (is_projected=True, source_count=0), one per
        day inside the band; empty when there is not enough data
    """
    if horizon_days <= 0:
        return []
    fit = regression(series, max_points)
    if fit is None:
        return []

    bounds = bounds or ProjectionBounds()
    slope, intercept, origin = fit
    last_date = max(p.date for p in series)

    projected = []
    for offset in range(1, horizon_days + 1):
        day = last_date + timedelta(days=offset)
        weight = round(intercept + slope * (day - origin).days, 2)
        if not bounds.contains(weight):
            logger.debug("Dropping projected weight %.2f on %s outside bounds", weight, day)
            continue
        projected.append(
            SeriesPoint(date=day, weight=weight, source_count=0, is_projected=True)
        )
    return projected


def estimate_date_for_weight(
    series: Sequence[DailyPoint],
    target_weight: float,
    max_points: int = DEFAULT_REGRESSION_POINTS,
) -> Optional[date]:
    """Date at which the fitted line reaches ``target_weight``.

    None when there is no fit or the line moves away from the target.
    """
    fit = regression(series, max_points)
    if fit is None:
        return None
    slope, intercept, origin = fit
    if abs(slope) < 1e-9:
        return None

    days = (target_weight - intercept) / slope
    last_offset = (max(p.date for p in series) - origin).days
    if days < last_offset:
        return None
    # round first so 6.0000000001 from the fit does not become day 7
    return origin + timedelta(days=math.ceil(round(days, 6)))
