"""Assemble a display-ready weight chart series.

Pipeline: period filter -> daily bucketing -> point-to-point change ->
milestone flags -> optional moving average. Everything is recomputed from
the raw observations on each call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import AbstractSet, Any, Iterable, Optional

from weighttrack.tracking.bucketing import bucket
from weighttrack.tracking.milestones import DEFAULT_MILESTONE_SIZE, detect
from weighttrack.tracking.models import SeriesPoint, WeightObservation
from weighttrack.tracking.moving_average import (
    DEFAULT_WINDOW_SIZE,
    MovingAverageType,
    gap_aware_trend,
    moving_average,
)

logger = logging.getLogger(__name__)


class TimePeriod(str, Enum):
    """Trailing chart window."""

    WEEK = "7d"
    MONTH = "30d"
    QUARTER = "90d"
    ALL = "all"

    @property
    def days(self) -> Optional[int]:
        return {"7d": 7, "30d": 30, "90d": 90}.get(self.value)


@dataclass
class ChartConfig:
    """Chart options.

    ``auto_fallback`` widens an empty trailing window to ``ALL`` when older
    data exists; disable it to get the literal filter result.
    """

    period: TimePeriod = TimePeriod.MONTH
    show_moving_average: bool = True
    moving_average_window: int = DEFAULT_WINDOW_SIZE
    moving_average_type: MovingAverageType = MovingAverageType.SMA
    auto_fallback: bool = True


@dataclass
class ChartData:
    """Assembled series plus the figures shown around the chart."""

    points: list[SeriesPoint]
    period: TimePeriod
    fell_back: bool = False
    starting_weight: Optional[float] = None
    current_weight: Optional[float] = None
    total_weight_lost: Optional[float] = None
    new_milestones: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "period": self.period.value,
            "fell_back": self.fell_back,
            "starting_weight": self.starting_weight,
            "current_weight": self.current_weight,
            "total_weight_lost": self.total_weight_lost,
            "new_milestones": list(self.new_milestones),
            "points": [p.to_dict() for p in self.points],
        }


def filter_by_period(
    observations: Iterable[WeightObservation],
    period: TimePeriod,
    today: date,
) -> list[WeightObservation]:
    """Observations on or after ``today - period.days``; ALL keeps everything."""
    observations = list(observations)
    if period.days is None:
        return observations
    cutoff = today - timedelta(days=period.days)
    return [obs for obs in observations if obs.date >= cutoff]


def resolve_period(
    observations: list[WeightObservation],
    period: TimePeriod,
    today: date,
    auto_fallback: bool = True,
) -> TimePeriod:
    """Period to actually render, widening to ALL when the window is empty."""
    if (
        auto_fallback
        and period != TimePeriod.ALL
        and observations
        and not filter_by_period(observations, period, today)
    ):
        logger.debug("No entries in %s window, falling back to all time", period.value)
        return TimePeriod.ALL
    return period


def add_changes(points: list[SeriesPoint]) -> list[SeriesPoint]:
    """Set change and change_percent against the preceding point (in place).

    The first point keeps ``None`` for both.
    """
    for prev, curr in zip(points, points[1:]):
        change = curr.weight - prev.weight
        curr.change = round(change, 2)
        curr.change_percent = round(change / prev.weight * 100, 2)
    return points


def assemble(
    observations: Iterable[WeightObservation],
    config: Optional[ChartConfig] = None,
    today: Optional[date] = None,
    previously_achieved: AbstractSet[int] = frozenset(),
    milestone_size: float = DEFAULT_MILESTONE_SIZE,
) -> list[SeriesPoint]:
    """
    Build the ordered chart series.

    Args:
        observations: Raw observations in any order
        config: Chart options (defaults to ChartConfig())
        today: Reference date for trailing windows; required unless the
               period is ALL
        previously_achieved: Milestone thresholds already recorded
        milestone_size: Weight units per milestone

    Returns:
        One SeriesPoint per distinct date in the window, ascending
    """
    return build_chart(observations, config, today, previously_achieved, milestone_size).points


def build_chart(
    observations: Iterable[WeightObservation],
    config: Optional[ChartConfig] = None,
    today: Optional[date] = None,
    previously_achieved: AbstractSet[int] = frozenset(),
    milestone_size: float = DEFAULT_MILESTONE_SIZE,
) -> ChartData:
    """Like :func:`assemble`, also returning the surrounding metadata."""
    config = config or ChartConfig()
    observations = list(observations)
    if config.period != TimePeriod.ALL and today is None:
        raise ValueError(f"today is required for the {config.period.value} period")

    period = config.period
    filtered = observations
    if today is not None:
        period = resolve_period(observations, config.period, today, config.auto_fallback)
        filtered = filter_by_period(observations, period, today)

    points = [SeriesPoint.from_daily(p) for p in bucket(filtered)]
    if not points:
        return ChartData(points=[], period=period, fell_back=period != config.period)

    add_changes(points)

    starting_weight = points[0].weight
    annotated = detect(points, starting_weight, previously_achieved, milestone_size)
    for point, flagged in zip(points, annotated):
        point.is_milestone = flagged.is_milestone
        point.milestone_threshold = flagged.milestone_threshold
        point.is_new_milestone = flagged.is_new_milestone

    if config.show_moving_average and len(points) > 1:
        if config.moving_average_type == MovingAverageType.TREND:
            averages = gap_aware_trend(points)
        else:
            averages = moving_average(
                [p.weight for p in points],
                config.moving_average_window,
                config.moving_average_type,
            )
        for point, value in zip(points, averages):
            point.moving_average = value

    current_weight = points[-1].weight
    return ChartData(
        points=points,
        period=period,
        fell_back=period != config.period,
        starting_weight=starting_weight,
        current_weight=current_weight,
        total_weight_lost=round(starting_weight - current_weight, 2),
        new_milestones=[p.milestone_threshold for p in points if p.is_new_milestone],
    )
