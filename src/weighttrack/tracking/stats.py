"""Headline statistics for the dashboard."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Iterable, Sequence

from weighttrack.tracking.bucketing import bucket
from weighttrack.tracking.chart import TimePeriod, filter_by_period
from weighttrack.tracking.goals import Goal
from weighttrack.tracking.models import WeightObservation
from weighttrack.tracking.streaks import compute as compute_streak


@dataclass
class WeightStats:
    """Statistics over the daily averages of one chart period."""

    total_days: int = 0
    average_weight: float = 0.0
    min_weight: float = 0.0
    max_weight: float = 0.0
    weight_range: float = 0.0
    total_change: float = 0.0
    average_change: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class DashboardStats:
    entry_count: int
    active_goals: int
    day_streak: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def weight_stats(
    observations: Iterable[WeightObservation],
    period: TimePeriod,
    today: date,
) -> WeightStats:
    """Min/max/average and change over the period's daily averages."""
    daily = bucket(filter_by_period(observations, period, today))
    if not daily:
        return WeightStats()

    weights = [p.weight for p in daily]
    total_change = weights[-1] - weights[0] if len(weights) > 1 else 0.0
    return WeightStats(
        total_days=len(daily),
        average_weight=round(math.fsum(weights) / len(weights), 1),
        min_weight=min(weights),
        max_weight=max(weights),
        weight_range=round(max(weights) - min(weights), 1),
        total_change=round(total_change, 1),
        average_change=round(total_change / max(1, len(weights) - 1), 2),
    )


def dashboard_stats(
    observations: Sequence[WeightObservation],
    goals: Iterable[Goal],
    today: date,
) -> DashboardStats:
    return DashboardStats(
        entry_count=len(observations),
        active_goals=sum(1 for g in goals if g.is_active),
        day_streak=compute_streak(observations, today).current_streak,
    )
