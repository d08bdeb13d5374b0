"""Collapse raw weight observations into one mean value per calendar date.

Several entries may be logged on the same date (re-weighings). Every
aggregation in this package works on the per-day mean so that a day with
three entries never counts three times as much as a day with one.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Iterable

from weighttrack.tracking.models import DailyPoint, WeightObservation

# Day-level means are kept at 2 decimals; headline figures use 1.
DAILY_PRECISION = 2


def _creation_order(observations: list[WeightObservation]) -> list[WeightObservation]:
    """Stable sort by created_at.

    Entries without a timestamp follow the timestamped ones in input order.
    """
    return sorted(
        observations,
        key=lambda obs: (obs.created_at is None, obs.created_at or datetime.min),
    )


def group_by_date(
    observations: Iterable[WeightObservation],
) -> dict[date, list[WeightObservation]]:
    """Group observations by their calendar date."""
    groups: dict[date, list[WeightObservation]] = {}
    for obs in observations:
        groups.setdefault(obs.date, []).append(obs)
    return groups


def daily_mean(weights: list[float]) -> float:
    """Mean of one day's weights, rounded to the day-level precision."""
    return round(math.fsum(weights) / len(weights), DAILY_PRECISION)


def bucket(observations: Iterable[WeightObservation]) -> list[DailyPoint]:
    """
    Collapse observations into one DailyPoint per distinct date.

    Args:
        observations: Raw observations in any order

    Returns:
        DailyPoints in ascending date order, one per distinct date

    Example:
        >>> bucket([WeightObservation(1, 1, "2025-01-01", 80.0),
        ...         WeightObservation(2, 1, "2025-01-01", 82.0)])
        [DailyPoint(date=datetime.date(2025, 1, 1), weight=81.0, source_count=2, ...)]
    """
    points = []
    for day, group in sorted(group_by_date(observations).items()):
        ordered = _creation_order(group)
        weights = [obs.weight for obs in ordered]
        points.append(
            DailyPoint(
                date=day,
                weight=daily_mean(weights),
                source_count=len(ordered),
                memos=[obs.memo for obs in ordered if obs.memo and obs.memo.strip()],
                source_weights=weights,
            )
        )
    return points


def sort_points(points: Iterable[DailyPoint], descending: bool = False) -> list[DailyPoint]:
    """Return points ordered by date."""
    return sorted(points, key=lambda p: p.date, reverse=descending)


def distinct_dates(observations: Iterable[WeightObservation]) -> list[date]:
    """Distinct logged dates, most recent first."""
    return sorted({obs.date for obs in observations}, reverse=True)
