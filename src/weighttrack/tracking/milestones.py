"""Milestone detection for cumulative weight loss.

A milestone is reached every ``size`` weight units (3 by default) lost from
the starting weight. Thresholds are numbered 1, 2, 3, ... and each is
celebrated at most once: the detector only decides candidacy, recording the
achievement idempotently is left to the persistence layer.
"""

from __future__ import annotations

import logging
import math
from typing import AbstractSet, Iterable, Sequence

from weighttrack.tracking.models import DailyPoint, MilestoneCandidate, SeriesPoint

logger = logging.getLogger(__name__)

DEFAULT_MILESTONE_SIZE = 3.0

# Guards floor() against float noise such as 90 - 87.0000000001
_EPSILON = 1e-9


def threshold_number(
    starting_weight: float, weight: float, size: float = DEFAULT_MILESTONE_SIZE
) -> int:
    """Number of whole thresholds crossed going from starting_weight to weight."""
    if size <= 0:
        raise ValueError(f"milestone size must be positive, got {size}")
    return math.floor((starting_weight - weight) / size + _EPSILON)


def is_milestone_weight(
    starting_weight: float, weight: float, size: float = DEFAULT_MILESTONE_SIZE
) -> bool:
    """Whether a weight is at least one full threshold below the start."""
    lost = starting_weight - weight
    return lost + _EPSILON >= size and threshold_number(starting_weight, weight, size) > 0


def detect(
    series: Sequence[DailyPoint],
    starting_weight: float,
    previously_achieved: AbstractSet[int] = frozenset(),
    size: float = DEFAULT_MILESTONE_SIZE,
) -> list[SeriesPoint]:
    """
    Annotate a series with milestone flags.

    Points are processed in ascending date order. Reaching threshold N claims
    every threshold up to N, so a later point at the same or a lower
    threshold is never flagged as new. A recorded threshold N in
    ``previously_achieved`` claims 1..N up front. Regaining weight never
    un-claims a threshold.

    Args:
        series: Daily points (sorted internally)
        starting_weight: Reference weight for cumulative loss
        previously_achieved: Threshold numbers already recorded
        size: Weight units per threshold

    Returns:
        SeriesPoints in ascending date order with milestone fields set

    Example:
        start 90, weights [90, 88, 87, 86.5]
        -> 87 is milestone 1 (new), 86.5 is milestone 1 (not new)
    """
    claimed = set(range(1, max(previously_achieved, default=0) + 1))
    annotated = []
    for point in sorted(series, key=lambda p: p.date):
        result = SeriesPoint.from_daily(point)
        result.is_milestone = False
        result.milestone_threshold = None
        result.is_new_milestone = False

        if is_milestone_weight(starting_weight, point.weight, size):
            number = threshold_number(starting_weight, point.weight, size)
            result.is_milestone = True
            result.milestone_threshold = number
            if number not in claimed:
                result.is_new_milestone = True
                logger.debug("Milestone %d first reached on %s", number, point.date)
            claimed.update(range(1, number + 1))

        annotated.append(result)
    return annotated


def new_milestones(
    points: Iterable[SeriesPoint],
    starting_weight: float,
) -> list[MilestoneCandidate]:
    """Candidate achievements for every newly reached threshold."""
    return [
        MilestoneCandidate(
            threshold=p.milestone_threshold,
            date=p.date,
            weight=p.weight,
            weight_lost=round(starting_weight - p.weight, 2),
        )
        for p in points
        if p.is_new_milestone and p.milestone_threshold is not None
    ]


def next_milestone(
    starting_weight: float,
    current_weight: float,
    size: float = DEFAULT_MILESTONE_SIZE,
) -> int:
    """The next threshold number still to be reached."""
    return max(threshold_number(starting_weight, current_weight, size), 0) + 1


def milestone_target_weight(
    starting_weight: float,
    threshold: int,
    size: float = DEFAULT_MILESTONE_SIZE,
) -> float:
    """Weight at which a threshold is reached."""
    return round(starting_weight - threshold * size, 2)


def milestone_message(threshold: int, weight_lost: float, unit: str = "kg") -> str:
    """Celebration text for a reached threshold."""
    if threshold == 1:
        return f"First milestone! You've lost {weight_lost:.1f} {unit}."
    if threshold % 5 == 0:
        return f"Incredible! Milestone {threshold}: {weight_lost:.1f} {unit} lost."
    return f"Milestone {threshold} reached: {weight_lost:.1f} {unit} lost. Keep going!"
