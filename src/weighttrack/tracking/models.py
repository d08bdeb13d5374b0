"""Data models for weight observations and derived analytics."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional, Union


def parse_date(value: Union[date, str]) -> date:
    """Return a calendar date from a date, datetime or ISO date string.

    Strings are parsed as plain calendar dates, no timezone conversion.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


class TrendDirection(str, Enum):
    """Direction of a weight trend."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


@dataclass
class WeightObservation:
    """A single raw weight entry as logged by the user."""

    id: Optional[int]
    user_id: int
    date: date
    weight: float
    memo: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        self.date = parse_date(self.date)
        if isinstance(self.created_at, str):
            self.created_at = datetime.fromisoformat(self.created_at)
        if self.created_at is not None and self.created_at.tzinfo is not None:
            # Stored timestamps are naive UTC so they compare with each other
            self.created_at = self.created_at.astimezone(timezone.utc).replace(tzinfo=None)
        if not math.isfinite(self.weight) or self.weight <= 0:
            raise ValueError(f"weight must be a positive finite number, got {self.weight!r}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "date": self.date.isoformat(),
            "weight": self.weight,
            "memo": self.memo,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class DailyPoint:
    """Mean weight for one calendar date."""

    date: date
    weight: float
    source_count: int
    memos: list[str] = field(default_factory=list)
    source_weights: list[float] = field(default_factory=list)

    @property
    def display_weight(self) -> float:
        """Headline weight rounded to one decimal."""
        return round(self.weight, 1)

    @property
    def is_averaged(self) -> bool:
        return self.source_count > 1

    @property
    def display_memo(self) -> Optional[str]:
        """Single display string, noting when the value is an average."""
        if self.source_count > 1:
            weights = ", ".join(f"{w:g}" for w in self.source_weights)
            prefix = f"Averaged from {self.source_count} entries"
            if weights:
                prefix = f"{prefix} ({weights})"
            return "; ".join([prefix, *self.memos])
        return "; ".join(self.memos) or None

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "weight": self.weight,
            "source_count": self.source_count,
            "memos": list(self.memos),
        }


@dataclass
class SeriesPoint(DailyPoint):
    """A daily point annotated for display.

    ``change`` and ``change_percent`` stay ``None`` on the first point of a
    series so "no prior data" is distinguishable from "no change".
    Projected points carry ``source_count == 0`` and ``is_projected``.
    """

    moving_average: Optional[float] = None
    change: Optional[float] = None
    change_percent: Optional[float] = None
    is_milestone: bool = False
    milestone_threshold: Optional[int] = None
    is_new_milestone: bool = False
    is_projected: bool = False

    @classmethod
    def from_daily(cls, point: DailyPoint) -> "SeriesPoint":
        if isinstance(point, SeriesPoint):
            return replace(
                point, memos=list(point.memos), source_weights=list(point.source_weights)
            )
        return cls(
            date=point.date,
            weight=point.weight,
            source_count=point.source_count,
            memos=list(point.memos),
            source_weights=list(point.source_weights),
        )

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "moving_average": self.moving_average,
                "change": self.change,
                "change_percent": self.change_percent,
                "is_milestone": self.is_milestone,
                "milestone_threshold": self.milestone_threshold,
                "is_new_milestone": self.is_new_milestone,
                "is_projected": self.is_projected,
            }
        )
        return data


@dataclass
class MilestoneCandidate:
    """A milestone threshold reached for the first time."""

    threshold: int
    date: date
    weight: float
    weight_lost: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "threshold": self.threshold,
            "date": self.date.isoformat(),
            "weight": self.weight,
            "weight_lost": self.weight_lost,
        }


@dataclass
class StreakState:
    """Current and best consecutive-logging-day streaks."""

    current_streak: int = 0
    best_streak: int = 0
    last_entry_date: Optional[date] = None

    def __post_init__(self) -> None:
        if self.current_streak < 0 or self.best_streak < 0:
            raise ValueError("streak counts must be non-negative")
        if self.best_streak < self.current_streak:
            raise ValueError(
                f"best_streak ({self.best_streak}) must be >= current_streak ({self.current_streak})"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_streak": self.current_streak,
            "best_streak": self.best_streak,
            "last_entry_date": _iso(self.last_entry_date),
        }


@dataclass
class PeriodSummary:
    """Aggregate statistics over one calendar period."""

    period_start: date
    period_end: date
    average_weight: Optional[float]
    total_change: Optional[float]
    days_logged: int
    entry_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "period_start": self.period_start.isoformat(),
            "period_end": self.period_end.isoformat(),
            "average_weight": self.average_weight,
            "total_change": self.total_change,
            "days_logged": self.days_logged,
            "entry_count": self.entry_count,
        }


@dataclass
class PeriodComparison:
    """Comparison of a period against the adjacent prior period."""

    weight_change: Optional[float]
    days_logged_change: int
    is_improvement: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "weight_change": self.weight_change,
            "days_logged_change": self.days_logged_change,
            "is_improvement": self.is_improvement,
        }


@dataclass
class PeriodReport:
    """Current period, previous period and their comparison."""

    current: PeriodSummary
    previous: PeriodSummary
    comparison: PeriodComparison

    def to_dict(self) -> dict[str, Any]:
        return {
            "current": self.current.to_dict(),
            "previous": self.previous.to_dict(),
            "comparison": self.comparison.to_dict(),
        }


@dataclass
class TrendPoint:
    """One period's average inside a trend."""

    label: str
    period_start: date
    value: float
    change: Optional[float] = None
    change_percent: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "period_start": self.period_start.isoformat(),
            "value": self.value,
            "change": self.change,
            "change_percent": self.change_percent,
        }


@dataclass
class TrendPeriod:
    """Multi-period trend with summary direction."""

    label: str
    points: list[TrendPoint]
    average_change: float
    total_change: float
    direction: TrendDirection

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "points": [p.to_dict() for p in self.points],
            "average_change": self.average_change,
            "total_change": self.total_change,
            "direction": self.direction.value,
        }


@dataclass
class ProjectionBounds:
    """Plausibility band for projected weights."""

    min_weight: float = 30.0
    max_weight: float = 300.0

    def __post_init__(self) -> None:
        if self.min_weight >= self.max_weight:
            raise ValueError(
                f"min_weight ({self.min_weight}) must be below max_weight ({self.max_weight})"
            )

    def contains(self, weight: float) -> bool:
        return self.min_weight <= weight <= self.max_weight
