"""Target-weight goals: progress toward the goal and the guideline path."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Optional, Sequence

from weighttrack.tracking.models import DailyPoint, parse_date


@dataclass
class Goal:
    """A target weight to reach by a deadline."""

    target_weight: float
    deadline: date
    starting_weight: Optional[float] = None
    goal_id: Optional[int] = None
    user_id: Optional[int] = None
    is_active: bool = True
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        self.deadline = parse_date(self.deadline)
        if not math.isfinite(self.target_weight) or self.target_weight <= 0:
            raise ValueError(f"target_weight must be positive, got {self.target_weight!r}")
        if self.starting_weight is not None and self.starting_weight <= 0:
            raise ValueError(f"starting_weight must be positive, got {self.starting_weight!r}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "goal_id": self.goal_id,
            "user_id": self.user_id,
            "target_weight": self.target_weight,
            "deadline": self.deadline.isoformat(),
            "starting_weight": self.starting_weight,
            "is_active": self.is_active,
        }


@dataclass
class GoalProgress:
    """How far along a goal the current weight is."""

    progress: float  # percent, 0-100
    remaining_weight: float
    is_completed: bool
    days_remaining: int
    daily_change_required: Optional[float]

    def to_dict(self) -> dict[str, Any]:
        return {
            "progress": self.progress,
            "remaining_weight": self.remaining_weight,
            "is_completed": self.is_completed,
            "days_remaining": self.days_remaining,
            "daily_change_required": self.daily_change_required,
        }


@dataclass
class GuidelinePoint:
    """One day on the straight line from the last weight to the goal."""

    date: date
    weight: float

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date.isoformat(), "weight": self.weight}


def goal_progress(goal: Goal, current_weight: float, today: date) -> GoalProgress:
    """
    Progress toward a weight-loss goal.

    The goal's starting weight defaults to the current weight when unset,
    which reads as 0% progress.
    """
    starting = goal.starting_weight or current_weight
    total_to_lose = starting - goal.target_weight
    lost = starting - current_weight

    if total_to_lose > 0:
        progress = max(0.0, min(100.0, lost / total_to_lose * 100))
    else:
        progress = 100.0 if current_weight <= goal.target_weight else 0.0

    days_remaining = max(0, (goal.deadline - today).days)
    remaining = max(0.0, current_weight - goal.target_weight)
    daily_required = None
    if days_remaining > 0:
        daily_required = round((goal.target_weight - current_weight) / days_remaining, 3)

    return GoalProgress(
        progress=round(progress, 1),
        remaining_weight=round(remaining, 1),
        is_completed=current_weight <= goal.target_weight,
        days_remaining=days_remaining,
        daily_change_required=daily_required,
    )


def goal_guideline(series: Sequence[DailyPoint], goal: Goal) -> list[GuidelinePoint]:
    """
    Daily guideline from the most recent point to the goal deadline.

    Starts the day after the last observed point. Empty when there is no
    data or the deadline is not after the last point.
    """
    if not series:
        return []
    last = max(series, key=lambda p: p.date)
    days_to_goal = (goal.deadline - last.date).days
    if days_to_goal <= 0:
        return []

    daily_change = (goal.target_weight - last.weight) / days_to_goal
    return [
        GuidelinePoint(
            date=last.date + timedelta(days=i),
            weight=round(last.weight + daily_change * i, 1),
        )
        for i in range(1, days_to_goal + 1)
    ]
