"""Weight tracking analytics.

Pure transformations from raw weight observations to the figures a
dashboard shows. Nothing in this package performs I/O or reads the clock,
so every result can be recomputed from the entry log at any time.

Key components:
- Daily bucketing (mean of same-day entries)
- SMA / EMA / WMA and gap-aware trend smoothing
- Milestones every 3 units lost, claimed at most once
- Current and best logging streaks with a one-day grace period
- Weekly/monthly summaries and comparisons
- Weekly/monthly trends and regression projection
- Chart series assembly
"""

from __future__ import annotations

from weighttrack.tracking.bucketing import bucket
from weighttrack.tracking.chart import ChartConfig, ChartData, TimePeriod, assemble, build_chart
from weighttrack.tracking.goals import Goal, GoalProgress, goal_guideline, goal_progress
from weighttrack.tracking.milestones import detect, next_milestone
from weighttrack.tracking.models import (
    DailyPoint,
    MilestoneCandidate,
    PeriodComparison,
    PeriodReport,
    PeriodSummary,
    ProjectionBounds,
    SeriesPoint,
    StreakState,
    TrendDirection,
    TrendPeriod,
    TrendPoint,
    WeightObservation,
)
from weighttrack.tracking.moving_average import ema, sma, wma
from weighttrack.tracking.streaks import compute as compute_streak
from weighttrack.tracking.summaries import compare, summarize
from weighttrack.tracking.trends import monthly_trend, project, weekly_trend

__all__ = [
    "ChartConfig",
    "ChartData",
    "DailyPoint",
    "Goal",
    "GoalProgress",
    "MilestoneCandidate",
    "PeriodComparison",
    "PeriodReport",
    "PeriodSummary",
    "ProjectionBounds",
    "SeriesPoint",
    "StreakState",
    "TimePeriod",
    "TrendDirection",
    "TrendPeriod",
    "TrendPoint",
    "WeightObservation",
    "assemble",
    "bucket",
    "build_chart",
    "compare",
    "compute_streak",
    "detect",
    "ema",
    "goal_guideline",
    "goal_progress",
    "monthly_trend",
    "next_milestone",
    "project",
    "sma",
    "summarize",
    "weekly_trend",
    "wma",
]
