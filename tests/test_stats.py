"""Tests for dashboard statistics."""

from __future__ import annotations

from datetime import date

import pytest

from weighttrack.tracking.chart import TimePeriod
from weighttrack.tracking.goals import Goal
from weighttrack.tracking.stats import WeightStats, dashboard_stats, weight_stats


class TestWeightStats:
    def test_period_figures(self, make_obs) -> None:
        observations = [
            make_obs("2025-04-01", 95.0),  # outside the 30 day window
            make_obs("2025-06-20", 80.0),
            make_obs("2025-06-21", 79.0),
            make_obs("2025-06-22", 78.0),
        ]
        stats = weight_stats(observations, TimePeriod.MONTH, today=date(2025, 6, 30))

        assert stats.total_days == 3
        assert stats.average_weight == pytest.approx(79.0)
        assert stats.min_weight == pytest.approx(78.0)
        assert stats.max_weight == pytest.approx(80.0)
        assert stats.weight_range == pytest.approx(2.0)
        assert stats.total_change == pytest.approx(-2.0)
        assert stats.average_change == pytest.approx(-1.0)

    def test_empty(self) -> None:
        assert weight_stats([], TimePeriod.WEEK, today=date(2025, 6, 30)) == WeightStats()


class TestDashboardStats:
    def test_counts(self, sample_observations) -> None:
        goals = [
            Goal(target_weight=75.0, deadline=date(2025, 12, 31), is_active=True),
            Goal(target_weight=78.0, deadline=date(2025, 9, 30), is_active=False),
        ]
        stats = dashboard_stats(sample_observations, goals, today=date(2025, 6, 4))

        assert stats.entry_count == len(sample_observations)
        assert stats.active_goals == 1
        assert stats.day_streak == 3
