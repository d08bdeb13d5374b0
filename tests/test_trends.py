"""Tests for trend direction, regression and projection."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from weighttrack.tracking.models import DailyPoint, ProjectionBounds, TrendDirection
from weighttrack.tracking.trends import (
    classify_direction,
    estimate_date_for_weight,
    monthly_trend,
    project,
    regression,
    weekly_trend,
)


class TestClassifyDirection:
    """Tests for the 0.1 deadband."""

    @pytest.mark.parametrize(
        "change,expected",
        [
            (-0.15, TrendDirection.DOWN),
            (-0.05, TrendDirection.STABLE),
            (0.0, TrendDirection.STABLE),
            (0.1, TrendDirection.STABLE),
            (0.2, TrendDirection.UP),
        ],
    )
    def test_deadband(self, change, expected) -> None:
        assert classify_direction(change) == expected


class TestWeeklyTrend:
    """Tests for weekly_trend()."""

    def test_four_weeks_down(self, make_obs) -> None:
        observations = [
            make_obs("2025-05-13", 82.0),
            make_obs("2025-05-20", 81.0),
            make_obs("2025-05-27", 80.0),
            make_obs("2025-06-03", 79.0),
        ]
        trend = weekly_trend(observations, today=date(2025, 6, 4))

        assert [p.label for p in trend.points] == [
            "3 Weeks Ago",
            "2 Weeks Ago",
            "Last Week",
            "This Week",
        ]
        assert trend.points[0].change is None
        assert [p.change for p in trend.points[1:]] == [-1.0, -1.0, -1.0]
        assert trend.average_change == pytest.approx(-1.0)
        assert trend.total_change == pytest.approx(-3.0)
        assert trend.direction == TrendDirection.DOWN

    def test_two_level_average(self, make_obs) -> None:
        """Week average is the mean of daily means."""
        observations = [
            make_obs("2025-06-02", 80.0),
            make_obs("2025-06-02", 82.0),
            make_obs("2025-06-02", 82.0),
            make_obs("2025-06-03", 79.0),
        ]
        trend = weekly_trend(observations, today=date(2025, 6, 4))
        # Daily means 81.33 and 79.0
        assert trend.points[-1].value == pytest.approx(80.2)

    def test_weeks_without_data_skipped(self, make_obs) -> None:
        observations = [make_obs("2025-05-13", 82.0), make_obs("2025-06-03", 81.0)]
        trend = weekly_trend(observations, today=date(2025, 6, 4))
        assert len(trend.points) == 2
        assert trend.points[1].change == pytest.approx(-1.0)

    def test_single_week_is_stable(self, make_obs) -> None:
        trend = weekly_trend([make_obs("2025-06-03", 80.0)], today=date(2025, 6, 4))
        assert trend.average_change == 0.0
        assert trend.total_change == 0.0
        assert trend.direction == TrendDirection.STABLE

    def test_no_data(self, make_obs) -> None:
        assert weekly_trend([], today=date(2025, 6, 4)) is None
        assert weekly_trend([make_obs("2024-01-01", 80.0)], today=date(2025, 6, 4)) is None


class TestMonthlyTrend:
    def test_labels_and_direction(self, make_obs) -> None:
        observations = [
            make_obs("2025-01-10", 80.0),
            make_obs("2025-02-10", 80.05),
            make_obs("2025-03-10", 80.1),
        ]
        trend = monthly_trend(observations, today=date(2025, 3, 15))

        assert [p.label for p in trend.points] == ["Jan 25", "Feb 25", "This Month"]
        assert trend.direction == TrendDirection.STABLE


class TestRegression:
    """Tests for regression() and project()."""

    def test_slope_per_day(self, make_points) -> None:
        slope, intercept, origin = regression(make_points([80.0, 79.5, 79.0]))
        assert slope == pytest.approx(-0.5)
        assert intercept == pytest.approx(80.0)
        assert origin == date(2025, 1, 1)

    def test_uses_recent_points(self, make_points) -> None:
        points = make_points([90.0, 90.0, 90.0, 80.0, 79.0, 78.0])
        slope, _, _ = regression(points, max_points=3)
        assert slope == pytest.approx(-1.0)

    def test_insufficient_data(self, make_points) -> None:
        assert regression([]) is None
        assert regression(make_points([80.0])) is None

    def test_non_positive_max_points(self, make_points) -> None:
        with pytest.raises(ValueError):
            regression(make_points([80.0, 79.5, 79.0]), max_points=0)

    def test_single_distinct_day(self) -> None:
        day = date(2025, 1, 1)
        points = [
            DailyPoint(date=day, weight=80.0, source_count=1),
            DailyPoint(date=day, weight=81.0, source_count=1),
        ]
        assert regression(points) is None

    def test_project_forward(self, make_points) -> None:
        projected = project(make_points([80.0, 79.5, 79.0]), horizon_days=2)

        assert [p.date for p in projected] == [date(2025, 1, 4), date(2025, 1, 5)]
        assert projected[0].weight == pytest.approx(78.5)
        assert projected[1].weight == pytest.approx(78.0)
        assert all(p.is_projected and p.source_count == 0 for p in projected)

    def test_project_drops_points_outside_bounds(self, make_points) -> None:
        bounds = ProjectionBounds(min_weight=78.2, max_weight=300.0)
        projected = project(make_points([80.0, 79.5, 79.0]), horizon_days=2, bounds=bounds)
        assert [p.weight for p in projected] == [pytest.approx(78.5)]

    def test_project_nothing_to_do(self, make_points) -> None:
        assert project(make_points([80.0, 79.0]), horizon_days=0) == []
        assert project(make_points([80.0]), horizon_days=7) == []

    def test_bounds_validated(self) -> None:
        with pytest.raises(ValueError):
            ProjectionBounds(min_weight=100.0, max_weight=50.0)


class TestEstimateDate:
    def test_reaches_target(self, make_points) -> None:
        points = make_points([80.0, 79.5, 79.0])
        assert estimate_date_for_weight(points, 77.0) == date(2025, 1, 1) + timedelta(days=6)

    def test_moving_away(self, make_points) -> None:
        assert estimate_date_for_weight(make_points([80.0, 79.5, 79.0]), 85.0) is None

    def test_flat(self, make_points) -> None:
        assert estimate_date_for_weight(make_points([80.0, 80.0]), 75.0) is None
