"""Tests for moving averages and the gap-aware weight trend."""

from __future__ import annotations

from datetime import date

import pytest

from weighttrack.tracking.models import DailyPoint, TrendDirection
from weighttrack.tracking.moving_average import (
    DEFAULT_SMOOTHING,
    MovingAverageType,
    create_weight_ma_config,
    ema,
    gap_aware_trend,
    ma_change_rate,
    ma_direction,
    moving_average,
    sma,
    time_scaled_alpha,
    update_trend,
    validate_window_size,
    wma,
)


class TestSMA:
    """Tests for sma()."""

    def test_warm_up_uses_available_points(self) -> None:
        assert sma([10, 20, 30, 40], 3) == [10.0, 15.0, 20.0, 30.0]

    def test_window_clamped_to_length(self) -> None:
        assert sma([10, 20], 5) == [10.0, 15.0]

    def test_one_value_per_input(self) -> None:
        values = [80.0, 79.8, 79.9, 79.5, 79.6, 79.2, 79.0, 78.9]
        assert len(sma(values, 7)) == len(values)

    def test_empty_or_zero_window(self) -> None:
        assert sma([], 3) == []
        assert sma([1.0, 2.0], 0) == []


class TestEMA:
    """Tests for ema()."""

    def test_seeded_with_first_value(self) -> None:
        assert ema([10, 20, 30], 3) == [10, pytest.approx(15.0), pytest.approx(22.5)]

    def test_explicit_alpha(self) -> None:
        result = ema([10, 20], 3, alpha=0.1)
        assert result[1] == pytest.approx(11.0)

    @pytest.mark.parametrize("alpha", [0.0, -0.5, 1.5])
    def test_rejects_alpha_out_of_range(self, alpha) -> None:
        with pytest.raises(ValueError):
            ema([1.0, 2.0], 3, alpha=alpha)

    def test_accumulator_kept_unrounded(self) -> None:
        """Only emitted values are rounded by default."""
        result = ema([10, 11, 11], 5)
        assert result[1] == pytest.approx(10.33)
        assert result[2] == pytest.approx(10.56)

    def test_round_accumulator_legacy(self) -> None:
        """Feeding rounded values back reproduces the legacy numbers."""
        result = ema([10, 11, 11], 5, round_accumulator=True)
        assert result[2] == pytest.approx(10.55)

    def test_empty(self) -> None:
        assert ema([], 3) == []


class TestWMA:
    """Tests for wma()."""

    def test_weights_normalized(self) -> None:
        result = wma([1, 2, 3, 4], [1, 2, 3])
        assert result == [
            pytest.approx(1.0),
            pytest.approx(1.5),
            pytest.approx(2.33),
            pytest.approx(3.33),
        ]

    def test_zero_weight_sum(self) -> None:
        with pytest.raises(ValueError):
            wma([1.0, 2.0], [1.0, -1.0])

    def test_empty(self) -> None:
        assert wma([], [1, 2]) == []
        assert wma([1.0], []) == []


class TestTimeScaledAlpha:
    """Tests for time_scaled_alpha function."""

    def test_daily_unchanged(self) -> None:
        """Alpha should be unchanged for daily measurements."""
        assert time_scaled_alpha(0.1, 1) == pytest.approx(0.1)

    def test_three_day_gap(self) -> None:
        """After 3 days, alpha should be 1 - 0.9^3 ≈ 0.271."""
        assert time_scaled_alpha(0.1, 3) == pytest.approx(1 - 0.9**3)

    def test_zero_days_treated_as_one(self) -> None:
        assert time_scaled_alpha(0.1, 0) == pytest.approx(0.1)
        assert time_scaled_alpha(0.1, -1) == pytest.approx(0.1)

    def test_large_gap_approaches_one(self) -> None:
        assert time_scaled_alpha(0.1, 30) > 0.95


class TestUpdateTrend:
    """Tests for update_trend function."""

    def test_daily_update(self) -> None:
        assert update_trend(80.0, 79.0) == pytest.approx(79.9)

    def test_multi_day_gap_gives_more_weight(self) -> None:
        """Longer gaps move the trend further toward the new measurement."""
        daily = update_trend(80.0, 79.0, days_elapsed=1)
        weekly = update_trend(80.0, 79.0, days_elapsed=7)
        assert weekly < daily


class TestGapAwareTrend:
    """Tests for gap_aware_trend()."""

    def test_gap_scales_alpha(self) -> None:
        points = [
            DailyPoint(date=date(2025, 1, 1), weight=172.5, source_count=1),
            DailyPoint(date=date(2025, 1, 4), weight=171.5, source_count=1),
        ]
        trends = gap_aware_trend(points)

        expected = 172.5 + time_scaled_alpha(DEFAULT_SMOOTHING, 3) * (171.5 - 172.5)
        assert trends[0] == pytest.approx(172.5)
        assert trends[1] == pytest.approx(round(expected, 2))

    def test_sorted_internally(self, make_points) -> None:
        points = make_points([80.0, 79.0, 78.5])
        assert gap_aware_trend(list(reversed(points))) == gap_aware_trend(points)

    def test_empty(self) -> None:
        assert gap_aware_trend([]) == []


class TestDispatchAndConfig:
    """Tests for moving_average(), configs and helpers."""

    def test_dispatch_sma(self) -> None:
        assert moving_average([10, 20, 30], 2) == sma([10, 20, 30], 2)

    def test_dispatch_wma_linear_weights(self) -> None:
        assert moving_average([1, 2, 3, 4], 3, MovingAverageType.WMA) == wma(
            [1, 2, 3, 4], [1, 2, 3]
        )

    def test_dispatch_trend(self) -> None:
        result = moving_average([180.0, 179.0], 7, MovingAverageType.TREND)
        assert result == [pytest.approx(180.0), pytest.approx(179.9)]

    @pytest.mark.parametrize("days,expected", [(1, 2), (7, 7), (30, 14)])
    def test_window_clamped(self, days, expected) -> None:
        assert create_weight_ma_config(days).window_size == expected

    def test_ema_config_alpha(self) -> None:
        config = create_weight_ma_config(7, MovingAverageType.EMA)
        assert config.alpha == pytest.approx(0.25)

    @pytest.mark.parametrize("length,window,expected", [(0, 5, 1), (3, 7, 3), (10, 7, 7)])
    def test_validate_window_size(self, length, window, expected) -> None:
        assert validate_window_size(length, window) == expected


class TestDirection:
    """Tests for ma_direction() and ma_change_rate()."""

    def test_rising_is_up(self) -> None:
        assert ma_direction([80.0, 80.5, 81.0]) == TrendDirection.UP

    def test_falling_is_down(self) -> None:
        assert ma_direction([81.0, 80.5, 80.0]) == TrendDirection.DOWN

    def test_small_change_is_stable(self) -> None:
        assert ma_direction([80.0, 80.05, 80.05]) == TrendDirection.STABLE

    def test_too_short_is_stable(self) -> None:
        assert ma_direction([80.0, 70.0]) == TrendDirection.STABLE

    def test_change_rate(self) -> None:
        assert ma_change_rate([80.0, 79.0, 78.0], days=3) == pytest.approx(-1.0)
        assert ma_change_rate([80.0], days=3) == 0.0
