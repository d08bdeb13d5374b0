"""Moving averages for weight series.

Three window-based averages are provided, each returning one value per
input point (no trimming):

    SMA: equal weight over the last ``window_size`` points
    EMA: ema[i] = α × v[i] + (1 - α) × ema[i-1],  α = 2 / (window_size + 1)
    WMA: caller-supplied weights over the last ``len(weights)`` points

The SMA deliberately deviates from a strict fixed-window SMA during warm-up:
for ``i < window_size - 1`` it averages all points seen so far instead of
emitting nothing. This avoids a gap at the start of every chart.

The gap-aware Hacker's Diet trend is also provided for irregular logging:
    T_n = T_{n-1} + α_adjusted × (W_n - T_{n-1}),  α_adjusted = 1 - (1 - α)^t
where t is days since the previous measurement.

Reference: https://www.fourmilab.ch/hackdiet/
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from weighttrack.tracking.models import DailyPoint, TrendDirection

# Output precision for every moving-average value
MA_PRECISION = 2

# Weight tracking windows are clamped to this range
MIN_WINDOW_SIZE = 2
MAX_WINDOW_SIZE = 14
DEFAULT_WINDOW_SIZE = 7

# Hacker's Diet smoothing (10%, ~10 day time constant)
DEFAULT_SMOOTHING = 0.1


class MovingAverageType(str, Enum):
    """Kind of moving average."""

    SMA = "sma"
    EMA = "ema"
    WMA = "wma"
    TREND = "trend"


@dataclass
class MovingAverageConfig:
    """Moving average settings for a weight chart."""

    window_size: int = DEFAULT_WINDOW_SIZE
    kind: MovingAverageType = MovingAverageType.SMA
    alpha: Optional[float] = None


def _mean(values: Sequence[float]) -> float:
    return math.fsum(values) / len(values)


def sma(values: Sequence[float], window_size: int) -> list[float]:
    """
    Simple moving average with cumulative warm-up.

    Args:
        values: Numeric series in chronological order
        window_size: Number of points per window

    Returns:
        One average per input value, rounded to 2 decimals

    Example:
        >>> sma([10, 20, 30, 40], 3)
        [10.0, 15.0, 20.0, 30.0]
    """
    if not values or window_size <= 0:
        return []
    window_size = min(window_size, len(values))

    result = []
    for i in range(len(values)):
        start = max(0, i - window_size + 1)
        result.append(round(_mean(values[start : i + 1]), MA_PRECISION))
    return result


def ema(
    values: Sequence[float],
    window_size: int,
    alpha: Optional[float] = None,
    round_accumulator: bool = False,
) -> list[float]:
    """
    Exponential moving average seeded with the first value.

    The running accumulator is kept at full precision and only the emitted
    values are rounded. Pass ``round_accumulator=True`` to feed the rounded
    values back into the recursion instead, which reproduces the legacy
    dashboard numbers exactly at the cost of compounding rounding error.

    Args:
        values: Numeric series in chronological order
        window_size: Window used to derive alpha when none is given
        alpha: Smoothing factor in (0, 1]
        round_accumulator: Recurse on rounded values (legacy behavior)

    Returns:
        One average per input value; the first equals ``values[0]``
    """
    if not values or window_size <= 0:
        return []
    if alpha is None:
        alpha = 2 / (window_size + 1)
    if not 0 < alpha <= 1:
        raise ValueError(f"alpha must be in (0, 1], got {alpha}")

    result = [values[0]]
    acc = float(values[0])
    for value in values[1:]:
        acc = alpha * value + (1 - alpha) * acc
        rounded = round(acc, MA_PRECISION)
        if round_accumulator:
            acc = rounded
        result.append(rounded)
    return result


def wma(values: Sequence[float], weights: Sequence[float]) -> list[float]:
    """
    Weighted moving average with caller-supplied weights.

    Weights apply oldest-to-newest inside each window and need not sum to 1;
    each full window is normalized by the sum of its weights. Indices before
    the first full window use the unweighted mean of the available points.

    Args:
        values: Numeric series in chronological order
        weights: One weight per window slot

    Returns:
        One average per input value, rounded to 2 decimals
    """
    if not values or not weights:
        return []
    total_weight = math.fsum(weights)
    if total_weight == 0:
        raise ValueError("weights must not sum to zero")

    window_size = len(weights)
    result = []
    for i in range(len(values)):
        if i < window_size - 1:
            result.append(round(_mean(values[: i + 1]), MA_PRECISION))
            continue
        window = values[i - window_size + 1 : i + 1]
        weighted = math.fsum(v * w for v, w in zip(window, weights))
        result.append(round(weighted / total_weight, MA_PRECISION))
    return result


def time_scaled_alpha(base_alpha: float, days_elapsed: int) -> float:
    """
    Adjust smoothing factor for non-daily measurements.

    Example:
        >>> time_scaled_alpha(0.1, 1)
        0.1
        >>> round(time_scaled_alpha(0.1, 3), 3)
        0.271
    """
    if days_elapsed <= 0:
        days_elapsed = 1
    return 1 - (1 - base_alpha) ** days_elapsed


def update_trend(
    prev_trend: float,
    today_weight: float,
    smoothing: float = DEFAULT_SMOOTHING,
    days_elapsed: int = 1,
) -> float:
    """Advance the trend by one measurement."""
    adjusted_alpha = time_scaled_alpha(smoothing, days_elapsed)
    return prev_trend + adjusted_alpha * (today_weight - prev_trend)


def gap_aware_trend(
    points: Sequence[DailyPoint],
    smoothing: float = DEFAULT_SMOOTHING,
) -> list[float]:
    """
    Hacker's Diet trend over daily points, scaled for logging gaps.

    Args:
        points: Daily points in any order
        smoothing: Base smoothing factor, default 0.1

    Returns:
        Trend values in ascending date order, rounded to 2 decimals
    """
    ordered = sorted(points, key=lambda p: p.date)
    if not ordered:
        return []

    trend = ordered[0].weight
    trends = [round(trend, MA_PRECISION)]
    for prev, curr in zip(ordered, ordered[1:]):
        days_elapsed = (curr.date - prev.date).days
        trend = update_trend(trend, curr.weight, smoothing, days_elapsed)
        trends.append(round(trend, MA_PRECISION))
    return trends


def linear_weights(window_size: int) -> list[float]:
    """Weights 1..n, so the newest point counts most."""
    return [float(i) for i in range(1, window_size + 1)]


def moving_average(
    values: Sequence[float],
    window_size: int,
    kind: MovingAverageType = MovingAverageType.SMA,
    alpha: Optional[float] = None,
) -> list[float]:
    """Dispatch to the requested moving average.

    ``WMA`` uses linear weights over ``window_size``. ``TREND`` treats the
    values as consecutive days and ignores ``window_size``; use
    :func:`gap_aware_trend` when the points carry dates.
    """
    if kind == MovingAverageType.EMA:
        return ema(values, window_size, alpha)
    if kind == MovingAverageType.WMA:
        if window_size <= 0:
            return []
        return wma(values, linear_weights(window_size))
    if kind == MovingAverageType.TREND:
        if not values:
            return []
        trends = [float(values[0])]
        for value in values[1:]:
            trends.append(update_trend(trends[-1], value, alpha or DEFAULT_SMOOTHING))
        return [round(t, MA_PRECISION) for t in trends]
    return sma(values, window_size)


def create_weight_ma_config(
    days: int = DEFAULT_WINDOW_SIZE,
    kind: MovingAverageType = MovingAverageType.SMA,
) -> MovingAverageConfig:
    """Build a moving average config with the window clamped to 2-14 days."""
    window = max(MIN_WINDOW_SIZE, min(MAX_WINDOW_SIZE, days))
    alpha = 2 / (days + 1) if kind == MovingAverageType.EMA else None
    return MovingAverageConfig(window_size=window, kind=kind, alpha=alpha)


def validate_window_size(data_length: int, window_size: int) -> int:
    """Clamp a window size to what the data supports."""
    if data_length == 0 or window_size <= 0:
        return 1
    return min(window_size, data_length)


def ma_direction(
    moving_averages: Sequence[float],
    lookback: int = 3,
    threshold: float = 0.1,
) -> TrendDirection:
    """Direction of the trailing ``lookback`` moving-average values."""
    if len(moving_averages) < lookback or lookback < 2:
        return TrendDirection.STABLE

    recent = moving_averages[-lookback:]
    change = recent[-1] - recent[0]
    if change > threshold:
        return TrendDirection.UP
    if change < -threshold:
        return TrendDirection.DOWN
    return TrendDirection.STABLE


def ma_change_rate(moving_averages: Sequence[float], days: int = 7) -> float:
    """Average per-step change over the trailing ``days`` values."""
    if days < 2 or len(moving_averages) < days:
        return 0.0

    recent = moving_averages[-days:]
    return round((recent[-1] - recent[0]) / (days - 1), 3)
