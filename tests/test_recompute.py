"""Analytics recomputed from the same entries give the same results."""

from __future__ import annotations

from datetime import date

from weighttrack.tracking.chart import ChartConfig, TimePeriod, assemble
from weighttrack.tracking.streaks import compute
from weighttrack.tracking.summaries import summarize
from weighttrack.tracking.trends import weekly_trend

TODAY = date(2025, 6, 4)


class TestRepeatedCalls:
    """Each call works on its input alone and leaves it untouched."""

    def test_assemble(self, sample_observations) -> None:
        config = ChartConfig(period=TimePeriod.MONTH)
        first = [p.to_dict() for p in assemble(sample_observations, config, TODAY)]
        second = [p.to_dict() for p in assemble(sample_observations, config, TODAY)]
        assert first == second

    def test_streak(self, sample_observations) -> None:
        assert compute(sample_observations, TODAY) == compute(sample_observations, TODAY)

    def test_summarize(self, sample_observations) -> None:
        start, end = date(2025, 6, 2), date(2025, 6, 8)
        first = summarize(sample_observations, start, end)
        assert first == summarize(sample_observations, start, end)
        assert first.days_logged == 3

    def test_weekly_trend(self, sample_observations) -> None:
        first = weekly_trend(sample_observations, TODAY)
        assert first is not None
        assert first.to_dict() == weekly_trend(sample_observations, TODAY).to_dict()

    def test_input_not_mutated(self, sample_observations) -> None:
        before = [o.to_dict() for o in sample_observations]
        assemble(sample_observations, ChartConfig(period=TimePeriod.ALL))
        compute(sample_observations, TODAY)
        weekly_trend(sample_observations, TODAY)
        assert [o.to_dict() for o in sample_observations] == before
