"""Tests for milestone detection."""

from __future__ import annotations

import pytest

from weighttrack.tracking.milestones import (
    detect,
    milestone_message,
    milestone_target_weight,
    new_milestones,
    next_milestone,
    threshold_number,
)


def _flags(annotated):
    return [(p.is_milestone, p.milestone_threshold, p.is_new_milestone) for p in annotated]


class TestThresholdNumber:
    """Tests for threshold_number()."""

    @pytest.mark.parametrize(
        "weight,expected",
        [(90.0, 0), (88.0, 0), (87.0, 1), (84.0, 2), (83.5, 2), (91.0, -1)],
    )
    def test_whole_thresholds(self, weight, expected) -> None:
        assert threshold_number(90.0, weight) == expected

    def test_float_noise_at_boundary(self) -> None:
        """A hair above the boundary still counts as reaching it."""
        assert threshold_number(90.0, 87.0000000001) == 1

    def test_custom_size(self) -> None:
        assert threshold_number(90.0, 85.0, size=2.5) == 2

    def test_rejects_non_positive_size(self) -> None:
        with pytest.raises(ValueError):
            threshold_number(90.0, 87.0, size=0)


class TestDetect:
    """Tests for detect()."""

    def test_first_crossing_is_new(self, make_points) -> None:
        annotated = detect(make_points([90.0, 88.0, 87.0, 86.5]), 90.0)
        assert _flags(annotated) == [
            (False, None, False),
            (False, None, False),
            (True, 1, True),
            (True, 1, False),
        ]

    def test_previously_achieved_not_new(self, make_points) -> None:
        annotated = detect(make_points([90.0, 87.0]), 90.0, previously_achieved={1})
        assert annotated[1].is_milestone
        assert not annotated[1].is_new_milestone

    def test_recorded_threshold_claims_lower_ones(self, make_points) -> None:
        annotated = detect(make_points([90.0, 87.0]), 90.0, previously_achieved={2})
        assert not annotated[1].is_new_milestone

    def test_jump_claims_skipped_thresholds(self, make_points) -> None:
        """Dropping straight to threshold 2 means a later threshold-1 day is not new."""
        annotated = detect(make_points([90.0, 83.5, 86.0]), 90.0)
        assert _flags(annotated)[1:] == [(True, 2, True), (True, 1, False)]

    def test_regain_does_not_unclaim(self, make_points) -> None:
        annotated = detect(make_points([90.0, 87.0, 91.0, 87.0]), 90.0)
        assert [p.is_new_milestone for p in annotated] == [False, True, False, False]

    def test_each_threshold_new_at_most_once(self, make_points) -> None:
        weights = [90.0, 87.0, 86.0, 84.0, 85.0, 83.9, 81.0, 80.5]
        annotated = detect(make_points(weights), 90.0)
        new = [p.milestone_threshold for p in annotated if p.is_new_milestone]
        assert new == sorted(set(new))
        assert new == [1, 2, 3]

    def test_input_not_mutated(self, make_points) -> None:
        points = make_points([90.0, 87.0])
        detect(points, 90.0)
        assert not hasattr(points[1], "is_milestone")

    def test_sorted_by_date(self, make_points) -> None:
        points = make_points([90.0, 87.0, 86.0])
        annotated = detect(list(reversed(points)), 90.0)
        assert [p.date for p in annotated] == [p.date for p in points]
        assert annotated[1].is_new_milestone


class TestHelpers:
    """Tests for candidate extraction and next-milestone helpers."""

    def test_new_milestones(self, make_points) -> None:
        annotated = detect(make_points([90.0, 87.0, 86.0]), 90.0)
        candidates = new_milestones(annotated, 90.0)

        assert len(candidates) == 1
        assert candidates[0].threshold == 1
        assert candidates[0].weight_lost == pytest.approx(3.0)

    @pytest.mark.parametrize("current,expected", [(90.0, 1), (88.0, 1), (86.0, 2), (95.0, 1)])
    def test_next_milestone(self, current, expected) -> None:
        assert next_milestone(90.0, current) == expected

    def test_target_weight(self) -> None:
        assert milestone_target_weight(90.0, 2) == pytest.approx(84.0)

    def test_messages(self) -> None:
        assert "First milestone" in milestone_message(1, 3.0)
        assert "Incredible" in milestone_message(5, 15.0)
        assert "lbs" in milestone_message(2, 6.0, unit="lbs")
