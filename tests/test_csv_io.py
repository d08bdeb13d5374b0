"""Tests for CSV import/export."""

from __future__ import annotations

from datetime import date, datetime

import pandas as pd
import pytest

from weighttrack.data.csv_io import (
    export_observations_csv,
    load_observations_csv,
    observations_to_frame,
)


class TestLoad:
    """Tests for load_observations_csv()."""

    def test_load_with_optional_columns(self, tmp_path) -> None:
        path = tmp_path / "weights.csv"
        path.write_text(
            "date,weight,memo,created_at\n"
            "2025-06-01,80.5,morning,2025-06-01 07:00:00\n"
            "2025-06-02,80.1,,\n"
        )
        observations = load_observations_csv(path, user_id=3)

        assert len(observations) == 2
        assert observations[0].date == date(2025, 6, 1)
        assert observations[0].weight == pytest.approx(80.5)
        assert observations[0].memo == "morning"
        assert observations[0].created_at == datetime(2025, 6, 1, 7)
        assert observations[1].memo is None
        assert observations[1].created_at is None
        assert all(o.user_id == 3 and o.id is None for o in observations)

    def test_minimal_columns(self, tmp_path) -> None:
        path = tmp_path / "weights.csv"
        path.write_text("date,weight\n2025-06-01,80\n")
        observations = load_observations_csv(path, user_id=1)
        assert observations[0].memo is None

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            load_observations_csv(tmp_path / "nope.csv", user_id=1)

    def test_missing_column(self, tmp_path) -> None:
        path = tmp_path / "weights.csv"
        path.write_text("date,kg\n2025-06-01,80\n")
        with pytest.raises(ValueError, match="weight"):
            load_observations_csv(path, user_id=1)

    def test_invalid_row_reported(self, tmp_path) -> None:
        path = tmp_path / "weights.csv"
        path.write_text("date,weight\n2025-06-01,80\n2025-06-02,-1\n")
        with pytest.raises(ValueError, match="Invalid row 3"):
            load_observations_csv(path, user_id=1)

    def test_bad_date(self, tmp_path) -> None:
        path = tmp_path / "weights.csv"
        path.write_text("date,weight\n06/01/2025,80\n")
        with pytest.raises(ValueError, match="Invalid row 2"):
            load_observations_csv(path, user_id=1)


class TestExport:
    def test_export_sorted(self, tmp_path, make_obs) -> None:
        observations = [
            make_obs("2025-06-03", 79.0),
            make_obs("2025-06-01", 80.0, memo="start"),
        ]
        path = tmp_path / "out" / "weights.csv"

        assert export_observations_csv(observations, path) == 2
        df = pd.read_csv(path)
        assert list(df.columns) == ["date", "weight", "memo", "created_at"]
        assert list(df["date"]) == ["2025-06-01", "2025-06-03"]
        assert df.loc[0, "memo"] == "start"

    def test_exported_file_loads_back(self, tmp_path, sample_observations) -> None:
        path = tmp_path / "weights.csv"
        export_observations_csv(sample_observations, path)
        loaded = load_observations_csv(path, user_id=1)

        assert sorted((o.date, o.weight) for o in loaded) == sorted(
            (o.date, o.weight) for o in sample_observations
        )

    def test_empty_frame(self) -> None:
        df = observations_to_frame([])
        assert df.empty
        assert list(df.columns) == ["date", "weight", "memo", "created_at"]
