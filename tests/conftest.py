"""Pytest fixtures for weighttrack tests."""

from __future__ import annotations

import tempfile
from datetime import date, datetime, timedelta
from pathlib import Path

import pytest

from weighttrack.config import reload_settings
from weighttrack.db import set_db
from weighttrack.db.connection import DatabaseConnection
from weighttrack.tracking.models import DailyPoint, WeightObservation


@pytest.fixture
def temp_db():
    """Create a temporary database with schema."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    db = DatabaseConnection(db_path)
    db.initialize_schema()

    yield db

    # Cleanup
    db_path.unlink(missing_ok=True)


@pytest.fixture
def cli_env(temp_db, tmp_path):
    """Point the CLI at the temporary database and default settings."""
    reload_settings(tmp_path / "config.yaml")
    set_db(temp_db)
    yield temp_db
    set_db(None)


@pytest.fixture
def make_obs():
    """Factory for observations: make_obs("2025-06-01", 80.0, memo=...)."""
    counter = {"id": 0}

    def _make(day, weight, memo=None, created_at=None, user_id=1):
        counter["id"] += 1
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        return WeightObservation(
            id=counter["id"],
            user_id=user_id,
            date=day,
            weight=weight,
            memo=memo,
            created_at=created_at,
        )

    return _make


@pytest.fixture
def make_points():
    """Factory for consecutive DailyPoints starting at ``start``."""

    def _make(weights, start=date(2025, 1, 1)):
        return [
            DailyPoint(date=start + timedelta(days=i), weight=w, source_count=1)
            for i, w in enumerate(weights)
        ]

    return _make


@pytest.fixture
def sample_observations(make_obs):
    """Two weeks of entries with a double entry and a gap.

    June 2025: the 1st is a Sunday, the 2nd a Monday.
    """
    return [
        make_obs("2025-05-26", 82.0),
        make_obs("2025-05-27", 81.6),
        make_obs("2025-05-29", 81.2),
        make_obs("2025-06-02", 80.8, memo="after run", created_at="2025-06-02 07:00"),
        make_obs("2025-06-02", 81.2, created_at="2025-06-02 21:00"),
        make_obs("2025-06-03", 80.4),
        make_obs("2025-06-04", 80.0),
    ]
