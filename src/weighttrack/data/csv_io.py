"""Import and export weight entries as CSV files."""

from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd

from weighttrack.tracking.models import WeightObservation

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["date", "weight"]
OPTIONAL_COLUMNS = ["memo", "created_at"]


def _optional_str(value) -> Optional[str]:
    if pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def load_observations_csv(path: Path, user_id: int) -> list[WeightObservation]:
    """Load weight entries from a CSV file.

    The file needs ``date`` (YYYY-MM-DD) and ``weight`` columns; ``memo``
    and ``created_at`` are optional.

    Args:
        path: CSV file to read
        user_id: Owner of the imported entries

    Returns:
        Observations in file order (ids unset)

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If a required column is missing or a row is invalid
    """
    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {path}")

    df = pd.read_csv(path, dtype={"date": str})
    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"CSV is missing required column(s): {', '.join(missing)}")

    observations = []
    for index, row in df.iterrows():
        try:
            created_raw = _optional_str(row["created_at"]) if "created_at" in df.columns else None
            observations.append(
                WeightObservation(
                    id=None,
                    user_id=user_id,
                    date=date.fromisoformat(str(row["date"]).strip()),
                    weight=float(row["weight"]),
                    memo=_optional_str(row["memo"]) if "memo" in df.columns else None,
                    created_at=datetime.fromisoformat(created_raw) if created_raw else None,
                )
            )
        except (TypeError, ValueError) as e:
            # Row numbers are 1-based and skip the header line
            raise ValueError(f"Invalid row {index + 2} in {path.name}: {e}") from e

    logger.debug("Loaded %d observations from %s", len(observations), path)
    return observations


def observations_to_frame(observations: Iterable[WeightObservation]) -> pd.DataFrame:
    """DataFrame with one row per observation, sorted by date."""
    records = [
        {
            "date": obs.date.isoformat(),
            "weight": obs.weight,
            "memo": obs.memo,
            "created_at": obs.created_at.isoformat(sep=" ") if obs.created_at else None,
        }
        for obs in observations
    ]
    df = pd.DataFrame.from_records(records, columns=REQUIRED_COLUMNS + OPTIONAL_COLUMNS)
    return df.sort_values("date", kind="stable").reset_index(drop=True)


def export_observations_csv(observations: Iterable[WeightObservation], path: Path) -> int:
    """Write observations to CSV. Returns the number of rows written."""
    df = observations_to_frame(observations)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    return len(df)
