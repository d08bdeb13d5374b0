"""Consecutive-logging-day streaks.

Streaks are computed from the set of distinct logged dates; several
entries on one day count once. A one-day grace period applies: a streak
whose last entry was yesterday is still current (but "at risk"), one whose
last entry is older than that is broken.

The only time input is the injected ``today``; nothing here reads the
system clock.
"""

from __future__ import annotations

import hashlib
from datetime import date, timedelta
from typing import Iterable, Optional

from weighttrack.tracking.bucketing import distinct_dates
from weighttrack.tracking.models import StreakState, WeightObservation

ONE_DAY = timedelta(days=1)


def _current_streak(dates_desc: list[date], today: date) -> int:
    most_recent = dates_desc[0]
    if (today - most_recent).days > 1:
        return 0

    count = 0
    expected = most_recent
    for day in dates_desc:
        if day != expected:
            break
        count += 1
        expected -= ONE_DAY
    return count


def _best_streak(dates_desc: list[date]) -> int:
    best = 0
    run = 0
    prev: Optional[date] = None
    for day in dates_desc:
        run = run + 1 if prev is not None and prev - day == ONE_DAY else 1
        best = max(best, run)
        prev = day
    return best


def compute_from_dates(dates: Iterable[date], today: date) -> StreakState:
    """Streak state from logged dates (duplicates allowed, any order)."""
    dates_desc = sorted(set(dates), reverse=True)
    if not dates_desc:
        return StreakState(current_streak=0, best_streak=0, last_entry_date=None)

    current = _current_streak(dates_desc, today)
    best = max(_best_streak(dates_desc), current)
    return StreakState(
        current_streak=current,
        best_streak=best,
        last_entry_date=dates_desc[0],
    )


def compute(observations: Iterable[WeightObservation], today: date) -> StreakState:
    """
    Compute current and best streaks.

    Args:
        observations: Raw observations in any order
        today: Reference date for the grace period

    Returns:
        StreakState with best_streak >= current_streak

    Example:
        entries on 06-01 and 06-02, today 06-03 -> current 2
        same entries, today 06-04 -> current 0, best 2
    """
    return compute_from_dates(distinct_dates(observations), today)


def is_streak_at_risk(last_entry_date: Optional[date], today: date) -> bool:
    """True when the last entry was yesterday, so today's entry keeps the streak."""
    if last_entry_date is None:
        return False
    return (today - last_entry_date).days == 1


def format_streak_text(current_streak: int) -> str:
    if current_streak == 0:
        return "Start your streak!"
    if current_streak == 1:
        return "1 day streak"
    return f"{current_streak} day streak"


def snapshot_key(dates: Iterable[date], today: date) -> str:
    """Digest of the distinct date set and reference day.

    A stored StreakState may only be reused while this key is unchanged.
    """
    payload = ",".join(d.isoformat() for d in sorted(set(dates)))
    payload = f"{payload}|{today.isoformat()}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
