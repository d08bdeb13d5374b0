"""Database queries for weight entries, goals, milestones and streaks."""

from __future__ import annotations

import logging
import sqlite3
from datetime import date, datetime, timezone
from typing import Optional

from weighttrack.tracking.goals import Goal
from weighttrack.tracking.models import MilestoneCandidate, StreakState, WeightObservation
from weighttrack.tracking.streaks import compute_from_dates, snapshot_key

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _observation_from_row(row: sqlite3.Row) -> WeightObservation:
    return WeightObservation(
        id=row["entry_id"],
        user_id=row["user_id"],
        date=date.fromisoformat(row["date"]),
        weight=row["weight"],
        memo=row["memo"],
        created_at=datetime.fromisoformat(row["created_at"]) if row["created_at"] else None,
    )


def _goal_from_row(row: sqlite3.Row) -> Goal:
    return Goal(
        goal_id=row["goal_id"],
        user_id=row["user_id"],
        target_weight=row["target_weight"],
        deadline=date.fromisoformat(row["deadline"]),
        starting_weight=row["starting_weight"],
        is_active=bool(row["is_active"]),
        created_at=datetime.fromisoformat(row["created_at"]) if row["created_at"] else None,
    )


class WeightQueries:
    """Database queries for raw weight entries."""

    @staticmethod
    def add_entry(
        conn: sqlite3.Connection,
        user_id: int,
        weight: float,
        entry_date: date,
        memo: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> WeightObservation:
        """
        Add a weight entry.

        Entries on a date that already has one are kept side by side; the
        analytics average them.
        """
        created_at = created_at or _utcnow()
        # Validate before touching the database
        observation = WeightObservation(
            id=None,
            user_id=user_id,
            date=entry_date,
            weight=weight,
            memo=memo,
            created_at=created_at,
        )
        cursor = conn.execute(
            """
            INSERT INTO weight_entries (user_id, date, weight, memo, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                user_id,
                entry_date.isoformat(),
                weight,
                memo,
                observation.created_at.isoformat(sep=" "),
            ),
        )
        conn.commit()
        observation.id = cursor.lastrowid
        return observation

    @staticmethod
    def add_entries(conn: sqlite3.Connection, observations: list[WeightObservation]) -> int:
        """Bulk insert observations (ids are ignored). Returns rows inserted."""
        now = _utcnow()
        cursor = conn.executemany(
            """
            INSERT INTO weight_entries (user_id, date, weight, memo, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            [
                (
                    obs.user_id,
                    obs.date.isoformat(),
                    obs.weight,
                    obs.memo,
                    (obs.created_at or now).isoformat(sep=" "),
                )
                for obs in observations
            ],
        )
        conn.commit()
        return cursor.rowcount

    @staticmethod
    def get_entry(conn: sqlite3.Connection, entry_id: int) -> Optional[WeightObservation]:
        row = conn.execute(
            """
            SELECT entry_id, user_id, date, weight, memo, created_at
            FROM weight_entries WHERE entry_id = ?
            """,
            (entry_id,),
        ).fetchone()
        return _observation_from_row(row) if row else None

    @staticmethod
    def delete_entry(conn: sqlite3.Connection, user_id: int, entry_id: int) -> bool:
        """Delete one entry. Returns False if it did not exist for this user."""
        cursor = conn.execute(
            "DELETE FROM weight_entries WHERE entry_id = ? AND user_id = ?",
            (entry_id, user_id),
        )
        conn.commit()
        return cursor.rowcount > 0

    @staticmethod
    def get_observations(
        conn: sqlite3.Connection,
        user_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[WeightObservation]:
        """All observations for a user, optionally limited to [start, end]."""
        query = """
            SELECT entry_id, user_id, date, weight, memo, created_at
            FROM weight_entries
            WHERE user_id = ?
        """
        params: list = [user_id]
        if start is not None:
            query += " AND date >= ?"
            params.append(start.isoformat())
        if end is not None:
            query += " AND date <= ?"
            params.append(end.isoformat())
        query += " ORDER BY date, created_at, entry_id"

        rows = conn.execute(query, params).fetchall()
        return [_observation_from_row(row) for row in rows]

    @staticmethod
    def count_entries(conn: sqlite3.Connection, user_id: int) -> int:
        row = conn.execute(
            "SELECT COUNT(*) FROM weight_entries WHERE user_id = ?", (user_id,)
        ).fetchone()
        return row[0] if row else 0


class GoalQueries:
    """Database queries for target-weight goals."""

    @staticmethod
    def create_goal(conn: sqlite3.Connection, user_id: int, goal: Goal) -> Goal:
        """Store a new active goal, deactivating any previous one."""
        conn.execute("UPDATE goals SET is_active = FALSE WHERE user_id = ?", (user_id,))
        cursor = conn.execute(
            """
            INSERT INTO goals (user_id, target_weight, deadline, starting_weight, is_active)
            VALUES (?, ?, ?, ?, TRUE)
            """,
            (user_id, goal.target_weight, goal.deadline.isoformat(), goal.starting_weight),
        )
        conn.commit()
        goal.goal_id = cursor.lastrowid
        goal.user_id = user_id
        goal.is_active = True
        return goal

    @staticmethod
    def get_active_goal(conn: sqlite3.Connection, user_id: int) -> Optional[Goal]:
        """Most recently created active goal."""
        row = conn.execute(
            """
            SELECT goal_id, user_id, target_weight, deadline, starting_weight,
                   is_active, created_at
            FROM goals
            WHERE user_id = ? AND is_active = TRUE
            ORDER BY created_at DESC, goal_id DESC LIMIT 1
            """,
            (user_id,),
        ).fetchone()
        return _goal_from_row(row) if row else None

    @staticmethod
    def list_goals(conn: sqlite3.Connection, user_id: int) -> list[Goal]:
        rows = conn.execute(
            """
            SELECT goal_id, user_id, target_weight, deadline, starting_weight,
                   is_active, created_at
            FROM goals WHERE user_id = ?
            ORDER BY goal_id DESC
            """,
            (user_id,),
        ).fetchall()
        return [_goal_from_row(row) for row in rows]

    @staticmethod
    def deactivate_goals(conn: sqlite3.Connection, user_id: int) -> int:
        """Deactivate all active goals. Returns how many were active."""
        cursor = conn.execute(
            "UPDATE goals SET is_active = FALSE WHERE user_id = ? AND is_active = TRUE",
            (user_id,),
        )
        conn.commit()
        return cursor.rowcount


class MilestoneQueries:
    """Database queries for claimed milestones."""

    @staticmethod
    def record_achievement(
        conn: sqlite3.Connection,
        user_id: int,
        candidate: MilestoneCandidate,
    ) -> bool:
        """
        Record a milestone if it has not been recorded before.

        Safe to call repeatedly with the same candidate: the unique
        (user_id, threshold) constraint turns duplicates into no-ops.

        Returns:
            True if this call recorded the milestone
        """
        cursor = conn.execute(
            """
            INSERT OR IGNORE INTO milestone_achievements (user_id, threshold, achieved_on, weight)
            VALUES (?, ?, ?, ?)
            """,
            (user_id, candidate.threshold, candidate.date.isoformat(), candidate.weight),
        )
        conn.commit()
        inserted = cursor.rowcount > 0
        if inserted:
            logger.info("Recorded milestone %d for user %d", candidate.threshold, user_id)
        return inserted

    @staticmethod
    def get_achieved_thresholds(conn: sqlite3.Connection, user_id: int) -> set[int]:
        rows = conn.execute(
            "SELECT threshold FROM milestone_achievements WHERE user_id = ?",
            (user_id,),
        ).fetchall()
        return {row[0] for row in rows}

    @staticmethod
    def list_achievements(conn: sqlite3.Connection, user_id: int) -> list[dict]:
        rows = conn.execute(
            """
            SELECT threshold, achieved_on, weight
            FROM milestone_achievements WHERE user_id = ?
            ORDER BY threshold
            """,
            (user_id,),
        ).fetchall()
        return [
            {"threshold": row[0], "achieved_on": row[1], "weight": row[2]}
            for row in rows
        ]


class StreakQueries:
    """Cached streak state.

    The cache is an optimization only: a stored state is reused while its
    snapshot key still matches the user's entry dates and reference day,
    otherwise the streak is recomputed from the entries and stored again.
    """

    @staticmethod
    def get_cached(conn: sqlite3.Connection, user_id: int) -> Optional[tuple[StreakState, str]]:
        row = conn.execute(
            """
            SELECT current_streak, best_streak, last_entry_date, snapshot_key
            FROM streak_cache WHERE user_id = ?
            """,
            (user_id,),
        ).fetchone()
        if row is None:
            return None
        state = StreakState(
            current_streak=row[0],
            best_streak=row[1],
            last_entry_date=date.fromisoformat(row[2]) if row[2] else None,
        )
        return state, row[3]

    @staticmethod
    def save(conn: sqlite3.Connection, user_id: int, state: StreakState, key: str) -> None:
        conn.execute(
            """
            INSERT OR REPLACE INTO streak_cache
                (user_id, current_streak, best_streak, last_entry_date, snapshot_key, updated_at)
            VALUES (?, ?, ?, ?, ?, CURRENT_TIMESTAMP)
            """,
            (
                user_id,
                state.current_streak,
                state.best_streak,
                state.last_entry_date.isoformat() if state.last_entry_date else None,
                key,
            ),
        )
        conn.commit()

    @staticmethod
    def get_entry_dates(conn: sqlite3.Connection, user_id: int) -> list[date]:
        rows = conn.execute(
            "SELECT DISTINCT date FROM weight_entries WHERE user_id = ?",
            (user_id,),
        ).fetchall()
        return [date.fromisoformat(row[0]) for row in rows]

    @staticmethod
    def get_streak(conn: sqlite3.Connection, user_id: int, today: date) -> StreakState:
        """Streak for a user, reusing the cache only when it is still valid."""
        dates = StreakQueries.get_entry_dates(conn, user_id)
        key = snapshot_key(dates, today)

        cached = StreakQueries.get_cached(conn, user_id)
        if cached is not None and cached[1] == key:
            return cached[0]

        logger.debug("Streak cache miss for user %d, recomputing", user_id)
        state = compute_from_dates(dates, today)
        StreakQueries.save(conn, user_id, state, key)
        return state
