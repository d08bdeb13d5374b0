"""SQLite database schema definitions."""

SCHEMA_SQL = """
-- Raw weight entries; several per user and date are allowed
CREATE TABLE IF NOT EXISTS weight_entries (
    entry_id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    date DATE NOT NULL,
    weight REAL NOT NULL CHECK(weight > 0),
    memo TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_weight_entries_user_date ON weight_entries(user_id, date);

-- Target-weight goals; at most one active per user by convention
CREATE TABLE IF NOT EXISTS goals (
    goal_id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    target_weight REAL NOT NULL CHECK(target_weight > 0),
    deadline DATE NOT NULL,
    starting_weight REAL,
    is_active BOOLEAN DEFAULT TRUE,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_goals_user_active ON goals(user_id, is_active);

-- Claimed milestones; the unique constraint makes recording idempotent
CREATE TABLE IF NOT EXISTS milestone_achievements (
    achievement_id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    threshold INTEGER NOT NULL CHECK(threshold > 0),
    achieved_on DATE NOT NULL,
    weight REAL NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    UNIQUE(user_id, threshold)
);

-- Cached streak; valid only while snapshot_key matches the entry dates
CREATE TABLE IF NOT EXISTS streak_cache (
    user_id INTEGER PRIMARY KEY,
    current_streak INTEGER NOT NULL DEFAULT 0,
    best_streak INTEGER NOT NULL DEFAULT 0,
    last_entry_date DATE,
    snapshot_key TEXT NOT NULL,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


TABLES = ("weight_entries", "goals", "milestone_achievements", "streak_cache")


def get_schema_sql() -> str:
    """Return the complete schema SQL."""
    return SCHEMA_SQL
