"""SQLite database layer — habits, habit logs, user profile, coach messages.

Lightweight schema. Tables are created automatically on first run.
Frequency and quantity are stored as JSON using the shapes defined in
habitpal.models. Every habit/log write notifies subscribers.
"""

import json
import logging
import sqlite3
import uuid
from datetime import datetime, timezone

from habitpal.config import DB_PATH
from habitpal.errors import ConfigurationError, HabitNotFoundError
from habitpal.models import (
    Habit,
    HabitFrequency,
    HabitLog,
    HabitQuantity,
    UserProfile,
    frequency_from_dict,
    frequency_to_dict,
    quantity_from_dict,
    quantity_to_dict,
)
from habitpal import subscriptions

logger = logging.getLogger(__name__)


def _connect() -> sqlite3.Connection:
    """Return a connection with row_factory set."""
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(DB_PATH))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    return conn


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return uuid.uuid4().hex


def init_db() -> None:
    """Create tables if they don't exist."""
    conn = _connect()
    conn.executescript("""
        -- Habits (defined by user)
        CREATE TABLE IF NOT EXISTS habits (
            id          TEXT    PRIMARY KEY,
            user_id     INTEGER NOT NULL,
            name        TEXT    NOT NULL,
            category_id TEXT,
            frequency   TEXT    NOT NULL,
            quantity    TEXT    NOT NULL,
            archived    INTEGER NOT NULL DEFAULT 0,
            created_at  TEXT    NOT NULL
        );
        CREATE INDEX IF NOT EXISTS idx_habits_user
            ON habits(user_id, created_at);

        -- Habit logs (many per habit per day allowed)
        CREATE TABLE IF NOT EXISTS habit_logs (
            id         TEXT    PRIMARY KEY,
            habit_id   TEXT    NOT NULL REFERENCES habits(id),
            user_id    INTEGER NOT NULL,
            date       TEXT    NOT NULL,
            count      INTEGER,
            completed  INTEGER NOT NULL DEFAULT 0,
            created_at TEXT    NOT NULL
        );
        CREATE INDEX IF NOT EXISTS idx_habit_logs_habit
            ON habit_logs(habit_id, date);
        CREATE INDEX IF NOT EXISTS idx_habit_logs_user_date
            ON habit_logs(user_id, date);

        -- User profile (name/age, fed to the coach)
        CREATE TABLE IF NOT EXISTS user_profile (
            user_id    INTEGER PRIMARY KEY,
            name       TEXT    NOT NULL DEFAULT '',
            age        INTEGER NOT NULL DEFAULT 0,
            updated_at TEXT    NOT NULL
        );

        -- Coach conversation
        CREATE TABLE IF NOT EXISTS messages (
            id         INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id    INTEGER NOT NULL,
            role       TEXT    NOT NULL,
            content    TEXT    NOT NULL,
            created_at TEXT    NOT NULL
        );
        CREATE INDEX IF NOT EXISTS idx_messages_user
            ON messages(user_id, created_at);
    """)
    conn.close()
    logger.info("Database initialized at %s", DB_PATH)


# ═══════════════════════════════════════════════════════════════════════════
# Row mapping
# ═══════════════════════════════════════════════════════════════════════════

def _row_to_habit(row: sqlite3.Row) -> Habit:
    return Habit(
        id=row["id"],
        name=row["name"],
        category_id=row["category_id"],
        frequency=frequency_from_dict(json.loads(row["frequency"])),
        quantity=quantity_from_dict(json.loads(row["quantity"])),
        created_at=datetime.fromisoformat(row["created_at"]),
        archived=bool(row["archived"]),
    )


def _row_to_log(row: sqlite3.Row) -> HabitLog:
    return HabitLog(
        id=row["id"],
        habit_id=row["habit_id"],
        date=row["date"],
        count=row["count"],
        completed=bool(row["completed"]),
        created_at=datetime.fromisoformat(row["created_at"]),
    )


# ═══════════════════════════════════════════════════════════════════════════
# Habits
# ═══════════════════════════════════════════════════════════════════════════

def create_habit(user_id: int, name: str, frequency: HabitFrequency,
                 quantity: HabitQuantity, category_id: str | None = None) -> str:
    """Create a new habit. Returns habit id."""
    habit = Habit(id=_new_id(), name=name, frequency=frequency,
                  quantity=quantity, category_id=category_id)
    conn = _connect()
    conn.execute(
        """INSERT INTO habits (id, user_id, name, category_id, frequency, quantity, archived, created_at)
           VALUES (?, ?, ?, ?, ?, ?, 0, ?)""",
        (habit.id, user_id, habit.name, habit.category_id,
         json.dumps(frequency_to_dict(frequency)),
         json.dumps(quantity_to_dict(quantity)),
         habit.created_at.isoformat()),
    )
    conn.commit()
    conn.close()
    subscriptions.notify_habits_changed(user_id)
    return habit.id


def update_habit(user_id: int, habit_id: str, *, name: str | None = None,
                 category_id: str | None = None,
                 frequency: HabitFrequency | None = None,
                 quantity: HabitQuantity | None = None,
                 archived: bool | None = None) -> Habit:
    """Merge the given fields into an existing habit. Returns the updated habit."""
    current = get_habit(user_id, habit_id)
    updated = Habit(
        id=current.id,
        name=name if name is not None else current.name,
        category_id=category_id if category_id is not None else current.category_id,
        frequency=frequency if frequency is not None else current.frequency,
        quantity=quantity if quantity is not None else current.quantity,
        created_at=current.created_at,
        archived=archived if archived is not None else current.archived,
    )
    conn = _connect()
    conn.execute(
        """UPDATE habits SET name = ?, category_id = ?, frequency = ?, quantity = ?, archived = ?
           WHERE id = ? AND user_id = ?""",
        (updated.name, updated.category_id,
         json.dumps(frequency_to_dict(updated.frequency)),
         json.dumps(quantity_to_dict(updated.quantity)),
         int(updated.archived), habit_id, user_id),
    )
    conn.commit()
    conn.close()
    subscriptions.notify_habits_changed(user_id)
    return updated


def get_habit(user_id: int, habit_id: str) -> Habit:
    conn = _connect()
    row = conn.execute(
        "SELECT * FROM habits WHERE id = ? AND user_id = ?", (habit_id, user_id)
    ).fetchone()
    conn.close()
    if not row:
        raise HabitNotFoundError(habit_id)
    return _row_to_habit(row)


def list_habits(user_id: int) -> list[Habit]:
    """All habits of a user, newest first. Corrupt rows are skipped."""
    conn = _connect()
    rows = conn.execute(
        "SELECT * FROM habits WHERE user_id = ? ORDER BY created_at DESC, rowid DESC",
        (user_id,),
    ).fetchall()
    conn.close()

    habits = []
    for r in rows:
        try:
            habits.append(_row_to_habit(r))
        except (ConfigurationError, ValueError) as e:
            logger.warning("Skipping habit %s with invalid configuration: %s", r["id"], e)
    return habits


def delete_habit(user_id: int, habit_id: str) -> None:
    """Delete a habit and its logs."""
    conn = _connect()
    conn.execute("DELETE FROM habit_logs WHERE habit_id = ? AND user_id = ?", (habit_id, user_id))
    conn.execute("DELETE FROM habits WHERE id = ? AND user_id = ?", (habit_id, user_id))
    conn.commit()
    conn.close()
    subscriptions.notify_habits_changed(user_id)


# ═══════════════════════════════════════════════════════════════════════════
# Habit Logs
# ═══════════════════════════════════════════════════════════════════════════

def log_habit(user_id: int, habit_id: str, date: str,
              completed: bool = False, count: int | None = None) -> str:
    """Append a log record for a habit on a day key. Returns log id."""
    if count is not None and count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    log_id = _new_id()
    conn = _connect()
    conn.execute(
        """INSERT INTO habit_logs (id, habit_id, user_id, date, count, completed, created_at)
           VALUES (?, ?, ?, ?, ?, ?, ?)""",
        (log_id, habit_id, user_id, date, count, int(completed), _now()),
    )
    conn.commit()
    conn.close()
    subscriptions.notify_logs_changed(user_id, date)
    return log_id


def list_habit_logs(user_id: int, habit_id: str) -> list[HabitLog]:
    """All logs of one habit, newest day first (callers must not rely on order)."""
    conn = _connect()
    rows = conn.execute(
        "SELECT * FROM habit_logs WHERE habit_id = ? AND user_id = ? ORDER BY date DESC",
        (habit_id, user_id),
    ).fetchall()
    conn.close()
    return [_row_to_log(r) for r in rows]


def list_logs_for_date(user_id: int, date: str) -> list[HabitLog]:
    """All logs of every habit of a user on one day."""
    conn = _connect()
    rows = conn.execute(
        "SELECT * FROM habit_logs WHERE user_id = ? AND date = ? ORDER BY created_at",
        (user_id, date),
    ).fetchall()
    conn.close()
    return [_row_to_log(r) for r in rows]


# ═══════════════════════════════════════════════════════════════════════════
# User Profile
# ═══════════════════════════════════════════════════════════════════════════

def get_user_profile(user_id: int) -> UserProfile | None:
    conn = _connect()
    row = conn.execute(
        "SELECT name, age, updated_at FROM user_profile WHERE user_id = ?", (user_id,)
    ).fetchone()
    conn.close()
    if not row:
        return None
    return UserProfile(name=row["name"], age=row["age"], updated_at=row["updated_at"])


def update_user_profile(user_id: int, name: str | None = None, age: int | None = None) -> UserProfile:
    """Merge name/age into the stored profile (upsert)."""
    current = get_user_profile(user_id) or UserProfile()
    profile = UserProfile(
        name=name if name is not None else current.name,
        age=age if age is not None else current.age,
        updated_at=_now(),
    )
    conn = _connect()
    conn.execute(
        """INSERT INTO user_profile (user_id, name, age, updated_at) VALUES (?, ?, ?, ?)
           ON CONFLICT(user_id) DO UPDATE SET name = excluded.name, age = excluded.age,
                                              updated_at = excluded.updated_at""",
        (user_id, profile.name, profile.age, profile.updated_at),
    )
    conn.commit()
    conn.close()
    return profile


# ═══════════════════════════════════════════════════════════════════════════
# Messages
# ═══════════════════════════════════════════════════════════════════════════

def save_message(user_id: int, role: str, content: str) -> None:
    conn = _connect()
    conn.execute(
        "INSERT INTO messages (user_id, role, content, created_at) VALUES (?, ?, ?, ?)",
        (user_id, role, content, _now()),
    )
    conn.commit()
    conn.close()


def get_recent_messages(user_id: int, limit: int = 20) -> list[dict]:
    conn = _connect()
    rows = conn.execute(
        "SELECT role, content, created_at FROM messages WHERE user_id = ? ORDER BY id DESC LIMIT ?",
        (user_id, limit),
    ).fetchall()
    conn.close()
    return [dict(r) for r in reversed(rows)]
