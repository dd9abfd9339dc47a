"""Chat command handlers, transport-agnostic.

Each function takes the user id and raw arguments and returns the reply
text. User mistakes come back as friendly messages, not exceptions.
"""

import logging

from habitpal import db
from habitpal.errors import ConfigurationError
from habitpal.frequency import describe_frequency, describe_quantity
from habitpal.parsing import parse_done_args, parse_new_habit
from habitpal.tracker import find_habit_by_name, habit_status, record_progress, user_digest

log = logging.getLogger(__name__)

UNCATEGORIZED = "other"

HELP_TEXT = (
    "I track your habits and coach you along the way.\n\n"
    "Commands:\n"
    "/habits — Streaks and the last 7 days\n"
    "/new <name> | <recurrence> | <quantity> | <category> — Add a habit\n"
    "    recurrence: daily, weekly mon,wed,fri, every 3 days\n"
    "    quantity: check (default) or count 8\n"
    "    category: optional label, e.g. health\n"
    "/done <name> [count] — Log progress for today\n"
    "/archive <name> — Archive a habit\n"
    "/delete <name> — Delete a habit and its history\n"
    "/profile <name> <age> — Tell me about you\n"
    "/help — This message\n\n"
    "Anything else you write goes to your coach."
)


def _category_lines(user_id: int) -> list[str]:
    """'- health: Water, Gym' lines, or nothing if no habit has a category."""
    habits = db.list_habits(user_id)
    if not any(h.category_id for h in habits):
        return []
    groups: dict[str, list[str]] = {}
    for h in habits:
        groups.setdefault(h.category_id or UNCATEGORIZED, []).append(h.name)
    named = sorted(k for k in groups if k != UNCATEGORIZED)
    if UNCATEGORIZED in groups:
        named.append(UNCATEGORIZED)
    return [f"- {k}: {', '.join(groups[k])}" for k in named]


def habits_overview(user_id: int, today: str) -> str:
    summary = user_digest(user_id, today).summary
    categories = _category_lines(user_id)
    if categories:
        summary += "\n\nBy category:\n" + "\n".join(categories)
    return summary


def new_habit(user_id: int, args: str) -> str:
    try:
        name, frequency, quantity, category = parse_new_habit(args)
    except ConfigurationError as e:
        return f"⚠️ {e}"
    if find_habit_by_name(user_id, name):
        return f"You already have a habit called {name}."
    db.create_habit(user_id, name, frequency, quantity, category_id=category)
    log.info("Habit created: %s", name)
    reply = f"✅ New habit: {name} ({describe_frequency(frequency)}, {describe_quantity(quantity)})"
    if category:
        reply += f" in {category}"
    return reply


def mark_done(user_id: int, args: list[str], today: str) -> str:
    try:
        name, count = parse_done_args(args)
    except ConfigurationError as e:
        return f"⚠️ {e}"
    habit = find_habit_by_name(user_id, name)
    if habit is None:
        return f"No habit called {name}. Try /habits."
    if habit.archived:
        return f"{habit.name} is archived."
    if habit.is_count and count is None:
        count = 1

    outcome = record_progress(user_id, habit.id, today, count=count)
    status = habit_status(user_id, habit.id, today)
    streak = status.streak

    if habit.is_count:
        progress = f"{outcome.total_count}/{habit.quantity.target}"
        if outcome.satisfied:
            return f"🎯 {habit.name}: {progress}, target reached! Streak: {streak.current} (best {streak.best})"
        return f"➕ {habit.name}: {progress} today."
    return f"✅ {habit.name} done! Streak: {streak.current} (best {streak.best})"


def archive_habit(user_id: int, args: list[str]) -> str:
    name = " ".join(args).strip()
    if not name:
        return "⚠️ Which habit? e.g. /archive Read"
    habit = find_habit_by_name(user_id, name)
    if habit is None:
        return f"No habit called {name}."
    db.update_habit(user_id, habit.id, archived=True)
    return f"🗄 {habit.name} archived."


def delete_habit(user_id: int, args: list[str]) -> str:
    name = " ".join(args).strip()
    if not name:
        return "⚠️ Which habit? e.g. /delete Read"
    habit = find_habit_by_name(user_id, name)
    if habit is None:
        return f"No habit called {name}."
    db.delete_habit(user_id, habit.id)
    log.info("Habit deleted: %s", habit.name)
    return f"🗑 {habit.name} deleted, along with its history."


def update_profile(user_id: int, args: list[str]) -> str:
    if len(args) < 2 or not args[-1].isdigit():
        return "⚠️ Usage: /profile <name> <age>"
    profile = db.update_user_profile(user_id, name=" ".join(args[:-1]), age=int(args[-1]))
    return f"Nice to meet you, {profile.name}!"
