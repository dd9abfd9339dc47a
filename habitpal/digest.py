"""Context digest — per-habit activity report for the coach prompt.

Output is plain text with stable line and field order, so the same input
always renders the byte-identical summary:

  You have 2 habits configured:

  - Read | daily | binary (done/not done) | current streak: 3, best streak: 5, done in 7d: 4, in 30d: 12
    Last 7 days: ❌, ❌, ❌, ✅, ✅, ✅, ✅
  - Water | daily | count (target: 8) | current streak: 0, best streak: 1, done in 7d: 1, in 30d: 1 (archived)
    Last 7 days: ❌, ❌, ❌, ❌, ❌, ✅(8/8), ❌
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from habitpal.aggregator import aggregate_days
from habitpal.calendar_key import add_days, add_days_clamped
from habitpal.frequency import describe_frequency, describe_quantity, is_scheduled
from habitpal.models import CountQuantity, DayOutcome, Habit, HabitLog, Streak
from habitpal.streak import streak_from_days

EMPTY_SUMMARY = "No habits configured."

TRAIL_DAYS = 7
SHORT_WINDOW_DAYS = 7
LONG_WINDOW_DAYS = 30

GLYPH_MISSED = "❌"
GLYPH_DONE = "✅"


@dataclass(frozen=True)
class HabitSummary:
    habit_id: str
    name: str
    frequency_label: str
    quantity_label: str
    streak: Streak
    done_7d: int
    done_30d: int
    trail: tuple[str, ...]      # oldest → newest
    scheduled_today: bool
    archived: bool = False

    def to_line(self) -> str:
        line = (
            f"- {self.name} | {self.frequency_label} | {self.quantity_label} | "
            f"current streak: {self.streak.current}, best streak: {self.streak.best}, "
            f"done in 7d: {self.done_7d}, in 30d: {self.done_30d}"
        )
        if self.archived:
            line += " (archived)"
        return line


@dataclass(frozen=True)
class Digest:
    summary: str
    per_habit: list[HabitSummary] = field(default_factory=list)


def _count_window(outcomes: Mapping[str, DayOutcome], today: str, days: int) -> int:
    start = add_days_clamped(today, -(days - 1))
    return sum(1 for day, o in outcomes.items() if o.satisfied and start <= day <= today)


def _trail_day(today: str, offset: int) -> str | None:
    try:
        return add_days(today, -offset)
    except OverflowError:
        # Before the first representable day
        return None


def _glyph(habit: Habit, outcome: DayOutcome | None) -> str:
    if outcome is None or not outcome.satisfied:
        return GLYPH_MISSED
    if isinstance(habit.quantity, CountQuantity):
        return f"{GLYPH_DONE}({outcome.total_count}/{habit.quantity.target})"
    return GLYPH_DONE


def summarize_habit(habit: Habit, logs: Sequence[HabitLog], today: str) -> HabitSummary:
    outcomes = aggregate_days(logs, habit.quantity)
    satisfied = {day for day, o in outcomes.items() if o.satisfied}
    trail = tuple(
        _glyph(habit, outcomes.get(_trail_day(today, offset)))
        for offset in range(TRAIL_DAYS - 1, -1, -1)
    )
    return HabitSummary(
        habit_id=habit.id,
        name=habit.name,
        frequency_label=describe_frequency(habit.frequency),
        quantity_label=describe_quantity(habit.quantity),
        streak=streak_from_days(satisfied, today),
        done_7d=_count_window(outcomes, today, SHORT_WINDOW_DAYS),
        done_30d=_count_window(outcomes, today, LONG_WINDOW_DAYS),
        trail=trail,
        scheduled_today=is_scheduled(habit.frequency, today, habit.created_at),
        archived=habit.archived,
    )


def render_summary(summaries: Sequence[HabitSummary]) -> str:
    if not summaries:
        return EMPTY_SUMMARY
    n = len(summaries)
    lines = [f"You have {n} habit{'s' if n > 1 else ''} configured:", ""]
    for s in summaries:
        lines.append(s.to_line())
        lines.append(f"  Last {len(s.trail)} days: {', '.join(s.trail)}")
    return "\n".join(lines)


def build_digest(habits: Sequence[Habit],
                 logs_by_habit: Mapping[str, Sequence[HabitLog]],
                 today: str) -> Digest:
    """Digest of every habit (archived ones included and flagged).

    Habits missing from `logs_by_habit` are treated as having no logs.
    """
    summaries = [summarize_habit(h, logs_by_habit.get(h.id, ()), today) for h in habits]
    return Digest(summary=render_summary(summaries), per_habit=summaries)
