"""Frequency evaluator — is a given day a scheduled day for a habit?

Schedule is contextual metadata only. Whether a day is *satisfied* is
decided from logs by the aggregator, never from the schedule.
"""

from datetime import datetime

from habitpal.calendar_key import days_between, to_day_key, weekday_index
from habitpal.errors import ConfigurationError
from habitpal.models import (
    BooleanQuantity,
    CountQuantity,
    CustomFrequency,
    DailyFrequency,
    HabitFrequency,
    HabitQuantity,
    WeeklyFrequency,
)

WEEKDAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def is_scheduled(frequency: HabitFrequency, day_key: str, habit_created_at: datetime) -> bool:
    if isinstance(frequency, DailyFrequency):
        return True
    if isinstance(frequency, WeeklyFrequency):
        # Empty set → never scheduled
        return weekday_index(day_key) in frequency.days_of_week
    if isinstance(frequency, CustomFrequency):
        offset = days_between(to_day_key(habit_created_at), day_key)
        return offset >= 0 and offset % frequency.interval_days == 0
    raise ConfigurationError(f"Unknown frequency variant: {frequency!r}")


def describe_frequency(frequency: HabitFrequency) -> str:
    """Short recurrence label, e.g. 'weekly (Mon, Wed, Fri)'."""
    if isinstance(frequency, DailyFrequency):
        return "daily"
    if isinstance(frequency, WeeklyFrequency):
        if not frequency.days_of_week:
            return "weekly (no days)"
        days = ", ".join(WEEKDAY_NAMES[d] for d in frequency.days_of_week)
        return f"weekly ({days})"
    if isinstance(frequency, CustomFrequency):
        if frequency.interval_days == 1:
            return "every day"
        return f"every {frequency.interval_days} days"
    raise ConfigurationError(f"Unknown frequency variant: {frequency!r}")


def describe_quantity(quantity: HabitQuantity) -> str:
    if isinstance(quantity, BooleanQuantity):
        return "binary (done/not done)"
    if isinstance(quantity, CountQuantity):
        return f"count (target: {quantity.target})"
    raise ConfigurationError(f"Unknown quantity variant: {quantity!r}")
