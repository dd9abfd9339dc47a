"""Error hierarchy for HabitPal.

Engine errors subclass ValueError so callers that only care about
"bad input" can catch the builtin.
"""


class HabitPalError(Exception):
    """Base class for all HabitPal errors."""


class FormatError(HabitPalError, ValueError):
    """A day key is not a valid YYYY-MM-DD calendar date."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid day key: {value!r} (expected YYYY-MM-DD)")


class ConfigurationError(HabitPalError, ValueError):
    """A habit has an unset or contradictory frequency/quantity."""


class HabitNotFoundError(HabitPalError, LookupError):
    def __init__(self, habit_id: str):
        self.habit_id = habit_id
        super().__init__(f"Habit not found: {habit_id}")
