"""Parse habit definitions typed in chat commands.

    /new Read | daily
    /new Gym | weekly mon, wed, fri
    /new Water | daily | count 8
    /new Stretch | every 3 days | check
    /new Run | weekly sat | check | fitness      (optional category)

Bad input raises ConfigurationError with a message fit for the user.
"""

import re

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

_DAY_ALIASES = {
    "sun": 0, "sunday": 0,
    "mon": 1, "monday": 1,
    "tue": 2, "tues": 2, "tuesday": 2,
    "wed": 3, "wednesday": 3,
    "thu": 4, "thurs": 4, "thursday": 4,
    "fri": 5, "friday": 5,
    "sat": 6, "saturday": 6,
}

_EVERY_N_RE = re.compile(r"^every\s+(\d+)\s*(?:d|days?)$")
_COUNT_RE = re.compile(r"^(?:count\s*|x\s*)?(\d+)(?:\s*(?:times|x))?$")


def _parse_day(token: str) -> int:
    if token.isdigit():
        return int(token)
    if token in _DAY_ALIASES:
        return _DAY_ALIASES[token]
    raise ConfigurationError(f"Unknown weekday: {token!r}")


def parse_frequency(text: str) -> HabitFrequency:
    t = text.strip().lower()
    if t in ("", "daily", "every day", "everyday"):
        return DailyFrequency()

    m = _EVERY_N_RE.match(t)
    if m:
        return CustomFrequency(int(m.group(1)))

    if t.startswith("weekly"):
        t = t[len("weekly"):]
    tokens = [tok for tok in re.split(r"[\s,]+", t) if tok]
    if not tokens:
        raise ConfigurationError("Weekly habits need at least one day, e.g. 'weekly mon, thu'")
    return WeeklyFrequency(tuple(_parse_day(tok) for tok in tokens))


def parse_quantity(text: str) -> HabitQuantity:
    t = text.strip().lower()
    if t in ("", "check", "boolean", "yes/no", "done"):
        return BooleanQuantity()
    m = _COUNT_RE.match(t)
    if m:
        return CountQuantity(int(m.group(1)))
    raise ConfigurationError(f"Unknown quantity: {text!r} (use 'check' or 'count N')")


def parse_new_habit(args: str) -> tuple[str, HabitFrequency, HabitQuantity, str | None]:
    """'name | recurrence | quantity | category' → (name, frequency, quantity, category)."""
    parts = [p.strip() for p in args.split("|")]
    if not parts or not parts[0]:
        raise ConfigurationError("Give the habit a name, e.g. /new Read | daily")
    if len(parts) > 4:
        raise ConfigurationError("Too many fields: use name | recurrence | quantity | category")
    name = parts[0]
    frequency = parse_frequency(parts[1] if len(parts) > 1 else "")
    quantity = parse_quantity(parts[2] if len(parts) > 2 else "")
    category = parts[3] if len(parts) > 3 and parts[3] else None
    return name, frequency, quantity, category


def parse_done_args(args: list[str]) -> tuple[str, int | None]:
    """'/done Drink water 3' → ('Drink water', 3); a trailing integer is a count."""
    if not args:
        raise ConfigurationError("Which habit? e.g. /done Read")
    count = None
    if len(args) > 1 and args[-1].isdigit():
        count = int(args[-1])
        args = args[:-1]
    return " ".join(args), count
