"""Habit domain types.

Frequency and quantity are closed sets of frozen dataclasses. Code that
dispatches on them handles every variant explicitly and raises
ConfigurationError for anything else.

The *_to_dict / *_from_dict helpers define the storage shape:
  {"kind": "daily"}
  {"kind": "weekly", "daysOfWeek": [1, 3, 5]}     # 0=Sun..6=Sat
  {"kind": "custom", "intervalDays": 2}
  {"kind": "boolean"}
  {"kind": "count", "target": 8}
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Union

from habitpal.errors import ConfigurationError


# ═══════════════════════════════════════════════════════════════════════════
# Frequency
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DailyFrequency:
    pass


@dataclass(frozen=True)
class WeeklyFrequency:
    """Scheduled on the listed weekdays (0=Sunday .. 6=Saturday)."""
    days_of_week: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        days = set()
        for d in self.days_of_week:
            if isinstance(d, bool) or not isinstance(d, int) or not 0 <= d <= 6:
                raise ConfigurationError(f"Invalid weekday: {d!r} (expected 0..6)")
            days.add(d)
        # Normalized: sorted, no duplicates
        object.__setattr__(self, "days_of_week", tuple(sorted(days)))


@dataclass(frozen=True)
class CustomFrequency:
    """Scheduled every `interval_days` days, counted from the habit's creation day."""
    interval_days: int = 1

    def __post_init__(self) -> None:
        n = self.interval_days
        if isinstance(n, bool) or not isinstance(n, int) or n < 1:
            raise ConfigurationError(f"interval_days must be a positive integer, got {n!r}")


HabitFrequency = Union[DailyFrequency, WeeklyFrequency, CustomFrequency]


# ═══════════════════════════════════════════════════════════════════════════
# Quantity
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BooleanQuantity:
    """Done / not done."""


@dataclass(frozen=True)
class CountQuantity:
    """Numeric daily target (e.g. 8 glasses of water)."""
    target: int = 1

    def __post_init__(self) -> None:
        t = self.target
        if isinstance(t, bool) or not isinstance(t, int) or t < 1:
            raise ConfigurationError(f"count target must be a positive integer, got {t!r}")


HabitQuantity = Union[BooleanQuantity, CountQuantity]


# ═══════════════════════════════════════════════════════════════════════════
# Entities
# ═══════════════════════════════════════════════════════════════════════════

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Habit:
    id: str
    name: str
    frequency: HabitFrequency
    quantity: HabitQuantity
    created_at: datetime = field(default_factory=_utcnow)
    category_id: str | None = None
    archived: bool = False

    def __post_init__(self) -> None:
        validate_frequency(self.frequency)
        validate_quantity(self.quantity)

    @property
    def is_count(self) -> bool:
        return isinstance(self.quantity, CountQuantity)


@dataclass(frozen=True)
class HabitLog:
    """One completion record. Several may exist for the same habit and day."""
    id: str
    habit_id: str
    date: str                   # YYYY-MM-DD
    completed: bool = False
    count: int | None = None    # count habits only
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class DayOutcome:
    date: str
    satisfied: bool
    total_count: int


@dataclass(frozen=True)
class Streak:
    current: int = 0
    best: int = 0


@dataclass(frozen=True)
class UserProfile:
    name: str = ""
    age: int = 0
    updated_at: str = ""


# ═══════════════════════════════════════════════════════════════════════════
# Validation + (de)serialization
# ═══════════════════════════════════════════════════════════════════════════

def validate_frequency(frequency: object) -> None:
    if not isinstance(frequency, (DailyFrequency, WeeklyFrequency, CustomFrequency)):
        raise ConfigurationError(f"Unknown frequency variant: {frequency!r}")


def validate_quantity(quantity: object) -> None:
    if not isinstance(quantity, (BooleanQuantity, CountQuantity)):
        raise ConfigurationError(f"Unknown quantity variant: {quantity!r}")


def frequency_to_dict(frequency: HabitFrequency) -> dict:
    if isinstance(frequency, DailyFrequency):
        return {"kind": "daily"}
    if isinstance(frequency, WeeklyFrequency):
        return {"kind": "weekly", "daysOfWeek": list(frequency.days_of_week)}
    if isinstance(frequency, CustomFrequency):
        return {"kind": "custom", "intervalDays": frequency.interval_days}
    raise ConfigurationError(f"Unknown frequency variant: {frequency!r}")


def frequency_from_dict(data: dict | None) -> HabitFrequency:
    if not isinstance(data, dict):
        raise ConfigurationError(f"Frequency is not set: {data!r}")
    kind = data.get("kind")
    if kind == "daily":
        return DailyFrequency()
    if kind == "weekly":
        days = data.get("daysOfWeek")
        if not isinstance(days, (list, tuple)):
            raise ConfigurationError("Weekly frequency needs daysOfWeek")
        return WeeklyFrequency(tuple(days))
    if kind == "custom":
        if "intervalDays" not in data:
            raise ConfigurationError("Custom frequency needs intervalDays")
        return CustomFrequency(data["intervalDays"])
    raise ConfigurationError(f"Unknown frequency kind: {kind!r}")


def quantity_to_dict(quantity: HabitQuantity) -> dict:
    if isinstance(quantity, BooleanQuantity):
        return {"kind": "boolean"}
    if isinstance(quantity, CountQuantity):
        return {"kind": "count", "target": quantity.target}
    raise ConfigurationError(f"Unknown quantity variant: {quantity!r}")


def quantity_from_dict(data: dict | None) -> HabitQuantity:
    if not isinstance(data, dict):
        raise ConfigurationError(f"Quantity is not set: {data!r}")
    kind = data.get("kind")
    if kind == "boolean":
        return BooleanQuantity()
    if kind == "count":
        if "target" not in data:
            raise ConfigurationError("Count quantity needs a target")
        return CountQuantity(data["target"])
    raise ConfigurationError(f"Unknown quantity kind: {kind!r}")
