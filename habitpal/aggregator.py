"""Day aggregator — collapses one habit's logs for a day into a DayOutcome.

This is the only place that defines "satisfied":
  any log with completed=True, OR (count habits only) total count >= target.

A boolean habit is never satisfied by counts alone. A count habit whose
target is reached counts as satisfied even before the caller has written
the explicit completion log.
"""

import logging
from collections.abc import Iterable

from habitpal.calendar_key import is_day_key
from habitpal.errors import ConfigurationError
from habitpal.models import (
    BooleanQuantity,
    CountQuantity,
    DayOutcome,
    HabitLog,
    HabitQuantity,
)

log = logging.getLogger(__name__)

_BOOLEAN = BooleanQuantity()


def _outcome(day: str, day_logs: Iterable[HabitLog], quantity: HabitQuantity) -> DayOutcome:
    total = 0
    flagged = False
    for entry in day_logs:
        total += entry.count or 0
        flagged = flagged or bool(entry.completed)

    if isinstance(quantity, CountQuantity):
        satisfied = flagged or total >= quantity.target
    elif isinstance(quantity, BooleanQuantity):
        satisfied = flagged
    else:
        raise ConfigurationError(f"Unknown quantity variant: {quantity!r}")

    return DayOutcome(date=day, satisfied=satisfied, total_count=total)


def aggregate_day(logs: Iterable[HabitLog], date: str,
                  quantity: HabitQuantity = _BOOLEAN) -> DayOutcome:
    """Outcome of a single day. Logs for other days are ignored.

    Callers partition by habit beforehand; mixed habits are not detected.
    """
    return _outcome(date, (entry for entry in logs if entry.date == date), quantity)


def aggregate_days(logs: Iterable[HabitLog],
                   quantity: HabitQuantity = _BOOLEAN) -> dict[str, DayOutcome]:
    """Outcome of every distinct date present in `logs`, in one pass.

    Logs with a malformed date are skipped with a warning so one corrupt
    record cannot blank out the whole habit.
    """
    by_day: dict[str, list[HabitLog]] = {}
    for entry in logs:
        if not is_day_key(entry.date):
            log.warning("Skipping log %s of habit %s: malformed date %r",
                        entry.id, entry.habit_id, entry.date)
            continue
        by_day.setdefault(entry.date, []).append(entry)

    return {day: _outcome(day, day_logs, quantity) for day, day_logs in by_day.items()}


def satisfied_days(logs: Iterable[HabitLog],
                   quantity: HabitQuantity = _BOOLEAN) -> set[str]:
    return {day for day, outcome in aggregate_days(logs, quantity).items() if outcome.satisfied}
