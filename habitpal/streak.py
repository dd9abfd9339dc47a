"""Streak engine — current and best runs of consecutive satisfied days."""

from collections.abc import Iterable, Set

from habitpal.aggregator import satisfied_days
from habitpal.calendar_key import FIRST_DAY_KEY, add_days, is_next_day
from habitpal.models import BooleanQuantity, HabitLog, HabitQuantity, Streak


def compute_streak(logs: Iterable[HabitLog], today: str,
                   quantity: HabitQuantity = BooleanQuantity()) -> Streak:
    """Streak stats for one habit's logs as of `today`.

    current: consecutive satisfied days ending on `today` (0 if today is
    not satisfied). best: longest run ever seen, never less than current.

    With the default boolean quantity a day is satisfied iff it has a log
    with completed=True. Pass the habit's quantity to also honor count
    targets.
    """
    return streak_from_days(satisfied_days(logs, quantity), today)


def streak_from_days(done: Set[str], today: str) -> Streak:
    """Streak stats from an already aggregated set of satisfied day keys."""
    if not done:
        return Streak(0, 0)

    current = 0
    cursor = today
    while cursor in done:
        current += 1
        if cursor == FIRST_DAY_KEY:
            break
        cursor = add_days(cursor, -1)

    best = 0
    run = 0
    prev: str | None = None
    # Day keys sort chronologically as strings
    for day in sorted(done):
        run = run + 1 if prev is not None and is_next_day(prev, day) else 1
        best = max(best, run)
        prev = day

    return Streak(current=current, best=max(best, current))
