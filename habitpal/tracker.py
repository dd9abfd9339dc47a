"""Tracker service — glues storage to the pure engine.

The engine works on canonical day keys; this module is where the
configured timezone offset is applied (local_today) and where the
count-habit auto-completion write happens.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone

from habitpal import db
from habitpal.aggregator import aggregate_day
from habitpal.calendar_key import to_day_key
from habitpal.config import TIMEZONE_OFFSET_HOURS
from habitpal.digest import Digest, build_digest
from habitpal.frequency import is_scheduled
from habitpal.models import CountQuantity, DayOutcome, Habit, HabitLog, Streak
from habitpal.streak import compute_streak
from habitpal.subscriptions import Subscribe

log = logging.getLogger(__name__)


def to_local(moment: datetime) -> datetime:
    """`moment` as naive wall-clock time in the configured timezone.

    Naive input is taken as UTC (that is how db.py stores timestamps).
    """
    tz = timezone(timedelta(hours=TIMEZONE_OFFSET_HOURS))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz).replace(tzinfo=None)


def local_today(now: datetime | None = None) -> str:
    """Day key of `now` (default: current time) in the configured timezone."""
    return to_day_key(to_local(now or datetime.now(timezone.utc)))


def _localized(habit: Habit) -> Habit:
    # Creation time on the same calendar as local_today(), so interval
    # schedules count from the local creation day
    return replace(habit, created_at=to_local(habit.created_at))


@dataclass(frozen=True)
class HabitStatus:
    habit: Habit
    today: DayOutcome
    streak: Streak
    scheduled_today: bool


def record_progress(user_id: int, habit_id: str, day: str,
                    count: int | None = None, completed: bool | None = None) -> DayOutcome:
    """Log progress for a habit and return the day's outcome.

    Boolean habits default to completed=True. For count habits, once the
    day's total reaches the target an explicit completion log is written
    (unless one already exists).
    """
    habit = db.get_habit(user_id, habit_id)

    if isinstance(habit.quantity, CountQuantity):
        db.log_habit(user_id, habit_id, day, completed=bool(completed), count=count or 0)
        logs = db.list_habit_logs(user_id, habit_id)
        outcome = aggregate_day(logs, day, habit.quantity)
        already_flagged = any(entry.completed for entry in logs if entry.date == day)
        if outcome.total_count >= habit.quantity.target and not already_flagged:
            db.log_habit(user_id, habit_id, day, completed=True)
            log.info("Habit %s reached its target (%d/%d) on %s",
                     habit.name, outcome.total_count, habit.quantity.target, day)
        return outcome

    db.log_habit(user_id, habit_id, day, completed=True if completed is None else completed)
    return aggregate_day(db.list_habit_logs(user_id, habit_id), day, habit.quantity)


def habit_status(user_id: int, habit_id: str, today: str) -> HabitStatus:
    habit = db.get_habit(user_id, habit_id)
    logs = db.list_habit_logs(user_id, habit_id)
    return HabitStatus(
        habit=habit,
        today=aggregate_day(logs, today, habit.quantity),
        streak=compute_streak(logs, today, habit.quantity),
        scheduled_today=is_scheduled(habit.frequency, today, to_local(habit.created_at)),
    )


def user_digest(user_id: int, today: str) -> Digest:
    habits = db.list_habits(user_id)
    logs_by_habit = {h.id: db.list_habit_logs(user_id, h.id) for h in habits}
    return build_digest([_localized(h) for h in habits], logs_by_habit, today)


def find_habit_by_name(user_id: int, name: str) -> Habit | None:
    """Case-insensitive lookup; active habits win over archived ones."""
    wanted = name.strip().casefold()
    matches = [h for h in db.list_habits(user_id) if h.name.casefold() == wanted]
    matches.sort(key=lambda h: h.archived)
    return matches[0] if matches else None


def pending_today(habits: list[Habit], day_logs: list[HabitLog], today: str) -> list[Habit]:
    """Active habits scheduled today and not yet satisfied.

    `day_logs` are the user's logs for `today` across all habits, e.g.
    the snapshot held by LiveDayLogs.
    """
    by_habit: dict[str, list[HabitLog]] = defaultdict(list)
    for entry in day_logs:
        by_habit[entry.habit_id].append(entry)

    pending = []
    for h in habits:
        if h.archived or not is_scheduled(h.frequency, today, to_local(h.created_at)):
            continue
        if not aggregate_day(by_habit[h.id], today, h.quantity).satisfied:
            pending.append(h)
    return pending


class _LiveSnapshot:
    """Latest snapshot kept current by a subscription.

    Takes any Subscribe function (see habitpal.subscriptions), so tests
    can feed controlled snapshots synchronously.
    """

    def __init__(self, subscribe: Subscribe):
        self._items: list = []
        self._unsubscribe = subscribe(self._on_change)

    def _on_change(self, items: list) -> None:
        self._items = list(items)
        log.debug("%s snapshot updated: %d items", type(self).__name__, len(self._items))

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None


class LiveHabits(_LiveSnapshot):
    """A user's habit list, fed by subscriptions.habit_feed()."""

    @property
    def habits(self) -> list[Habit]:
        return list(self._items)


class LiveDayLogs(_LiveSnapshot):
    """A user's logs for one day, fed by subscriptions.day_log_feed()."""

    def __init__(self, subscribe: Subscribe, date: str):
        self.date = date
        super().__init__(subscribe)

    @property
    def logs(self) -> list[HabitLog]:
        return list(self._items)
