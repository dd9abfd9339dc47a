"""Change subscriptions — push habit and log snapshots to listeners.

A subscription is a plain function: register a callback, get back an
unsubscribe callable. Consumers only depend on that shape, so tests can
hand them a fake that invokes the callback synchronously.

    unsubscribe = subscribe_habits(user_id, on_change)   # on_change(list[Habit])
    ...
    unsubscribe()

The callback fires once immediately with the current snapshot, then after
every write that touches the user's habits (or logs for that date).
"""

import itertools
import logging
from collections.abc import Callable
from functools import partial
from threading import Lock

log = logging.getLogger(__name__)

Callback = Callable[[list], None]
Unsubscribe = Callable[[], None]
Subscribe = Callable[[Callback], Unsubscribe]

_lock = Lock()
_tokens = itertools.count(1)

# user_id → {token: callback}
_habit_listeners: dict[int, dict[int, Callback]] = {}
# (user_id, date) → {token: callback}
_log_listeners: dict[tuple[int, str], dict[int, Callback]] = {}


def _register(registry: dict, key, callback: Callback) -> Unsubscribe:
    token = next(_tokens)
    with _lock:
        registry.setdefault(key, {})[token] = callback

    def unsubscribe() -> None:
        with _lock:
            listeners = registry.get(key)
            if listeners is None:
                return
            listeners.pop(token, None)
            if not listeners:
                del registry[key]

    return unsubscribe


def _listeners(registry: dict, key) -> list[Callback]:
    with _lock:
        return list(registry.get(key, {}).values())


def _deliver(callbacks: list[Callback], snapshot: list) -> None:
    for callback in callbacks:
        try:
            callback(snapshot)
        except Exception as e:
            # One broken listener must not starve the others
            log.error("Subscription callback %r failed: %s", callback, e, exc_info=True)


# ═══════════════════════════════════════════════════════════════════════════
# Habits
# ═══════════════════════════════════════════════════════════════════════════

def _habit_snapshot(user_id: int) -> list:
    # Import here to avoid circular imports (db notifies us on writes)
    from habitpal.db import list_habits
    return list_habits(user_id)


def subscribe_habits(user_id: int, callback: Callback) -> Unsubscribe:
    """Watch the full habit list of a user."""
    unsubscribe = _register(_habit_listeners, user_id, callback)
    _deliver([callback], _habit_snapshot(user_id))
    return unsubscribe


def habit_feed(user_id: int) -> Subscribe:
    """A Subscribe function bound to one user's habit list."""
    return partial(subscribe_habits, user_id)


def notify_habits_changed(user_id: int) -> None:
    callbacks = _listeners(_habit_listeners, user_id)
    if callbacks:
        _deliver(callbacks, _habit_snapshot(user_id))


# ═══════════════════════════════════════════════════════════════════════════
# Logs (per date)
# ═══════════════════════════════════════════════════════════════════════════

def _log_snapshot(user_id: int, date: str) -> list:
    from habitpal.db import list_logs_for_date
    return list_logs_for_date(user_id, date)


def subscribe_logs_for_date(user_id: int, date: str, callback: Callback) -> Unsubscribe:
    """Watch every log a user writes on one day key."""
    unsubscribe = _register(_log_listeners, (user_id, date), callback)
    _deliver([callback], _log_snapshot(user_id, date))
    return unsubscribe


def day_log_feed(user_id: int, date: str) -> Subscribe:
    """A Subscribe function bound to one user's logs on one day key."""
    return partial(subscribe_logs_for_date, user_id, date)


def notify_logs_changed(user_id: int, date: str) -> None:
    callbacks = _listeners(_log_listeners, (user_id, date))
    if callbacks:
        _deliver(callbacks, _log_snapshot(user_id, date))


def clear() -> None:
    """Drop every listener (used on shutdown and in tests)."""
    with _lock:
        _habit_listeners.clear()
        _log_listeners.clear()
