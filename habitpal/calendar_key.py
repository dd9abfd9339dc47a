"""Calendar keys — canonical YYYY-MM-DD strings in a single fixed calendar (UTC).

Every other engine module identifies days by these keys. No timezone
handling happens here: callers normalize instants before calling in.
"""

import re
from datetime import date, datetime, timedelta, timezone

from habitpal.errors import FormatError

_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

FIRST_DAY_KEY = "0001-01-01"
LAST_DAY_KEY = "9999-12-31"


def to_day_key(instant: datetime | date) -> str:
    """Return the YYYY-MM-DD key of an instant.

    Aware datetimes are converted to UTC first; naive datetimes and plain
    dates are taken as already normalized.
    """
    if isinstance(instant, datetime):
        if instant.tzinfo is not None:
            instant = instant.astimezone(timezone.utc)
        instant = instant.date()
    return f"{instant.year:04d}-{instant.month:02d}-{instant.day:02d}"


def _parse(key: str) -> date:
    if not isinstance(key, str) or not _KEY_RE.match(key):
        raise FormatError(key)
    try:
        return date.fromisoformat(key)
    except ValueError:
        raise FormatError(key) from None


def from_day_key(key: str) -> datetime:
    """Midnight UTC of the given day key. Raises FormatError on bad input."""
    d = _parse(key)
    return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)


def is_day_key(value: object) -> bool:
    try:
        _parse(value)
    except FormatError:
        return False
    return True


def is_next_day(a: str, b: str) -> bool:
    """True iff `b` is exactly one calendar day after `a`."""
    return days_between(a, b) == 1


def days_between(a: str, b: str) -> int:
    """Whole days from `a` to `b` (negative when `b` is earlier)."""
    return (_parse(b) - _parse(a)).days


def add_days(key: str, n: int) -> str:
    """Shift a day key by `n` days. Raises OverflowError past year 1 or 9999."""
    return to_day_key(_parse(key) + timedelta(days=n))


def add_days_clamped(key: str, n: int) -> str:
    """Like add_days, but stops at FIRST_DAY_KEY / LAST_DAY_KEY."""
    try:
        return add_days(key, n)
    except OverflowError:
        return FIRST_DAY_KEY if n < 0 else LAST_DAY_KEY


def weekday_index(key: str) -> int:
    """Weekday of a day key, 0=Sunday .. 6=Saturday."""
    # date.weekday() is 0=Monday
    return (_parse(key).weekday() + 1) % 7
