"""HabitPal — main entry point.

Starts all subsystems:
1. Database initialization
2. Transport (Telegram)
3. Daily reminder loop
"""

import asyncio
import logging
from datetime import datetime, timezone, timedelta

from habitpal import subscriptions
from habitpal.config import (
    DAILY_REMINDER_HOUR,
    DAILY_REMINDER_MINUTE,
    TIMEZONE_OFFSET_HOURS,
)
from habitpal.db import init_db
from habitpal.models import Habit
from habitpal.tracker import LiveDayLogs, LiveHabits, local_today, pending_today
from habitpal.transport.telegram import TelegramTransport

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s — %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("habitpal")

TZ = timezone(timedelta(hours=TIMEZONE_OFFSET_HOURS))


def reminder_text(pending: list[Habit]) -> str:
    names = ", ".join(h.name for h in pending)
    return f"⏰ Don't forget your habits today: {names}"


def seconds_until(hour: int, minute: int, now: datetime) -> float:
    """Seconds from `now` until the next hour:minute (tomorrow if already past)."""
    target = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if now >= target:
        target += timedelta(days=1)
    return (target - now).total_seconds()


async def reminder_loop(transport, user_id: int) -> None:
    """Once a day, nudge the owner about habits still pending today.

    Habits and the current day's logs are both kept live through
    subscriptions; the day subscription rolls over when the date changes.
    """
    live = LiveHabits(subscriptions.habit_feed(user_id))
    day_logs: LiveDayLogs | None = None
    try:
        while True:
            wait = seconds_until(DAILY_REMINDER_HOUR, DAILY_REMINDER_MINUTE, datetime.now(TZ))
            log.info("Next habit reminder in %.0f minutes", wait / 60)
            await asyncio.sleep(wait)
            try:
                today = local_today()
                if day_logs is None or day_logs.date != today:
                    if day_logs is not None:
                        day_logs.close()
                    day_logs = LiveDayLogs(subscriptions.day_log_feed(user_id, today), today)
                pending = pending_today(live.habits, day_logs.logs, today)
                if pending:
                    await transport.send_message(user_id, reminder_text(pending))
                    log.info("Reminder sent for %d pending habits", len(pending))
            except Exception as e:
                log.error("Reminder failed: %s", e, exc_info=True)
    finally:
        live.close()
        if day_logs is not None:
            day_logs.close()


async def main():
    """Boot sequence."""
    log.info("=" * 50)
    log.info("HabitPal starting up...")
    log.info("=" * 50)

    init_db()
    log.info("Database ready")

    transport = TelegramTransport()
    await transport.start()
    log.info("Transport started: %s", transport.name)

    from habitpal.config import OWNER_USER_ID
    if DAILY_REMINDER_HOUR >= 0 and OWNER_USER_ID:
        asyncio.create_task(reminder_loop(transport, OWNER_USER_ID))
        log.info("Daily reminder scheduled at %02d:%02d", DAILY_REMINDER_HOUR, DAILY_REMINDER_MINUTE)

    try:
        while True:
            await asyncio.sleep(3600)
    except (KeyboardInterrupt, SystemExit):
        log.info("Shutting down...")
        subscriptions.clear()
        await transport.stop()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
