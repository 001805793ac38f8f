import logging
import time
from datetime import date, datetime, timedelta
from typing import Callable, Optional

logger = logging.getLogger(__name__)

SATURDAY = 5


def next_working_day(now: datetime | date) -> date:
    """Returns the first Monday-to-Friday day strictly after ``now``."""
    if isinstance(now, datetime):
        now = now.date()
    day = now + timedelta(days=1)
    while day.weekday() >= SATURDAY:
        day += timedelta(days=1)
    return day


def next_run_at(schedule_time: str, now: datetime) -> Optional[datetime]:
    """Next occurrence of HH:MM after ``now``, or None if the format is invalid."""
    try:
        parsed = datetime.strptime(schedule_time, "%H:%M")
    except ValueError:
        return None

    target = now.replace(hour=parsed.hour, minute=parsed.minute, second=0, microsecond=0)
    if target < now:
        target += timedelta(days=1)
    return target


def seconds_until(schedule_time: str, now: datetime) -> Optional[float]:
    target = next_run_at(schedule_time, now)
    if target is None:
        return None
    return (target - now).total_seconds()


def wait_until_scheduled_time(
    schedule_time: str,
    now: Optional[datetime] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> float:
    """Blocks until the next occurrence of ``schedule_time`` (local time).

    An invalid time is logged and the run starts immediately. Returns the
    number of seconds slept.
    """
    now = now or datetime.now()
    target = next_run_at(schedule_time, now)
    if target is None:
        logger.warning(f"Invalid schedule time format '{schedule_time}', running immediately")
        return 0.0

    delay = (target - now).total_seconds()
    logger.info(f"Waiting until {target.strftime('%Y-%m-%d %H:%M:%S')} to start scheduling (in {target - now})")
    sleep(delay)
    return delay
