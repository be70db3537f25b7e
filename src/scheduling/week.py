"""
Previous and next occurrence of the configured first day of the week.

Days are numbered 0 = Sunday .. 6 = Saturday.
"""
from datetime import datetime, timedelta
from typing import Optional


def _day_number(d: datetime) -> int:
    return d.isoweekday() % 7


def _midnight(d: datetime) -> datetime:
    return d.replace(hour=0, minute=0, second=0, microsecond=0)


def week_start(start_day: int, now: Optional[datetime] = None) -> datetime:
    d = now or datetime.now().astimezone()
    d = d - timedelta(days=(_day_number(d) - start_day + 7) % 7)
    return _midnight(d)


def week_end(start_day: int, now: Optional[datetime] = None) -> datetime:
    d = now or datetime.now().astimezone()
    if _day_number(d) != start_day:
        d = d + timedelta(days=(start_day + 7 - _day_number(d)) % 7)
    else:
        d = d + timedelta(days=7)
    return _midnight(d)
