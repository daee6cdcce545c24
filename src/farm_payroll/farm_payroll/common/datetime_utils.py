from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Union


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_calendar_date(value: Union[str, date, datetime]) -> date:
    """Parse a date or ISO-8601 datetime and keep only its calendar day.

    Time-of-day and any UTC offset are discarded: ``2024-06-10T23:00`` and
    ``2024-06-10`` are the same day.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if len(text) == 10:
        return parse_iso_date(text)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text).date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def start_of_day(d: date) -> datetime:
    return datetime.combine(d, time.min)


def end_of_day(d: date) -> datetime:
    return datetime.combine(d, time.max)


def sunday_based_weekday(d: date) -> int:
    """Weekday index with Sunday=0 ... Saturday=6."""
    return (d.weekday() + 1) % 7


def month_bounds(d: date) -> tuple[date, date]:
    last_day = calendar.monthrange(d.year, d.month)[1]
    return d.replace(day=1), d.replace(day=last_day)


def add_days(d: date, days: int) -> date:
    return d + timedelta(days=days)
