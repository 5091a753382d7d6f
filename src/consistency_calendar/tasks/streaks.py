# src/consistency_calendar/tasks/streaks.py

"""
Streak and consistency statistics.

Everything is derived from the set of committed completion days and is
recomputed from scratch on every call.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from .date_keys import local_date_key, parse_date_key
from .task_models import Task

MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


@dataclass(slots=True, frozen=True)
class ConsistencyStats:
    days_consistent: int
    current_streak: int
    longest_streak: int
    year: int
    done_dates: frozenset[str]


@dataclass(slots=True, frozen=True)
class CalendarDay:
    key: str
    day: int
    done: bool
    is_today: bool


@dataclass(slots=True, frozen=True)
class CalendarMonth:
    name: str
    month: int
    # Blank cells before day 1 in a Sunday-first week.
    leading_blanks: int
    days: tuple[CalendarDay, ...]


def done_dates(tasks: Iterable[Task]) -> frozenset[str]:
    return frozenset(t.completed_at for t in tasks if t.completed_at)


def is_done(done: frozenset[str] | set[str], day_key: str) -> bool:
    return day_key in done


def days_consistent(done: frozenset[str] | set[str]) -> int:
    return len(done)


def current_streak(done: frozenset[str] | set[str], today: str) -> int:
    """Consecutive done days ending at `today` (0 if today is not done)."""
    streak = 0
    cursor = parse_date_key(today)
    while local_date_key(cursor) in done:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def _days_of_year(year: int) -> Iterable[date]:
    cursor = date(year, 1, 1)
    end = date(year, 12, 31)
    while cursor <= end:
        yield cursor
        cursor += timedelta(days=1)


def longest_streak(done: frozenset[str] | set[str], year: int) -> int:
    """Longest run of done days inside Jan 1..Dec 31 of `year`."""
    longest = 0
    run = 0
    for day in _days_of_year(year):
        if local_date_key(day) in done:
            run += 1
            longest = max(longest, run)
        else:
            run = 0
    return longest


def compute_stats(tasks: Iterable[Task], today: str) -> ConsistencyStats:
    done = done_dates(tasks)
    year = parse_date_key(today).year
    return ConsistencyStats(
        days_consistent=days_consistent(done),
        current_streak=current_streak(done, today),
        longest_streak=longest_streak(done, year),
        year=year,
        done_dates=done,
    )


def year_calendar(done: frozenset[str] | set[str], year: int, today: str | None = None) -> list[CalendarMonth]:
    """Month grids for the year view, each day flagged done / today."""
    months: list[CalendarMonth] = []
    for month in range(1, 13):
        first_weekday, days_in_month = calendar.monthrange(year, month)
        days = []
        for d in range(1, days_in_month + 1):
            key = local_date_key(date(year, month, d))
            days.append(CalendarDay(key=key, day=d, done=key in done, is_today=key == today))
        months.append(
            CalendarMonth(
                name=MONTH_NAMES[month - 1],
                month=month,
                # monthrange() is Monday=0; the grid starts on Sunday.
                leading_blanks=(first_weekday + 1) % 7,
                days=tuple(days),
            )
        )
    return months
