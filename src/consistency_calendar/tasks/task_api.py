# src/consistency_calendar/tasks/task_api.py

"""
View-facing API.

Plain synchronous functions over AppState. The view layer wires its own
events to these calls; nothing here registers callbacks or renders anything.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..core.state import AppState
from .date_keys import local_date_key, parse_date_key
from .rotation import pick_daily
from .streaks import CalendarMonth, ConsistencyStats, compute_stats, done_dates, year_calendar
from .task_models import Task, Theme

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class TodayProgress:
    total: int
    completed: int
    percent: int


@dataclass(slots=True, frozen=True)
class DaySnapshot:
    """Everything the view re-derives when the local day changes."""

    today: str
    tasks: list[Task]
    progress: TodayProgress
    stats: ConsistencyStats
    message: str


def today_key(state: AppState) -> str:
    return local_date_key(state.clock.now())


# ---- mutations ----

def add_task(state: AppState, text: str) -> Task | None:
    return state.engine.create_task(text, today_key(state))


def toggle_task(state: AppState, task_id: str, viewed_date: str | None = None) -> Task | None:
    return state.engine.toggle_checked(task_id, viewed_date)


def finalize_today(state: AppState) -> list[Task]:
    return state.engine.finalize_day(today_key(state))


def delete_task(state: AppState, task_id: str) -> bool:
    return state.engine.delete_task(task_id)


def rename_list(state: AppState, title: str) -> str:
    return state.engine.set_title(title)


def rename_app(state: AppState, title: str) -> str:
    return state.engine.set_app_title(title)


def set_theme(state: AppState, theme: Theme | str) -> Theme:
    return state.engine.set_theme(theme)


def toggle_theme(state: AppState) -> Theme:
    return state.engine.toggle_theme()


# ---- read accessors ----

def list_tasks(state: AppState) -> list[Task]:
    return state.task_store.list_tasks()


def tasks_for_today(state: AppState) -> list[Task]:
    """The "today" list: tasks created today, newest first."""
    today = today_key(state)
    return [t for t in state.task_store.list_tasks() if t.created_at == today]


def tasks_for_day(state: AppState, day_key: str) -> list[Task]:
    """Tasks created on, or attributed to, the given day."""
    parse_date_key(day_key)
    return [
        t
        for t in state.task_store.list_tasks()
        if t.created_at == day_key or t.completed_at == day_key
    ]


def today_progress(state: AppState) -> TodayProgress:
    tasks = tasks_for_today(state)
    completed = sum(1 for t in tasks if t.completed)
    # Half rounds up.
    percent = int(completed * 100 / len(tasks) + 0.5) if tasks else 0
    return TodayProgress(total=len(tasks), completed=completed, percent=percent)


def get_stats(state: AppState) -> ConsistencyStats:
    return compute_stats(state.task_store.list_tasks(), today_key(state))


def get_year_calendar(state: AppState, year: int | None = None) -> list[CalendarMonth]:
    today = today_key(state)
    if year is None:
        year = parse_date_key(today).year
    return year_calendar(done_dates(state.task_store.list_tasks()), year, today)


def daily_message(state: AppState, day_key: str | None = None) -> str:
    return pick_daily(state.messages, day_key or today_key(state))


def snapshot(state: AppState) -> DaySnapshot:
    today = today_key(state)
    snap = DaySnapshot(
        today=today,
        tasks=tasks_for_today(state),
        progress=today_progress(state),
        stats=get_stats(state),
        message=daily_message(state, today),
    )
    logger.debug(
        "Snapshot day=%s tasks=%d streak=%d",
        today,
        len(snap.tasks),
        snap.stats.current_streak,
    )
    return snap
