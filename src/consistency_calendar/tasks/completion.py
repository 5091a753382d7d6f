# src/consistency_calendar/tasks/completion.py

"""
Completion engine.

Rules for when a task's completion is attributed to a calendar day:

- Toggling while viewing today only flips the checked state. Nothing reaches
  the calendar until finalize_day() is called by an explicit user action.
- Toggling while viewing any other day commits to (or clears) that day at once.
- Unchecking always clears the attributed day.
"""

from __future__ import annotations

import logging
import uuid

from ..core.ports import Clock, SystemClock
from .date_keys import is_date_key, local_date_key
from .task_models import CompletionStatus, Task, Theme
from .task_store import TaskStore

logger = logging.getLogger(__name__)


def new_task_id() -> str:
    return uuid.uuid4().hex


class CompletionEngine:
    def __init__(self, store: TaskStore, *, clock: Clock | None = None) -> None:
        self._store = store
        self._clock: Clock = clock or SystemClock()

    @property
    def store(self) -> TaskStore:
        return self._store

    def today(self) -> str:
        return local_date_key(self._clock.now())

    def _day(self, day_key: str | None) -> str:
        if day_key is None:
            return self.today()
        if not is_date_key(day_key):
            raise ValueError(f"not a date key: {day_key!r}")
        return day_key

    # ---- tasks ----

    def create_task(self, text: str, today: str | None = None) -> Task | None:
        """Prepend a new unchecked task. Returns None (no-op) for blank text."""
        clean = (text or "").strip()
        if not clean:
            logger.debug("create_task rejected blank text")
            return None

        task = Task(id=new_task_id(), text=clean, created_at=self._day(today))
        with self._store.transaction() as state:
            state.tasks.insert(0, task)
        logger.info("Task created id=%s created_at=%s", task.id, task.created_at)
        return task

    def toggle_checked(self, task_id: str, viewed_date: str | None = None) -> Task | None:
        """
        Flip the checked state of a task as seen from `viewed_date` (default: today).

        Returns the updated task, or None if the id is unknown.
        """
        today = self.today()
        viewed = self._day(viewed_date) if viewed_date is not None else today

        with self._store.transaction() as state:
            task = state.find_task(task_id)
            if task is None:
                logger.debug("toggle_checked: unknown task id=%s", task_id)
                return None

            if task.completed:
                updated = task.unchecked()
            elif viewed == today:
                updated = task.checked()
            else:
                updated = task.committed(viewed)

            state.replace_task(updated)

        logger.info(
            "Task toggled id=%s viewed=%s status=%s completed_at=%s",
            task_id,
            viewed,
            updated.status.value,
            updated.completed_at,
        )
        return updated

    def finalize_day(self, today: str | None = None) -> list[Task]:
        """
        Commit today's checked tasks to the calendar.

        Only tasks created on `today` that are checked and not yet committed
        are touched, so calling this again is a no-op. Returns the newly
        committed tasks.
        """
        day = self._day(today)
        finalized: list[Task] = []

        with self._store.transaction() as state:
            for i, task in enumerate(state.tasks):
                if task.created_at != day or task.status is not CompletionStatus.CHECKED:
                    continue
                committed = task.committed(day)
                state.tasks[i] = committed
                finalized.append(committed)

        logger.info("Day finalized day=%s committed=%d", day, len(finalized))
        return finalized

    def delete_task(self, task_id: str) -> bool:
        with self._store.transaction() as state:
            before = len(state.tasks)
            state.tasks[:] = [t for t in state.tasks if t.id != task_id]
            removed = len(state.tasks) != before

        if removed:
            logger.info("Task deleted id=%s", task_id)
        else:
            logger.debug("delete_task: unknown task id=%s", task_id)
        return removed

    # ---- list metadata ----

    def set_title(self, title: str) -> str:
        clean = (title or "").strip()
        with self._store.transaction() as state:
            state.title = clean
        return clean

    def set_app_title(self, title: str) -> str:
        clean = (title or "").strip()
        with self._store.transaction() as state:
            state.app_title = clean
        return clean

    def set_theme(self, theme: Theme | str) -> Theme:
        value = Theme.from_wire(theme)
        with self._store.transaction() as state:
            state.theme = value
        return value

    def toggle_theme(self) -> Theme:
        with self._store.transaction() as state:
            state.theme = state.theme.toggled()
            value = state.theme
        logger.debug("Theme toggled to %s", value.value)
        return value
