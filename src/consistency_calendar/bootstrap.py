# src/consistency_calendar/bootstrap.py

"""
Composition root.

- loads settings once,
- ensures local (gitignored) directories exist,
- wires the durable store, TaskStore, CompletionEngine and rollover timer into AppState.

The view layer calls start() once, then talks to tasks.task_api.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from .config import get_settings
from .core.ports import Clock, KeyValueStore, SystemClock
from .core.state import AppState
from .logging_setup import setup_logging
from .storage.kv_store import SqliteKeyValueStore
from .tasks import task_api
from .tasks.completion import CompletionEngine
from .tasks.rollover import DayRolloverTimer
from .tasks.rotation import DEFAULT_MESSAGES
from .tasks.task_store import DEFAULT_STORAGE_KEY, TaskStore

logger = logging.getLogger(__name__)

DayChangeListener = Callable[[task_api.DaySnapshot], None]


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.state_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    kv_store: KeyValueStore | None = None,
    clock: Clock | None = None,
    messages: Sequence[str] | None = None,
    on_day_change: DayChangeListener | None = None,
    previous: AppState | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings(). If kv_store is None, the
    SQLite store at settings.state_db_path is used.

    Re-initializing: pass the old state as `previous` so its rollover timer is
    stopped before the new one is built.
    """
    if previous is not None and previous.rollover is not None:
        logger.info("Re-initializing; stopping previous rollover timer.")
        previous.rollover.stop()

    if settings is None:
        settings = get_settings()

    clock = clock or SystemClock()

    if kv_store is None:
        _ensure_local_dirs(settings)
        kv_store = SqliteKeyValueStore(settings.state_db_path)

    task_store = TaskStore(
        kv_store,
        key=getattr(settings, "storage_key", DEFAULT_STORAGE_KEY),
        clock=clock,
    )
    task_store.load()

    state = AppState(
        settings=settings,
        clock=clock,
        task_store=task_store,
        engine=CompletionEngine(task_store, clock=clock),
        messages=tuple(messages or DEFAULT_MESSAGES),
    )

    if getattr(settings, "rollover_enabled", True):

        def _rolled_over(day_key: str) -> None:
            snap = task_api.snapshot(state)
            if on_day_change is not None:
                on_day_change(snap)

        state.rollover = DayRolloverTimer(_rolled_over, clock=clock)

    return state


def start(settings=None, **kwargs) -> AppState:
    """Configure logging from settings and build the app state."""
    if settings is None:
        settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(
        log_dir=getattr(settings, "data_dir", ".local/consistency"),
        console_level=console_level,
        log_to_file=bool(getattr(settings, "log_to_file", True)),
    )

    logger.info("Starting %s...", getattr(settings, "app_name", "consistency-calendar"))
    return create_initial_state(settings=settings, **kwargs)


def shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        if state.rollover is not None:
            state.rollover.stop()
    except Exception:
        logger.debug("Rollover stop failed.", exc_info=True)
    logger.info("Bye.")
