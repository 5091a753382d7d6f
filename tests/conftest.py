# tests/conftest.py

from __future__ import annotations

import time
from collections.abc import Iterator
from datetime import datetime, timedelta
from pathlib import Path
from types import SimpleNamespace

import pytest

from consistency_calendar.bootstrap import create_initial_state
from consistency_calendar.core.state import AppState
from consistency_calendar.tasks.completion import CompletionEngine
from consistency_calendar.tasks.task_store import TaskStore

from .fakes import FakeClock, RecordingKeyValueStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="consistency-test",
        log_level="DEBUG",
        log_to_file=False,
        data_dir=tmp_path / "data",
        state_db_path=tmp_path / "data" / "state.sqlite3",
        storage_key="todoApp",
        rollover_enabled=True,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def kv() -> RecordingKeyValueStore:
    return RecordingKeyValueStore()


@pytest.fixture()
def store(kv: RecordingKeyValueStore, clock: FakeClock) -> TaskStore:
    s = TaskStore(kv, clock=clock)
    s.load()
    return s


@pytest.fixture()
def engine(store: TaskStore, clock: FakeClock) -> CompletionEngine:
    return CompletionEngine(store, clock=clock)


@pytest.fixture()
def state(settings: SimpleNamespace, kv: RecordingKeyValueStore, clock: FakeClock) -> AppState:
    """
    AppState wired with deterministic fakes (in-memory store, fixed clock).
    """
    return create_initial_state(settings=settings, kv_store=kv, clock=clock)


@pytest.fixture()
def los_angeles_tz(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Pin the process local zone to America/Los_Angeles for one test."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset() is not available on this platform")
    monkeypatch.setenv("TZ", "America/Los_Angeles")
    time.tzset()
    try:
        if datetime(2024, 1, 1).astimezone().utcoffset() != timedelta(hours=-8):
            pytest.skip("America/Los_Angeles zone data is not installed")
        yield
    finally:
        monkeypatch.undo()
        time.tzset()
