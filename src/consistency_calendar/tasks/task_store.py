# src/consistency_calendar/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import threading
from collections.abc import Iterator
from typing import Any

from ..core.ports import Clock, KeyValueStore, SystemClock
from .date_keys import local_date_key, migrate_legacy_key
from .task_models import Task, Theme, TrackerState

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "todoApp"


def encode_state_wire(wire: dict[str, Any]) -> bytes:
    return json.dumps(wire, ensure_ascii=False).encode("utf-8")


def encode_state(state: TrackerState) -> bytes:
    return encode_state_wire(state.to_wire())


def _clean_label(value: Any) -> str:
    return value if isinstance(value, str) else str(value or "")


def _migrate_task_record(rec: Any, today: str) -> tuple[dict[str, Any] | None, bool]:
    """
    Normalize one persisted task record.

    Returns (record or None if unusable, changed).
    """
    if not isinstance(rec, dict):
        logger.warning("Dropping non-object task record: %r", rec)
        return None, True

    raw_id = rec.get("id")
    if raw_id is None or str(raw_id).strip() == "":
        logger.warning("Dropping task record without id: %r", rec)
        return None, True

    text = str(rec.get("text") or "").strip()
    if not text:
        logger.warning("Dropping task record id=%s with empty text", raw_id)
        return None, True

    changed = not isinstance(raw_id, str) or text != rec.get("text")
    completed = bool(rec.get("completed"))
    if completed is not rec.get("completed"):
        changed = True

    completed_at_raw = rec.get("completedAt")
    completed_at: str | None = None
    if completed_at_raw:
        completed_at = migrate_legacy_key(completed_at_raw)
        if completed_at is None:
            logger.warning("Task id=%s: unreadable completedAt %r, unchecking", raw_id, completed_at_raw)
            completed = False
        if completed_at != completed_at_raw:
            changed = True

    if not completed and completed_at is not None:
        logger.warning("Task id=%s: completedAt set on an unchecked task, clearing", raw_id)
        completed_at = None
        changed = True

    created_raw = rec.get("createdAt")
    created_at = migrate_legacy_key(created_raw)
    if created_at is None:
        created_at = completed_at or today
        logger.warning("Task id=%s: unreadable createdAt %r, using %s", raw_id, created_raw, created_at)
    if created_at != created_raw:
        changed = True

    return {
        "id": str(raw_id),
        "text": text,
        "completed": completed,
        "createdAt": created_at,
        "completedAt": completed_at,
    }, changed


def decode_state(raw: bytes | None, *, today: str) -> tuple[TrackerState, bool]:
    """
    Decode the persisted record.

    Returns (state, changed). `changed` is True when the stored record needed
    migration or repair and should be written back.

    Malformed input never raises: it decodes to a fresh empty state.
    """
    if raw is None:
        return TrackerState(), False

    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        logger.exception("Stored state is not valid JSON; starting fresh.")
        return TrackerState(), False

    if not isinstance(data, dict):
        logger.warning("Stored state is not an object (%s); starting fresh.", type(data).__name__)
        return TrackerState(), False

    changed = False

    raw_tasks = data.get("tasks")
    if raw_tasks is None:
        raw_tasks = []
    if not isinstance(raw_tasks, list):
        logger.warning("Stored tasks field is not a list; dropping it.")
        raw_tasks = []
        changed = True

    tasks: list[Task] = []
    seen: set[str] = set()
    for rec in raw_tasks:
        clean, rec_changed = _migrate_task_record(rec, today)
        changed = changed or rec_changed
        if clean is None:
            continue
        if clean["id"] in seen:
            logger.warning("Dropping duplicate task id=%s", clean["id"])
            changed = True
            continue
        seen.add(clean["id"])
        tasks.append(Task.from_wire(clean))

    state = TrackerState(
        title=_clean_label(data.get("title")),
        app_title=_clean_label(data.get("appTitle")),
        theme=Theme.from_wire(data.get("theme")),
        tasks=tasks,
    )
    wire = state.to_wire()
    for field in ("title", "appTitle", "theme"):
        if data.get(field) != wire[field]:
            logger.debug("Stored field %s repaired: %r -> %r", field, data.get(field), wire[field])
            changed = True
    return state, changed


class TaskStore:
    """
    Owns the single persisted TrackerState.

    - load(): read from the durable store once, migrate legacy dates, repair
      malformed records, write back if anything changed
    - transaction(): serialized read-modify-write; saved on exit if changed,
      rolled back in memory if the body raises

    Thread-safety:
    - all access to the in-memory state goes through one re-entrant lock
    """

    def __init__(
        self,
        kv: KeyValueStore,
        *,
        key: str = DEFAULT_STORAGE_KEY,
        clock: Clock | None = None,
    ) -> None:
        self._kv = kv
        self._key = key
        self._clock: Clock = clock or SystemClock()
        self._lock = threading.RLock()
        self._state: TrackerState | None = None

    def today(self) -> str:
        return local_date_key(self._clock.now())

    # ---- load / save ----

    def load(self) -> TrackerState:
        with self._lock:
            raw = self._kv.get(self._key)
            state, changed = decode_state(raw, today=self.today())
            self._state = state
            if changed:
                logger.info("Stored state migrated; writing back key=%s", self._key)
                self._save_locked(state)
            logger.info("TaskStore loaded key=%s tasks=%d", self._key, len(state.tasks))
            return state

    def _save_locked(self, state: TrackerState) -> None:
        self._kv.set(self._key, encode_state(state))

    @property
    def state(self) -> TrackerState:
        with self._lock:
            if self._state is None:
                return self.load()
            return self._state

    @contextlib.contextmanager
    def transaction(self) -> Iterator[TrackerState]:
        with self._lock:
            state = self.state
            before = state.to_wire()
            try:
                yield state
                if state.to_wire() != before:
                    self._save_locked(state)
            except BaseException:
                # Body or write failed: memory goes back to what is on disk.
                self._state, _ = decode_state(encode_state_wire(before), today=self.today())
                raise

    # ---- read accessors ----

    def list_tasks(self) -> list[Task]:
        with self._lock:
            return list(self.state.tasks)

    def get_task(self, task_id: str) -> Task | None:
        with self._lock:
            return self.state.find_task(task_id)

    def count_tasks(self) -> int:
        with self._lock:
            return len(self.state.tasks)
