# tests/test_task_store.py

from __future__ import annotations

import json

import pytest

from consistency_calendar.storage import SqliteKeyValueStore
from consistency_calendar.tasks.completion import CompletionEngine
from consistency_calendar.tasks.task_models import CompletionStatus, Task, Theme, TrackerState
from consistency_calendar.tasks.task_store import TaskStore, decode_state, encode_state

from .fakes import FakeClock, RecordingKeyValueStore


def _stored(kv: RecordingKeyValueStore, key: str = "todoApp") -> dict:
    return json.loads(kv.data[key].decode("utf-8"))


def test_first_load_is_empty_and_writes_nothing(kv: RecordingKeyValueStore, clock: FakeClock) -> None:
    store = TaskStore(kv, clock=clock)
    state = store.load()

    assert state == TrackerState()
    assert state.theme is Theme.LIGHT
    assert kv.writes == []


def test_malformed_json_falls_back_to_fresh_state(clock: FakeClock) -> None:
    kv = RecordingKeyValueStore(data={"todoApp": b"{not json"})
    state = TaskStore(kv, clock=clock).load()
    assert state.tasks == []
    assert state.title == ""


def test_non_object_and_non_utf8_records_fall_back(clock: FakeClock) -> None:
    for raw in (b"[1, 2, 3]", b"\xff\xfe\x00", b"null"):
        kv = RecordingKeyValueStore(data={"todoApp": raw})
        assert TaskStore(kv, clock=clock).load() == TrackerState()


def test_wire_layout_matches_persisted_shape(engine: CompletionEngine, kv: RecordingKeyValueStore) -> None:
    engine.set_title("Morning")
    engine.set_app_title("My Days")
    engine.set_theme("dark")
    task = engine.create_task("Stretch")
    assert task is not None

    data = _stored(kv)
    assert data == {
        "title": "Morning",
        "appTitle": "My Days",
        "theme": "dark",
        "tasks": [
            {
                "id": task.id,
                "text": "Stretch",
                "completed": False,
                "createdAt": "2024-01-05",
                "completedAt": None,
            }
        ],
    }


def test_round_trip_after_operations(engine: CompletionEngine, kv: RecordingKeyValueStore, clock: FakeClock) -> None:
    a = engine.create_task("a")
    b = engine.create_task("b")
    c = engine.create_task("c")
    assert a and b and c
    engine.toggle_checked(a.id)
    engine.toggle_checked(b.id, "2024-01-03")
    engine.finalize_day()
    engine.toggle_checked(c.id)
    engine.delete_task(b.id)

    reloaded = TaskStore(kv, clock=clock).load()
    assert reloaded == engine.store.state
    assert [t.id for t in reloaded.tasks] == [c.id, a.id]


def test_encode_decode_round_trip_preserves_variants() -> None:
    state = TrackerState(
        title="t",
        app_title="app",
        theme=Theme.DARK,
        tasks=[
            Task(id="1", text="x", created_at="2024-01-01"),
            Task(id="2", text="y", created_at="2024-01-01", status=CompletionStatus.CHECKED),
            Task(
                id="3",
                text="z",
                created_at="2024-01-01",
                status=CompletionStatus.COMMITTED,
                committed_on="2024-01-02",
            ),
        ],
    )
    decoded, changed = decode_state(encode_state(state), today="2024-01-05")
    assert decoded == state
    assert changed is False


@pytest.mark.usefixtures("los_angeles_tz")
def test_legacy_timestamps_are_migrated_and_written_back(clock: FakeClock) -> None:
    # 05:30 UTC on the 5th is the evening of the 4th in Los Angeles.
    legacy_ts = "2024-01-05T05:30:00.000Z"
    expected = "2024-01-04"
    raw = {
        "title": "old",
        "tasks": [
            {
                "id": "1700000000000",
                "text": "legacy",
                "completed": True,
                "createdAt": legacy_ts,
                "completedAt": legacy_ts,
            }
        ],
        "theme": "light",
    }
    kv = RecordingKeyValueStore(data={"todoApp": json.dumps(raw).encode("utf-8")})

    state = TaskStore(kv, clock=clock).load()
    task = state.tasks[0]
    assert task.created_at == expected
    assert task.completed_at == expected
    assert task.status is CompletionStatus.COMMITTED
    assert state.app_title == ""

    assert len(kv.writes) == 1
    assert _stored(kv)["tasks"][0]["completedAt"] == expected
    assert _stored(kv)["appTitle"] == ""


def test_repairs_broken_records(clock: FakeClock) -> None:
    raw = {
        "title": "t",
        "theme": "purple",
        "tasks": [
            "junk",
            {"text": "no id"},
            {"id": "blank", "text": "   "},
            {"id": 7, "text": "numeric id", "completed": False, "createdAt": "2024-01-01", "completedAt": None},
            {"id": "stale", "text": "stale stamp", "completed": False, "createdAt": "2024-01-01",
             "completedAt": "2024-01-02"},
            {"id": "bad-done", "text": "bad stamp", "completed": True, "createdAt": "2024-01-01",
             "completedAt": "whenever"},
            {"id": "no-created", "text": "no created", "completed": True, "completedAt": "2024-01-03"},
            {"id": "stale", "text": "duplicate"},
        ],
    }
    kv = RecordingKeyValueStore(data={"todoApp": json.dumps(raw).encode("utf-8")})
    state = TaskStore(kv, clock=clock).load()

    by_id = {t.id: t for t in state.tasks}
    assert list(by_id) == ["7", "stale", "bad-done", "no-created"]
    assert state.theme is Theme.LIGHT

    assert by_id["stale"].completed is False
    assert by_id["stale"].completed_at is None

    assert by_id["bad-done"].status is CompletionStatus.UNCHECKED

    assert by_id["no-created"].created_at == "2024-01-03"
    assert by_id["no-created"].completed_at == "2024-01-03"

    for t in state.tasks:
        assert t.completed or t.completed_at is None
    assert kv.writes, "repaired state should be written back"


def test_missing_or_non_string_labels_are_written_back(clock: FakeClock) -> None:
    raw = {
        "title": 42,
        "theme": "dark",
        "tasks": [
            {"id": "a", "text": "clean", "completed": False, "createdAt": "2024-01-05", "completedAt": None},
        ],
    }
    kv = RecordingKeyValueStore(data={"todoApp": json.dumps(raw).encode("utf-8")})
    state = TaskStore(kv, clock=clock).load()

    assert (state.title, state.app_title, state.theme) == ("42", "", Theme.DARK)
    assert len(kv.writes) == 1
    stored = _stored(kv)
    assert (stored["title"], stored["appTitle"], stored["theme"]) == ("42", "", "dark")


def test_clean_record_is_not_written_back(clock: FakeClock) -> None:
    raw = {"title": "t", "appTitle": "a", "theme": "light", "tasks": []}
    kv = RecordingKeyValueStore(data={"todoApp": json.dumps(raw).encode("utf-8")})
    TaskStore(kv, clock=clock).load()
    assert kv.writes == []


def test_transaction_saves_only_on_change(store: TaskStore, kv: RecordingKeyValueStore) -> None:
    with store.transaction():
        pass
    assert kv.writes == []

    with store.transaction() as st:
        st.title = "changed"
    assert len(kv.writes) == 1


def test_transaction_rolls_back_in_memory_on_error(store: TaskStore, kv: RecordingKeyValueStore) -> None:
    with store.transaction() as st:
        st.tasks.insert(0, Task(id="keep", text="keep", created_at="2024-01-05"))

    with pytest.raises(RuntimeError):
        with store.transaction() as st:
            st.tasks.clear()
            st.title = "half-done"
            raise RuntimeError("boom")

    assert [t.id for t in store.list_tasks()] == ["keep"]
    assert store.state.title == ""
    assert len(kv.writes) == 1


def test_task_store_on_sqlite(tmp_path, clock: FakeClock) -> None:
    db = tmp_path / "state.sqlite3"
    store = TaskStore(SqliteKeyValueStore(db), key="custom", clock=clock)
    store.load()
    engine = CompletionEngine(store, clock=clock)
    task = engine.create_task("persist me")
    assert task is not None

    again = TaskStore(SqliteKeyValueStore(db), key="custom", clock=clock)
    assert again.get_task(task.id) == task
    assert again.count_tasks() == 1


class _FailingStore(RecordingKeyValueStore):
    def set(self, key: str, value: bytes) -> None:
        raise OSError("disk full")


def test_failed_write_propagates_and_keeps_memory_consistent(clock: FakeClock) -> None:
    store = TaskStore(_FailingStore(), clock=clock)
    store.load()
    engine = CompletionEngine(store, clock=clock)

    with pytest.raises(OSError):
        engine.create_task("lost")
    assert store.list_tasks() == []
