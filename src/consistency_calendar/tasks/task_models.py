# src/consistency_calendar/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any


class Theme(StrEnum):
    LIGHT = "light"
    DARK = "dark"

    @classmethod
    def from_wire(cls, raw: Any) -> Theme:
        if raw == cls.DARK.value:
            return cls.DARK
        return cls.LIGHT

    def toggled(self) -> Theme:
        return Theme.LIGHT if self is Theme.DARK else Theme.DARK


class CompletionStatus(StrEnum):
    """
    Completion lifecycle of a task.

    - unchecked: not done
    - checked: ticked today, not yet committed to the calendar
    - committed: attributed to a calendar day (committed_on)

    On the wire this collapses into completed/completedAt.
    """

    UNCHECKED = "unchecked"
    CHECKED = "checked"
    COMMITTED = "committed"


@dataclass(slots=True, frozen=True)
class Task:
    id: str
    text: str
    created_at: str
    status: CompletionStatus = CompletionStatus.UNCHECKED
    committed_on: str | None = None

    def __post_init__(self) -> None:
        if (self.status is CompletionStatus.COMMITTED) != (self.committed_on is not None):
            raise ValueError(
                f"task {self.id}: committed_on must be set iff status is committed "
                f"(status={self.status.value}, committed_on={self.committed_on!r})"
            )

    @property
    def completed(self) -> bool:
        return self.status is not CompletionStatus.UNCHECKED

    @property
    def completed_at(self) -> str | None:
        return self.committed_on

    def unchecked(self) -> Task:
        return replace(self, status=CompletionStatus.UNCHECKED, committed_on=None)

    def checked(self) -> Task:
        return replace(self, status=CompletionStatus.CHECKED, committed_on=None)

    def committed(self, day_key: str) -> Task:
        return replace(self, status=CompletionStatus.COMMITTED, committed_on=day_key)

    def to_wire(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "completed": self.completed,
            "createdAt": self.created_at,
            "completedAt": self.completed_at,
        }

    @classmethod
    def from_wire(cls, raw: dict[str, Any]) -> Task:
        """
        Build a Task from the persisted two-field shape.

        Expects already-migrated date keys. A record that is not completed
        but still carries a completedAt is read as unchecked.
        """
        completed = bool(raw.get("completed"))
        completed_at = raw.get("completedAt") or None

        if not completed:
            status, committed_on = CompletionStatus.UNCHECKED, None
        elif completed_at:
            status, committed_on = CompletionStatus.COMMITTED, str(completed_at)
        else:
            status, committed_on = CompletionStatus.CHECKED, None

        return cls(
            id=str(raw["id"]),
            text=str(raw["text"]),
            created_at=str(raw["createdAt"]),
            status=status,
            committed_on=committed_on,
        )


@dataclass(slots=True)
class TrackerState:
    """The single persisted application record."""

    title: str = ""
    app_title: str = ""
    theme: Theme = Theme.LIGHT
    tasks: list[Task] = field(default_factory=list)

    def find_task(self, task_id: str) -> Task | None:
        for t in self.tasks:
            if t.id == task_id:
                return t
        return None

    def replace_task(self, task: Task) -> None:
        for i, t in enumerate(self.tasks):
            if t.id == task.id:
                self.tasks[i] = task
                return
        raise KeyError(task.id)

    def to_wire(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "appTitle": self.app_title,
            "theme": self.theme.value,
            "tasks": [t.to_wire() for t in self.tasks],
        }
