# src/consistency_calendar/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .ports import Clock

if TYPE_CHECKING:
    from ..tasks.completion import CompletionEngine
    from ..tasks.rollover import DayRolloverTimer
    from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    """
    Handle passed to every view-facing call.

    Holds the wired components; the persisted record itself lives in task_store.
    """

    # Store Settings on the state for easy access in other modules later.
    settings: Any

    clock: Clock
    task_store: TaskStore
    engine: CompletionEngine
    messages: tuple[str, ...]

    rollover: DayRolloverTimer | None = None
