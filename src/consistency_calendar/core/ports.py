# src/consistency_calendar/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the durable store and the time source swappable and makes testing easier.
"""

from datetime import datetime
from typing import Protocol


class KeyValueStore(Protocol):
    """
    Durable key-value store.

    Synchronous, no transactions. A missing key reads as None.
    """

    def get(self, key: str) -> bytes | None: ...
    def set(self, key: str, value: bytes) -> None: ...


class Clock(Protocol):
    """Source of "now" as an aware datetime in the device's local zone."""

    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock of the executing device."""

    def now(self) -> datetime:
        return datetime.now().astimezone()
