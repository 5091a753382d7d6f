# src/consistency_calendar/tasks/rotation.py

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

from .date_keys import local_date_key

T = TypeVar("T")

DEFAULT_MESSAGES: tuple[str, ...] = (
    "Small steps every day add up to big wins.",
    "Done is better than perfect.",
    "Show up today; tomorrow gets easier.",
    "Consistency beats intensity.",
    "One task at a time.",
    "You don't have to be fast, just steady.",
    "Progress, not perfection.",
)


def _fold(key: str) -> int:
    # 32-bit signed string hash (acc * 31 + ch), identical on every platform.
    acc = 0
    for ch in key:
        acc = (acc * 31 + ord(ch)) & 0xFFFFFFFF
    if acc >= 0x80000000:
        acc -= 0x100000000
    return acc


def rotation_index(date_key: str, count: int) -> int:
    if count <= 0:
        raise ValueError("count must be positive")
    return abs(_fold(date_key)) % count


def pick_daily(items: Sequence[T], date_key: str | None = None) -> T:
    """Pick the item for a given day (default: today). Same day, same item."""
    if not items:
        raise ValueError("items must not be empty")
    if date_key is None:
        date_key = local_date_key()
    return items[rotation_index(date_key, len(items))]
