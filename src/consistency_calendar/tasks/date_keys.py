# src/consistency_calendar/tasks/date_keys.py

"""
Local date keys.

A date key is the calendar day of an instant in the device's local zone,
formatted as YYYY-MM-DD so that lexical and chronological order coincide.
Keys are always built from local wall time, never from a UTC ISO slice.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta, timezone

logger = logging.getLogger(__name__)

DATE_KEY_FORMAT = "%Y-%m-%d"

_DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
# "2024-01-05T23:30:00.000Z", "2024-01-05 23:30", "2024-01-05T23:30:00+02:00"
_LEGACY_TS_RE = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}")


def local_date_key(when: datetime | date | None = None) -> str:
    """
    Return the local calendar day of `when` (default: now) as YYYY-MM-DD.

    - aware datetimes are converted to the local zone first
    - naive datetimes are taken as local wall time
    - date objects are formatted as-is
    """
    if when is None:
        when = datetime.now()
    if isinstance(when, datetime) and when.tzinfo is not None:
        when = when.astimezone()
    return when.strftime(DATE_KEY_FORMAT)


def is_date_key(value: object) -> bool:
    if not isinstance(value, str) or not _DATE_KEY_RE.match(value):
        return False
    try:
        datetime.strptime(value, DATE_KEY_FORMAT)
    except ValueError:
        return False
    return True


def parse_date_key(key: str) -> date:
    if not is_date_key(key):
        raise ValueError(f"not a date key: {key!r}")
    return datetime.strptime(key, DATE_KEY_FORMAT).date()


def shift_date_key(key: str, days: int) -> str:
    """Move a key by whole calendar days (negative = backwards)."""
    return local_date_key(parse_date_key(key) + timedelta(days=days))


def is_legacy_timestamp(value: object) -> bool:
    """True for a stored value that embeds a time of day (an old UTC-slice era value)."""
    return isinstance(value, str) and bool(_LEGACY_TS_RE.match(value.strip()))


def migrate_legacy_key(value: object) -> str | None:
    """
    Convert a stored date value into a local date key.

    Well-formed keys are returned unchanged. Timestamps are parsed with their
    own offset (a trailing "Z" or no offset at all means UTC, which is what
    the old serializer wrote) and re-keyed in local time. Best effort: a value
    that was already shifted by a UTC slice cannot be recovered exactly.

    Returns None if the value cannot be interpreted.
    """
    if is_date_key(value):
        return value  # type: ignore[return-value]
    if not is_legacy_timestamp(value):
        return None

    raw = str(value).strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        ts = datetime.fromisoformat(raw)
    except ValueError:
        logger.debug("Unparsable legacy date value %r", value)
        return None

    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return local_date_key(ts)
