"""Normalization of the loosely formatted timestamps sent by the device."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from models.records import Reading

INVALID_LABEL = "Invalid Date"

_DAY_FIRST_PATTERN = re.compile(r"(\d{2})/(\d{2})/(\d{4})\s(\d{2}):(\d{2}):(\d{2})")
_DATE_ONLY_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


def _to_local(parsed: datetime) -> Optional[datetime]:
    try:
        return parsed.astimezone(timezone.utc).astimezone().replace(tzinfo=None)
    except (OverflowError, ValueError):
        return None


def _parse_iso(candidate: str) -> Optional[datetime]:
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        return None
    # Date-only values mean UTC midnight.
    if _DATE_ONLY_PATTERN.fullmatch(candidate):
        parsed = parsed.replace(tzinfo=timezone.utc)
    if parsed.tzinfo is not None:
        return _to_local(parsed)
    return parsed


def _parse_day_first(candidate: str) -> Optional[datetime]:
    """Build a local datetime, rolling out-of-range fields into the next unit.

    ``31/02/2024 10:00:00`` becomes 2024-03-02 10:00:00 and month 13 becomes
    January of the following year.
    """
    match = _DAY_FIRST_PATTERN.search(candidate)
    if match is None:
        return None
    day, month, year, hour, minute, second = (int(part) for part in match.groups())
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    try:
        return datetime(year, month, 1) + timedelta(
            days=day - 1, hours=hour, minutes=minute, seconds=second
        )
    except (OverflowError, ValueError):
        return None


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Return the local wall-clock instant for ``value`` or ``None`` if invalid.

    ISO-8601 strings are tried first; offset-aware values are converted to the
    local timezone and returned naive. Otherwise ``DD/MM/YYYY HH:MM:SS`` is
    accepted as local time.
    """
    if not isinstance(value, str):
        return None
    candidate = value.strip()
    if not candidate:
        return None
    parsed = _parse_iso(candidate)
    if parsed is not None:
        return parsed
    return _parse_day_first(candidate)


def instant_sort_key(reading: Reading) -> Tuple[bool, datetime]:
    """Sort key placing readings with invalid timestamps below every valid one."""
    instant = parse_timestamp(reading.timestamp)
    if instant is None:
        return (False, datetime.min)
    return (True, instant)


def format_time_label(instant: Optional[datetime]) -> str:
    if instant is None:
        return INVALID_LABEL
    return instant.strftime("%H:%M:%S")


def format_datetime_label(instant: Optional[datetime]) -> str:
    if instant is None:
        return INVALID_LABEL
    return instant.strftime("%d/%m/%Y %H:%M:%S")
