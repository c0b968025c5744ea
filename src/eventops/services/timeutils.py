"""Helpers for same-day 24h clock strings."""

from __future__ import annotations

import math
import re
from typing import Optional

from ..errors import MalformedTime

MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def parse_hhmm(value: Optional[str]) -> Optional[int]:
    """Return minutes since midnight for ``H:MM``/``HH:MM[:SS]``, or None if invalid."""

    match = _TIME_PATTERN.match((value or "").strip())
    if not match:
        return None
    hours = int(match.group(1))
    minutes = int(match.group(2))
    seconds = int(match.group(3)) if match.group(3) is not None else 0
    if hours > 23 or minutes > 59 or seconds > 59:
        return None
    return hours * 60 + minutes


def require_minutes(value: Optional[str], field: Optional[str] = None) -> int:
    minutes = parse_hhmm(value)
    if minutes is None:
        raise MalformedTime(value, field)
    return minutes


def format_minutes(total_minutes: int) -> str:
    """Format minutes since midnight as zero-padded ``HH:MM`` on a 24h clock."""

    wrapped = int(total_minutes) % MINUTES_PER_DAY
    return f"{wrapped // 60:02d}:{wrapped % 60:02d}"


def add_minutes(value: str, minutes: int) -> str:
    """Shift a clock string, wrapping past midnight. Invalid input yields ''."""

    start = parse_hhmm(value)
    if start is None:
        return ""
    return format_minutes(start + minutes)


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def meters_to_km(meters: float) -> float:
    """Kilometres rounded to one decimal, as shown to dispatchers."""

    return round_half_up(meters / 1000, 1)


def seconds_to_minutes(seconds: float) -> int:
    return int(round_half_up(seconds / 60))
