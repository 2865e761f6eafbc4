"""Time range -> planned hours.

Times are "HH:MM" strings on a 15 minute grid (hour 0-23, minute 0/15/30/45).
Anything else is treated as unavailable, never as an error: the caller then
falls back to the planned_hours value stored on the task.
"""

import math
import re
from typing import Optional

HOUR_OPTIONS = tuple(range(24))
MINUTE_OPTIONS = (0, 15, 30, 45)

HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def round2(value: float) -> float:
    """Round half up to 2 decimals (same rounding as the web client)."""
    return math.floor(value * 100 + 0.5) / 100


def parse_hhmm(value: Optional[str]) -> Optional[int]:
    """Minutes since midnight, or None if missing/malformed."""
    if not value or not isinstance(value, str):
        return None
    match = HHMM_RE.match(value)
    if not match:
        return None
    hour = int(match.group(1))
    minute = int(match.group(2))
    if hour not in HOUR_OPTIONS or minute not in MINUTE_OPTIONS:
        return None
    return hour * 60 + minute


def format_hhmm(hour: int, minute: int) -> str:
    return f"{hour:02d}:{minute:02d}"


def diff_hours_from_times(start: Optional[str], end: Optional[str]) -> Optional[float]:
    """Elapsed hours between two "HH:MM" values.

    Returns None when either side is unavailable. End before (or equal to)
    start gives 0: tasks are same-day only, we do not wrap past midnight.
    """
    start_min = parse_hhmm(start)
    end_min = parse_hhmm(end)
    if start_min is None or end_min is None:
        return None
    diff = end_min - start_min
    if diff <= 0:
        return 0.0
    return round2(diff / 60)


def finite_or_zero(value) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def display_planned(task) -> float:
    hours = diff_hours_from_times(task.start_time, task.end_time)
    if hours is None:
        return finite_or_zero(task.planned_hours)
    return hours
