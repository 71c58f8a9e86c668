"""
Slot model: time-of-day values and the half-hour grid.

A time of day is an int holding the minutes elapsed since midnight
(09:30 -> 570). Nothing here touches dates, timezones or locales.
"""
from dataclasses import dataclass
from datetime import date, time
from typing import List, Union

from config import SLOT_MINUTES
from errors import InvalidWindow

MINUTES_PER_DAY = 24 * 60

TimeLike = Union[int, str, time]


def parse_time_of_day(value: TimeLike) -> int:
    """Convert "HH:MM", "HH:MM:SS", a datetime.time or a minute offset to minutes.

    Raises ValueError when the value is not a valid time of day. Seconds are
    accepted only when they are zero, grid points never carry seconds.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a time of day: {value!r}")

    if isinstance(value, int):
        minute = value
    elif isinstance(value, time):
        if value.second or value.microsecond:
            raise ValueError(f"Time of day has sub-minute precision: {value}")
        minute = value.hour * 60 + value.minute
    elif isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) not in (2, 3) or not all(p.isascii() and p.isdigit() and len(p) == 2 for p in parts):
            raise ValueError(f"Not a time of day: {value!r}")
        hours, minutes = int(parts[0]), int(parts[1])
        seconds = int(parts[2]) if len(parts) == 3 else 0
        if hours > 23 or minutes > 59 or seconds > 59:
            raise ValueError(f"Not a time of day: {value!r}")
        if seconds:
            raise ValueError(f"Time of day has sub-minute precision: {value!r}")
        minute = hours * 60 + minutes
    else:
        raise ValueError(f"Not a time of day: {value!r}")

    if not 0 <= minute < MINUTES_PER_DAY:
        raise ValueError(f"Time of day out of range: {value!r}")
    return minute


def format_time_of_day(minute: int) -> str:
    return f"{minute // 60:02d}:{minute % 60:02d}"


@dataclass(frozen=True)
class ProfessionalSchedule:
    """Working-hour window of one professional, as read from the directory."""

    professional_id: int
    work_start: TimeLike
    work_end: TimeLike


@dataclass(frozen=True)
class Slot:
    """A bookable (date, time) pair. Derived on demand, never stored."""

    date: date
    minute: int

    @property
    def label(self) -> str:
        return format_time_of_day(self.minute)


def _window_bound(value: TimeLike, name: str) -> int:
    try:
        return parse_time_of_day(value)
    except ValueError as exc:
        raise InvalidWindow(f"Invalid {name}: {exc}") from exc


def generate_grid(work_start: TimeLike, work_end: TimeLike) -> List[int]:
    """Every grid point t with work_start <= t < work_end, 30 minutes apart.

    Returns an empty list when the window is empty or inverted.
    """
    start = _window_bound(work_start, "work start")
    end = _window_bound(work_end, "work end")
    return list(range(start, end, SLOT_MINUTES))


def is_grid_point(schedule: ProfessionalSchedule, minute: int) -> bool:
    start = _window_bound(schedule.work_start, "work start")
    end = _window_bound(schedule.work_end, "work end")
    return start <= minute < end and (minute - start) % SLOT_MINUTES == 0
