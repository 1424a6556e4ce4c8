"""
Time-of-day arithmetic, slot generation and pricing.

Times of day are handled internally as integer minutes since midnight;
the HH:MM string form only exists at the API boundary.
"""
import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import IntEnum
from typing import List, Tuple, Union

from utils.errors import InvalidFormat, InvalidInterval

TIME_RE = re.compile(r"^([01][0-9]|2[0-3]):[0-5][0-9]$")
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
MINUTES_PER_DAY = 24 * 60
CENT = Decimal("0.01")

TimeLike = Union[str, int, "TimeOfDay"]


class DayOfWeek(IntEnum):
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6


@dataclass(frozen=True, order=True)
class TimeOfDay:
    minutes: int

    def __post_init__(self):
        if not isinstance(self.minutes, int) or not 0 <= self.minutes < MINUTES_PER_DAY:
            raise InvalidFormat(f"Minutes out of range: {self.minutes!r}")

    @classmethod
    def parse(cls, value: str) -> "TimeOfDay":
        return cls(to_minutes(value))

    def __str__(self) -> str:
        return from_minutes(self.minutes)


def to_minutes(value: str) -> int:
    if not isinstance(value, str) or not TIME_RE.match(value):
        raise InvalidFormat(f"Invalid time {value!r} (expected HH:MM)")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def from_minutes(minutes: int) -> str:
    if not isinstance(minutes, int) or not 0 <= minutes < MINUTES_PER_DAY:
        raise InvalidFormat(f"Minutes out of range: {minutes!r}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _as_minutes(value: TimeLike) -> int:
    if isinstance(value, TimeOfDay):
        return value.minutes
    if isinstance(value, int):
        return value
    return to_minutes(value)


def overlaps(start_a: TimeLike, end_a: TimeLike, start_b: TimeLike, end_b: TimeLike) -> bool:
    """Half-open overlap: touching intervals do not overlap."""
    return _as_minutes(start_a) < _as_minutes(end_b) and _as_minutes(end_a) > _as_minutes(start_b)


def duration(start: TimeLike, end: TimeLike) -> int:
    return _as_minutes(end) - _as_minutes(start)


def generate_slots(window_start: TimeLike, window_end: TimeLike, slot_length: int) -> List[Tuple[int, int]]:
    """
    Tile [window_start, window_end) with slots of exactly slot_length minutes.
    A trailing remainder shorter than slot_length is dropped.
    """
    if slot_length <= 0:
        raise InvalidInterval("slot_length must be positive")

    end = _as_minutes(window_end)
    current = _as_minutes(window_start)
    slots = []
    while current + slot_length <= end:
        slots.append((current, current + slot_length))
        current += slot_length
    return slots


def price(start: TimeLike, end: TimeLike, hourly_rate) -> Decimal:
    minutes = duration(start, end)
    if minutes <= 0:
        raise InvalidInterval("End time must be after start time")
    total = Decimal(minutes) / Decimal(60) * Decimal(str(hourly_rate))
    return total.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_date(value: str) -> date:
    # Expect "YYYY-MM-DD"
    if not isinstance(value, str) or not DATE_RE.match(value):
        raise InvalidFormat("Invalid date. Use YYYY-MM-DD")
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise InvalidFormat("Invalid date. Use YYYY-MM-DD")


def day_of_week(day: date) -> DayOfWeek:
    # date.weekday() is Monday=0; bookings count from Sunday=0
    return DayOfWeek((day.weekday() + 1) % 7)
