from __future__ import annotations

import re
from collections.abc import Iterator
from datetime import date, datetime, time, timedelta

from class_scheduling.core.exceptions import SchedulingValidationError

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Strict overlap: intervals that only touch at an endpoint do not overlap."""
    return a_start < b_end and b_start < a_end


def to_wall_clock(value: datetime) -> datetime:
    """Drop any UTC offset and keep the clock reading as the center's local time."""
    if value.tzinfo is None:
        return value
    return value.replace(tzinfo=None)


def ensure_valid_interval(start: datetime, end: datetime) -> None:
    if start >= end:
        raise SchedulingValidationError(
            "start_time must be before end_time",
            details={"start_time": start.isoformat(), "end_time": end.isoformat()},
        )


def parse_time_to_minutes(value: str) -> int:
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def combine_wall_clock(day: date, value: str) -> datetime:
    minutes = parse_time_to_minutes(value)
    return datetime.combine(day, time(hour=minutes // 60, minute=minutes % 60))


def day_of_week(day: date) -> int:
    # Templates count from Sunday = 0; date.weekday() counts from Monday = 0.
    return (day.weekday() + 1) % 7


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def start_of_week(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())
