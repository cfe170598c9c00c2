"""
Core business logic for calculating bookable appointment slots.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O). The current time
is always passed in, never read from the clock.
"""

from datetime import date, datetime, timedelta
from typing import Collection, Iterator, List, Optional, Union

from .models import (
    WeeklySchedule,
    format_time_of_day,
    parse_time_of_day,
    to_date,
    validate_duration,
)

DateLike = Union[date, datetime]


def _iter_time_slots(start_minutes: int, end_minutes: int, duration_minutes: int) -> Iterator[int]:
    current = start_minutes
    while current < end_minutes:
        yield current
        current += duration_minutes


def generate_time_slots(start: str, end: str, duration_minutes: int) -> List[str]:
    """
    Generate slot start times within the half-open window ``[start, end)``.

    Example:
    09:00 - 11:00 every 30 min -> [09:00, 09:30, 10:00, 10:30]

    Raises:
        InvalidTimeFormatError: If start or end is not HH:MM
        InvalidDurationError: If duration_minutes is not a positive integer
    """
    duration_minutes = validate_duration(duration_minutes)
    start_minutes = parse_time_of_day(start)
    end_minutes = parse_time_of_day(end)

    return [
        format_time_of_day(minutes)
        for minutes in _iter_time_slots(start_minutes, end_minutes, duration_minutes)
    ]


def is_day_bookable(day: DateLike, schedule: WeeklySchedule, today: DateLike) -> bool:
    """
    Decide whether a calendar date can be offered at all.

    Past dates are never bookable; otherwise the date's weekday must be
    enabled and have at least one configured range.
    """
    day = to_date(day)
    if day < to_date(today):
        return False

    day_schedule = schedule.for_date(day)
    if day_schedule is None:
        return False
    return bool(day_schedule.active_slots)


def compute_available_slots(
    day: DateLike,
    schedule: WeeklySchedule,
    duration_minutes: int,
    booked_times: Collection[str],
    now: datetime,
    *,
    deduplicate: bool = False,
) -> List[str]:
    """
    Compute the times that can currently be offered for a date.

    Algorithm:
    1. Reject dates that are not bookable
    2. Generate slots for every range of the weekday, in configured order
    3. Drop times that are already booked
    4. On the current date, drop times that are not after ``now``

    Overlapping ranges may yield the same time twice; pass
    ``deduplicate=True`` to keep only the first occurrence.

    Raises:
        InvalidDurationError: If duration_minutes is not a positive integer
        InvalidTimeFormatError: If a configured range time is malformed
    """
    validate_duration(duration_minutes)
    day = to_date(day)

    if not is_day_bookable(day, schedule, now):
        return []

    day_schedule = schedule.for_date(day)
    all_possible: List[str] = []
    for time_range in day_schedule.active_slots:
        all_possible.extend(
            generate_time_slots(time_range.start, time_range.end, duration_minutes)
        )

    taken = set(booked_times)
    available = [slot for slot in all_possible if slot not in taken]

    if day == to_date(now):
        current_minutes = now.hour * 60 + now.minute
        available = [
            slot for slot in available
            if parse_time_of_day(slot) > current_minutes
        ]

    if deduplicate:
        available = list(dict.fromkeys(available))

    return available


def bookable_days(
    schedule: WeeklySchedule,
    start: DateLike,
    end: DateLike,
    today: DateLike,
) -> List[date]:
    """Return every date in the inclusive range that can be booked."""
    current = to_date(start)
    last = to_date(end)
    days: List[date] = []

    while current <= last:
        if is_day_bookable(current, schedule, today):
            days.append(current)
        current += timedelta(days=1)

    return days


class SlotCalculator:
    """
    Availability calculations bound to one professional's schedule.

    Holds no state beyond its configuration, so a single instance can be
    queried repeatedly for different dates.
    """

    def __init__(
        self,
        schedule: WeeklySchedule,
        duration_minutes: int,
        deduplicate: bool = False,
    ):
        self.schedule = schedule
        self.duration_minutes = validate_duration(duration_minutes)
        self.deduplicate = deduplicate

    def is_day_bookable(self, day: DateLike, today: DateLike) -> bool:
        return is_day_bookable(day, self.schedule, today)

    def available_slots(
        self,
        day: DateLike,
        now: datetime,
        booked_times: Optional[Collection[str]] = None,
    ) -> List[str]:
        return compute_available_slots(
            day,
            self.schedule,
            self.duration_minutes,
            booked_times or (),
            now,
            deduplicate=self.deduplicate,
        )

    def bookable_days(self, start: DateLike, end: DateLike, today: DateLike) -> List[date]:
        return bookable_days(self.schedule, start, end, today)
