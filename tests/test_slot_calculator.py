"""
Tests for slot calculator.
"""

import pendulum
import pytest

from bookingslots.domain.exceptions import InvalidDurationError, InvalidTimeFormatError
from bookingslots.domain.models import DaySchedule, TimeRange, Weekday, WeeklySchedule
from bookingslots.domain.slot_calculator import (
    SlotCalculator,
    bookable_days,
    compute_available_slots,
    generate_time_slots,
    is_day_bookable,
)

TZ = "America/Argentina/Buenos_Aires"

MONDAY = pendulum.date(2026, 10, 19)
SUNDAY = pendulum.date(2026, 10, 25)
EARLIER_THURSDAY = pendulum.datetime(2026, 10, 15, 8, 0, tz=TZ)


def _schedule(**days) -> WeeklySchedule:
    return WeeklySchedule(days={Weekday(name): day for name, day in days.items()})


def _morning() -> WeeklySchedule:
    return _schedule(
        monday=DaySchedule(enabled=True, slots=(TimeRange("09:00", "11:00"),)),
        sunday=DaySchedule(enabled=False, slots=()),
    )


class TestGenerateTimeSlots:
    """Tests for generate_time_slots."""

    def test_half_open_window(self):
        """The slot starting exactly at the end time is not produced."""
        assert generate_time_slots("09:00", "11:00", 30) == ["09:00", "09:30", "10:00", "10:30"]

    def test_duration_not_dividing_window(self):
        """A final slot may start before the end even if it runs past it."""
        assert generate_time_slots("09:00", "10:00", 45) == ["09:00", "09:45"]

    def test_slots_spaced_by_duration(self):
        """Consecutive slots are exactly one duration apart and ascending."""
        slots = generate_time_slots("08:10", "12:00", 20)
        minutes = [int(s[:2]) * 60 + int(s[3:]) for s in slots]

        assert minutes[0] == 8 * 60 + 10
        assert all(b - a == 20 for a, b in zip(minutes, minutes[1:]))
        assert all(m < 12 * 60 for m in minutes)

    @pytest.mark.parametrize("start,end", [("11:00", "11:00"), ("12:00", "09:00")])
    def test_empty_when_start_not_before_end(self, start, end):
        """No slots when the window is empty or inverted."""
        assert generate_time_slots(start, end, 30) == []

    def test_results_are_independent(self):
        """Calls share no state."""
        first = generate_time_slots("09:00", "10:00", 15)
        first.append("99:99")

        assert generate_time_slots("09:00", "10:00", 15) == ["09:00", "09:15", "09:30", "09:45"]

    @pytest.mark.parametrize("duration", [0, -15, 30.0, True, "30"])
    def test_invalid_duration_raises(self, duration):
        """Non-positive or non-integer durations are rejected instead of looping."""
        with pytest.raises(InvalidDurationError):
            generate_time_slots("09:00", "11:00", duration)

    @pytest.mark.parametrize("value", ["9:00", "09:0", "24:00", "09:60", "0900", "", " 09:00", "09:00\n"])
    def test_malformed_time_raises(self, value):
        """Only zero-padded 24-hour HH:MM is accepted."""
        with pytest.raises(InvalidTimeFormatError):
            generate_time_slots(value, "18:00", 30)
        with pytest.raises(InvalidTimeFormatError):
            generate_time_slots("00:00", value, 30)


class TestIsDayBookable:
    """Tests for the calendar day predicate."""

    def test_future_enabled_day(self):
        """An enabled weekday with ranges is bookable."""
        assert is_day_bookable(MONDAY, _morning(), EARLIER_THURSDAY)

    def test_past_day_never_bookable(self):
        """Dates before today are disabled whatever the schedule says."""
        today = pendulum.date(2026, 10, 20)
        assert not is_day_bookable(MONDAY, _morning(), today)

    def test_today_is_bookable(self):
        """The comparison ignores the time of day."""
        late_monday = pendulum.datetime(2026, 10, 19, 23, 59, tz=TZ)
        assert is_day_bookable(MONDAY, _morning(), late_monday)

    def test_disabled_day(self):
        """A disabled day is not bookable."""
        assert not is_day_bookable(SUNDAY, _morning(), EARLIER_THURSDAY)

    def test_disabled_day_with_slots(self):
        """Stored ranges are ignored when the day is disabled."""
        schedule = _schedule(
            monday=DaySchedule(enabled=False, slots=(TimeRange("09:00", "11:00"),))
        )
        assert not is_day_bookable(MONDAY, schedule, EARLIER_THURSDAY)

    def test_missing_weekday(self):
        """A weekday without an entry is not bookable."""
        assert not is_day_bookable(pendulum.date(2026, 10, 20), _morning(), EARLIER_THURSDAY)

    def test_enabled_without_slots(self):
        """An enabled day with no ranges is not bookable."""
        schedule = _schedule(monday=DaySchedule(enabled=True, slots=()))
        assert not is_day_bookable(MONDAY, schedule, EARLIER_THURSDAY)


class TestComputeAvailableSlots:
    """Tests for compute_available_slots."""

    def test_future_day_all_slots(self):
        """A future Monday offers every generated slot."""
        slots = compute_available_slots(MONDAY, _morning(), 30, [], EARLIER_THURSDAY)

        assert slots == ["09:00", "09:30", "10:00", "10:30"]

    def test_booked_times_removed(self):
        """Booked times are never offered."""
        slots = compute_available_slots(MONDAY, _morning(), 30, ["09:30"], EARLIER_THURSDAY)

        assert slots == ["09:00", "10:00", "10:30"]

    def test_past_times_removed_today(self):
        """On the current day only times after now are offered."""
        now = pendulum.datetime(2026, 10, 19, 10, 15, tz=TZ)

        assert compute_available_slots(MONDAY, _morning(), 30, [], now) == ["10:30"]

    def test_slot_at_exactly_now_removed(self):
        """A slot starting at the current minute is already in the past."""
        now = pendulum.datetime(2026, 10, 19, 10, 0, 59, tz=TZ)

        assert compute_available_slots(MONDAY, _morning(), 30, [], now) == ["10:30"]

    def test_disabled_day_empty(self):
        """A disabled Sunday offers nothing."""
        assert compute_available_slots(SUNDAY, _morning(), 30, [], EARLIER_THURSDAY) == []

    def test_past_day_empty(self):
        """Nothing is offered for dates before today."""
        now = pendulum.datetime(2026, 10, 20, 8, 0, tz=TZ)

        assert compute_available_slots(MONDAY, _morning(), 30, [], now) == []

    def test_multiple_ranges_in_order(self):
        """Each range generates its own slots, concatenated in configured order."""
        schedule = _schedule(
            monday=DaySchedule(
                enabled=True,
                slots=(TimeRange("09:00", "10:00"), TimeRange("14:00", "15:00")),
            )
        )

        assert compute_available_slots(MONDAY, schedule, 60, [], EARLIER_THURSDAY) == ["09:00", "14:00"]

    def test_zero_duration_raises(self):
        """A zero duration fails fast instead of looping forever."""
        with pytest.raises(InvalidDurationError):
            compute_available_slots(MONDAY, _morning(), 0, [], EARLIER_THURSDAY)

    def test_zero_duration_raises_on_unbookable_day(self):
        """Duration is validated even when the day would be empty."""
        with pytest.raises(InvalidDurationError):
            compute_available_slots(SUNDAY, _morning(), 0, [], EARLIER_THURSDAY)

    def test_overlapping_ranges_keep_duplicates(self):
        """Overlapping ranges yield repeated times unless deduplication is requested."""
        schedule = _schedule(
            monday=DaySchedule(
                enabled=True,
                slots=(TimeRange("09:00", "10:00"), TimeRange("09:30", "10:30")),
            )
        )

        assert compute_available_slots(MONDAY, schedule, 30, [], EARLIER_THURSDAY) == [
            "09:00", "09:30", "09:30", "10:00",
        ]
        assert compute_available_slots(
            MONDAY, schedule, 30, [], EARLIER_THURSDAY, deduplicate=True
        ) == ["09:00", "09:30", "10:00"]

    def test_idempotent(self):
        """Identical inputs give identical outputs."""
        now = pendulum.datetime(2026, 10, 19, 9, 10, tz=TZ)
        booked = {"10:00"}

        first = compute_available_slots(MONDAY, _morning(), 30, booked, now)
        second = compute_available_slots(MONDAY, _morning(), 30, booked, now)

        assert first == second == ["09:30", "10:30"]

    def test_accepts_plain_datetime_objects(self):
        """Standard library dates and datetimes work as well as pendulum ones."""
        from datetime import date, datetime

        slots = compute_available_slots(
            date(2026, 10, 19), _morning(), 30, [], datetime(2026, 10, 19, 9, 45)
        )

        assert slots == ["10:00", "10:30"]


class TestBookableDays:
    """Tests for bookable_days."""

    def test_only_enabled_future_days(self):
        """Only Mondays from today onwards are returned for a Monday-only schedule."""
        days = bookable_days(
            _morning(),
            pendulum.date(2026, 10, 12),
            pendulum.date(2026, 11, 2),
            EARLIER_THURSDAY,
        )

        assert days == [
            pendulum.date(2026, 10, 19),
            pendulum.date(2026, 10, 26),
            pendulum.date(2026, 11, 2),
        ]

    def test_default_schedule_excludes_weekends(self):
        """The default weekly schedule covers Monday to Friday."""
        days = bookable_days(WeeklySchedule.default(), MONDAY, SUNDAY, EARLIER_THURSDAY)

        assert len(days) == 5
        assert all(day.weekday() < 5 for day in days)


class TestSlotCalculator:
    """Tests for the SlotCalculator wrapper."""

    def test_available_slots(self):
        """The bound calculator uses its own schedule and duration."""
        calculator = SlotCalculator(schedule=_morning(), duration_minutes=60)

        assert calculator.available_slots(MONDAY, EARLIER_THURSDAY, ["10:00"]) == ["09:00"]
        assert calculator.is_day_bookable(MONDAY, EARLIER_THURSDAY)
        assert not calculator.is_day_bookable(SUNDAY, EARLIER_THURSDAY)

    def test_invalid_duration_rejected_on_construction(self):
        """A calculator cannot be built with a zero duration."""
        with pytest.raises(InvalidDurationError):
            SlotCalculator(schedule=_morning(), duration_minutes=0)
