"""
Domain models for weekly schedules, professionals and appointments.

Times of day are carried as zero-padded 24-hour ``HH:MM`` strings, which is
how they are stored and displayed. They are validated on the way in so that
string order and chronological order always agree.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

import pendulum
from pendulum import DateTime

from .exceptions import InvalidDurationError, InvalidTimeFormatError

TIME_OF_DAY_PATTERN = re.compile(r"([01]\d|2[0-3]):([0-5]\d)")

DEFAULT_APPOINTMENT_DURATION = 30
MIN_APPOINTMENT_DURATION = 10
MAX_APPOINTMENT_DURATION = 120


def parse_time_of_day(value: str) -> int:
    """
    Convert an ``HH:MM`` string into minutes after midnight.

    Raises:
        InvalidTimeFormatError: If the value is not zero-padded 24-hour HH:MM
    """
    match = TIME_OF_DAY_PATTERN.fullmatch(value) if isinstance(value, str) else None
    if match is None:
        raise InvalidTimeFormatError(f"Expected a zero-padded HH:MM time, got {value!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_time_of_day(minutes: int) -> str:
    """Format minutes after midnight as ``HH:MM``."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def validate_duration(value: Any) -> int:
    """
    Return the duration if it is a positive whole number of minutes.

    Raises:
        InvalidDurationError: For zero, negative, boolean or non-integer values
    """
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidDurationError(
            f"Appointment duration must be a positive number of minutes, got {value!r}"
        )
    return value


def to_date(value: Any) -> date:
    """Reduce a date, datetime or ``YYYY-MM-DD`` string to a calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return pendulum.from_format(value, "YYYY-MM-DD").date()
    raise ValueError(f"Cannot interpret {value!r} as a date")


class Weekday(str, Enum):
    """Day-of-week keys as used in weekly availability records."""
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def from_date(cls, value: date) -> "Weekday":
        # date.weekday(): 0=Monday, 6=Sunday
        return list(cls)[value.weekday()]


@dataclass(frozen=True)
class TimeRange:
    """
    A configured availability window within a single day.

    Both ends must be HH:MM. A window whose start is not before its end is
    kept as stored and yields no slots.
    """
    start: str
    end: str

    def __post_init__(self):
        parse_time_of_day(self.start)
        parse_time_of_day(self.end)

    @property
    def start_minutes(self) -> int:
        return parse_time_of_day(self.start)

    @property
    def end_minutes(self) -> int:
        return parse_time_of_day(self.end)

    def duration_minutes(self) -> int:
        """Return the duration in minutes, zero for an empty window."""
        return max(0, self.end_minutes - self.start_minutes)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "TimeRange":
        return cls(start=record["start"], end=record["end"])

    def to_record(self) -> Dict[str, str]:
        return {"start": self.start, "end": self.end}

    def __str__(self) -> str:
        return f"{self.start} - {self.end}"


@dataclass(frozen=True)
class DaySchedule:
    """
    Availability for one weekday.

    A disabled day has no active slots regardless of what is stored in
    ``slots``. Ranges are kept in the given order and never merged.
    """
    enabled: bool = False
    slots: Tuple[TimeRange, ...] = ()

    @property
    def active_slots(self) -> Tuple[TimeRange, ...]:
        return self.slots if self.enabled else ()

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "DaySchedule":
        """
        Raises:
            ValueError: If ``enabled`` is present but not a boolean
            InvalidTimeFormatError: If a slot time is malformed
        """
        enabled = record.get("enabled", False)
        if not isinstance(enabled, bool):
            raise ValueError(f"\"enabled\" must be true or false, got {enabled!r}")
        slots = tuple(TimeRange.from_record(slot) for slot in record.get("slots") or [])
        return cls(enabled=enabled, slots=slots)

    def to_record(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "slots": [slot.to_record() for slot in self.slots],
        }


@dataclass(frozen=True)
class WeeklySchedule:
    """Recurring weekly availability, keyed by weekday."""
    days: Mapping[Weekday, DaySchedule] = field(default_factory=dict)

    def for_weekday(self, weekday: Weekday) -> Optional[DaySchedule]:
        return self.days.get(weekday)

    def for_date(self, value: date) -> Optional[DaySchedule]:
        """Return the schedule of the date's weekday, or None if it has none."""
        return self.for_weekday(Weekday.from_date(value))

    @classmethod
    def from_record(cls, record: Optional[Mapping[str, Any]]) -> "WeeklySchedule":
        """
        Build a schedule from a ``weeklyAvailability`` record.

        Raises:
            ValueError: If a key is not a weekday name
            InvalidTimeFormatError: If a slot time is malformed
        """
        days: Dict[Weekday, DaySchedule] = {}
        for key, day_record in (record or {}).items():
            try:
                weekday = Weekday(str(key).lower())
            except ValueError as exc:
                raise ValueError(f"Unknown weekday in availability: {key!r}") from exc
            days[weekday] = DaySchedule.from_record(day_record or {})
        return cls(days=days)

    @classmethod
    def default(cls) -> "WeeklySchedule":
        """Monday to Friday 09:00-17:00, weekends off."""
        office_hours = (TimeRange(start="09:00", end="17:00"),)
        days = {
            weekday: DaySchedule(enabled=True, slots=office_hours)
            for weekday in list(Weekday)[:5]
        }
        days[Weekday.SATURDAY] = DaySchedule(enabled=False)
        days[Weekday.SUNDAY] = DaySchedule(enabled=False)
        return cls(days=days)

    def to_record(self) -> Dict[str, Any]:
        return {
            weekday.value: self.days[weekday].to_record()
            for weekday in Weekday
            if weekday in self.days
        }


class ProfessionalStatus(str, Enum):
    APPROVED = "approved"
    PENDING = "pending"
    REJECTED = "rejected"


@dataclass
class Professional:
    """A professional's bookable profile."""
    id: str
    name: str
    specialty: str = ""
    status: ProfessionalStatus = ProfessionalStatus.APPROVED
    weekly_availability: WeeklySchedule = field(default_factory=WeeklySchedule.default)
    appointment_duration: int = DEFAULT_APPOINTMENT_DURATION

    def __post_init__(self):
        validate_duration(self.appointment_duration)

    @property
    def is_bookable(self) -> bool:
        return self.status is ProfessionalStatus.APPROVED

    @classmethod
    def from_record(
        cls,
        record: Mapping[str, Any],
        default_duration: int = DEFAULT_APPOINTMENT_DURATION,
    ) -> "Professional":
        """
        Build a professional from a stored profile record.

        Profile records use the camelCase keys ``weeklyAvailability`` and
        ``appointmentDuration``; a missing duration falls back to
        ``default_duration``.

        Raises:
            InvalidDurationError: If the duration is outside 10-120 minutes
            InvalidTimeFormatError: If an availability time is malformed
        """
        duration = record.get("appointmentDuration")
        if duration is None:
            duration = default_duration
        validate_duration(duration)
        if not MIN_APPOINTMENT_DURATION <= duration <= MAX_APPOINTMENT_DURATION:
            raise InvalidDurationError(
                f"Appointment duration must be between {MIN_APPOINTMENT_DURATION} "
                f"and {MAX_APPOINTMENT_DURATION} minutes, got {duration}"
            )

        availability = record.get("weeklyAvailability")
        return cls(
            id=str(record["id"]),
            name=record.get("name") or record.get("displayName") or "",
            specialty=record.get("specialty", ""),
            status=ProfessionalStatus(record.get("status", ProfessionalStatus.APPROVED.value)),
            weekly_availability=(
                WeeklySchedule.from_record(availability)
                if availability is not None
                else WeeklySchedule.default()
            ),
            appointment_duration=duration,
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "specialty": self.specialty,
            "status": self.status.value,
            "appointmentDuration": self.appointment_duration,
            "weeklyAvailability": self.weekly_availability.to_record(),
        }


class AppointmentStatus(str, Enum):
    # Values are the ones persisted by the booking application.
    CONFIRMED = "Confirmado"
    CANCELLED = "Cancelado"
    COMPLETED = "Completado"


@dataclass(frozen=True)
class Appointment:
    """A booked consultation of one patient with one professional."""
    id: str
    professional_id: str
    patient_id: str
    patient_name: str
    date: date
    time: str
    status: AppointmentStatus = AppointmentStatus.CONFIRMED
    type: str = "Telemedicina"
    location: str = "Videoconsulta"
    created_at: Optional[DateTime] = None

    def __post_init__(self):
        parse_time_of_day(self.time)

    @property
    def is_active(self) -> bool:
        return self.status is AppointmentStatus.CONFIRMED

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Appointment":
        created_at = record.get("createdAt")
        if isinstance(created_at, datetime):
            created_at = pendulum.instance(created_at)
        elif created_at:
            created_at = pendulum.parse(str(created_at))
        return cls(
            id=str(record["id"]),
            professional_id=str(record["professionalId"]),
            patient_id=str(record.get("patientId", "")),
            patient_name=record.get("patientName", ""),
            date=to_date(record["date"]),
            time=record["time"],
            status=AppointmentStatus(record.get("status", AppointmentStatus.CONFIRMED.value)),
            type=record.get("type", "Telemedicina"),
            location=record.get("location", "Videoconsulta"),
            created_at=created_at or None,
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "professionalId": self.professional_id,
            "patientId": self.patient_id,
            "patientName": self.patient_name,
            "date": self.date.isoformat(),
            "time": self.time,
            "status": self.status.value,
            "type": self.type,
            "location": self.location,
            "createdAt": self.created_at.to_iso8601_string() if self.created_at else None,
        }


def booked_times(
    appointments: Iterable[Appointment],
    professional_id: str,
    on_date: date,
) -> FrozenSet[str]:
    """
    Collect the times already taken for one professional on one date.

    Only confirmed appointments count; a cancelled appointment frees its slot.
    """
    return frozenset(
        appointment.time
        for appointment in appointments
        if appointment.professional_id == professional_id
        and appointment.date == on_date
        and appointment.is_active
    )
