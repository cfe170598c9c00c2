"""
Domain layer - Pure business logic without external dependencies.
"""

from .exceptions import (
    AppointmentNotFoundError,
    BookingSlotsError,
    InvalidAppointmentStateError,
    InvalidDurationError,
    InvalidTimeFormatError,
    ProfessionalNotBookableError,
    ProfessionalNotFoundError,
    SlotUnavailableError,
)
from .models import (
    Appointment,
    AppointmentStatus,
    DaySchedule,
    Professional,
    ProfessionalStatus,
    TimeRange,
    Weekday,
    WeeklySchedule,
    booked_times,
)
from .slot_calculator import (
    SlotCalculator,
    bookable_days,
    compute_available_slots,
    generate_time_slots,
    is_day_bookable,
)

__all__ = [
    "Appointment",
    "AppointmentNotFoundError",
    "AppointmentStatus",
    "BookingSlotsError",
    "DaySchedule",
    "InvalidAppointmentStateError",
    "InvalidDurationError",
    "InvalidTimeFormatError",
    "Professional",
    "ProfessionalNotBookableError",
    "ProfessionalNotFoundError",
    "ProfessionalStatus",
    "SlotCalculator",
    "SlotUnavailableError",
    "TimeRange",
    "Weekday",
    "WeeklySchedule",
    "bookable_days",
    "booked_times",
    "compute_available_slots",
    "generate_time_slots",
    "is_day_bookable",
]
