"""
Domain-specific exception hierarchy for the booking slots application.
"""


class BookingSlotsError(Exception):
    """Base class for all application-level errors."""


class InvalidTimeFormatError(BookingSlotsError, ValueError):
    """Raised when a time-of-day is not a zero-padded 24-hour HH:MM string."""


class InvalidDurationError(BookingSlotsError, ValueError):
    """Raised when an appointment duration is not a positive whole number of minutes."""


class ProfessionalNotFoundError(BookingSlotsError):
    """Raised when no professional exists for the given id."""


class ProfessionalNotBookableError(BookingSlotsError):
    """Raised when a professional exists but does not accept bookings."""


class AppointmentNotFoundError(BookingSlotsError):
    """Raised when no appointment exists for the given id."""


class InvalidAppointmentStateError(BookingSlotsError):
    """Raised when an appointment cannot transition from its current status."""


class SlotUnavailableError(BookingSlotsError):
    """Raised when a requested slot is not offered or has already been taken."""
