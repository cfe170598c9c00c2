"""
Application services for offering, booking and changing appointments.

The service coordinates reads and writes through an appointment store
adapter and delegates the availability calculation to the domain-level
functions. Keeping the store behind a simple protocol lets the YAML adapter
or an in-memory stub be plugged in without touching the booking rules.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import Collection, List, Optional, Protocol

import pendulum

from ..domain.exceptions import (
    AppointmentNotFoundError,
    InvalidAppointmentStateError,
    ProfessionalNotBookableError,
    ProfessionalNotFoundError,
    SlotUnavailableError,
)
from ..domain.models import (
    Appointment,
    AppointmentStatus,
    Professional,
    parse_time_of_day,
    to_date,
)
from ..domain.slot_calculator import SlotCalculator

logger = logging.getLogger(__name__)


class AppointmentStoreProtocol(Protocol):
    """Protocol describing the persistence operations needed by the service."""

    async def get_professional(self, professional_id: str) -> Optional[Professional]:
        """Return the professional or None."""

    async def list_professionals(self) -> List[Professional]:
        """Return all known professionals."""

    async def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        """Return the appointment or None."""

    async def list_appointments(
        self,
        professional_id: str,
        on_date: date,
        statuses: Optional[Collection[AppointmentStatus]] = None,
    ) -> List[Appointment]:
        """Return the professional's appointments on a date, optionally by status."""

    async def add_appointment(self, appointment: Appointment) -> Appointment:
        """Persist a new appointment; reject a second confirmed booking of a slot."""

    async def update_appointment(self, appointment: Appointment) -> Appointment:
        """Replace a stored appointment with the same id."""


class BookingService:
    """
    Orchestrates availability queries and booking changes for professionals.

    The service does not serialize concurrent bookers: the store's write
    path is responsible for rejecting a slot that was taken in between.
    """

    def __init__(
        self,
        store: AppointmentStoreProtocol,
        *,
        deduplicate_slots: bool = False,
    ) -> None:
        self._store = store
        self._deduplicate_slots = deduplicate_slots

    async def get_professional(self, professional_id: str) -> Professional:
        professional = await self._store.get_professional(professional_id)
        if professional is None:
            raise ProfessionalNotFoundError(f"No professional with id '{professional_id}'")
        return professional

    async def list_professionals(self) -> List[Professional]:
        return await self._store.list_professionals()

    async def booked_times(self, professional_id: str, on_date: date) -> List[str]:
        """Times held by confirmed appointments of the professional on a date."""
        appointments = await self._store.list_appointments(
            professional_id,
            on_date,
            statuses=[AppointmentStatus.CONFIRMED],
        )
        return [appointment.time for appointment in appointments]

    async def available_slots(
        self,
        professional_id: str,
        on_date: date,
        now: datetime,
    ) -> List[str]:
        """Times currently offerable for the professional on a date."""
        on_date = to_date(on_date)
        professional = await self.get_professional(professional_id)
        taken = await self.booked_times(professional_id, on_date)

        slots = self._calculator_for(professional).available_slots(on_date, now, taken)
        logger.debug(
            "Professional %s on %s: %d slot(s) available, %d booked",
            professional_id,
            on_date,
            len(slots),
            len(taken),
        )
        return slots

    async def is_day_bookable(self, professional_id: str, on_date: date, today: date) -> bool:
        professional = await self.get_professional(professional_id)
        return self._calculator_for(professional).is_day_bookable(on_date, today)

    async def bookable_days(
        self,
        professional_id: str,
        start: date,
        end: date,
        today: date,
    ) -> List[date]:
        professional = await self.get_professional(professional_id)
        return self._calculator_for(professional).bookable_days(start, end, today)

    async def book(
        self,
        *,
        professional_id: str,
        on_date: date,
        time: str,
        patient_id: str,
        patient_name: str,
        now: datetime,
    ) -> Appointment:
        """
        Book a confirmed telemedicine appointment.

        Raises:
            ProfessionalNotFoundError: If the professional does not exist
            ProfessionalNotBookableError: If the professional is not approved
            SlotUnavailableError: If the time is not currently offered
        """
        on_date = to_date(on_date)
        professional = await self.get_professional(professional_id)
        if not professional.is_bookable:
            raise ProfessionalNotBookableError(
                f"Professional '{professional_id}' is {professional.status.value} "
                "and does not accept bookings"
            )

        await self._ensure_slot_available(professional_id, on_date, time, now)

        appointment = Appointment(
            id=uuid.uuid4().hex,
            professional_id=professional_id,
            patient_id=patient_id,
            patient_name=patient_name,
            date=on_date,
            time=time,
            status=AppointmentStatus.CONFIRMED,
            created_at=pendulum.instance(now),
        )
        stored = await self._store.add_appointment(appointment)
        logger.info(
            "Booked appointment %s with %s on %s at %s",
            stored.id,
            professional_id,
            on_date,
            time,
        )
        return stored

    async def reschedule(
        self,
        appointment_id: str,
        *,
        on_date: date,
        time: str,
        now: datetime,
    ) -> Appointment:
        """
        Move a confirmed appointment to another available slot.

        The appointment's current slot counts as booked while choosing the
        new one.

        Raises:
            AppointmentNotFoundError: If the appointment does not exist
            InvalidAppointmentStateError: If the appointment is not confirmed
            SlotUnavailableError: If the new time is not currently offered
        """
        on_date = to_date(on_date)
        appointment = await self._get_active_appointment(appointment_id)
        await self._ensure_slot_available(appointment.professional_id, on_date, time, now)

        updated = await self._store.update_appointment(
            replace(appointment, date=on_date, time=time, status=AppointmentStatus.CONFIRMED)
        )
        logger.info(
            "Rescheduled appointment %s from %s %s to %s %s",
            appointment_id,
            appointment.date,
            appointment.time,
            on_date,
            time,
        )
        return updated

    async def cancel(self, appointment_id: str) -> Appointment:
        """
        Cancel a confirmed appointment, freeing its slot.

        Raises:
            AppointmentNotFoundError: If the appointment does not exist
            InvalidAppointmentStateError: If the appointment is not confirmed
        """
        appointment = await self._get_active_appointment(appointment_id)
        cancelled = await self._store.update_appointment(
            replace(appointment, status=AppointmentStatus.CANCELLED)
        )
        logger.info("Cancelled appointment %s", appointment_id)
        return cancelled

    async def _get_active_appointment(self, appointment_id: str) -> Appointment:
        appointment = await self._store.get_appointment(appointment_id)
        if appointment is None:
            raise AppointmentNotFoundError(f"No appointment with id '{appointment_id}'")
        if not appointment.is_active:
            raise InvalidAppointmentStateError(
                f"Appointment '{appointment_id}' is {appointment.status.value}, "
                f"expected {AppointmentStatus.CONFIRMED.value}"
            )
        return appointment

    async def _ensure_slot_available(
        self,
        professional_id: str,
        on_date: date,
        time: str,
        now: datetime,
    ) -> None:
        parse_time_of_day(time)
        available = await self.available_slots(professional_id, on_date, now)
        if time not in available:
            raise SlotUnavailableError(
                f"{time} on {on_date} is not available for professional '{professional_id}'"
            )

    def _calculator_for(self, professional: Professional) -> SlotCalculator:
        return SlotCalculator(
            schedule=professional.weekly_availability,
            duration_minutes=professional.appointment_duration,
            deduplicate=self._deduplicate_slots,
        )
