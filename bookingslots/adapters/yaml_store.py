"""
File-backed appointment store for local use and demos.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from pathlib import Path
from typing import Any, Collection, Dict, List, Optional

import yaml

from ..domain.exceptions import AppointmentNotFoundError, SlotUnavailableError
from ..domain.models import (
    DEFAULT_APPOINTMENT_DURATION,
    Appointment,
    AppointmentStatus,
    Professional,
)

logger = logging.getLogger(__name__)


class YamlAppointmentStore:
    """
    Store that keeps professionals and appointments in one YAML document.

    The file has two top-level lists:

        professionals:
          - id: dr-perez
            name: Ana Pérez
            appointmentDuration: 30
            weeklyAvailability:
              monday: {enabled: true, slots: [{start: "09:00", end: "12:00"}]}
        appointments:
          - id: a1
            professionalId: dr-perez
            date: "2026-10-20"
            time: "09:30"
            status: Confirmado

    Professionals without ``appointmentDuration`` get ``default_duration``.
    Every mutation is written back to disk immediately.
    """

    def __init__(self, path: Path, default_duration: int = DEFAULT_APPOINTMENT_DURATION):
        self.path = Path(path)
        self.default_duration = default_duration
        self._professionals: Dict[str, Professional] = {}
        self._appointments: Dict[str, Appointment] = {}
        self._lock = asyncio.Lock()
        self._load()

    def _load(self) -> None:
        """Load records from the data file; a missing file means an empty store."""
        if not self.path.exists():
            logger.debug("Data file %s does not exist, starting empty", self.path)
            return

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {self.path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Data file must contain a mapping at the root level.")

        # Schedule errors propagate; appointment errors are skipped below
        for record in data.get("professionals") or []:
            professional = Professional.from_record(record, default_duration=self.default_duration)
            self._professionals[professional.id] = professional

        for record in data.get("appointments") or []:
            try:
                appointment = Appointment.from_record(record)
            except (KeyError, ValueError) as exc:
                logger.warning("Skipping malformed appointment record %r: %s", record, exc)
                continue
            self._appointments[appointment.id] = appointment

        logger.debug(
            "Loaded %d professional(s) and %d appointment(s) from %s",
            len(self._professionals),
            len(self._appointments),
            self.path,
        )

    def save(self) -> None:
        """Write all records back to the data file."""
        data: Dict[str, Any] = {
            "professionals": [p.to_record() for p in self._professionals.values()],
            "appointments": [a.to_record() for a in self._appointments.values()],
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, allow_unicode=True, sort_keys=False)
        logger.debug("Saved %d appointment(s) to %s", len(self._appointments), self.path)

    def add_professional(self, professional: Professional) -> None:
        self._professionals[professional.id] = professional

    async def get_professional(self, professional_id: str) -> Optional[Professional]:
        return self._professionals.get(professional_id)

    async def list_professionals(self) -> List[Professional]:
        return list(self._professionals.values())

    async def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        return self._appointments.get(appointment_id)

    async def list_appointments(
        self,
        professional_id: str,
        on_date: date,
        statuses: Optional[Collection[AppointmentStatus]] = None,
    ) -> List[Appointment]:
        return [
            appointment
            for appointment in self._appointments.values()
            if appointment.professional_id == professional_id
            and appointment.date == on_date
            and (statuses is None or appointment.status in statuses)
        ]

    async def add_appointment(self, appointment: Appointment) -> Appointment:
        async with self._lock:
            self._ensure_slot_free(appointment)
            self._appointments[appointment.id] = appointment
            self.save()
        return appointment

    async def update_appointment(self, appointment: Appointment) -> Appointment:
        async with self._lock:
            if appointment.id not in self._appointments:
                raise AppointmentNotFoundError(f"No appointment with id '{appointment.id}'")
            self._ensure_slot_free(appointment)
            self._appointments[appointment.id] = appointment
            self.save()
        return appointment

    def _ensure_slot_free(self, appointment: Appointment) -> None:
        """At most one confirmed appointment per professional, date and time."""
        if not appointment.is_active:
            return
        for existing in self._appointments.values():
            if (
                existing.id != appointment.id
                and existing.is_active
                and existing.professional_id == appointment.professional_id
                and existing.date == appointment.date
                and existing.time == appointment.time
            ):
                raise SlotUnavailableError(
                    f"{appointment.time} on {appointment.date} is already booked "
                    f"for professional '{appointment.professional_id}'"
                )
