"""
Persistence contract the scheduling engine depends on.

The engine only talks to this protocol; ``medslot.db.Database`` (SQLite) and
``medslot.storage.MemoryStore`` both satisfy it. Every call takes an optional
``timeout`` in seconds; ``None`` means the handle's configured default.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Protocol

from .entities import Appointment, Doctor


class Repository(Protocol):
    def open(self) -> None:
        """Prepare the handle for use (schema, connections)."""

    def close(self) -> None:
        """Release the handle; later calls raise PersistenceUnavailable."""

    def add_doctor(self, doctor: Doctor, *, timeout: Optional[float] = None) -> Doctor:
        ...

    def find_doctor(self, doctor_id: str, *, timeout: Optional[float] = None) -> Optional[Doctor]:
        ...

    def list_doctors(self, *, timeout: Optional[float] = None) -> List[Doctor]:
        ...

    def find_appointments(
        self,
        doctor_id: str,
        start: datetime,
        end: datetime,
        *,
        timeout: Optional[float] = None,
    ) -> List[Appointment]:
        """Appointments of ``doctor_id`` starting in [start, end), chronological."""

    def find_overlapping(
        self,
        doctor_id: str,
        start: datetime,
        end: datetime,
        *,
        timeout: Optional[float] = None,
    ) -> List[Appointment]:
        """Appointments of ``doctor_id`` whose interval intersects [start, end),
        including ones that started earlier and are still running."""

    def find_appointment(
        self, doctor_id: str, instant: datetime, *, timeout: Optional[float] = None
    ) -> Optional[Appointment]:
        """The appointment of ``doctor_id`` starting exactly at ``instant``."""

    def get_appointment(self, appointment_id: str, *, timeout: Optional[float] = None) -> Optional[Appointment]:
        ...

    def list_appointments(
        self, doctor_id: Optional[str] = None, *, timeout: Optional[float] = None
    ) -> List[Appointment]:
        ...

    def create_appointment(self, appointment: Appointment, *, timeout: Optional[float] = None) -> Appointment:
        """Store a new appointment; raises Conflict on a duplicate (doctor_id, start)."""

    def update_appointment(self, appointment: Appointment, *, timeout: Optional[float] = None) -> Appointment:
        """Overwrite start/duration; raises Conflict or AppointmentNotFound."""

    def delete_appointment(self, appointment_id: str, *, timeout: Optional[float] = None) -> None:
        """Remove by id. Missing ids are not an error."""
