from datetime import datetime
from typing import Dict, List, Optional
import logging
import threading

from .domain import Appointment, Doctor
from .domain.exceptions import AppointmentNotFound, Conflict, PersistenceTimeout, PersistenceUnavailable

logger = logging.getLogger(__name__)


class MemoryStore:
    """In-process repository with the same uniqueness rule as the SQLite one."""

    def __init__(self, timeout: float = 5.0) -> None:
        self.timeout = timeout
        self.doctors: Dict[str, Doctor] = {}
        self.appointments: Dict[str, Appointment] = {}
        self._lock = threading.RLock()
        self._open = False

    def open(self) -> None:
        self._open = True

    def close(self) -> None:
        self._open = False

    def _acquire(self, timeout: Optional[float]) -> None:
        if not self._open:
            raise PersistenceUnavailable("Repository is not open.")
        if not self._lock.acquire(timeout=self.timeout if timeout is None else timeout):
            raise PersistenceTimeout("Timed out waiting for the in-memory store.")

    # --- doctors ---
    def add_doctor(self, doctor: Doctor, *, timeout: Optional[float] = None) -> Doctor:
        self._acquire(timeout)
        try:
            if doctor.id in self.doctors:
                raise Conflict(f"Doctor {doctor.id} already exists.")
            self.doctors[doctor.id] = doctor
            return doctor
        finally:
            self._lock.release()

    def find_doctor(self, doctor_id: str, *, timeout: Optional[float] = None) -> Optional[Doctor]:
        self._acquire(timeout)
        try:
            return self.doctors.get(doctor_id)
        finally:
            self._lock.release()

    def list_doctors(self, *, timeout: Optional[float] = None) -> List[Doctor]:
        self._acquire(timeout)
        try:
            return sorted(self.doctors.values(), key=lambda d: d.name)
        finally:
            self._lock.release()

    # --- appointments ---
    def find_appointments(
        self,
        doctor_id: str,
        start: datetime,
        end: datetime,
        *,
        timeout: Optional[float] = None,
    ) -> List[Appointment]:
        self._acquire(timeout)
        try:
            found = [
                a
                for a in self.appointments.values()
                if a.doctor_id == doctor_id and start <= a.start < end
            ]
        finally:
            self._lock.release()
        return sorted(found, key=lambda a: a.start)

    def find_overlapping(
        self,
        doctor_id: str,
        start: datetime,
        end: datetime,
        *,
        timeout: Optional[float] = None,
    ) -> List[Appointment]:
        self._acquire(timeout)
        try:
            found = [
                a
                for a in self.appointments.values()
                if a.doctor_id == doctor_id and a.start < end and a.end > start
            ]
        finally:
            self._lock.release()
        return sorted(found, key=lambda a: a.start)

    def find_appointment(
        self, doctor_id: str, instant: datetime, *, timeout: Optional[float] = None
    ) -> Optional[Appointment]:
        self._acquire(timeout)
        try:
            return self._at(doctor_id, instant)
        finally:
            self._lock.release()

    def get_appointment(self, appointment_id: str, *, timeout: Optional[float] = None) -> Optional[Appointment]:
        self._acquire(timeout)
        try:
            return self.appointments.get(appointment_id)
        finally:
            self._lock.release()

    def list_appointments(
        self, doctor_id: Optional[str] = None, *, timeout: Optional[float] = None
    ) -> List[Appointment]:
        self._acquire(timeout)
        try:
            found = [a for a in self.appointments.values() if not doctor_id or a.doctor_id == doctor_id]
        finally:
            self._lock.release()
        return sorted(found, key=lambda a: a.start)

    def create_appointment(self, appointment: Appointment, *, timeout: Optional[float] = None) -> Appointment:
        self._acquire(timeout)
        try:
            if appointment.doctor_id not in self.doctors:
                raise Conflict(f"Doctor {appointment.doctor_id} does not exist.")
            if self._at(appointment.doctor_id, appointment.start) is not None:
                raise Conflict(f"Doctor {appointment.doctor_id} already has an appointment at {appointment.start}.")
            self.appointments[appointment.id] = appointment
            return appointment
        finally:
            self._lock.release()

    def update_appointment(self, appointment: Appointment, *, timeout: Optional[float] = None) -> Appointment:
        self._acquire(timeout)
        try:
            if appointment.id not in self.appointments:
                raise AppointmentNotFound(f"Appointment {appointment.id} not found")
            clash = self._at(appointment.doctor_id, appointment.start)
            if clash is not None and clash.id != appointment.id:
                raise Conflict(f"Doctor {appointment.doctor_id} already has an appointment at {appointment.start}.")
            self.appointments[appointment.id] = appointment
            return appointment
        finally:
            self._lock.release()

    def delete_appointment(self, appointment_id: str, *, timeout: Optional[float] = None) -> None:
        self._acquire(timeout)
        try:
            self.appointments.pop(appointment_id, None)
        finally:
            self._lock.release()

    def _at(self, doctor_id: str, instant: datetime) -> Optional[Appointment]:
        for a in self.appointments.values():
            if a.doctor_id == doctor_id and a.start == instant:
                return a
        return None
