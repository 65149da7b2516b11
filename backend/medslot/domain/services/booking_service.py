from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterator, List, Optional

from ..entities import SLOT_MINUTES, Appointment, Doctor, Slot, validate_duration
from ..enums import AdmissionState
from ..exceptions import (
    AppointmentNotFound,
    Conflict,
    DoctorNotFound,
    DomainError,
    PersistenceTimeout,
    SlotAlreadyBooked,
    SlotUnavailable,
)
from ..ports import Repository
from .availability_service import AvailabilityService
from .overlap import conflicting
from .time_normalizer import format_instant, normalize_instant

logger = logging.getLogger(__name__)


class DoctorLocks:
    """One lock per doctor id; admission for a doctor runs one request at a time."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    def _lock_for(self, doctor_id: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(doctor_id, threading.Lock())

    @contextmanager
    def hold(self, doctor_id: str, timeout: Optional[float] = None) -> Iterator[None]:
        lock = self._lock_for(doctor_id)
        acquired = lock.acquire(timeout=-1 if timeout is None else timeout)
        if not acquired:
            raise PersistenceTimeout(f"Timed out waiting for the schedule of doctor {doctor_id}.")
        try:
            yield
        finally:
            lock.release()


@dataclass
class _Admission:
    """Tracks one request through RECEIVED -> ... -> COMMITTED."""

    action: str
    doctor_id: Optional[str] = None
    state: AdmissionState = AdmissionState.RECEIVED

    def advance(self, state: AdmissionState) -> None:
        logger.debug("%s doctor=%s %s -> %s", self.action, self.doctor_id, self.state.value, state.value)
        self.state = state

    def reject(self, err: DomainError) -> None:
        logger.info(
            "%s doctor=%s rejected at %s: %s (%s)",
            self.action,
            self.doctor_id,
            self.state.value,
            type(err).__name__,
            err,
        )
        self.state = AdmissionState.REJECTED


class BookingService:
    """
    Admission protocol for new and modified appointments.

    Steps 2-4 (slot validation, conflict check, write) run under a per-doctor
    lock. The persistence layer additionally enforces uniqueness on
    (doctor_id, start); a violation it reports is surfaced as SlotAlreadyBooked,
    same as a conflict caught before the write.
    """

    def __init__(
        self,
        repository: Repository,
        availability: Optional[AvailabilityService] = None,
        lock_timeout: Optional[float] = None,
        locks: Optional[DoctorLocks] = None,
    ) -> None:
        self._repository = repository
        self._availability = availability or AvailabilityService(repository)
        self._lock_timeout = lock_timeout
        self._locks = locks or DoctorLocks()

    def get_doctor(self, doctor_id: str, timeout: Optional[float] = None) -> Doctor:
        doctor = self._repository.find_doctor(doctor_id, timeout=timeout)
        if doctor is None:
            raise DoctorNotFound(f"Doctor with ID {doctor_id} not found")
        return doctor

    def get_appointment(self, appointment_id: str, timeout: Optional[float] = None) -> Appointment:
        appointment = self._repository.get_appointment(appointment_id, timeout=timeout)
        if appointment is None:
            raise AppointmentNotFound(f"Appointment {appointment_id} not found")
        return appointment

    def available_slots(self, doctor_id: str, day, timeout: Optional[float] = None) -> List[datetime]:
        doctor = self.get_doctor(doctor_id, timeout=timeout)
        return self._availability.available_slots(doctor, day, timeout=timeout)

    def book(
        self,
        doctor_id: str,
        date: str,
        duration: int = SLOT_MINUTES,
        appointment_type: Optional[str] = None,
        patient_name: Optional[str] = None,
        notes: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> Appointment:
        admission = _Admission("book", doctor_id)
        try:
            instant = normalize_instant(date).instant
            validate_duration(duration)
            admission.advance(AdmissionState.NORMALIZED)

            # locks are only handed out for doctors that exist
            doctor = self.get_doctor(doctor_id, timeout=timeout)
            with self._locks.hold(doctor.id, self._wait(timeout)):
                self._validate_slot(admission, doctor, instant, duration, None, timeout)
                appointment = Appointment.new(
                    doctor.id,
                    instant,
                    duration,
                    appointment_type=appointment_type,
                    patient_name=patient_name,
                    notes=notes,
                )
                try:
                    stored = self._repository.create_appointment(appointment, timeout=timeout)
                except Conflict as err:
                    raise SlotAlreadyBooked("Time slot is already booked") from err
        except DomainError as err:
            admission.reject(err)
            raise

        admission.advance(AdmissionState.COMMITTED)
        logger.info("Booked appointment %s for doctor %s at %s", stored.id, doctor_id, format_instant(instant))
        return stored

    def reschedule(
        self,
        appointment_id: str,
        date: str,
        duration: int,
        timeout: Optional[float] = None,
    ) -> Appointment:
        """Move an appointment, re-running admission against the new instant.

        The appointment's own current slot is excluded from the conflict set,
        so it may be rewritten in place.
        """
        admission = _Admission("reschedule")
        try:
            instant = normalize_instant(date).instant
            validate_duration(duration)
            current = self.get_appointment(appointment_id, timeout=timeout)
            admission.doctor_id = current.doctor_id
            admission.advance(AdmissionState.NORMALIZED)

            doctor = self.get_doctor(current.doctor_id, timeout=timeout)
            with self._locks.hold(doctor.id, self._wait(timeout)):
                self._validate_slot(admission, doctor, instant, duration, current.id, timeout)
                try:
                    stored = self._repository.update_appointment(
                        current.rescheduled(instant, duration), timeout=timeout
                    )
                except Conflict as err:
                    raise SlotAlreadyBooked("Time slot is already booked") from err
        except DomainError as err:
            admission.reject(err)
            raise

        admission.advance(AdmissionState.COMMITTED)
        logger.info("Rescheduled appointment %s to %s", appointment_id, format_instant(instant))
        return stored

    def cancel(self, appointment_id: str, timeout: Optional[float] = None) -> None:
        self._repository.delete_appointment(appointment_id, timeout=timeout)
        logger.info("Deleted appointment %s", appointment_id)

    def _validate_slot(
        self,
        admission: _Admission,
        doctor: Doctor,
        instant: datetime,
        duration: int,
        exclude: Optional[str],
        timeout: Optional[float],
    ) -> None:
        day = instant.date()
        free = self._availability.available_slots(doctor, day, exclude_appointment=exclude, timeout=timeout)
        if instant not in free:
            if instant in self._availability.slot_grid(doctor, day):
                raise SlotAlreadyBooked("Time slot is already booked")
            raise SlotUnavailable("Time slot is not available")
        admission.advance(AdmissionState.SLOT_VALIDATED)

        existing = self._repository.find_appointment(doctor.id, instant, timeout=timeout)
        if existing is not None and existing.id != exclude:
            raise SlotAlreadyBooked("Time slot is already booked")

        # the free slot only vouches for the first step; the whole interval must be clear,
        # including of appointments carried over from an earlier day
        requested = Slot.at(instant, duration)
        others = self._repository.find_overlapping(doctor.id, requested.start, requested.end, timeout=timeout)
        if conflicting(requested, others, exclude_appointment=exclude):
            raise SlotAlreadyBooked("Time slot is already booked")
        admission.advance(AdmissionState.CONFLICT_CHECKED)

    def _wait(self, timeout: Optional[float]) -> Optional[float]:
        return self._lock_timeout if timeout is None else timeout
