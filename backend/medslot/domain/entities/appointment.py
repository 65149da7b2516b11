from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional
import uuid

from ..exceptions import InvalidDuration
from .slot import SLOT_MINUTES, Slot


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_duration(duration) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
        raise InvalidDuration(f"Duration must be a positive number of minutes, got {duration!r}.")
    return duration


@dataclass
class Appointment:
    _id: str
    _doctor_id: str
    _start: datetime
    _duration: int = SLOT_MINUTES
    _appointment_type: Optional[str] = None
    _patient_name: Optional[str] = None
    _notes: Optional[str] = None
    _created_at: datetime = field(default_factory=_utcnow)
    _updated_at: datetime = field(default_factory=_utcnow)

    @property
    def id(self) -> str:
        return self._id

    @property
    def doctor_id(self) -> str:
        return self._doctor_id

    @property
    def start(self) -> datetime:
        return self._start

    @property
    def duration(self) -> int:
        return self._duration

    @property
    def end(self) -> datetime:
        return self._start + timedelta(minutes=self._duration)

    @property
    def interval(self) -> Slot:
        return Slot(self._start, self.end)

    @property
    def appointment_type(self) -> Optional[str]:
        return self._appointment_type

    @property
    def patient_name(self) -> Optional[str]:
        return self._patient_name

    @property
    def notes(self) -> Optional[str]:
        return self._notes

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def rescheduled(self, start: datetime, duration: int) -> "Appointment":
        """Return a copy moved to ``start``; the stored record is left untouched."""
        return Appointment(
            _id=self._id,
            _doctor_id=self._doctor_id,
            _start=start,
            _duration=validate_duration(duration),
            _appointment_type=self._appointment_type,
            _patient_name=self._patient_name,
            _notes=self._notes,
            _created_at=self._created_at,
        )

    @staticmethod
    def new(
        doctor_id: str,
        start: datetime,
        duration: int = SLOT_MINUTES,
        appointment_type: Optional[str] = None,
        patient_name: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> "Appointment":
        return Appointment(
            _id=str(uuid.uuid4()),
            _doctor_id=doctor_id,
            _start=start,
            _duration=validate_duration(duration),
            _appointment_type=(appointment_type or "").strip() or None,
            _patient_name=(patient_name or "").strip() or None,
            _notes=(notes or "").strip() or None,
        )
