"""Scheduling engine: slot grid, overlap rules and booking admission."""

from .enums import AdmissionState
from .entities import SLOT_MINUTES, Appointment, Doctor, Slot, WorkingHours
from .ports import Repository
from .services import (
    AvailabilityService,
    BookingService,
    SlotGrid,
    format_instant,
    is_slot_free,
    normalize_instant,
)
from .exceptions import (
    AppointmentNotFound,
    Conflict,
    DoctorNotFound,
    DomainError,
    InvalidDate,
    InvalidDateFormat,
    InvalidDuration,
    InvalidWorkingHours,
    NotFoundError,
    PersistenceError,
    PersistenceTimeout,
    PersistenceUnavailable,
    RetryableError,
    SchedulingError,
    SlotAlreadyBooked,
    SlotUnavailable,
    ValidationError,
)

__all__ = [
    "AdmissionState",
    "SLOT_MINUTES",
    "Appointment",
    "Doctor",
    "Slot",
    "WorkingHours",
    "Repository",
    "AvailabilityService",
    "BookingService",
    "SlotGrid",
    "format_instant",
    "is_slot_free",
    "normalize_instant",
    "AppointmentNotFound",
    "Conflict",
    "DoctorNotFound",
    "DomainError",
    "InvalidDate",
    "InvalidDateFormat",
    "InvalidDuration",
    "InvalidWorkingHours",
    "NotFoundError",
    "PersistenceError",
    "PersistenceTimeout",
    "PersistenceUnavailable",
    "RetryableError",
    "SchedulingError",
    "SlotAlreadyBooked",
    "SlotUnavailable",
    "ValidationError",
]
