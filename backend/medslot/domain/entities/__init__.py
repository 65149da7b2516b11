from .doctor import Doctor, WorkingHours, parse_time_of_day
from .slot import SLOT_MINUTES, Slot
from .appointment import Appointment, validate_duration

__all__ = [
    "Doctor",
    "WorkingHours",
    "parse_time_of_day",
    "SLOT_MINUTES",
    "Slot",
    "Appointment",
    "validate_duration",
]
