from .time_normalizer import NormalizedInstant, format_instant, normalize_instant, parse_instant
from .slot_generator import SlotGrid, generate_slots
from .overlap import conflicting, is_slot_free
from .availability_service import AvailabilityService, parse_day
from .booking_service import BookingService, DoctorLocks

__all__ = [
    "NormalizedInstant",
    "format_instant",
    "normalize_instant",
    "parse_instant",
    "SlotGrid",
    "generate_slots",
    "conflicting",
    "is_slot_free",
    "AvailabilityService",
    "parse_day",
    "BookingService",
    "DoctorLocks",
]
