from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from ..entities import SLOT_MINUTES, Appointment, Slot


def conflicting(
    candidate: Slot,
    appointments: Iterable[Appointment],
    exclude_appointment: Optional[str] = None,
) -> List[Appointment]:
    """Appointments whose [start, start + duration) overlaps ``candidate``."""
    return [
        appt
        for appt in appointments
        if appt.id != exclude_appointment and candidate.overlaps(appt.interval)
    ]


def is_slot_free(
    slot_start: datetime,
    appointments: Iterable[Appointment],
    slot_minutes: int = SLOT_MINUTES,
    exclude_appointment: Optional[str] = None,
) -> bool:
    # An appointment longer than one slot blocks every grid slot it touches,
    # including ones that start mid-appointment.
    candidate = Slot.at(slot_start, slot_minutes)
    return not conflicting(candidate, appointments, exclude_appointment)
