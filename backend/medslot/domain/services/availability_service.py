from __future__ import annotations

import re
from datetime import date, datetime
from typing import List, Optional, Tuple, Union

from ..entities import Appointment, Doctor
from ..exceptions import InvalidDate
from ..ports import Repository
from .overlap import is_slot_free
from .slot_generator import SlotGrid

_DAY = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")

DayLike = Union[date, str]


def parse_day(day: DayLike) -> date:
    if isinstance(day, datetime):
        return day.date()
    if isinstance(day, date):
        return day
    if not isinstance(day, str) or not _DAY.match(day):
        raise InvalidDate(f"Invalid date {day!r}. Use 'YYYY-MM-DD'.")
    try:
        return datetime.strptime(day, "%Y-%m-%d").date()
    except ValueError as err:
        raise InvalidDate(f"Invalid date {day!r}. Use 'YYYY-MM-DD'.") from err


class AvailabilityService:
    """Answers "which slots are free for doctor D on day X"."""

    def __init__(self, repository: Repository) -> None:
        self._repository = repository

    def slot_grid(self, doctor: Doctor, day: DayLike) -> SlotGrid:
        return SlotGrid(doctor.working_hours, parse_day(day))

    def day_schedule(
        self,
        doctor: Doctor,
        day: DayLike,
        exclude_appointment: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> Tuple[SlotGrid, List[Appointment]]:
        """The day's grid and every appointment of the doctor that overlaps its window."""
        grid = self.slot_grid(doctor, day)
        appointments = [
            appt
            for appt in self._repository.find_overlapping(
                doctor.id, grid.window.start, grid.window.end, timeout=timeout
            )
            if appt.id != exclude_appointment
        ]
        return grid, appointments

    def available_slots(
        self,
        doctor: Doctor,
        day: DayLike,
        exclude_appointment: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> List[datetime]:
        grid, appointments = self.day_schedule(doctor, day, exclude_appointment, timeout)
        return [start for start in grid if is_slot_free(start, appointments)]
