from __future__ import annotations
from dataclasses import dataclass
from datetime import time
import re
import uuid
from typing import Optional, Tuple

from ..exceptions import InvalidWorkingHours

_TIME_OF_DAY = re.compile(r"^([01][0-9]|2[0-3]):([0-5][0-9])$")


def parse_time_of_day(value: str) -> time:
    match = _TIME_OF_DAY.match(value) if isinstance(value, str) else None
    if not match:
        raise InvalidWorkingHours(f"Invalid time of day: {value!r}. Use 'HH:MM'.")
    return time(int(match.group(1)), int(match.group(2)))


@dataclass(frozen=True)
class WorkingHours:
    """Daily window as wall-clock 'HH:MM' strings, read in UTC."""

    start: str
    end: str

    def bounds(self) -> Tuple[time, time]:
        opens = parse_time_of_day(self.start)
        closes = parse_time_of_day(self.end)
        if opens >= closes:
            raise InvalidWorkingHours(
                f"Working hours start {self.start} must be before end {self.end}."
            )
        return opens, closes


@dataclass
class Doctor:
    _id: str
    _name: str
    _working_hours: WorkingHours
    _specialization: Optional[str] = None

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def specialization(self) -> Optional[str]:
        return self._specialization

    @property
    def working_hours(self) -> WorkingHours:
        return self._working_hours

    @staticmethod
    def new(
        name: str,
        start: str,
        end: str,
        specialization: Optional[str] = None,
    ) -> "Doctor":
        hours = WorkingHours(start=start.strip(), end=end.strip())
        hours.bounds()
        return Doctor(
            _id=str(uuid.uuid4()),
            _name=name.strip(),
            _working_hours=hours,
            _specialization=(specialization or "").strip() or None,
        )
