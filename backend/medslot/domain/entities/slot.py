from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta

SLOT_MINUTES = 30


@dataclass(frozen=True)
class Slot:
    """Half-open interval [start, end) on a doctor's schedule."""

    start: datetime
    end: datetime

    @staticmethod
    def at(start: datetime, minutes: int = SLOT_MINUTES) -> "Slot":
        return Slot(start, start + timedelta(minutes=minutes))

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end

    def overlaps(self, other: "Slot") -> bool:
        # touching endpoints do not overlap
        return self.start < other.end and self.end > other.start
