from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Iterator

from ..entities import SLOT_MINUTES, Slot, WorkingHours


class SlotGrid:
    """
    Candidate slot starts for one doctor on one calendar day.

    Starts run from ``day + hours.start`` (inclusive) to ``day + hours.end``
    (exclusive) in fixed steps. The grid is restartable: every iteration
    yields the full sequence again.
    """

    def __init__(self, hours: WorkingHours, day: date, step_minutes: int = SLOT_MINUTES) -> None:
        opens, closes = hours.bounds()
        self.day = day
        self.step = timedelta(minutes=step_minutes)
        self.window = Slot(
            datetime.combine(day, opens, tzinfo=timezone.utc),
            datetime.combine(day, closes, tzinfo=timezone.utc),
        )

    def __iter__(self) -> Iterator[datetime]:
        current = self.window.start
        while current < self.window.end:
            yield current
            current = current + self.step

    def __contains__(self, instant: object) -> bool:
        if not isinstance(instant, datetime) or not self.window.contains(instant):
            return False
        return (instant - self.window.start) % self.step == timedelta(0)

    def __len__(self) -> int:
        span = self.window.end - self.window.start
        return -(-span // self.step)


def generate_slots(hours: WorkingHours, day: date, step_minutes: int = SLOT_MINUTES) -> SlotGrid:
    return SlotGrid(hours, day, step_minutes)
