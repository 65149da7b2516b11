"""
Salvage a single canonical instant out of a caller-supplied string.

Some upstream clients send the timestamp twice glued together
(``2024-05-01T09:00:00.000Z2024-05-01T09:00:00.000Z``). We pull every
``YYYY-MM-DDTHH:MM:SS.mmmZ`` fragment out of the input and accept it only
when exactly one distinct fragment is present. Anything else is rejected;
this is not a general date parser.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone

from ..exceptions import InvalidDateFormat

_INSTANT = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}\.[0-9]{3}Z")
_INSTANT_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


@dataclass(frozen=True)
class NormalizedInstant:
    instant: datetime
    day: date

    def isoformat(self) -> str:
        return format_instant(self.instant)


def normalize_instant(raw) -> NormalizedInstant:
    if not isinstance(raw, str) or not raw:
        raise InvalidDateFormat(f"Invalid date format: {raw!r}")

    fragments = set(_INSTANT.findall(raw))
    if len(fragments) != 1:
        raise InvalidDateFormat(f"Invalid date format: {raw}")

    try:
        parsed = datetime.strptime(fragments.pop(), _INSTANT_FORMAT)
    except ValueError as err:
        raise InvalidDateFormat(f"Invalid date format: {raw}") from err

    instant = parsed.replace(tzinfo=timezone.utc)
    return NormalizedInstant(instant=instant, day=instant.date())


def format_instant(instant: datetime) -> str:
    """Render as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    if instant.tzinfo is not None:
        instant = instant.astimezone(timezone.utc)
    return instant.strftime("%Y-%m-%dT%H:%M:%S.") + f"{instant.microsecond // 1000:03d}Z"


def parse_instant(value: str) -> datetime:
    """Inverse of :func:`format_instant` for trusted, stored values."""
    return datetime.strptime(value, _INSTANT_FORMAT).replace(tzinfo=timezone.utc)
