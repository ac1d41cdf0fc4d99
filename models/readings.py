"""Canonical sensor-reading model shared by every upstream format."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple


class Trend(str, Enum):
    """Direction of change since the previous observation."""

    rising = "rising"
    falling = "falling"
    flat = "flat"

    @classmethod
    def from_code(cls, code: object) -> "Trend":
        """Map the upstream integer encoding (1 / -1 / anything else)."""
        if code == 1:
            return cls.rising
        if code == -1:
            return cls.falling
        return cls.flat


@dataclass(frozen=True, slots=True)
class Metric:
    """Current state of one measured quantity."""

    current: float
    min: float
    max: float
    trend: Trend = Trend.flat

    @classmethod
    def flat(cls, value: float) -> "Metric":
        """Metric for formats that report neither bounds nor trend."""
        return cls(current=value, min=value, max=value, trend=Trend.flat)


@dataclass(frozen=True, slots=True)
class CanonicalReading:
    """Normalized state of a single sensor device."""

    name: str
    observed_at: Optional[datetime]
    temperature: Metric
    humidity: Metric
    battery_low: bool
    unreachable: bool = False


def parse_observed_at(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 3339 date-time into an aware UTC datetime, or ``None``.

    Values without a time part are rejected; a missing offset is read as UTC.
    """
    if not value:
        return None
    candidate = value.strip()
    if len(candidate) < 11 or candidate[10] not in "Tt ":
        return None
    if candidate.endswith(("Z", "z")):
        candidate = f"{candidate[:-1]}+00:00"
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


Snapshot = Tuple[CanonicalReading, ...]

EMPTY_SNAPSHOT: Snapshot = ()
