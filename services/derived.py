"""Display fields derived from canonical readings.

Every function here is pure: the current instant is always passed in, so the
same inputs always render the same text.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, List, Optional, Union

from models.readings import CanonicalReading, Trend, parse_observed_at


class AlertState(str, Enum):
    """At most one alert is shown per reading."""

    none = "none"
    battery_low = "battery_low"
    unreachable = "unreachable"

    @property
    def label(self) -> Optional[str]:
        return _ALERT_LABELS.get(self)


_ALERT_LABELS = {
    AlertState.battery_low: "Battery low",
    AlertState.unreachable: "Unreachable",
}

_TREND_GLYPHS = {
    Trend.rising: "▴",
    Trend.falling: "▾",
}
_FLAT_GLYPH = "▸"

_MINUTE = 60
_HOUR = 3600
_DAY = 86400


@dataclass(frozen=True)
class DisplayRow:
    """Everything the presentation layer needs for one reading."""

    name: str
    alert_label: Optional[str]
    temperature_text: str
    temperature_trend_glyph: str
    humidity_text: str
    humidity_trend_glyph: str
    temperature_range_text: str
    relative_time_text: str


def classify_alert(reading: CanonicalReading) -> AlertState:
    # Unreachable outranks a low battery.
    if reading.unreachable:
        return AlertState.unreachable
    if reading.battery_low:
        return AlertState.battery_low
    return AlertState.none


def trend_glyph(trend: Optional[Trend]) -> str:
    return _TREND_GLYPHS.get(trend, _FLAT_GLYPH)  # type: ignore[arg-type]


def relative_time(observed_at: Union[datetime, str, None], now: datetime) -> str:
    """Human readable age of ``observed_at`` relative to ``now``."""
    if isinstance(observed_at, str):
        observed_at = parse_observed_at(observed_at)
    if not isinstance(observed_at, datetime):
        return "unknown"

    seconds = int((_as_utc(now) - _as_utc(observed_at)).total_seconds())
    if seconds < _MINUTE:
        return f"{seconds} seconds ago"
    if seconds < _HOUR:
        return f"{seconds // _MINUTE} minutes ago"
    if seconds < _DAY:
        return f"{seconds // _HOUR} hours ago"
    return f"{seconds // _DAY} days ago"


def format_temperature(value: float) -> str:
    return f"{value:+.2f}°C"


def format_humidity(value: float) -> str:
    return f"{value:.2f}%"


def format_temperature_range(low: float, high: float) -> str:
    return f"{low:+.2f}…{high:+.2f}°C"


def build_row(reading: CanonicalReading, now: datetime) -> DisplayRow:
    return DisplayRow(
        name=reading.name,
        alert_label=classify_alert(reading).label,
        temperature_text=format_temperature(reading.temperature.current),
        temperature_trend_glyph=trend_glyph(reading.temperature.trend),
        humidity_text=format_humidity(reading.humidity.current),
        humidity_trend_glyph=trend_glyph(reading.humidity.trend),
        temperature_range_text=format_temperature_range(
            reading.temperature.min, reading.temperature.max
        ),
        relative_time_text=relative_time(reading.observed_at, now),
    )


def build_rows(readings: Iterable[CanonicalReading], now: datetime) -> List[DisplayRow]:
    return [build_row(reading, now) for reading in readings]


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
