"""Adapter for gateway history payloads keyed by hardware identifier."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping

from formats.base import FormatAdapter
from models.errors import MalformedPayload, PerEntryCorruption
from models.readings import CanonicalReading, Metric, Snapshot

logger = logging.getLogger(__name__)

LOW_BATTERY_VOLTAGE = 2.0
DEFAULT_VOLTAGE = 3.0
DEFAULT_MEASUREMENT = 0.0


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _number(device: str, entry: Mapping[str, Any], key: str, default: float) -> float:
    value = entry.get(key)
    if value is None:
        return default
    if not _is_number(value):
        raise PerEntryCorruption(device, f"{key} is not numeric")
    try:
        return float(value)
    except OverflowError as exc:
        raise PerEntryCorruption(device, f"{key} is out of range") from exc


def _observed_at(device: str, entry: Mapping[str, Any], now: datetime) -> datetime:
    value = entry.get("timestamp")
    if value is None:
        return now
    if not _is_number(value):
        raise PerEntryCorruption(device, "timestamp is not numeric")
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as exc:
        raise PerEntryCorruption(device, "timestamp out of range") from exc


def parse_device(device: str, entry: Any, now: datetime) -> CanonicalReading:
    """Normalize one gateway entry, raising ``PerEntryCorruption`` if invalid."""
    if not isinstance(entry, Mapping):
        raise PerEntryCorruption(device, "entry is not an object")

    temperature = _number(device, entry, "temperature", DEFAULT_MEASUREMENT)
    humidity = _number(device, entry, "humidity", DEFAULT_MEASUREMENT)
    voltage = _number(device, entry, "voltage", DEFAULT_VOLTAGE)

    return CanonicalReading(
        name=device,
        observed_at=_observed_at(device, entry, now),
        temperature=Metric.flat(temperature),
        humidity=Metric.flat(humidity),
        battery_low=voltage <= LOW_BATTERY_VOLTAGE,
    )


class GatewayHistoryAdapter(FormatAdapter):
    """Flatten ``data.tags`` into readings named after each hardware id.

    Entries that fail validation are skipped and logged; only a missing or
    non-object ``tags`` mapping rejects the whole payload.
    """

    backend_id = "gateway-history"

    def parse(self, payload: Any, now: datetime) -> Snapshot:
        data = payload.get("data") if isinstance(payload, Mapping) else None
        tags = data.get("tags") if isinstance(data, Mapping) else None
        if not isinstance(tags, Mapping):
            raise MalformedPayload("Expected 'data.tags' to be an object.")

        readings: list[CanonicalReading] = []
        for device, entry in tags.items():
            try:
                readings.append(parse_device(str(device), entry, now))
            except PerEntryCorruption as exc:
                logger.warning(
                    "Skipping corrupt gateway entry",
                    extra={"device": exc.device, "reason": exc.reason},
                )
        return tuple(readings)
