"""Error taxonomy for fetching and normalizing telemetry."""

from __future__ import annotations


class TelemetryError(Exception):
    """Base class for recoverable fetch/normalization failures."""


class TransportError(TelemetryError):
    """The endpoint could not be reached or did not return a JSON document."""


class FormatError(TelemetryError):
    """The payload does not match the configured upstream format."""


class MalformedPayload(FormatError):
    """The top-level shape violates the adapter's expectations."""


class PerEntryCorruption(FormatError):
    """A single device record inside an otherwise valid batch is invalid."""

    def __init__(self, device: str, reason: str) -> None:
        super().__init__(f"{device}: {reason}")
        self.device = device
        self.reason = reason
