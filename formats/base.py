"""Shared adapter interface for upstream telemetry formats."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from models.readings import Snapshot


class FormatAdapter(ABC):
    """Pure transformation from one upstream JSON shape to a snapshot.

    Implementations never perform I/O and never consult the wall clock; ``now``
    is only used where the upstream payload omits a timestamp.
    """

    backend_id: str

    @abstractmethod
    def parse(self, payload: Any, now: datetime) -> Snapshot:
        """Normalize decoded JSON, raising ``MalformedPayload`` on shape errors."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(backend_id={self.backend_id!r})"
