"""Refresh/render state machine driving the live view."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Optional, Protocol, Tuple

from formats.base import FormatAdapter
from models.errors import TelemetryError
from models.readings import EMPTY_SNAPSHOT, Snapshot
from services.derived import DisplayRow, build_rows

logger = logging.getLogger(__name__)

REFRESH_INTERVAL = timedelta(seconds=60)
TICK_INTERVAL_SECONDS = 1.0


class SchedulerPhase(str, Enum):
    """Lifecycle of the refresh loop."""

    idle = "idle"
    fetching = "fetching"
    stopped = "stopped"


@dataclass
class SchedulerState:
    """Mutable loop state, owned by a single ``RefreshScheduler``.

    ``last_refresh_at`` of ``None`` means no attempt has been made yet, which
    makes the first tick fetch immediately.
    """

    last_snapshot: Snapshot = EMPTY_SNAPSHOT
    last_refresh_at: Optional[datetime] = None
    fault: bool = False
    phase: SchedulerPhase = SchedulerPhase.idle


@dataclass(frozen=True)
class Frame:
    """One render's worth of rows plus the network fault flag."""

    rows: Tuple[DisplayRow, ...] = ()
    network_fault: bool = False


class PresentationSink(Protocol):
    def render(self, frame: Frame) -> None: ...


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RefreshScheduler:
    """Decides when to fetch and keeps the last good snapshot across failures."""

    def __init__(
        self,
        fetch: Callable[[], Any],
        adapter: FormatAdapter,
        state: Optional[SchedulerState] = None,
        refresh_interval: timedelta = REFRESH_INTERVAL,
        tick_interval: float = TICK_INTERVAL_SECONDS,
    ) -> None:
        self.fetch = fetch
        self.adapter = adapter
        self.state = state if state is not None else SchedulerState()
        self.refresh_interval = refresh_interval
        self.tick_interval = tick_interval

    @property
    def stopped(self) -> bool:
        return self.state.phase is SchedulerPhase.stopped

    def is_due(self, now: datetime) -> bool:
        last = self.state.last_refresh_at
        return last is None or now - last >= self.refresh_interval

    def refresh(self, now: datetime) -> bool:
        """Fetch and normalize once; return whether the attempt succeeded."""
        state = self.state
        state.phase = SchedulerPhase.fetching
        try:
            payload = self.fetch()
            snapshot = self.adapter.parse(payload, now)
        except TelemetryError as exc:
            state.fault = True
            logger.warning(
                "Refresh failed; keeping previous snapshot: %s",
                exc,
                extra={"backend": self.adapter.backend_id, "reason": type(exc).__name__},
            )
            succeeded = False
        else:
            state.last_snapshot = snapshot
            state.fault = False
            logger.info(
                "Refresh succeeded",
                extra={"backend": self.adapter.backend_id, "reading_count": len(snapshot)},
            )
            succeeded = True
        finally:
            # Failures are retried on the same cadence as successes.
            state.last_refresh_at = now
            if state.phase is SchedulerPhase.fetching:
                state.phase = SchedulerPhase.idle
        return succeeded

    def frame(self, now: datetime) -> Frame:
        return Frame(
            rows=tuple(build_rows(self.state.last_snapshot, now)),
            network_fault=self.state.fault,
        )

    def tick(self, now: datetime) -> Frame:
        if not self.stopped and self.is_due(now):
            self.refresh(now)
        return self.frame(now)

    def stop(self) -> None:
        self.state.phase = SchedulerPhase.stopped

    def run(
        self,
        sink: PresentationSink,
        quit_requested: Callable[[], bool],
        clock: Callable[[], datetime] = utc_now,
        sleep: Callable[[float], None] = time.sleep,
    ) -> int:
        """Tick, render and poll for quit until stopped; return the tick count."""
        ticks = 0
        while not self.stopped:
            sink.render(self.tick(clock()))
            ticks += 1
            if quit_requested():
                self.stop()
                break
            sleep(self.tick_interval)
        logger.info("Refresh loop stopped", extra={"tick_count": ticks})
        return ticks
