from __future__ import annotations

from types import SimpleNamespace
from typing import List, Tuple

from cli.render import CursesSink, format_frame
from services.derived import DisplayRow
from services.scheduler import Frame


def _row(name: str = "AA:BB", alert_label: str | None = None) -> DisplayRow:
    return DisplayRow(
        name=name,
        alert_label=alert_label,
        temperature_text="+21.50°C",
        temperature_trend_glyph="▸",
        humidity_text="40.00%",
        humidity_trend_glyph="▴",
        temperature_range_text="+21.50…+21.50°C",
        relative_time_text="5 minutes ago",
    )


class FakeCursesError(Exception):
    pass


def _fake_curses(has_colors: bool = True) -> SimpleNamespace:
    return SimpleNamespace(
        error=FakeCursesError,
        A_BOLD=1 << 8,
        COLOR_WHITE=7,
        COLOR_GREEN=2,
        COLOR_RED=1,
        curs_set=lambda visibility: None,
        has_colors=lambda: has_colors,
        start_color=lambda: None,
        use_default_colors=lambda: None,
        init_pair=lambda pair, fg, bg: None,
        color_pair=lambda pair: pair,
    )


class FakeScreen:
    def __init__(self, keys: List[int] | None = None, capacity: int | None = None) -> None:
        self.writes: List[Tuple[str, int]] = []
        self.keys = list(keys or [])
        self.capacity = capacity
        self.nodelay_flag = None
        self.refreshed = 0

    def nodelay(self, flag: bool) -> None:
        self.nodelay_flag = flag

    def erase(self) -> None:
        self.writes.clear()

    def addstr(self, text: str, attr: int = 0) -> None:
        if self.capacity is not None and len(self.writes) >= self.capacity:
            raise FakeCursesError("addstr() returned ERR")
        self.writes.append((text, attr))

    def refresh(self) -> None:
        self.refreshed += 1

    def getch(self) -> int:
        return self.keys.pop(0) if self.keys else -1

    @property
    def text(self) -> str:
        return "".join(text for text, _ in self.writes)


def test_format_frame_layout() -> None:
    lines = format_frame(Frame(rows=(_row(alert_label="Unreachable"),), network_fault=True))

    assert lines == [
        "AA:BB Unreachable",
        "+21.50°C▸ 40.00%▴",
        "+21.50…+21.50°C",
        "Updated: 5 minutes ago",
        "",
        "Network error",
    ]


def test_format_frame_empty() -> None:
    assert format_frame(Frame()) == []


def test_curses_sink_draws_rows_and_fault_line() -> None:
    screen = FakeScreen()
    sink = CursesSink(screen, _fake_curses())

    sink.render(Frame(rows=(_row(alert_label="Battery low"), _row("CC:DD")), network_fault=True))

    assert screen.nodelay_flag is True
    assert screen.refreshed == 1
    assert screen.text.splitlines() == format_frame(
        Frame(rows=(_row(alert_label="Battery low"), _row("CC:DD")), network_fault=True)
    )
    assert ("Battery low", 3 | (1 << 8)) in screen.writes
    assert ("Network error\n", 3 | (1 << 8)) in screen.writes


def test_curses_sink_without_colors_uses_bold_only() -> None:
    screen = FakeScreen()
    sink = CursesSink(screen, _fake_curses(has_colors=False))

    sink.render(Frame(rows=(_row(),)))

    assert screen.writes[0] == ("AA:BB", 1 << 8)


def test_curses_sink_stops_drawing_when_window_is_full() -> None:
    screen = FakeScreen(capacity=3)
    sink = CursesSink(screen, _fake_curses())

    sink.render(Frame(rows=(_row(), _row("CC:DD")), network_fault=True))

    assert len(screen.writes) == 3
    assert screen.refreshed == 1


def test_quit_requested_polls_pending_keys() -> None:
    sink = CursesSink(FakeScreen(keys=[ord("x"), ord("q")]), _fake_curses())
    assert sink.quit_requested() is True

    idle = CursesSink(FakeScreen(keys=[ord("x")]), _fake_curses())
    assert idle.quit_requested() is False
