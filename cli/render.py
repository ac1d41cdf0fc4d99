from __future__ import annotations

from typing import Any, Dict, List

import typer

from services.derived import DisplayRow
from services.scheduler import Frame

NETWORK_ERROR_TEXT = "Network error"
QUIT_KEYS = {ord("q"), ord("Q")}


def _title(row: DisplayRow) -> str:
    if row.alert_label:
        return f"{row.name} {row.alert_label}"
    return row.name


def _values(row: DisplayRow) -> str:
    return (
        f"{row.temperature_text}{row.temperature_trend_glyph}"
        f" {row.humidity_text}{row.humidity_trend_glyph}"
    )


def format_frame(frame: Frame) -> List[str]:
    """Plain-text lines for a frame, in the same layout as the live view."""
    lines: List[str] = []
    for row in frame.rows:
        lines.extend(
            [
                _title(row),
                _values(row),
                row.temperature_range_text,
                f"Updated: {row.relative_time_text}",
                "",
            ]
        )
    if frame.network_fault:
        lines.append(NETWORK_ERROR_TEXT)
    return lines


def echo_frame(frame: Frame) -> None:
    if not frame.rows and not frame.network_fault:
        typer.echo("No readings available.")
        return
    for row in frame.rows:
        typer.secho(row.name, fg=typer.colors.GREEN, bold=True, nl=not row.alert_label)
        if row.alert_label:
            typer.secho(f" {row.alert_label}", fg=typer.colors.RED, bold=True)
        typer.echo(_values(row))
        typer.echo(row.temperature_range_text)
        typer.echo(f"Updated: {row.relative_time_text}")
        typer.echo()
    if frame.network_fault:
        typer.secho(NETWORK_ERROR_TEXT, fg=typer.colors.RED, bold=True)


class CursesSink:
    """Draws frames onto a curses window and polls it for the quit key."""

    def __init__(self, stdscr: Any, curses_mod: Any) -> None:
        self._stdscr = stdscr
        self._curses = curses_mod
        self._palette: Dict[str, int] = {"value": 0, "accent": 0, "alert": 0}

        stdscr.nodelay(True)
        try:
            curses_mod.curs_set(0)
        except curses_mod.error:
            pass  # invisible cursor unsupported by this terminal
        if curses_mod.has_colors():
            curses_mod.start_color()
            # Keep the terminal's own background instead of forcing black.
            curses_mod.use_default_colors()
            curses_mod.init_pair(1, curses_mod.COLOR_WHITE, -1)
            curses_mod.init_pair(2, curses_mod.COLOR_GREEN, -1)
            curses_mod.init_pair(3, curses_mod.COLOR_RED, -1)
            self._palette.update(
                {
                    "value": curses_mod.color_pair(1),
                    "accent": curses_mod.color_pair(2),
                    "alert": curses_mod.color_pair(3),
                }
            )

    def _attr(self, name: str) -> int:
        return self._palette[name] | self._curses.A_BOLD

    def render(self, frame: Frame) -> None:
        screen = self._stdscr
        screen.erase()
        try:
            for row in frame.rows:
                screen.addstr(row.name, self._attr("accent"))
                if row.alert_label:
                    screen.addstr(" ")
                    screen.addstr(row.alert_label, self._attr("alert"))
                screen.addstr("\n")

                screen.addstr(row.temperature_text, self._attr("value"))
                screen.addstr(row.temperature_trend_glyph, self._attr("accent"))
                screen.addstr(f" {row.humidity_text}", self._attr("value"))
                screen.addstr(row.humidity_trend_glyph, self._attr("accent"))
                screen.addstr("\n")

                screen.addstr(f"{row.temperature_range_text}\n")
                screen.addstr(f"Updated: {row.relative_time_text}\n\n")

            if frame.network_fault:
                screen.addstr(f"{NETWORK_ERROR_TEXT}\n", self._attr("alert"))
        except self._curses.error:
            # Window too small for the whole frame; keep what fit.
            pass
        screen.refresh()

    def quit_requested(self) -> bool:
        while True:
            key = self._stdscr.getch()
            if key == -1:
                return False
            if key in QUIT_KEYS:
                return True
