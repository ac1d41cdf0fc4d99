from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import typer

from cli.client import TelemetryClient
from cli.config import ConfigurationError, MonitorConfig, load_config
from cli.render import CursesSink, echo_frame
from formats import BACKEND_IDS, DEFAULT_BACKEND, FormatAdapter, select_adapter
from logging_config import configure_logging
from models.errors import TelemetryError
from services.derived import build_rows
from services.scheduler import Frame, RefreshScheduler


@dataclass
class CLIState:
    config: MonitorConfig
    client: TelemetryClient
    adapter: FormatAdapter


app = typer.Typer(
    help="Live terminal view of environmental sensor telemetry.",
    context_settings={"help_option_names": ["-h", "--help"]},
)

_CONFIG_FREE_COMMANDS = {"formats"}


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


def run_live(scheduler: RefreshScheduler) -> int:
    """Run the refresh loop inside a curses session until ``q`` is pressed."""
    try:
        import curses
    except ImportError:
        typer.secho("Curses is unavailable on this platform.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    def loop(stdscr) -> int:
        sink = CursesSink(stdscr, curses)
        return scheduler.run(sink, sink.quit_requested)

    return curses.wrapper(loop)


@app.callback()
def main(
    ctx: typer.Context,
    url: Optional[str] = typer.Option(
        None,
        "--url",
        "-u",
        help="Telemetry endpoint (defaults to the API_URL env).",
    ),
    backend: Optional[str] = typer.Option(
        None,
        "--backend",
        "-b",
        help=f"Upstream format, one of {', '.join(BACKEND_IDS)} (defaults to BACKEND_FORMAT env or {DEFAULT_BACKEND}).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds before a fetch is abandoned (defaults to REQUEST_TIMEOUT env or 10).",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Log level for the LOG_FILE handler (defaults to LOG_LEVEL env or INFO).",
    ),
) -> None:
    """Entry point for the CLI."""
    configure_logging(log_level.upper() if log_level else None)
    if ctx.invoked_subcommand in _CONFIG_FREE_COMMANDS:
        return
    try:
        config = load_config(api_url=url, backend_format=backend, request_timeout=timeout)
    except ConfigurationError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    client = TelemetryClient(config)
    ctx.obj = CLIState(config=config, client=client, adapter=select_adapter(config.backend_format))
    ctx.call_on_close(client.close)


@app.command("watch")
def watch_command(ctx: typer.Context) -> None:
    """Continuously render the latest readings; press q to quit."""
    state = _get_state(ctx)
    scheduler = RefreshScheduler(fetch=state.client.fetch, adapter=state.adapter)
    run_live(scheduler)


@app.command("snapshot")
def snapshot_command(ctx: typer.Context) -> None:
    """Fetch once and print the normalized readings."""
    state = _get_state(ctx)
    now = datetime.now(timezone.utc)
    try:
        snapshot = state.adapter.parse(state.client.fetch(), now)
    except TelemetryError as exc:
        typer.secho(f"Fetch failed: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    echo_frame(Frame(rows=tuple(build_rows(snapshot, now))))


@app.command("formats")
def formats_command() -> None:
    """List the recognized upstream formats."""
    for backend_id in BACKEND_IDS:
        suffix = " (default)" if backend_id == DEFAULT_BACKEND else ""
        typer.echo(f"{backend_id}{suffix}")
