"""Terminal front end for the telemetry monitor."""

from importlib import import_module
from types import ModuleType


def __getattr__(name: str) -> ModuleType:
    if name == "app":
        return import_module("cli.app")
    raise AttributeError(name)

# The Typer application lives in ``cli.app``.  It is not re-exported from the
# package root so that ``cli.app`` keeps resolving to the module, which tests
# patch (``cli.app.TelemetryClient``, ``cli.app.run_live``).

__all__ = []
