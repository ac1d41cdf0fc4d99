from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from formats import DEFAULT_BACKEND

DEFAULT_REQUEST_TIMEOUT = 10.0

_API_URL_ENV = "API_URL"
_BACKEND_FORMAT_ENV = "BACKEND_FORMAT"
_REQUEST_TIMEOUT_ENV = "REQUEST_TIMEOUT"


class ConfigurationError(ValueError):
    """Required configuration is missing; the monitor cannot start."""


@dataclass(frozen=True)
class MonitorConfig:
    api_url: str
    backend_format: str = DEFAULT_BACKEND
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT


def _read_float(value: Optional[str], default: float) -> float:
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def load_config(
    api_url: Optional[str] = None,
    backend_format: Optional[str] = None,
    request_timeout: Optional[float] = None,
) -> MonitorConfig:
    url = (api_url or os.getenv(_API_URL_ENV) or "").strip()
    if not url:
        raise ConfigurationError(f"Environment variable {_API_URL_ENV} must be set.")
    backend = (backend_format or os.getenv(_BACKEND_FORMAT_ENV) or "").strip() or DEFAULT_BACKEND
    if request_timeout is None or request_timeout <= 0:
        request_timeout = _read_float(os.getenv(_REQUEST_TIMEOUT_ENV), DEFAULT_REQUEST_TIMEOUT)
    return MonitorConfig(
        api_url=url,
        backend_format=backend,
        request_timeout=request_timeout,
    )
