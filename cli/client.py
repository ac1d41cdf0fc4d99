from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from cli.config import MonitorConfig
from models.errors import TransportError

logger = logging.getLogger(__name__)


class TelemetryClient:
    """Blocking HTTP client for the telemetry endpoint."""

    def __init__(
        self,
        config: MonitorConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config
        self._client = httpx.Client(timeout=config.request_timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def fetch(self) -> Any:
        """GET the configured URL and return the decoded JSON body."""
        url = self._config.api_url
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            logger.debug("Upstream returned an error status", extra={"url": url, "status_code": status_code})
            raise TransportError(f"Request failed with status {status_code}.") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(f"Request to {url} failed: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise TransportError("Response body is not valid JSON.") from exc
