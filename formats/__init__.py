"""Upstream format adapters and the dispatcher that selects one."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from formats.base import FormatAdapter
from formats.gateway import GatewayHistoryAdapter
from formats.passthrough import PassthroughAdapter

logger = logging.getLogger(__name__)

DEFAULT_BACKEND = PassthroughAdapter.backend_id

_ADAPTERS: Dict[str, FormatAdapter] = {
    adapter.backend_id: adapter
    for adapter in (PassthroughAdapter(), GatewayHistoryAdapter())
}

BACKEND_IDS = tuple(_ADAPTERS)


def select_adapter(backend_id: Optional[str]) -> FormatAdapter:
    """Return the adapter for ``backend_id``.

    Unrecognized or empty identifiers resolve to the passthrough adapter.
    """
    key = (backend_id or "").strip().lower()
    adapter = _ADAPTERS.get(key)
    if adapter is not None:
        return adapter
    if key:
        logger.warning(
            "Unknown backend format, falling back to %s",
            DEFAULT_BACKEND,
            extra={"backend": backend_id},
        )
    return _ADAPTERS[DEFAULT_BACKEND]


__all__ = [
    "BACKEND_IDS",
    "DEFAULT_BACKEND",
    "FormatAdapter",
    "GatewayHistoryAdapter",
    "PassthroughAdapter",
    "select_adapter",
]
