"""Adapter for APIs that already serve the canonical tag shape."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from formats.base import FormatAdapter
from models.errors import MalformedPayload
from models.readings import CanonicalReading, Metric, Snapshot, Trend, parse_observed_at
from models.schemas import MetricPayload, TagListPayload, TagPayload


def _metric(payload: MetricPayload) -> Metric:
    return Metric(
        current=payload.current,
        min=payload.min,
        max=payload.max,
        trend=Trend.from_code(payload.trend),
    )


def _reading(tag: TagPayload) -> CanonicalReading:
    return CanonicalReading(
        name=tag.tag_name,
        observed_at=parse_observed_at(tag.observed),
        temperature=_metric(tag.temperature),
        humidity=_metric(tag.humidity),
        battery_low=tag.battery_low,
        unreachable=tag.unreachable,
    )


class PassthroughAdapter(FormatAdapter):
    """Direct structural decode of a JSON list of tag records."""

    backend_id = "passthrough"

    def parse(self, payload: Any, now: datetime) -> Snapshot:
        try:
            tags = TagListPayload.validate_python(payload)
        except ValidationError as exc:
            raise MalformedPayload(
                f"Payload does not match the passthrough format: {exc.error_count()} error(s)."
            ) from exc

        seen: set[str] = set()
        for tag in tags:
            if tag.tag_name in seen:
                raise MalformedPayload(f"Duplicate tag_name {tag.tag_name!r} in payload.")
            seen.add(tag.tag_name)

        return tuple(_reading(tag) for tag in tags)
