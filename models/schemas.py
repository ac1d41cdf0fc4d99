"""Pydantic schemas describing upstream wire formats."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class MetricPayload(BaseModel):
    """Metric block as served by the passthrough API."""

    model_config = ConfigDict(strict=True)

    current: float
    min: float
    max: float
    trend: int = Field(..., description="1 rising, -1 falling, anything else flat.")


class TagPayload(BaseModel):
    """One tag record in the passthrough API response."""

    model_config = ConfigDict(strict=True)

    id: Optional[int] = None
    tag_id: Optional[int] = None
    observed: str = Field(..., alias="datetime", description="RFC 3339 timestamp.")
    temperature: MetricPayload
    humidity: MetricPayload
    battery_low: bool
    unreachable: bool = False
    tag_name: str


TagListPayload = TypeAdapter(List[TagPayload])
