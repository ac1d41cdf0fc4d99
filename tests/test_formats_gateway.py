"""Tests for the gateway history adapter."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

import pytest

from formats.gateway import GatewayHistoryAdapter
from models.errors import MalformedPayload
from models.readings import Trend

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def adapter() -> GatewayHistoryAdapter:
    return GatewayHistoryAdapter()


def _payload(tags) -> dict:
    return {"data": {"tags": tags}}


def test_single_tag_scenario(adapter: GatewayHistoryAdapter) -> None:
    payload = _payload(
        {"AA:BB": {"temperature": 21.5, "humidity": 40.0, "voltage": 2.0, "timestamp": 1700000000}}
    )

    snapshot = adapter.parse(payload, NOW)

    assert len(snapshot) == 1
    reading = snapshot[0]
    assert reading.name == "AA:BB"
    assert reading.battery_low is True
    assert reading.unreachable is False
    assert reading.temperature.current == 21.5
    assert reading.humidity.current == 40.0
    assert reading.observed_at == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)


def test_bounds_collapse_to_current_and_trend_is_flat(adapter: GatewayHistoryAdapter) -> None:
    payload = _payload(
        {
            "AA:01": {"temperature": -3.25, "humidity": 80, "voltage": 2.9, "timestamp": 1700000000},
            "AA:02": {"temperature": 30, "humidity": 12.5, "voltage": 3.1, "timestamp": 1700000060},
        }
    )

    for reading in adapter.parse(payload, NOW):
        for metric in (reading.temperature, reading.humidity):
            assert metric.min == metric.current == metric.max
            assert metric.trend is Trend.flat


@pytest.mark.parametrize(
    ("entry", "expected"),
    [
        ({"voltage": 2.0}, True),
        ({"voltage": 1.8}, True),
        ({"voltage": 2.01}, False),
        ({}, False),
    ],
)
def test_battery_low_threshold(adapter: GatewayHistoryAdapter, entry: dict, expected: bool) -> None:
    entry = {"temperature": 20.0, "humidity": 50.0, "timestamp": 1700000000, **entry}

    (reading,) = adapter.parse(_payload({"AA:BB": entry}), NOW)

    assert reading.battery_low is expected


def test_missing_timestamp_uses_supplied_now(adapter: GatewayHistoryAdapter) -> None:
    (reading,) = adapter.parse(_payload({"AA:BB": {"temperature": 20.0, "humidity": 50.0}}), NOW)

    assert reading.observed_at == NOW


def test_missing_measurements_default_to_zero(adapter: GatewayHistoryAdapter) -> None:
    (reading,) = adapter.parse(_payload({"AA:BB": {"timestamp": 1700000000}}), NOW)

    assert reading.temperature.current == 0.0
    assert reading.humidity.current == 0.0


def test_preserves_upstream_order(adapter: GatewayHistoryAdapter) -> None:
    tags = {name: {"temperature": 1.0, "humidity": 1.0} for name in ("C3", "A1", "B2")}

    snapshot = adapter.parse(_payload(tags), NOW)

    assert [reading.name for reading in snapshot] == ["C3", "A1", "B2"]


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"data": {}},
        {"data": {"tags": []}},
        {"data": {"tags": "AA:BB"}},
        {"data": None},
        [],
        None,
    ],
)
def test_missing_or_invalid_tags_mapping_is_malformed(adapter: GatewayHistoryAdapter, payload) -> None:
    with pytest.raises(MalformedPayload):
        adapter.parse(payload, NOW)


def test_corrupt_entries_are_skipped(adapter: GatewayHistoryAdapter, caplog) -> None:
    payload = _payload(
        {
            "GOOD:1": {"temperature": 20.0, "humidity": 45.0, "timestamp": 1700000000},
            "BAD:LIST": ["not", "an", "object"],
            "BAD:TEMP": {"temperature": "warm", "humidity": 45.0},
            "BAD:BOOL": {"temperature": 20.0, "humidity": True},
            "BAD:TS": {"temperature": 20.0, "humidity": 45.0, "timestamp": 10**20},
            "BAD:HUGE": {"temperature": 20.0, "humidity": 10**400},
            "GOOD:2": {"temperature": 22.0, "humidity": 50.0, "timestamp": 1700000000},
        }
    )

    with caplog.at_level(logging.WARNING, logger="formats.gateway"):
        snapshot = adapter.parse(payload, NOW)

    assert [reading.name for reading in snapshot] == ["GOOD:1", "GOOD:2"]
    skipped = sorted(record.device for record in caplog.records)
    assert skipped == ["BAD:BOOL", "BAD:HUGE", "BAD:LIST", "BAD:TEMP", "BAD:TS"]


def test_all_entries_corrupt_yields_empty_snapshot(adapter: GatewayHistoryAdapter) -> None:
    assert adapter.parse(_payload({"AA:BB": None}), NOW) == ()


def test_normalization_is_idempotent(adapter: GatewayHistoryAdapter) -> None:
    payload = _payload(
        {"AA:BB": {"temperature": 21.5, "humidity": 40.0, "voltage": 2.0, "timestamp": 1700000000}}
    )

    assert adapter.parse(payload, NOW) == adapter.parse(payload, NOW)


def test_oversized_integer_from_json_is_skipped(adapter: GatewayHistoryAdapter) -> None:
    raw = '{"data":{"tags":{"GOOD":{"temperature":21.5},"BAD":{"temperature":1' + "0" * 400 + "}}}}"

    snapshot = adapter.parse(json.loads(raw), NOW)

    assert [reading.name for reading in snapshot] == ["GOOD"]
