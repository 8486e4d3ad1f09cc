"""Tests for the synthetic sample source."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import pytest

from safety_view.aggregation import AggregationFunction, AggregationRequest
from safety_view.data_source import DataSourceError, SyntheticDataSource
from safety_view.metrics import MetricType
from safety_view.time_window import TimeWindow

START = datetime(2024, 5, 1, 0, 0, tzinfo=timezone.utc)


def _request(interval, function=AggregationFunction.AVERAGE, hours: float = 1) -> AggregationRequest:
    window = TimeWindow(START, START + timedelta(hours=hours))
    return AggregationRequest(window, interval, function)


def test_buckets_follow_interval() -> None:
    source = SyntheticDataSource(seed=3)
    samples = source.get_samples(_request(timedelta(minutes=5)), MetricType.TEMPERATURE)
    assert len(samples) == 12
    assert samples[1].timestamp - samples[0].timestamp == timedelta(minutes=5)
    assert samples[0].timestamp == START


def test_raw_request_uses_sensor_cadence() -> None:
    source = SyntheticDataSource()
    samples = source.get_samples(_request(None), MetricType.HUMIDITY)
    assert len(samples) == 60
    assert all(0.0 <= sample.value <= 100.0 for sample in samples)


def test_values_are_deterministic() -> None:
    first = SyntheticDataSource(seed=5).get_samples(_request(timedelta(minutes=1)), MetricType.WIND_SPEED)
    second = SyntheticDataSource(seed=5).get_samples(_request(timedelta(minutes=1)), MetricType.WIND_SPEED)
    assert first == second


def test_min_and_max_bracket_average() -> None:
    source = SyntheticDataSource()
    interval = timedelta(minutes=30)
    low = source.get_samples(_request(interval, AggregationFunction.MINIMUM, 6), MetricType.CLOUD_COVER)
    avg = source.get_samples(_request(interval, AggregationFunction.AVERAGE, 6), MetricType.CLOUD_COVER)
    high = source.get_samples(_request(interval, AggregationFunction.MAXIMUM, 6), MetricType.CLOUD_COVER)
    for lo, mid, hi in zip(low, avg, high):
        assert lo.value <= mid.value <= hi.value
    counts = source.get_samples(_request(interval, AggregationFunction.COUNT, 6), MetricType.CLOUD_COVER)
    assert {sample.value for sample in counts} == {30.0}


def test_disconnected_source_reports_once(caplog) -> None:
    failures: list[str] = []
    source = SyntheticDataSource(connected=False, on_connection_failed=failures.append)

    with caplog.at_level(logging.WARNING, logger="safety_view.data_source"):
        for _ in range(2):
            with pytest.raises(DataSourceError):
                source.get_samples(_request(timedelta(minutes=5)), MetricType.PRESSURE)

    assert len(failures) == 1
    assert sum("connection failed" in record.getMessage() for record in caplog.records) == 1

    source.set_connected(True)
    assert source.get_samples(_request(timedelta(minutes=5)), MetricType.PRESSURE)
