"""Sample sources the charts query on every refresh."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Protocol

import numpy as np

from .aggregation import AggregationFunction, AggregationRequest
from .instants import from_timestamp
from .metrics import MetricType

logger = logging.getLogger(__name__)

RAW_SAMPLE_INTERVAL = timedelta(seconds=60)


class DataSourceError(RuntimeError):
    """Raised when samples cannot be fetched."""


@dataclass(frozen=True, slots=True)
class Sample:
    timestamp: datetime
    value: float


class DataSource(Protocol):
    def get_samples(self, request: AggregationRequest, metric: MetricType) -> List[Sample]: ...


# base, daily amplitude, noise amplitude, lower bound, upper bound
_CURVES: Dict[MetricType, tuple[float, float, float, float, float]] = {
    MetricType.TEMPERATURE: (8.0, 6.0, 0.4, -40.0, 50.0),
    MetricType.HUMIDITY: (65.0, -18.0, 3.0, 0.0, 100.0),
    MetricType.PRESSURE: (1013.0, 1.5, 0.6, 900.0, 1100.0),
    MetricType.DEW_POINT: (3.0, 2.0, 0.3, -40.0, 40.0),
    MetricType.CLOUD_COVER: (40.0, 25.0, 20.0, 0.0, 100.0),
    MetricType.SKY_TEMPERATURE: (-18.0, 8.0, 2.0, -60.0, 20.0),
    MetricType.SKY_BRIGHTNESS: (5000.0, 5000.0, 300.0, 0.0, 120000.0),
    MetricType.SKY_QUALITY: (19.5, -1.5, 0.2, 0.0, 23.0),
    MetricType.RAIN_RATE: (0.0, 0.5, 0.8, 0.0, 50.0),
    MetricType.WIND_SPEED: (3.5, 1.5, 1.2, 0.0, 40.0),
    MetricType.WIND_GUST: (6.0, 2.5, 2.0, 0.0, 60.0),
    MetricType.WIND_DIRECTION: (220.0, 40.0, 30.0, 0.0, 359.0),
    MetricType.STAR_FWHM: (2.4, 0.4, 0.3, 0.5, 8.0),
    MetricType.IS_SAFE: (0.7, 0.5, 0.4, 0.0, 1.0),
}


class SyntheticDataSource:
    """Deterministic, plausible sensor curves for demos and tests.

    Values only depend on the metric, the timestamp and ``seed``, so a frozen
    window always returns the same samples.
    """

    def __init__(
        self,
        seed: int = 7,
        connected: bool = True,
        on_connection_failed: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._seed = seed
        self._connected = connected
        self._on_connection_failed = on_connection_failed
        self._failure_reported = False

    @property
    def connected(self) -> bool:
        return self._connected

    def set_connected(self, connected: bool) -> None:
        self._connected = connected
        if connected:
            self._failure_reported = False

    def set_connection_listener(self, callback: Optional[Callable[[str], None]]) -> None:
        self._on_connection_failed = callback

    def get_samples(self, request: AggregationRequest, metric: MetricType) -> List[Sample]:
        if not self._connected:
            self._report_failure("Sensor database is not reachable")
            raise DataSourceError("data source disconnected")
        step = request.interval or RAW_SAMPLE_INTERVAL
        step_seconds = step.total_seconds()
        start, end = request.window.x_range()
        first = math.ceil(start / step_seconds) * step_seconds
        buckets = np.arange(first, end, step_seconds)
        if buckets.size == 0:
            return []
        values = self._aggregate(metric, buckets, step_seconds, request.function, request.interval is None)
        return [Sample(from_timestamp(float(ts)), float(value)) for ts, value in zip(buckets, values)]

    def _aggregate(
        self,
        metric: MetricType,
        buckets: np.ndarray,
        step_seconds: float,
        function: AggregationFunction,
        raw: bool,
    ) -> np.ndarray:
        if raw:
            return self._curve(metric, buckets)
        raw_step = RAW_SAMPLE_INTERVAL.total_seconds()
        per_bucket = max(1, int(step_seconds // raw_step))
        offsets = np.arange(per_bucket) * min(raw_step, step_seconds)
        grid = self._curve(metric, buckets[:, None] + offsets[None, :])
        if function is AggregationFunction.MINIMUM:
            return grid.min(axis=1)
        if function is AggregationFunction.MAXIMUM:
            return grid.max(axis=1)
        if function is AggregationFunction.SUM:
            return grid.sum(axis=1)
        if function is AggregationFunction.COUNT:
            return np.full(buckets.shape, float(per_bucket))
        if function is AggregationFunction.FIRST:
            return grid[:, 0]
        if function is AggregationFunction.LAST:
            return grid[:, -1]
        return grid.mean(axis=1)

    def _curve(self, metric: MetricType, ts: np.ndarray) -> np.ndarray:
        base, daily, noise, lower, upper = _CURVES[metric]
        phase = (self._seed * 0.37 + list(MetricType).index(metric) * 1.3) % (2 * math.pi)
        day = 2 * math.pi * ts / 86400.0
        wobble = np.sin(ts * 0.0131 + phase) * 0.6 + np.sin(ts * 0.00071 + 2 * phase) * 0.4
        values = base + daily * np.sin(day - math.pi / 2 + phase * 0.1) + noise * wobble
        if metric is MetricType.IS_SAFE:
            values = (values > 0.5).astype(float)
        return np.clip(values, lower, upper)

    def _report_failure(self, details: str) -> None:
        if self._failure_reported:
            return
        self._failure_reported = True
        logger.warning("Data source connection failed: %s", details)
        if self._on_connection_failed is not None:
            self._on_connection_failed(details)


__all__ = ["DataSource", "DataSourceError", "Sample", "SyntheticDataSource", "RAW_SAMPLE_INTERVAL"]
