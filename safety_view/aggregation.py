"""Aggregation bucket width selection.

The resolver never aggregates samples itself; it decides the bucket width
that is handed to the data source together with the aggregation function.
Static snapshots whose span is close to a preset duration reuse that preset's
interval so a manual zoom that lands on e.g. one hour looks exactly like the
one-hour preset.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Dict, Iterable, Optional, Sequence, Tuple

from .periods import ChartPeriod, PeriodPreset
from .presets import PeriodPresetCatalog
from .time_window import TimeWindow

logger = logging.getLogger(__name__)

ONE_SECOND = timedelta(seconds=1)


class AggregationFunction(Enum):
    AVERAGE = "average"
    MINIMUM = "minimum"
    MAXIMUM = "maximum"
    SUM = "sum"
    COUNT = "count"
    FIRST = "first"
    LAST = "last"


RECOMMENDED_INTERVALS: Dict[ChartPeriod, timedelta] = {
    ChartPeriod.LAST_15_MINUTES: timedelta(seconds=10),
    ChartPeriod.LAST_HOUR: timedelta(minutes=1),
    ChartPeriod.LAST_6_HOURS: timedelta(minutes=2),
    ChartPeriod.LAST_24_HOURS: timedelta(minutes=5),
    ChartPeriod.LAST_7_DAYS: timedelta(minutes=30),
    ChartPeriod.LAST_30_DAYS: timedelta(hours=1),
}


def recommended_interval(period: ChartPeriod) -> Optional[timedelta]:
    return RECOMMENDED_INTERVALS.get(period)


@dataclass(frozen=True, slots=True)
class AggregationRequest:
    """What a chart asks the data source for on one refresh."""

    window: TimeWindow
    interval: Optional[timedelta]
    function: AggregationFunction = AggregationFunction.AVERAGE

    def __post_init__(self) -> None:
        if self.interval is not None and self.interval <= timedelta(0):
            raise ValueError("aggregation interval must be positive")

    @property
    def is_raw(self) -> bool:
        return self.interval is None


def match_preset_interval(
    span: timedelta,
    tolerance_percent: float,
    candidates: Iterable[Tuple[timedelta, timedelta]],
) -> Optional[timedelta]:
    """Interval of the candidate whose duration deviates least from ``span``.

    ``candidates`` are ``(duration, aggregation_interval)`` pairs. A candidate
    matches when ``|span - duration| / duration <= tolerance``; equal deviations
    keep the earlier candidate.
    """

    ratio = min(max(tolerance_percent, 0.0), 100.0) / 100.0
    span_seconds = span.total_seconds()
    best: Optional[timedelta] = None
    best_deviation = math.inf
    for duration, interval in candidates:
        if duration <= timedelta(0) or interval <= timedelta(0):
            continue
        duration_seconds = duration.total_seconds()
        deviation = abs(span_seconds - duration_seconds) / duration_seconds
        # boundary is inclusive; slack absorbs float rounding
        if deviation > ratio + 1e-12:
            continue
        if deviation < best_deviation:
            best = interval
            best_deviation = deviation
    return best


def calculate_automatic_interval(
    span: timedelta,
    tolerance_percent: float,
    target_point_count: int,
    candidates: Iterable[Tuple[timedelta, timedelta]] = (),
    rounding_step_seconds: int = 1,
    apply_preset_matching: bool = True,
) -> timedelta:
    """Bucket width for ``span``: preset match first, then point-count heuristic."""

    span_seconds = span.total_seconds()
    if span_seconds <= 1:
        return ONE_SECOND

    if apply_preset_matching:
        matched = match_preset_interval(span, tolerance_percent, candidates)
        if matched is not None:
            return matched

    targets = max(2, int(target_point_count))
    step = max(1, int(rounding_step_seconds))
    seconds = max(1, math.ceil(span_seconds / targets))
    seconds = math.ceil(seconds / step) * step
    return timedelta(seconds=seconds)


def format_aggregation_label(interval: Optional[timedelta]) -> str:
    """``"Aggregation: 00:05:00"``; multi-day buckets as ``"1.00:00:00"``."""

    if interval is None:
        return "Aggregation: raw"
    total = int(round(interval.total_seconds()))
    days, remainder = divmod(total, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, seconds = divmod(remainder, 60)
    text = f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    if days:
        text = f"{days}.{text}"
    return f"Aggregation: {text}"


class AggregationIntervalResolver:
    """Picks the aggregation interval for one chart refresh."""

    def __init__(
        self,
        catalog: PeriodPresetCatalog,
        tolerance_percent: float = 10.0,
        target_point_count: int = 300,
        rounding_step_seconds: int = 15,
    ) -> None:
        self._catalog = catalog
        self.configure(tolerance_percent, target_point_count, rounding_step_seconds)

    def configure(self, tolerance_percent: float, target_point_count: int, rounding_step_seconds: int) -> None:
        self.tolerance_percent = min(max(float(tolerance_percent), 0.0), 100.0)
        self.target_point_count = max(2, int(target_point_count))
        self.rounding_step_seconds = max(1, int(rounding_step_seconds))

    def _candidates(self, presets: Sequence[PeriodPreset]) -> list[Tuple[timedelta, timedelta]]:
        return [(preset.duration, preset.aggregation_interval) for preset in presets]

    def automatic_interval(self, span: timedelta, apply_preset_matching: bool = True) -> timedelta:
        return calculate_automatic_interval(
            span,
            self.tolerance_percent,
            self.target_point_count,
            self._candidates(self._catalog.presets),
            self.rounding_step_seconds,
            apply_preset_matching,
        )

    def resolve(
        self,
        span: timedelta,
        *,
        is_static: bool,
        period: ChartPeriod = ChartPeriod.CUSTOM,
        preset_uid: str | None = None,
        static_preset_uid: str | None = None,
        override: Optional[timedelta] = None,
    ) -> timedelta:
        """Interval for a window of ``span``; always positive."""

        if override is not None and override > timedelta(0):
            return override

        if is_static:
            source = self._catalog.find(static_preset_uid)
            if source is not None and source.aggregation_interval > timedelta(0):
                return source.aggregation_interval
            interval = self.automatic_interval(span)
            logger.debug("Static span %s resolved to %s", span, interval)
            return interval

        preset = self._catalog.find(preset_uid)
        if preset is not None and preset.aggregation_interval > timedelta(0):
            return preset.aggregation_interval
        recommended = recommended_interval(period)
        if recommended is not None:
            return recommended
        return self.automatic_interval(span)


__all__ = [
    "AggregationFunction",
    "AggregationRequest",
    "AggregationIntervalResolver",
    "RECOMMENDED_INTERVALS",
    "calculate_automatic_interval",
    "format_aggregation_label",
    "match_preset_interval",
    "recommended_interval",
]
