"""Concrete time windows for chart requests."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Tuple

from .instants import Clock, local_now, to_local
from .periods import DEFAULT_CUSTOM_DURATION, ChartPeriod, duration_for

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TimeWindow:
    """A ``[start, end)`` pair in local time."""

    start: datetime
    end: datetime
    is_static: bool = False

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise ValueError(f"time window end {self.end} is not after start {self.start}")

    @property
    def span(self) -> timedelta:
        return self.end - self.start

    def x_range(self) -> Tuple[float, float]:
        """Window limits in epoch seconds, the x unit of the plots."""

        return self.start.timestamp(), self.end.timestamp()


class TimeWindowResolver:
    """Turns a chart period (or a frozen range) into a :class:`TimeWindow`."""

    def __init__(self, clock: Clock = local_now) -> None:
        self._clock = clock

    def now(self) -> datetime:
        return to_local(self._clock())

    def resolve(
        self,
        period: ChartPeriod,
        is_static: bool = False,
        custom_start: Optional[datetime] = None,
        custom_end: Optional[datetime] = None,
        custom_duration: Optional[timedelta] = None,
        now: Optional[datetime] = None,
    ) -> TimeWindow:
        current = to_local(now) if now is not None else self.now()
        if is_static and custom_end is not None:
            end = to_local(custom_end)
        else:
            end = current

        if custom_start is not None and (is_static or period is ChartPeriod.CUSTOM):
            start = to_local(custom_start)
        else:
            start = end - duration_for(period, custom_duration)

        if end <= start:
            logger.debug("Degenerate window %s..%s, using default span", start, end)
            start = end - DEFAULT_CUSTOM_DURATION
        return TimeWindow(start, end, is_static=is_static and custom_end is not None)


__all__ = ["TimeWindow", "TimeWindowResolver"]
