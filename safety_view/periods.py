"""Chart periods and period presets."""
from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Dict


class ChartPeriod(Enum):
    """Named relative windows a chart can show."""

    LAST_15_MINUTES = "last_15_minutes"
    LAST_HOUR = "last_hour"
    LAST_6_HOURS = "last_6_hours"
    LAST_24_HOURS = "last_24_hours"
    LAST_7_DAYS = "last_7_days"
    LAST_30_DAYS = "last_30_days"
    CUSTOM = "custom"


class PeriodUnit(Enum):
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"


PERIOD_DURATIONS: Dict[ChartPeriod, timedelta] = {
    ChartPeriod.LAST_15_MINUTES: timedelta(minutes=15),
    ChartPeriod.LAST_HOUR: timedelta(hours=1),
    ChartPeriod.LAST_6_HOURS: timedelta(hours=6),
    ChartPeriod.LAST_24_HOURS: timedelta(hours=24),
    ChartPeriod.LAST_7_DAYS: timedelta(days=7),
    ChartPeriod.LAST_30_DAYS: timedelta(days=30),
}

DEFAULT_CUSTOM_DURATION = timedelta(hours=24)

# Two durations closer than this are considered the same period.
_DURATION_MATCH_SECONDS = 0.5


def build_duration(value: float, unit: PeriodUnit) -> timedelta:
    """Convert a ``value``/``unit`` pair to a timedelta (zero for ``value <= 0`` or non-finite values)."""

    if not math.isfinite(value) or value <= 0:
        return timedelta(0)
    if unit is PeriodUnit.MINUTES:
        return timedelta(minutes=value)
    if unit is PeriodUnit.DAYS:
        return timedelta(days=value)
    if unit is PeriodUnit.WEEKS:
        return timedelta(days=value * 7)
    if unit is PeriodUnit.MONTHS:
        return timedelta(days=value * 30)
    return timedelta(hours=value)


def duration_for(period: ChartPeriod, custom_duration: timedelta | None = None) -> timedelta:
    """Fixed offset of a named period; ``CUSTOM`` uses ``custom_duration`` or 24 h."""

    if period is ChartPeriod.CUSTOM:
        if custom_duration is not None and custom_duration > timedelta(0):
            return custom_duration
        return DEFAULT_CUSTOM_DURATION
    return PERIOD_DURATIONS[period]


def durations_close(a: timedelta, b: timedelta) -> bool:
    return abs((a - b).total_seconds()) < _DURATION_MATCH_SECONDS


def period_for_duration(duration: timedelta) -> ChartPeriod:
    """Map a duration onto the named period it equals, else ``CUSTOM``."""

    for period, period_duration in PERIOD_DURATIONS.items():
        if durations_close(duration, period_duration):
            return period
    return ChartPeriod.CUSTOM


def _is_whole(value: float) -> bool:
    return abs(value - round(value)) < 0.0001


def format_duration(duration: timedelta) -> str:
    """Human readable label such as ``"15 Minutes"`` or ``"7 Days"``."""

    seconds = duration.total_seconds()
    days = seconds / 86400
    hours = seconds / 3600
    minutes = seconds / 60
    if days >= 1 and _is_whole(days):
        count = int(round(days))
        return "1 Day" if count == 1 else f"{count} Days"
    if hours >= 1 and _is_whole(hours):
        count = int(round(hours))
        return "1 Hour" if count == 1 else f"{count} Hours"
    if minutes >= 1 and _is_whole(minutes):
        count = int(round(minutes))
        return "1 Minute" if count == 1 else f"{count} Minutes"
    count = int(round(seconds))
    return "1 Second" if count == 1 else f"{count} Seconds"


def _new_uid() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True, slots=True)
class PeriodPreset:
    """A named, reusable window with its default aggregation interval."""

    name: str
    value: float
    unit: PeriodUnit = PeriodUnit.HOURS
    aggregation_interval: timedelta = timedelta(minutes=5)
    uid: str = field(default_factory=_new_uid)

    @property
    def duration(self) -> timedelta:
        return build_duration(self.value, self.unit)

    @property
    def period(self) -> ChartPeriod:
        return period_for_duration(self.duration)

    def to_dict(self) -> Dict[str, object]:
        return {
            "uid": self.uid,
            "name": self.name,
            "value": self.value,
            "unit": self.unit.value,
            "aggregation_seconds": int(self.aggregation_interval.total_seconds()),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "PeriodPreset":
        """Build a preset from persisted data; raises ``ValueError`` on bad fields."""

        try:
            unit = PeriodUnit(str(data.get("unit", PeriodUnit.HOURS.value)).lower())
        except ValueError:
            unit = PeriodUnit.HOURS
        value = float(data.get("value", 0))  # type: ignore[arg-type]
        aggregation = float(data.get("aggregation_seconds", 300))  # type: ignore[arg-type]
        if not (math.isfinite(value) and math.isfinite(aggregation)):
            raise ValueError(f"preset {data.get('name')!r} has a non-finite duration or aggregation")
        try:
            interval = timedelta(seconds=aggregation)
        except OverflowError as exc:
            raise ValueError(f"preset {data.get('name')!r} has an out-of-range aggregation") from exc
        uid = str(data.get("uid") or _new_uid())
        return cls(
            name=str(data.get("name", "")),
            value=value,
            unit=unit,
            aggregation_interval=interval,
            uid=uid,
        )


__all__ = [
    "ChartPeriod",
    "PeriodUnit",
    "PeriodPreset",
    "PERIOD_DURATIONS",
    "DEFAULT_CUSTOM_DURATION",
    "build_duration",
    "duration_for",
    "durations_close",
    "period_for_duration",
    "format_duration",
]
