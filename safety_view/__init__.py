"""Safety Monitor chart time-window and aggregation engine."""

from .aggregation import AggregationFunction, AggregationIntervalResolver, AggregationRequest
from .config import AppConfig, ChartSettings, ConfigError
from .hover import HoverAnchor, HoverAnchorLocator, SeriesHoverSnapshot
from .periods import ChartPeriod, PeriodPreset, PeriodUnit
from .presets import PeriodPresetCatalog
from .time_window import TimeWindow, TimeWindowResolver

__all__ = [
    "AggregationFunction",
    "AggregationIntervalResolver",
    "AggregationRequest",
    "AppConfig",
    "ChartPeriod",
    "ChartSettings",
    "ConfigError",
    "HoverAnchor",
    "HoverAnchorLocator",
    "PeriodPreset",
    "PeriodPresetCatalog",
    "PeriodUnit",
    "SeriesHoverSnapshot",
    "TimeWindow",
    "TimeWindowResolver",
]
