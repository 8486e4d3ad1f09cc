"""Configuration models for the Safety Monitor viewer."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

from .dashboard import Dashboard
from .periods import PeriodPreset
from .presets import default_presets, normalize_presets
from .values import parse_flag, parse_int, parse_number

MIN_STATIC_TIMEOUT_SECONDS = 10


class ConfigError(ValueError):
    """Raised when a configuration file cannot be used."""


def _clamp(value: float, lower: float, upper: float | None = None) -> float:
    value = max(lower, value)
    if upper is not None:
        value = min(upper, value)
    return value


@dataclass(slots=True)
class ChartSettings:
    """User tunables of the chart engine. Values are clamped to valid ranges."""

    static_timeout_seconds: int = 60
    preset_match_tolerance_percent: float = 10.0
    target_point_count: int = 300
    aggregation_rounding_seconds: int = 15
    refresh_interval_seconds: int = 5
    link_chart_periods: bool = False

    def __post_init__(self) -> None:
        self.static_timeout_seconds = int(_clamp(parse_number(self.static_timeout_seconds, 60), MIN_STATIC_TIMEOUT_SECONDS))
        self.preset_match_tolerance_percent = _clamp(parse_number(self.preset_match_tolerance_percent, 10.0), 0.0, 100.0)
        self.target_point_count = int(_clamp(parse_number(self.target_point_count, 300), 2))
        self.aggregation_rounding_seconds = int(_clamp(parse_number(self.aggregation_rounding_seconds, 15), 1))
        self.refresh_interval_seconds = int(_clamp(parse_number(self.refresh_interval_seconds, 5), 1))
        self.link_chart_periods = parse_flag(self.link_chart_periods, False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "static_timeout_seconds": self.static_timeout_seconds,
            "preset_match_tolerance_percent": self.preset_match_tolerance_percent,
            "target_point_count": self.target_point_count,
            "aggregation_rounding_seconds": self.aggregation_rounding_seconds,
            "refresh_interval_seconds": self.refresh_interval_seconds,
            "link_chart_periods": self.link_chart_periods,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "ChartSettings":
        data = data if isinstance(data, dict) else {}
        defaults = cls()
        return cls(
            static_timeout_seconds=data.get("static_timeout_seconds", defaults.static_timeout_seconds),
            preset_match_tolerance_percent=data.get(
                "preset_match_tolerance_percent", defaults.preset_match_tolerance_percent
            ),
            target_point_count=data.get("target_point_count", defaults.target_point_count),
            aggregation_rounding_seconds=data.get(
                "aggregation_rounding_seconds", defaults.aggregation_rounding_seconds
            ),
            refresh_interval_seconds=data.get("refresh_interval_seconds", defaults.refresh_interval_seconds),
            link_chart_periods=data.get("link_chart_periods", defaults.link_chart_periods),
        )


def presets_from_list(raw: Any) -> List[PeriodPreset]:
    presets: List[PeriodPreset] = []
    if isinstance(raw, list):
        for entry in raw:
            if not isinstance(entry, dict):
                continue
            try:
                presets.append(PeriodPreset.from_dict(entry))
            except (TypeError, ValueError, OverflowError):
                continue
    return normalize_presets(presets)


@dataclass(slots=True)
class AppConfig:
    """Main application configuration."""

    chart: ChartSettings = field(default_factory=ChartSettings)
    presets: List[PeriodPreset] = field(default_factory=default_presets)
    dashboards: List[Dashboard] = field(default_factory=lambda: [Dashboard.create_default()])
    seed: int = 7

    @classmethod
    def from_yaml(cls, file: Path) -> "AppConfig":
        try:
            data = yaml.safe_load(file.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Cannot read configuration {file}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration {file} must be a mapping")
        dashboards_raw = data.get("dashboards")
        dashboards: List[Dashboard] = []
        if isinstance(dashboards_raw, list):
            for index, entry in enumerate(dashboards_raw):
                if not isinstance(entry, dict):
                    continue
                try:
                    dashboards.append(Dashboard.from_dict(entry))
                except (TypeError, ValueError) as exc:
                    raise ConfigError(f"Dashboard {index + 1} in {file} is invalid: {exc}") from exc
        if not dashboards:
            dashboards = [Dashboard.create_default()]
        return cls(
            chart=ChartSettings.from_dict(data.get("chart")),
            presets=presets_from_list(data.get("presets")),
            dashboards=dashboards,
            seed=parse_int(data.get("seed"), 7),
        )


__all__ = ["AppConfig", "ChartSettings", "ConfigError", "MIN_STATIC_TIMEOUT_SECONDS", "presets_from_list"]
