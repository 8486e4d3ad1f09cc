"""Dashboard and chart tile configuration."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from .aggregation import AggregationFunction
from .metrics import MetricType
from .periods import ChartPeriod
from .values import parse_flag, parse_int, parse_number

DEFAULT_COLORS = ["#1E88E5", "#E53935", "#43A047", "#FB8C00", "#8E24AA", "#00ACC1"]


def _parse_datetime(raw: Any) -> Optional[datetime]:
    if isinstance(raw, datetime):
        return raw
    if not raw:
        return None
    try:
        return datetime.fromisoformat(str(raw))
    except ValueError:
        return None


def _parse_seconds(raw: Any) -> Optional[timedelta]:
    seconds = parse_number(raw, 0.0)
    if seconds <= 0:
        return None
    try:
        return timedelta(seconds=seconds)
    except OverflowError:
        return None


def _enum(enum_type, raw: Any, default):
    try:
        return enum_type(str(raw).lower())
    except ValueError:
        return default


@dataclass(slots=True)
class MetricAggregation:
    """One plotted series: a metric combined with an aggregation function."""

    metric: MetricType
    function: AggregationFunction = AggregationFunction.AVERAGE
    label: str = ""
    color: str = DEFAULT_COLORS[0]
    line_width: float = 2.0

    @property
    def display_label(self) -> str:
        return self.label or self.metric.display_name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metric": self.metric.value,
            "function": self.function.value,
            "label": self.label,
            "color": self.color,
            "line_width": self.line_width,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], index: int = 0) -> "MetricAggregation":
        return cls(
            metric=_enum(MetricType, data.get("metric"), MetricType.TEMPERATURE),
            function=_enum(AggregationFunction, data.get("function", "average"), AggregationFunction.AVERAGE),
            label=str(data.get("label", "")),
            color=str(data.get("color") or DEFAULT_COLORS[index % len(DEFAULT_COLORS)]),
            line_width=max(0.5, parse_number(data.get("line_width"), 2.0)),
        )


@dataclass(slots=True)
class ChartTileConfig:
    title: str = "Chart"
    row: int = 0
    column: int = 0
    row_span: int = 1
    column_span: int = 1
    metrics: List[MetricAggregation] = field(default_factory=list)
    period: ChartPeriod = ChartPeriod.LAST_24_HOURS
    period_preset_uid: str = ""
    custom_period_duration: Optional[timedelta] = None
    custom_start_time: Optional[datetime] = None
    custom_end_time: Optional[datetime] = None
    custom_aggregation_interval: Optional[timedelta] = None
    aggregation_enabled: bool = True
    show_hover_inspector: bool = True
    show_legend: bool = True
    show_grid: bool = True
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_dict(self) -> Dict[str, Any]:
        def seconds(value: Optional[timedelta]) -> Optional[float]:
            return value.total_seconds() if value is not None else None

        return {
            "id": self.id,
            "title": self.title,
            "row": self.row,
            "column": self.column,
            "row_span": self.row_span,
            "column_span": self.column_span,
            "metrics": [metric.to_dict() for metric in self.metrics],
            "period": self.period.value,
            "period_preset_uid": self.period_preset_uid,
            "custom_period_seconds": seconds(self.custom_period_duration),
            "custom_start_time": self.custom_start_time.isoformat() if self.custom_start_time else None,
            "custom_end_time": self.custom_end_time.isoformat() if self.custom_end_time else None,
            "custom_aggregation_seconds": seconds(self.custom_aggregation_interval),
            "aggregation_enabled": self.aggregation_enabled,
            "show_hover_inspector": self.show_hover_inspector,
            "show_legend": self.show_legend,
            "show_grid": self.show_grid,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChartTileConfig":
        metrics_raw = data.get("metrics") or []
        metrics = [
            MetricAggregation.from_dict(entry, index)
            for index, entry in enumerate(metrics_raw)
            if isinstance(entry, dict)
        ]
        config = cls(
            title=str(data.get("title", "Chart")),
            row=parse_int(data.get("row"), 0),
            column=parse_int(data.get("column"), 0),
            row_span=max(1, parse_int(data.get("row_span"), 1)),
            column_span=max(1, parse_int(data.get("column_span"), 1)),
            metrics=metrics,
            period=_enum(ChartPeriod, data.get("period", "last_24_hours"), ChartPeriod.LAST_24_HOURS),
            period_preset_uid=str(data.get("period_preset_uid") or ""),
            custom_period_duration=_parse_seconds(data.get("custom_period_seconds")),
            custom_start_time=_parse_datetime(data.get("custom_start_time")),
            custom_end_time=_parse_datetime(data.get("custom_end_time")),
            custom_aggregation_interval=_parse_seconds(data.get("custom_aggregation_seconds")),
            aggregation_enabled=parse_flag(data.get("aggregation_enabled"), True),
            show_hover_inspector=parse_flag(data.get("show_hover_inspector"), True),
            show_legend=parse_flag(data.get("show_legend"), True),
            show_grid=parse_flag(data.get("show_grid"), True),
        )
        if data.get("id"):
            config.id = str(data["id"])
        return config


@dataclass(slots=True)
class Dashboard:
    name: str = "New Dashboard"
    rows: int = 2
    columns: int = 2
    tiles: List[ChartTileConfig] = field(default_factory=list)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def can_place(self, tile: ChartTileConfig) -> bool:
        """``True`` if ``tile`` fits the grid without overlapping another tile."""

        if tile.row < 0 or tile.column < 0:
            return False
        if tile.row + tile.row_span > self.rows or tile.column + tile.column_span > self.columns:
            return False
        for existing in self.tiles:
            if existing.id == tile.id:
                continue
            rows_overlap = tile.row < existing.row + existing.row_span and tile.row + tile.row_span > existing.row
            cols_overlap = (
                tile.column < existing.column + existing.column_span
                and tile.column + tile.column_span > existing.column
            )
            if rows_overlap and cols_overlap:
                return False
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "rows": self.rows,
            "columns": self.columns,
            "tiles": [tile.to_dict() for tile in self.tiles],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Dashboard":
        dashboard = cls(
            name=str(data.get("name", "New Dashboard")),
            rows=max(1, parse_int(data.get("rows"), 2)),
            columns=max(1, parse_int(data.get("columns"), 2)),
        )
        if data.get("id"):
            dashboard.id = str(data["id"])
        for entry in data.get("tiles") or []:
            if not isinstance(entry, dict):
                continue
            tile = ChartTileConfig.from_dict(entry)
            if dashboard.can_place(tile):
                dashboard.tiles.append(tile)
        return dashboard

    @classmethod
    def create_default(cls) -> "Dashboard":
        dashboard = cls(name="Main Dashboard", rows=2, columns=2)
        dashboard.tiles = [
            ChartTileConfig(
                title="Temperature",
                row=0,
                column=0,
                metrics=[
                    MetricAggregation(MetricType.TEMPERATURE, color=DEFAULT_COLORS[1]),
                    MetricAggregation(MetricType.DEW_POINT, color=DEFAULT_COLORS[0]),
                ],
            ),
            ChartTileConfig(
                title="Sky",
                row=0,
                column=1,
                metrics=[
                    MetricAggregation(MetricType.CLOUD_COVER, color=DEFAULT_COLORS[2]),
                    MetricAggregation(MetricType.SKY_QUALITY, color=DEFAULT_COLORS[4]),
                ],
            ),
            ChartTileConfig(
                title="Wind",
                row=1,
                column=0,
                column_span=2,
                metrics=[
                    MetricAggregation(MetricType.WIND_SPEED, color=DEFAULT_COLORS[0]),
                    MetricAggregation(MetricType.WIND_GUST, AggregationFunction.MAXIMUM, color=DEFAULT_COLORS[3]),
                ],
            ),
        ]
        return dashboard


__all__ = ["Dashboard", "ChartTileConfig", "MetricAggregation", "DEFAULT_COLORS"]
