"""Tests for dashboard layout and tile configuration."""
from __future__ import annotations

from datetime import datetime, timedelta

from safety_view.aggregation import AggregationFunction
from safety_view.dashboard import ChartTileConfig, Dashboard, MetricAggregation
from safety_view.metrics import MetricType
from safety_view.periods import ChartPeriod


def test_can_place_rejects_overlap_and_out_of_bounds() -> None:
    dashboard = Dashboard(rows=2, columns=2)
    dashboard.tiles.append(ChartTileConfig(row=0, column=0, column_span=2))

    assert not dashboard.can_place(ChartTileConfig(row=0, column=1))
    assert not dashboard.can_place(ChartTileConfig(row=1, column=1, column_span=2))
    assert not dashboard.can_place(ChartTileConfig(row=-1, column=0))
    assert dashboard.can_place(ChartTileConfig(row=1, column=0, column_span=2))


def test_default_dashboard_fills_grid() -> None:
    dashboard = Dashboard.create_default()
    assert [tile.title for tile in dashboard.tiles] == ["Temperature", "Sky", "Wind"]
    wind = dashboard.tiles[2]
    assert wind.metrics[1].function is AggregationFunction.MAXIMUM


def test_tile_config_persists_frozen_range() -> None:
    start = datetime(2024, 5, 1, 10, 0).astimezone()
    tile = ChartTileConfig(
        title="Sky",
        metrics=[MetricAggregation(MetricType.SKY_QUALITY, label="SQM")],
        period=ChartPeriod.CUSTOM,
        period_preset_uid="night",
        custom_period_duration=timedelta(hours=10),
        custom_start_time=start,
        custom_end_time=start + timedelta(hours=1),
        custom_aggregation_interval=timedelta(seconds=30),
    )

    restored = ChartTileConfig.from_dict(tile.to_dict())

    assert restored == tile
    assert restored.metrics[0].display_label == "SQM"


def test_tile_config_tolerates_bad_values() -> None:
    tile = ChartTileConfig.from_dict(
        {
            "period": "fortnight",
            "custom_period_seconds": -3,
            "custom_start_time": "yesterday",
            "metrics": [{"metric": "unknown", "function": "median"}, "bad"],
        }
    )
    assert tile.period is ChartPeriod.LAST_24_HOURS
    assert tile.custom_period_duration is None
    assert tile.custom_start_time is None
    assert tile.metrics[0].metric is MetricType.TEMPERATURE
    assert tile.metrics[0].function is AggregationFunction.AVERAGE


def test_metric_metadata() -> None:
    assert MetricType.WIND_SPEED.unit == "m/s"
    assert MetricType.DEW_POINT.display_name == "Dew Point"
    assert MetricAggregation(MetricType.HUMIDITY).display_label == "Humidity"


def test_tile_config_parses_text_flags_and_numbers() -> None:
    tile = ChartTileConfig.from_dict(
        {
            "row": "top",
            "column": "1",
            "row_span": "0",
            "metrics": [{"metric": "humidity", "line_width": float("nan")}],
            "show_legend": "false",
            "show_grid": "off",
            "aggregation_enabled": "yes",
            "custom_period_seconds": float("inf"),
        }
    )
    assert (tile.row, tile.column, tile.row_span) == (0, 1, 1)
    assert tile.metrics[0].line_width == 2.0
    assert tile.show_legend is False
    assert tile.show_grid is False
    assert tile.aggregation_enabled is True
    assert tile.custom_period_duration is None
