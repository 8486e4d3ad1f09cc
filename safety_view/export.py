"""CSV export of a chart's aggregated series and the raw samples behind them."""
from __future__ import annotations

import csv
import logging
import math
import re
import unicodedata
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .aggregation import AggregationRequest
from .dashboard import MetricAggregation
from .data_source import DataSource
from .instants import to_local
from .metrics import MetricType

logger = logging.getLogger(__name__)

TIME_COLUMN = "Time"
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def _sanitize_token(raw: str | None) -> str:
    if not raw:
        return ""
    normalized = unicodedata.normalize("NFKD", raw).encode("ascii", "ignore").decode("ascii")
    return re.sub(r"[^A-Za-z0-9]+", "-", normalized).strip("-_")


def build_export_stem(title: str, started: datetime) -> str:
    """Filename stem from the window start and the chart title, e.g. ``20240501_120000_Wind``."""

    parts = [to_local(started).strftime("%Y%m%d_%H%M%S")]
    token = _sanitize_token(title)
    parts.append(token or "chart")
    return "_".join(parts)


def aggregated_column_name(series: MetricAggregation) -> str:
    if series.label.strip():
        return series.label
    return f"{series.metric.display_name} ({series.function.value})"


def _decimals(number_format: str) -> Optional[int]:
    match = re.search(r"\.(\d+)f", number_format)
    return int(match.group(1)) if match else None


def format_cell(metric: MetricType, value: Optional[float]) -> str:
    if value is None or not math.isfinite(value):
        return ""
    decimals = _decimals(metric.number_format)
    if decimals is None:
        return f"{value:g}"
    return f"{value:.{decimals}f}"


@dataclass(slots=True)
class ChartTableExport:
    aggregated_path: Path
    raw_path: Path
    aggregated_rows: int
    raw_rows: int


def _write_table(path: Path, header: List[str], rows: Dict[datetime, Dict[str, str]]) -> int:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow(header)
        for timestamp in sorted(rows):
            values = rows[timestamp]
            writer.writerow([to_local(timestamp).strftime(TIME_FORMAT)] + [values.get(name, "") for name in header[1:]])
    return len(rows)


def export_chart_table(
    directory: Path,
    stem: str,
    metrics: Sequence[MetricAggregation],
    request: AggregationRequest,
    data_source: DataSource,
    raw_metrics: Sequence[MetricType] = tuple(MetricType),
) -> ChartTableExport:
    """Write ``<stem>_aggregated.csv`` and ``<stem>_raw.csv`` into ``directory``.

    The aggregated table has one column per plotted series, merged on the bucket
    timestamps of ``request``. The raw table covers the same window without
    aggregation, one column per metric. Times are written in local time.
    ``DataSourceError`` propagates to the caller.
    """

    aggregated: Dict[datetime, Dict[str, str]] = {}
    aggregated_header = [TIME_COLUMN]
    for series in metrics:
        column = aggregated_column_name(series)
        if column in aggregated_header:
            column = f"{column} #{len(aggregated_header)}"
        aggregated_header.append(column)
        series_request = replace(request, function=series.function)
        for sample in data_source.get_samples(series_request, series.metric):
            aggregated.setdefault(sample.timestamp, {})[column] = format_cell(series.metric, sample.value)

    raw: Dict[datetime, Dict[str, str]] = {}
    raw_header = [TIME_COLUMN]
    raw_request = replace(request, interval=None)
    for metric in raw_metrics:
        raw_header.append(metric.display_name)
        for sample in data_source.get_samples(raw_request, metric):
            raw.setdefault(sample.timestamp, {})[metric.display_name] = format_cell(metric, sample.value)

    result = ChartTableExport(
        aggregated_path=directory / f"{stem}_aggregated.csv",
        raw_path=directory / f"{stem}_raw.csv",
        aggregated_rows=0,
        raw_rows=0,
    )
    result.aggregated_rows = _write_table(result.aggregated_path, aggregated_header, aggregated)
    result.raw_rows = _write_table(result.raw_path, raw_header, raw)
    logger.info("Exported %d aggregated and %d raw rows to %s", result.aggregated_rows, result.raw_rows, directory)
    return result


__all__ = [
    "ChartTableExport",
    "aggregated_column_name",
    "build_export_stem",
    "export_chart_table",
    "format_cell",
]
