"""Nearest shared sample lookup for the hover inspector."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

import numpy as np

from .instants import from_timestamp


@dataclass(frozen=True, slots=True)
class SeriesHoverSnapshot:
    """Plotted samples of one series, rebuilt on every data refresh."""

    label: str
    unit: str
    number_format: str
    xs: np.ndarray = field(repr=False)
    ys: np.ndarray = field(repr=False)

    @classmethod
    def build(
        cls,
        label: str,
        unit: str,
        number_format: str,
        xs: Sequence[float],
        ys: Sequence[float],
    ) -> "SeriesHoverSnapshot":
        x_array = np.asarray(xs, dtype=float)
        y_array = np.asarray(ys, dtype=float)
        if x_array.shape != y_array.shape:
            raise ValueError(f"{label}: {x_array.size} timestamps for {y_array.size} values")
        x_array.setflags(write=False)
        y_array.setflags(write=False)
        return cls(label, unit, number_format, x_array, y_array)

    def __len__(self) -> int:
        return int(self.xs.size)


@dataclass(frozen=True, slots=True)
class HoverRow:
    label: str
    unit: str
    x: float
    value: float
    text: str


@dataclass(frozen=True, slots=True)
class HoverAnchor:
    x: float
    rows: List[HoverRow]

    @property
    def timestamp(self) -> datetime:
        return from_timestamp(self.x)


def nearest_index(xs: np.ndarray, x: float) -> int:
    """Index of the sample closest to ``x``; ties pick the earlier one. ``-1`` if empty."""

    size = xs.size
    if size == 0:
        return -1
    insertion = int(np.searchsorted(xs, x, side="left"))
    if insertion <= 0:
        return 0
    if insertion >= size:
        return size - 1
    before = insertion - 1
    if abs(x - xs[before]) <= abs(xs[insertion] - x):
        return before
    return insertion


def format_value(value: float, number_format: str, unit: str) -> str:
    try:
        text = format(value, number_format)
    except ValueError:
        text = f"{value:g}"
    return f"{text} {unit}".rstrip()


class HoverAnchorLocator:
    """Finds one timestamp at which all plotted series are read out together."""

    def locate(self, x: float, snapshots: Sequence[SeriesHoverSnapshot]) -> Optional[HoverAnchor]:
        anchor_x: Optional[float] = None
        best_delta = math.inf
        for snapshot in snapshots:
            index = nearest_index(snapshot.xs, x)
            if index < 0:
                continue
            candidate = float(snapshot.xs[index])
            delta = abs(candidate - x)
            if delta < best_delta:
                best_delta = delta
                anchor_x = candidate
        if anchor_x is None:
            return None
        return HoverAnchor(anchor_x, self.sample_at(anchor_x, snapshots))

    def sample_at(self, anchor_x: float, snapshots: Sequence[SeriesHoverSnapshot]) -> List[HoverRow]:
        rows: List[HoverRow] = []
        for snapshot in snapshots:
            index = nearest_index(snapshot.xs, anchor_x)
            if index < 0:
                continue
            value = float(snapshot.ys[index])
            if math.isnan(value):
                continue
            rows.append(
                HoverRow(
                    label=snapshot.label,
                    unit=snapshot.unit,
                    x=float(snapshot.xs[index]),
                    value=value,
                    text=format_value(value, snapshot.number_format, snapshot.unit),
                )
            )
        return rows


__all__ = ["SeriesHoverSnapshot", "HoverAnchor", "HoverRow", "HoverAnchorLocator", "nearest_index", "format_value"]
