"""Tests for the hover anchor lookup."""
from __future__ import annotations

import math

import numpy as np
import pytest

from safety_view.hover import HoverAnchorLocator, SeriesHoverSnapshot, format_value, nearest_index


def _snapshot(label: str, xs, ys, unit: str = "°C") -> SeriesHoverSnapshot:
    return SeriesHoverSnapshot.build(label, unit, ".1f", xs, ys)


def test_nearest_index_prefers_earlier_sample_on_ties() -> None:
    xs = np.array([0.0, 10.0, 20.0])
    assert nearest_index(xs, 14.0) == 1
    assert nearest_index(xs, 15.0) == 1
    assert nearest_index(xs, 16.0) == 2
    assert nearest_index(xs, -5.0) == 0
    assert nearest_index(xs, 99.0) == 2
    assert nearest_index(np.array([]), 1.0) == -1


def test_locate_reads_all_series_at_shared_anchor() -> None:
    locator = HoverAnchorLocator()
    temperature = _snapshot("Temperature", [0, 10, 20], [1.0, 2.0, 3.0])
    dew_point = _snapshot("Dew Point", [0, 12, 24], [0.5, 1.5, 2.5])

    anchor = locator.locate(14.0, [temperature, dew_point])

    assert anchor is not None
    assert anchor.x == 12.0
    assert [row.label for row in anchor.rows] == ["Temperature", "Dew Point"]
    assert [row.value for row in anchor.rows] == [2.0, 1.5]
    assert anchor.rows[0].x == 10.0


def test_first_series_wins_equal_distance() -> None:
    locator = HoverAnchorLocator()
    first = _snapshot("A", [10], [1.0])
    second = _snapshot("B", [20], [2.0])
    anchor = locator.locate(15.0, [first, second])
    assert anchor is not None
    assert anchor.x == 10.0


def test_nan_values_and_empty_series_are_omitted() -> None:
    locator = HoverAnchorLocator()
    anchor = locator.locate(
        10.0,
        [
            _snapshot("A", [0, 10], [1.0, 2.0]),
            _snapshot("B", [0, 10], [1.0, math.nan]),
            _snapshot("C", [], []),
        ],
    )
    assert anchor is not None
    assert [row.label for row in anchor.rows] == ["A"]


def test_no_data_returns_none() -> None:
    locator = HoverAnchorLocator()
    assert locator.locate(5.0, []) is None
    assert locator.locate(5.0, [_snapshot("A", [], [])]) is None


def test_snapshot_is_read_only_and_validated() -> None:
    snapshot = _snapshot("A", [0, 1], [2, 3])
    assert len(snapshot) == 2
    with pytest.raises(ValueError):
        snapshot.xs[0] = 5.0
    with pytest.raises(ValueError):
        _snapshot("B", [0, 1], [2])


def test_format_value_appends_unit() -> None:
    assert format_value(21.456, ".1f", "°C") == "21.5 °C"
    assert format_value(3.0, ".0f", "") == "3"
