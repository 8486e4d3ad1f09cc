"""Tests for chart periods and the preset catalog."""
from __future__ import annotations

from datetime import timedelta

import pytest

from safety_view.periods import (
    ChartPeriod,
    PeriodPreset,
    PeriodUnit,
    build_duration,
    duration_for,
    format_duration,
    period_for_duration,
)
from safety_view.presets import (
    FALLBACK_PRESET,
    PeriodPresetCatalog,
    default_presets,
    fallback_preset,
    find_matching_index,
    normalize_presets,
)


def test_duration_for_named_and_custom_periods() -> None:
    assert duration_for(ChartPeriod.LAST_15_MINUTES) == timedelta(minutes=15)
    assert duration_for(ChartPeriod.LAST_30_DAYS) == timedelta(days=30)
    assert duration_for(ChartPeriod.CUSTOM, timedelta(hours=3)) == timedelta(hours=3)
    assert duration_for(ChartPeriod.CUSTOM) == timedelta(hours=24)
    assert duration_for(ChartPeriod.CUSTOM, timedelta(0)) == timedelta(hours=24)


def test_build_duration_units() -> None:
    assert build_duration(2, PeriodUnit.WEEKS) == timedelta(days=14)
    assert build_duration(1, PeriodUnit.MONTHS) == timedelta(days=30)
    assert build_duration(0, PeriodUnit.HOURS) == timedelta(0)


def test_period_for_duration_uses_half_second_tolerance() -> None:
    assert period_for_duration(timedelta(hours=1, milliseconds=400)) is ChartPeriod.LAST_HOUR
    assert period_for_duration(timedelta(hours=1, seconds=1)) is ChartPeriod.CUSTOM


def test_format_duration_labels() -> None:
    assert format_duration(timedelta(minutes=15)) == "15 Minutes"
    assert format_duration(timedelta(hours=1)) == "1 Hour"
    assert format_duration(timedelta(days=7)) == "7 Days"
    assert format_duration(timedelta(minutes=90)) == "90 Minutes"


def test_preset_dict_roundtrip_keeps_uid() -> None:
    preset = PeriodPreset("Night", 10, PeriodUnit.HOURS, timedelta(minutes=2), uid="night")
    restored = PeriodPreset.from_dict(preset.to_dict())
    assert restored == preset


def test_normalize_drops_invalid_entries() -> None:
    valid = PeriodPreset("  2 Hours ", 2, PeriodUnit.HOURS, timedelta(minutes=1), uid="a")
    presets = normalize_presets(
        [
            valid,
            None,
            PeriodPreset("", 1, uid="b"),
            PeriodPreset("Zero", 0, uid="c"),
            PeriodPreset("No aggregation", 1, aggregation_interval=timedelta(0), uid="d"),
            PeriodPreset("Duplicate", 3, uid="a"),
        ]
    )
    assert [preset.uid for preset in presets] == ["a"]
    assert presets[0].name == "2 Hours"


def test_normalize_empty_list_returns_defaults() -> None:
    assert normalize_presets([]) == default_presets()
    assert normalize_presets(None) == default_presets()


def test_find_matching_index() -> None:
    presets = default_presets()
    assert find_matching_index("default-6h", presets) == 2
    assert find_matching_index("missing", presets) == -1
    assert find_matching_index("", presets) == -1
    assert find_matching_index(None, presets) == -1


def test_fallback_preset_for_empty_candidates() -> None:
    assert fallback_preset([]) is FALLBACK_PRESET
    assert FALLBACK_PRESET.duration == timedelta(hours=24)
    presets = default_presets()
    assert fallback_preset(presets) == presets[0]


def test_catalog_notifies_listeners_on_replacement() -> None:
    catalog = PeriodPresetCatalog()
    seen: list[int] = []

    def listener(presets) -> None:
        seen.append(len(presets))

    catalog.subscribe(listener)
    catalog.set_presets(default_presets()[:2])
    assert seen == [2]

    catalog.unsubscribe(listener)
    catalog.set_presets(default_presets())
    assert seen == [2]


def test_catalog_resolve_falls_back_to_first_preset() -> None:
    catalog = PeriodPresetCatalog()
    assert catalog.resolve("default-7d").duration == timedelta(days=7)
    assert catalog.resolve("gone").uid == "default-15m"


def test_non_finite_preset_values_are_rejected() -> None:
    with pytest.raises(ValueError):
        PeriodPreset.from_dict({"name": "Broken", "value": float("nan")})
    with pytest.raises(ValueError):
        PeriodPreset.from_dict({"name": "Endless", "value": 1, "aggregation_seconds": float("inf")})
    assert build_duration(float("inf"), PeriodUnit.HOURS) == timedelta(0)
    assert build_duration(float("nan"), PeriodUnit.DAYS) == timedelta(0)


def test_normalize_drops_non_finite_presets() -> None:
    presets = [
        PeriodPreset("Broken", float("nan"), uid="nan"),
        PeriodPreset("Endless", float("inf"), uid="inf"),
    ]
    assert normalize_presets(presets) == default_presets()
