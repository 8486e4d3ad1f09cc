"""Tests for time window resolution and instant normalization."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from safety_view.instants import Instant, InstantKind, from_timestamp, instant_kind, to_local, to_utc
from safety_view.periods import ChartPeriod
from safety_view.time_window import TimeWindow, TimeWindowResolver


def test_auto_window_ends_now(clock) -> None:
    resolver = TimeWindowResolver(clock)
    window = resolver.resolve(ChartPeriod.LAST_HOUR)
    assert window.end == clock.current
    assert window.span == timedelta(hours=1)
    assert not window.is_static


def test_custom_period_uses_duration_or_default(clock) -> None:
    resolver = TimeWindowResolver(clock)
    assert resolver.resolve(ChartPeriod.CUSTOM, custom_duration=timedelta(hours=3)).span == timedelta(hours=3)
    assert resolver.resolve(ChartPeriod.CUSTOM).span == timedelta(hours=24)


def test_static_window_ignores_now(clock) -> None:
    resolver = TimeWindowResolver(clock)
    start = clock.current - timedelta(hours=5)
    end = clock.current - timedelta(hours=4)
    window = resolver.resolve(ChartPeriod.LAST_HOUR, True, start, end)
    clock.advance(3600)
    assert resolver.resolve(ChartPeriod.LAST_HOUR, True, start, end) == window
    assert window.is_static
    assert (window.start, window.end) == (start, end)


def test_custom_start_in_auto_mode_keeps_end_at_now(clock) -> None:
    resolver = TimeWindowResolver(clock)
    start = clock.current - timedelta(hours=2)
    window = resolver.resolve(ChartPeriod.CUSTOM, custom_start=start)
    assert window.start == start
    assert window.end == clock.current


def test_degenerate_range_falls_back_to_24_hours(clock) -> None:
    resolver = TimeWindowResolver(clock)
    end = clock.current - timedelta(hours=1)
    window = resolver.resolve(ChartPeriod.CUSTOM, True, end + timedelta(minutes=5), end)
    assert window.end == end
    assert window.span == timedelta(hours=24)


def test_time_window_rejects_inverted_bounds() -> None:
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    with pytest.raises(ValueError):
        TimeWindow(now, now)


def test_utc_and_local_describe_the_same_instant() -> None:
    utc = datetime(2024, 3, 1, 6, 30, tzinfo=timezone.utc)
    local = to_local(utc)
    assert local == utc
    assert local.utcoffset() == datetime(2024, 3, 1, 6, 30).astimezone().utcoffset()
    assert to_utc(local) == utc


def test_naive_values_are_treated_as_local() -> None:
    naive = datetime(2024, 3, 1, 6, 30)
    assert instant_kind(naive) is InstantKind.UNSPECIFIED
    assert to_local(naive).replace(tzinfo=None) == naive
    assert Instant.of(naive).timestamp() == naive.timestamp()


def test_instant_kind_detects_utc() -> None:
    assert instant_kind(datetime(2024, 3, 1, tzinfo=timezone.utc)) is InstantKind.UTC
    assert instant_kind(datetime(2024, 3, 1, tzinfo=timezone(timedelta(hours=2)))) is InstantKind.LOCAL


def test_from_timestamp_round_trips_chart_units() -> None:
    value = datetime(2024, 3, 1, 6, 30, tzinfo=timezone.utc)
    assert from_timestamp(value.timestamp()) == value
