"""Tests for dashboard chart linking."""
from __future__ import annotations

from datetime import timedelta

import pytest

pytest.importorskip("PySide6", reason="PySide6 not available", exc_type=ImportError)

from safety_view.chart_mode import ChartModeController
from safety_view.linking import DashboardLinkCoordinator
from safety_view.periods import ChartPeriod
from safety_view.presets import PeriodPresetCatalog


@pytest.fixture
def charts(qapp, scheduler, clock):
    del qapp
    catalog = PeriodPresetCatalog()
    controllers = [
        ChartModeController(catalog, None, scheduler, clock, preset_uid="default-1h") for _ in range(3)
    ]
    yield controllers
    for controller in controllers:
        controller.dispose()


def _count(signal) -> list[int]:
    calls: list[int] = []
    signal.connect(lambda *args: calls.append(1))
    return calls


def test_period_change_reaches_every_other_chart_once(charts) -> None:
    a, b, c = charts
    coordinator = DashboardLinkCoordinator(enabled=True)
    for controller in charts:
        coordinator.add(controller)
    broadcasts = [_count(controller.period_changed) for controller in charts]

    a.set_period_preset("default-24h")

    assert [controller.period for controller in charts] == [ChartPeriod.LAST_24_HOURS] * 3
    assert [len(calls) for calls in broadcasts] == [1, 0, 0]


def test_static_range_and_exit_are_propagated(charts, clock) -> None:
    a, b, c = charts
    coordinator = DashboardLinkCoordinator(enabled=True)
    for controller in charts:
        coordinator.add(controller)
    ranges = [_count(controller.static_range_changed) for controller in charts]
    restores = [_count(controller.auto_mode_restored) for controller in charts]
    start = clock.current - timedelta(hours=2)
    end = clock.current - timedelta(hours=1)

    b.set_static_range(start, end)

    assert all(controller.is_static for controller in charts)
    assert all((controller.custom_start, controller.custom_end) == (start, end) for controller in charts)
    assert [len(calls) for calls in ranges] == [0, 1, 0]

    c.exit_static_mode()

    assert not any(controller.is_static for controller in charts)
    assert [len(calls) for calls in restores] == [0, 0, 1]


def test_disabled_coordinator_does_nothing(charts) -> None:
    a, b, c = charts
    coordinator = DashboardLinkCoordinator(enabled=False)
    for controller in charts:
        coordinator.add(controller)

    a.set_period_preset("default-7d")

    assert a.period is ChartPeriod.LAST_7_DAYS
    assert b.period is ChartPeriod.LAST_HOUR
    assert c.period is ChartPeriod.LAST_HOUR


def test_removed_and_disposed_charts_are_skipped(charts) -> None:
    a, b, c = charts
    coordinator = DashboardLinkCoordinator(enabled=True)
    for controller in charts:
        coordinator.add(controller)
    coordinator.remove(b)
    c.dispose()

    a.set_period_preset("default-6h")

    assert b.period is ChartPeriod.LAST_HOUR
    assert c.period is ChartPeriod.LAST_HOUR
    assert coordinator.controllers == [a, c]

    coordinator.clear()
    assert coordinator.controllers == []


def test_preset_broadcast_returns_frozen_sibling_to_live_silently(charts, clock) -> None:
    a, b, c = charts
    coordinator = DashboardLinkCoordinator(enabled=True)
    for controller in charts:
        coordinator.add(controller)
    b.set_static_range(clock.current - timedelta(hours=2), clock.current - timedelta(hours=1), raise_events=False)
    assert [controller.is_static for controller in charts] == [False, True, False]
    periods = [_count(controller.period_changed) for controller in charts]
    restores = [_count(controller.auto_mode_restored) for controller in charts]

    a.set_period_preset("default-6h")

    assert not any(controller.is_static for controller in charts)
    assert [controller.period for controller in charts] == [ChartPeriod.LAST_6_HOURS] * 3
    assert [len(calls) for calls in periods] == [1, 0, 0]
    assert [len(calls) for calls in restores] == [0, 0, 0]


def test_countdown_expiry_on_one_chart_restores_every_linked_chart(charts, clock, scheduler) -> None:
    a, b, c = charts
    coordinator = DashboardLinkCoordinator(enabled=True)
    for controller in charts:
        coordinator.add(controller)
    a.set_static_range(clock.current - timedelta(hours=2), clock.current - timedelta(hours=1))
    assert all(controller.is_static for controller in charts)
    restores = [_count(controller.auto_mode_restored) for controller in charts]
    ranges = [_count(controller.static_range_changed) for controller in charts]

    clock.advance(a.timeout.total_seconds())
    scheduler.fire()

    assert not any(controller.is_static for controller in charts)
    assert sum(len(calls) for calls in restores) == 1
    assert [len(calls) for calls in ranges] == [0, 0, 0]
    assert scheduler.active == []
