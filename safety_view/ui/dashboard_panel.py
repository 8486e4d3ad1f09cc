"""Grid of chart tiles for one dashboard."""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import List, Optional

from PySide6 import QtWidgets

from ..config import ChartSettings
from ..dashboard import Dashboard
from ..data_source import DataSource
from ..instants import Clock, local_now
from ..linking import DashboardLinkCoordinator
from ..presets import PeriodPresetCatalog
from ..scheduling import QtScheduler, Scheduler, TimerHandle
from . import colors
from .chart_tile import ChartTile

logger = logging.getLogger(__name__)


class DashboardPanel(QtWidgets.QWidget):
    """Owns the dashboard's tiles, its refresh timer and its link coordinator."""

    def __init__(
        self,
        dashboard: Dashboard,
        catalog: PeriodPresetCatalog,
        data_source: DataSource,
        settings: ChartSettings,
        scheduler: Scheduler | None = None,
        clock: Clock = local_now,
        parent: Optional[QtWidgets.QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.dashboard = dashboard
        self._settings = settings
        self._scheduler: Scheduler = scheduler if scheduler is not None else QtScheduler(self)
        self._refresh_handle: TimerHandle | None = None
        self.coordinator = DashboardLinkCoordinator(enabled=settings.link_chart_periods)
        self.tiles: List[ChartTile] = []

        self.setStyleSheet("background: %s;" % colors.PANEL)
        layout = QtWidgets.QGridLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setSpacing(10)
        for column in range(dashboard.columns):
            layout.setColumnStretch(column, 1)
        for row in range(dashboard.rows):
            layout.setRowStretch(row, 1)

        for tile_config in dashboard.tiles:
            tile = ChartTile(tile_config, catalog, data_source, settings, self._scheduler, clock, self)
            layout.addWidget(tile, tile_config.row, tile_config.column, tile_config.row_span, tile_config.column_span)
            self.coordinator.add(tile.controller)
            self.tiles.append(tile)

        self._start_refresh_timer()
        logger.info("Dashboard %r created with %d charts", dashboard.name, len(self.tiles))

    def _start_refresh_timer(self) -> None:
        if self._refresh_handle is not None:
            self._refresh_handle.stop()
        interval = timedelta(seconds=self._settings.refresh_interval_seconds)
        self._refresh_handle = self._scheduler.every(interval, self.refresh_data)

    def refresh_data(self) -> None:
        for tile in self.tiles:
            tile.refresh()

    def set_link_chart_periods(self, enabled: bool) -> None:
        self.coordinator.enabled = enabled

    def apply_settings(self, settings: ChartSettings) -> None:
        self._settings = settings
        self.coordinator.enabled = settings.link_chart_periods
        for tile in self.tiles:
            tile.controller.apply_settings(settings)
        self._start_refresh_timer()

    def save_state(self) -> None:
        for tile in self.tiles:
            tile.save_state()

    def dispose(self) -> None:
        """Stop timers and detach all charts. Safe to call twice."""

        if self._refresh_handle is not None:
            self._refresh_handle.stop()
            self._refresh_handle = None
        self.save_state()
        self.coordinator.clear()
        for tile in self.tiles:
            tile.dispose()


__all__ = ["DashboardPanel"]
