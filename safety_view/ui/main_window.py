"""Main window hosting one dashboard at a time."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PySide6 import QtCore, QtGui, QtWidgets

from ..config import AppConfig
from ..data_source import DataSource
from ..preferences import store_chart_preferences
from ..presets import PeriodPresetCatalog
from . import colors
from .dashboard_panel import DashboardPanel
from .settings_dialog import SettingsDialog

logger = logging.getLogger(__name__)


class MainWindow(QtWidgets.QMainWindow):
    """Toolbar with dashboard selection, chart linking and settings."""

    def __init__(
        self,
        config: AppConfig,
        catalog: PeriodPresetCatalog,
        data_source: DataSource,
        preferences_path: Optional[Path] = None,
        parent: Optional[QtWidgets.QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.config = config
        self._catalog = catalog
        self._data_source = data_source
        self._preferences_path = preferences_path
        self._panel: Optional[DashboardPanel] = None
        self.setWindowTitle("Safety Monitor")
        self.resize(1400, 900)

        self._init_ui()
        if config.dashboards:
            self.show_dashboard(0)

    def _init_ui(self) -> None:
        toolbar = self.addToolBar("Dashboard")
        toolbar.setMovable(False)
        toolbar.setStyleSheet(
            "QToolBar {background: %s; spacing: 12px;} QToolButton {color: white; background: %s; border-radius: 6px; padding: 6px 12px;}"
            % (colors.PRIMARY_DARK, colors.PRIMARY)
        )

        self._dashboard_selector = QtWidgets.QComboBox()
        for dashboard in self.config.dashboards:
            self._dashboard_selector.addItem(dashboard.name, dashboard.id)
        self._dashboard_selector.activated.connect(self.show_dashboard)
        toolbar.addWidget(self._dashboard_selector)

        toolbar.addSeparator()
        self._link_checkbox = QtWidgets.QCheckBox("Link charts")
        self._link_checkbox.setToolTip("Apply period and zoom changes to every chart of the dashboard.")
        self._link_checkbox.setStyleSheet("QCheckBox { color: white; font-weight: 500; }")
        self._link_checkbox.setChecked(self.config.chart.link_chart_periods)
        self._link_checkbox.toggled.connect(self._toggle_link)
        toolbar.addWidget(self._link_checkbox)

        settings_action = QtGui.QAction("Settings...", self)
        settings_action.triggered.connect(self._open_settings_dialog)
        toolbar.addAction(settings_action)

        refresh_action = QtGui.QAction("Refresh", self)
        refresh_action.triggered.connect(self._refresh_now)
        toolbar.addAction(refresh_action)

        self.status = self.statusBar()
        self.status.setStyleSheet("color: %s" % colors.MUTED_TEXT)
        self.status.showMessage("Ready")

    @property
    def panel(self) -> Optional[DashboardPanel]:
        return self._panel

    def show_dashboard(self, index: int) -> None:
        if index < 0 or index >= len(self.config.dashboards):
            return
        self._close_panel()
        dashboard = self.config.dashboards[index]
        self._panel = DashboardPanel(dashboard, self._catalog, self._data_source, self.config.chart, parent=self)
        self.setCentralWidget(self._panel)
        self._dashboard_selector.setCurrentIndex(index)
        QtCore.QTimer.singleShot(0, self._refresh_now)
        self.status.showMessage(f"Showing {dashboard.name}", 3000)

    def _close_panel(self) -> None:
        if self._panel is None:
            return
        self._panel.dispose()
        self._panel.deleteLater()
        self._panel = None

    def _refresh_now(self) -> None:
        if self._panel is not None:
            self._panel.refresh_data()

    def _toggle_link(self, enabled: bool) -> None:
        self.config.chart.link_chart_periods = enabled
        if self._panel is not None:
            self._panel.set_link_chart_periods(enabled)
        self._persist()

    def _open_settings_dialog(self) -> None:
        dialog = SettingsDialog(self.config.chart, self._catalog.presets, self)
        if dialog.exec() != QtWidgets.QDialog.DialogCode.Accepted:
            return
        settings = dialog.result_settings()
        presets = dialog.result_presets()
        if settings is None or presets is None:
            return
        self.config.chart = settings
        self.config.presets = presets
        self._catalog.set_presets(presets)
        self._link_checkbox.setChecked(settings.link_chart_periods)
        if self._panel is not None:
            self._panel.apply_settings(settings)
        self._persist()
        self.status.showMessage("Settings updated", 3000)

    def handle_connection_failure(self, details: str) -> None:
        self.status.showMessage(f"Data source unavailable: {details}", 5000)

    def _persist(self) -> None:
        try:
            store_chart_preferences(self.config.chart, self.config.presets, self._preferences_path)
        except OSError as exc:
            logger.warning("Could not save preferences: %s", exc)
            self.status.showMessage(f"Could not save preferences: {exc}", 5000)

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # noqa: N802
        self._close_panel()
        self._persist()
        super().closeEvent(event)


__all__ = ["MainWindow"]
