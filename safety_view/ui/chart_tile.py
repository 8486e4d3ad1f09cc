"""pyqtgraph chart tile driven by a :class:`ChartModeController`."""
from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import pyqtgraph as pg
from PySide6 import QtCore, QtGui, QtWidgets

from ..aggregation import AggregationRequest, format_aggregation_label
from ..chart_mode import ChartMode, ChartModeController
from ..config import ChartSettings
from ..dashboard import ChartTileConfig
from ..data_source import DataSource, DataSourceError
from ..export import ChartTableExport, build_export_stem, export_chart_table
from ..hover import HoverAnchor, HoverAnchorLocator, SeriesHoverSnapshot
from ..instants import Clock, local_now
from ..periods import format_duration
from ..presets import PeriodPresetCatalog
from ..scheduling import Scheduler
from . import colors

logger = logging.getLogger(__name__)


class ChartTile(QtWidgets.QFrame):
    """One dashboard chart: period selector, plot, mode badge and hover readout."""

    def __init__(
        self,
        config: ChartTileConfig,
        catalog: PeriodPresetCatalog,
        data_source: DataSource,
        settings: ChartSettings,
        scheduler: Scheduler | None = None,
        clock: Clock = local_now,
        parent: QtWidgets.QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.config = config
        self._data_source = data_source
        self._locator = HoverAnchorLocator()
        self._snapshots: List[SeriesHoverSnapshot] = []
        self._curves: Dict[int, pg.PlotDataItem] = {}
        self._disposed = False
        self._suppress_period_change = False
        self._last_request: Optional[AggregationRequest] = None

        self.controller = ChartModeController(
            catalog,
            settings,
            scheduler,
            clock,
            preset_uid=config.period_preset_uid or None,
            period=config.period,
            custom_duration=config.custom_period_duration,
            custom_start=config.custom_start_time,
            custom_end=config.custom_end_time,
            custom_aggregation_interval=config.custom_aggregation_interval,
            aggregation_enabled=config.aggregation_enabled,
            parent=self,
        )

        self.setFrameShape(QtWidgets.QFrame.Shape.StyledPanel)
        self.setStyleSheet(
            "QFrame {background: %s; border-radius: 10px; border: 1px solid %s;}" % (colors.BACKGROUND, colors.GRID)
        )
        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(12, 10, 12, 12)
        layout.setSpacing(6)
        layout.addLayout(self._build_header())

        self.plot = pg.PlotWidget(background=colors.BACKGROUND, axisItems={"bottom": pg.DateAxisItem(orientation="bottom")})
        item = self.plot.getPlotItem()
        item.showGrid(x=config.show_grid, y=config.show_grid, alpha=0.25)
        item.getAxis("left").setPen(pg.mkPen(colors.MUTED_TEXT))
        item.getAxis("bottom").setPen(pg.mkPen(colors.MUTED_TEXT))
        item.getAxis("left").setTextPen(pg.mkPen(colors.MUTED_TEXT))
        item.getAxis("bottom").setTextPen(pg.mkPen(colors.MUTED_TEXT))
        item.setMenuEnabled(False)
        if config.show_legend and len(config.metrics) > 1:
            item.addLegend(offset=(-10, 10))
        units = sorted({metric.metric.unit for metric in config.metrics if metric.metric.unit})
        if len(units) == 1:
            self.plot.setLabel("left", units[0])
        layout.addWidget(self.plot, stretch=1)

        self._hover_line = pg.InfiniteLine(
            angle=90, movable=False, pen=pg.mkPen(colors.HOVER_LINE, width=1.5, style=QtCore.Qt.PenStyle.DashLine)
        )
        self._hover_line.hide()
        self.plot.addItem(self._hover_line, ignoreBounds=True)

        self.hover_label = QtWidgets.QLabel("")
        self.hover_label.setStyleSheet("QLabel {color: %s; border: none;}" % colors.MUTED_TEXT)
        self.hover_label.setVisible(config.show_hover_inspector)
        layout.addWidget(self.hover_label)

        view_box = item.getViewBox()
        view_box.sigRangeChangedManually.connect(self._on_manual_range_change)
        self.plot.scene().sigMouseClicked.connect(self._on_plot_clicked)
        self._hover_proxy = pg.SignalProxy(self.plot.scene().sigMouseMoved, rateLimit=60, slot=self._on_mouse_moved)

        self.controller.refresh_requested.connect(self.refresh)
        self.controller.mode_changed.connect(self._update_mode_badge)
        self.controller.countdown_changed.connect(self._update_countdown)
        self.controller.presets_reloaded.connect(self._load_presets)

        self._load_presets()
        self._update_mode_badge(self.controller.mode)

    # ----------------------------------------------------------------- layout
    def _build_header(self) -> QtWidgets.QHBoxLayout:
        header = QtWidgets.QHBoxLayout()
        header.setSpacing(8)

        self.title_label = QtWidgets.QLabel(self.config.title)
        self.title_label.setStyleSheet(
            "QLabel {color: %s; font-weight: 600; font-size: 14px; border: none;}" % colors.TEXT
        )
        header.addWidget(self.title_label, 1)

        self.aggregation_label = QtWidgets.QLabel("")
        self.aggregation_label.setStyleSheet("QLabel {color: %s; border: none;}" % colors.MUTED_TEXT)
        header.addWidget(self.aggregation_label)

        self.mode_label = QtWidgets.QLabel("")
        header.addWidget(self.mode_label)

        self.live_button = QtWidgets.QToolButton()
        self.live_button.setText("Live")
        self.live_button.setToolTip("Return to the live window")
        self.live_button.clicked.connect(lambda: self.controller.exit_static_mode())
        header.addWidget(self.live_button)

        self.freeze_button = QtWidgets.QToolButton()
        self.freeze_button.setText("Freeze")
        self.freeze_button.setToolTip("Keep the current window")
        self.freeze_button.clicked.connect(lambda: self.controller.freeze())
        header.addWidget(self.freeze_button)

        self.export_button = QtWidgets.QToolButton()
        self.export_button.setText("Export")
        self.export_button.setToolTip("Save the chart data and the raw samples as CSV")
        self.export_button.clicked.connect(self._choose_export_target)
        header.addWidget(self.export_button)

        self.period_selector = QtWidgets.QComboBox()
        self.period_selector.setMinimumWidth(120)
        self.period_selector.activated.connect(self._on_period_selected)
        header.addWidget(self.period_selector)
        return header

    def _load_presets(self) -> None:
        self._suppress_period_change = True
        try:
            self.period_selector.clear()
            for preset in self.controller.presets:
                self.period_selector.addItem(preset.name, preset.uid)
            index = self.controller.selected_index()
            if index >= 0:
                self.period_selector.setCurrentIndex(index)
            elif self.controller.custom_duration is not None:
                label = f"Custom ({format_duration(self.controller.custom_duration)})"
                self.period_selector.addItem(label, None)
                self.period_selector.setCurrentIndex(self.period_selector.count() - 1)
        finally:
            self._suppress_period_change = False

    # ---------------------------------------------------------------- refresh
    def refresh(self) -> None:
        if self._disposed:
            return
        # every series and the axis share this window and interval
        base = self.controller.aggregation_request(now=self.controller.now())
        window = base.window
        self._last_request = base
        self.aggregation_label.setText(format_aggregation_label(base.interval))
        snapshots: List[SeriesHoverSnapshot] = []
        legend = self.plot.getPlotItem().legend

        for index, series in enumerate(self.config.metrics):
            request = replace(base, function=series.function)
            try:
                samples = self._data_source.get_samples(request, series.metric)
            except DataSourceError:
                logger.warning("Could not load %s for %s", series.metric.value, self.config.title, exc_info=True)
                samples = []
            if self._disposed:
                return
            xs = np.fromiter((sample.timestamp.timestamp() for sample in samples), dtype=float, count=len(samples))
            ys = np.fromiter((sample.value for sample in samples), dtype=float, count=len(samples))
            valid = ~np.isnan(ys)
            curve = self._curves.get(index)
            pen = pg.mkPen(QtGui.QColor(series.color), width=series.line_width)
            if curve is None:
                curve = self.plot.plot(name=series.display_label, pen=pen)
                self._curves[index] = curve
            else:
                curve.setPen(pen)
            curve.setData(xs[valid], ys[valid])
            snapshots.append(
                SeriesHoverSnapshot.build(
                    series.display_label, series.metric.unit, series.metric.number_format, xs, ys
                )
            )

        if legend is not None:
            legend.setVisible(self.config.show_legend)
        self._snapshots = snapshots
        self._apply_window(*window.x_range())
        self.live_button.setEnabled(self.controller.is_static)

    def _apply_window(self, x_min: float, x_max: float) -> None:
        view_box = self.plot.getPlotItem().getViewBox()
        view_box.setXRange(x_min, x_max, padding=0)
        applied_min, applied_max = view_box.viewRange()[0]
        self.controller.remember_axis_limits(applied_min, applied_max)

    # ------------------------------------------------------------ interaction
    def _on_period_selected(self, index: int) -> None:
        if self._suppress_period_change or index < 0:
            return
        uid = self.period_selector.itemData(index)
        if uid:
            self.controller.set_period_preset(uid)

    def _on_manual_range_change(self, *_args) -> None:
        x_min, x_max = self.plot.getPlotItem().getViewBox().viewRange()[0]
        self.controller.notify_axis_limits(x_min, x_max)

    def _on_plot_clicked(self, event) -> None:
        if not event.double():
            return
        view_box = self.plot.getPlotItem().getViewBox()
        view_box.autoRange(padding=0)
        x_min, x_max = view_box.viewRange()[0]
        self.controller.notify_axis_limits(x_min, x_max)

    def _on_mouse_moved(self, args) -> None:
        if not self.config.show_hover_inspector:
            return
        position = args[0]
        item = self.plot.getPlotItem()
        if not item.sceneBoundingRect().contains(position):
            self._hover_line.hide()
            self.hover_label.setText("")
            return
        point = item.getViewBox().mapSceneToView(position)
        self.show_hover(self._locator.locate(point.x(), self._snapshots))

    def show_hover(self, anchor: Optional[HoverAnchor]) -> None:
        if anchor is None or not anchor.rows:
            self._hover_line.hide()
            self.hover_label.setText("")
            return
        self._hover_line.setPos(anchor.x)
        self._hover_line.show()
        values = "   ".join(f"{row.label}: {row.text}" for row in anchor.rows)
        self.hover_label.setText(f"{anchor.timestamp:%Y-%m-%d %H:%M:%S}   {values}")

    @property
    def hover_snapshots(self) -> List[SeriesHoverSnapshot]:
        return list(self._snapshots)

    # ----------------------------------------------------------------- export
    @property
    def last_request(self) -> Optional[AggregationRequest]:
        return self._last_request

    def export_table(self, directory: Path, stem: Optional[str] = None) -> ChartTableExport:
        """Export the window of the last refresh; raises ``DataSourceError`` or ``OSError``."""

        request = self._last_request or self.controller.aggregation_request(now=self.controller.now())
        stem = stem or build_export_stem(self.config.title, request.window.start)
        return export_chart_table(directory, stem, self.config.metrics, request, self._data_source)

    def _choose_export_target(self) -> None:
        request = self._last_request or self.controller.aggregation_request(now=self.controller.now())
        suggested = Path.cwd() / build_export_stem(self.config.title, request.window.start)
        selected, _ = QtWidgets.QFileDialog.getSaveFileName(
            self,
            "Export chart data",
            str(suggested),
            "CSV files (*.csv)",
        )
        if not selected:
            return
        target = Path(selected)
        try:
            result = self.export_table(target.parent, target.with_suffix("").name)
        except (DataSourceError, OSError) as exc:
            logger.warning("Export of %s failed", self.config.title, exc_info=True)
            QtWidgets.QMessageBox.warning(self, "Export failed", str(exc))
            return
        QtWidgets.QMessageBox.information(
            self,
            "Export finished",
            f"Saved {result.aggregated_path.name} and {result.raw_path.name}.",
        )

    # ------------------------------------------------------------------ badge
    def _update_mode_badge(self, mode: ChartMode) -> None:
        if mode is ChartMode.STATIC:
            self._update_countdown(self.controller.countdown_remaining().total_seconds())
            self.mode_label.setStyleSheet(
                "QLabel {color: %s; background: %s; border-radius: 6px; padding: 2px 6px; border: none;}"
                % (colors.FROZEN, colors.FROZEN_LIGHT)
            )
        else:
            self.mode_label.setText("Live")
            self.mode_label.setStyleSheet(
                "QLabel {color: white; background: %s; border-radius: 6px; padding: 2px 6px; border: none;}"
                % colors.PRIMARY
            )
        self.live_button.setEnabled(mode is ChartMode.STATIC)
        self._load_presets()

    def _update_countdown(self, seconds: float) -> None:
        if not self.controller.is_static:
            return
        remaining = int(round(seconds))
        self.mode_label.setText(f"Frozen {remaining // 60:d}:{remaining % 60:02d}")

    # -------------------------------------------------------------- lifecycle
    def save_state(self) -> None:
        self.controller.apply_to(self.config)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._hover_proxy.disconnect()
        self.controller.dispose()


__all__ = ["ChartTile"]
