"""Qt dialog for chart engine settings and period presets."""
from __future__ import annotations

from dataclasses import replace
from datetime import timedelta
from typing import List, Optional, Sequence

from PySide6 import QtCore, QtWidgets

from ..config import MIN_STATIC_TIMEOUT_SECONDS, ChartSettings
from ..periods import PeriodPreset, PeriodUnit
from ..presets import normalize_presets

_PRESET_COLUMNS = ["Name", "Value", "Unit", "Aggregation [s]"]


class SettingsDialog(QtWidgets.QDialog):
    """Edit timeouts, aggregation tuning and the preset list."""

    def __init__(
        self,
        settings: ChartSettings,
        presets: Sequence[PeriodPreset],
        parent: Optional[QtWidgets.QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Chart settings")
        self.setModal(True)
        self._settings = settings
        self._presets = list(presets)
        self._result_settings: Optional[ChartSettings] = None
        self._result_presets: Optional[List[PeriodPreset]] = None

        main_layout = QtWidgets.QVBoxLayout(self)
        main_layout.setContentsMargins(16, 16, 16, 16)
        main_layout.setSpacing(12)

        self._build_mode_group(main_layout)
        self._build_aggregation_group(main_layout)
        self._build_preset_group(main_layout)

        button_box = QtWidgets.QDialogButtonBox(
            QtWidgets.QDialogButtonBox.StandardButton.Cancel |
            QtWidgets.QDialogButtonBox.StandardButton.Ok
        )
        button_box.accepted.connect(self.accept)
        button_box.rejected.connect(self.reject)
        main_layout.addWidget(button_box)

        self.resize(560, 0)

    def result_settings(self) -> Optional[ChartSettings]:
        return self._result_settings

    def result_presets(self) -> Optional[List[PeriodPreset]]:
        return self._result_presets

    def accept(self) -> None:
        try:
            self._result_presets = self._build_presets()
        except ValueError as exc:
            QtWidgets.QMessageBox.warning(self, "Invalid input", str(exc))
            return
        self._result_settings = self._build_settings()
        super().accept()

    def _build_mode_group(self, layout: QtWidgets.QVBoxLayout) -> None:
        group = QtWidgets.QGroupBox("Live and frozen charts")
        form = QtWidgets.QFormLayout(group)
        form.setSpacing(6)

        self._timeout = QtWidgets.QSpinBox()
        self._timeout.setRange(MIN_STATIC_TIMEOUT_SECONDS, 24 * 3600)
        self._timeout.setSuffix(" s")
        self._timeout.setValue(self._settings.static_timeout_seconds)
        form.addRow("Return to live after", self._timeout)

        self._refresh = QtWidgets.QSpinBox()
        self._refresh.setRange(1, 3600)
        self._refresh.setSuffix(" s")
        self._refresh.setValue(self._settings.refresh_interval_seconds)
        form.addRow("Refresh every", self._refresh)

        self._link = QtWidgets.QCheckBox("Link chart periods on a dashboard")
        self._link.setChecked(self._settings.link_chart_periods)
        form.addRow(self._link)

        layout.addWidget(group)

    def _build_aggregation_group(self, layout: QtWidgets.QVBoxLayout) -> None:
        group = QtWidgets.QGroupBox("Aggregation")
        form = QtWidgets.QFormLayout(group)
        form.setSpacing(6)

        self._tolerance = QtWidgets.QDoubleSpinBox()
        self._tolerance.setRange(0.0, 100.0)
        self._tolerance.setDecimals(1)
        self._tolerance.setSuffix(" %")
        self._tolerance.setValue(self._settings.preset_match_tolerance_percent)
        form.addRow("Preset match tolerance", self._tolerance)

        self._target_points = QtWidgets.QSpinBox()
        self._target_points.setRange(2, 100_000)
        self._target_points.setValue(self._settings.target_point_count)
        form.addRow("Target points per chart", self._target_points)

        self._rounding = QtWidgets.QSpinBox()
        self._rounding.setRange(1, 3600)
        self._rounding.setSuffix(" s")
        self._rounding.setValue(self._settings.aggregation_rounding_seconds)
        form.addRow("Round interval to", self._rounding)

        layout.addWidget(group)

    def _build_preset_group(self, layout: QtWidgets.QVBoxLayout) -> None:
        group = QtWidgets.QGroupBox("Period presets")
        group_layout = QtWidgets.QVBoxLayout(group)
        group_layout.setSpacing(6)

        self._preset_table = QtWidgets.QTableWidget(0, len(_PRESET_COLUMNS))
        self._preset_table.setHorizontalHeaderLabels(_PRESET_COLUMNS)
        self._preset_table.horizontalHeader().setStretchLastSection(True)
        self._preset_table.verticalHeader().setVisible(False)
        for preset in self._presets:
            self._append_preset_row(preset)
        group_layout.addWidget(self._preset_table)

        buttons = QtWidgets.QHBoxLayout()
        add_button = QtWidgets.QPushButton("Add")
        add_button.clicked.connect(lambda: self._append_preset_row(None))
        remove_button = QtWidgets.QPushButton("Remove")
        remove_button.clicked.connect(self._remove_selected_preset)
        buttons.addWidget(add_button)
        buttons.addWidget(remove_button)
        buttons.addStretch(1)
        group_layout.addLayout(buttons)

        layout.addWidget(group)

    def _append_preset_row(self, preset: Optional[PeriodPreset]) -> None:
        row = self._preset_table.rowCount()
        self._preset_table.insertRow(row)
        name_item = QtWidgets.QTableWidgetItem(preset.name if preset else "New preset")
        # uid stays with the row across renames
        name_item.setData(QtCore.Qt.ItemDataRole.UserRole, preset.uid if preset else None)
        self._preset_table.setItem(row, 0, name_item)

        value = QtWidgets.QDoubleSpinBox()
        value.setRange(0.0, 10_000.0)
        value.setDecimals(2)
        value.setValue(preset.value if preset else 1.0)
        self._preset_table.setCellWidget(row, 1, value)

        unit = QtWidgets.QComboBox()
        for option in PeriodUnit:
            unit.addItem(option.value.capitalize(), option)
        unit.setCurrentIndex(list(PeriodUnit).index(preset.unit if preset else PeriodUnit.HOURS))
        self._preset_table.setCellWidget(row, 2, unit)

        aggregation = QtWidgets.QSpinBox()
        aggregation.setRange(1, 30 * 86400)
        aggregation.setValue(int(preset.aggregation_interval.total_seconds()) if preset else 60)
        self._preset_table.setCellWidget(row, 3, aggregation)

    def _remove_selected_preset(self) -> None:
        rows = sorted({index.row() for index in self._preset_table.selectedIndexes()}, reverse=True)
        for row in rows:
            self._preset_table.removeRow(row)

    def _build_presets(self) -> List[PeriodPreset]:
        presets: List[PeriodPreset] = []
        for row in range(self._preset_table.rowCount()):
            name_item = self._preset_table.item(row, 0)
            name = name_item.text().strip() if name_item else ""
            if not name:
                raise ValueError(f"Preset in row {row + 1} needs a name.")
            value = self._preset_table.cellWidget(row, 1).value()
            if value <= 0:
                raise ValueError(f"Preset '{name}' needs a positive duration.")
            unit = self._preset_table.cellWidget(row, 2).currentData()
            seconds = self._preset_table.cellWidget(row, 3).value()
            uid = name_item.data(QtCore.Qt.ItemDataRole.UserRole) if name_item else None
            preset = PeriodPreset(name, float(value), unit, timedelta(seconds=int(seconds)))
            if uid:
                preset = replace(preset, uid=str(uid))
            presets.append(preset)
        return normalize_presets(presets)

    def _build_settings(self) -> ChartSettings:
        return replace(
            self._settings,
            static_timeout_seconds=self._timeout.value(),
            refresh_interval_seconds=self._refresh.value(),
            link_chart_periods=self._link.isChecked(),
            preset_match_tolerance_percent=self._tolerance.value(),
            target_point_count=self._target_points.value(),
            aggregation_rounding_seconds=self._rounding.value(),
        )


__all__ = ["SettingsDialog"]
