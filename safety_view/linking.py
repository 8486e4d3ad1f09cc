"""Dashboard-wide propagation of period and range changes between charts."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import List

from .chart_mode import ChartModeController

logger = logging.getLogger(__name__)


class DashboardLinkCoordinator:
    """Replays one chart's period, range and mode changes onto its siblings.

    Receiving controllers are always called with ``raise_events=False`` so a
    propagated change never broadcasts again.
    """

    def __init__(self, enabled: bool = False) -> None:
        self.enabled = enabled
        self._controllers: List[ChartModeController] = []

    @property
    def controllers(self) -> List[ChartModeController]:
        return list(self._controllers)

    def add(self, controller: ChartModeController) -> None:
        if controller in self._controllers:
            return
        self._controllers.append(controller)
        controller.period_changed.connect(self.period_changed)
        controller.static_range_changed.connect(self.static_range_changed)
        controller.auto_mode_restored.connect(self.auto_mode_restored)

    def remove(self, controller: ChartModeController) -> None:
        if controller not in self._controllers:
            return
        self._controllers.remove(controller)
        controller.period_changed.disconnect(self.period_changed)
        controller.static_range_changed.disconnect(self.static_range_changed)
        controller.auto_mode_restored.disconnect(self.auto_mode_restored)

    def clear(self) -> None:
        for controller in list(self._controllers):
            self.remove(controller)

    def _siblings(self, source: ChartModeController) -> List[ChartModeController]:
        return [controller for controller in self._controllers if controller is not source and not controller.disposed]

    def period_changed(self, source: ChartModeController, preset_uid: str) -> None:
        if not self.enabled:
            return
        siblings = self._siblings(source)
        logger.debug("Propagating preset %s to %d linked charts", preset_uid, len(siblings))
        for controller in siblings:
            controller.set_period_preset(preset_uid, raise_events=False)

    def static_range_changed(self, source: ChartModeController, start: datetime, end: datetime) -> None:
        if not self.enabled:
            return
        for controller in self._siblings(source):
            controller.set_static_range(start, end, raise_events=False)

    def auto_mode_restored(self, source: ChartModeController) -> None:
        if not self.enabled:
            return
        for controller in self._siblings(source):
            controller.exit_static_mode(raise_events=False)


__all__ = ["DashboardLinkCoordinator"]
