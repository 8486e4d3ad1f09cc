"""Per-chart Auto/Static mode state machine."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Optional, Sequence, Tuple

from PySide6 import QtCore

from .aggregation import (
    AggregationFunction,
    AggregationIntervalResolver,
    AggregationRequest,
    format_aggregation_label,
)
from .config import MIN_STATIC_TIMEOUT_SECONDS, ChartSettings
from .instants import Clock, from_timestamp, local_now, to_local
from .periods import ChartPeriod, PeriodPreset
from .presets import PeriodPresetCatalog
from .scheduling import QtScheduler, Scheduler, TimerHandle
from .time_window import TimeWindow, TimeWindowResolver

if TYPE_CHECKING:  # pragma: no cover
    from .dashboard import ChartTileConfig

logger = logging.getLogger(__name__)

AXIS_EPSILON = 1e-9
TICK_INTERVAL = timedelta(seconds=1)


class ChartMode(Enum):
    AUTO = "auto"
    STATIC = "static"


class ChartModeController(QtCore.QObject):
    """Decides whether a chart follows "now" or stays on a frozen range.

    ``period_changed``, ``static_range_changed`` and ``auto_mode_restored`` are
    broadcasts for the dashboard link coordinator and are suppressed with
    ``raise_events=False``. ``mode_changed``, ``countdown_changed`` and
    ``refresh_requested`` are for the renderer and always fire.
    """

    period_changed = QtCore.Signal(object, str)
    static_range_changed = QtCore.Signal(object, object, object)
    auto_mode_restored = QtCore.Signal(object)
    mode_changed = QtCore.Signal(object)
    countdown_changed = QtCore.Signal(float)
    refresh_requested = QtCore.Signal()
    presets_reloaded = QtCore.Signal()

    def __init__(
        self,
        catalog: PeriodPresetCatalog,
        settings: ChartSettings | None = None,
        scheduler: Scheduler | None = None,
        clock: Clock = local_now,
        *,
        preset_uid: str | None = None,
        period: ChartPeriod = ChartPeriod.LAST_24_HOURS,
        custom_duration: timedelta | None = None,
        custom_start: datetime | None = None,
        custom_end: datetime | None = None,
        custom_aggregation_interval: timedelta | None = None,
        aggregation_enabled: bool = True,
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        super().__init__(parent)
        settings = settings or ChartSettings()
        self._catalog = catalog
        self._clock = clock
        self._scheduler: Scheduler = scheduler if scheduler is not None else QtScheduler(self)
        self._windows = TimeWindowResolver(clock)
        self._aggregation = AggregationIntervalResolver(
            catalog,
            settings.preset_match_tolerance_percent,
            settings.target_point_count,
            settings.aggregation_rounding_seconds,
        )
        self._timeout = timedelta(seconds=max(MIN_STATIC_TIMEOUT_SECONDS, settings.static_timeout_seconds))
        self._custom_aggregation_interval = custom_aggregation_interval
        self._aggregation_enabled = aggregation_enabled

        self._mode = ChartMode.AUTO
        self._preset_uid: str | None = None
        self._period = period
        self._custom_duration = custom_duration if period is ChartPeriod.CUSTOM else None
        self._custom_start: datetime | None = None
        self._custom_end: datetime | None = None
        self._static_preset_uid: str | None = None
        self._auto_period = self._period
        self._auto_preset_uid: str | None = None
        self._auto_custom_duration: timedelta | None = None
        self._last_interaction: datetime | None = None
        self._axis_limits: Tuple[float, float] | None = None
        self._tick: TimerHandle | None = None
        self._disposed = False

        self._select_initial_preset(preset_uid)
        self._catalog.subscribe(self._on_presets_replaced)

        if custom_start is not None and custom_end is not None and to_local(custom_end) > to_local(custom_start):
            self._enter_static(to_local(custom_start), to_local(custom_end), None)

    # ------------------------------------------------------------------ state
    @property
    def mode(self) -> ChartMode:
        return self._mode

    @property
    def is_static(self) -> bool:
        return self._mode is ChartMode.STATIC

    @property
    def period(self) -> ChartPeriod:
        return self._period

    @property
    def preset_uid(self) -> str | None:
        return self._preset_uid

    @property
    def custom_duration(self) -> timedelta | None:
        return self._custom_duration

    @property
    def custom_start(self) -> datetime | None:
        return self._custom_start

    @property
    def custom_end(self) -> datetime | None:
        return self._custom_end

    @property
    def static_preset_uid(self) -> str | None:
        return self._static_preset_uid

    @property
    def auto_preset_uid(self) -> str | None:
        return self._auto_preset_uid

    @property
    def last_interaction(self) -> datetime | None:
        return self._last_interaction

    @property
    def timeout(self) -> timedelta:
        return self._timeout

    @property
    def presets(self) -> Sequence[PeriodPreset]:
        return self._catalog.presets

    @property
    def disposed(self) -> bool:
        return self._disposed

    def now(self) -> datetime:
        return to_local(self._clock())

    def selected_index(self) -> int:
        """Catalog index of the active preset, ``-1`` for a custom period."""

        return self._catalog.find_matching_index(self._preset_uid)

    # ----------------------------------------------------------- settings
    def set_timeout(self, seconds: float) -> None:
        self._timeout = timedelta(seconds=max(MIN_STATIC_TIMEOUT_SECONDS, float(seconds)))

    def apply_settings(self, settings: ChartSettings) -> None:
        self.set_timeout(settings.static_timeout_seconds)
        self._aggregation.configure(
            settings.preset_match_tolerance_percent,
            settings.target_point_count,
            settings.aggregation_rounding_seconds,
        )
        self.refresh_requested.emit()

    def set_custom_aggregation_interval(self, interval: timedelta | None) -> None:
        self._custom_aggregation_interval = interval
        self.refresh_requested.emit()

    # ---------------------------------------------------------- transitions
    def set_period_preset(self, uid: str | None, raise_events: bool = True) -> None:
        """Select a named preset. While static this also leaves Static mode."""

        if self._disposed:
            return
        preset = self._catalog.resolve(uid)
        was_static = self.is_static
        if was_static:
            self._leave_static()
        self._apply_preset(preset)
        logger.debug("Chart period set to %s (%s)", preset.name, preset.uid)
        if was_static:
            self.mode_changed.emit(self._mode)
            if raise_events:
                self.auto_mode_restored.emit(self)
        if raise_events:
            self.period_changed.emit(self, preset.uid)
        self.refresh_requested.emit()

    def set_static_range(
        self,
        start: datetime,
        end: datetime,
        raise_events: bool = True,
        source_preset_uid: str | None = None,
    ) -> bool:
        """Freeze the chart on ``[start, end)``. Returns ``False`` if ignored."""

        if self._disposed:
            return False
        start = to_local(start)
        end = to_local(end)
        if end <= start:
            logger.debug("Ignoring static range with end %s not after start %s", end, start)
            return False

        if self.is_static:
            self._last_interaction = self.now()
            if start == self._custom_start and end == self._custom_end:
                self.countdown_changed.emit(self._timeout.total_seconds())
                return True
            self._custom_start = start
            self._custom_end = end
            self._static_preset_uid = source_preset_uid
        else:
            self._enter_static(start, end, source_preset_uid)
            self.mode_changed.emit(self._mode)

        if raise_events:
            self.static_range_changed.emit(self, start, end)
        self.countdown_changed.emit(self._timeout.total_seconds())
        self.refresh_requested.emit()
        return True

    def freeze(self, now: datetime | None = None) -> bool:
        """Freeze the window currently shown; restarts the countdown if static."""

        window = self.current_window(now)
        return self.set_static_range(window.start, window.end, source_preset_uid=self._preset_uid)

    def exit_static_mode(self, raise_events: bool = True) -> bool:
        if self._disposed or not self.is_static:
            return False
        self._leave_static()
        logger.debug("Chart returned to auto mode")
        self.mode_changed.emit(self._mode)
        if raise_events:
            self.auto_mode_restored.emit(self)
        self.refresh_requested.emit()
        return True

    def notify_axis_limits(self, x_min: float, x_max: float) -> bool:
        """Handle user-driven x-axis changes (epoch seconds)."""

        if self._disposed:
            return False
        if self._axis_limits is not None:
            old_min, old_max = self._axis_limits
            if abs(x_min - old_min) <= AXIS_EPSILON and abs(x_max - old_max) <= AXIS_EPSILON:
                return False
        if x_max <= x_min:
            return False
        self._axis_limits = (x_min, x_max)
        return self.set_static_range(from_timestamp(x_min), from_timestamp(x_max))

    def remember_axis_limits(self, x_min: float, x_max: float) -> None:
        """Record limits the renderer applied itself so they do not count as interaction."""

        self._axis_limits = (x_min, x_max)

    # ------------------------------------------------------------ countdown
    def countdown_remaining(self, now: datetime | None = None) -> timedelta:
        if not self.is_static or self._last_interaction is None:
            return timedelta(0)
        current = to_local(now) if now is not None else self.now()
        remaining = self._timeout - (current - self._last_interaction)
        return max(timedelta(0), remaining)

    def tick(self, now: datetime | None = None) -> None:
        if self._disposed or not self.is_static or self._last_interaction is None:
            return
        current = to_local(now) if now is not None else self.now()
        self.countdown_changed.emit(self.countdown_remaining(current).total_seconds())
        if current - self._last_interaction >= self._timeout:
            logger.debug("Static mode timed out after %s", self._timeout)
            self.exit_static_mode(raise_events=True)

    # ----------------------------------------------------------- resolution
    def current_window(self, now: datetime | None = None) -> TimeWindow:
        return self._windows.resolve(
            self._period,
            self.is_static,
            self._custom_start,
            self._custom_end,
            self._custom_duration,
            now,
        )

    def aggregation_interval(self, window: TimeWindow | None = None) -> timedelta | None:
        if not self._aggregation_enabled:
            return None
        window = window or self.current_window()
        return self._aggregation.resolve(
            window.span,
            is_static=self.is_static,
            period=self._period,
            preset_uid=self._preset_uid,
            static_preset_uid=self._static_preset_uid,
            override=self._custom_aggregation_interval,
        )

    def aggregation_request(
        self,
        function: AggregationFunction = AggregationFunction.AVERAGE,
        now: datetime | None = None,
    ) -> AggregationRequest:
        window = self.current_window(now)
        return AggregationRequest(window, self.aggregation_interval(window), function)

    def aggregation_label(self, now: datetime | None = None) -> str:
        return format_aggregation_label(self.aggregation_interval(self.current_window(now)))

    # ------------------------------------------------------------ lifecycle
    def apply_to(self, config: "ChartTileConfig") -> None:
        """Write the persisted part of the state back into ``config``."""

        if self.is_static:
            config.period = self._auto_period
            config.period_preset_uid = self._auto_preset_uid or ""
            config.custom_period_duration = self._auto_custom_duration
            config.custom_start_time = self._custom_start
            config.custom_end_time = self._custom_end
        else:
            config.period = self._period
            config.period_preset_uid = self._preset_uid or ""
            config.custom_period_duration = self._custom_duration
            config.custom_start_time = None
            config.custom_end_time = None

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._stop_tick()
        self._catalog.unsubscribe(self._on_presets_replaced)

    # -------------------------------------------------------------- helpers
    def _select_initial_preset(self, uid: str | None) -> None:
        if uid:
            self._apply_preset(self._catalog.resolve(uid))
        elif self._period is not ChartPeriod.CUSTOM:
            for preset in self._catalog.presets:
                if preset.period is self._period:
                    self._apply_preset(preset)
                    break
        elif self._custom_duration is None:
            self._apply_preset(self._catalog.fallback_preset())
        self._remember_auto()

    def _apply_preset(self, preset: PeriodPreset) -> None:
        self._preset_uid = preset.uid
        self._period = preset.period
        self._custom_duration = preset.duration if self._period is ChartPeriod.CUSTOM else None

    def _remember_auto(self) -> None:
        self._auto_period = self._period
        self._auto_preset_uid = self._preset_uid
        self._auto_custom_duration = self._custom_duration

    def _enter_static(self, start: datetime, end: datetime, source_preset_uid: str | None) -> None:
        self._remember_auto()
        self._mode = ChartMode.STATIC
        self._custom_start = start
        self._custom_end = end
        self._static_preset_uid = source_preset_uid
        self._last_interaction = self.now()
        self._start_tick()
        logger.debug("Chart frozen on %s .. %s", start, end)

    def _leave_static(self) -> None:
        self._stop_tick()
        self._mode = ChartMode.AUTO
        self._period = self._auto_period
        self._preset_uid = self._auto_preset_uid
        self._custom_duration = self._auto_custom_duration
        self._custom_start = None
        self._custom_end = None
        self._static_preset_uid = None
        self._last_interaction = None
        self._axis_limits = None

    def _start_tick(self) -> None:
        if self._tick is None:
            self._tick = self._scheduler.every(TICK_INTERVAL, self.tick)

    def _stop_tick(self) -> None:
        tick, self._tick = self._tick, None
        if tick is not None:
            tick.stop()

    def _on_presets_replaced(self, presets: Sequence[PeriodPreset]) -> None:
        if self._disposed:
            return
        if self.is_static:
            if self._auto_preset_uid is not None:
                preset = self._catalog.resolve(self._auto_preset_uid)
                self._auto_preset_uid = preset.uid
                self._auto_period = preset.period
                self._auto_custom_duration = preset.duration if preset.period is ChartPeriod.CUSTOM else None
        elif self._preset_uid is not None or not presets:
            self._apply_preset(self._catalog.resolve(self._preset_uid))
            self._remember_auto()
        self.presets_reloaded.emit()
        self.refresh_requested.emit()


__all__ = ["ChartMode", "ChartModeController", "AXIS_EPSILON", "TICK_INTERVAL"]
