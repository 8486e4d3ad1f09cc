"""Periodic callbacks with disposable handles."""
from __future__ import annotations

from datetime import timedelta
from typing import Callable, Optional, Protocol

from PySide6 import QtCore


class TimerHandle(Protocol):
    def stop(self) -> None: ...

    @property
    def active(self) -> bool: ...


class Scheduler(Protocol):
    def every(self, interval: timedelta, callback: Callable[[], None]) -> TimerHandle: ...


class QtTimerHandle:
    """Owns one running :class:`QtCore.QTimer`."""

    def __init__(self, timer: QtCore.QTimer) -> None:
        self._timer: Optional[QtCore.QTimer] = timer

    @property
    def active(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    def set_interval(self, interval: timedelta) -> None:
        if self._timer is not None:
            self._timer.setInterval(_milliseconds(interval))

    def stop(self) -> None:
        timer, self._timer = self._timer, None
        if timer is None:
            return
        timer.stop()
        timer.deleteLater()


def _milliseconds(interval: timedelta) -> int:
    return max(15, int(interval.total_seconds() * 1000))


class QtScheduler:
    """Schedules callbacks on the Qt event loop."""

    def __init__(self, parent: Optional[QtCore.QObject] = None) -> None:
        self._parent = parent

    def every(self, interval: timedelta, callback: Callable[[], None]) -> QtTimerHandle:
        timer = QtCore.QTimer(self._parent)
        timer.setInterval(_milliseconds(interval))
        timer.timeout.connect(callback)
        timer.start()
        return QtTimerHandle(timer)


__all__ = ["Scheduler", "TimerHandle", "QtScheduler", "QtTimerHandle"]
