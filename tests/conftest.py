"""Pytest configuration."""
from __future__ import annotations

import sys
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, List

import pytest

try:  # pragma: no cover - optional dependency
    from PySide6 import QtWidgets
except ImportError:  # pragma: no cover - environments without Qt
    QtWidgets = None  # type: ignore

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

START = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc).astimezone()


class FakeClock:
    """Manually advanced clock returning local aware datetimes."""

    def __init__(self, start: datetime = START) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> datetime:
        self.current = self.current + timedelta(seconds=seconds)
        return self.current


class FakeHandle:
    def __init__(self, interval: timedelta, callback: Callable[[], None]) -> None:
        self.interval = interval
        self.callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def stop(self) -> None:
        self._active = False


class FakeScheduler:
    """Records scheduled callbacks; tests fire them explicitly."""

    def __init__(self) -> None:
        self.handles: List[FakeHandle] = []

    def every(self, interval: timedelta, callback: Callable[[], None]) -> FakeHandle:
        handle = FakeHandle(interval, callback)
        self.handles.append(handle)
        return handle

    @property
    def active(self) -> List[FakeHandle]:
        return [handle for handle in self.handles if handle.active]

    def fire(self) -> None:
        for handle in self.active:
            handle.callback()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture(scope="session")
def qapp():
    """Provide a QApplication for UI tests."""

    if QtWidgets is None:  # pragma: no cover - tests are skipped
        pytest.skip("PySide6 not available")

    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    yield app
