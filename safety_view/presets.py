"""In-memory catalog of chart period presets."""
from __future__ import annotations

import logging
import math
from datetime import timedelta
from typing import Callable, Iterable, List, Sequence

from .periods import PeriodPreset, PeriodUnit

logger = logging.getLogger(__name__)

PresetListener = Callable[[Sequence[PeriodPreset]], None]

# Used when a candidate list is empty.
FALLBACK_PRESET = PeriodPreset(
    name="Last 24 Hours",
    value=24,
    unit=PeriodUnit.HOURS,
    aggregation_interval=timedelta(minutes=5),
    uid="builtin-last-24-hours",
)


def default_presets() -> List[PeriodPreset]:
    """Built-in preset set offered when the user has none configured."""

    return [
        PeriodPreset("15 Minutes", 15, PeriodUnit.MINUTES, timedelta(seconds=10), uid="default-15m"),
        PeriodPreset("1 Hour", 1, PeriodUnit.HOURS, timedelta(minutes=1), uid="default-1h"),
        PeriodPreset("6 Hours", 6, PeriodUnit.HOURS, timedelta(minutes=2), uid="default-6h"),
        PeriodPreset("24 Hours", 24, PeriodUnit.HOURS, timedelta(minutes=5), uid="default-24h"),
        PeriodPreset("7 Days", 7, PeriodUnit.DAYS, timedelta(minutes=30), uid="default-7d"),
        PeriodPreset("30 Days", 30, PeriodUnit.DAYS, timedelta(hours=1), uid="default-30d"),
    ]


def normalize_presets(presets: Iterable[PeriodPreset | None] | None) -> List[PeriodPreset]:
    """Drop unusable entries and substitute the defaults if nothing is left."""

    result: List[PeriodPreset] = []
    seen: set[str] = set()
    for preset in presets or ():
        if preset is None or not preset.name.strip():
            continue
        if not math.isfinite(preset.value) or preset.value <= 0:
            continue
        try:
            if preset.duration <= timedelta(0):
                continue
        except OverflowError:
            continue
        if preset.aggregation_interval <= timedelta(0):
            continue
        if preset.uid in seen:
            continue
        seen.add(preset.uid)
        result.append(
            PeriodPreset(
                name=preset.name.strip(),
                value=preset.value,
                unit=preset.unit,
                aggregation_interval=preset.aggregation_interval,
                uid=preset.uid,
            )
        )
    if not result:
        logger.info("No usable period presets supplied, using defaults")
        return default_presets()
    return result


def find_matching_index(target_uid: str | None, candidates: Sequence[PeriodPreset]) -> int:
    """Index of the preset whose uid equals ``target_uid``, else ``-1``."""

    if not target_uid:
        return -1
    for index, preset in enumerate(candidates):
        if preset.uid == target_uid:
            return index
    return -1


def fallback_preset(candidates: Sequence[PeriodPreset]) -> PeriodPreset:
    if candidates:
        return candidates[0]
    return FALLBACK_PRESET


class PeriodPresetCatalog:
    """Holds the preset list shared by all charts and notifies on replacement."""

    def __init__(self, presets: Iterable[PeriodPreset] | None = None) -> None:
        self._presets: List[PeriodPreset] = list(presets) if presets is not None else default_presets()
        self._listeners: List[PresetListener] = []

    @property
    def presets(self) -> List[PeriodPreset]:
        return list(self._presets)

    def set_presets(self, presets: Iterable[PeriodPreset]) -> None:
        """Replace the whole list. Callers guarantee it is not empty."""

        self._presets = list(presets)
        logger.debug("Period presets replaced (%d entries)", len(self._presets))
        for listener in list(self._listeners):
            listener(self.presets)

    def find(self, uid: str | None) -> PeriodPreset | None:
        index = find_matching_index(uid, self._presets)
        if index < 0:
            return None
        return self._presets[index]

    def find_matching_index(self, target_uid: str | None, candidates: Sequence[PeriodPreset] | None = None) -> int:
        return find_matching_index(target_uid, self._presets if candidates is None else candidates)

    def fallback_preset(self, candidates: Sequence[PeriodPreset] | None = None) -> PeriodPreset:
        return fallback_preset(self._presets if candidates is None else candidates)

    def resolve(self, uid: str | None) -> PeriodPreset:
        """The preset with ``uid`` or the fallback when it is unknown."""

        preset = self.find(uid)
        return preset if preset is not None else self.fallback_preset()

    def subscribe(self, fn: PresetListener) -> None:
        self._listeners.append(fn)

    def unsubscribe(self, fn: PresetListener) -> None:
        if fn in self._listeners:
            self._listeners.remove(fn)


__all__ = [
    "PeriodPresetCatalog",
    "FALLBACK_PRESET",
    "default_presets",
    "normalize_presets",
    "find_matching_index",
    "fallback_preset",
]
