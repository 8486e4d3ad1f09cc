"""Persistent user preference helpers for the Safety Monitor viewer."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import AppConfig, ChartSettings, presets_from_list
from .periods import PeriodPreset

logger = logging.getLogger(__name__)

PREFERENCES_DIR = Path.home() / '.safety_view'
PREFERENCES_PATH = PREFERENCES_DIR / 'preferences.json'


def load_preferences(path: Optional[Path] = None) -> Dict[str, Any]:
    """Return persisted preferences, or an empty dict on failure."""

    target = path or PREFERENCES_PATH
    if not target.exists():
        return {}
    try:
        data = json.loads(target.read_text(encoding='utf-8'))
    except (OSError, ValueError):
        logger.warning("Ignoring unreadable preferences at %s", target, exc_info=True)
        return {}
    return data if isinstance(data, dict) else {}


def save_preferences(data: Dict[str, Any], path: Optional[Path] = None) -> None:
    """Persist preferences to disk."""

    target = path or PREFERENCES_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(data, indent=2, sort_keys=True), encoding='utf-8')


def apply_preferences(config: AppConfig, data: Dict[str, Any]) -> AppConfig:
    """Overlay persisted chart settings and presets onto ``config``."""

    if isinstance(data.get('chart'), dict):
        merged = config.chart.to_dict()
        merged.update(data['chart'])
        config.chart = ChartSettings.from_dict(merged)
    if isinstance(data.get('presets'), list):
        config.presets = presets_from_list(data['presets'])
    return config


def store_chart_preferences(
    settings: ChartSettings,
    presets: List[PeriodPreset],
    path: Optional[Path] = None,
) -> None:
    data = load_preferences(path)
    data['chart'] = settings.to_dict()
    data['presets'] = [preset.to_dict() for preset in presets]
    save_preferences(data, path)


__all__ = [
    'load_preferences',
    'save_preferences',
    'apply_preferences',
    'store_chart_preferences',
    'PREFERENCES_PATH',
]
