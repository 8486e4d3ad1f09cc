"""Lenient parsing of numbers and flags read from YAML or JSON files."""
from __future__ import annotations

import math
from typing import Any

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def parse_number(raw: Any, default: float) -> float:
    """``raw`` as a finite float, else ``default``."""

    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    return value if math.isfinite(value) else default


def parse_int(raw: Any, default: int) -> int:
    return int(parse_number(raw, default))


def parse_flag(raw: Any, default: bool) -> bool:
    """Booleans written as ``true``/``"false"``/``1``/``"off"``; anything else yields ``default``."""

    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return bool(raw) if math.isfinite(raw) else default
    if isinstance(raw, str):
        text = raw.strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
    return default


__all__ = ["parse_number", "parse_int", "parse_flag"]
