"""Colour palette of the dashboard."""
from __future__ import annotations

PRIMARY = "#1E88E5"  # live charts, toolbar
PRIMARY_DARK = "#1565C0"
PRIMARY_LIGHT = "#90CAF9"
FROZEN = "#FB8C00"  # static mode badge and countdown
FROZEN_LIGHT = "#FFE0B2"
BACKGROUND = "#FFFFFF"
PANEL = "#F5F5F5"
TEXT = "#263238"
MUTED_TEXT = "#78909C"
GRID = "#CFD8DC"
HOVER_LINE = "#FFB300"
