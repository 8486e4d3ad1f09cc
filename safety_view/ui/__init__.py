"""Qt widgets of the Safety Monitor viewer."""

from .chart_tile import ChartTile
from .dashboard_panel import DashboardPanel
from .main_window import MainWindow

__all__ = ["ChartTile", "DashboardPanel", "MainWindow"]
