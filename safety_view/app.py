"""Entry point for the Safety Monitor viewer."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from PySide6 import QtWidgets

from .config import AppConfig, ConfigError
from .data_source import SyntheticDataSource
from .preferences import PREFERENCES_PATH, apply_preferences, load_preferences
from .presets import PeriodPresetCatalog, normalize_presets
from .ui import MainWindow

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Safety Monitor chart dashboard")
    parser.add_argument("--config", type=Path, help="Path to a YAML configuration", default=None)
    parser.add_argument("--preferences", type=Path, help="Preferences file", default=None)
    parser.add_argument("--timeout", type=int, help="Seconds before a frozen chart returns to live", default=None)
    parser.add_argument("--refresh", type=int, help="Refresh interval in seconds", default=None)
    parser.add_argument("--link", action="store_true", help="Link chart periods on each dashboard")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ...)")
    return parser


def load_config(args: argparse.Namespace) -> AppConfig:
    config = AppConfig.from_yaml(args.config) if args.config else AppConfig()
    apply_preferences(config, load_preferences(args.preferences))
    # command line wins over file and preferences
    if args.timeout is not None:
        config.chart.static_timeout_seconds = max(10, args.timeout)
    if args.refresh is not None:
        config.chart.refresh_interval_seconds = max(1, args.refresh)
    if args.link:
        config.chart.link_chart_periods = True
    config.presets = normalize_presets(config.presets)
    return config


def main(argv: Optional[list[str]] = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = load_config(args)
    except ConfigError as exc:
        logger.error("%s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    catalog = PeriodPresetCatalog(config.presets)
    data_source = SyntheticDataSource(seed=config.seed)

    app = QtWidgets.QApplication(sys.argv[:1] + argv)
    window = MainWindow(config, catalog, data_source, args.preferences or PREFERENCES_PATH)
    data_source.set_connection_listener(window.handle_connection_failure)
    window.showMaximized()
    logger.info("Started with %d dashboards and %d presets", len(config.dashboards), len(config.presets))
    return int(app.exec())


if __name__ == "__main__":
    raise SystemExit(main())
