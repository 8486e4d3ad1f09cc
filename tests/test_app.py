"""Tests for command line handling of the entry point."""
from __future__ import annotations

import pytest

pytest.importorskip("PySide6", reason="PySide6 not available", exc_type=ImportError)
pytest.importorskip("pyqtgraph", reason="pyqtgraph not available", exc_type=ImportError)

from safety_view import app
from safety_view.config import ConfigError


def _args(*argv: str):
    return app.build_arg_parser().parse_args(list(argv))


def test_main_exits_with_code_two_on_bad_config(tmp_path, capsys) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("- not\n- a mapping\n", encoding="utf-8")

    code = app.main(["--config", str(path), "--preferences", str(tmp_path / "preferences.json")])

    assert code == 2
    assert "must be a mapping" in capsys.readouterr().err


def test_malformed_dashboard_is_reported_as_config_error(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("dashboards:\n  - {name: Roof, tiles: 5}\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Dashboard 1"):
        app.load_config(_args("--config", str(path), "--preferences", str(tmp_path / "preferences.json")))


def test_command_line_overrides_file_and_preferences(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("chart: {static_timeout_seconds: 120, refresh_interval_seconds: 3}\n", encoding="utf-8")

    config = app.load_config(
        _args(
            "--config", str(path),
            "--preferences", str(tmp_path / "preferences.json"),
            "--timeout", "5",
            "--refresh", "0",
            "--link",
        )
    )

    assert config.chart.static_timeout_seconds == 10
    assert config.chart.refresh_interval_seconds == 1
    assert config.chart.link_chart_periods is True


def test_defaults_without_config_file(tmp_path) -> None:
    config = app.load_config(_args("--preferences", str(tmp_path / "preferences.json")))
    assert config.chart.static_timeout_seconds == 60
    assert config.chart.link_chart_periods is False
    assert config.dashboards[0].name == "Main Dashboard"
