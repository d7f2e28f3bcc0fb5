from __future__ import annotations

import pytest
from typer.testing import CliRunner

from storefront import __version__
from storefront.cli.cmd.serve import env_with_overrides
from storefront.cli.main import app


runner = CliRunner()


def test_cli_serve_delegates_to_serve_command(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_serve_command(**kwargs: object) -> None:
        captured.update(kwargs)

    monkeypatch.setattr("storefront.cli.cmd.serve.serve_command", fake_serve_command)

    result = runner.invoke(
        app,
        ["serve", "--host", "0.0.0.0", "--port", "5001", "--log-level", "debug", "--no-access-log"],
    )

    assert result.exit_code == 0
    assert captured == {
        "host": "0.0.0.0",
        "port": 5001,
        "log_level": "debug",
        "log_format": None,
        "access_log": False,
    }


def test_env_overrides_only_replace_given_values() -> None:
    env = env_with_overrides(
        {"CLIENT_ORIGIN": "http://localhost:3000", "PORT": "3001", "HOST": "127.0.0.1"},
        port=0,
        access_log=True,
    )

    assert env == {
        "CLIENT_ORIGIN": "http://localhost:3000",
        "PORT": "0",
        "HOST": "127.0.0.1",
        "ACCESS_LOG": "true",
    }


def test_check_config_reports_missing_origin(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CLIENT_ORIGIN", raising=False)

    result = runner.invoke(app, ["check-config"])

    assert result.exit_code == 78
    assert "CLIENT_ORIGIN" in result.output


def test_check_config_prints_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CLIENT_ORIGIN", "http://localhost:3000")

    result = runner.invoke(app, ["check-config"])

    assert result.exit_code == 0
    assert "http://localhost:3000" in result.output


def test_version_option() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output
