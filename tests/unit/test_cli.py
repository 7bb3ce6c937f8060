from __future__ import annotations

import logging
from typing import Any

import pytest
from gemini_copilot_proxy.core import cli


@pytest.fixture
def captured_run(monkeypatch: pytest.MonkeyPatch) -> dict[str, Any]:
    captured: dict[str, Any] = {}

    def fake_run(app: Any, host: str, port: int) -> None:
        captured.update(app=app, host=host, port=port)

    monkeypatch.setattr(cli.uvicorn, "run", fake_run)
    monkeypatch.setattr(cli, "_configure_logging", lambda cfg: None)
    return captured


def test_parser_accepts_only_config() -> None:
    parser = cli.build_cli_parser()

    assert parser.parse_args(["--config", "a.yaml"]).config_file == "a.yaml"
    with pytest.raises(SystemExit):
        parser.parse_args(["--port", "1"])


def test_main_runs_server_from_config_file(
    captured_run: dict[str, Any], temp_config_path, monkeypatch: pytest.MonkeyPatch
) -> None:
    for name in ("APP_HOST", "APP_PORT", "COPILOT_TOKEN", "GEMINI_SUPPORTED_MODELS"):
        monkeypatch.delenv(name, raising=False)

    cli.main(["--config", str(temp_config_path)])

    assert captured_run["host"] == "0.0.0.0"
    assert captured_run["port"] == 9000
    assert captured_run["app"].state.app_config.supported_models == ["gemini-2.5-pro"]


def test_main_warns_without_token(
    captured_run: dict[str, Any], monkeypatch: pytest.MonkeyPatch, caplog
) -> None:
    monkeypatch.delenv("COPILOT_TOKEN", raising=False)

    with caplog.at_level(logging.WARNING):
        cli.main([])

    assert "COPILOT_TOKEN is not set" in caplog.text


def test_main_logs_token_redacted(
    captured_run: dict[str, Any], monkeypatch: pytest.MonkeyPatch, caplog
) -> None:
    monkeypatch.setenv("COPILOT_TOKEN", "tid=abcdef123456;exp=9")

    with caplog.at_level(logging.INFO):
        cli.main([])

    assert "Using Copilot token ti***=9" in caplog.text
    assert "abcdef123456" not in caplog.text
