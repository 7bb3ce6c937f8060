from __future__ import annotations

import itertools
from collections.abc import Callable
from pathlib import Path

import pytest
from gemini_copilot_proxy.core.config.app_config import AppConfig, CopilotBackendConfig

TEST_COPILOT_TOKEN = "tid=test-token;exp=1700000000;sku=test"


@pytest.fixture
def copilot_config() -> CopilotBackendConfig:
    return CopilotBackendConfig(
        api_base_url="https://copilot.test", token=TEST_COPILOT_TOKEN, timeout=5.0
    )


@pytest.fixture
def app_config(copilot_config: CopilotBackendConfig) -> AppConfig:
    return AppConfig(copilot=copilot_config)


@pytest.fixture
def id_factory() -> Callable[[str, int], str]:
    """Deterministic tool call ids: ``call_{name}_{counter}``."""
    return lambda name, counter: f"call_{name}_{counter}"


@pytest.fixture
def counting_id_factory() -> Callable[[str, int], str]:
    """Ids that ignore the function name, to check issue order."""
    seq = itertools.count(1)
    return lambda name, counter: f"id{next(seq)}"


@pytest.fixture
def temp_config_path(tmp_path: Path) -> Path:
    """Create a minimal valid YAML config file and return its path."""
    import yaml

    cfg = {
        "host": "0.0.0.0",
        "port": 9000,
        "logging": {"level": "debug"},
        "copilot": {"api_base_url": "https://file.test", "timeout": 42},
        "supported_models": ["gemini-2.5-pro"],
    }
    p = tmp_path / "app.config.yaml"
    with p.open("w", encoding="utf-8") as f:
        yaml.safe_dump(cfg, f, sort_keys=False)
    return p
