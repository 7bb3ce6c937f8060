from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator

from gemini_copilot_proxy.core.common.exceptions import ConfigurationError
from gemini_copilot_proxy.core.constants import (
    COPILOT_API_BASE_URL,
    COPILOT_API_VERSION,
    COPILOT_EDITOR_PLUGIN_VERSION,
    COPILOT_EDITOR_VERSION,
    COPILOT_INTEGRATION_ID,
    COPILOT_USER_AGENT,
    DEFAULT_SUPPORTED_GEMINI_MODELS,
)
from gemini_copilot_proxy.core.interfaces.model_bases import DomainModel

logger = logging.getLogger(__name__)


def _split_csv(raw: str) -> list[str]:
    """Split a comma-separated string, dropping blanks."""
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_to_int(name: str, default: int, env: Mapping[str, str]) -> int:
    """Return an environment variable parsed as an integer."""
    value = env.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-integer value for %s: %r", name, value)
        return default


def _env_to_float(name: str, default: float, env: Mapping[str, str]) -> float:
    """Return an environment variable parsed as a float."""
    value = env.get(name)
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-numeric value for %s: %r", name, value)
        return default


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LoggingConfig(DomainModel):
    """Logging configuration."""

    level: LogLevel = LogLevel.INFO
    log_file: str | None = None

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v


class CopilotBackendConfig(DomainModel):
    """Connection settings for the GitHub Copilot chat completions API."""

    api_base_url: str = COPILOT_API_BASE_URL
    token: str | None = None
    timeout: float = 300.0
    integration_id: str = COPILOT_INTEGRATION_ID
    editor_version: str = COPILOT_EDITOR_VERSION
    editor_plugin_version: str = COPILOT_EDITOR_PLUGIN_VERSION
    user_agent: str = COPILOT_USER_AGENT
    api_version: str = COPILOT_API_VERSION


class AppConfig(DomainModel):
    """Top-level gateway configuration."""

    host: str = "127.0.0.1"
    port: int = 4141
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    copilot: CopilotBackendConfig = Field(default_factory=CopilotBackendConfig)
    supported_models: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SUPPORTED_GEMINI_MODELS)
    )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AppConfig:
        """Build a configuration from environment variables only."""
        env = environ if environ is not None else os.environ
        return cls.model_validate(_env_overrides(env, cls().model_dump()))


def _env_overrides(env: Mapping[str, str], base: dict[str, Any]) -> dict[str, Any]:
    """Apply recognised environment variables on top of ``base``."""
    data = dict(base)
    data["logging"] = dict(base.get("logging") or {})
    data["copilot"] = dict(base.get("copilot") or {})

    if "APP_HOST" in env:
        data["host"] = env["APP_HOST"]
    if "APP_PORT" in env:
        data["port"] = _env_to_int("APP_PORT", data.get("port", 4141), env)
    if "LOG_LEVEL" in env:
        data["logging"]["level"] = env["LOG_LEVEL"]
    if "LOG_FILE" in env:
        data["logging"]["log_file"] = env["LOG_FILE"]
    if "COPILOT_API_BASE_URL" in env:
        data["copilot"]["api_base_url"] = env["COPILOT_API_BASE_URL"]
    if "COPILOT_TOKEN" in env:
        data["copilot"]["token"] = env["COPILOT_TOKEN"]
    if "COPILOT_TIMEOUT" in env:
        data["copilot"]["timeout"] = _env_to_float(
            "COPILOT_TIMEOUT", data["copilot"].get("timeout", 300.0), env
        )
    if env.get("GEMINI_SUPPORTED_MODELS"):
        data["supported_models"] = _split_csv(env["GEMINI_SUPPORTED_MODELS"])

    return data


def _merge_dicts(d1: dict[str, Any], d2: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``d2`` into ``d1`` in place."""
    for key, value in d2.items():
        if isinstance(value, dict) and isinstance(d1.get(key), dict):
            _merge_dicts(d1[key], value)
        else:
            d1[key] = value
    return d1


def load_config(
    config_path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """
    Load configuration from file and environment.

    Environment variables take precedence over values from the YAML file.

    Args:
        config_path: Optional path to a YAML configuration file
        environ: Environment mapping, defaults to ``os.environ``

    Returns:
        AppConfig instance
    """
    env = environ if environ is not None else os.environ
    config_data: dict[str, Any] = AppConfig().model_dump()

    if config_path:
        path = Path(config_path)
        if not path.exists():
            logger.warning(f"Configuration file not found: {config_path}")
        else:
            if path.suffix.lower() not in (".yaml", ".yml"):
                raise ConfigurationError(
                    f"Unsupported configuration file format: {path.suffix}. Use YAML (.yaml/.yml)."
                )
            with open(path, encoding="utf-8") as f:
                file_config = yaml.safe_load(f) or {}
            if not isinstance(file_config, dict):
                raise ConfigurationError(
                    f"Configuration file {path} must contain a mapping"
                )
            _merge_dicts(config_data, file_config)

    return AppConfig.model_validate(_env_overrides(env, config_data))
