"""Gateway configuration."""

from gemini_copilot_proxy.core.config.app_config import (
    AppConfig,
    CopilotBackendConfig,
    LoggingConfig,
    load_config,
)

__all__ = ["AppConfig", "CopilotBackendConfig", "LoggingConfig", "load_config"]
