"""
Application factory for creating the FastAPI application.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI

from gemini_copilot_proxy import __version__
from gemini_copilot_proxy.connectors.copilot import CopilotConnector
from gemini_copilot_proxy.core.app.controllers import router
from gemini_copilot_proxy.core.app.error_handlers import configure_exception_handlers
from gemini_copilot_proxy.core.common.logging import LoggingMiddleware
from gemini_copilot_proxy.core.config.app_config import AppConfig

logger = logging.getLogger(__name__)


def build_app(
    config: AppConfig | dict[str, Any] | None = None,
    client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: The application configuration (AppConfig object or dict)
        client: Optional HTTP client for the backend. When omitted the app
            creates one and closes it on shutdown.

    Returns:
        The FastAPI ASGI application instance.
    """
    if config is None:
        config = AppConfig.from_env()
    elif isinstance(config, dict):
        config = AppConfig(**config)

    owns_client = client is None
    http_client = client or httpx.AsyncClient(timeout=config.copilot.timeout)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            f"Gateway ready, backend {config.copilot.api_base_url}, "
            f"models: {', '.join(config.supported_models)}"
        )
        try:
            yield
        finally:
            if owns_client:
                await http_client.aclose()

    app = FastAPI(title="Gemini Copilot Proxy", version=__version__, lifespan=lifespan)
    app.state.app_config = config
    app.state.backend = CopilotConnector(http_client, config.copilot)

    app.include_router(router)
    configure_exception_handlers(app)
    app.middleware("http")(LoggingMiddleware())

    return app
