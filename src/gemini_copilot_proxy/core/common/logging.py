"""
Structured request logging.

This module provides the HTTP middleware that logs each gateway request
and its outcome through structlog.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from gemini_copilot_proxy.core.common.logging_utils import get_logger


class LoggingMiddleware:
    """Middleware for logging requests and responses."""

    def __init__(self, request_logging: bool = True, response_logging: bool = True):
        """Initialize the middleware.

        Args:
            request_logging: Whether to log requests
            response_logging: Whether to log responses
        """
        self.request_logging = request_logging
        self.response_logging = response_logging
        self.logger = get_logger("api")

    async def __call__(self, request: Any, call_next: Any) -> Any:
        """Process the request.

        Args:
            request: The request to process
            call_next: The next middleware to call

        Returns:
            The response
        """
        start_time = datetime.now()

        if self.request_logging:
            client = request.client.host if request.client else "unknown"
            self.logger.info(
                "Request received",
                method=request.method,
                path=request.url.path,
                client=client,
            )

        try:
            response = await call_next(request)

            if self.response_logging:
                duration = datetime.now() - start_time
                self.logger.info(
                    "Response sent",
                    path=request.url.path,
                    status_code=response.status_code,
                    duration_ms=duration.total_seconds() * 1000,
                )

            return response

        except Exception as e:
            duration = datetime.now() - start_time

            self.logger.error(
                "Request failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=duration.total_seconds() * 1000,
                exc_info=True,
            )
            raise
