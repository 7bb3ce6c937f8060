"""
Common exception classes for the Gemini Copilot proxy.

This module defines the exception hierarchy used by the translation engine,
the backend connector and the HTTP layer. Every exception carries an HTTP
status code hint so transport adapters can map it without type switches.
"""

from __future__ import annotations

from typing import Any


class GatewayError(Exception):
    """Base exception class for all gateway errors."""

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        *,
        status_code: int | None = None,
        **kwargs: Any,
    ):
        """Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error details
            status_code: Optional HTTP status code hint for transport adapters
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.status_code = status_code or 500
        for key, value in (kwargs or {}).items():
            setattr(self, key, value)

    def to_dict(self) -> dict[str, Any]:
        error_dict: dict[str, Any] = {
            "message": self.message,
            "type": self.__class__.__name__,
            "code": self.status_code,
        }
        if self.details:
            error_dict["details"] = self.details
        return {"error": error_dict}


class InvalidRequestError(GatewayError):
    """Raised when an inbound request is malformed or unsupported."""

    def __init__(
        self, message: str = "Invalid request", details: dict | None = None, **kwargs
    ):
        super().__init__(message, details, status_code=400, **kwargs)


class SchemaValidationError(GatewayError):
    """Raised when an outbound schema is not strict-mode compliant.

    The message is the full formatted report of every violation found.
    """

    def __init__(
        self,
        message: str = "Schema validation failed",
        details: dict | None = None,
        **kwargs,
    ):
        super().__init__(message, details, status_code=400, **kwargs)


class TranslationError(GatewayError):
    """Raised when a backend response cannot be mapped to the Gemini shape."""

    def __init__(
        self,
        message: str = "Response translation failed",
        details: dict | None = None,
        **kwargs,
    ):
        super().__init__(message, details, status_code=502, **kwargs)


class BackendError(GatewayError):
    """Raised when the backend call fails or answers with a non-2xx status.

    ``body`` holds the upstream response body verbatim.
    """

    def __init__(
        self,
        message: str = "Backend operation failed",
        backend_name: str | None = None,
        details: dict | None = None,
        body: str | None = None,
        **kwargs,
    ):
        status_code = kwargs.pop("status_code", 502)
        super().__init__(message, details, status_code=status_code, **kwargs)
        self.backend_name = backend_name
        self.body = body


class AuthenticationError(GatewayError):
    """Raised when no backend credentials are available."""

    def __init__(
        self,
        message: str = "Authentication failed",
        details: dict | None = None,
        **kwargs,
    ):
        super().__init__(message, details, status_code=401, **kwargs)


class ServiceUnavailableError(GatewayError):
    """Raised when the backend cannot be reached."""

    def __init__(
        self,
        message: str = "Service temporarily unavailable",
        details: dict | None = None,
        **kwargs,
    ):
        super().__init__(message, details, status_code=503, **kwargs)


class ConfigurationError(GatewayError):
    """Raised when there's a configuration issue."""

    def __init__(
        self,
        message: str = "Configuration error",
        details: dict | None = None,
        **kwargs,
    ):
        super().__init__(message, details, status_code=500, **kwargs)
