from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from gemini_copilot_proxy.core.common.exceptions import BackendError, GatewayError
from gemini_copilot_proxy.core.constants import HTTP_500_INTERNAL_SERVER_ERROR_MESSAGE

logger = logging.getLogger(__name__)


async def gateway_exception_handler(request: Request, exc: GatewayError) -> Response:
    """Handle GatewayError exceptions.

    Every gateway error renders as one JSON error object with the status code
    the exception carries.

    Args:
        request: The request that caused the exception
        exc: The GatewayError exception

    Returns:
        A JSON response with error details
    """
    if logger.isEnabledFor(logging.WARNING):
        logger.warning(
            f"{exc.__class__.__name__} ({exc.status_code}) on {request.url.path}: "
            f"{exc.message}"
        )
    if exc.details and logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"Error details: {exc.details}")

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def backend_exception_handler(request: Request, exc: BackendError) -> Response:
    """Handle BackendError exceptions.

    The upstream status code is kept and the upstream body is passed through
    verbatim as the error message.
    """
    if logger.isEnabledFor(logging.WARNING):
        logger.warning(
            f"Backend error ({exc.status_code}) on {request.url.path}: {exc.body}"
        )

    content = {
        "error": {
            "message": exc.body if exc.body is not None else exc.message,
            "type": exc.__class__.__name__,
            "code": exc.status_code,
        }
    }
    return JSONResponse(status_code=exc.status_code, content=content)


async def general_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle unexpected exceptions.

    Args:
        request: The request that caused the exception
        exc: The exception

    Returns:
        JSON response with a generic error message
    """
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "message": HTTP_500_INTERNAL_SERVER_ERROR_MESSAGE,
                "type": "InternalError",
                "code": 500,
            }
        },
    )


def configure_exception_handlers(app: FastAPI) -> None:
    """Configure exception handlers for the application.

    Args:
        app: The FastAPI application
    """
    app.add_exception_handler(BackendError, backend_exception_handler)  # type: ignore
    app.add_exception_handler(GatewayError, gateway_exception_handler)  # type: ignore
    app.add_exception_handler(Exception, general_exception_handler)
