"""
Gemini API endpoints.

Accepts ``generateContent`` and ``streamGenerateContent`` calls, translates
them for the Copilot chat completions backend and translates the answer
back into the Gemini response shape.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import AsyncIterator
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse

from gemini_copilot_proxy.connectors.base import LLMBackend
from gemini_copilot_proxy.core.common.exceptions import (
    GatewayError,
    InvalidRequestError,
    TranslationError,
)
from gemini_copilot_proxy.core.config.app_config import AppConfig
from gemini_copilot_proxy.core.constants import (
    INVALID_JSON_BODY_MESSAGE,
    MISSING_CONTENTS_MESSAGE,
    MISSING_MODEL_MESSAGE,
    STREAM_DONE_SENTINEL,
)
from gemini_copilot_proxy.core.domain.gemini_translation import (
    gemini_request_to_openai_request,
    is_empty_gemini_chunk,
    openai_chunk_to_gemini_chunk,
    openai_response_to_gemini_response,
    prune_empty_candidates,
)
from gemini_copilot_proxy.core.domain.responses import StreamingResponseEnvelope
from gemini_copilot_proxy.gemini_models import ListModelsResponse, Model

logger = logging.getLogger(__name__)

router = APIRouter()

_MODEL_PATH_PATTERN = re.compile(r"/models/([^:]+):")


def extract_model_from_path(path: str) -> str | None:
    """Return the model name between ``/models/`` and ``:`` in ``path``."""
    match = _MODEL_PATH_PATTERN.search(path)
    return match.group(1) if match else None


def is_streaming_request(path: str) -> bool:
    return "streamGenerateContent" in path


def _get_backend(request: Request) -> LLMBackend:
    backend: LLMBackend | None = getattr(request.app.state, "backend", None)
    if backend is None:
        raise GatewayError("Backend connector is not initialized", status_code=503)
    return backend


def _get_config(request: Request) -> AppConfig:
    config: AppConfig | None = getattr(request.app.state, "app_config", None)
    return config if config is not None else AppConfig()


def _encode_event(payload: dict[str, Any]) -> bytes:
    return f"data: {json.dumps(payload)}\n\n".encode()


async def _translate_stream(events: AsyncIterator[str]) -> AsyncIterator[bytes]:
    """Translate backend SSE payloads into Gemini SSE events, one by one."""
    received = 0
    emitted = 0
    try:
        async for data in events:
            received += 1
            if data.strip() == STREAM_DONE_SENTINEL:
                break
            if not data.strip():
                continue

            try:
                chunk = json.loads(data)
                gemini_chunk = prune_empty_candidates(
                    openai_chunk_to_gemini_chunk(chunk)
                )
            except (ValueError, AttributeError, TypeError, TranslationError) as e:
                logger.error(f"Skipping unparseable stream event #{received}: {e}")
                continue

            if is_empty_gemini_chunk(gemini_chunk):
                continue

            emitted += 1
            yield _encode_event(gemini_chunk)
    finally:
        aclose = getattr(events, "aclose", None)
        if aclose is not None:
            await aclose()

    logger.info(f"Stream complete: {received} events received, {emitted} emitted")


async def generate_content(model_action: str, request: Request) -> Response:
    """Handle ``{model}:generateContent`` and ``{model}:streamGenerateContent``."""
    try:
        body = await request.json()
    except ValueError as e:
        logger.error(f"Failed to parse JSON request body: {e}")
        raise InvalidRequestError(INVALID_JSON_BODY_MESSAGE) from e

    if not isinstance(body, dict) or not isinstance(body.get("contents"), list):
        raise InvalidRequestError(MISSING_CONTENTS_MESSAGE)

    path = request.url.path
    model = extract_model_from_path(path)
    if not model:
        logger.error(f"Could not extract model from path: {path}")
        raise InvalidRequestError(MISSING_MODEL_MESSAGE)

    supported = _get_config(request).supported_models
    if model not in supported:
        raise InvalidRequestError(
            f"Unsupported model: {model}. Supported models: {', '.join(supported)}"
        )

    streaming = is_streaming_request(path)
    chat_request = gemini_request_to_openai_request(body, model, stream=streaming)
    if chat_request.tools:
        logger.info(f"Request includes {len(chat_request.tools)} tool(s)")

    backend = _get_backend(request)
    result = await backend.chat_completions(chat_request)

    if isinstance(result, StreamingResponseEnvelope):
        return StreamingResponse(
            _translate_stream(result.content),
            media_type="text/event-stream",
            headers=result.headers,
        )

    return JSONResponse(content=openai_response_to_gemini_response(result.content))


def _model_info(name: str) -> Model:
    return Model(
        name=f"models/{name}",
        baseModelId=name,
        version="001",
        displayName=name,
        description=f"{name} served through GitHub Copilot",
        inputTokenLimit=1048576,
        outputTokenLimit=65536,
        supportedGenerationMethods=["generateContent", "streamGenerateContent"],
    )


async def list_models(request: Request) -> dict[str, Any]:
    """List the allow-listed models in the Gemini format."""
    models = [_model_info(name) for name in _get_config(request).supported_models]
    return ListModelsResponse(models=models).model_dump(
        by_alias=True, exclude_none=True
    )


async def health() -> dict[str, str]:
    return {"status": "ok"}


for _prefix in ("/v1beta", "/v1"):
    router.add_api_route(
        f"{_prefix}/models/{{model_action}}", generate_content, methods=["POST"]
    )
    router.add_api_route(f"{_prefix}/models", list_models, methods=["GET"])
router.add_api_route("/health", health, methods=["GET"])
