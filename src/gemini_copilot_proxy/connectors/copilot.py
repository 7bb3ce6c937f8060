from __future__ import annotations

import contextlib
import json
import logging
import uuid
from collections.abc import AsyncGenerator
from typing import Any

import httpx

from gemini_copilot_proxy.connectors.base import LLMBackend
from gemini_copilot_proxy.connectors.streaming_utils import iter_sse_data
from gemini_copilot_proxy.core.common.exceptions import (
    AuthenticationError,
    BackendError,
    ServiceUnavailableError,
)
from gemini_copilot_proxy.core.config.app_config import CopilotBackendConfig
from gemini_copilot_proxy.core.constants import COPILOT_OPENAI_INTENT
from gemini_copilot_proxy.core.domain.chat import ChatCompletionsRequest
from gemini_copilot_proxy.core.domain.responses import (
    ResponseEnvelope,
    StreamingResponseEnvelope,
)

logger = logging.getLogger(__name__)

_AGENT_ROLES = {"assistant", "tool"}


class CopilotConnector(LLMBackend):
    """Connector for the GitHub Copilot chat completions API.

    The Copilot token is read from configuration; obtaining and refreshing it
    is left to the operator.
    """

    backend_type: str = "copilot"

    def __init__(self, client: httpx.AsyncClient, config: CopilotBackendConfig) -> None:
        self.client = client
        self.config = config

    @property
    def chat_completions_url(self) -> str:
        return f"{self.config.api_base_url.rstrip('/')}/chat/completions"

    def build_headers(self, request: ChatCompletionsRequest) -> dict[str, str]:
        """Return the Copilot request headers for ``request``.

        ``X-Initiator`` is ``agent`` once the conversation contains assistant
        or tool turns. ``Copilot-Vision-Request`` is only set when a message
        carries an image.
        """
        if not self.config.token:
            raise AuthenticationError(message="No Copilot token configured")

        headers = {
            "Authorization": f"Bearer {self.config.token}",
            "Content-Type": "application/json",
            "Copilot-Integration-Id": self.config.integration_id,
            "Editor-Version": self.config.editor_version,
            "Editor-Plugin-Version": self.config.editor_plugin_version,
            "User-Agent": self.config.user_agent,
            "OpenAI-Intent": COPILOT_OPENAI_INTENT,
            "X-GitHub-Api-Version": self.config.api_version,
            "X-Request-Id": str(uuid.uuid4()),
        }
        is_agent_call = any(m.role in _AGENT_ROLES for m in request.messages)
        headers["X-Initiator"] = "agent" if is_agent_call else "user"
        if any(m.has_image for m in request.messages):
            headers["Copilot-Vision-Request"] = "true"
        return headers

    async def chat_completions(
        self, request: ChatCompletionsRequest
    ) -> ResponseEnvelope | StreamingResponseEnvelope:
        headers = self.build_headers(request)
        payload = request.to_payload()

        if payload.get("tools"):
            logger.debug(
                "Sending %d tools, payload size: %.2f KB",
                len(payload["tools"]),
                len(json.dumps(payload).encode("utf-8")) / 1024,
            )

        if request.stream:
            return await self._handle_streaming_response(payload, headers)
        return await self._handle_non_streaming_response(payload, headers)

    async def _handle_non_streaming_response(
        self, payload: dict[str, Any], headers: dict[str, str]
    ) -> ResponseEnvelope:
        try:
            response = await self.client.post(
                self.chat_completions_url,
                json=payload,
                headers=headers,
                timeout=self.config.timeout,
            )
        except httpx.RequestError as e:
            raise ServiceUnavailableError(
                message=f"Could not connect to backend ({e})"
            ) from e

        if response.status_code >= 400:
            self._raise_backend_error(response.status_code, response.text)

        try:
            content = response.json()
        except ValueError as e:
            raise BackendError(
                message="Backend returned a non-JSON response",
                backend_name=self.backend_type,
                body=response.text,
            ) from e

        return ResponseEnvelope(
            content=content,
            status_code=response.status_code,
            headers=dict(response.headers),
        )

    async def _handle_streaming_response(
        self, payload: dict[str, Any], headers: dict[str, str]
    ) -> StreamingResponseEnvelope:
        request = self.client.build_request(
            "POST",
            self.chat_completions_url,
            json=payload,
            headers=headers,
            timeout=self.config.timeout,
        )
        try:
            response = await self.client.send(request, stream=True)
        except httpx.RequestError as exc:
            raise ServiceUnavailableError(
                message=f"Could not connect to backend ({exc})"
            ) from exc

        if response.status_code >= 400:
            try:
                body = (await response.aread()).decode("utf-8", errors="replace")
            finally:
                await response.aclose()
            self._raise_backend_error(response.status_code, body)

        async def gen() -> AsyncGenerator[str, None]:
            try:
                async for data in iter_sse_data(response.aiter_lines()):
                    yield data
            finally:
                with contextlib.suppress(httpx.HTTPError):
                    await response.aclose()

        return StreamingResponseEnvelope(
            content=gen(),
            headers={"Cache-Control": "no-cache"},
        )

    def _raise_backend_error(self, status_code: int, body: str) -> None:
        logger.error(
            "Copilot chat completions failed with status %s: %s", status_code, body
        )
        raise BackendError(
            message=body,
            backend_name=self.backend_type,
            body=body,
            status_code=status_code,
        )
