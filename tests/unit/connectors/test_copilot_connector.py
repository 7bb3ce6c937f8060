"""
Tests for the Copilot chat completions connector.
"""

from __future__ import annotations

import json

import httpx
import pytest
from gemini_copilot_proxy.connectors.copilot import CopilotConnector
from gemini_copilot_proxy.core.common.exceptions import (
    AuthenticationError,
    BackendError,
    ServiceUnavailableError,
)
from gemini_copilot_proxy.core.config.app_config import CopilotBackendConfig
from gemini_copilot_proxy.core.domain.chat import (
    ChatCompletionsRequest,
    ChatMessage,
    ImageURL,
    MessageContentPartImage,
    MessageContentPartText,
)
from gemini_copilot_proxy.core.domain.responses import (
    ResponseEnvelope,
    StreamingResponseEnvelope,
)

URL = "https://copilot.test/chat/completions"


def _request(*messages: ChatMessage, stream: bool = False) -> ChatCompletionsRequest:
    return ChatCompletionsRequest(
        model="gemini-2.5-pro",
        messages=list(messages) or [ChatMessage(role="user", content="Hi")],
        stream=stream,
    )


class TestBuildHeaders:
    def test_user_initiated_text_request(self, copilot_config) -> None:
        connector = CopilotConnector(httpx.AsyncClient(), copilot_config)

        headers = connector.build_headers(_request())

        assert headers["Authorization"] == f"Bearer {copilot_config.token}"
        assert headers["Copilot-Integration-Id"] == "vscode-chat"
        assert headers["X-Initiator"] == "user"
        assert headers["X-GitHub-Api-Version"] == copilot_config.api_version
        assert headers["X-Request-Id"]
        assert "Copilot-Vision-Request" not in headers

    def test_agent_initiated_request(self, copilot_config) -> None:
        connector = CopilotConnector(httpx.AsyncClient(), copilot_config)
        request = _request(
            ChatMessage(role="user", content="Hi"),
            ChatMessage(role="tool", content="{}", tool_call_id="call_1"),
        )

        assert connector.build_headers(request)["X-Initiator"] == "agent"

    def test_vision_request(self, copilot_config) -> None:
        connector = CopilotConnector(httpx.AsyncClient(), copilot_config)
        request = _request(
            ChatMessage(
                role="user",
                content=[
                    MessageContentPartText(text="What is this?"),
                    MessageContentPartImage(
                        image_url=ImageURL(url="data:image/png;base64,AA==")
                    ),
                ],
            )
        )

        assert connector.build_headers(request)["Copilot-Vision-Request"] == "true"

    def test_missing_token(self) -> None:
        connector = CopilotConnector(httpx.AsyncClient(), CopilotBackendConfig())

        with pytest.raises(AuthenticationError):
            connector.build_headers(_request())


@pytest.mark.asyncio
@pytest.mark.httpx_mock()
async def test_non_streaming_response(httpx_mock, copilot_config) -> None:
    body = {"choices": [{"message": {"content": "Hello"}, "finish_reason": "stop"}]}
    httpx_mock.add_response(url=URL, method="POST", json=body)

    async with httpx.AsyncClient() as client:
        result = await CopilotConnector(client, copilot_config).chat_completions(
            _request()
        )

    assert isinstance(result, ResponseEnvelope)
    assert result.content == body
    sent = httpx_mock.get_requests()[0]
    assert json.loads(sent.content) == {
        "model": "gemini-2.5-pro",
        "messages": [{"role": "user", "content": "Hi"}],
        "stream": False,
    }
    assert sent.headers["Authorization"] == f"Bearer {copilot_config.token}"


@pytest.mark.asyncio
@pytest.mark.httpx_mock()
async def test_non_2xx_preserves_status_and_body(httpx_mock, copilot_config) -> None:
    httpx_mock.add_response(
        url=URL, method="POST", status_code=429, text='{"error": "rate limited"}'
    )

    async with httpx.AsyncClient() as client:
        with pytest.raises(BackendError) as exc_info:
            await CopilotConnector(client, copilot_config).chat_completions(_request())

    assert exc_info.value.status_code == 429
    assert exc_info.value.body == '{"error": "rate limited"}'


@pytest.mark.asyncio
@pytest.mark.httpx_mock()
async def test_connection_failure(httpx_mock, copilot_config) -> None:
    httpx_mock.add_exception(httpx.ConnectError("refused"))

    async with httpx.AsyncClient() as client:
        with pytest.raises(ServiceUnavailableError):
            await CopilotConnector(client, copilot_config).chat_completions(_request())


@pytest.mark.asyncio
@pytest.mark.httpx_mock()
async def test_streaming_yields_sse_payloads(httpx_mock, copilot_config) -> None:
    stream_body = (
        b'data: {"choices": [{"delta": {"content": "He"}}]}\n\n'
        b": keep-alive\n\n"
        b'data: {"choices": [{"delta": {"content": "llo"}}]}\n\n'
        b"data: [DONE]\n\n"
    )
    httpx_mock.add_response(url=URL, method="POST", content=stream_body)

    async with httpx.AsyncClient() as client:
        result = await CopilotConnector(client, copilot_config).chat_completions(
            _request(stream=True)
        )
        assert isinstance(result, StreamingResponseEnvelope)
        events = [data async for data in result.content]

    assert events == [
        '{"choices": [{"delta": {"content": "He"}}]}',
        '{"choices": [{"delta": {"content": "llo"}}]}',
        "[DONE]",
    ]
    assert json.loads(httpx_mock.get_requests()[0].content)["stream"] is True


@pytest.mark.asyncio
@pytest.mark.httpx_mock()
async def test_streaming_error_is_raised_before_streaming(
    httpx_mock, copilot_config
) -> None:
    httpx_mock.add_response(url=URL, method="POST", status_code=400, text="bad model")

    async with httpx.AsyncClient() as client:
        with pytest.raises(BackendError) as exc_info:
            await CopilotConnector(client, copilot_config).chat_completions(
                _request(stream=True)
            )

    assert exc_info.value.status_code == 400
    assert exc_info.value.body == "bad model"
