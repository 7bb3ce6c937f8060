from __future__ import annotations

import abc

from gemini_copilot_proxy.core.domain.chat import ChatCompletionsRequest
from gemini_copilot_proxy.core.domain.responses import (
    ResponseEnvelope,
    StreamingResponseEnvelope,
)


class LLMBackend(abc.ABC):
    """
    Abstract base class for chat completions backends.
    """

    backend_type: str

    @abc.abstractmethod
    async def chat_completions(
        self, request: ChatCompletionsRequest
    ) -> ResponseEnvelope | StreamingResponseEnvelope:
        """
        Forwards a chat completion request to the backend.

        Args:
            request: The translated chat completions request

        Returns:
            A ResponseEnvelope for non-streaming requests or a
            StreamingResponseEnvelope whose iterator yields the raw ``data``
            payload of each server-sent event.
        """
