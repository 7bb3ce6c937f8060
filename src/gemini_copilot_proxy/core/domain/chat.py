"""Outbound chat completions request models."""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from gemini_copilot_proxy.core.interfaces.model_bases import DomainModel


# For multimodal content parts
class MessageContentPartText(DomainModel):
    """Represents a text content part in a multimodal message."""

    type: str = "text"
    text: str


class ImageURL(DomainModel):
    """Specifies the URL and optional detail for an image in a multimodal message."""

    # A data URI ("data:image/png;base64,...") for inline media
    url: str
    detail: str | None = Field(None, examples=["auto", "low", "high"])


class MessageContentPartImage(DomainModel):
    """Represents an image content part in a multimodal message."""

    type: str = "image_url"
    image_url: ImageURL


MessageContentPart = MessageContentPartText | MessageContentPartImage
"""Type alias for possible content parts in a multimodal message."""


class FunctionCall(DomainModel):
    """Represents a function call within a tool call."""

    name: str
    arguments: str  # JSON-encoded object


class ToolCall(DomainModel):
    """Represents a tool call issued by the assistant."""

    id: str
    type: str = "function"
    function: FunctionCall


class ChatMessage(DomainModel):
    """
    A chat message in a conversation.
    """

    role: str
    content: str | list[MessageContentPart] | None = None
    name: str | None = None
    tool_calls: list[ToolCall] | None = None
    tool_call_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert the message to its wire dictionary.

        ``content`` is always present (possibly ``None``); the other optional
        keys only when set.
        """
        result: dict[str, Any] = {"role": self.role}
        if isinstance(self.content, list):
            result["content"] = [
                part.model_dump(exclude_none=True) for part in self.content
            ]
        else:
            result["content"] = self.content
        if self.name:
            result["name"] = self.name
        if self.tool_calls:
            result["tool_calls"] = [tc.model_dump() for tc in self.tool_calls]
        if self.tool_call_id:
            result["tool_call_id"] = self.tool_call_id
        return result

    @property
    def has_image(self) -> bool:
        return isinstance(self.content, list) and any(
            isinstance(part, MessageContentPartImage) for part in self.content
        )


class ChatCompletionsRequest(DomainModel):
    """
    A request for a chat completion.
    """

    model: str
    messages: list[ChatMessage]
    temperature: float | None = None
    top_p: float | None = None
    max_tokens: int | None = None
    stop: list[str] | str | None = None
    n: int | None = None
    tools: list[dict[str, Any]] | None = None
    tool_choice: str | dict[str, Any] | None = None
    response_format: dict[str, Any] | None = None
    stream: bool = False

    @field_validator("messages")
    @classmethod
    def validate_messages(cls, v: list[Any]) -> list[ChatMessage]:
        """Validate and convert messages."""
        return [m if isinstance(m, ChatMessage) else ChatMessage(**m) for m in v]

    def to_payload(self) -> dict[str, Any]:
        """
        Build the JSON body sent to the backend.

        Returns:
            A dictionary with unset optional fields omitted
        """
        result: dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_dict() for m in self.messages],
        }

        for field_name in type(self).model_fields:
            if field_name in ("model", "messages"):
                continue
            value = getattr(self, field_name)
            if value is not None:
                result[field_name] = value

        return result
