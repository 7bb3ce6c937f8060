"""Translation of plain (non tool) Gemini turns into chat messages."""

from __future__ import annotations

from collections.abc import Iterable

from gemini_copilot_proxy.core.domain.chat import (
    ChatMessage,
    ImageURL,
    MessageContentPart,
    MessageContentPartImage,
    MessageContentPartText,
)
from gemini_copilot_proxy.gemini_models import (
    Blob,
    Content,
    InlineDataPart,
    Part,
    TextPart,
)

TEXT_SEPARATOR = "\n\n"

_ROLE_MAP = {
    "model": "assistant",
    "user": "user",
    "system": "system",
}


def map_role(role: str | None) -> str:
    """Map a Gemini role to a chat completions role."""
    if role is None:
        return "user"
    return _ROLE_MAP.get(role, "user")


def join_text(texts: Iterable[str]) -> str:
    return TEXT_SEPARATOR.join(texts)


def to_data_uri(blob: Blob) -> str:
    return f"data:{blob.mime_type};base64,{blob.data}"


def translate_parts(parts: list[Part]) -> str | list[MessageContentPart] | None:
    """Translate the parts of a plain turn into message content.

    Text-only turns become one string. Any inline media switches the whole
    turn to a list of text and image entries, in part order.
    """
    if not any(isinstance(p, InlineDataPart) for p in parts):
        return join_text(p.text for p in parts if isinstance(p, TextPart))

    content: list[MessageContentPart] = []
    for part in parts:
        if isinstance(part, TextPart):
            content.append(MessageContentPartText(text=part.text))
        elif isinstance(part, InlineDataPart):
            content.append(
                MessageContentPartImage(
                    image_url=ImageURL(url=to_data_uri(part.inline_data))
                )
            )
    return content or None


def content_to_message(content: Content) -> ChatMessage:
    return ChatMessage(role=map_role(content.role), content=translate_parts(content.parts))
