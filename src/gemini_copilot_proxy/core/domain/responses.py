from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any

from gemini_copilot_proxy.core.interfaces.model_bases import InternalDTO


@dataclass
class ResponseEnvelope(InternalDTO):
    """Transport-agnostic container for a complete backend response.

    Decouples the backend connector from FastAPI/Starlette responses; the
    controller maps it to the transport-specific type.
    """

    content: Any  # Decoded JSON body
    headers: dict[str, str] | None = None
    status_code: int = 200
    media_type: str = "application/json"


@dataclass
class StreamingResponseEnvelope(InternalDTO):
    """Transport-agnostic container for a streamed backend response.

    ``content`` yields the ``data`` payload of each server-sent event, in
    arrival order and untranslated.
    """

    content: AsyncIterator[str]
    media_type: str = "text/event-stream"
    headers: dict[str, str] | None = None
