"""
Pydantic models for Google Gemini API request structures.

Parts are modelled as a closed union (text, inline media, function call,
function response). Raw JSON parts are classified once, when a ``Content``
is validated, so the translation code works on typed parts only.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any, Union

from pydantic import ConfigDict, Field, field_validator

from gemini_copilot_proxy.core.interfaces.model_bases import DomainModel

logger = logging.getLogger(__name__)


class FinishReason(str, Enum):
    """Finish reasons for candidate responses."""

    FINISH_REASON_UNSPECIFIED = "FINISH_REASON_UNSPECIFIED"
    STOP = "STOP"
    MAX_TOKENS = "MAX_TOKENS"
    SAFETY = "SAFETY"
    RECITATION = "RECITATION"
    OTHER = "OTHER"


class Blob(DomainModel):
    """Raw bytes data with MIME type."""

    model_config = ConfigDict(populate_by_name=True)

    mime_type: str = Field(alias="mimeType")
    data: str  # Base64 encoded data


class FunctionCall(DomainModel):
    """A function call issued by the model."""

    name: str
    args: dict[str, Any] | None = None
    # Set by some clients; never forwarded, ids are synthesized per request
    id: str | None = None


class FunctionResponse(DomainModel):
    """The result of a function call, sent back by the client."""

    id: str | None = None
    name: str = ""
    response: Any = None


class TextPart(DomainModel):
    text: str


class InlineDataPart(DomainModel):
    model_config = ConfigDict(populate_by_name=True)

    inline_data: Blob = Field(alias="inlineData")


class FunctionCallPart(DomainModel):
    model_config = ConfigDict(populate_by_name=True)

    function_call: FunctionCall = Field(alias="functionCall")


class FunctionResponsePart(DomainModel):
    model_config = ConfigDict(populate_by_name=True)

    function_response: FunctionResponse = Field(alias="functionResponse")


Part = Union[TextPart, InlineDataPart, FunctionCallPart, FunctionResponsePart]

_PART_CLASSES = (TextPart, InlineDataPart, FunctionCallPart, FunctionResponsePart)


def parse_part(raw: Any) -> Part | None:
    """Classify a raw JSON part into one of the typed part models.

    Returns None for parts that carry none of the supported payloads
    (``fileData``, ``thought``, ``executableCode`` and similar).
    """
    if isinstance(raw, _PART_CLASSES):
        return raw
    if not isinstance(raw, Mapping):
        logger.debug("Ignoring non-object part: %r", raw)
        return None

    if "functionCall" in raw or "function_call" in raw:
        return FunctionCallPart.model_validate(raw)
    if "functionResponse" in raw or "function_response" in raw:
        return FunctionResponsePart.model_validate(raw)
    if "inlineData" in raw or "inline_data" in raw:
        return InlineDataPart.model_validate(raw)
    if "text" in raw:
        return TextPart.model_validate(raw)

    logger.debug("Ignoring unsupported part with keys %s", sorted(raw.keys()))
    return None


class Content(DomainModel):
    """Content of a conversation turn."""

    parts: list[Part] = Field(default_factory=list)
    role: str | None = None  # "user", "model" or absent

    @field_validator("parts", mode="before")
    @classmethod
    def _classify_parts(cls, v: Any) -> Any:
        if v is None:
            return []
        if not isinstance(v, list):
            return v
        parts = []
        for raw in v:
            part = parse_part(raw)
            if part is not None:
                parts.append(part)
        return parts

    @property
    def function_calls(self) -> list[FunctionCall]:
        return [p.function_call for p in self.parts if isinstance(p, FunctionCallPart)]

    @property
    def function_responses(self) -> list[FunctionResponse]:
        return [
            p.function_response
            for p in self.parts
            if isinstance(p, FunctionResponsePart)
        ]

    @property
    def text_parts(self) -> list[str]:
        return [p.text for p in self.parts if isinstance(p, TextPart)]

    @property
    def has_inline_data(self) -> bool:
        return any(isinstance(p, InlineDataPart) for p in self.parts)


class GenerationConfig(DomainModel):
    """Configuration options for model generation."""

    model_config = ConfigDict(populate_by_name=True)

    stop_sequences: list[str] | None = Field(None, alias="stopSequences")
    response_mime_type: str | None = Field(None, alias="responseMimeType")
    response_schema: dict[str, Any] | None = Field(None, alias="responseSchema")
    candidate_count: int | None = Field(None, alias="candidateCount")
    max_output_tokens: int | None = Field(None, alias="maxOutputTokens")
    temperature: float | None = None
    top_p: float | None = Field(None, alias="topP")
    top_k: int | None = Field(None, alias="topK")


class FunctionDeclaration(DomainModel):
    """A function the model may call.

    ``parameters`` is sent by the public Gemini API, ``parametersJsonSchema``
    by gemini-cli. ``responseJsonSchema`` describes the function's result and
    has no counterpart in the chat completions dialect.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str | None = None
    parameters: dict[str, Any] | None = None
    parameters_json_schema: dict[str, Any] | None = Field(
        None, alias="parametersJsonSchema"
    )
    response_json_schema: Any = Field(None, alias="responseJsonSchema")


class Tool(DomainModel):
    model_config = ConfigDict(populate_by_name=True)

    function_declarations: list[FunctionDeclaration] | None = Field(
        None, alias="functionDeclarations"
    )


class FunctionCallingConfig(DomainModel):
    model_config = ConfigDict(populate_by_name=True)

    mode: str | None = None
    allowed_function_names: list[str] | None = Field(
        None, alias="allowedFunctionNames"
    )


class ToolConfig(DomainModel):
    model_config = ConfigDict(populate_by_name=True)

    function_calling_config: FunctionCallingConfig | None = Field(
        None, alias="functionCallingConfig"
    )


class GenerateContentRequest(DomainModel):
    """Request for generating content with Gemini."""

    model_config = ConfigDict(populate_by_name=True)

    contents: list[Content]
    tools: list[Tool] | None = None
    tool_config: ToolConfig | None = Field(None, alias="toolConfig")
    # Accepted for compatibility; the backend has no equivalent setting
    safety_settings: list[dict[str, Any]] | None = Field(None, alias="safetySettings")
    system_instruction: Content | None = Field(None, alias="systemInstruction")
    generation_config: GenerationConfig | None = Field(None, alias="generationConfig")

    @field_validator("system_instruction", mode="before")
    @classmethod
    def _wrap_plain_instruction(cls, v: Any) -> Any:
        if isinstance(v, str):
            return {"parts": [{"text": v}]}
        return v


class Model(DomainModel):
    """Information about a Gemini model."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    base_model_id: str | None = Field(None, alias="baseModelId")
    version: str
    display_name: str = Field(alias="displayName")
    description: str
    input_token_limit: int = Field(alias="inputTokenLimit")
    output_token_limit: int = Field(alias="outputTokenLimit")
    supported_generation_methods: list[str] = Field(
        alias="supportedGenerationMethods"
    )


class ListModelsResponse(DomainModel):
    """Response from listing available models."""

    model_config = ConfigDict(populate_by_name=True)

    models: list[Model]
    next_page_token: str | None = Field(None, alias="nextPageToken")
