"""
Gemini translation utilities.

This module translates Gemini ``generateContent`` requests into chat
completions requests for the Copilot backend, and translates complete
chat completions responses and streaming chunks back into the Gemini
response shape.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from gemini_copilot_proxy.core.common.exceptions import (
    InvalidRequestError,
    SchemaValidationError,
    TranslationError,
)
from gemini_copilot_proxy.core.constants import (
    CONTINUATION_PROMPT,
    JSON_MIME_TYPE,
    RESPONSE_SCHEMA_NAME,
)
from gemini_copilot_proxy.core.domain.chat import ChatCompletionsRequest, ChatMessage
from gemini_copilot_proxy.core.domain.content_translation import join_text
from gemini_copilot_proxy.core.domain.schema_rewriter import (
    resolve_parameters_schema,
    rewrite_schema_for_strict_mode,
)
from gemini_copilot_proxy.core.domain.schema_validator import (
    ValidationResult,
    format_validation_errors,
    validate_schema_for_strict_mode,
    validate_tools_for_strict_mode,
)
from gemini_copilot_proxy.core.domain.tool_call_correlation import (
    ToolCallIdFactory,
    correlate_tool_calls,
)
from gemini_copilot_proxy.gemini_models import (
    FinishReason,
    GenerateContentRequest,
    GenerationConfig,
    Tool,
    ToolConfig,
)

logger = logging.getLogger(__name__)

_TOOL_CHOICE_MAP = {
    "AUTO": "auto",
    "ANY": "required",
    "NONE": "none",
}

_FINISH_REASON_MAP = {
    "stop": FinishReason.STOP,
    "length": FinishReason.MAX_TOKENS,
    "content_filter": FinishReason.SAFETY,
    # Gemini has no tool-call finish reason; a call ends the turn normally
    "tool_calls": FinishReason.STOP,
}


# Request translation: Gemini -> chat completions


def gemini_request_to_openai_request(
    request: GenerateContentRequest | Mapping[str, Any],
    model: str,
    *,
    stream: bool = False,
    id_factory: ToolCallIdFactory | None = None,
) -> ChatCompletionsRequest:
    """
    Translate a Gemini request into a chat completions request.

    Args:
        request: The Gemini request, typed or as decoded JSON
        model: Backend model name, taken from the request path
        stream: Whether the backend should stream its answer
        id_factory: Optional tool call id factory, for deterministic ids

    Returns:
        The outbound request

    Raises:
        InvalidRequestError: If a raw request does not match the Gemini shape
        SchemaValidationError: If a tool or response schema is not strict-mode
            compliant
    """
    if not isinstance(request, GenerateContentRequest):
        try:
            request = GenerateContentRequest.model_validate(request)
        except ValidationError as e:
            errors = [
                {
                    "loc": list(error.get("loc", [])),
                    "msg": error.get("msg", ""),
                    "type": error.get("type", ""),
                }
                for error in e.errors()
            ]
            raise InvalidRequestError(
                f"Invalid Gemini request: {e.error_count()} validation error(s)",
                details={"errors": errors},
            ) from e

    messages: list[ChatMessage] = []

    if request.system_instruction is not None:
        system_text = join_text(request.system_instruction.text_parts)
        if system_text:
            messages.append(ChatMessage(role="system", content=system_text))

    correlation = correlate_tool_calls(request.contents, id_factory=id_factory)
    messages.extend(correlation.messages)
    if correlation.dropped_duplicates or correlation.dropped_orphans:
        logger.info(
            "Dropped %d duplicate and %d orphaned function responses",
            correlation.dropped_duplicates,
            correlation.dropped_orphans,
        )

    tools = translate_tools(request.tools)
    if tools:
        _raise_for_invalid_schema(
            validate_tools_for_strict_mode(tools), "Invalid tool schema"
        )
        logger.debug("Validated %d tools for strict mode", len(tools))

    config = request.generation_config or GenerationConfig()
    response_format = translate_response_format(config)
    if response_format and response_format["type"] == "json_schema":
        _raise_for_invalid_schema(
            validate_schema_for_strict_mode(response_format["json_schema"]["schema"]),
            "Invalid response schema",
        )

    # The backend rejects conversations that end on a tool result
    if messages and messages[-1].role == "tool":
        logger.info("Conversation ends on a tool message, appending a user turn")
        messages.append(ChatMessage(role="user", content=CONTINUATION_PROMPT))

    return ChatCompletionsRequest(
        model=model,
        messages=messages,
        temperature=config.temperature,
        top_p=config.top_p,
        max_tokens=config.max_output_tokens,
        stop=config.stop_sequences,
        n=config.candidate_count,
        tools=tools,
        tool_choice=translate_tool_choice(request.tool_config),
        response_format=response_format,
        stream=stream,
    )


def _raise_for_invalid_schema(validation: ValidationResult, prefix: str) -> None:
    if validation.valid:
        return
    report = format_validation_errors(validation.errors)
    logger.error("%s for strict mode:\n%s", prefix, report)
    raise SchemaValidationError(
        f"{prefix} for strict mode:\n{report}",
        details={"errors": [issue.to_dict() for issue in validation.errors]},
    )


def translate_tools(tools: list[Tool] | None) -> list[dict[str, Any]] | None:
    """Translate Gemini function declarations into strict function tools.

    ``responseJsonSchema`` has no chat completions counterpart and is dropped.
    """
    if not tools:
        return None

    result: list[dict[str, Any]] = []
    for tool in tools:
        for declaration in tool.function_declarations or []:
            schema = declaration.parameters_json_schema or declaration.parameters
            function: dict[str, Any] = {"name": declaration.name}
            if declaration.description is not None:
                function["description"] = declaration.description
            function["parameters"] = resolve_parameters_schema(schema)
            function["strict"] = True
            result.append({"type": "function", "function": function})

    return result or None


def translate_tool_choice(tool_config: ToolConfig | None) -> str | None:
    """Map a Gemini function calling mode to ``tool_choice``."""
    if tool_config is None or tool_config.function_calling_config is None:
        return None
    mode = tool_config.function_calling_config.mode
    return _TOOL_CHOICE_MAP.get(mode) if mode else None


def translate_response_format(config: GenerationConfig) -> dict[str, Any] | None:
    """Map Gemini structured output settings to ``response_format``."""
    schema = config.response_schema
    if schema:
        return {
            "type": "json_schema",
            "json_schema": {
                "name": RESPONSE_SCHEMA_NAME,
                "schema": rewrite_schema_for_strict_mode(schema),
                "strict": True,
            },
        }
    if config.response_mime_type == JSON_MIME_TYPE:
        return {"type": "json_object"}
    return None


# Response translation: chat completions -> Gemini


def map_finish_reason(finish_reason: str | None) -> FinishReason | None:
    """Map a chat completions finish reason to a Gemini one.

    ``None`` means the choice has not finished yet and maps to ``None`` so the
    field can be omitted; unknown values map to ``OTHER``.
    """
    if finish_reason is None:
        return None
    return _FINISH_REASON_MAP.get(finish_reason, FinishReason.OTHER)


def _parse_arguments(
    name: str, arguments: Any, *, allow_empty: bool = False
) -> dict[str, Any]:
    if isinstance(arguments, Mapping):
        return dict(arguments)
    if not arguments and allow_empty:
        return {}
    try:
        parsed = json.loads(arguments)
    except (TypeError, ValueError) as e:
        raise TranslationError(
            f"Invalid JSON arguments for tool call '{name}': {e}",
            details={"function": name, "arguments": str(arguments)},
        ) from e
    if not isinstance(parsed, dict):
        raise TranslationError(
            f"Arguments for tool call '{name}' must be a JSON object, "
            f"got {type(parsed).__name__}",
            details={"function": name, "arguments": str(arguments)},
        )
    return parsed


def _function_call_part(
    function: Mapping[str, Any], *, allow_empty: bool = False
) -> dict[str, Any]:
    name = function.get("name") or ""
    return {
        "functionCall": {
            "name": name,
            "args": _parse_arguments(
                name, function.get("arguments"), allow_empty=allow_empty
            ),
        }
    }


def _usage_metadata(usage: Mapping[str, Any] | None) -> dict[str, Any]:
    usage = usage or {}
    metadata: dict[str, Any] = {
        "promptTokenCount": usage.get("prompt_tokens") or 0,
        "candidatesTokenCount": usage.get("completion_tokens") or 0,
        "totalTokenCount": usage.get("total_tokens") or 0,
    }
    details = usage.get("prompt_tokens_details") or {}
    if details.get("cached_tokens") is not None:
        metadata["cachedContentTokenCount"] = details["cached_tokens"]
    return metadata


def _candidate(
    parts: list[dict[str, Any]], finish_reason: str | None, index: int
) -> dict[str, Any]:
    candidate: dict[str, Any] = {"content": {"role": "model", "parts": parts}}
    mapped = map_finish_reason(finish_reason)
    if mapped is not None:
        candidate["finishReason"] = mapped.value
    candidate["index"] = index
    return candidate


def openai_response_to_gemini_response(response: Mapping[str, Any]) -> dict[str, Any]:
    """
    Translate a complete chat completions response into a Gemini response.

    Args:
        response: The decoded backend response

    Returns:
        A Gemini ``GenerateContentResponse`` dictionary

    Raises:
        TranslationError: If a tool call carries arguments that are not a
            JSON object
    """
    candidates = []
    for position, choice in enumerate(response.get("choices") or []):
        message = choice.get("message") or {}
        parts: list[dict[str, Any]] = []
        if message.get("content"):
            parts.append({"text": message["content"]})
        for tool_call in message.get("tool_calls") or []:
            parts.append(_function_call_part(tool_call.get("function") or {}))

        finish_reason = choice.get("finish_reason")
        mapped = map_finish_reason(finish_reason)
        if mapped is None or mapped is FinishReason.OTHER:
            logger.debug(
                "Backend finish_reason %r mapped to %s (tool_calls: %s)",
                finish_reason,
                mapped,
                bool(message.get("tool_calls")),
            )
        candidates.append(
            _candidate(parts, finish_reason, choice.get("index", position))
        )

    result: dict[str, Any] = {
        "candidates": candidates,
        "usageMetadata": _usage_metadata(response.get("usage")),
    }
    if response.get("model"):
        result["modelVersion"] = response["model"]
    return result


def openai_chunk_to_gemini_chunk(chunk: Mapping[str, Any]) -> dict[str, Any]:
    """
    Translate one streaming chunk into a Gemini streaming response.

    Tool call fragments without a function name continue an earlier call and
    are dropped; name-bearing fragments are parsed with whatever arguments
    they carry.

    Raises:
        TranslationError: If a name-bearing fragment has unparseable arguments
    """
    candidates = []
    for position, choice in enumerate(chunk.get("choices") or []):
        delta = choice.get("delta") or {}
        parts: list[dict[str, Any]] = []
        if delta.get("content"):
            parts.append({"text": delta["content"]})
        for tool_call in delta.get("tool_calls") or []:
            function = tool_call.get("function") or {}
            if function.get("name"):
                parts.append(_function_call_part(function, allow_empty=True))
        candidates.append(
            _candidate(parts, choice.get("finish_reason"), choice.get("index", position))
        )

    result: dict[str, Any] = {"candidates": candidates}
    if chunk.get("usage"):
        result["usageMetadata"] = _usage_metadata(chunk["usage"])
    if chunk.get("model"):
        result["modelVersion"] = chunk["model"]
    return result


def prune_empty_candidates(chunk: dict[str, Any]) -> dict[str, Any]:
    """Drop candidates that carry neither parts nor a finish reason."""
    chunk["candidates"] = [
        candidate
        for candidate in chunk.get("candidates") or []
        if candidate.get("content", {}).get("parts") or "finishReason" in candidate
    ]
    return chunk


def is_empty_gemini_chunk(chunk: Mapping[str, Any]) -> bool:
    """Return True when a translated chunk has nothing worth emitting."""
    return not chunk.get("candidates") and not chunk.get("usageMetadata")
