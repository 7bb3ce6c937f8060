"""
Tool-call id correlation for Gemini conversations.

Gemini function calls and function responses carry no shared identifier,
while chat completions pairs an assistant ``tool_calls`` entry with a
``tool`` message through ``tool_call_id``. Ids are synthesized for every
call in conversation order, then handed to results strictly first-in
first-out. Duplicate results (same client id) and results without an open
call are dropped and counted.

All queues live for one call of ``correlate_tool_calls`` only.
"""

from __future__ import annotations

import itertools
import json
import logging
import time
from collections import deque
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from gemini_copilot_proxy.core.domain.chat import ChatMessage, FunctionCall, ToolCall
from gemini_copilot_proxy.core.domain.content_translation import (
    content_to_message,
    join_text,
)
from gemini_copilot_proxy.core.interfaces.model_bases import InternalDTO
from gemini_copilot_proxy.gemini_models import Content

logger = logging.getLogger(__name__)

ToolCallIdFactory = Callable[[str, int], str]


def default_tool_call_id(name: str, counter: int) -> str:
    """Return an id of the form ``call_{name}_{epoch_ms}_{counter}``."""
    return f"call_{name}_{int(time.time() * 1000)}_{counter}"


@dataclass
class CorrelationResult(InternalDTO):
    """Outbound messages plus bookkeeping from one correlation run."""

    messages: list[ChatMessage] = field(default_factory=list)
    tool_call_ids: list[str] = field(default_factory=list)
    dropped_duplicates: int = 0
    dropped_orphans: int = 0


@dataclass
class _PendingCall:
    id: str
    name: str


def correlate_tool_calls(
    contents: Sequence[Content],
    id_factory: ToolCallIdFactory | None = None,
) -> CorrelationResult:
    """Translate a conversation, pairing function calls with their results.

    Args:
        contents: The Gemini turns, in conversation order
        id_factory: Builds a call id from a function name and a counter that
            increases across the whole conversation

    Returns:
        A CorrelationResult with one message per plain or call turn and one
        ``tool`` message per surviving function response
    """
    make_id = id_factory or default_tool_call_id
    counter = itertools.count()

    # First pass: one id per function call, in encounter order
    issued: deque[str] = deque(
        make_id(call.name, next(counter))
        for content in contents
        for call in content.function_calls
    )
    result = CorrelationResult(tool_call_ids=list(issued))
    logger.debug(
        "Correlating %d contents with %d tool call ids", len(contents), len(issued)
    )

    pending_results: deque[_PendingCall] = deque()

    # Second pass: emit messages, threading ids from calls to results
    for content in contents:
        calls = content.function_calls
        responses = content.function_responses

        if calls:
            tool_calls = []
            for call in calls:
                call_id = issued.popleft()
                pending_results.append(_PendingCall(call_id, call.name))
                tool_calls.append(
                    ToolCall(
                        id=call_id,
                        function=FunctionCall(
                            name=call.name,
                            arguments=json.dumps(call.args or {}),
                        ),
                    )
                )
            texts = content.text_parts
            result.messages.append(
                ChatMessage(
                    role="assistant",
                    content=join_text(texts) if texts else None,
                    tool_calls=tool_calls,
                )
            )
        elif responses:
            # Duplicate ids are only meaningful within a single turn
            seen_response_ids: set[str] = set()
            for response in responses:
                if response.id:
                    if response.id in seen_response_ids:
                        result.dropped_duplicates += 1
                        logger.info(
                            "Dropping duplicate function response '%s' (id %s)",
                            response.name,
                            response.id,
                        )
                        continue
                    seen_response_ids.add(response.id)

                if not pending_results:
                    result.dropped_orphans += 1
                    logger.info(
                        "Dropping function response '%s' with no pending call",
                        response.name,
                    )
                    continue

                pending = pending_results.popleft()
                result.messages.append(
                    ChatMessage(
                        role="tool",
                        tool_call_id=pending.id,
                        name=pending.name,
                        content=json.dumps(response.response),
                    )
                )
        else:
            result.messages.append(content_to_message(content))

    return result
