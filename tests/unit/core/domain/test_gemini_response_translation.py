"""
Tests for translating chat completions responses and stream chunks back to
the Gemini response shape.
"""

import pytest
from gemini_copilot_proxy.core.common.exceptions import TranslationError
from gemini_copilot_proxy.core.domain.gemini_translation import (
    is_empty_gemini_chunk,
    map_finish_reason,
    openai_chunk_to_gemini_chunk,
    openai_response_to_gemini_response,
    prune_empty_candidates,
)
from gemini_copilot_proxy.gemini_models import FinishReason


class TestFinishReasonMapping:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("stop", FinishReason.STOP),
            ("length", FinishReason.MAX_TOKENS),
            ("content_filter", FinishReason.SAFETY),
            ("tool_calls", FinishReason.STOP),
            ("function_call", FinishReason.OTHER),
            ("something_new", FinishReason.OTHER),
            (None, None),
        ],
    )
    def test_table(self, value, expected) -> None:
        assert map_finish_reason(value) == expected

    def test_tool_calls_and_stop_map_to_same_value(self) -> None:
        assert map_finish_reason("tool_calls") == map_finish_reason("stop")


class TestCompleteResponse:
    def test_text_response(self) -> None:
        response = {
            "id": "chatcmpl-1",
            "model": "gemini-2.5-pro",
            "choices": [
                {
                    "index": 0,
                    "message": {"role": "assistant", "content": "Hello!"},
                    "finish_reason": "stop",
                }
            ],
            "usage": {"prompt_tokens": 5, "completion_tokens": 2, "total_tokens": 7},
        }

        assert openai_response_to_gemini_response(response) == {
            "candidates": [
                {
                    "content": {"role": "model", "parts": [{"text": "Hello!"}]},
                    "finishReason": "STOP",
                    "index": 0,
                }
            ],
            "usageMetadata": {
                "promptTokenCount": 5,
                "candidatesTokenCount": 2,
                "totalTokenCount": 7,
            },
            "modelVersion": "gemini-2.5-pro",
        }

    def test_tool_calls_become_function_calls(self) -> None:
        response = {
            "choices": [
                {
                    "message": {
                        "role": "assistant",
                        "content": "Checking.",
                        "tool_calls": [
                            {
                                "id": "call_1",
                                "type": "function",
                                "function": {
                                    "name": "read_file",
                                    "arguments": '{"path": "a.txt", "limit": null}',
                                },
                            },
                            {
                                "id": "call_2",
                                "type": "function",
                                "function": {"name": "now", "arguments": "{}"},
                            },
                        ],
                    },
                    "finish_reason": "tool_calls",
                }
            ]
        }

        candidate = openai_response_to_gemini_response(response)["candidates"][0]

        assert candidate["content"]["parts"] == [
            {"text": "Checking."},
            {"functionCall": {"name": "read_file", "args": {"path": "a.txt", "limit": None}}},
            {"functionCall": {"name": "now", "args": {}}},
        ]
        assert candidate["finishReason"] == "STOP"

    def test_invalid_arguments_are_fatal(self) -> None:
        response = {
            "choices": [
                {
                    "message": {
                        "role": "assistant",
                        "tool_calls": [
                            {"id": "c", "function": {"name": "x", "arguments": "{oops"}}
                        ],
                    },
                    "finish_reason": "tool_calls",
                }
            ]
        }

        with pytest.raises(TranslationError) as exc_info:
            openai_response_to_gemini_response(response)

        assert exc_info.value.status_code == 502

    @pytest.mark.parametrize("arguments", ["", None, "[1, 2]", "null", "3", "\"text\""])
    def test_arguments_must_be_a_json_object(self, arguments) -> None:
        function = {"name": "x"}
        if arguments is not None:
            function["arguments"] = arguments
        response = {
            "choices": [
                {
                    "message": {"tool_calls": [{"id": "c", "function": function}]},
                    "finish_reason": "tool_calls",
                }
            ]
        }

        with pytest.raises(TranslationError):
            openai_response_to_gemini_response(response)

    def test_missing_usage_defaults_to_zero(self) -> None:
        result = openai_response_to_gemini_response(
            {"choices": [{"message": {"content": "x"}, "finish_reason": "length"}]}
        )

        assert result["usageMetadata"] == {
            "promptTokenCount": 0,
            "candidatesTokenCount": 0,
            "totalTokenCount": 0,
        }
        assert result["candidates"][0]["finishReason"] == "MAX_TOKENS"
        assert "modelVersion" not in result

    def test_cached_tokens_are_reported(self) -> None:
        result = openai_response_to_gemini_response(
            {
                "choices": [],
                "usage": {
                    "prompt_tokens": 100,
                    "completion_tokens": 1,
                    "total_tokens": 101,
                    "prompt_tokens_details": {"cached_tokens": 64},
                },
            }
        )

        assert result["usageMetadata"]["cachedContentTokenCount"] == 64

    def test_unfinished_choice_omits_finish_reason(self) -> None:
        result = openai_response_to_gemini_response(
            {"choices": [{"message": {"content": "x"}, "finish_reason": None}]}
        )

        assert "finishReason" not in result["candidates"][0]

    def test_multiple_choices(self) -> None:
        result = openai_response_to_gemini_response(
            {
                "choices": [
                    {"index": 0, "message": {"content": "a"}, "finish_reason": "stop"},
                    {"index": 1, "message": {"content": "b"}, "finish_reason": "content_filter"},
                ]
            }
        )

        assert [c["index"] for c in result["candidates"]] == [0, 1]
        assert result["candidates"][1]["finishReason"] == "SAFETY"


class TestStreamChunk:
    def test_text_delta_without_finish_reason(self) -> None:
        chunk = {
            "object": "chat.completion.chunk",
            "choices": [{"index": 0, "delta": {"content": "Hi"}, "finish_reason": None}],
        }

        result = openai_chunk_to_gemini_chunk(chunk)

        assert result["candidates"] == [
            {"content": {"role": "model", "parts": [{"text": "Hi"}]}, "index": 0}
        ]
        assert "finishReason" not in result["candidates"][0]
        assert "usageMetadata" not in result

    def test_final_chunk_carries_finish_reason_and_usage(self) -> None:
        chunk = {
            "choices": [{"index": 0, "delta": {}, "finish_reason": "stop"}],
            "usage": {"prompt_tokens": 3, "completion_tokens": 4, "total_tokens": 7},
        }

        result = openai_chunk_to_gemini_chunk(chunk)

        assert result["candidates"][0]["finishReason"] == "STOP"
        assert result["candidates"][0]["content"]["parts"] == []
        assert result["usageMetadata"]["totalTokenCount"] == 7

    def test_named_tool_fragment_is_parsed(self) -> None:
        chunk = {
            "choices": [
                {
                    "index": 0,
                    "delta": {
                        "tool_calls": [
                            {
                                "index": 0,
                                "id": "call_1",
                                "function": {"name": "ls", "arguments": '{"dir": "."}'},
                            }
                        ]
                    },
                }
            ]
        }

        parts = openai_chunk_to_gemini_chunk(chunk)["candidates"][0]["content"]["parts"]

        assert parts == [{"functionCall": {"name": "ls", "args": {"dir": "."}}}]

    def test_named_tool_fragment_without_arguments(self) -> None:
        chunk = {
            "choices": [
                {"delta": {"tool_calls": [{"index": 0, "function": {"name": "ls"}}]}}
            ]
        }

        parts = openai_chunk_to_gemini_chunk(chunk)["candidates"][0]["content"]["parts"]

        assert parts == [{"functionCall": {"name": "ls", "args": {}}}]

    def test_nameless_fragment_is_dropped(self) -> None:
        chunk = {
            "choices": [
                {
                    "index": 0,
                    "delta": {
                        "tool_calls": [{"index": 0, "function": {"arguments": '"."}'}}]
                    },
                    "finish_reason": None,
                }
            ]
        }

        result = openai_chunk_to_gemini_chunk(chunk)

        assert result["candidates"][0]["content"]["parts"] == []
        assert is_empty_gemini_chunk(prune_empty_candidates(result))

    def test_partial_arguments_on_named_fragment_raise(self) -> None:
        chunk = {
            "choices": [
                {"delta": {"tool_calls": [{"function": {"name": "ls", "arguments": '{"di'}}]}}
            ]
        }

        with pytest.raises(TranslationError):
            openai_chunk_to_gemini_chunk(chunk)

    def test_non_object_arguments_on_named_fragment_raise(self) -> None:
        chunk = {
            "choices": [
                {"delta": {"tool_calls": [{"function": {"name": "ls", "arguments": "[1]"}}]}}
            ]
        }

        with pytest.raises(TranslationError):
            openai_chunk_to_gemini_chunk(chunk)

    def test_chunk_without_choices(self) -> None:
        result = openai_chunk_to_gemini_chunk({"choices": []})

        assert result == {"candidates": []}
        assert is_empty_gemini_chunk(result)


class TestEmptyChunkFilter:
    def test_usage_only_chunk_is_kept(self) -> None:
        chunk = prune_empty_candidates(
            {
                "candidates": [{"content": {"role": "model", "parts": []}, "index": 0}],
                "usageMetadata": {"totalTokenCount": 1},
            }
        )

        assert chunk["candidates"] == []
        assert not is_empty_gemini_chunk(chunk)

    def test_finish_only_candidate_is_kept(self) -> None:
        chunk = prune_empty_candidates(
            {
                "candidates": [
                    {
                        "content": {"role": "model", "parts": []},
                        "finishReason": "STOP",
                        "index": 0,
                    }
                ]
            }
        )

        assert len(chunk["candidates"]) == 1
        assert not is_empty_gemini_chunk(chunk)
