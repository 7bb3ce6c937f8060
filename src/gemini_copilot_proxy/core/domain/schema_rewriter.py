"""
Rewriting of JSON schemas for strict function-calling mode.

Strict mode requires every object schema to close itself with
``additionalProperties: false``. The rewrite works on a deep copy, so the
caller's schema is never modified, and it always succeeds.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

MINIMAL_PARAMETERS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {},
    "additionalProperties": False,
}


def rewrite_schema_for_strict_mode(schema: Any) -> Any:
    """Return a strict-mode copy of ``schema``.

    Object-typed nodes get ``additionalProperties: false``; every value under
    ``properties`` and a single-schema ``items`` are rewritten recursively.
    All other keys are deep-copied as they are. Values that are not mappings
    are deep-copied and returned unchanged.
    """
    if not isinstance(schema, Mapping):
        return copy.deepcopy(schema)

    result: dict[str, Any] = {}
    for key, value in schema.items():
        if key == "properties" and isinstance(value, Mapping):
            result[key] = {
                name: rewrite_schema_for_strict_mode(prop)
                for name, prop in value.items()
            }
        elif key == "items" and isinstance(value, Mapping):
            result[key] = rewrite_schema_for_strict_mode(value)
        else:
            result[key] = copy.deepcopy(value)

    if result.get("type") == "object":
        result["additionalProperties"] = False

    return result


def resolve_parameters_schema(schema: Any) -> dict[str, Any]:
    """Return the strict-mode parameters schema for a function declaration.

    A missing or empty schema becomes the minimal empty-object schema; an
    empty mapping has no ``type`` and would otherwise pass through unstamped.
    """
    if not schema or not isinstance(schema, Mapping):
        return copy.deepcopy(MINIMAL_PARAMETERS_SCHEMA)
    return rewrite_schema_for_strict_mode(schema)
