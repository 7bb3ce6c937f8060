"""
Strict-mode compliance checks for tool and response schemas.

Rules enforced on every schema node:

1. object nodes must set ``additionalProperties`` to ``false``
2. object nodes must declare ``properties`` (may be empty)
3. array nodes must declare ``items``
4. ``nullable`` is not allowed
5. ``$ref`` is not allowed
6. every ``required`` entry must name a declared property
7. no key may hold a null value

The validator never modifies its input and reports every violation found.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from gemini_copilot_proxy.core.interfaces.model_bases import InternalDTO

NO_VALIDATION_ERRORS = "No validation errors"
SCHEMA_DUMP_LIMIT = 100


@dataclass
class ValidationIssue(InternalDTO):
    """A single strict-mode violation."""

    path: str
    message: str
    schema: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "message": self.message}


@dataclass
class ValidationResult(InternalDTO):
    """Outcome of validating one schema or a list of tools."""

    errors: list[ValidationIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


def _collect(schema: Any, path: str, errors: list[ValidationIssue]) -> None:
    if schema is None:
        errors.append(
            ValidationIssue(path, "Schema cannot be null or undefined", schema)
        )
        return
    if not isinstance(schema, Mapping):
        errors.append(ValidationIssue(path, "Schema must be an object", schema))
        return

    for key, value in schema.items():
        if value is None:
            errors.append(
                ValidationIssue(
                    f"{path}.{key}",
                    f'Field "{key}" has null or undefined value, which is not '
                    "allowed in strict mode",
                    schema,
                )
            )

    node_type = schema.get("type")

    if node_type == "object":
        if schema.get("additionalProperties") is not False:
            errors.append(
                ValidationIssue(
                    path,
                    'Object type must have "additionalProperties: false" for strict mode',
                    schema,
                )
            )

        properties = schema.get("properties")
        if "properties" not in schema:
            errors.append(
                ValidationIssue(
                    path,
                    'Object type must have a "properties" field (can be empty object)',
                    schema,
                )
            )
        elif isinstance(properties, Mapping):
            for name, prop in properties.items():
                _collect(prop, f"{path}.properties.{name}", errors)

        required = schema.get("required")
        if isinstance(required, list):
            declared = properties if isinstance(properties, Mapping) else {}
            for name in required:
                if isinstance(name, str) and name not in declared:
                    errors.append(
                        ValidationIssue(
                            path,
                            f'Required field "{name}" not found in properties',
                            schema,
                        )
                    )

    if node_type == "array":
        if "items" not in schema:
            errors.append(
                ValidationIssue(
                    path,
                    'Array type must have an "items" definition for strict mode',
                    schema,
                )
            )
        else:
            _collect(schema["items"], f"{path}.items", errors)

    if "nullable" in schema:
        errors.append(
            ValidationIssue(
                path,
                'The "nullable" field is not supported in strict mode. '
                "Use union types with null instead.",
                schema,
            )
        )

    if "$ref" in schema:
        errors.append(
            ValidationIssue(
                path,
                'The "$ref" field is not supported in strict mode. '
                "All references must be resolved.",
                schema,
            )
        )


def validate_schema_for_strict_mode(
    schema: Any, path: str = "root"
) -> ValidationResult:
    """Validate a JSON schema for strict mode compliance.

    Args:
        schema: The schema to check
        path: Path prefix used in error reports

    Returns:
        A ValidationResult listing every violation found
    """
    errors: list[ValidationIssue] = []
    _collect(schema, path, errors)
    return ValidationResult(errors)


def validate_tools_for_strict_mode(
    tools: Sequence[Mapping[str, Any]],
) -> ValidationResult:
    """Validate outbound tool definitions.

    Each tool must have type ``function`` and a non-empty function name;
    tools marked ``strict`` also have their parameters schema validated.
    """
    errors: list[ValidationIssue] = []

    for i, tool in enumerate(tools):
        tool_type = tool.get("type")
        if tool_type != "function":
            errors.append(
                ValidationIssue(
                    f"tools[{i}].type",
                    f'Tool type must be "function", got "{tool_type}"',
                    tool,
                )
            )
            continue

        function = tool.get("function") or {}
        if not function.get("name"):
            errors.append(
                ValidationIssue(
                    f"tools[{i}].function.name",
                    "Tool function name is required",
                    tool,
                )
            )

        if function.get("strict") is True:
            _collect(
                function.get("parameters"),
                f"tools[{i}].function.parameters",
                errors,
            )

    return ValidationResult(errors)


def _dump_schema(schema: Any) -> str:
    try:
        text = json.dumps(schema, default=str)
    except (TypeError, ValueError):
        text = repr(schema)
    return text[:SCHEMA_DUMP_LIMIT]


def format_validation_errors(errors: Sequence[ValidationIssue]) -> str:
    """Render validation errors as a numbered, human-readable report."""
    if not errors:
        return NO_VALIDATION_ERRORS

    blocks = []
    for i, error in enumerate(errors, start=1):
        block = f"{i}. [{error.path}] {error.message}"
        if error.schema:
            block += f"\n   Schema: {_dump_schema(error.schema)}..."
        blocks.append(block)
    return "\n\n".join(blocks)
