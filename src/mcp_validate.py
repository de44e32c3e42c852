"""JSON Schema validation helpers for upstream payloads and MCP tool contracts.

This module wraps jsonschema Draft7 validation. Every helper raises
SchemaValidationError naming the first offending path, so callers can turn it
into a user-visible error at the handler boundary.
"""

from __future__ import annotations

from typing import Any, Dict

from jsonschema import Draft7Validator

from common.errors import SchemaValidationError


def _first_error(schema: Dict[str, Any], data: Any):
    validator = Draft7Validator(schema)
    errs = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path])
    return errs[0] if errs else None


def _path_of(error) -> str:
    return "/".join(str(p) for p in error.absolute_path)


def validate_response(schema: Dict[str, Any], data: Any, *, source: str) -> Any:
    """Validate a decoded upstream response and return it unchanged.

    Args:
        schema: Draft-07 JSON Schema dict describing the expected shape.
        data:   Decoded JSON value.
        source: Human-readable tag for the payload (e.g., "registry").

    Raises:
        SchemaValidationError: On the first structural mismatch.
    """
    first = _first_error(schema, data)
    if first is not None:
        path = _path_of(first)
        where = f" at '{path}'" if path else ""
        raise SchemaValidationError(
            f"Invalid {source} data structure{where}: {first.message}", path=path
        )
    return data


def validate_input(schema: Dict[str, Any], data: Dict[str, Any]) -> None:
    """Validate tool input strictly and raise on the first error.

    Keys whose value is None are treated as omitted optional arguments.
    """
    present = {k: v for k, v in data.items() if v is not None}
    first = _first_error(schema, present)
    if first is not None:
        path = _path_of(first)
        where = f" at '{path}'" if path else ""
        raise SchemaValidationError(f"Invalid input{where}: {first.message}", path=path)


def validate_output(schema: Dict[str, Any], data: Dict[str, Any]) -> None:
    """Strictly validate output; raise SchemaValidationError on the first problem."""
    first = _first_error(schema, data)
    if first is not None:
        path = _path_of(first)
        raise SchemaValidationError(f"Invalid output at '{path}': {first.message}", path=path)
