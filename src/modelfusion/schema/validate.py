"""
Type validation and JSON parsing against schemas.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, TypeVar

from modelfusion.errors import JSONParseError, TypeValidationError
from modelfusion.schema.base import ValidationResult

if TYPE_CHECKING:
    from modelfusion.schema.base import Schema

T = TypeVar("T")


def validate_types(value: Any, schema: Schema[T]) -> T:
    """Validate an untyped value against a schema.

    Args:
        value: The value to validate
        schema: The schema to validate against

    Returns:
        The typed value

    Raises:
        TypeValidationError: If validation fails or the schema raises
    """
    try:
        result = schema.validate(value)
    except TypeValidationError:
        raise
    except Exception as e:
        raise TypeValidationError(value=value, cause=e) from e

    if not result.success:
        raise TypeValidationError(value=value, cause=result.error)

    return result.value  # type: ignore[return-value]


def safe_validate_types(value: Any, schema: Schema[T]) -> ValidationResult[T]:
    """Validate an untyped value against a schema without raising.

    Args:
        value: The value to validate
        schema: The schema to validate against

    Returns:
        ValidationResult with the typed value, or a TypeValidationError
    """
    try:
        result = schema.validate(value)
    except TypeValidationError as e:
        return ValidationResult.fail(e)
    except Exception as e:
        return ValidationResult.fail(TypeValidationError(value=value, cause=e))

    if result.success:
        return result

    error = result.error
    if not isinstance(error, TypeValidationError):
        error = TypeValidationError(value=value, cause=error)
    return ValidationResult.fail(error)


def parse_json(text: str, schema: Schema[T] | None = None) -> Any:
    """Parse JSON text, optionally validating the result.

    Args:
        text: JSON text
        schema: Optional schema for the parsed value

    Returns:
        Parsed (and validated) value

    Raises:
        JSONParseError: If the text is not valid JSON
        TypeValidationError: If the parsed value does not match the schema
    """
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise JSONParseError(text=text, cause=e) from e

    if schema is None:
        return value

    return validate_types(value, schema)


def safe_parse_json(text: str, schema: Schema[T] | None = None) -> ValidationResult[Any]:
    """Parse JSON text without raising.

    Args:
        text: JSON text
        schema: Optional schema for the parsed value

    Returns:
        ValidationResult with the value, or a JSONParseError/TypeValidationError
    """
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        return ValidationResult.fail(JSONParseError(text=text, cause=e))

    if schema is None:
        return ValidationResult.ok(value)

    return safe_validate_types(value, schema)
