"""
Schema implementations backed by Pydantic and JSON Schema.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

import jsonschema
from jsonschema.exceptions import best_match
from pydantic import TypeAdapter

from modelfusion.schema.base import ValidationResult

T = TypeVar("T")


class PydanticSchema(Generic[T]):
    """Schema backed by a Pydantic model (or any type Pydantic understands).

    Example:
        >>> from pydantic import BaseModel
        >>> class City(BaseModel):
        ...     name: str
        ...     population: int
        >>>
        >>> schema = PydanticSchema(City)
        >>> result = schema.validate({"name": "Berlin", "population": 3_700_000})
        >>> result.value
        City(name='Berlin', population=3700000)
    """

    def __init__(self, model: type[T] | Any) -> None:
        """Initialize schema.

        Args:
            model: Pydantic model class, or any type accepted by TypeAdapter
                (e.g. ``list[int]``, a TypedDict or a dataclass)
        """
        self._model = model
        self._adapter: TypeAdapter[T] = TypeAdapter(model)

    @property
    def model(self) -> Any:
        return self._model

    def validate(self, value: Any) -> ValidationResult[T]:
        try:
            return ValidationResult.ok(self._adapter.validate_python(value))
        except Exception as e:
            return ValidationResult.fail(e)

    def get_json_schema(self) -> dict[str, Any]:
        return self._adapter.json_schema()


class JsonSchema:
    """Schema backed by a JSON schema document, validated with ``jsonschema``.

    The validated value is the input value itself.

    Example:
        >>> schema = JsonSchema({
        ...     "type": "object",
        ...     "properties": {"name": {"type": "string"}},
        ...     "required": ["name"],
        ... })
        >>> bool(schema.validate({"name": "Berlin"}))
        True
    """

    def __init__(self, json_schema: dict[str, Any]) -> None:
        """Initialize schema.

        Args:
            json_schema: JSON schema document

        Raises:
            jsonschema.SchemaError: If the document is not a valid JSON schema
        """
        validator_cls = jsonschema.validators.validator_for(json_schema)
        validator_cls.check_schema(json_schema)
        self._json_schema = json_schema
        self._validator = validator_cls(json_schema)

    def validate(self, value: Any) -> ValidationResult[Any]:
        error = best_match(self._validator.iter_errors(value))
        if error is not None:
            return ValidationResult.fail(error)
        return ValidationResult.ok(value)

    def get_json_schema(self) -> dict[str, Any]:
        return self._json_schema


class UncheckedSchema:
    """Schema that accepts every value.

    Useful when a JSON schema is needed for the prompt but validation is
    done elsewhere (or not at all).
    """

    def __init__(self, json_schema: dict[str, Any] | None = None) -> None:
        self._json_schema = json_schema or {}

    def validate(self, value: Any) -> ValidationResult[Any]:
        return ValidationResult.ok(value)

    def get_json_schema(self) -> dict[str, Any]:
        return self._json_schema


def pydantic_schema(model: type[T] | Any) -> PydanticSchema[T]:
    """Create a schema from a Pydantic model or type."""
    return PydanticSchema(model)


def json_schema(schema: dict[str, Any]) -> JsonSchema:
    """Create a schema from a JSON schema document."""
    return JsonSchema(schema)


def unchecked_schema(schema: dict[str, Any] | None = None) -> UncheckedSchema:
    """Create a schema that accepts every value."""
    return UncheckedSchema(schema)
