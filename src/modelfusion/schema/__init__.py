"""
Schema module - runtime type validation for untyped API data.

Provides:
- Schema: protocol implemented by PydanticSchema, JsonSchema, UncheckedSchema
- validate_types / safe_validate_types: validate values against schemas
- parse_json / safe_parse_json: parse JSON text with optional validation
"""

from modelfusion.schema.base import Schema, ValidationResult
from modelfusion.schema.schemas import (
    JsonSchema,
    PydanticSchema,
    UncheckedSchema,
    json_schema,
    pydantic_schema,
    unchecked_schema,
)
from modelfusion.schema.validate import (
    parse_json,
    safe_parse_json,
    safe_validate_types,
    validate_types,
)

__all__ = [
    "JsonSchema",
    "PydanticSchema",
    "Schema",
    "UncheckedSchema",
    "ValidationResult",
    "json_schema",
    "parse_json",
    "pydantic_schema",
    "safe_parse_json",
    "safe_validate_types",
    "unchecked_schema",
    "validate_types",
]
