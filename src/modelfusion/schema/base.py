"""
Schema protocol and validation result.

A schema validates an untyped value (usually parsed JSON) and returns a
typed value. Schemas also expose a JSON schema so that prompts and tool
definitions can describe the expected shape to a model.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


@dataclass
class ValidationResult(Generic[T]):
    """Result of validating a value against a schema.

    Attributes:
        success: Whether validation passed
        value: Validated (and possibly converted) value
        error: Validation error when success is False
    """

    success: bool
    value: T | None = None
    error: BaseException | None = None

    def __bool__(self) -> bool:
        """Return True if validation passed."""
        return self.success

    @classmethod
    def ok(cls, value: T) -> ValidationResult[T]:
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: BaseException) -> ValidationResult[T]:
        return cls(success=False, error=error)


@runtime_checkable
class Schema(Protocol[T_co]):
    """Validates untyped values into typed values."""

    def validate(self, value: Any) -> ValidationResult[Any]:
        """Validate a value.

        Implementations report failures through the result; they should not
        raise, although callers defend against schemas that do.
        """
        ...

    def get_json_schema(self) -> dict[str, Any]:
        """JSON schema describing valid values."""
        ...
