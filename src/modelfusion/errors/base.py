"""错误基类：提供分层错误体系和结构化错误上下文。

Base error classes for modelfusion.

Provides a layered error hierarchy:
- ModelFusionError: Base class for all library errors
- ApiCallError: Failed HTTP/API calls, with retry classification
- RetryError: Retry budget exhausted or non-retryable failure after retries
- AbortError: Call aborted through an AbortSignal
- TypeValidationError: Value does not match a schema
- JSONParseError: Text is not valid JSON
- LoadAPIKeyError: API key could not be resolved
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass
class ErrorContext:
    """Structured error context for diagnostics."""

    details: dict[str, Any] = field(default_factory=dict)
    """Additional details about the error"""

    source: str | None = None
    """Error source (e.g., 'api', 'retry', 'schema')"""

    hint: str | None = None
    """Actionable hint for resolving the error"""

    def __str__(self) -> str:
        parts = []
        if self.source:
            parts.append(f"[{self.source}]")
        if self.hint:
            parts.append(f"(hint: {self.hint})")
        return " ".join(parts)


class ModelFusionError(Exception):
    """Base class for all modelfusion errors.

    Attributes:
        message: Human-readable error message
        context: Structured error context
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
    ) -> None:
        self.message = message
        self.context = context or ErrorContext()
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message."""
        ctx_str = str(self.context)
        if ctx_str:
            return f"{self.message} {ctx_str}"
        return self.message

    @property
    def cause(self) -> BaseException | None:
        """Underlying exception, if any."""
        return self.__cause__

    def with_hint(self, hint: str) -> ModelFusionError:
        """Add a hint to this error."""
        self.context.hint = hint
        self.args = (self._format_message(),)
        return self


class ApiCallError(ModelFusionError):
    """Error from a provider API call.

    Raised for HTTP error responses, unparseable responses and transport
    failures. ``is_retryable`` drives the retry functions.

    Attributes:
        url: Request URL
        request_body_values: Request body that was sent
        status_code: HTTP status code (None for transport failures)
        response_body: Raw response body text
        is_retryable: Whether the call may succeed when repeated
        data: Parsed provider error payload
        retry_after: Suggested retry delay in seconds (from header)
    """

    def __init__(
        self,
        message: str,
        *,
        url: str,
        request_body_values: Any = None,
        status_code: int | None = None,
        response_body: str | None = None,
        cause: BaseException | None = None,
        is_retryable: bool | None = None,
        data: Any = None,
        retry_after: float | None = None,
    ) -> None:
        ctx = ErrorContext(source="api")
        ctx.details["url"] = url
        if status_code is not None:
            ctx.details["status_code"] = status_code
        super().__init__(message, ctx)

        self.url = url
        self.request_body_values = request_body_values
        self.status_code = status_code
        self.response_body = response_body
        self.data = data
        self.retry_after = retry_after
        self.__cause__ = cause

        if is_retryable is None:
            is_retryable = status_code is not None and (
                status_code == 429 or status_code >= 500
            )
        self.is_retryable = is_retryable

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary (for logging/events)."""
        return {
            "name": type(self).__name__,
            "message": self.message,
            "url": self.url,
            "request_body_values": self.request_body_values,
            "status_code": self.status_code,
            "response_body": self.response_body,
            "is_retryable": self.is_retryable,
            "data": self.data,
        }


class RetryReason(str, Enum):
    """Why a retry function gave up."""

    MAX_TRIES_EXCEEDED = "max_tries_exceeded"
    ERROR_NOT_RETRYABLE = "error_not_retryable"
    ABORT = "abort"


class RetryError(ModelFusionError):
    """Raised when a retry function gives up after more than one try.

    Attributes:
        reason: Why retrying stopped
        errors: Errors from every attempt, in order
    """

    def __init__(
        self,
        message: str,
        *,
        reason: RetryReason,
        errors: list[BaseException],
    ) -> None:
        ctx = ErrorContext(source="retry")
        ctx.details["reason"] = reason.value
        ctx.details["attempts"] = len(errors)
        super().__init__(message, ctx)
        self.reason = reason
        self.errors = errors

    @property
    def last_error(self) -> BaseException:
        """Error from the final attempt."""
        return self.errors[-1]


class AbortError(ModelFusionError):
    """Raised when a call is aborted through an AbortSignal."""

    def __init__(self, message: str = "Call was aborted.", reason: Any = None) -> None:
        super().__init__(message, ErrorContext(source="abort"))
        self.reason = reason


class TypeValidationError(ModelFusionError):
    """Raised when a value does not match a schema.

    Attributes:
        value: The value that failed validation
        cause: The schema library's error
    """

    def __init__(self, value: Any, cause: BaseException | None = None) -> None:
        message = (
            "Type validation failed: "
            f"Value: {_safe_json(value)}.\n"
            f"Error message: {cause}"
        )
        super().__init__(message, ErrorContext(source="schema"))
        self.value = value
        self.__cause__ = cause


class JSONParseError(ModelFusionError):
    """Raised when text cannot be parsed as JSON."""

    def __init__(self, text: str, cause: BaseException | None = None) -> None:
        message = (
            "JSON parsing failed: "
            f"Text: {text}.\n"
            f"Error message: {cause}"
        )
        super().__init__(message, ErrorContext(source="schema"))
        self.text = text
        self.__cause__ = cause


class LoadAPIKeyError(ModelFusionError):
    """Raised when an API key cannot be resolved."""

    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorContext(source="config"))


class InvalidPromptError(ModelFusionError):
    """Raised when a prompt cannot be formatted for a model."""

    def __init__(self, message: str, prompt: Any) -> None:
        super().__init__(message, ErrorContext(source="prompt"))
        self.prompt = prompt


def _safe_json(value: Any) -> str:
    import json

    try:
        return json.dumps(value, default=str)
    except (TypeError, ValueError):
        return repr(value)
