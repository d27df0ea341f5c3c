"""错误分类：由 HTTP 状态码与错误响应体推断错误类别。

Error classification for failed API calls.

The class of an error decides whether ``post_to_api`` marks the resulting
ApiCallError as retryable.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorClass(str, Enum):
    """Error classes of failed provider calls."""

    INVALID_REQUEST = "invalid_request"
    AUTHENTICATION = "authentication"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    # Out of credit; retrying does not help
    QUOTA_EXHAUSTED = "quota_exhausted"
    RATE_LIMITED = "rate_limited"
    REQUEST_TOO_LARGE = "request_too_large"
    TIMEOUT = "timeout"
    CONFLICT = "conflict"
    SERVER_ERROR = "server_error"
    OVERLOADED = "overloaded"
    OTHER = "other"

    @property
    def retryable(self) -> bool:
        return self in _RETRYABLE


_RETRYABLE = frozenset(
    {ErrorClass.RATE_LIMITED, ErrorClass.TIMEOUT, ErrorClass.SERVER_ERROR, ErrorClass.OVERLOADED}
)

_STATUS_CLASSES: dict[int, ErrorClass] = {
    401: ErrorClass.AUTHENTICATION,
    403: ErrorClass.PERMISSION_DENIED,
    404: ErrorClass.NOT_FOUND,
    408: ErrorClass.TIMEOUT,
    409: ErrorClass.CONFLICT,
    413: ErrorClass.REQUEST_TOO_LARGE,
    429: ErrorClass.RATE_LIMITED,
    503: ErrorClass.OVERLOADED,
    504: ErrorClass.TIMEOUT,
    # Anthropic style "overloaded"
    529: ErrorClass.OVERLOADED,
}

_QUOTA_MARKERS = ("quota", "billing", "credit")


def _is_quota_error(body: dict[str, Any]) -> bool:
    error = body.get("error")
    error_type = (error.get("type") or error.get("code")) if isinstance(error, dict) else None
    text = f"{extract_error_message(body) or ''} {error_type or ''}".lower()
    return any(marker in text for marker in _QUOTA_MARKERS)


def classify_http_status(status_code: int, body: dict[str, Any] | None = None) -> ErrorClass:
    """Classify a failed HTTP response.

    A 429 whose body talks about quota or billing is QUOTA_EXHAUSTED rather
    than RATE_LIMITED. Unmapped 4xx codes are INVALID_REQUEST and unmapped
    5xx codes are SERVER_ERROR.

    Args:
        status_code: HTTP status code
        body: Parsed JSON body, if any
    """
    if status_code == 429 and body and _is_quota_error(body):
        return ErrorClass.QUOTA_EXHAUSTED

    error_class = _STATUS_CLASSES.get(status_code)
    if error_class is not None:
        return error_class
    if 400 <= status_code < 500:
        return ErrorClass.INVALID_REQUEST
    if 500 <= status_code < 600:
        return ErrorClass.SERVER_ERROR
    return ErrorClass.OTHER


def is_retryable(error_class: ErrorClass) -> bool:
    """Whether errors of this class are worth retrying."""
    return error_class.retryable


def _message_at(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and isinstance(value.get("message"), str):
        return value["message"]
    if isinstance(value, list) and value:
        return _message_at(value[0]) or str(value[0])
    return None


def extract_error_message(body: dict[str, Any] | None) -> str | None:
    """Find the message in a provider error body.

    Understands ``{"error": {"message"}}`` and ``{"error": "..."}`` (OpenAI,
    Ollama), ``{"message": "..."}`` (Cohere) and ``{"detail": ...}`` with a
    string, an object or a list (ElevenLabs, FastAPI based servers).
    """
    if not body:
        return None
    for key in ("error", "message", "detail"):
        if key in body and (message := _message_at(body[key])):
            return message
    return None
