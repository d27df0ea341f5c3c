"""HTTP 传输层：基于 httpx 的 API 调用与响应处理。

Posting requests to provider APIs.

Provides:
- post_json_to_api / post_to_api: single HTTP POST with abort support
- Response handlers for JSON, text, audio/mpeg and binary bodies
- Error response handlers that turn failed responses into ApiCallError
"""

from __future__ import annotations

import contextlib
import os
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

import httpx

from modelfusion.errors import (
    ApiCallError,
    ModelFusionError,
    classify_http_status,
    extract_error_message,
    is_retryable as is_retryable_class,
)
from modelfusion.schema import parse_json
from modelfusion.telemetry.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from modelfusion.run.abort import AbortSignal
    from modelfusion.schema import Schema

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)

logger = get_logger("modelfusion.api")

_DEFAULT_TIMEOUT = 60.0
_DEFAULT_CONNECT_TIMEOUT = 10.0


class ResponseHandler(Protocol[T_co]):
    """Turns an HTTP response into a value (or an ApiCallError)."""

    async def __call__(
        self,
        response: httpx.Response,
        *,
        url: str,
        request_body_values: Any,
    ) -> T_co: ...


def _resolve_timeout(timeout: float | None) -> float:
    if timeout is not None:
        return timeout
    env_timeout = os.getenv("MODELFUSION_HTTP_TIMEOUT_SECS")
    if env_timeout:
        with contextlib.suppress(ValueError):
            return float(env_timeout)
    return _DEFAULT_TIMEOUT


def _parse_retry_after(headers: httpx.Headers) -> float | None:
    value = headers.get("retry-after")
    if value:
        with contextlib.suppress(ValueError):
            return float(value)
    return None


async def post_json_to_api(
    url: str,
    *,
    body: Any,
    successful_response_handler: ResponseHandler[T],
    failed_response_handler: ResponseHandler[ApiCallError] | None = None,
    headers: dict[str, str] | None = None,
    abort_signal: AbortSignal | None = None,
    timeout: float | None = None,
) -> T:
    """POST a JSON body to an API.

    Args:
        url: Request URL
        body: JSON-serializable body; None values in the top-level mapping
            are dropped
        successful_response_handler: Handler for 2xx/3xx responses
        failed_response_handler: Handler for responses with status >= 400
        headers: Request headers
        abort_signal: Optional abort signal
        timeout: Timeout in seconds (default from MODELFUSION_HTTP_TIMEOUT_SECS)

    Returns:
        Value produced by the successful response handler

    Raises:
        ApiCallError: On transport failure or error response
        AbortError: If the signal fires before the response arrives
    """
    if isinstance(body, dict):
        body = {k: v for k, v in body.items() if v is not None}

    return await post_to_api(
        url,
        json=body,
        request_body_values=body,
        headers={"Content-Type": "application/json", **(headers or {})},
        successful_response_handler=successful_response_handler,
        failed_response_handler=failed_response_handler,
        abort_signal=abort_signal,
        timeout=timeout,
    )


async def post_to_api(
    url: str,
    *,
    successful_response_handler: ResponseHandler[T],
    failed_response_handler: ResponseHandler[ApiCallError] | None = None,
    headers: dict[str, str] | None = None,
    json: Any = None,
    content: bytes | str | None = None,
    data: dict[str, Any] | None = None,
    files: dict[str, Any] | None = None,
    request_body_values: Any = None,
    abort_signal: AbortSignal | None = None,
    timeout: float | None = None,
) -> T:
    """POST a request to an API.

    Exactly one of ``json``, ``content`` or ``data``/``files`` (multipart)
    should be given.

    Args:
        url: Request URL
        successful_response_handler: Handler for 2xx/3xx responses
        failed_response_handler: Handler for responses with status >= 400
        headers: Request headers
        json: JSON body
        content: Raw body
        data: Form fields
        files: Multipart files
        request_body_values: Body values recorded on errors
        abort_signal: Optional abort signal
        timeout: Timeout in seconds

    Returns:
        Value produced by the successful response handler
    """
    failed_response_handler = failed_response_handler or default_failed_response_handler
    resolved_timeout = _resolve_timeout(timeout)

    async def send() -> T:
        client_timeout = httpx.Timeout(resolved_timeout, connect=_DEFAULT_CONNECT_TIMEOUT)
        async with httpx.AsyncClient(timeout=client_timeout) as client:
            logger.debug("POST request", url=url)
            try:
                response = await client.post(
                    url,
                    headers=headers,
                    json=json,
                    content=content,
                    data=data,
                    files=files,
                )
            except httpx.TimeoutException as e:
                raise ApiCallError(
                    f"Request timed out: {e}",
                    url=url,
                    request_body_values=request_body_values,
                    cause=e,
                    is_retryable=True,
                ) from e
            except httpx.HTTPError as e:
                raise ApiCallError(
                    f"Cannot connect to API: {e}",
                    url=url,
                    request_body_values=request_body_values,
                    cause=e,
                    is_retryable=True,
                ) from e

            logger.debug("POST response", url=url, status_code=response.status_code)

            if response.status_code >= 400:
                try:
                    error = await failed_response_handler(
                        response, url=url, request_body_values=request_body_values
                    )
                except Exception as e:
                    raise ApiCallError(
                        "Failed to process error response",
                        url=url,
                        request_body_values=request_body_values,
                        status_code=response.status_code,
                        response_body=response.text,
                        cause=e,
                    ) from e
                raise error

            try:
                return await successful_response_handler(
                    response, url=url, request_body_values=request_body_values
                )
            except ApiCallError:
                raise
            except Exception as e:
                raise ApiCallError(
                    "Failed to process successful response",
                    url=url,
                    request_body_values=request_body_values,
                    status_code=response.status_code,
                    response_body=response.text,
                    cause=e,
                    is_retryable=False,
                ) from e

    if abort_signal is not None:
        abort_signal.raise_if_aborted()
        return await abort_signal.race(send())
    return await send()


# Successful response handlers


def create_json_response_handler(schema: Schema[T] | None = None) -> ResponseHandler[Any]:
    """Create a handler that parses (and optionally validates) a JSON body.

    Args:
        schema: Optional schema for the parsed body

    Returns:
        ResponseHandler returning the parsed value
    """

    async def handler(
        response: httpx.Response, *, url: str, request_body_values: Any
    ) -> Any:
        body_text = response.text
        try:
            return parse_json(body_text, schema)
        except ModelFusionError as e:
            raise ApiCallError(
                "Invalid JSON response",
                url=url,
                request_body_values=request_body_values,
                status_code=response.status_code,
                response_body=body_text,
                cause=e,
                is_retryable=False,
            ) from e

    return handler


def create_text_response_handler() -> ResponseHandler[str]:
    """Create a handler that returns the body as text."""

    async def handler(
        response: httpx.Response, *, url: str, request_body_values: Any
    ) -> str:
        return response.text

    return handler


def create_binary_response_handler() -> ResponseHandler[bytes]:
    """Create a handler that returns the raw body bytes."""

    async def handler(
        response: httpx.Response, *, url: str, request_body_values: Any
    ) -> bytes:
        return response.content

    return handler


def create_audio_mpeg_response_handler() -> ResponseHandler[bytes]:
    """Create a handler that returns an ``audio/mpeg`` body as bytes.

    Raises ApiCallError when the response has another content type, which
    usually means the provider returned an error document with status 200.
    """

    async def handler(
        response: httpx.Response, *, url: str, request_body_values: Any
    ) -> bytes:
        content_type = response.headers.get("content-type", "")
        if not content_type.startswith("audio/mpeg"):
            raise ApiCallError(
                "Invalid Content-Type (must be audio/mpeg)",
                url=url,
                request_body_values=request_body_values,
                status_code=response.status_code,
                response_body=response.text,
                is_retryable=False,
            )
        return response.content

    return handler


# Failed response handlers


def create_json_error_response_handler(
    error_schema: Schema[T],
    error_to_message: Callable[[T], str],
    is_retryable: Callable[[httpx.Response, T | None], bool] | None = None,
) -> ResponseHandler[ApiCallError]:
    """Create a handler that turns a JSON error body into an ApiCallError.

    Bodies that are empty, not JSON or do not match ``error_schema`` still
    produce an ApiCallError; its message is then the raw body text.

    Args:
        error_schema: Schema of the provider's error payload
        error_to_message: Extracts the error message from the payload
        is_retryable: Optional override of the default retry classification

    Returns:
        ResponseHandler returning (not raising) the ApiCallError
    """

    async def handler(
        response: httpx.Response, *, url: str, request_body_values: Any
    ) -> ApiCallError:
        body_text = response.text
        retry_after = _parse_retry_after(response.headers)

        if not body_text.strip():
            return ApiCallError(
                response.reason_phrase or f"HTTP {response.status_code}",
                url=url,
                request_body_values=request_body_values,
                status_code=response.status_code,
                response_body=body_text,
                is_retryable=is_retryable(response, None) if is_retryable else None,
                retry_after=retry_after,
            )

        try:
            parsed = parse_json(body_text, error_schema)
        except ModelFusionError:
            return ApiCallError(
                body_text.strip() or response.reason_phrase,
                url=url,
                request_body_values=request_body_values,
                status_code=response.status_code,
                response_body=body_text,
                is_retryable=is_retryable(response, None) if is_retryable else None,
                retry_after=retry_after,
            )

        return ApiCallError(
            error_to_message(parsed),
            url=url,
            request_body_values=request_body_values,
            status_code=response.status_code,
            response_body=body_text,
            data=parsed,
            is_retryable=is_retryable(response, parsed) if is_retryable else None,
            retry_after=retry_after,
        )

    return handler


def create_text_error_response_handler() -> ResponseHandler[ApiCallError]:
    """Create a handler that uses the raw body text as the error message."""

    async def handler(
        response: httpx.Response, *, url: str, request_body_values: Any
    ) -> ApiCallError:
        body_text = response.text
        return ApiCallError(
            body_text.strip() or response.reason_phrase or f"HTTP {response.status_code}",
            url=url,
            request_body_values=request_body_values,
            status_code=response.status_code,
            response_body=body_text,
            retry_after=_parse_retry_after(response.headers),
        )

    return handler


async def default_failed_response_handler(
    response: httpx.Response, *, url: str, request_body_values: Any
) -> ApiCallError:
    """Classify an error response by status code and common error envelopes."""
    body_text = response.text
    body: dict[str, Any] | None = None
    with contextlib.suppress(ValueError):
        parsed = response.json()
        if isinstance(parsed, dict):
            body = parsed

    error_class = classify_http_status(response.status_code, body)
    message = (
        extract_error_message(body)
        or body_text.strip()
        or response.reason_phrase
        or f"HTTP {response.status_code}"
    )

    return ApiCallError(
        message,
        url=url,
        request_body_values=request_body_values,
        status_code=response.status_code,
        response_body=body_text,
        data=body,
        is_retryable=is_retryable_class(error_class),
        retry_after=_parse_retry_after(response.headers),
    )
