"""
API layer - building blocks for provider integrations.

Provides:
- ApiConfiguration: base URL, headers, retry and throttle per provider
- load_api_key: explicit key, environment variable or system keyring
- post_json_to_api / post_to_api with response handlers (httpx)
- SimpleWebSocket for duplex streaming APIs (aiohttp)
"""

from modelfusion.api.auth import load_api_key, resolve_api_key
from modelfusion.api.configuration import (
    AbstractApiConfiguration,
    ApiConfiguration,
    BaseUrlApiConfiguration,
    BaseUrlPartsApiConfiguration,
)
from modelfusion.api.post import (
    ResponseHandler,
    create_audio_mpeg_response_handler,
    create_binary_response_handler,
    create_json_error_response_handler,
    create_json_response_handler,
    create_text_error_response_handler,
    create_text_response_handler,
    default_failed_response_handler,
    post_json_to_api,
    post_to_api,
)
from modelfusion.api.websocket import SimpleWebSocket

__all__ = [
    "AbstractApiConfiguration",
    "ApiConfiguration",
    "BaseUrlApiConfiguration",
    "BaseUrlPartsApiConfiguration",
    "ResponseHandler",
    "SimpleWebSocket",
    "create_audio_mpeg_response_handler",
    "create_binary_response_handler",
    "create_json_error_response_handler",
    "create_json_response_handler",
    "create_text_error_response_handler",
    "create_text_response_handler",
    "default_failed_response_handler",
    "load_api_key",
    "post_json_to_api",
    "post_to_api",
    "resolve_api_key",
]
