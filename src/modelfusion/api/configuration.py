"""
API configuration shared by provider integrations.

An ApiConfiguration bundles where requests go (URL assembly), what they
carry (headers) and how they are issued (retry and throttle functions).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from modelfusion.resilience import RetryFunction, ThrottleFunction


@runtime_checkable
class ApiConfiguration(Protocol):
    """Where and how API calls are made."""

    @property
    def headers(self) -> dict[str, str]: ...

    @property
    def retry(self) -> RetryFunction | None: ...

    @property
    def throttle(self) -> ThrottleFunction | None: ...

    def assemble_url(self, path: str) -> str: ...


class AbstractApiConfiguration:
    """Base class holding retry and throttle functions."""

    def __init__(
        self,
        retry: RetryFunction | None = None,
        throttle: ThrottleFunction | None = None,
    ) -> None:
        self._retry = retry
        self._throttle = throttle

    @property
    def retry(self) -> RetryFunction | None:
        return self._retry

    @property
    def throttle(self) -> ThrottleFunction | None:
        return self._throttle

    @property
    def headers(self) -> dict[str, str]:
        return {}

    def assemble_url(self, path: str) -> str:
        raise NotImplementedError


class BaseUrlApiConfiguration(AbstractApiConfiguration):
    """API configuration with a fixed base URL.

    Example:
        >>> api = BaseUrlApiConfiguration(
        ...     base_url="https://api.example.com/v1/",
        ...     headers={"Authorization": "Bearer sk-..."},
        ...     throttle=throttle_max_concurrency(5),
        ... )
        >>> api.assemble_url("/embeddings")
        'https://api.example.com/v1/embeddings'
    """

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str] | None = None,
        retry: RetryFunction | None = None,
        throttle: ThrottleFunction | None = None,
    ) -> None:
        super().__init__(retry=retry, throttle=throttle)
        self._base_url = base_url
        self._headers = dict(headers or {})

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._headers)

    def assemble_url(self, path: str) -> str:
        base = self._base_url.rstrip("/")
        if not path:
            return base
        return f"{base}/{path.lstrip('/')}"

    def with_headers(self, headers: dict[str, str]) -> BaseUrlApiConfiguration:
        """Create a copy with additional headers."""
        return BaseUrlApiConfiguration(
            base_url=self._base_url,
            headers={**self._headers, **headers},
            retry=self._retry,
            throttle=self._throttle,
        )


class BaseUrlPartsApiConfiguration(BaseUrlApiConfiguration):
    """API configuration assembled from protocol, host, port and path."""

    def __init__(
        self,
        *,
        protocol: str = "https",
        host: str,
        port: int | str | None = None,
        path: str = "",
        headers: dict[str, str] | None = None,
        retry: RetryFunction | None = None,
        throttle: ThrottleFunction | None = None,
    ) -> None:
        port_part = f":{port}" if port not in (None, "") else ""
        path_part = f"/{path.strip('/')}" if path.strip("/") else ""
        super().__init__(
            base_url=f"{protocol}://{host}{port_part}{path_part}",
            headers=headers,
            retry=retry,
            throttle=throttle,
        )