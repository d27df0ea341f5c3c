"""
Minimal JSON WebSocket client used for duplex streaming APIs.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import aiohttp

from modelfusion.errors import ApiCallError
from modelfusion.telemetry.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = get_logger("modelfusion.api.websocket")


class SimpleWebSocket:
    """JSON-message WebSocket connection.

    Example:
        >>> async with await SimpleWebSocket.connect("wss://example.com/stream") as ws:
        ...     await ws.send_json({"text": "Hello"})
        ...     async for message in ws:
        ...         print(message)
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        connection: aiohttp.ClientWebSocketResponse,
        url: str,
    ) -> None:
        self._session = session
        self._connection = connection
        self._url = url

    @classmethod
    async def connect(
        cls,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        timeout: float = 30.0,
    ) -> SimpleWebSocket:
        """Open a WebSocket connection.

        Args:
            url: ws:// or wss:// URL
            headers: Handshake headers
            timeout: Handshake timeout in seconds

        Returns:
            Connected SimpleWebSocket

        Raises:
            ApiCallError: If the connection cannot be established
        """
        session = aiohttp.ClientSession()
        try:
            connection = await session.ws_connect(
                url,
                headers=headers,
                timeout=aiohttp.ClientWSTimeout(ws_receive=None, ws_close=timeout),
            )
        except aiohttp.ClientError as e:
            await session.close()
            raise ApiCallError(
                f"Cannot connect to WebSocket: {e}",
                url=url,
                cause=e,
                is_retryable=True,
            ) from e

        logger.debug("WebSocket connected", url=url)
        return cls(session, connection, url)

    @property
    def url(self) -> str:
        return self._url

    @property
    def closed(self) -> bool:
        return self._connection.closed

    async def send_json(self, data: Any) -> None:
        """Send a JSON message."""
        await self._connection.send_str(json.dumps(data))

    async def __aiter__(self) -> AsyncIterator[Any]:
        """Iterate over incoming JSON messages until the socket closes.

        Raises:
            ApiCallError: On a WebSocket protocol error
        """
        async for message in self._connection:
            if message.type == aiohttp.WSMsgType.TEXT:
                yield json.loads(message.data)
            elif message.type == aiohttp.WSMsgType.BINARY:
                yield json.loads(message.data.decode("utf-8"))
            elif message.type == aiohttp.WSMsgType.ERROR:
                raise ApiCallError(
                    f"WebSocket error: {self._connection.exception()}",
                    url=self._url,
                    cause=self._connection.exception(),
                )

    async def close(self) -> None:
        """Close the connection and its session."""
        await self._connection.close()
        await self._session.close()
        logger.debug("WebSocket closed", url=self._url)

    async def __aenter__(self) -> SimpleWebSocket:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
