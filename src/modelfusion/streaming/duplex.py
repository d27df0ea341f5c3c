"""
Duplex streaming over a JSON WebSocket.

Text is sent while audio (or other deltas) is received. Sending and
receiving run as background tasks; received deltas are delivered through an
AsyncQueue that closes when the socket closes.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

from modelfusion.streaming.async_queue import AsyncQueue
from modelfusion.streaming.delta import Delta, DeltaError
from modelfusion.streaming.text_chunks import chunk_text_on_whitespace
from modelfusion.telemetry.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterable, AsyncIterator, Callable

T = TypeVar("T")

logger = get_logger("modelfusion.streaming.duplex")

# References to running send/receive tasks so they are not garbage collected
_background_tasks: set[asyncio.Task[None]] = set()


class JsonSocket(Protocol):
    """Minimal JSON socket (implemented by SimpleWebSocket)."""

    async def send_json(self, data: Any) -> None: ...

    def __aiter__(self) -> AsyncIterator[Any]: ...

    async def close(self) -> None: ...


def _spawn(coro: Any) -> asyncio.Task[None]:
    task = asyncio.get_running_loop().create_task(coro)
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task


def stream_websocket_duplex(
    socket: JsonSocket,
    text_stream: AsyncIterable[str],
    *,
    decode_message: Callable[[Any], Delta | None],
    encode_text: Callable[[str], Any],
    begin_message: Any = None,
    end_message: Any = None,
) -> AsyncQueue[Delta]:
    """Stream text into a socket and deltas out of it.

    Args:
        socket: Connected socket
        text_stream: Text deltas; re-chunked on word boundaries before sending
        decode_message: Turns an incoming message into a delta (None to skip)
        encode_text: Turns a text chunk into an outgoing message
        begin_message: Optional message sent before any text
        end_message: Optional message sent after the text stream ends

    Returns:
        Queue of deltas; closed when the socket closes
    """
    queue: AsyncQueue[Delta] = AsyncQueue()

    async def send() -> None:
        try:
            if begin_message is not None:
                await socket.send_json(begin_message)
            async for chunk in chunk_text_on_whitespace(text_stream):
                await socket.send_json(encode_text(chunk))
            if end_message is not None:
                await socket.send_json(end_message)
        except Exception as e:
            logger.error("Sending to duplex stream failed", error=str(e))
            if not queue.closed:
                queue.push(DeltaError(e))
            await socket.close()

    async def receive() -> None:
        try:
            async for message in socket:
                delta = decode_message(message)
                if delta is not None:
                    queue.push(delta)
        except Exception as e:
            if not queue.closed:
                queue.push(DeltaError(e))
        finally:
            queue.close()
            await socket.close()

    _spawn(send())
    _spawn(receive())

    return queue
