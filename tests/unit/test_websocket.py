"""Tests for SimpleWebSocket against a local aiohttp server."""

import asyncio

import pytest
import pytest_asyncio
from aiohttp import test_utils, web

from modelfusion.api import SimpleWebSocket
from modelfusion.errors import ApiCallError
from modelfusion.streaming import DeltaValue, stream_websocket_duplex


async def _speech_handler(request: web.Request) -> web.WebSocketResponse:
    """Answers every text message with an audio message; an empty text ends the stream."""
    ws = web.WebSocketResponse()
    await ws.prepare(request)
    async for message in ws:
        data = message.json()
        if data["text"] == "":
            await ws.send_json({"isFinal": True})
            break
        if data["text"].strip():
            await ws.send_json({"audio": data["text"].strip().upper()})
    await ws.close()
    return ws


@pytest_asyncio.fixture
async def server():  # type: ignore[no-untyped-def]
    app = web.Application()
    app.router.add_get("/speech", _speech_handler)
    test_server = test_utils.TestServer(app)
    await test_server.start_server()
    yield test_server
    await test_server.close()


async def _text(*chunks: str):  # type: ignore[no-untyped-def]
    for chunk in chunks:
        yield chunk


class TestSimpleWebSocket:
    """Tests for SimpleWebSocket."""

    @pytest.mark.asyncio
    async def test_send_and_receive(self, server) -> None:
        """Test a JSON round trip."""
        async with await SimpleWebSocket.connect(str(server.make_url("/speech"))) as ws:
            await ws.send_json({"text": "hello"})
            await ws.send_json({"text": ""})
            messages = [message async for message in ws]

        assert messages == [{"audio": "HELLO"}, {"isFinal": True}]
        assert ws.closed

    @pytest.mark.asyncio
    async def test_connection_refused(self) -> None:
        """Test that connection failures are retryable API errors."""
        with pytest.raises(ApiCallError) as exc_info:
            await SimpleWebSocket.connect("ws://127.0.0.1:1/speech", timeout=1)
        assert exc_info.value.is_retryable

    @pytest.mark.asyncio
    async def test_duplex_stream(self, server) -> None:
        """Test streaming text in and audio out over a real socket."""
        ws = await SimpleWebSocket.connect(str(server.make_url("/speech")))
        queue = stream_websocket_duplex(
            ws,
            _text("Good eve", "ning every", "one"),
            decode_message=lambda message: (
                DeltaValue(message["audio"], raw=message) if "audio" in message else None
            ),
            encode_text=lambda text: {"text": text},
            begin_message={"text": " "},
            end_message={"text": ""},
        )

        deltas = await asyncio.wait_for(_collect(queue), timeout=5)

        assert [delta.value_delta for delta in deltas] == ["GOOD EVENING", "EVERYONE"]
        assert ws.closed


async def _collect(iterable) -> list:  # type: ignore[no-untyped-def]
    return [value async for value in iterable]
