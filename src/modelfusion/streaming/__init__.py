"""
Streaming helpers - deltas, a replaying async queue and duplex streams.
"""

from modelfusion.streaming.async_queue import AsyncQueue
from modelfusion.streaming.delta import Delta, DeltaError, DeltaValue
from modelfusion.streaming.duplex import JsonSocket, stream_websocket_duplex
from modelfusion.streaming.text_chunks import chunk_text_on_whitespace

__all__ = [
    "AsyncQueue",
    "Delta",
    "DeltaError",
    "DeltaValue",
    "JsonSocket",
    "chunk_text_on_whitespace",
    "stream_websocket_duplex",
]
