"""
Chunking of streamed text on word boundaries.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterable, AsyncIterator


async def chunk_text_on_whitespace(text_stream: AsyncIterable[str]) -> AsyncIterator[str]:
    """Re-chunk a text stream so that no word is split across chunks.

    Text is buffered until a space arrives; everything before the last space
    is emitted. The remainder is emitted at the end of the stream with a
    trailing space. Empty chunks are never emitted.

    Example:
        >>> async def deltas():
        ...     for d in ["Hel", "lo wor", "ld"]:
        ...         yield d
        >>> [c async for c in chunk_text_on_whitespace(deltas())]
        ['Hello', 'world ']
    """
    buffer = ""
    async for text_delta in text_stream:
        buffer += text_delta

        last_space = buffer.rfind(" ")
        if last_space == -1:
            continue

        chunk = buffer[:last_space]
        buffer = buffer[last_space + 1 :]

        if chunk:
            yield chunk

    if buffer:
        yield f"{buffer} "
