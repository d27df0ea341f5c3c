"""
Speech generation: ``generate_speech`` and ``stream_speech``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from modelfusion.model_function.execute_call import (
    ModelCallResult,
    StreamCallResult,
    execute_standard_call,
    execute_stream_call,
)
from modelfusion.model_function.model import Model, ModelSettings
from modelfusion.run.events import FunctionType

if TYPE_CHECKING:
    from collections.abc import AsyncIterable, AsyncIterator

    from modelfusion.model_function.model import CallOptions, ModelResponse
    from modelfusion.model_function.options import FunctionOptions
    from modelfusion.streaming.delta import Delta, DeltaValue

S = TypeVar("S", bound=ModelSettings)


class SpeechGenerationModel(Model[S]):
    """Model that synthesizes speech from text."""

    async def do_generate_speech(self, text: str, options: CallOptions) -> ModelResponse[bytes]:
        """Synthesize the whole text into one audio buffer."""
        raise NotImplementedError(f"{type(self).__name__} does not generate speech")


class StreamingSpeechGenerationModel(SpeechGenerationModel[S]):
    """Speech model that streams audio while text is still arriving."""

    async def do_stream_speech(
        self, text_stream: AsyncIterable[str], options: CallOptions
    ) -> AsyncIterable[Delta]:
        """Open a duplex stream: text deltas in, audio deltas (bytes) out."""
        raise NotImplementedError(f"{type(self).__name__} does not stream speech")


async def generate_speech(
    model: SpeechGenerationModel[Any],
    text: str,
    *,
    options: FunctionOptions | None = None,
    full_response: bool = False,
) -> bytes | ModelCallResult[bytes]:
    """Synthesize speech for a text.

    Example:
        >>> audio = await generate_speech(model, "Good evening, ladies and gentlemen!")
        >>> Path("speech.mp3").write_bytes(audio)
    """
    result = await execute_standard_call(
        function_type=FunctionType.GENERATE_SPEECH,
        model=model,
        options=options,
        input=text,
        generate_response=lambda call_options: model.do_generate_speech(text, call_options),
    )
    return result if full_response else result.value


async def _single_text(text: str) -> AsyncIterator[str]:
    yield text


async def stream_speech(
    model: StreamingSpeechGenerationModel[Any],
    text: str | AsyncIterable[str],
    *,
    options: FunctionOptions | None = None,
    full_response: bool = False,
) -> AsyncIterator[bytes] | StreamCallResult[bytes]:
    """Stream synthesized speech.

    Args:
        model: Streaming speech model
        text: Full text or a stream of text deltas (e.g. from ``stream_text``)
        options: Function options
        full_response: Return the StreamCallResult (stream plus metadata)

    Returns:
        Async iterator of audio chunks

    Example:
        >>> text_stream = await stream_text(text_model, "Tell me a story")
        >>> async for audio in await stream_speech(speech_model, text_stream):
        ...     player.feed(audio)
    """
    text_stream = _single_text(text) if isinstance(text, str) else text

    def process_delta(delta: DeltaValue[Any]) -> bytes | None:
        return delta.value_delta or None

    result = await execute_stream_call(
        function_type=FunctionType.STREAM_SPEECH,
        model=model,
        options=options,
        input=text if isinstance(text, str) else None,
        start_stream=lambda call_options: model.do_stream_speech(text_stream, call_options),
        process_delta=process_delta,
    )
    return result if full_response else result.value
