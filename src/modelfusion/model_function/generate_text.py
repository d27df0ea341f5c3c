"""
Text generation functions: ``generate_text`` and ``stream_text``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from modelfusion.cache.key import create_call_cache_key
from modelfusion.model_function.execute_call import (
    ModelCallResult,
    StreamCallResult,
    execute_standard_call,
    execute_stream_call,
)
from modelfusion.model_function.model import ModelResponse
from modelfusion.model_function.options import FunctionOptions
from modelfusion.model_function.text_generation_model import TextGenerationResult
from modelfusion.run.events import FunctionType
from modelfusion.telemetry.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from modelfusion.model_function.model import CallOptions, ModelCallMetadata
    from modelfusion.model_function.text_generation_model import TextGenerationModel
    from modelfusion.streaming.delta import DeltaValue

logger = get_logger("modelfusion.model_function.generate_text")


@dataclass
class TextGenerationFullResponse(ModelCallResult[str]):
    """Full response of ``generate_text``.

    Attributes:
        texts: Every generated text (see ``number_of_generations``)
        text_generation_results: Texts with their finish reasons
    """

    texts: list[str] = field(default_factory=list)
    text_generation_results: list[TextGenerationResult] = field(default_factory=list)


async def generate_text(
    model: TextGenerationModel[Any],
    prompt: Any,
    *,
    options: FunctionOptions | None = None,
    full_response: bool = False,
) -> str | TextGenerationFullResponse:
    """Generate text for a prompt.

    When ``options.cache`` is set, the raw response is looked up in and
    stored into the cache, keyed by function id, model, settings and prompt.

    Args:
        model: Text generation model
        prompt: Prompt in the model's prompt format
        options: Function options
        full_response: Return texts, raw response and metadata

    Returns:
        The first generated text, or the full response

    Example:
        >>> text = await generate_text(model, "Write a short story about a robot learning to love:")
    """
    options = options or FunctionOptions()
    cache = options.cache

    async def generate_response(call_options: CallOptions) -> ModelResponse[list[TextGenerationResult]]:
        if cache is None:
            response = await model.do_generate_texts(prompt, call_options)
        else:
            cache_key = create_call_cache_key(
                FunctionType.GENERATE_TEXT.value,
                function_id=options.function_id,
                model=model.model_information.to_dict(),
                settings=model.settings_for_event,
                prompt=prompt,
            )
            cached = await cache.lookup_value(cache_key)
            if cached is not None:
                logger.debug("Using cached response", call_id=call_options.call_id)
                response = model.restore_generated_texts(cached)
            else:
                response = await model.do_generate_texts(prompt, call_options)
                await cache.store_value(cache_key, response.raw_response)

        results = response.value
        if model.settings.trim_whitespace:
            results = [
                TextGenerationResult(text=result.text.strip(), finish_reason=result.finish_reason)
                for result in results
            ]
        return ModelResponse(value=results, raw_response=response.raw_response, usage=response.usage)

    result = await execute_standard_call(
        function_type=FunctionType.GENERATE_TEXT,
        model=model,
        options=options,
        input=prompt,
        generate_response=generate_response,
    )

    texts = [r.text for r in result.value]
    text = texts[0] if texts else ""

    if full_response:
        return TextGenerationFullResponse(
            value=text,
            raw_response=result.raw_response,
            metadata=result.metadata,
            texts=texts,
            text_generation_results=result.value,
        )
    return text


class StreamTextFullResponse:
    """Full response of ``stream_text``.

    Iterate ``text_stream``; ``text`` holds the text streamed so far and
    ``metadata`` becomes available once the stream has finished.
    """

    def __init__(self, call: StreamCallResult[str], chunks: list[str]) -> None:
        self._call = call
        self._chunks = chunks

    @property
    def text_stream(self) -> AsyncIterator[str]:
        return self._call.value

    @property
    def text(self) -> str:
        return "".join(self._chunks)

    @property
    def call_id(self) -> str:
        return self._call.call_id

    @property
    def metadata(self) -> ModelCallMetadata | None:
        return self._call.metadata


async def stream_text(
    model: TextGenerationModel[Any],
    prompt: Any,
    *,
    options: FunctionOptions | None = None,
    full_response: bool = False,
) -> AsyncIterator[str] | StreamTextFullResponse:
    """Stream text for a prompt.

    With ``trim_whitespace`` enabled, leading whitespace of the text is
    dropped and trailing whitespace is held back until more text follows, so
    the concatenated stream equals the trimmed text.

    Args:
        model: Text generation model with streaming support
        prompt: Prompt in the model's prompt format
        options: Function options
        full_response: Return a StreamTextFullResponse

    Returns:
        Async iterator of text deltas, or the full response

    Example:
        >>> async for delta in await stream_text(model, "Write a haiku"):
        ...     print(delta, end="")
    """
    trim = model.settings.trim_whitespace
    chunks: list[str] = []
    trailing_whitespace = ""

    def process_delta(delta: DeltaValue[Any]) -> str | None:
        nonlocal trailing_whitespace

        text = model.extract_text_delta(delta.value_delta)
        if not text:
            return None

        if trim:
            if not chunks:
                text = text.lstrip()
            stripped = text.rstrip()
            if not stripped:
                trailing_whitespace += text
                return None
            suffix = text[len(stripped) :]
            text = trailing_whitespace + stripped
            trailing_whitespace = suffix

        chunks.append(text)
        return text

    result = await execute_stream_call(
        function_type=FunctionType.STREAM_TEXT,
        model=model,
        options=options,
        input=prompt,
        start_stream=lambda call_options: model.do_stream_text(prompt, call_options),
        process_delta=process_delta,
        on_done=lambda: "".join(chunks),
    )

    if full_response:
        return StreamTextFullResponse(result, chunks)
    return result.value
