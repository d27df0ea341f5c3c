"""
Embedding model interface and the ``embed`` / ``embed_many`` functions.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, TypeVar

from modelfusion.model_function.execute_call import ModelCallResult, execute_standard_call
from modelfusion.model_function.model import Model, ModelResponse, ModelSettings
from modelfusion.run.events import CallUsage, FunctionType

if TYPE_CHECKING:
    from modelfusion.model_function.model import CallOptions
    from modelfusion.model_function.options import FunctionOptions

Vector = list[float]

S = TypeVar("S", bound=ModelSettings)


class EmbeddingModel(Model[S]):
    """Model that maps values (usually texts) to vectors."""

    @property
    def max_values_per_call(self) -> int | None:
        """Upper bound of values per provider call (None = unbounded)."""
        return None

    @property
    def is_parallelizable(self) -> bool:
        """Whether groups of values may be embedded concurrently."""
        return False

    @property
    def dimensions(self) -> int | None:
        return None

    async def do_embed_values(self, values: list[Any], options: CallOptions) -> ModelResponse[list[Vector]]:
        """Embed a group of at most ``max_values_per_call`` values."""
        raise NotImplementedError(f"{type(self).__name__} does not embed values")


def _merge_usage(responses: list[ModelResponse[list[Vector]]]) -> CallUsage | None:
    usages = [r.usage for r in responses if r.usage is not None]
    if not usages:
        return None
    merged: dict[str, Any] = {}
    for usage in usages:
        for key, value in usage.values.items():
            if isinstance(value, (int, float)) and isinstance(merged.get(key, 0), (int, float)):
                merged[key] = merged.get(key, 0) + value
            else:
                merged[key] = value
    return CallUsage(merged)


async def embed_many(
    model: EmbeddingModel[Any],
    values: list[Any],
    *,
    options: FunctionOptions | None = None,
    full_response: bool = False,
) -> list[Vector] | ModelCallResult[list[Vector]]:
    """Embed several values.

    Values are split into groups of ``max_values_per_call``. Groups are
    embedded concurrently when the model is parallelizable and one after
    another otherwise. Embeddings keep the order of ``values``.

    Args:
        model: Embedding model
        values: Values to embed
        options: Function options
        full_response: Return embeddings, raw responses and metadata

    Returns:
        One embedding per value, or the full response (raw response is the
        list of provider responses)

    Example:
        >>> embeddings = await embed_many(model, [
        ...     "At first, Nox didn't know what to do with the pup.",
        ...     "He keenly observed and absorbed everything around him.",
        ... ])
    """

    async def generate_response(call_options: CallOptions) -> ModelResponse[list[Vector]]:
        size = model.max_values_per_call
        if not values:
            groups = []
        elif size is None:
            groups = [values]
        else:
            groups = [values[i : i + size] for i in range(0, len(values), size)]

        if model.is_parallelizable and len(groups) > 1:
            responses = list(
                await asyncio.gather(*(model.do_embed_values(group, call_options) for group in groups))
            )
        else:
            responses = [await model.do_embed_values(group, call_options) for group in groups]

        embeddings: list[Vector] = []
        for response in responses:
            embeddings.extend(response.value)

        return ModelResponse(
            value=embeddings,
            raw_response=[r.raw_response for r in responses],
            usage=_merge_usage(responses),
        )

    result = await execute_standard_call(
        function_type=FunctionType.EMBED,
        model=model,
        options=options,
        input=values,
        generate_response=generate_response,
    )
    return result if full_response else result.value


async def embed(
    model: EmbeddingModel[Any],
    value: Any,
    *,
    options: FunctionOptions | None = None,
    full_response: bool = False,
) -> Vector | ModelCallResult[Vector]:
    """Embed a single value.

    Example:
        >>> embedding = await embed(model, "At first, Nox didn't know what to do with the pup.")
    """

    async def generate_response(call_options: CallOptions) -> ModelResponse[Vector]:
        response = await model.do_embed_values([value], call_options)
        return ModelResponse(
            value=response.value[0],
            raw_response=response.raw_response,
            usage=response.usage,
        )

    result = await execute_standard_call(
        function_type=FunctionType.EMBED,
        model=model,
        options=options,
        input=value,
        generate_response=generate_response,
    )
    return result if full_response else result.value
