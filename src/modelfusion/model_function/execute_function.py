"""
Event lifecycle for plain (non-model) async functions.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, TypeVar

from modelfusion.model_function.execute_call import FunctionCall, ModelCallResult
from modelfusion.run.events import FunctionType

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from modelfusion.model_function.options import FunctionOptions

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


async def execute_function(
    fn: Callable[[InputT], Awaitable[OutputT]],
    input: InputT,
    *,
    function_type: FunctionType = FunctionType.EXECUTE_FUNCTION,
    options: FunctionOptions | None = None,
    full_response: bool = False,
) -> OutputT | ModelCallResult[OutputT]:
    """Run ``fn(input)`` with started/finished events.

    Model functions called inside ``fn`` see this call as their parent.

    Example:
        >>> async def summarize(text: str) -> str:
        ...     return await generate_text(model, f"Summarize: {text}")
        >>> summary = await execute_function(summarize, article)
    """
    call = FunctionCall(function_type, model=None, options=options, input=input)
    call.start()

    with call.scope():
        try:
            value = await call.guard(lambda: fn(input))
        except asyncio.CancelledError:
            call.abort()
            raise
        except Exception as e:
            call.fail(e)
            raise

    metadata = call.succeed(value)
    if full_response:
        return ModelCallResult(value=value, raw_response=None, metadata=metadata)
    return value
