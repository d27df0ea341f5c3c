"""
Call lifecycle shared by every model function.

Each call gets a call id, emits a ``started`` event, runs inside the call
scope (so nested calls see it as their parent) and emits exactly one
``finished`` event with status ``success``, ``error`` or ``abort``.
"""

from __future__ import annotations

import asyncio
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from modelfusion.errors.base import AbortError, RetryError, RetryReason
from modelfusion.model_function.model import CallOptions, ModelCallMetadata
from modelfusion.model_function.options import FunctionOptions
from modelfusion.run.events import (
    CallUsage,
    FinishStatus,
    FunctionCallMetadata,
    FunctionFinishedEvent,
    FunctionResult,
    FunctionStartedEvent,
    FunctionType,
)
from modelfusion.run.global_settings import (
    get_global_function_logging,
    get_global_function_observers,
)
from modelfusion.run.logging_observers import get_logging_observers
from modelfusion.run.observer import FunctionEventSource
from modelfusion.run.run import call_scope, create_id, get_current_call_id, get_run
from modelfusion.streaming.delta import DeltaError, DeltaValue
from modelfusion.telemetry.logger import LogContext, get_logger, reset_log_context, set_log_context

if TYPE_CHECKING:
    from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable, Iterator

    from modelfusion.model_function.model import Model, ModelResponse
    from modelfusion.streaming.delta import Delta

T = TypeVar("T")

logger = get_logger("modelfusion.model_function")


@dataclass
class ModelCallResult(Generic[T]):
    """Full response of a function call.

    Unpacks as ``value, raw_response, metadata``.
    """

    value: T
    raw_response: Any
    metadata: ModelCallMetadata

    def __iter__(self) -> Iterator[Any]:
        return iter((self.value, self.raw_response, self.metadata))


class FunctionCall:
    """Tracks one function call from start to finish."""

    def __init__(
        self,
        function_type: FunctionType,
        *,
        model: Model[Any] | None,
        options: FunctionOptions | None,
        input: Any,
    ) -> None:
        options = options or FunctionOptions()
        self.function_type = function_type
        self.model = model
        self.run = options.run or get_run()
        self.abort_signal = self.run.abort_signal if self.run else None
        self.call_id = create_id("call")

        logging = options.logging if options.logging is not None else get_global_function_logging()
        observers = [
            *get_logging_observers(logging),
            *get_global_function_observers(),
            *(model.settings.observers if model is not None else ()),
            *(self.run.observers if self.run else ()),
            *options.observers,
        ]
        self._events = FunctionEventSource(observers)

        self.metadata = FunctionCallMetadata(
            function_type=function_type,
            call_id=self.call_id,
            started_at=time.time(),
            parent_call_id=get_current_call_id(),
            run_id=self.run.run_id if self.run else None,
            session_id=self.run.session_id if self.run else None,
            user_id=self.run.user_id if self.run else None,
            function_id=options.function_id,
            model=model.model_information if model is not None else None,
            settings=model.settings_for_event if model is not None else {},
            input=input,
        )
        self.call_options = CallOptions(
            call_id=self.call_id,
            function_id=options.function_id,
            run=self.run,
            abort_signal=self.abort_signal,
        )
        self.result_metadata: ModelCallMetadata | None = None
        self._start = time.perf_counter()

    @property
    def finished(self) -> bool:
        return self.result_metadata is not None

    def _dispatch(self, event: FunctionStartedEvent | FunctionFinishedEvent) -> None:
        if self.run is not None:
            self.run.record_event(event)
        self._events.notify(event)

    def start(self) -> None:
        """Emit the started event."""
        self._start = time.perf_counter()
        self._dispatch(FunctionStartedEvent(metadata=self.metadata, timestamp=self.metadata.started_at))

    def _finish(self, result: FunctionResult) -> ModelCallMetadata:
        finished_at = time.time()
        duration_ms = (time.perf_counter() - self._start) * 1000
        self._dispatch(
            FunctionFinishedEvent(
                metadata=self.metadata,
                timestamp=finished_at,
                finished_at=finished_at,
                duration_ms=duration_ms,
                result=result,
            )
        )
        self.result_metadata = ModelCallMetadata(
            call_id=self.call_id,
            function_type=self.function_type.value,
            model=self.metadata.model,
            started_at=self.metadata.started_at,
            finished_at=finished_at,
            duration_ms=duration_ms,
            run_id=self.metadata.run_id,
            session_id=self.metadata.session_id,
            user_id=self.metadata.user_id,
            function_id=self.metadata.function_id,
            parent_call_id=self.metadata.parent_call_id,
            usage=result.usage,
        )
        return self.result_metadata

    def succeed(
        self,
        value: Any,
        raw_response: Any = None,
        usage: CallUsage | None = None,
    ) -> ModelCallMetadata:
        """Emit a successful finished event."""
        return self._finish(
            FunctionResult(
                status=FinishStatus.SUCCESS,
                value=value,
                raw_response=raw_response,
                usage=usage,
            )
        )

    def abort(self) -> ModelCallMetadata:
        """Emit an aborted finished event."""
        return self._finish(FunctionResult(status=FinishStatus.ABORT))

    def fail(self, error: BaseException) -> ModelCallMetadata:
        """Emit a finished event for ``error`` (abort or error status)."""
        if self.is_abort(error):
            return self.abort()
        logger.debug("Function call failed", call_id=self.call_id, error=str(error))
        return self._finish(FunctionResult(status=FinishStatus.ERROR, error=error))

    def is_abort(self, error: BaseException) -> bool:
        if isinstance(error, (AbortError, asyncio.CancelledError)):
            return True
        if isinstance(error, RetryError) and error.reason == RetryReason.ABORT:
            return True
        return self.abort_signal is not None and self.abort_signal.aborted

    @contextmanager
    def scope(self) -> Iterator[None]:
        """Make this call the parent of nested calls and set the log context."""
        token = set_log_context(
            LogContext(
                run_id=self.metadata.run_id,
                call_id=self.call_id,
                function_type=self.function_type.value,
                provider=self.metadata.model.provider if self.metadata.model else None,
                model=self.metadata.model.model_name if self.metadata.model else None,
            )
        )
        try:
            with call_scope(self.call_id):
                yield
        finally:
            reset_log_context(token)

    async def guard(self, factory: Callable[[], Awaitable[T]]) -> T:
        """Await the operation created by ``factory`` while honouring the abort signal."""
        if self.abort_signal is None:
            return await factory()
        self.abort_signal.raise_if_aborted()
        return await self.abort_signal.race(factory())


async def execute_standard_call(
    *,
    function_type: FunctionType,
    model: Model[Any],
    options: FunctionOptions | None,
    input: Any,
    generate_response: Callable[[CallOptions], Awaitable[ModelResponse[T]]],
) -> ModelCallResult[T]:
    """Run a non-streaming model call with the full event lifecycle.

    Args:
        function_type: Function type reported in events
        model: The model
        options: Function options
        input: Function input reported in events
        generate_response: Produces the model response

    Returns:
        Value, raw response and call metadata

    Raises:
        Exception: Whatever ``generate_response`` raises (after the
            finished event has been emitted)
    """
    call = FunctionCall(function_type, model=model, options=options, input=input)
    call.start()

    with call.scope():
        try:
            response = await call.guard(lambda: generate_response(call.call_options))
        except asyncio.CancelledError:
            call.abort()
            raise
        except Exception as e:
            call.fail(e)
            raise

    metadata = call.succeed(response.value, response.raw_response, response.usage)
    return ModelCallResult(
        value=response.value,
        raw_response=response.raw_response,
        metadata=metadata,
    )


@dataclass
class StreamCallResult(Generic[T]):
    """Result of a streaming call.

    Attributes:
        value: Stream of processed values
        call_id: Call identifier
    """

    value: AsyncIterator[T]
    call_id: str
    _call: FunctionCall

    @property
    def metadata(self) -> ModelCallMetadata | None:
        """Call metadata, available once the stream has finished."""
        return self._call.result_metadata


async def execute_stream_call(
    *,
    function_type: FunctionType,
    model: Model[Any],
    options: FunctionOptions | None,
    input: Any,
    start_stream: Callable[[CallOptions], Awaitable[AsyncIterable[Delta]]],
    process_delta: Callable[[DeltaValue[Any]], T | None],
    on_done: Callable[[], Any] | None = None,
) -> StreamCallResult[T]:
    """Start a streaming model call with the full event lifecycle.

    The started event is emitted immediately. The finished event is emitted
    when the returned stream is exhausted (success), fails (error) or is
    closed early (abort).

    Args:
        function_type: Function type reported in events
        model: The model
        options: Function options
        input: Function input reported in events
        start_stream: Opens the delta stream
        process_delta: Maps a delta to an output value (None to skip it)
        on_done: Produces the value of the finished event

    Returns:
        StreamCallResult wrapping the value stream

    Raises:
        Exception: Whatever ``start_stream`` raises
    """
    call = FunctionCall(function_type, model=model, options=options, input=input)
    call.start()

    with call.scope():
        try:
            delta_stream = await call.guard(lambda: start_stream(call.call_options))
        except asyncio.CancelledError:
            call.abort()
            raise
        except Exception as e:
            call.fail(e)
            raise

    async def value_stream() -> AsyncIterator[T]:
        deltas = delta_stream.__aiter__()
        try:
            while True:
                # a stalled provider stream still ends when the run is aborted
                try:
                    delta = await call.guard(deltas.__anext__)
                except StopAsyncIteration:
                    break
                if isinstance(delta, DeltaError):
                    raise delta.error
                value = process_delta(delta)
                if value is not None:
                    yield value
        except (asyncio.CancelledError, GeneratorExit):
            if not call.finished:
                call.abort()
            raise
        except Exception as e:
            if not call.finished:
                call.fail(e)
            raise

        call.succeed(on_done() if on_done is not None else None)

    return StreamCallResult(value=value_stream(), call_id=call.call_id, _call=call)
