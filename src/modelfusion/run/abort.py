"""
Abort control for model calls.

Provides an AbortController/AbortSignal pair that callers hand to model
functions for cooperative cancellation of in-flight API calls and streams.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Any

from modelfusion.errors import AbortError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


class AbortSignal:
    """Read-only view of an abort state.

    Example:
        >>> controller = AbortController()
        >>> signal = controller.signal
        >>> signal.aborted
        False
        >>> controller.abort("user cancelled")
        >>> signal.aborted
        True
    """

    def __init__(self) -> None:
        self._aborted = False
        self._reason: Any = None
        self._timestamp: float | None = None
        self._event: asyncio.Event | None = None
        self._callbacks: list[Callable[[Any], Any]] = []

    @property
    def aborted(self) -> bool:
        """Check if abort was requested."""
        return self._aborted

    @property
    def reason(self) -> Any:
        """Get the abort reason."""
        return self._reason

    @property
    def timestamp(self) -> float | None:
        """Time the abort was requested."""
        return self._timestamp

    def _get_event(self) -> asyncio.Event:
        # Created lazily so that signals can be built outside a running loop
        if self._event is None:
            self._event = asyncio.Event()
            if self._aborted:
                self._event.set()
        return self._event

    def _abort(self, reason: Any) -> bool:
        if self._aborted:
            return False

        self._aborted = True
        self._reason = reason
        self._timestamp = time.time()

        if self._event is not None:
            self._event.set()

        for callback in self._callbacks:
            callback(reason)

        return True

    def on_abort(self, callback: Callable[[Any], Any]) -> AbortSignal:
        """Register a callback to be called on abort.

        Args:
            callback: Called with the abort reason

        Returns:
            Self for chaining
        """
        self._callbacks.append(callback)
        if self._aborted:
            callback(self._reason)
        return self

    async def wait(self) -> Any:
        """Wait until abort is requested.

        Returns:
            Abort reason
        """
        await self._get_event().wait()
        return self._reason

    def raise_if_aborted(self) -> None:
        """Raise AbortError if aborted.

        Raises:
            AbortError: If abort was requested
        """
        if self._aborted:
            raise AbortError(reason=self._reason)

    async def race(self, awaitable: Awaitable[Any]) -> Any:
        """Await ``awaitable`` unless the signal fires first.

        The awaitable is cancelled when the abort wins or when the caller
        is cancelled.

        Args:
            awaitable: Operation to run

        Returns:
            Result of the awaitable

        Raises:
            AbortError: If abort was requested before it completed
        """
        self.raise_if_aborted()

        task = asyncio.ensure_future(awaitable)
        abort_task = asyncio.ensure_future(self._get_event().wait())
        try:
            done, _ = await asyncio.wait(
                {task, abort_task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            abort_task.cancel()
            if not task.done():
                task.cancel()

        if task in done:
            return task.result()
        raise AbortError(reason=self._reason)


class AbortController:
    """Owner of an AbortSignal.

    Example:
        >>> controller = AbortController()
        >>> text = await generate_text(model, prompt, run=Run(abort_signal=controller.signal))
        >>> # from another task
        >>> controller.abort()
    """

    def __init__(self) -> None:
        self._signal = AbortSignal()

    @property
    def signal(self) -> AbortSignal:
        """Get the controlled signal."""
        return self._signal

    def abort(self, reason: Any = None) -> bool:
        """Request abort.

        Args:
            reason: Optional reason passed to callbacks

        Returns:
            True if abort was newly requested, False if already aborted
        """
        return self._signal._abort(reason)

    def abort_after(self, timeout: float) -> asyncio.Task[None]:
        """Schedule an abort after ``timeout`` seconds.

        Args:
            timeout: Delay in seconds

        Returns:
            The scheduled task (cancel it to disarm)
        """

        async def timeout_handler() -> None:
            await asyncio.sleep(timeout)
            self.abort("timeout")

        return asyncio.get_running_loop().create_task(timeout_handler())
