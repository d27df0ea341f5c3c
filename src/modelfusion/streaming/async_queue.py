"""
Async queue that fans streamed values out to any number of consumers.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

T = TypeVar("T")


class AsyncQueue(Generic[T]):
    """Append-only queue with replaying async iteration.

    Every iterator sees every value from the beginning, then waits for new
    values until the queue is closed. Producers push synchronously, which
    makes the queue usable from callbacks.

    Example:
        >>> queue = AsyncQueue[int]()
        >>> queue.push(1)
        >>> queue.push(2)
        >>> queue.close()
        >>> [value async for value in queue]
        [1, 2]
    """

    def __init__(self) -> None:
        self._values: list[T] = []
        self._closed = False
        self._error: BaseException | None = None
        self._waiters: list[asyncio.Future[None]] = []

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._values)

    def push(self, value: T) -> None:
        """Append a value and wake waiting consumers.

        Raises:
            RuntimeError: If the queue is closed
        """
        if self._closed:
            raise RuntimeError("Cannot push value to closed queue.")
        self._values.append(value)
        self._notify()

    def error(self, error: BaseException) -> None:
        """Close the queue with an error.

        Consumers receive the values pushed so far, then the error is raised.

        Raises:
            RuntimeError: If the queue is closed
        """
        if self._closed:
            raise RuntimeError("Cannot set error on closed queue.")
        self._error = error
        self._closed = True
        self._notify()

    def close(self) -> None:
        """Close the queue. Closing twice is a no-op."""
        if self._closed:
            return
        self._closed = True
        self._notify()

    def _notify(self) -> None:
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)

    async def __aiter__(self) -> AsyncIterator[T]:
        position = 0
        while True:
            if position < len(self._values):
                value = self._values[position]
                position += 1
                yield value
                continue

            if self._closed:
                if self._error is not None:
                    raise self._error
                return

            waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
            self._waiters.append(waiter)
            await waiter
