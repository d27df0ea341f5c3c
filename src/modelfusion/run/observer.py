"""
Observers of function events.

Observers are notified synchronously, in registration order. An observer
that raises does not affect the call or the other observers; the error is
passed to the event source's error handler (logged by default).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from modelfusion.telemetry.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from modelfusion.run.events import FunctionEvent

logger = get_logger("modelfusion.run.observer")


@runtime_checkable
class FunctionObserver(Protocol):
    """Receives function events."""

    def on_function_event(self, event: FunctionEvent) -> None: ...


class CallbackObserver:
    """Adapts a plain callable to the FunctionObserver protocol.

    Example:
        >>> events = []
        >>> observer = CallbackObserver(events.append)
    """

    def __init__(self, callback: Callable[[FunctionEvent], None]) -> None:
        self._callback = callback

    def on_function_event(self, event: FunctionEvent) -> None:
        self._callback(event)


def _log_observer_error(error: Exception) -> None:
    logger.error("Function observer failed", exc_info=True, error=str(error))


class FunctionEventSource:
    """Dispatches function events to a list of observers."""

    def __init__(
        self,
        observers: Iterable[FunctionObserver],
        error_handler: Callable[[Exception], None] | None = None,
    ) -> None:
        self._observers = list(observers)
        self._error_handler = error_handler or _log_observer_error

    @property
    def observers(self) -> list[FunctionObserver]:
        return list(self._observers)

    def notify(self, event: FunctionEvent) -> None:
        """Send an event to every observer.

        Args:
            event: The event
        """
        for observer in self._observers:
            try:
                observer.on_function_event(event)
            except Exception as e:
                self._error_handler(e)
