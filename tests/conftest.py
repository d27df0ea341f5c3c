"""Root pytest fixtures for modelfusion tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from modelfusion.run import set_global_function_logging, set_global_function_observers
from modelfusion.run.events import FunctionEvent


@pytest.fixture(autouse=True)
def reset_global_function_settings() -> Iterator[None]:
    """Clear process-wide logging and observers around every test."""
    set_global_function_logging(None)
    set_global_function_observers([])
    yield
    set_global_function_logging(None)
    set_global_function_observers([])


class EventCollector:
    """Observer that records every function event."""

    def __init__(self) -> None:
        self.events: list[FunctionEvent] = []

    def on_function_event(self, event: FunctionEvent) -> None:
        self.events.append(event)

    @property
    def kinds(self) -> list[str]:
        return [event.event_type for event in self.events]

    @property
    def finished(self) -> list[FunctionEvent]:
        return [event for event in self.events if event.event_type == "finished"]


@pytest.fixture
def collector() -> EventCollector:
    """Fresh event collector."""
    return EventCollector()
