"""
Observers that log function events.

Logging modes:
- ``off``: nothing
- ``basic-text``: one line per event
- ``detailed-object``: event fields as structured log fields
- ``detailed-json``: the whole event serialized as JSON
"""

from __future__ import annotations

import json
import time
from enum import Enum
from typing import TYPE_CHECKING

from modelfusion.run.events import FinishStatus, FunctionFinishedEvent
from modelfusion.telemetry.logger import get_logger

if TYPE_CHECKING:
    from modelfusion.run.events import FunctionEvent
    from modelfusion.run.observer import FunctionObserver
    from modelfusion.telemetry.logger import ModelFusionLogger


class FunctionLogging(str, Enum):
    """Built-in logging modes for function events."""

    OFF = "off"
    BASIC_TEXT = "basic-text"
    DETAILED_OBJECT = "detailed-object"
    DETAILED_JSON = "detailed-json"


def _format_timestamp(timestamp: float) -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(timestamp)) + (
        f".{int((timestamp % 1) * 1000):03d}Z"
    )


class BasicTextObserver:
    """Logs one line per event."""

    def __init__(self, logger: ModelFusionLogger | None = None) -> None:
        self._logger = logger or get_logger("modelfusion.events")

    def on_function_event(self, event: FunctionEvent) -> None:
        prefix = (
            f"[{_format_timestamp(event.timestamp)}] {event.call_id}"
            f"{f' ({event.metadata.function_id})' if event.metadata.function_id else ''}"
            f" - {event.function_type.value} {event.event_type}"
        )

        if isinstance(event, FunctionFinishedEvent):
            if event.status == FinishStatus.ERROR:
                self._logger.error(f"{prefix} with error in {round(event.duration_ms)}ms")
            elif event.status == FinishStatus.ABORT:
                self._logger.info(f"{prefix}: aborted after {round(event.duration_ms)}ms")
            else:
                self._logger.info(f"{prefix} in {round(event.duration_ms)}ms")
        else:
            self._logger.info(prefix)


class DetailedObjectObserver:
    """Logs events with their fields as structured log fields."""

    def __init__(self, logger: ModelFusionLogger | None = None) -> None:
        self._logger = logger or get_logger("modelfusion.events")

    def on_function_event(self, event: FunctionEvent) -> None:
        data = event.to_dict()
        message = f"{event.function_type.value} {event.event_type}"
        if isinstance(event, FunctionFinishedEvent) and event.status == FinishStatus.ERROR:
            self._logger.error(message, **data)
        else:
            self._logger.info(message, **data)


class DetailedJsonObserver:
    """Logs events serialized as JSON."""

    def __init__(self, logger: ModelFusionLogger | None = None) -> None:
        self._logger = logger or get_logger("modelfusion.events")

    def on_function_event(self, event: FunctionEvent) -> None:
        self._logger.info(json.dumps(event.to_dict(), default=str))


def get_logging_observers(logging: FunctionLogging | str | None) -> list[FunctionObserver]:
    """Observers for a logging mode.

    Args:
        logging: Logging mode (None and ``off`` disable logging)

    Returns:
        List with zero or one observer

    Raises:
        ValueError: For an unknown logging mode
    """
    if logging is None:
        return []

    mode = FunctionLogging(logging)
    if mode == FunctionLogging.BASIC_TEXT:
        return [BasicTextObserver()]
    if mode == FunctionLogging.DETAILED_OBJECT:
        return [DetailedObjectObserver()]
    if mode == FunctionLogging.DETAILED_JSON:
        return [DetailedJsonObserver()]
    return []
