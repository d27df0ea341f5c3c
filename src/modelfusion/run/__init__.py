"""
Run module - abort control, run context, function events and observers.
"""

from modelfusion.run.abort import AbortController, AbortSignal
from modelfusion.run.events import (
    CallUsage,
    FinishStatus,
    FunctionCallMetadata,
    FunctionEvent,
    FunctionFinishedEvent,
    FunctionResult,
    FunctionStartedEvent,
    FunctionType,
    ModelInformation,
)
from modelfusion.run.global_settings import (
    get_global_function_logging,
    get_global_function_observers,
    set_global_function_logging,
    set_global_function_observers,
)
from modelfusion.run.logging_observers import (
    BasicTextObserver,
    DetailedJsonObserver,
    DetailedObjectObserver,
    FunctionLogging,
    get_logging_observers,
)
from modelfusion.run.observer import CallbackObserver, FunctionEventSource, FunctionObserver
from modelfusion.run.run import Run, create_id, get_run, with_run

__all__ = [
    # Abort
    "AbortController",
    "AbortSignal",
    # Logging
    "BasicTextObserver",
    # Events
    "CallUsage",
    # Observers
    "CallbackObserver",
    "DetailedJsonObserver",
    "DetailedObjectObserver",
    "FinishStatus",
    "FunctionCallMetadata",
    "FunctionEvent",
    "FunctionEventSource",
    "FunctionFinishedEvent",
    "FunctionLogging",
    "FunctionObserver",
    "FunctionResult",
    "FunctionStartedEvent",
    "FunctionType",
    "ModelInformation",
    # Run
    "Run",
    "create_id",
    "get_global_function_logging",
    "get_global_function_observers",
    "get_logging_observers",
    "get_run",
    "set_global_function_logging",
    "set_global_function_observers",
    "with_run",
]
