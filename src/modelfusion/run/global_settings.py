"""
Process-wide defaults for function logging and observers.

The initial logging mode comes from ``MODELFUSION_FUNCTION_LOGGING``.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from modelfusion.run.logging_observers import FunctionLogging

if TYPE_CHECKING:
    from modelfusion.run.observer import FunctionObserver


def _logging_from_env() -> FunctionLogging | None:
    value = os.getenv("MODELFUSION_FUNCTION_LOGGING")
    if not value:
        return None
    try:
        return FunctionLogging(value)
    except ValueError:
        return None


_global_logging: FunctionLogging | None = _logging_from_env()
_global_observers: list[FunctionObserver] = []


def set_global_function_logging(logging: FunctionLogging | str | None) -> None:
    """Set the logging mode used when a call does not specify one."""
    global _global_logging
    _global_logging = FunctionLogging(logging) if logging is not None else None


def get_global_function_logging() -> FunctionLogging | None:
    return _global_logging


def set_global_function_observers(observers: list[FunctionObserver]) -> None:
    """Set observers notified of every function call."""
    global _global_observers
    _global_observers = list(observers)


def get_global_function_observers() -> list[FunctionObserver]:
    return list(_global_observers)
