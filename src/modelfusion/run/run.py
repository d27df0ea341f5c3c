"""
Run context for grouping function calls.

A Run carries identifiers, an abort signal and observers for every call
made inside it. The current run is stored in a context variable so that
nested calls (e.g. ``use_tool`` calling ``generate_tool_call``) share it.
"""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from modelfusion.run.abort import AbortSignal
    from modelfusion.run.events import FunctionEvent
    from modelfusion.run.observer import FunctionObserver

_current_run: ContextVar[Run | None] = ContextVar("modelfusion_run", default=None)
_current_call_id: ContextVar[str | None] = ContextVar("modelfusion_call_id", default=None)


def create_id(prefix: str) -> str:
    """Create a unique identifier like ``call-1f0c...``."""
    return f"{prefix}-{uuid.uuid4().hex[:16]}"


@dataclass
class Run:
    """A group of function calls.

    Attributes:
        run_id: Unique run identifier
        session_id: Optional session identifier
        user_id: Optional user identifier
        abort_signal: Signal that aborts every call in the run
        observers: Observers notified of every call in the run
    """

    run_id: str = field(default_factory=lambda: create_id("run"))
    session_id: str | None = None
    user_id: str | None = None
    abort_signal: AbortSignal | None = None
    observers: list[FunctionObserver] = field(default_factory=list)
    events: list[FunctionEvent] = field(default_factory=list)

    def record_event(self, event: FunctionEvent) -> None:
        """Keep an event on the run (used for run-level inspection)."""
        self.events.append(event)


def get_run() -> Run | None:
    """Get the run of the current context, if any."""
    return _current_run.get()


@contextmanager
def with_run(run: Run | None = None) -> Iterator[Run]:
    """Make ``run`` the current run for the duration of the block.

    Example:
        >>> with with_run(Run(user_id="u-1")) as run:
        ...     text = await generate_text(model, "Hello")
        >>> len(run.events)
        2
    """
    run = run or Run()
    token = _current_run.set(run)
    try:
        yield run
    finally:
        _current_run.reset(token)


def get_current_call_id() -> str | None:
    """Call id of the enclosing function call, if any."""
    return _current_call_id.get()


@contextmanager
def call_scope(call_id: str) -> Iterator[None]:
    """Mark ``call_id`` as the enclosing call for nested calls."""
    token = _current_call_id.set(call_id)
    try:
        yield
    finally:
        _current_call_id.reset(token)
