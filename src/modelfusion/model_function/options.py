"""
Options accepted by every model function.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from modelfusion.cache.backends import Cache
    from modelfusion.run.logging_observers import FunctionLogging
    from modelfusion.run.observer import FunctionObserver
    from modelfusion.run.run import Run


@dataclass
class FunctionOptions:
    """Options of a single function call.

    Attributes:
        function_id: Identifier reported in events and used in cache keys
        logging: Logging mode; falls back to the global logging mode
        observers: Extra observers for this call
        run: Run to attach the call to; defaults to the current run
        cache: Cache for model responses (used by generate_text)

    Example:
        >>> text = await generate_text(
        ...     model,
        ...     "Write a haiku",
        ...     options=FunctionOptions(function_id="haiku", logging="basic-text"),
        ... )
    """

    function_id: str | None = None
    logging: FunctionLogging | str | None = None
    observers: list[FunctionObserver] = field(default_factory=list)
    run: Run | None = None
    cache: Cache | None = None
