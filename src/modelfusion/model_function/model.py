"""
Model base types shared by every model function.

A model wraps a provider binding behind typed, immutable settings. Concrete
models implement the ``do_*`` methods of the capability they offer (text
generation, embeddings, ...) and return a :class:`ModelResponse`.
"""

from __future__ import annotations

import copy
import dataclasses
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from modelfusion.run.events import CallUsage, ModelInformation

if TYPE_CHECKING:
    from modelfusion.run.abort import AbortSignal
    from modelfusion.run.observer import FunctionObserver
    from modelfusion.run.run import Run

T = TypeVar("T")
S = TypeVar("S", bound="ModelSettings")

# Settings that configure the call machinery rather than the model output
_NON_EVENT_SETTINGS = frozenset({"observers"})


@dataclass(frozen=True)
class ModelSettings:
    """Base settings of every model.

    Attributes:
        observers: Observers notified of every call made with the model
    """

    observers: tuple[FunctionObserver, ...] = ()


@dataclass
class CallOptions:
    """Per-call context handed to the ``do_*`` methods of a model.

    Attributes:
        call_id: Identifier of the current function call
        function_id: Caller-supplied function identifier
        run: Enclosing run, if any
        abort_signal: Signal to watch while calling the provider
    """

    call_id: str
    function_id: str | None = None
    run: Run | None = None
    abort_signal: AbortSignal | None = None


@dataclass
class ModelResponse(Generic[T]):
    """Output of a ``do_*`` call.

    Attributes:
        value: Extracted value (texts, embeddings, audio bytes, ...)
        raw_response: Provider response the value was extracted from
        usage: Usage reported by the provider
    """

    value: T
    raw_response: Any = None
    usage: CallUsage | None = None


class Model(ABC, Generic[S]):
    """Abstract model.

    Example:
        >>> model = MyTextModel(MyTextModelSettings(temperature=0.2))
        >>> cold = model.with_settings(temperature=0.0)
    """

    def __init__(self, settings: S) -> None:
        self._settings = settings

    @property
    @abstractmethod
    def provider(self) -> str:
        """Provider name (e.g. 'openai')."""
        ...

    @property
    def model_name(self) -> str | None:
        """Model name, if the provider has named models."""
        return None

    @property
    def settings(self) -> S:
        return self._settings

    @property
    def settings_for_event(self) -> dict[str, Any]:
        """Settings that influence the output, as reported in events and cache keys."""
        return {
            f.name: getattr(self._settings, f.name)
            for f in dataclasses.fields(self._settings)
            if f.name not in _NON_EVENT_SETTINGS
        }

    @property
    def model_information(self) -> ModelInformation:
        return ModelInformation(provider=self.provider, model_name=self.model_name)

    def with_settings(self, **changes: Any) -> Model[S]:
        """Copy of the model with some settings replaced.

        Args:
            **changes: Settings fields to replace

        Returns:
            New model; the original is unchanged
        """
        clone = copy.copy(self)
        clone._settings = dataclasses.replace(self._settings, **changes)
        return clone

    def __repr__(self) -> str:
        return f"{type(self).__name__}(provider={self.provider!r}, model_name={self.model_name!r})"


@dataclass
class ModelCallMetadata:
    """Metadata of a finished model call.

    Attributes:
        call_id: Call identifier
        function_type: Function type
        model: Model information
        run_id: Identifier of the enclosing run
        session_id: Session identifier of the enclosing run
        user_id: User identifier of the enclosing run
        function_id: Caller-supplied function identifier
        parent_call_id: Call id of the enclosing call
        started_at: Unix start time
        finished_at: Unix finish time
        duration_ms: Call duration in milliseconds
        usage: Usage reported by the provider
    """

    call_id: str
    function_type: str
    model: ModelInformation | None
    started_at: float
    finished_at: float
    duration_ms: float
    run_id: str | None = None
    session_id: str | None = None
    user_id: str | None = None
    function_id: str | None = None
    parent_call_id: str | None = None
    usage: CallUsage | None = None
