"""
Function events emitted around every model and tool call.

A call emits one ``started`` event and one ``finished`` event. The finished
event carries a result with status ``success``, ``error`` or ``abort``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FunctionType(str, Enum):
    """Kinds of functions that emit events."""

    GENERATE_TEXT = "generate-text"
    STREAM_TEXT = "stream-text"
    EMBED = "embed"
    TRANSCRIBE = "transcribe"
    GENERATE_SPEECH = "generate-speech"
    STREAM_SPEECH = "stream-speech"
    GENERATE_IMAGE = "generate-image"
    GENERATE_STRUCTURE = "generate-structure"
    GENERATE_TOOL_CALL = "generate-tool-call"
    EXECUTE_TOOL = "execute-tool"
    EXECUTE_FUNCTION = "execute-function"


class FinishStatus(str, Enum):
    """Outcome of a finished function call."""

    SUCCESS = "success"
    ERROR = "error"
    ABORT = "abort"


@dataclass
class ModelInformation:
    """Provider and model name of the model behind a call."""

    provider: str
    model_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"provider": self.provider, "model_name": self.model_name}


@dataclass
class CallUsage:
    """Usage reported by a model call (token counts, durations, ...)."""

    values: dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        return self.values[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def to_dict(self) -> dict[str, Any]:
        return dict(self.values)


@dataclass
class FunctionCallMetadata:
    """Identifiers and context shared by the events of one call.

    Attributes:
        function_type: Kind of function
        call_id: Unique identifier of this call
        parent_call_id: Call id of the enclosing call, if any
        run_id: Identifier of the enclosing run
        session_id: Session identifier of the enclosing run
        user_id: User identifier of the enclosing run
        function_id: Caller-supplied function identifier
        model: Model information (None for non-model functions)
        settings: Model settings relevant for observers
        input: Function input
        timestamp: Unix time of the started event
        started_at: Unix time the call started
    """

    function_type: FunctionType
    call_id: str
    started_at: float
    parent_call_id: str | None = None
    run_id: str | None = None
    session_id: str | None = None
    user_id: str | None = None
    function_id: str | None = None
    model: ModelInformation | None = None
    settings: dict[str, Any] = field(default_factory=dict)
    input: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "function_type": self.function_type.value,
            "call_id": self.call_id,
            "parent_call_id": self.parent_call_id,
            "run_id": self.run_id,
            "session_id": self.session_id,
            "user_id": self.user_id,
            "function_id": self.function_id,
            "model": self.model.to_dict() if self.model else None,
            "settings": self.settings,
            "input": self.input,
            "started_at": self.started_at,
        }


@dataclass
class FunctionResult:
    """Result carried by a finished event."""

    status: FinishStatus
    value: Any = None
    raw_response: Any = None
    usage: CallUsage | None = None
    error: BaseException | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"status": self.status.value}
        if self.status == FinishStatus.SUCCESS:
            data["value"] = self.value
            if self.raw_response is not None:
                data["raw_response"] = self.raw_response
            if self.usage is not None:
                data["usage"] = self.usage.to_dict()
        elif self.status == FinishStatus.ERROR:
            data["error"] = _error_to_dict(self.error)
        return data


@dataclass
class FunctionStartedEvent:
    """Emitted when a function call starts."""

    metadata: FunctionCallMetadata
    timestamp: float

    event_type: str = "started"

    @property
    def function_type(self) -> FunctionType:
        return self.metadata.function_type

    @property
    def call_id(self) -> str:
        return self.metadata.call_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_type": self.event_type,
            "timestamp": self.timestamp,
            **self.metadata.to_dict(),
        }


@dataclass
class FunctionFinishedEvent:
    """Emitted when a function call finishes (successfully or not)."""

    metadata: FunctionCallMetadata
    timestamp: float
    finished_at: float
    duration_ms: float
    result: FunctionResult

    event_type: str = "finished"

    @property
    def function_type(self) -> FunctionType:
        return self.metadata.function_type

    @property
    def call_id(self) -> str:
        return self.metadata.call_id

    @property
    def status(self) -> FinishStatus:
        return self.result.status

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_type": self.event_type,
            "timestamp": self.timestamp,
            **self.metadata.to_dict(),
            "finished_at": self.finished_at,
            "duration_ms": self.duration_ms,
            "result": self.result.to_dict(),
        }


FunctionEvent = FunctionStartedEvent | FunctionFinishedEvent


def _error_to_dict(error: BaseException | None) -> dict[str, Any] | None:
    if error is None:
        return None
    to_dict = getattr(error, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return {"name": type(error).__name__, "message": str(error)}
