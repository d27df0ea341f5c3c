"""
Transcription model interface and ``transcribe``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from modelfusion.model_function.execute_call import ModelCallResult, execute_standard_call
from modelfusion.model_function.model import Model, ModelSettings
from modelfusion.run.events import FunctionType

if TYPE_CHECKING:
    from modelfusion.model_function.model import CallOptions, ModelResponse
    from modelfusion.model_function.options import FunctionOptions

S = TypeVar("S", bound=ModelSettings)


@dataclass
class AudioData:
    """Audio to transcribe.

    Attributes:
        data: Raw audio bytes
        mime_type: Audio format (e.g. 'audio/mpeg', 'audio/wav')
    """

    data: bytes
    mime_type: str = "audio/mpeg"

    def __repr__(self) -> str:
        return f"AudioData(mime_type={self.mime_type!r}, size={len(self.data)})"


class TranscriptionModel(Model[S]):
    """Model that turns audio into text."""

    async def do_transcribe(self, data: Any, options: CallOptions) -> ModelResponse[str]:
        """Transcribe audio data."""
        raise NotImplementedError(f"{type(self).__name__} does not transcribe audio")


async def transcribe(
    model: TranscriptionModel[Any],
    data: Any,
    *,
    options: FunctionOptions | None = None,
    full_response: bool = False,
) -> str | ModelCallResult[str]:
    """Transcribe audio data into text.

    Example:
        >>> data = Path("data/test.mp3").read_bytes()
        >>> transcription = await transcribe(model, AudioData(data, "audio/mpeg"))
    """
    result = await execute_standard_call(
        function_type=FunctionType.TRANSCRIBE,
        model=model,
        options=options,
        input=data,
        generate_response=lambda call_options: model.do_transcribe(data, call_options),
    )
    return result if full_response else result.value
