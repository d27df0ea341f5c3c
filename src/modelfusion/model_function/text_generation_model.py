"""
Text generation model interface.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from modelfusion.model_function.model import Model, ModelSettings

if TYPE_CHECKING:
    from collections.abc import AsyncIterable

    from modelfusion.model_function.model import CallOptions, ModelResponse
    from modelfusion.model_function.prompt_template import (
        PromptTemplateTextGenerationModel,
        TextGenerationPromptTemplate,
    )
    from modelfusion.model_function.structure import (
        StructureFromTextGenerationModel,
        StructureFromTextPromptTemplate,
    )
    from modelfusion.model_function.tool_call import (
        TextGenerationToolCallModel,
        ToolCallPromptTemplate,
    )
    from modelfusion.streaming.delta import Delta
    from modelfusion.tokenizer.base import FullTokenizer

S = TypeVar("S", bound="TextGenerationModelSettings")


@dataclass(frozen=True)
class TextGenerationModelSettings(ModelSettings):
    """Settings shared by text generation models.

    Attributes:
        max_generation_tokens: Upper bound of generated tokens (None = provider default)
        stop_sequences: Sequences that end the generation; not part of the output
        number_of_generations: Number of texts to generate per call
        trim_whitespace: Strip leading and trailing whitespace from generated text
    """

    max_generation_tokens: int | None = None
    stop_sequences: tuple[str, ...] = ()
    number_of_generations: int | None = None
    trim_whitespace: bool = True


@dataclass
class TextGenerationResult:
    """One generated text.

    Attributes:
        text: Generated text
        finish_reason: stop, length, content-filter, tool-calls, error, other or unknown
    """

    text: str
    finish_reason: str = "unknown"


class TextGenerationModel(Model[S]):
    """Model that turns a prompt into one or more texts.

    Subclasses implement :meth:`do_generate_texts`; streaming models also
    implement :meth:`do_stream_text`. Models that support caching implement
    :meth:`restore_generated_texts` to rebuild a response from a cached
    raw response.
    """

    @property
    def context_window_size(self) -> int | None:
        return None

    @property
    def tokenizer(self) -> FullTokenizer | None:
        return None

    async def count_prompt_tokens(self, prompt: Any) -> int:
        """Count the tokens of a prompt.

        Raises:
            NotImplementedError: If the model has no tokenizer
        """
        if self.tokenizer is None:
            raise NotImplementedError(f"{type(self).__name__} has no tokenizer")
        return len(await self.tokenizer.tokenize(str(prompt)))

    async def do_generate_texts(
        self, prompt: Any, options: CallOptions
    ) -> ModelResponse[list[TextGenerationResult]]:
        """Generate texts for a prompt."""
        raise NotImplementedError(f"{type(self).__name__} does not generate texts")

    def restore_generated_texts(self, raw_response: Any) -> ModelResponse[list[TextGenerationResult]]:
        """Rebuild a response from a cached raw response."""
        raise NotImplementedError(f"{type(self).__name__} does not support caching")

    async def do_stream_text(self, prompt: Any, options: CallOptions) -> AsyncIterable[Delta]:
        """Open a stream of text deltas."""
        raise NotImplementedError(f"{type(self).__name__} does not support streaming")

    def extract_text_delta(self, delta: Any) -> str | None:
        """Text of a stream delta (None when the delta carries no text)."""
        return delta if isinstance(delta, str) else None

    def with_prompt_template(
        self, prompt_template: TextGenerationPromptTemplate[Any, Any]
    ) -> PromptTemplateTextGenerationModel:
        """Wrap the model so it accepts the template's prompt type."""
        from modelfusion.model_function.prompt_template import PromptTemplateTextGenerationModel

        return PromptTemplateTextGenerationModel(model=self, prompt_template=prompt_template)

    def with_text_prompt(self) -> PromptTemplateTextGenerationModel:
        from modelfusion.model_function import text_prompt

        return self.with_prompt_template(text_prompt.text())

    def with_instruction_prompt(self) -> PromptTemplateTextGenerationModel:
        from modelfusion.model_function import text_prompt

        return self.with_prompt_template(text_prompt.instruction())

    def with_chat_prompt(self, **kwargs: Any) -> PromptTemplateTextGenerationModel:
        from modelfusion.model_function import text_prompt

        return self.with_prompt_template(text_prompt.chat(**kwargs))

    def as_structure_generation_model(
        self, prompt_template: StructureFromTextPromptTemplate[Any]
    ) -> StructureFromTextGenerationModel:
        """Use the model for structure generation through a text prompt."""
        from modelfusion.model_function.structure import StructureFromTextGenerationModel

        return StructureFromTextGenerationModel(model=self, template=prompt_template)

    def as_tool_call_generation_model(
        self, prompt_template: ToolCallPromptTemplate[Any]
    ) -> TextGenerationToolCallModel:
        """Use the model for tool calls through a text prompt."""
        from modelfusion.model_function.tool_call import TextGenerationToolCallModel

        return TextGenerationToolCallModel(model=self, template=prompt_template)
