"""
Prompt types, prompt templates and the prompt-template model wrapper.

A prompt template maps a high-level prompt (plain text, an instruction or a
chat) onto the prompt format a model accepts, and may add stop sequences.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, Literal, TypeVar

from modelfusion.errors.base import InvalidPromptError
from modelfusion.model_function.text_generation_model import TextGenerationModel

if TYPE_CHECKING:
    from collections.abc import AsyncIterable, Callable

    from modelfusion.model_function.model import CallOptions, ModelResponse
    from modelfusion.model_function.text_generation_model import (
        TextGenerationModelSettings,
        TextGenerationResult,
    )
    from modelfusion.run.events import ModelInformation
    from modelfusion.streaming.delta import Delta
    from modelfusion.tokenizer.base import FullTokenizer

SourceP = TypeVar("SourceP")
TargetP = TypeVar("TargetP")


@dataclass
class InstructionPrompt:
    """A single instruction with optional system message and response prefix."""

    instruction: str
    system: str | None = None
    response_prefix: str | None = None


@dataclass
class ChatMessage:
    """A message in a chat prompt."""

    role: Literal["user", "assistant"]
    content: str

    @classmethod
    def user(cls, content: str) -> ChatMessage:
        return cls(role="user", content=content)

    @classmethod
    def assistant(cls, content: str) -> ChatMessage:
        return cls(role="assistant", content=content)


@dataclass
class ChatPrompt:
    """A conversation that ends with a user message."""

    messages: list[ChatMessage] = field(default_factory=list)
    system: str | None = None


def validate_chat_prompt(prompt: ChatPrompt) -> None:
    """Check that a chat prompt can be sent to a model.

    Raises:
        InvalidPromptError: If there are no messages or the last message is
            not a user message
    """
    if not prompt.messages:
        raise InvalidPromptError("ChatPrompt should have at least one message.", prompt)
    if prompt.messages[-1].role != "user":
        raise InvalidPromptError("Last message in a chat prompt should be a user message.", prompt)


@dataclass(frozen=True)
class TextGenerationPromptTemplate(Generic[SourceP, TargetP]):
    """Maps prompts of one type onto prompts of another.

    Attributes:
        format: Formats a source prompt into the model's prompt
        stop_sequences: Stop sequences the formatted prompt needs
    """

    format: Callable[[SourceP], TargetP]
    stop_sequences: tuple[str, ...] = ()


class PromptTemplateTextGenerationModel(TextGenerationModel[Any]):
    """A text generation model that accepts the prompts of a template.

    Example:
        >>> model = base_model.with_prompt_template(text_prompt.chat())
        >>> text = await generate_text(model, ChatPrompt([ChatMessage.user("Hi")]))
    """

    def __init__(
        self,
        *,
        model: TextGenerationModel[Any],
        prompt_template: TextGenerationPromptTemplate[Any, Any],
    ) -> None:
        if prompt_template.stop_sequences:
            merged = dict.fromkeys((*model.settings.stop_sequences, *prompt_template.stop_sequences))
            model = model.with_settings(stop_sequences=tuple(merged))
        super().__init__(model.settings)
        self._model = model
        self._prompt_template = prompt_template

    @property
    def model(self) -> TextGenerationModel[Any]:
        return self._model

    @property
    def prompt_template(self) -> TextGenerationPromptTemplate[Any, Any]:
        return self._prompt_template

    @property
    def provider(self) -> str:
        return self._model.provider

    @property
    def model_name(self) -> str | None:
        return self._model.model_name

    @property
    def settings(self) -> TextGenerationModelSettings:
        return self._model.settings

    @property
    def settings_for_event(self) -> dict[str, Any]:
        return self._model.settings_for_event

    @property
    def model_information(self) -> ModelInformation:
        return self._model.model_information

    @property
    def context_window_size(self) -> int | None:
        return self._model.context_window_size

    @property
    def tokenizer(self) -> FullTokenizer | None:
        return self._model.tokenizer

    async def count_prompt_tokens(self, prompt: Any) -> int:
        return await self._model.count_prompt_tokens(self._prompt_template.format(prompt))

    async def do_generate_texts(
        self, prompt: Any, options: CallOptions
    ) -> ModelResponse[list[TextGenerationResult]]:
        return await self._model.do_generate_texts(self._prompt_template.format(prompt), options)

    def restore_generated_texts(self, raw_response: Any) -> ModelResponse[list[TextGenerationResult]]:
        return self._model.restore_generated_texts(raw_response)

    async def do_stream_text(self, prompt: Any, options: CallOptions) -> AsyncIterable[Delta]:
        return await self._model.do_stream_text(self._prompt_template.format(prompt), options)

    def extract_text_delta(self, delta: Any) -> str | None:
        return self._model.extract_text_delta(delta)

    def with_settings(self, **changes: Any) -> PromptTemplateTextGenerationModel:
        return PromptTemplateTextGenerationModel(
            model=self._model.with_settings(**changes),
            prompt_template=self._prompt_template,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self._model!r})"
