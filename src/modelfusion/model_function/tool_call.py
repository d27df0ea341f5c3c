"""
Tool call generation: a model picks arguments for a tool.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from modelfusion.errors.base import AbortError
from modelfusion.errors.generation import ToolCallArgumentsValidationError, ToolCallGenerationError
from modelfusion.model_function.execute_call import ModelCallResult, execute_standard_call
from modelfusion.model_function.model import Model, ModelResponse, ModelSettings
from modelfusion.model_function.tool import ToolCall
from modelfusion.run.events import FunctionType
from modelfusion.run.run import create_id
from modelfusion.schema.validate import safe_validate_types

if TYPE_CHECKING:
    from collections.abc import Callable

    from modelfusion.model_function.model import CallOptions
    from modelfusion.model_function.options import FunctionOptions
    from modelfusion.model_function.text_generation_model import (
        TextGenerationModel,
        TextGenerationModelSettings,
    )
    from modelfusion.model_function.tool import Tool, ToolDefinition
    from modelfusion.run.events import ModelInformation

S = TypeVar("S", bound=ModelSettings)
SourceP = TypeVar("SourceP")


class ToolCallGenerationModel(Model[S]):
    """Model that generates a call of a given tool.

    ``do_generate_tool_call`` returns ``{"id": ..., "args": ...}`` (args not
    yet validated) or None when the model did not call the tool.
    """

    async def do_generate_tool_call(
        self, tool: ToolDefinition, prompt: Any, options: CallOptions
    ) -> ModelResponse[dict[str, Any] | None]:
        raise NotImplementedError(f"{type(self).__name__} does not generate tool calls")


@dataclass(frozen=True)
class ToolCallPromptTemplate(Generic[SourceP]):
    """Turns a prompt and tool into a text prompt, and text into a tool call.

    Attributes:
        create_prompt: Builds the text model prompt
        extract_tool_call: Parses the generated text into ``{"id", "args"}`` or None
    """

    create_prompt: Callable[[SourceP, ToolDefinition], Any]
    extract_tool_call: Callable[[str], dict[str, Any] | None]


class TextGenerationToolCallModel(ToolCallGenerationModel[Any]):
    """Tool call generation on top of a text generation model."""

    def __init__(
        self,
        *,
        model: TextGenerationModel[Any],
        template: ToolCallPromptTemplate[Any],
    ) -> None:
        super().__init__(model.settings)
        self._model = model
        self._template = template

    @property
    def model(self) -> TextGenerationModel[Any]:
        return self._model

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

    async def do_generate_tool_call(
        self, tool: ToolDefinition, prompt: Any, options: CallOptions
    ) -> ModelResponse[dict[str, Any] | None]:
        response = await self._model.do_generate_texts(self._template.create_prompt(prompt, tool), options)
        text = response.value[0].text if response.value else ""

        try:
            tool_call = self._template.extract_tool_call(text)
        except Exception as e:
            raise ToolCallGenerationError(tool.name, e) from e

        return ModelResponse(value=tool_call, raw_response=response.raw_response, usage=response.usage)

    def with_settings(self, **changes: Any) -> TextGenerationToolCallModel:
        return TextGenerationToolCallModel(
            model=self._model.with_settings(**changes),
            template=self._template,
        )


async def generate_tool_call(
    model: ToolCallGenerationModel[Any],
    tool: Tool[Any, Any],
    prompt: Any | Callable[[Tool[Any, Any]], Any],
    *,
    options: FunctionOptions | None = None,
    full_response: bool = False,
) -> ToolCall | ModelCallResult[ToolCall]:
    """Generate a call of ``tool``.

    Args:
        model: Tool call generation model
        tool: The tool to call
        prompt: Prompt, or a function that builds the prompt from the tool
        options: Function options
        full_response: Return tool call, raw response and metadata

    Returns:
        Tool call with validated arguments

    Raises:
        ToolCallGenerationError: If the model failed or produced no tool call
        ToolCallArgumentsValidationError: If the arguments do not match the
            tool's parameter schema
    """
    resolved_prompt = prompt(tool) if callable(prompt) else prompt

    async def generate_response(call_options: CallOptions) -> ModelResponse[ToolCall]:
        try:
            response = await model.do_generate_tool_call(tool.definition, resolved_prompt, call_options)
        except (AbortError, ToolCallGenerationError):
            raise
        except Exception as e:
            raise ToolCallGenerationError(tool.name, e) from e

        generated = response.value
        if generated is None:
            raise ToolCallGenerationError(tool.name, "The model did not generate a tool call.")

        args = generated.get("args")
        validation = safe_validate_types(args, tool.parameters)
        if not validation.success:
            raise ToolCallArgumentsValidationError(tool.name, args, validation.error)

        return ModelResponse(
            value=ToolCall(
                id=generated.get("id") or create_id("tool-call"),
                name=tool.name,
                args=validation.value,
            ),
            raw_response=response.raw_response,
            usage=response.usage,
        )

    result = await execute_standard_call(
        function_type=FunctionType.GENERATE_TOOL_CALL,
        model=model,
        options=options,
        input=resolved_prompt,
        generate_response=generate_response,
    )
    return result if full_response else result.value
