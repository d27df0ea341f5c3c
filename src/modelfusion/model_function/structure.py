"""
Structure generation: schema-validated values produced by a model.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from modelfusion.errors.generation import StructureParseError, StructureValidationError
from modelfusion.model_function.execute_call import ModelCallResult, execute_standard_call
from modelfusion.model_function.model import Model, ModelResponse, ModelSettings
from modelfusion.run.events import FunctionType
from modelfusion.schema.validate import safe_validate_types

if TYPE_CHECKING:
    from collections.abc import Callable

    from modelfusion.model_function.model import CallOptions
    from modelfusion.model_function.options import FunctionOptions
    from modelfusion.model_function.text_generation_model import (
        TextGenerationModel,
        TextGenerationModelSettings,
    )
    from modelfusion.run.events import ModelInformation
    from modelfusion.schema.base import Schema

S = TypeVar("S", bound=ModelSettings)
T = TypeVar("T")
SourceP = TypeVar("SourceP")


class StructureGenerationModel(Model[S]):
    """Model that produces a (not yet validated) structure for a schema."""

    async def do_generate_structure(
        self, schema: Schema[Any], prompt: Any, options: CallOptions
    ) -> ModelResponse[Any]:
        """Generate a value that should match ``schema``."""
        raise NotImplementedError(f"{type(self).__name__} does not generate structures")


@dataclass(frozen=True)
class StructureFromTextPromptTemplate(Generic[SourceP]):
    """Turns a prompt and schema into a text prompt, and text into a value.

    Attributes:
        create_prompt: Builds the text model prompt from the prompt and schema
        extract_structure: Parses the generated text
    """

    create_prompt: Callable[[SourceP, Schema[Any]], Any]
    extract_structure: Callable[[str], Any]


class StructureFromTextGenerationModel(StructureGenerationModel[Any]):
    """Structure generation on top of a text generation model."""

    def __init__(
        self,
        *,
        model: TextGenerationModel[Any],
        template: StructureFromTextPromptTemplate[Any],
    ) -> None:
        super().__init__(model.settings)
        self._model = model
        self._template = template

    @property
    def model(self) -> TextGenerationModel[Any]:
        return self._model

    @property
    def template(self) -> StructureFromTextPromptTemplate[Any]:
        return self._template

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

    async def do_generate_structure(
        self, schema: Schema[Any], prompt: Any, options: CallOptions
    ) -> ModelResponse[Any]:
        response = await self._model.do_generate_texts(
            self._template.create_prompt(prompt, schema), options
        )
        text = response.value[0].text if response.value else ""

        try:
            value = self._template.extract_structure(text)
        except Exception as e:
            raise StructureParseError(value_text=text, cause=e) from e

        return ModelResponse(value=value, raw_response=response.raw_response, usage=response.usage)

    def with_settings(self, **changes: Any) -> StructureFromTextGenerationModel:
        return StructureFromTextGenerationModel(
            model=self._model.with_settings(**changes),
            template=self._template,
        )


async def generate_structure(
    model: StructureGenerationModel[Any],
    schema: Schema[T],
    prompt: Any | Callable[[Schema[T]], Any],
    *,
    options: FunctionOptions | None = None,
    full_response: bool = False,
) -> T | ModelCallResult[T]:
    """Generate a value that matches a schema.

    Args:
        model: Structure generation model
        schema: Schema the value must match
        prompt: Prompt, or a function that builds the prompt from the schema
        options: Function options
        full_response: Return value, raw response and metadata

    Returns:
        The validated value, or the full response

    Raises:
        StructureParseError: If the model output could not be parsed
        StructureValidationError: If the value does not match the schema

    Example:
        >>> class Sentiment(BaseModel):
        ...     sentiment: Literal["positive", "neutral", "negative"]
        >>> result = await generate_structure(
        ...     model.with_instruction_prompt().as_structure_generation_model(json_structure_prompt.text()),
        ...     pydantic_schema(Sentiment),
        ...     "After I opened the package, I was met by a very unpleasant smell.",
        ... )
    """
    resolved_prompt = prompt(schema) if callable(prompt) else prompt

    async def generate_response(call_options: CallOptions) -> ModelResponse[T]:
        response = await model.do_generate_structure(schema, resolved_prompt, call_options)
        value = response.value

        validation = safe_validate_types(value, schema)
        if not validation.success:
            raise StructureValidationError(
                value_text=json.dumps(value, default=str),
                value=value,
                cause=validation.error,
            )

        return ModelResponse(
            value=validation.value,
            raw_response=response.raw_response,
            usage=response.usage,
        )

    result = await execute_standard_call(
        function_type=FunctionType.GENERATE_STRUCTURE,
        model=model,
        options=options,
        input=resolved_prompt,
        generate_response=generate_response,
    )
    return result if full_response else result.value
