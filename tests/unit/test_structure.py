"""Tests for generate_structure."""

from typing import Literal

import pytest
from pydantic import BaseModel

from modelfusion.errors import StructureParseError, StructureValidationError
from modelfusion.model_function import (
    FunctionOptions,
    InstructionPrompt,
    ModelResponse,
    ModelSettings,
    StructureGenerationModel,
    TextGenerationModel,
    TextGenerationModelSettings,
    TextGenerationResult,
    generate_structure,
    json_structure_prompt,
)
from modelfusion.run import FinishStatus
from modelfusion.schema import json_schema, pydantic_schema


class Sentiment(BaseModel):
    sentiment: Literal["positive", "neutral", "negative"]


class FixedStructureModel(StructureGenerationModel[ModelSettings]):
    """Returns the same value for every schema."""

    def __init__(self, value) -> None:  # type: ignore[no-untyped-def]
        super().__init__(ModelSettings())
        self.value = value
        self.calls: list = []

    @property
    def provider(self) -> str:
        return "test"

    async def do_generate_structure(self, schema, prompt, options):  # type: ignore[no-untyped-def]
        self.calls.append((schema, prompt))
        return ModelResponse(value=self.value, raw_response={"value": self.value})


class CannedTextModel(TextGenerationModel[TextGenerationModelSettings]):
    """Text model that always answers with one text."""

    def __init__(self, text: str) -> None:
        super().__init__(TextGenerationModelSettings())
        self.text = text
        self.prompts: list = []

    @property
    def provider(self) -> str:
        return "test"

    async def do_generate_texts(self, prompt, options):  # type: ignore[no-untyped-def]
        self.prompts.append(prompt)
        return ModelResponse(
            value=[TextGenerationResult(text=self.text, finish_reason="stop")],
            raw_response={"text": self.text},
        )


class TestGenerateStructure:
    """Tests for structure models."""

    @pytest.mark.asyncio
    async def test_pydantic_value(self, collector) -> None:
        """Test validation into a pydantic model."""
        model = FixedStructureModel({"sentiment": "negative"})
        result = await generate_structure(
            model,
            pydantic_schema(Sentiment),
            "The package smelled awful.",
            options=FunctionOptions(observers=[collector]),
        )

        assert result == Sentiment(sentiment="negative")
        assert model.calls[0][1] == "The package smelled awful."
        assert collector.events[0].function_type.value == "generate-structure"
        assert collector.finished[0].status == FinishStatus.SUCCESS

    @pytest.mark.asyncio
    async def test_prompt_from_schema(self) -> None:
        """Test building the prompt from the schema."""
        model = FixedStructureModel({"name": "Ada"})
        schema = json_schema({"type": "object", "properties": {"name": {"type": "string"}}})

        await generate_structure(model, schema, lambda s: f"Fill {sorted(s.get_json_schema())}")

        assert model.calls[0][1] == "Fill ['properties', 'type']"

    @pytest.mark.asyncio
    async def test_validation_error(self, collector) -> None:
        """Test that values outside the schema are rejected."""
        model = FixedStructureModel({"sentiment": "furious"})

        with pytest.raises(StructureValidationError) as exc_info:
            await generate_structure(
                model,
                pydantic_schema(Sentiment),
                "text",
                options=FunctionOptions(observers=[collector]),
            )

        assert exc_info.value.value == {"sentiment": "furious"}
        assert exc_info.value.value_text == '{"sentiment": "furious"}'
        assert exc_info.value.cause is not None
        assert collector.finished[0].status == FinishStatus.ERROR

    @pytest.mark.asyncio
    async def test_full_response(self) -> None:
        """Test raw response and metadata."""
        model = FixedStructureModel({"sentiment": "positive"})
        value, raw_response, metadata = await generate_structure(
            model, pydantic_schema(Sentiment), "great", full_response=True
        )
        assert value.sentiment == "positive"
        assert raw_response == {"value": {"sentiment": "positive"}}
        assert metadata.function_type == "generate-structure"


class TestStructureFromText:
    """Tests for structure generation through a text model."""

    @pytest.mark.asyncio
    async def test_json_text_prompt(self) -> None:
        """Test the JSON prompt and parsing of the answer."""
        text_model = CannedTextModel('{"sentiment": "positive"}')
        model = text_model.with_instruction_prompt().as_structure_generation_model(
            json_structure_prompt.text()
        )

        result = await generate_structure(model, pydantic_schema(Sentiment), "Lovely weather.")

        assert result.sentiment == "positive"
        prompt = text_model.prompts[0]
        assert prompt.startswith("JSON schema:\n{")
        assert "You MUST answer with a JSON object" in prompt
        assert prompt.endswith("Lovely weather.\n\n")

    @pytest.mark.asyncio
    async def test_model_information(self, collector) -> None:
        """Test that events report the underlying text model."""
        text_model = CannedTextModel('{"sentiment": "neutral"}')
        model = text_model.with_instruction_prompt().as_structure_generation_model(
            json_structure_prompt.text()
        )

        await generate_structure(
            model,
            pydantic_schema(Sentiment),
            "ok",
            options=FunctionOptions(observers=[collector]),
        )

        assert collector.events[0].metadata.model.provider == "test"
        assert "trim_whitespace" in collector.events[0].metadata.settings

    @pytest.mark.asyncio
    async def test_instruction_template(self) -> None:
        """Test that the schema is appended to an existing system message."""
        text_model = CannedTextModel('{"sentiment": "neutral"}')
        model = text_model.with_instruction_prompt().as_structure_generation_model(
            json_structure_prompt.instruction()
        )

        await generate_structure(
            model,
            pydantic_schema(Sentiment),
            InstructionPrompt(instruction="Classify: ok", system="You are a classifier."),
        )

        assert text_model.prompts[0].startswith("You are a classifier.\n\nJSON schema:\n")

    @pytest.mark.asyncio
    async def test_parse_error(self) -> None:
        """Test that non-JSON answers raise a parse error."""
        text_model = CannedTextModel("I think it is positive.")
        model = text_model.with_instruction_prompt().as_structure_generation_model(
            json_structure_prompt.text()
        )

        with pytest.raises(StructureParseError) as exc_info:
            await generate_structure(model, pydantic_schema(Sentiment), "text")

        assert exc_info.value.value_text == "I think it is positive."

    def test_with_settings(self) -> None:
        """Test that settings changes reach the text model."""
        model = CannedTextModel("{}").as_structure_generation_model(json_structure_prompt.text())
        changed = model.with_settings(max_generation_tokens=50)

        assert changed.settings.max_generation_tokens == 50
        assert model.settings.max_generation_tokens is None
