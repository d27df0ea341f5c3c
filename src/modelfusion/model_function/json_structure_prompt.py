"""
Prompt templates that ask a text model to answer with JSON matching a schema.

Example:
    >>> from modelfusion.model_function import json_structure_prompt
    >>> structure_model = model.with_instruction_prompt().as_structure_generation_model(
    ...     json_structure_prompt.text()
    ... )
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from modelfusion.model_function.prompt_template import InstructionPrompt
from modelfusion.model_function.structure import StructureFromTextPromptTemplate
from modelfusion.schema.validate import parse_json

if TYPE_CHECKING:
    from modelfusion.schema.base import Schema

DEFAULT_SCHEMA_PREFIX = "JSON schema:"
DEFAULT_SCHEMA_SUFFIX = "\nYou MUST answer with a JSON object that matches the JSON schema above."


def _describe_schema(schema: Schema[Any], prefix: str, suffix: str) -> str:
    return "\n".join([prefix, json.dumps(schema.get_json_schema()), suffix])


def text(
    *,
    schema_prefix: str = DEFAULT_SCHEMA_PREFIX,
    schema_suffix: str = DEFAULT_SCHEMA_SUFFIX,
) -> StructureFromTextPromptTemplate[str]:
    """Template for text prompts; the schema goes into the system message."""

    def create_prompt(prompt: str, schema: Schema[Any]) -> InstructionPrompt:
        return InstructionPrompt(
            instruction=prompt,
            system=_describe_schema(schema, schema_prefix, schema_suffix),
        )

    return StructureFromTextPromptTemplate(create_prompt=create_prompt, extract_structure=parse_json)


def instruction(
    *,
    schema_prefix: str = DEFAULT_SCHEMA_PREFIX,
    schema_suffix: str = DEFAULT_SCHEMA_SUFFIX,
) -> StructureFromTextPromptTemplate[InstructionPrompt]:
    """Template for instruction prompts; the schema is appended to the system message."""

    def create_prompt(prompt: InstructionPrompt, schema: Schema[Any]) -> InstructionPrompt:
        description = _describe_schema(schema, schema_prefix, schema_suffix)
        system = f"{prompt.system}\n\n{description}" if prompt.system else description
        return InstructionPrompt(
            instruction=prompt.instruction,
            system=system,
            response_prefix=prompt.response_prefix,
        )

    return StructureFromTextPromptTemplate(create_prompt=create_prompt, extract_structure=parse_json)
