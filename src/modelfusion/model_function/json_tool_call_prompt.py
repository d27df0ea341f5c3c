"""
Prompt templates that ask a text model to answer with the JSON arguments of a tool.

Example:
    >>> from modelfusion.model_function import json_tool_call_prompt
    >>> tool_model = model.with_instruction_prompt().as_tool_call_generation_model(
    ...     json_tool_call_prompt.text()
    ... )
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from modelfusion.model_function.prompt_template import InstructionPrompt
from modelfusion.model_function.tool_call import ToolCallPromptTemplate
from modelfusion.run.run import create_id
from modelfusion.schema.validate import parse_json

if TYPE_CHECKING:
    from modelfusion.model_function.tool import ToolDefinition


def _describe_tool(tool: ToolDefinition) -> str:
    lines = [f'You are calling the function "{tool.name}".']
    if tool.description:
        lines.append(f"Function description: {tool.description}")
    lines.append(f"Function parameters JSON schema: {json.dumps(tool.parameters)}")
    lines.append("")
    lines.append("You MUST answer with a JSON object that matches the JSON schema above.")
    return "\n".join(lines)


def _extract_tool_call(text: str) -> dict[str, Any]:
    return {"id": create_id("tool-call"), "args": parse_json(text)}


def text() -> ToolCallPromptTemplate[str]:
    """Template for text prompts; the tool description becomes the system message."""

    def create_prompt(prompt: str, tool: ToolDefinition) -> InstructionPrompt:
        return InstructionPrompt(instruction=prompt, system=_describe_tool(tool))

    return ToolCallPromptTemplate(create_prompt=create_prompt, extract_tool_call=_extract_tool_call)


def instruction() -> ToolCallPromptTemplate[InstructionPrompt]:
    """Template for instruction prompts; the tool description is appended to the system message."""

    def create_prompt(prompt: InstructionPrompt, tool: ToolDefinition) -> InstructionPrompt:
        description = _describe_tool(tool)
        return InstructionPrompt(
            instruction=prompt.instruction,
            system=f"{prompt.system}\n\n{description}" if prompt.system else description,
            response_prefix=prompt.response_prefix,
        )

    return ToolCallPromptTemplate(create_prompt=create_prompt, extract_tool_call=_extract_tool_call)
