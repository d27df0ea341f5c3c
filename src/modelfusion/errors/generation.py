"""
Errors raised by structure generation and tool calling.
"""

from __future__ import annotations

from typing import Any

from modelfusion.errors.base import ErrorContext, ModelFusionError


class StructureValidationError(ModelFusionError):
    """Generated structure does not match the requested schema.

    Attributes:
        value_text: Raw text the model produced
        value: Parsed value (None when the text was not JSON)
    """

    def __init__(
        self,
        *,
        value_text: str,
        value: Any = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(
            f"Structure validation failed: {cause}",
            ErrorContext(source="structure", details={"value_text": value_text}),
        )
        self.value_text = value_text
        self.value = value
        self.__cause__ = cause


class ToolCallGenerationError(ModelFusionError):
    """The model failed to produce a usable tool call."""

    def __init__(self, tool_name: str, cause: BaseException | str) -> None:
        super().__init__(
            f"Tool call generation failed for tool '{tool_name}'. Error: {cause}",
            ErrorContext(source="tool", details={"tool_name": tool_name}),
        )
        self.tool_name = tool_name
        if isinstance(cause, BaseException):
            self.__cause__ = cause


class ToolCallArgumentsValidationError(ModelFusionError):
    """Tool call arguments do not match the tool's parameter schema.

    Attributes:
        tool_name: Name of the tool
        tool_args: The arguments the model generated
    """

    def __init__(self, tool_name: str, args: Any, cause: BaseException) -> None:
        super().__init__(
            f"Argument validation failed for tool '{tool_name}'.\n"
            f"Arguments: {args}.\n"
            f"Error message: {cause}",
            ErrorContext(source="tool", details={"tool_name": tool_name}),
        )
        self.tool_name = tool_name
        self.tool_args = args
        self.__cause__ = cause


class ToolExecutionError(ModelFusionError):
    """A tool raised while executing."""

    def __init__(self, tool_name: str, input: Any, cause: BaseException) -> None:
        super().__init__(
            f"Error executing tool '{tool_name}': {cause}",
            ErrorContext(source="tool", details={"tool_name": tool_name}),
        )
        self.tool_name = tool_name
        self.input = input
        self.__cause__ = cause


class NoSuchToolDefinitionError(ModelFusionError):
    """A model called a tool that was not offered to it."""

    def __init__(self, tool_name: str, parameters: Any) -> None:
        super().__init__(
            f"Tool definition '{tool_name}' not found. Parameters: {parameters}.",
            ErrorContext(source="tool", details={"tool_name": tool_name}),
        )
        self.tool_name = tool_name
        self.parameters = parameters


class StructureParseError(ModelFusionError):
    """Generated text could not be parsed into a structure."""

    def __init__(self, *, value_text: str, cause: BaseException) -> None:
        super().__init__(
            f"Structure parsing failed: {cause}",
            ErrorContext(source="structure", details={"value_text": value_text}),
        )
        self.value_text = value_text
        self.__cause__ = cause
