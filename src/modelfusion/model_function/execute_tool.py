"""
Tool execution: ``execute_tool`` and ``use_tool``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from modelfusion.errors.base import AbortError
from modelfusion.errors.generation import ToolExecutionError
from modelfusion.model_function.execute_function import execute_function
from modelfusion.model_function.tool_call import generate_tool_call
from modelfusion.run.events import FunctionType

if TYPE_CHECKING:
    from modelfusion.model_function.execute_call import ModelCallResult
    from modelfusion.model_function.options import FunctionOptions
    from modelfusion.model_function.tool import Tool, ToolCall
    from modelfusion.model_function.tool_call import ToolCallGenerationModel


async def execute_tool(
    tool: Tool[Any, Any],
    args: Any,
    *,
    options: FunctionOptions | None = None,
    full_response: bool = False,
) -> Any | ModelCallResult[Any]:
    """Run a tool with started/finished events.

    Raises:
        ToolExecutionError: If the tool raised (abort errors pass through)

    Example:
        >>> result = await execute_tool(calculator, {"a": 14, "b": 12, "operator": "*"})
    """

    async def run_tool(input: dict[str, Any]) -> Any:
        try:
            return await tool.execute(args)
        except AbortError:
            raise
        except Exception as e:
            raise ToolExecutionError(tool.name, args, e) from e

    return await execute_function(
        run_tool,
        {"tool_name": tool.name, "args": args},
        function_type=FunctionType.EXECUTE_TOOL,
        options=options,
        full_response=full_response,
    )


@dataclass
class UseToolResult:
    """Outcome of ``use_tool``.

    Attributes:
        tool: Name of the tool
        tool_call: The generated tool call
        args: Validated tool arguments
        result: Value returned by the tool
    """

    tool: str
    tool_call: ToolCall
    args: Any
    result: Any


async def use_tool(
    model: ToolCallGenerationModel[Any],
    tool: Tool[Any, Any],
    prompt: Any,
    *,
    options: FunctionOptions | None = None,
) -> UseToolResult:
    """Generate a tool call and execute it.

    Example:
        >>> outcome = await use_tool(tool_model, calculator, "What's fourteen times twelve?")
        >>> outcome.result
        168
    """
    tool_call = await generate_tool_call(model, tool, prompt, options=options)
    result = await execute_tool(tool, tool_call.args, options=options)
    return UseToolResult(tool=tool.name, tool_call=tool_call, args=tool_call.args, result=result)
