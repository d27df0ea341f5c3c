"""
Tool types for tool calling.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from modelfusion.schema.base import Schema

ArgsT = TypeVar("ArgsT")
ResultT = TypeVar("ResultT")


class ToolDefinition(BaseModel):
    """What a model needs to know to call a tool.

    Example:
        >>> definition = ToolDefinition(
        ...     name="get_weather",
        ...     description="Get weather for a city",
        ...     parameters={"type": "object", "properties": {"city": {"type": "string"}}},
        ... )
    """

    model_config = ConfigDict(extra="allow")

    name: str = Field(description="Tool name")
    description: str | None = Field(default=None, description="Tool description")
    parameters: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        description="JSON Schema of the tool arguments",
    )

    def to_openai_format(self) -> dict[str, Any]:
        """Function tool format used by OpenAI-compatible APIs."""
        function: dict[str, Any] = {"name": self.name, "parameters": self.parameters}
        if self.description is not None:
            function["description"] = self.description
        return {"type": "function", "function": function}


class ToolCall(BaseModel):
    """A call of a tool requested by a model.

    Attributes:
        id: Unique identifier of the tool call
        name: Name of the called tool
        args: Validated arguments
    """

    model_config = ConfigDict(extra="allow", arbitrary_types_allowed=True)

    id: str = Field(description="Unique tool call identifier")
    name: str = Field(description="Name of the tool")
    args: Any = Field(default=None, description="Validated tool arguments")


class Tool(Generic[ArgsT, ResultT]):
    """A function a model can call.

    Args:
        name: Tool name (unique among the tools offered to a model)
        description: What the tool does, shown to the model
        parameters: Schema of the tool arguments
        execute: Async function that runs the tool
        return_type: Optional schema of the result

    Example:
        >>> class CalculatorArgs(BaseModel):
        ...     a: float
        ...     b: float
        ...     operator: Literal["+", "-", "*", "/"]
        >>> calculator = Tool(
        ...     name="calculator",
        ...     description="Execute a calculation",
        ...     parameters=pydantic_schema(CalculatorArgs),
        ...     execute=calculate,
        ... )
    """

    def __init__(
        self,
        *,
        name: str,
        parameters: Schema[ArgsT],
        execute: Callable[[ArgsT], Awaitable[ResultT]] | None = None,
        description: str | None = None,
        return_type: Schema[ResultT] | None = None,
    ) -> None:
        self.name = name
        self.description = description
        self.parameters = parameters
        self.return_type = return_type
        self._execute = execute

    @property
    def is_executable(self) -> bool:
        return self._execute is not None

    async def execute(self, args: ArgsT) -> ResultT:
        """Run the tool.

        Raises:
            NotImplementedError: If the tool has no execute function
        """
        if self._execute is None:
            raise NotImplementedError(f"Tool '{self.name}' has no execute function")
        return await self._execute(args)

    @property
    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=self.description,
            parameters=self.parameters.get_json_schema(),
        )

    def __repr__(self) -> str:
        return f"Tool(name={self.name!r})"
