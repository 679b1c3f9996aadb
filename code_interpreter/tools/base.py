"""
Tool Executor - Handles tool execution for the code interpreter.
"""

import asyncio
import inspect
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from structlog import get_logger

from code_interpreter.models.schemas import ToolDefinition

logger = get_logger()


class ToolArgumentError(ValueError):
    """Arguments do not fit the tool's parameters."""


@dataclass
class ToolResult:
    """Result of a tool execution."""

    name: str
    success: bool = True
    content: str = ""
    error: str | None = None
    execution_time: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict)


class BaseTool(ABC):
    """Abstract base class for tools."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Tool name."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Tool description."""
        pass

    @property
    def parameters(self) -> dict[str, Any]:
        """JSON Schema for parameters."""
        return {"type": "object", "properties": {}}

    @property
    def required(self) -> list[str]:
        """Required parameters."""
        return list(self.parameters.get("required", []))

    @abstractmethod
    async def execute(self, **kwargs) -> str:
        """Execute the tool."""
        pass

    def to_definition(self) -> ToolDefinition:
        """Convert to ToolDefinition."""
        return ToolDefinition(
            name=self.name,
            description=self.description,
            parameters=self.parameters,
            required=self.required
        )


class ToolRegistry:
    """Registry for available tools."""

    def __init__(self):
        self._tools: dict[str, BaseTool] = {}

    def register(self, tool: BaseTool) -> None:
        """Register a tool."""
        self._tools[tool.name] = tool
        logger.info("Tool registered", tool_name=tool.name)

    def get(self, name: str) -> BaseTool | None:
        """Get a tool by name."""
        return self._tools.get(name)

    def list_tools(self) -> list[BaseTool]:
        """List all registered tools."""
        return list(self._tools.values())

    def get_definitions(self) -> list[ToolDefinition]:
        """Get all tool definitions."""
        return [tool.to_definition() for tool in self._tools.values()]


class ToolExecutor:
    """
    Executes tool calls.

    Features:
    - Argument checking against the tool signature
    - Timeout handling
    - Error recovery
    """

    def __init__(
        self,
        registry: ToolRegistry | None = None,
        default_timeout: float = 120.0
    ):
        self.registry = registry or ToolRegistry()
        self.default_timeout = default_timeout

    def register_tool(self, tool: BaseTool) -> None:
        """Register a tool."""
        self.registry.register(tool)

    async def call(self, name: str, arguments: dict[str, Any]) -> ToolResult:
        """Invoke a registered tool by name with keyword arguments."""
        tool = self.registry.get(name)
        if not tool:
            return ToolResult(
                name=name,
                success=False,
                error=f"Tool '{name}' not found",
                metadata={"not_found": True}
            )

        missing = [param for param in tool.required if param not in arguments]
        if missing:
            return self._invalid(name, f"Missing required arguments: {', '.join(missing)}")

        try:
            inspect.signature(tool.execute).bind(**arguments)
        except TypeError as e:
            return self._invalid(name, str(e))

        start_time = time.perf_counter()

        try:
            async with asyncio.timeout(self.default_timeout):
                result = await tool.execute(**arguments)

            return ToolResult(
                name=name,
                success=True,
                content=result,
                execution_time=time.perf_counter() - start_time
            )

        except TimeoutError:
            return ToolResult(
                name=name,
                success=False,
                error=f"Tool execution timed out after {self.default_timeout}s"
            )
        except ToolArgumentError as e:
            return self._invalid(name, str(e))
        except Exception as e:
            logger.error("Tool execution error", tool_name=name, error=str(e))
            return ToolResult(
                name=name,
                success=False,
                error=str(e)
            )

    @staticmethod
    def _invalid(name: str, error: str) -> ToolResult:
        logger.warning("Tool rejected arguments", tool_name=name, error=error)
        return ToolResult(
            name=name,
            success=False,
            error=error,
            metadata={"invalid_arguments": True}
        )
