"""Tool layer exposing the sandbox as named, schema-described tools."""

from code_interpreter.tools.base import BaseTool, ToolExecutor, ToolRegistry, ToolResult
from code_interpreter.tools.register import create_default_executor, register_default_tools

__all__ = [
    "BaseTool",
    "ToolExecutor",
    "ToolRegistry",
    "ToolResult",
    "create_default_executor",
    "register_default_tools",
]
