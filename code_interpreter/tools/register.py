"""Default tool registration."""

from code_interpreter.config import get_settings
from code_interpreter.sandbox.executor import CodeExecutor
from code_interpreter.tools.base import ToolExecutor
from code_interpreter.tools.internal import (
    ExecuteJavaScriptTool,
    ExecuteTypeScriptTool,
    ServerStatusTool,
    ValidateCodeTool,
)


def register_default_tools(executor: ToolExecutor, code_executor: CodeExecutor) -> ToolExecutor:
    """Register the built-in tools, all sharing one ``CodeExecutor``."""
    for tool_cls in (
        ExecuteTypeScriptTool,
        ExecuteJavaScriptTool,
        ValidateCodeTool,
        ServerStatusTool,
    ):
        executor.register_tool(tool_cls(code_executor))
    return executor


def create_default_executor(code_executor: CodeExecutor) -> ToolExecutor:
    """Create an executor preloaded with the built-in tools."""
    settings = get_settings()
    return register_default_tools(
        ToolExecutor(default_timeout=settings.tools.call_timeout),
        code_executor,
    )
