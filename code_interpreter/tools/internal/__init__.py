"""Built-in tools backed by the code execution sandbox."""

from code_interpreter.tools.internal.execute_code import (
    ExecuteJavaScriptTool,
    ExecuteTypeScriptTool,
)
from code_interpreter.tools.internal.server_status import ServerStatusTool
from code_interpreter.tools.internal.validate_code import ValidateCodeTool

__all__ = [
    "ExecuteJavaScriptTool",
    "ExecuteTypeScriptTool",
    "ServerStatusTool",
    "ValidateCodeTool",
]
