"""
Code execution tools: ``BaseTool`` implementations.

Run TypeScript or JavaScript through the shared ``CodeExecutor`` and render
the result as a single text block.
"""

from __future__ import annotations

from typing import Any

from structlog import get_logger

from code_interpreter.sandbox.exceptions import AdmissionError
from code_interpreter.sandbox.executor import CodeExecutor
from code_interpreter.sandbox.models import ExecutionResult, Language
from code_interpreter.tools.base import BaseTool, ToolArgumentError

logger = get_logger()


def format_execution_result(result: ExecutionResult) -> str:
    """Render an execution result as ``Output:`` / ``Error:`` sections."""
    text = ""
    if result.output:
        text += f"Output:\n{result.output}\n"
    if result.error:
        text += f"Error:\n{result.error}\n"
    if result.truncated:
        text += "[Output was truncated due to size limit]\n"
    text += f"\nExecution time: {result.execution_time_ms}ms"
    return text


class _ExecuteCodeTool(BaseTool):
    """Shared behaviour for the per-language execution tools."""

    language: Language

    def __init__(self, executor: CodeExecutor) -> None:
        self._executor = executor

    # ------------------------------------------------------------------
    # BaseTool interface
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return f"execute-{self.language.value}"

    @property
    def description(self) -> str:
        return f"Execute {self._label} code with security validation"

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "code": {
                    "type": "string",
                    "description": f"{self._label} code to execute",
                },
            },
            "required": ["code"],
        }

    @property
    def _label(self) -> str:
        return "TypeScript" if self.language is Language.TYPESCRIPT else "JavaScript"

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def execute(self, code: str) -> str:
        if not isinstance(code, str):
            raise ToolArgumentError("Argument 'code' must be a string")
        logger.info(f"{self._label} execution requested", operation=self.name)
        try:
            result = await self._executor.execute(code, self.language)
        except AdmissionError as exc:
            logger.error(
                f"{self._label} execution failed",
                operation=self.name,
                error=str(exc),
            )
            return f"Execution failed: {exc}"
        return format_execution_result(result)


class ExecuteTypeScriptTool(_ExecuteCodeTool):
    """Execute TypeScript through the configured TypeScript runner."""

    language = Language.TYPESCRIPT


class ExecuteJavaScriptTool(_ExecuteCodeTool):
    """Execute JavaScript through Node.js."""

    language = Language.JAVASCRIPT
