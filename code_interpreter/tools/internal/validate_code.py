"""Static validation tool: reports analyzer findings without executing."""

from __future__ import annotations

from typing import Any

from structlog import get_logger

from code_interpreter.sandbox.executor import CodeExecutor
from code_interpreter.sandbox.models import AnalysisResult
from code_interpreter.tools.base import BaseTool, ToolArgumentError

logger = get_logger()


def _numbered(items: tuple[str, ...]) -> str:
    return "".join(f"{index}. {item}\n" for index, item in enumerate(items, start=1))


def format_analysis(analysis: AnalysisResult) -> str:
    if analysis.safe:
        text = "✅ Code validation: no security issues found\n"
    else:
        text = "❌ Code validation: security issues found\n\n"
        if analysis.issues:
            text += "Issues:\n" + _numbered(analysis.issues)

    if analysis.warnings:
        text += "\nWarnings:\n" + _numbered(analysis.warnings)
    return text


class ValidateCodeTool(BaseTool):
    """Run the static analyzer over TypeScript or JavaScript source."""

    def __init__(self, executor: CodeExecutor) -> None:
        self._executor = executor

    @property
    def name(self) -> str:
        return "validate-code"

    @property
    def description(self) -> str:
        return "Validate TypeScript or JavaScript code against the sandbox rules without executing it"

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "code": {
                    "type": "string",
                    "description": "TypeScript or JavaScript code to validate",
                },
            },
            "required": ["code"],
        }

    async def execute(self, code: str) -> str:
        if not isinstance(code, str):
            raise ToolArgumentError("Argument 'code' must be a string")
        logger.info("Code validation requested", operation=self.name)
        return format_analysis(await self._executor.analyze(code))
