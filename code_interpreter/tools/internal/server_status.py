"""Server status tool."""

from __future__ import annotations

from code_interpreter.sandbox.executor import CodeExecutor
from code_interpreter.sandbox.models import SandboxStatus
from code_interpreter.tools.base import BaseTool


def format_status(status: SandboxStatus) -> str:
    sandbox = "enabled" if status.analysis_enabled else "disabled"
    return (
        "Server Status:\n"
        f"- Active executions: {status.active_executions}/{status.max_concurrent_executions}\n"
        f"- Security sandbox: {sandbox}\n"
        f"- Execution timeout: {status.execution_timeout_ms}ms\n"
        f"- Max code length: {status.max_code_length} characters"
    )


class ServerStatusTool(BaseTool):
    """Report admission usage and sandbox limits."""

    def __init__(self, executor: CodeExecutor) -> None:
        self._executor = executor

    @property
    def name(self) -> str:
        return "server-status"

    @property
    def description(self) -> str:
        return "Get server status and active execution count"

    async def execute(self) -> str:
        return format_status(self._executor.status())
