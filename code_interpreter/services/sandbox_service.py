"""
Sandbox service for dependency injection and lifecycle management.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from structlog import get_logger

from code_interpreter.config import get_settings
from code_interpreter.sandbox.executor import CodeExecutor
from code_interpreter.tools.base import ToolExecutor
from code_interpreter.tools.register import create_default_executor

logger = get_logger()

# Global instances
_code_executor: CodeExecutor | None = None
_tool_executor: ToolExecutor | None = None


async def get_tool_executor() -> ToolExecutor:
    """Get the tool executor for dependency injection."""
    if _tool_executor is None:
        raise RuntimeError("Tool executor not initialized. Use sandbox_lifespan.")
    return _tool_executor


@asynccontextmanager
async def sandbox_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the sandbox on startup and terminate live children on exit."""
    global _code_executor, _tool_executor

    settings = get_settings()
    logger.info(
        "Starting code interpreter",
        max_concurrent_executions=settings.sandbox.max_concurrent_executions,
        execution_timeout_ms=settings.sandbox.execution_timeout_ms,
        analysis_enabled=settings.sandbox.security.enable_sandbox_analysis,
    )

    _code_executor = CodeExecutor(settings.sandbox)
    _tool_executor = create_default_executor(_code_executor)

    try:
        yield
    finally:
        logger.info("Shutting down code interpreter...")
        _code_executor.shutdown()
        _code_executor = None
        _tool_executor = None
        logger.info("Code interpreter stopped")
