"""
Tool API routes.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from structlog import get_logger

from code_interpreter.models.schemas import (
    ErrorResponse,
    TextContent,
    ToolCallRequest,
    ToolCallResponse,
    ToolListResponse,
)
from code_interpreter.services.sandbox_service import get_tool_executor
from code_interpreter.tools.base import ToolExecutor

logger = get_logger()
router = APIRouter(prefix="/tools", tags=["tools"])


def _error(status_code: int, error: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, code=code).model_dump()
    )


@router.get(
    "",
    response_model=ToolListResponse,
    summary="List tools",
    description="List the available tools and their parameter schemas"
)
async def list_tools(
    executor: ToolExecutor = Depends(get_tool_executor)
) -> ToolListResponse:
    """List registered tools."""
    return ToolListResponse(tools=executor.registry.get_definitions())


@router.post(
    "/call",
    response_model=ToolCallResponse,
    responses={
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse}
    },
    summary="Call a tool",
    description="Invoke a tool by name and return its text output"
)
async def call_tool(
    request: ToolCallRequest,
    executor: ToolExecutor = Depends(get_tool_executor)
) -> ToolCallResponse | JSONResponse:
    """
    Invoke a tool.

    - **name**: Tool name, e.g. ``execute-javascript``
    - **arguments**: Keyword arguments matching the tool's parameter schema
    """
    result = await executor.call(request.name, request.arguments)

    if result.metadata.get("not_found"):
        return _error(404, result.error, "TOOL_NOT_FOUND")
    if result.metadata.get("invalid_arguments"):
        return _error(422, result.error, "INVALID_ARGUMENTS")

    if not result.success:
        logger.warning("Tool call failed", tool_name=request.name, error=result.error)
        return ToolCallResponse(
            content=[TextContent(text=result.error or "Tool execution failed")],
            is_error=True,
            execution_time=result.execution_time
        )

    return ToolCallResponse(
        content=[TextContent(text=result.content)],
        execution_time=result.execution_time
    )
