"""API schemas."""

from .schemas import (
    ErrorResponse,
    TextContent,
    ToolCallRequest,
    ToolCallResponse,
    ToolDefinition,
    ToolListResponse,
)

__all__ = [
    "ErrorResponse",
    "TextContent",
    "ToolCallRequest",
    "ToolCallResponse",
    "ToolDefinition",
    "ToolListResponse",
]
