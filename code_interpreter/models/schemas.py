"""
Request and response schemas for the tool-call API.
"""

from typing import Any

from pydantic import BaseModel, Field


class ToolDefinition(BaseModel):
    """Tool/function definition."""

    name: str = Field(description="Tool name")
    description: str = Field(description="Tool description")
    parameters: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        description="JSON Schema for parameters"
    )
    required: list[str] = Field(default_factory=list, description="Required parameters")


class ToolListResponse(BaseModel):
    """Available tools."""

    tools: list[ToolDefinition]


class ToolCallRequest(BaseModel):
    """Invoke one tool by name."""

    name: str = Field(min_length=1, description="Tool name")
    arguments: dict[str, Any] = Field(default_factory=dict, description="Tool arguments")


class TextContent(BaseModel):
    """A text block in a tool response."""

    type: str = "text"
    text: str


class ToolCallResponse(BaseModel):
    """Rendered tool output."""

    content: list[TextContent]
    is_error: bool = False
    execution_time: float = Field(default=0.0, description="Tool wall time in seconds")


class ErrorResponse(BaseModel):
    """Error envelope returned by the API."""

    error: str
    code: str
    details: str | None = None
