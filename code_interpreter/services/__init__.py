"""Services module."""

from .sandbox_service import get_tool_executor, sandbox_lifespan

__all__ = ["get_tool_executor", "sandbox_lifespan"]
