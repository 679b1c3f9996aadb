"""API module."""

from .tools import router as tools_router

__all__ = ["tools_router"]
