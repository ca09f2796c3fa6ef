"""Tool system coordinator."""

from .tool_system import ToolSystem

__all__ = ["ToolSystem"]
