"""Registry of tools owned by one tool system."""

import logging
from typing import Any, Dict, List, Optional

from ..exceptions import RegistrationError, ToolNotFoundError
from ..events import EventChannel, ToolStateEvent, ToolSystemEvent
from .base import Tool

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Tools keyed by id, with enable/disable state.

    Tag lookups honour ``fold_case`` so that tags differing only in case
    collide when the parser matches tags case-insensitively.
    """

    def __init__(self, events: Optional[EventChannel] = None, fold_case: bool = True):
        """
        Initialize empty tool registry.

        Args:
            events: Channel registry changes are announced on
            fold_case: Treat tags case-insensitively
        """
        self._tools: Dict[str, Tool] = {}
        self._tags: Dict[str, str] = {}
        self._events = events or EventChannel()
        self._fold_case = fold_case

    def _tag_key(self, tag: str) -> str:
        return tag.lower() if self._fold_case else tag

    def register_tool(self, tool: Tool) -> None:
        """
        Register a copy of a tool.

        The registry keeps its own clone, so enabling or disabling a tool
        here does not touch the caller's instance or other registries
        built from it.

        Args:
            tool: Tool instance to register

        Raises:
            RegistrationError: If the id or the tag is already registered
        """
        if tool.id in self._tools:
            raise RegistrationError(f"Tool with id '{tool.id}' is already registered")

        tag_key = self._tag_key(tool.xml_tag)
        if tag_key in self._tags:
            raise RegistrationError(
                f"Tag '{tool.xml_tag}' is already used by tool '{self._tags[tag_key]}'"
            )

        self._tools[tool.id] = tool.clone()
        self._tags[tag_key] = tool.id
        logger.debug(f"Registered tool: {tool.id} <{tool.xml_tag}>")
        self._events.emit(ToolSystemEvent.TOOL_REGISTERED, ToolStateEvent(tool.id))

    def unregister_tool(self, tool_id: str) -> None:
        """
        Remove a tool.

        Raises:
            ToolNotFoundError: If the id is not registered
        """
        tool = self._require(tool_id)
        del self._tools[tool_id]
        del self._tags[self._tag_key(tool.xml_tag)]
        logger.debug(f"Unregistered tool: {tool_id}")
        self._events.emit(ToolSystemEvent.TOOL_UNREGISTERED, ToolStateEvent(tool_id))

    def enable_tool(self, tool_id: str) -> None:
        """Enable a tool. Enabling an enabled tool is allowed."""
        self._require(tool_id).enabled = True
        logger.debug(f"Enabled tool: {tool_id}")
        self._events.emit(ToolSystemEvent.TOOL_ENABLED, ToolStateEvent(tool_id))

    def disable_tool(self, tool_id: str) -> None:
        """Disable a tool. Disabling a disabled tool is allowed."""
        self._require(tool_id).enabled = False
        logger.debug(f"Disabled tool: {tool_id}")
        self._events.emit(ToolSystemEvent.TOOL_DISABLED, ToolStateEvent(tool_id))

    def get_tool(self, tool_id: str) -> Optional[Tool]:
        """
        Get a tool by id.

        Returns:
            Tool instance or None if not found
        """
        return self._tools.get(tool_id)

    def get_by_tag(self, tag: str) -> Optional[Tool]:
        tool_id = self._tags.get(self._tag_key(tag))
        return self._tools.get(tool_id) if tool_id else None

    def has_tag(self, tag: str) -> bool:
        return self._tag_key(tag) in self._tags

    def get_all_tools(self) -> List[Tool]:
        return list(self._tools.values())

    def get_enabled_tools(self) -> List[Tool]:
        return [tool for tool in self._tools.values() if tool.enabled]

    def get_disabled_tools(self) -> List[Tool]:
        return [tool for tool in self._tools.values() if not tool.enabled]

    def get_stats(self) -> Dict[str, Any]:
        """
        Registry statistics.

        Returns:
            Dictionary with total/enabled/disabled counts and counts grouped
            by metadata type and by category
        """
        tools_by_type: Dict[str, int] = {}
        tools_by_category: Dict[str, int] = {}
        for tool in self._tools.values():
            tool_type = (tool.metadata or {}).get("type", "unknown")
            tools_by_type[tool_type] = tools_by_type.get(tool_type, 0) + 1
            tools_by_category[tool.category] = tools_by_category.get(tool.category, 0) + 1

        return {
            "total_tools": len(self._tools),
            "enabled_tools": len(self.get_enabled_tools()),
            "disabled_tools": len(self.get_disabled_tools()),
            "tools_by_type": tools_by_type,
            "tools_by_category": tools_by_category,
        }

    def _require(self, tool_id: str) -> Tool:
        tool = self._tools.get(tool_id)
        if tool is None:
            raise ToolNotFoundError(tool_id)
        return tool

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, tool_id: str) -> bool:
        return tool_id in self._tools
