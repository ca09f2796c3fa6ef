"""Typed, synchronous event channel for the tool system."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .exceptions import ParseRecoveryError
from .types import ToolResult

logger = logging.getLogger(__name__)


class ToolSystemEvent(str, Enum):
    """Kinds of events emitted by a ToolSystem."""

    TOOL_RESULT = "tool_result"
    TOOL_ERROR = "tool_error"
    PROMPT_GENERATED = "prompt_generated"
    PARSING_STARTED = "parsing_started"
    PARSING_COMPLETE = "parsing_complete"
    TOOL_ENABLED = "tool_enabled"
    TOOL_DISABLED = "tool_disabled"
    TOOL_REGISTERED = "tool_registered"
    TOOL_UNREGISTERED = "tool_unregistered"
    PARSE_WARNING = "parse_warning"
    STREAM_TERMINATED = "stream_terminated"


@dataclass
class ToolErrorEvent:
    tool_id: str
    error: Exception
    data: Any = None


@dataclass
class PromptGeneratedEvent:
    prompt: str
    enabled_tools: List[str]
    context: Dict[str, Any]


@dataclass
class ParsingStartedEvent:
    tool_count: int


@dataclass
class ParsingCompleteEvent:
    results: List[ToolResult]
    duration_ms: float
    terminated: bool = False


@dataclass
class ToolStateEvent:
    """Payload of the registered/unregistered/enabled/disabled events."""

    tool_id: str


@dataclass
class ParseWarningEvent:
    error: ParseRecoveryError


@dataclass
class StreamTerminatedEvent:
    reason: str


EventCallback = Callable[[Any], None]


@dataclass
class EventChannel:
    """
    Subscriber lists per event kind.

    Delivery is synchronous: emit() returns after every subscriber of that
    kind has been called, in subscription order. A subscriber that raises is
    logged and skipped so the remaining subscribers still run.
    """

    _subscribers: Dict[ToolSystemEvent, List[EventCallback]] = field(default_factory=dict)
    _listeners: List[Callable[[ToolSystemEvent, Any], None]] = field(default_factory=list)

    def on(self, event: ToolSystemEvent, callback: EventCallback) -> Callable[[], None]:
        """
        Subscribe to one event kind.

        Args:
            event: Event kind (member or its string value)
            callback: Called with the event payload

        Returns:
            Callable that removes the subscription
        """
        event = ToolSystemEvent(event)
        self._subscribers.setdefault(event, []).append(callback)
        return lambda: self.off(event, callback)

    def off(self, event: ToolSystemEvent, callback: EventCallback) -> None:
        callbacks = self._subscribers.get(ToolSystemEvent(event), [])
        if callback in callbacks:
            callbacks.remove(callback)

    def on_any(self, listener: Callable[[ToolSystemEvent, Any], None]) -> Callable[[], None]:
        """Subscribe to every event kind; the listener gets (event, payload)."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener) if listener in self._listeners else None

    def emit(self, event: ToolSystemEvent, payload: Any = None) -> None:
        for callback in list(self._subscribers.get(event, [])):
            try:
                callback(payload)
            except Exception as e:
                logger.warning(f"Subscriber for '{event.value}' failed: {e}")
        for listener in list(self._listeners):
            try:
                listener(event, payload)
            except Exception as e:
                logger.warning(f"Listener failed on '{event.value}': {e}")

    def subscriber_count(self, event: Optional[ToolSystemEvent] = None) -> int:
        if event is None:
            return sum(len(c) for c in self._subscribers.values()) + len(self._listeners)
        return len(self._subscribers.get(ToolSystemEvent(event), []))

    def clear(self) -> None:
        self._subscribers.clear()
        self._listeners.clear()
