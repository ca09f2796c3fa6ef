"""Recording of tool system events for debugging a processing session."""

import inspect
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from ..events import (
    ParseWarningEvent,
    ParsingCompleteEvent,
    ParsingStartedEvent,
    PromptGeneratedEvent,
    StreamTerminatedEvent,
    ToolErrorEvent,
    ToolStateEvent,
    ToolSystemEvent,
)
from ..types import ToolResult

logger = logging.getLogger(__name__)


@dataclass
class TraceEvent:
    """Single event in the trace."""

    timestamp: datetime
    event_type: ToolSystemEvent
    tool_id: Optional[str]
    content_summary: str
    trace_id: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "tool_id": self.tool_id,
            "content_summary": self.content_summary,
            "trace_id": self.trace_id,
            "metadata": self.metadata,
        }


def summarize_event(event: ToolSystemEvent, payload: Any) -> TraceEvent:
    """Build a TraceEvent (without trace id) from an emitted event."""
    tool_id: Optional[str] = None
    metadata: Dict[str, Any] = {}

    if isinstance(payload, ToolResult):
        tool_id = payload.tool_id
        summary = f"Result from {payload.tool_id}"
        metadata["confidence"] = payload.confidence
    elif isinstance(payload, ToolErrorEvent):
        tool_id = payload.tool_id
        summary = f"Error in {payload.tool_id}: {payload.error}"
        metadata["error_type"] = type(payload.error).__name__
    elif isinstance(payload, ToolStateEvent):
        tool_id = payload.tool_id
        summary = f"{event.value} {payload.tool_id}"
    elif isinstance(payload, PromptGeneratedEvent):
        summary = f"Prompt generated (length: {len(payload.prompt)})"
        metadata["enabled_tools"] = list(payload.enabled_tools)
    elif isinstance(payload, ParsingStartedEvent):
        summary = f"Parsing started with {payload.tool_count} enabled tools"
    elif isinstance(payload, ParsingCompleteEvent):
        summary = f"Parsing complete: {len(payload.results)} results"
        metadata["duration_ms"] = payload.duration_ms
        metadata["terminated"] = payload.terminated
    elif isinstance(payload, ParseWarningEvent):
        tool_id = payload.error.tag_name
        summary = f"Parse warning: {payload.error}"
    elif isinstance(payload, StreamTerminatedEvent):
        summary = f"Stream terminated: {payload.reason}"
    else:
        summary = event.value

    return TraceEvent(
        timestamp=datetime.now(),
        event_type=event,
        tool_id=tool_id,
        content_summary=summary,
        metadata=metadata,
    )


@dataclass
class StreamTrace:
    """Ordered record of everything a tool system emitted."""

    trace_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None
    events: List[TraceEvent] = field(default_factory=list)
    on_update: Optional[Callable[["StreamTrace", TraceEvent], Any]] = field(default=None, repr=False)

    def record(self, event: ToolSystemEvent, payload: Any) -> TraceEvent:
        """Listener entry point: record one emitted event.

        Args:
            event: Event kind
            payload: Event payload

        Returns:
            The created TraceEvent
        """
        trace_event = summarize_event(event, payload)
        trace_event.trace_id = self.trace_id
        self.events.append(trace_event)

        if self.on_update:
            if inspect.iscoroutinefunction(self.on_update):
                logger.warning("StreamTrace.on_update must be synchronous; callback skipped")
            else:
                self.on_update(self, trace_event)

        return trace_event

    def event_types(self) -> List[ToolSystemEvent]:
        return [e.event_type for e in self.events]

    def complete(self) -> None:
        """Mark the trace as complete."""
        self.end_time = datetime.now()

    def get_duration_ms(self) -> float:
        """Get total trace duration in milliseconds."""
        end = self.end_time or datetime.now()
        return (end - self.start_time).total_seconds() * 1000

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "trace_id": self.trace_id,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "duration_ms": self.get_duration_ms(),
            "events": [e.to_dict() for e in self.events],
        }
