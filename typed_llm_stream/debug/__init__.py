"""Debug infrastructure for stream processing sessions."""

from .trace import StreamTrace, TraceEvent, summarize_event

__all__ = ["StreamTrace", "TraceEvent", "summarize_event"]
