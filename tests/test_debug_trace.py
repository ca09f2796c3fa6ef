"""Tests for debug trace module."""

import pytest
from datetime import datetime, timedelta

from typed_llm_stream.debug.trace import StreamTrace, TraceEvent, summarize_event
from typed_llm_stream.events import (
    ParseWarningEvent,
    ParsingCompleteEvent,
    StreamTerminatedEvent,
    ToolErrorEvent,
    ToolStateEvent,
    ToolSystemEvent,
)
from typed_llm_stream.exceptions import ParseRecoveryError, ToolValidationError
from typed_llm_stream.types import ToolResult


def test_trace_event_to_dict():
    """Test converting trace event to dictionary."""
    timestamp = datetime(2026, 1, 25, 10, 0, 0)
    event = TraceEvent(
        timestamp=timestamp,
        event_type=ToolSystemEvent.TOOL_RESULT,
        tool_id="cursor_jump",
        content_summary="Result from cursor_jump",
        trace_id="abc123",
    )

    result = event.to_dict()

    assert result["timestamp"] == timestamp.isoformat()
    assert result["event_type"] == "tool_result"
    assert result["tool_id"] == "cursor_jump"
    assert result["trace_id"] == "abc123"
    assert result["metadata"] == {}


def test_summarize_result():
    """Test summary of a tool result."""
    result = ToolResult(tool_id="a", type="a", data="x", confidence=0.9)

    event = summarize_event(ToolSystemEvent.TOOL_RESULT, result)

    assert event.tool_id == "a"
    assert event.content_summary == "Result from a"
    assert event.metadata == {"confidence": 0.9}


def test_summarize_error():
    """Test summary of a tool error."""
    error = ToolValidationError("bad payload", "a")

    event = summarize_event(ToolSystemEvent.TOOL_ERROR, ToolErrorEvent("a", error, "raw"))

    assert event.content_summary == "Error in a: bad payload"
    assert event.metadata == {"error_type": "ToolValidationError"}


@pytest.mark.parametrize(
    "kind,payload,summary,tool_id",
    [
        (ToolSystemEvent.TOOL_DISABLED, ToolStateEvent("a"), "tool_disabled a", "a"),
        (
            ToolSystemEvent.PARSE_WARNING,
            ParseWarningEvent(ParseRecoveryError("Unterminated", tag_name="b")),
            "Parse warning: Unterminated",
            "b",
        ),
        (
            ToolSystemEvent.STREAM_TERMINATED,
            StreamTerminatedEvent("enough"),
            "Stream terminated: enough",
            None,
        ),
        (ToolSystemEvent.TOOL_RESULT, None, "tool_result", None),
    ],
)
def test_summaries(kind, payload, summary, tool_id):
    """Test summaries of other payloads."""
    event = summarize_event(kind, payload)

    assert event.content_summary == summary
    assert event.tool_id == tool_id


def test_trace_records_with_id():
    """Test recording events into a trace."""
    trace = StreamTrace()

    recorded = trace.record(
        ToolSystemEvent.PARSING_COMPLETE,
        ParsingCompleteEvent(results=[], duration_ms=1.5, terminated=True),
    )

    assert recorded.trace_id == trace.trace_id
    assert trace.event_types() == [ToolSystemEvent.PARSING_COMPLETE]
    assert recorded.metadata == {"duration_ms": 1.5, "terminated": True}


def test_trace_on_update():
    """Test the synchronous update callback."""
    updates = []
    trace = StreamTrace(on_update=lambda t, e: updates.append(e.event_type))

    trace.record(ToolSystemEvent.STREAM_TERMINATED, StreamTerminatedEvent("x"))

    assert updates == [ToolSystemEvent.STREAM_TERMINATED]


def test_trace_async_on_update_skipped():
    """Test that a coroutine callback is not called."""
    async def on_update(trace, event):
        raise AssertionError("should not run")

    trace = StreamTrace(on_update=on_update)
    trace.record(ToolSystemEvent.STREAM_TERMINATED, StreamTerminatedEvent("x"))

    assert len(trace.events) == 1


def test_trace_duration_and_dict():
    """Test duration and serialization."""
    start = datetime(2026, 1, 25, 10, 0, 0)
    trace = StreamTrace(trace_id="t1", start_time=start)
    trace.end_time = start + timedelta(milliseconds=250)
    trace.record(ToolSystemEvent.TOOL_ENABLED, ToolStateEvent("a"))

    data = trace.to_dict()

    assert trace.get_duration_ms() == 250
    assert data["trace_id"] == "t1"
    assert data["end_time"] == trace.end_time.isoformat()
    assert data["events"][0]["event_type"] == "tool_enabled"


def test_trace_complete():
    """Test completing a trace."""
    trace = StreamTrace()
    assert trace.end_time is None

    trace.complete()

    assert trace.end_time is not None
    assert trace.get_duration_ms() >= 0
