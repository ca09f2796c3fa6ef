"""Tests for the event channel."""

import logging

from typed_llm_stream.events import EventChannel, ToolStateEvent, ToolSystemEvent


def test_delivery_in_subscription_order():
    """Test synchronous, ordered delivery."""
    channel = EventChannel()
    received = []
    channel.on(ToolSystemEvent.TOOL_ENABLED, lambda e: received.append(("first", e.tool_id)))
    channel.on(ToolSystemEvent.TOOL_ENABLED, lambda e: received.append(("second", e.tool_id)))

    channel.emit(ToolSystemEvent.TOOL_ENABLED, ToolStateEvent("a"))

    assert received == [("first", "a"), ("second", "a")]


def test_subscribe_by_value():
    """Test subscribing with the event's string value."""
    channel = EventChannel()
    received = []
    channel.on("tool_disabled", received.append)

    channel.emit(ToolSystemEvent.TOOL_DISABLED, ToolStateEvent("a"))

    assert len(received) == 1
    assert channel.subscriber_count(ToolSystemEvent.TOOL_DISABLED) == 1


def test_unsubscribe():
    """Test both ways of removing a subscriber."""
    channel = EventChannel()
    received = []
    unsubscribe = channel.on(ToolSystemEvent.TOOL_RESULT, received.append)
    channel.on(ToolSystemEvent.TOOL_ERROR, received.append)

    unsubscribe()
    channel.off(ToolSystemEvent.TOOL_ERROR, received.append)
    channel.emit(ToolSystemEvent.TOOL_RESULT, "x")
    channel.emit(ToolSystemEvent.TOOL_ERROR, "y")

    assert received == []
    assert channel.subscriber_count() == 0


def test_failing_subscriber_isolated(caplog):
    """Test that one failing subscriber does not stop the others."""
    caplog.set_level(logging.WARNING)
    channel = EventChannel()
    received = []

    def broken(payload):
        raise RuntimeError("boom")

    channel.on(ToolSystemEvent.TOOL_RESULT, broken)
    channel.on(ToolSystemEvent.TOOL_RESULT, received.append)

    channel.emit(ToolSystemEvent.TOOL_RESULT, "payload")

    assert received == ["payload"]
    assert "boom" in caplog.text


def test_listener_receives_all_events():
    """Test catch-all listeners."""
    channel = EventChannel()
    seen = []
    remove = channel.on_any(lambda event, payload: seen.append(event))

    channel.emit(ToolSystemEvent.PARSING_STARTED)
    channel.emit(ToolSystemEvent.PARSING_COMPLETE)
    remove()
    channel.emit(ToolSystemEvent.PARSING_STARTED)

    assert seen == [ToolSystemEvent.PARSING_STARTED, ToolSystemEvent.PARSING_COMPLETE]


def test_clear():
    channel = EventChannel()
    channel.on(ToolSystemEvent.TOOL_RESULT, print)
    channel.on_any(lambda event, payload: None)

    channel.clear()

    assert channel.subscriber_count() == 0
