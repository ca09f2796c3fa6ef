"""Streaming tag parser module."""

from .streaming_parser import (
    ParserEvent,
    ParserEventType,
    ParserState,
    StreamingXMLParser,
    completed_tags,
)

__all__ = [
    "ParserEvent",
    "ParserEventType",
    "ParserState",
    "StreamingXMLParser",
    "completed_tags",
]
