"""Incremental extraction of tagged blocks from a text stream.

The parser is a three-state machine:

- OUTSIDE: scanning for ``<``
- OPENING: reading up to ``>`` to learn the tag name
- CONTENT: accumulating raw text until ``</tag>`` for the open tag

Only tags the parser is told about open a block; every other ``<...>`` span
is literal text. Blocks never nest: while a block is open, everything up to
its closing marker is content, including other tags.

Text that could still turn into a tag or a closing marker stays in a pending
buffer and is rescanned together with the next chunk, so the sequence of
completed blocks does not depend on where chunk boundaries fall.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Union

from ..config.config_schema import ParserOptions
from ..exceptions import ParseRecoveryError

logger = logging.getLogger(__name__)

_TAG_NAME_RE = re.compile(r"^([A-Za-z_][\w.-]*)(?:\s[^>]*)?$")


class ParserState(str, Enum):
    """Scan mode of the parser."""

    OUTSIDE = "outside"
    OPENING = "opening"
    CONTENT = "content"


class ParserEventType(Enum):
    """Kinds of output produced while parsing."""

    TAG = "tag"
    TEXT = "text"
    WARNING = "warning"


@dataclass
class ParserEvent:
    """One unit of parser output.

    TAG events carry ``tag_name`` and the verbatim ``content`` of a completed
    block. TEXT events carry literal text found outside blocks. WARNING
    events carry a ParseRecoveryError.
    """

    event_type: ParserEventType
    tag_name: Optional[str] = None
    content: str = ""
    error: Optional[ParseRecoveryError] = None


class StreamingXMLParser:
    """
    Streaming extractor of single-level tagged blocks.

    Example:
        parser = StreamingXMLParser({"a"})
        parser.feed("<a>{\\"x\\"")     # -> []
        parser.feed(": 1}</a>")       # -> [ParserEvent(TAG, "a", '{"x": 1}')]
        parser.finish()               # -> []
    """

    def __init__(
        self,
        known_tags: Union[Callable[[str], bool], Iterable[str]],
        options: Optional[ParserOptions] = None,
    ):
        """
        Initialize parser.

        Args:
            known_tags: Either a predicate telling whether a tag name opens a
                block, or a collection of such tag names. A predicate is
                consulted at every opening tag, so tags registered mid-stream
                take effect immediately.
            options: Parser options
        """
        self.options = options or ParserOptions()

        if callable(known_tags):
            self._is_known_tag = known_tags
        else:
            tags = {self._fold(tag) for tag in known_tags}
            self._is_known_tag = tags.__contains__

        self.reset()

    @property
    def state(self) -> ParserState:
        return self._state

    @property
    def open_tag(self) -> Optional[str]:
        return self._open_tag

    @property
    def has_pending(self) -> bool:
        """Whether unconsumed text or a partial block is held."""
        return bool(self._buffer) or self._state is not ParserState.OUTSIDE

    def reset(self) -> None:
        """Drop all pending text and return to OUTSIDE."""
        self._state = ParserState.OUTSIDE
        self._open_tag: Optional[str] = None
        self._close_re: Optional[re.Pattern] = None
        self._buffer = ""
        self._content_parts: List[str] = []

    def feed(self, chunk: str) -> List[ParserEvent]:
        """
        Consume a chunk of text.

        Args:
            chunk: Next piece of the stream

        Returns:
            Events completed by this chunk, in stream order
        """
        self._buffer += chunk
        events: List[ParserEvent] = []
        while self._step(events):
            pass
        return events

    def finish(self) -> List[ParserEvent]:
        """
        Signal end of stream.

        Trailing literal text is flushed. A partial tag or an unterminated
        block is discarded and reported as a WARNING event.

        Returns:
            Final events
        """
        events: List[ParserEvent] = []

        if self._state is ParserState.OUTSIDE:
            self._emit_text(events, self._buffer)
        elif self._state is ParserState.OPENING:
            self._warn(
                events,
                ParseRecoveryError(
                    "Incomplete tag at end of stream was discarded",
                    data=self._buffer,
                ),
            )
        else:
            self._warn(
                events,
                ParseRecoveryError(
                    f"Unterminated <{self._open_tag}> block at end of stream was discarded",
                    tag_name=self._open_tag,
                    data="".join(self._content_parts) + self._buffer,
                ),
            )

        self.reset()
        return events

    def parse_complete(self, text: str) -> List[ParserEvent]:
        """Parse a complete document: feed() followed by finish()."""
        return self.feed(text) + self.finish()

    def _step(self, events: List[ParserEvent]) -> bool:
        """Advance the state machine once. Returns False when more input is needed."""
        if self._state is ParserState.OUTSIDE:
            return self._scan_outside(events)
        if self._state is ParserState.OPENING:
            return self._scan_opening(events)
        return self._scan_content(events)

    def _scan_outside(self, events: List[ParserEvent]) -> bool:
        start = self._buffer.find("<")
        if start == -1:
            self._emit_text(events, self._buffer)
            self._buffer = ""
            return False

        self._emit_text(events, self._buffer[:start])
        self._buffer = self._buffer[start:]
        self._state = ParserState.OPENING
        return True

    def _scan_opening(self, events: List[ParserEvent]) -> bool:
        # self._buffer starts with "<"
        end = self._buffer.find(">", 1)
        restart = self._buffer.find("<", 1)

        if restart != -1 and (end == -1 or restart < end):
            # Another "<" before any ">": the first one was plain text
            self._emit_text(events, self._buffer[:restart])
            self._buffer = self._buffer[restart:]
            return True

        if end == -1:
            if len(self._buffer) > self.options.max_tag_length:
                self._literal_bracket(events)
                return True
            return False

        if end + 1 > self.options.max_tag_length:
            self._literal_bracket(events)
            return True

        span = self._buffer[: end + 1]
        self._buffer = self._buffer[end + 1:]
        name = self._tag_name(span[1:-1])

        if name is not None and self._is_known_tag(name):
            self._state = ParserState.CONTENT
            self._open_tag = name
            flags = re.IGNORECASE if self.options.lowercase else 0
            self._close_re = re.compile(re.escape(f"</{name}>"), flags)
            return True

        self._state = ParserState.OUTSIDE
        if self.options.strict_mode:
            self._warn(
                events,
                ParseRecoveryError(f"Unknown tag {span} ignored", tag_name=name, data=span),
            )
        else:
            self._emit_text(events, span)
        return True

    def _scan_content(self, events: List[ParserEvent]) -> bool:
        match = self._close_re.search(self._buffer)
        if match is None:
            # Keep enough characters to complete a marker split by the chunk boundary
            keep = len(self._open_tag) + 2
            if len(self._buffer) > keep:
                self._content_parts.append(self._buffer[:-keep])
                self._buffer = self._buffer[-keep:]
            return False

        self._content_parts.append(self._buffer[: match.start()])
        self._buffer = self._buffer[match.end():]
        content = "".join(self._content_parts)
        if self.options.normalize:
            content = " ".join(content.split())

        events.append(ParserEvent(ParserEventType.TAG, tag_name=self._open_tag, content=content))

        self._state = ParserState.OUTSIDE
        self._open_tag = None
        self._close_re = None
        self._content_parts = []
        return True

    def _literal_bracket(self, events: List[ParserEvent]) -> None:
        self._emit_text(events, "<")
        self._buffer = self._buffer[1:]
        self._state = ParserState.OUTSIDE

    def _tag_name(self, inner: str) -> Optional[str]:
        """Tag name of an opening tag body, or None for anything else
        (closing tags, self-closing tags, comments, declarations)."""
        match = _TAG_NAME_RE.match(inner)
        if match is None or inner.rstrip().endswith("/"):
            return None
        return self._fold(match.group(1))

    def _fold(self, tag: str) -> str:
        return tag.lower() if self.options.lowercase else tag

    @staticmethod
    def _emit_text(events: List[ParserEvent], text: str) -> None:
        if text:
            events.append(ParserEvent(ParserEventType.TEXT, content=text))

    @staticmethod
    def _warn(events: List[ParserEvent], error: ParseRecoveryError) -> None:
        logger.warning(f"Parse recovery: {error}")
        events.append(ParserEvent(ParserEventType.WARNING, tag_name=error.tag_name, error=error))


def completed_tags(events: Iterable[ParserEvent]) -> List[ParserEvent]:
    """Only the TAG events, in order."""
    return [event for event in events if event.event_type is ParserEventType.TAG]
