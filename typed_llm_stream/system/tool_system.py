"""Coordinator of tools, prompt generation and stream dispatch."""

import copy
import inspect
import json
import logging
import time
from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    Callable,
    Dict,
    Iterable,
    List,
    Optional,
    Union,
)

from ..config.config_schema import ParserOptions, PromptTemplate, SystemSettings
from ..debug.trace import StreamTrace
from ..events import (
    EventChannel,
    ParseWarningEvent,
    ParsingCompleteEvent,
    ParsingStartedEvent,
    PromptGeneratedEvent,
    StreamTerminatedEvent,
    ToolErrorEvent,
    ToolSystemEvent,
)
from ..exceptions import ToolValidationError
from ..parser.streaming_parser import ParserEvent, ParserEventType, StreamingXMLParser
from ..prompt.builder import PromptBuilder
from ..tools.base import Tool
from ..tools.registry import ToolRegistry
from ..types import ToolResult

logger = logging.getLogger(__name__)

ChunkSource = Union[AsyncIterable[str], Iterable[str]]

DEFAULT_TERMINATION_REASON = "Manually terminated"


async def _iterate(chunks: Iterable[str]) -> AsyncIterator[str]:
    for chunk in chunks:
        yield chunk


def _chunk_iterator(chunks: ChunkSource) -> AsyncIterator[str]:
    if hasattr(chunks, "__aiter__"):
        return chunks.__aiter__()
    return _iterate(chunks)


async def _close(iterator: AsyncIterator[str]) -> None:
    aclose = getattr(iterator, "aclose", None)
    if aclose is not None:
        await aclose()


def _field(data: Any, name: str) -> Any:
    if isinstance(data, dict):
        return data.get(name)
    return getattr(data, name, None)


def _confidence_of(data: Any) -> Optional[float]:
    value = _field(data, "confidence")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if 0.0 <= value <= 1.0 else None


def _metadata_of(data: Any) -> Optional[Dict[str, Any]]:
    value = _field(data, "metadata")
    return dict(value) if isinstance(value, dict) else None


class ToolSystem:
    """
    Owns a tool registry and a global context, builds the system prompt and
    turns a model's output stream into validated, handled tool results.

    Processing is sequential: chunks are consumed one at a time, every
    completed block is decoded, validated and its handler awaited before the
    next block or chunk is looked at. Registry, context and parser state
    belong to this instance; callers sharing one instance between concurrent
    tasks must serialize access themselves.

    Example:
        system = ToolSystem(tools=[create_tool(...)])
        system.on(ToolSystemEvent.TOOL_RESULT, print)
        prompt = system.generate_system_prompt()
        await system.process_stream(llm.stream_generate(user_message, prompt))
    """

    def __init__(
        self,
        tools: Optional[Iterable[Tool]] = None,
        global_context: Optional[Dict[str, Any]] = None,
        parser_options: Optional[ParserOptions] = None,
        prompt_template: Optional[PromptTemplate] = None,
    ):
        """
        Initialize tool system.

        Args:
            tools: Tools to register, in order
            global_context: Initial context shared by all tools
            parser_options: Streaming parser options
            prompt_template: Layout of the generated system prompt

        Raises:
            RegistrationError: If two tools share an id or a tag
        """
        self._events = EventChannel()
        self._parser_options = parser_options or ParserOptions()
        self._registry = ToolRegistry(self._events, fold_case=self._parser_options.lowercase)
        self._parser = StreamingXMLParser(self._registry.has_tag, self._parser_options)
        self._global_context: Dict[str, Any] = dict(global_context or {})
        self._prompt_template = prompt_template or PromptTemplate()

        self._results: List[ToolResult] = []
        self._text_parts: List[str] = []
        self._processing = False
        self._terminate_reason: Optional[str] = None
        self._detach_trace: Optional[Callable[[], None]] = None

        for tool in tools or []:
            self.register_tool(tool)

    @classmethod
    def from_settings(cls, tools: Iterable[Tool], settings: SystemSettings) -> "ToolSystem":
        """
        Build a tool system from loaded settings.

        Args:
            tools: Tools to register
            settings: Validated settings (see config.load_config)

        Returns:
            ToolSystem with settings.disabled_tools disabled

        Raises:
            ToolNotFoundError: If disabled_tools names an unregistered id
        """
        system = cls(
            tools=tools,
            global_context=settings.global_context,
            parser_options=settings.parser,
            prompt_template=settings.prompt,
        )
        for tool_id in settings.disabled_tools:
            system.disable_tool(tool_id)
        return system

    # Events

    @property
    def events(self) -> EventChannel:
        return self._events

    def on(self, event: ToolSystemEvent, callback: Callable[[Any], None]) -> Callable[[], None]:
        """Subscribe to an event; returns a callable that unsubscribes."""
        return self._events.on(event, callback)

    def off(self, event: ToolSystemEvent, callback: Callable[[Any], None]) -> None:
        self._events.off(event, callback)

    def set_trace(self, trace: Optional[StreamTrace]) -> None:
        """Record every emitted event into ``trace``; None detaches."""
        if self._detach_trace:
            self._detach_trace()
            self._detach_trace = None
        if trace is not None:
            self._detach_trace = self._events.on_any(trace.record)

    # Tool management

    def register_tool(self, tool: Tool) -> None:
        self._registry.register_tool(tool)
        logger.info(f"Registered tool '{tool.id}' for <{tool.xml_tag}> blocks")

    def unregister_tool(self, tool_id: str) -> None:
        self._registry.unregister_tool(tool_id)

    def enable_tool(self, tool_id: str) -> None:
        self._registry.enable_tool(tool_id)

    def disable_tool(self, tool_id: str) -> None:
        self._registry.disable_tool(tool_id)

    def get_tool(self, tool_id: str) -> Optional[Tool]:
        return self._registry.get_tool(tool_id)

    def get_all_tools(self) -> List[Tool]:
        return self._registry.get_all_tools()

    def get_enabled_tools(self) -> List[Tool]:
        return self._registry.get_enabled_tools()

    def get_disabled_tools(self) -> List[Tool]:
        return self._registry.get_disabled_tools()

    def get_stats(self) -> Dict[str, Any]:
        return self._registry.get_stats()

    # Context and template

    def update_global_context(self, context: Dict[str, Any]) -> None:
        """Shallow-merge keys into the global context."""
        self._global_context = {**self._global_context, **context}

    def get_global_context(self) -> Dict[str, Any]:
        return dict(self._global_context)

    def set_prompt_template(self, **changes: Any) -> None:
        """Update fields of the prompt template, e.g. ``numbering=False``."""
        self._prompt_template = self._prompt_template.model_copy(update=changes)

    def get_prompt_template(self) -> PromptTemplate:
        return self._prompt_template.model_copy()

    # Prompt generation

    def generate_system_prompt(self, context: Optional[Dict[str, Any]] = None) -> str:
        """
        Build the system prompt from the enabled tools' prompt sections.

        Args:
            context: Extra context merged over the global context for this call

        Returns:
            Prompt text; disabled tools contribute nothing
        """
        enabled_tools = self.get_enabled_tools()
        merged_context = {
            **self._global_context,
            **(context or {}),
            "enabled_tools": [tool.id for tool in enabled_tools],
        }
        if not enabled_tools:
            logger.warning("Generating system prompt with no enabled tools")

        builder = PromptBuilder(merged_context)
        builder.add_sections(tool.generate_prompt_section(merged_context) for tool in enabled_tools)

        template = self._prompt_template
        if template.custom_formatting:
            prompt = template.custom_formatting(builder.sorted_sections())
        else:
            suffix = template.system_suffix
            if template.include_tool_list:
                suffix = self._tool_list_section(enabled_tools) + suffix
            prompt = builder.build(
                prefix=template.system_prefix,
                suffix=suffix,
                separator=template.section_separator,
                numbering=template.numbering,
            )

        self._events.emit(
            ToolSystemEvent.PROMPT_GENERATED,
            PromptGeneratedEvent(
                prompt=prompt,
                enabled_tools=[tool.id for tool in enabled_tools],
                context=merged_context,
            ),
        )
        return prompt

    def generate_user_prompt(self, context: Optional[Dict[str, Any]] = None) -> str:
        """User-turn prompt listing the enabled tools and the merged context."""
        merged_context = {**self._global_context, **(context or {})}
        descriptions = "\n".join(
            f"{index}. {tool.description} ({tool.xml_tag})"
            for index, tool in enumerate(self.get_enabled_tools(), start=1)
        )
        return (
            "Based on the current context, provide suggestions using the available LLM tools:\n"
            f"{descriptions}\n\n"
            f"Context: {json.dumps(merged_context, indent=2, default=str)}\n\n"
            "IMPORTANT: Your response MUST use the XML formats specified in the system prompt."
        )

    @staticmethod
    def _tool_list_section(tools: List[Tool]) -> str:
        lines = "\n".join(f"- {tool.name}: {tool.description}" for tool in tools)
        return f"Available LLM Tools:\n{lines}\n\n"

    # Stream processing

    async def process_stream(
        self,
        chunks: ChunkSource,
        on_chunk: Optional[Callable[[str], None]] = None,
        on_complete: Optional[Callable[[], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> "ToolSystem":
        """
        Consume a chunk stream and dispatch every completed tool block.

        Results of a previous call are cleared first. Validation and handler
        failures are reported through the tool_error event and never stop the
        stream. Handlers receive a deep copy of the validated data, so the
        recorded ToolResult is not affected by what a handler does with it.
        An async source is closed with aclose() before this returns.

        Args:
            chunks: Async iterable (or iterable) of text chunks
            on_chunk: Called with each chunk before it is parsed
            on_complete: Called once the stream ended or was terminated
            on_error: Called with an exception raised by the chunk source or
                by on_chunk; without it the exception propagates

        Returns:
            self
        """
        self._results = []
        self._text_parts = []
        self._terminate_reason = None
        self._parser.reset()
        self._processing = True

        start_time = time.monotonic()
        self._events.emit(
            ToolSystemEvent.PARSING_STARTED,
            ParsingStartedEvent(tool_count=len(self.get_enabled_tools())),
        )

        source_error: Optional[Exception] = None
        iterator = _chunk_iterator(chunks)
        try:
            while not self._terminated:
                try:
                    chunk = await iterator.__anext__()
                except StopAsyncIteration:
                    break
                if on_chunk:
                    on_chunk(chunk)
                await self._dispatch_events(self._parser.feed(chunk))

            if not self._terminated:
                await self._dispatch_events(self._parser.finish())
        except Exception as e:
            logger.warning(f"Chunk stream failed: {e}")
            source_error = e
        finally:
            self._processing = False
            # Source may be left unexhausted by termination or an error
            await _close(iterator)

        terminated = self._terminated
        if terminated or source_error is not None:
            self._parser.reset()

        duration_ms = (time.monotonic() - start_time) * 1000
        self._events.emit(
            ToolSystemEvent.PARSING_COMPLETE,
            ParsingCompleteEvent(
                results=list(self._results),
                duration_ms=duration_ms,
                terminated=terminated,
            ),
        )
        if terminated:
            self._events.emit(
                ToolSystemEvent.STREAM_TERMINATED,
                StreamTerminatedEvent(reason=self._terminate_reason),
            )

        if source_error is not None:
            if on_error is None:
                raise source_error
            on_error(source_error)
        elif on_complete:
            on_complete()

        return self

    async def process_complete_response(self, response: str) -> List[ToolResult]:
        """Process a whole response as a single chunk and return its results."""
        await self.process_stream([response])
        return self.get_results()

    def terminate_stream(self, reason: str = DEFAULT_TERMINATION_REASON) -> "ToolSystem":
        """
        Stop the active process_stream call.

        No further chunks are consumed and pending partial text is dropped.
        The stream_terminated event is emitted last. Without an active stream
        this does nothing.
        """
        if not self._processing:
            logger.debug("terminate_stream called with no active stream")
            return self
        if self._terminate_reason is None:
            self._terminate_reason = reason
            logger.info(f"Terminating stream: {reason}")
        return self

    @property
    def _terminated(self) -> bool:
        return self._terminate_reason is not None

    @property
    def is_processing(self) -> bool:
        return self._processing

    async def _dispatch_events(self, events: List[ParserEvent]) -> None:
        for event in events:
            if self._terminated:
                return
            if event.event_type is ParserEventType.TAG:
                await self._dispatch_block(event.tag_name, event.content)
            elif event.event_type is ParserEventType.TEXT:
                self._text_parts.append(event.content)
            else:
                self._events.emit(ToolSystemEvent.PARSE_WARNING, ParseWarningEvent(error=event.error))

    async def _dispatch_block(self, tag_name: str, raw_content: str) -> None:
        tool = self._registry.get_by_tag(tag_name)
        if tool is None or not tool.enabled:
            logger.debug(f"Dropping <{tag_name}> block: no enabled tool for this tag")
            return

        try:
            decoded = tool.decode_payload(raw_content)
        except ValueError as e:
            self._emit_tool_error(
                tool.id,
                ToolValidationError(f"Could not decode payload for tool {tool.id}: {e}", tool.id, raw_content),
                raw_content,
            )
            return

        try:
            data = tool.validate_response(decoded)
        except ToolValidationError as e:
            self._emit_tool_error(tool.id, e, raw_content)
            return
        except Exception as e:
            error = ToolValidationError(f"Validation failed for tool {tool.id}: {e}", tool.id, decoded)
            self._emit_tool_error(tool.id, error, raw_content)
            return

        result = tool.create_result(
            data,
            confidence=_confidence_of(data),
            metadata=_metadata_of(data),
        )

        try:
            outcome = tool.handle_response(copy.deepcopy(data), self.get_global_context())
            if inspect.isawaitable(outcome):
                outcome = await outcome
        except Exception as e:
            self._emit_tool_error(tool.id, e, data)
            return

        self._results.append(result)
        self._events.emit(ToolSystemEvent.TOOL_RESULT, result)
        self._apply_control(tool.id, outcome)

    def _emit_tool_error(self, tool_id: str, error: Exception, data: Any) -> None:
        logger.warning(f"Tool '{tool_id}' failed: {error}")
        self._events.emit(ToolSystemEvent.TOOL_ERROR, ToolErrorEvent(tool_id=tool_id, error=error, data=data))

    def _apply_control(self, tool_id: str, outcome: Any) -> None:
        """Honour ``{"control": {"terminate_stream": True, "reason": ...}}``."""
        if not isinstance(outcome, dict):
            return
        control = outcome.get("control")
        if isinstance(control, dict) and control.get("terminate_stream"):
            self.terminate_stream(control.get("reason") or f"Terminated by tool '{tool_id}'")

    # Results

    def get_results(self) -> List[ToolResult]:
        """Results of the current or last processed stream, in arrival order."""
        return list(self._results)

    def get_result(self, tool_id: str) -> Optional[ToolResult]:
        """Most recent result produced by a tool, or None."""
        for result in reversed(self._results):
            if result.tool_id == tool_id:
                return result
        return None

    def get_text(self) -> str:
        """Literal text of the last stream found outside tool blocks."""
        return "".join(self._text_parts)

    def clear_results(self) -> None:
        self._results = []
        self._text_parts = []

    def reset(self) -> None:
        """Clear results and drop any pending parser state."""
        self.clear_results()
        self._parser.reset()
        self._terminate_reason = None
