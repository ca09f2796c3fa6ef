"""Streaming extraction of tagged tool blocks from LLM output."""

from .config import ConfigLoader, ParserOptions, PromptTemplate, SystemSettings, load_config
from .events import EventChannel, ToolErrorEvent, ToolSystemEvent
from .exceptions import (
    ParseRecoveryError,
    RegistrationError,
    ToolNotFoundError,
    ToolSystemError,
    ToolValidationError,
)
from .parser import ParserEvent, ParserEventType, ParserState, StreamingXMLParser
from .prompt import PromptBuilder, contextual_replace
from .system import ToolSystem
from .tools import (
    JSONDecoder,
    PayloadDecoder,
    TextDecoder,
    Tool,
    ToolRegistry,
    XMLFieldsDecoder,
    create_tool,
)
from .types import PromptSection, ToolResult

__version__ = "0.1.0"

__all__ = [
    "ConfigLoader",
    "ParserOptions",
    "PromptTemplate",
    "SystemSettings",
    "load_config",
    "EventChannel",
    "ToolErrorEvent",
    "ToolSystemEvent",
    "ParseRecoveryError",
    "RegistrationError",
    "ToolNotFoundError",
    "ToolSystemError",
    "ToolValidationError",
    "ParserEvent",
    "ParserEventType",
    "ParserState",
    "StreamingXMLParser",
    "PromptBuilder",
    "contextual_replace",
    "ToolSystem",
    "JSONDecoder",
    "PayloadDecoder",
    "TextDecoder",
    "Tool",
    "ToolRegistry",
    "XMLFieldsDecoder",
    "create_tool",
    "PromptSection",
    "ToolResult",
]
