"""Tool definitions, payload decoders and the tool registry."""

from .base import Tool, build_xml_prompt_section, create_tool
from .decoders import JSONDecoder, PayloadDecoder, TextDecoder, XMLFieldsDecoder
from .registry import ToolRegistry

__all__ = [
    "Tool",
    "build_xml_prompt_section",
    "create_tool",
    "JSONDecoder",
    "PayloadDecoder",
    "TextDecoder",
    "XMLFieldsDecoder",
    "ToolRegistry",
]
