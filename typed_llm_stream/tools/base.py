"""Tool capability record and factory."""

import re
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from ..exceptions import RegistrationError, ToolValidationError
from ..prompt.builder import contextual_replace
from ..types import PromptSection, ToolResult
from .decoders import PayloadDecoder, TextDecoder
from .schema_utils import instructions_from_schema

_ID_RE = re.compile(r"^[a-zA-Z0-9_-]+$")
_TAG_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_-]*$")

ToolContext = Dict[str, Any]
PromptGenerator = Callable[[ToolContext], PromptSection]
ResponseHandler = Callable[[Any, ToolContext], Any]


@dataclass
class Tool:
    """
    A named, schema-bearing unit of capability.

    Behaviour lives in the function fields, so the tool system dispatches on
    stored callables:

    - generate_prompt_section(context) -> PromptSection
    - handle_response(data, context) -> Any (may be a coroutine)
    - validate_response(data) -> validated data, raises ToolValidationError
    - decode_payload(raw) -> decoded value, raises ValueError
    """

    id: str
    name: str
    description: str
    schema: Any
    xml_tag: str
    generate_prompt_section: PromptGenerator
    handle_response: ResponseHandler
    validate_response: Callable[[Any], Any]
    decode_payload: Callable[[str], Any]
    enabled: bool = True
    metadata: Optional[Dict[str, Any]] = None
    version: str = "1.0.0"
    category: str = "general"

    def clone(self) -> "Tool":
        """Independent copy; metadata is copied, callables are shared."""
        return replace(self, metadata=dict(self.metadata) if self.metadata else None)

    def create_result(
        self,
        data: Any,
        confidence: Optional[float] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ToolResult:
        return ToolResult(
            tool_id=self.id,
            type=self.xml_tag,
            data=data,
            confidence=confidence,
            metadata=metadata,
        )


def build_xml_prompt_section(
    tool_id: str,
    title: str,
    xml_structure: str,
    instructions: List[str],
    priority: int = 0,
) -> PromptSection:
    """Standard section layout: title line, example block, bullet list."""
    bullets = "\n".join(f"- {instruction}" for instruction in instructions)
    content = f"{title}:\n{xml_structure.strip()}\n\n{bullets}".strip()
    return PromptSection(id=tool_id, title=title, content=content, order=priority)


def _validate_config(tool_id: str, name: str, description: str, schema: Any, xml_tag: str) -> None:
    for field_name, value in (
        ("id", tool_id),
        ("name", name),
        ("description", description),
        ("xml_tag", xml_tag),
    ):
        if not value or not isinstance(value, str):
            raise RegistrationError(f"Tool config must have a valid string {field_name}")
    if schema is None:
        raise RegistrationError("Tool config must have a schema")
    if not _ID_RE.match(tool_id):
        raise RegistrationError(
            "Tool id must contain only alphanumeric characters, hyphens, and underscores"
        )
    if not _TAG_RE.match(xml_tag):
        raise RegistrationError("Tool xml_tag must be a valid XML element name")


def create_tool(
    id: str,
    name: str,
    description: str,
    schema: Any,
    xml_tag: Optional[str] = None,
    handler: Optional[ResponseHandler] = None,
    decoder: Optional[PayloadDecoder] = None,
    enabled: bool = True,
    metadata: Optional[Dict[str, Any]] = None,
    version: str = "1.0.0",
    category: str = "general",
    instructions: Optional[List[str]] = None,
    prompt_order: int = 0,
    prompt_section: Optional[Union[str, PromptGenerator]] = None,
) -> Tool:
    """
    Build a Tool from configuration.

    Args:
        id: Unique tool identifier
        name: Human readable name, used as the prompt section title
        description: What the tool does
        schema: Pydantic model class or type annotation for the decoded payload
        xml_tag: Tag wrapping the tool's blocks (defaults to id)
        handler: Called with (data, context) for every validated block
        decoder: How block bodies are read (defaults to TextDecoder)
        enabled: Initial state
        metadata: Free-form metadata; metadata["type"] is used in stats
        version: Tool version
        category: Tool category
        instructions: Extra bullets for the default prompt section
        prompt_order: Order of the default prompt section
        prompt_section: Replaces the default prompt section; either a
            ``{{key}}`` template string rendered against the context, or a
            callable returning a PromptSection

    Returns:
        Tool instance

    Raises:
        RegistrationError: If the configuration is invalid
    """
    xml_tag = xml_tag or id
    _validate_config(id, name, description, schema, xml_tag)
    decoder = decoder or TextDecoder()
    adapter = TypeAdapter(schema)

    def validate_response(data: Any) -> Any:
        try:
            return adapter.validate_python(data)
        except ValidationError as e:
            raise ToolValidationError(f"Validation failed for tool {id}: {e}", id, data) from e

    def decode_payload(raw: str) -> Any:
        return decoder.decode(raw, schema)

    if callable(prompt_section):
        generate_prompt_section = prompt_section
    elif isinstance(prompt_section, str):
        template = prompt_section

        def generate_prompt_section(context: ToolContext) -> PromptSection:
            content = contextual_replace(template, context).strip()
            return PromptSection(id=id, title=name, content=content, order=prompt_order)
    else:
        def generate_prompt_section(context: ToolContext) -> PromptSection:
            return build_xml_prompt_section(
                id,
                name,
                decoder.example(xml_tag, schema),
                instructions_from_schema(schema, xml_tag, instructions),
                prompt_order,
            )

    def handle_response(data: Any, context: ToolContext) -> Any:
        if handler is None:
            return None
        return handler(data, context)

    return Tool(
        id=id,
        name=name,
        description=description,
        schema=schema,
        xml_tag=xml_tag,
        generate_prompt_section=generate_prompt_section,
        handle_response=handle_response,
        validate_response=validate_response,
        decode_payload=decode_payload,
        enabled=enabled,
        metadata=metadata,
        version=version,
        category=category,
    )
