"""Pydantic models for configuration validation."""

from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


DEFAULT_SYSTEM_PREFIX = (
    "You are an AI assistant that provides structured responses for LLM interactions. "
    "You can provide suggestions in the following formats:\n\n"
)

DEFAULT_SYSTEM_SUFFIX = """When providing LLM responses:
- Use the XML formats specified above for your responses
- Provide confidence scores when applicable
- Include clear reasons for each suggestion
- Focus on practical, useful suggestions
- You MUST provide at least one suggestion in one of the formats"""


class ParserOptions(BaseModel):
    """Streaming parser configuration."""

    lowercase: bool = Field(default=True, description="Case-fold tag names when matching")
    normalize: bool = Field(default=False, description="Collapse whitespace in captured content")
    strict_mode: bool = Field(
        default=False,
        description="Report unknown tags as parse warnings instead of passing them through as text",
    )
    max_tag_length: int = Field(
        default=256,
        gt=1,
        description="Longest '<...>' span considered a tag before it is treated as literal text",
    )


class PromptTemplate(BaseModel):
    """Layout of the generated system prompt."""

    system_prefix: str = Field(default=DEFAULT_SYSTEM_PREFIX, description="Text placed before the tool sections")
    system_suffix: str = Field(default=DEFAULT_SYSTEM_SUFFIX, description="Text placed after the tool sections")
    section_separator: str = Field(default="\n\n", description="Separator between tool sections")
    numbering: bool = Field(default=True, description="Prefix each section with its position")
    include_tool_list: bool = Field(default=False, description="Append a list of tool names and descriptions")
    custom_formatting: Optional[Callable[[List[Any]], str]] = Field(
        default=None,
        exclude=True,
        description="Callable receiving the sorted sections and returning the full prompt",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    verbosity: int = Field(default=0, ge=0, le=3, description="0=WARNING, 1=INFO, 2-3=DEBUG")
    log_file: Optional[str] = Field(default=None, description="Log file path (default: logs/<timestamp>.log)")


class SystemSettings(BaseModel):
    """Top-level settings for a ToolSystem."""

    parser: ParserOptions = Field(default_factory=ParserOptions, description="Parser options")
    prompt: PromptTemplate = Field(default_factory=PromptTemplate, description="Prompt template")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging configuration")
    global_context: Dict[str, Any] = Field(
        default_factory=dict, description="Initial context shared by all tools"
    )
    disabled_tools: List[str] = Field(
        default_factory=list, description="Tool ids to disable after registration"
    )

    @field_validator("disabled_tools")
    @classmethod
    def validate_disabled_tools(cls, v: List[str]) -> List[str]:
        """Reject duplicate or empty tool ids."""
        if any(not tool_id for tool_id in v):
            raise ValueError("disabled_tools must not contain empty ids")
        if len(set(v)) != len(v):
            raise ValueError("disabled_tools must not contain duplicates")
        return v
