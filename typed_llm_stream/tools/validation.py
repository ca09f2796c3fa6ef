"""Reusable pydantic field definitions and schema builders for tool payloads.

Field helpers return ``(annotation, FieldInfo)`` pairs, the form accepted by
``pydantic.create_model``. Optional fields default to None.
"""

from datetime import datetime
from typing import Annotated, Any, Dict, List, Optional, Tuple, Type

from pydantic import AnyUrl, BaseModel, Field, create_model

FieldDefinition = Tuple[Any, Any]

SEMVER_PATTERN = (
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


def _definition(annotation: Any, required: bool, description: Optional[str] = None) -> FieldDefinition:
    if required:
        return (annotation, Field(..., description=description))
    return (Optional[annotation], Field(default=None, description=description))


def confidence_score(min_value: float = 0.0, max_value: float = 1.0, required: bool = False) -> FieldDefinition:
    return _definition(
        Annotated[float, Field(ge=min_value, le=max_value)],
        required,
        f"Confidence between {min_value} and {max_value}",
    )


def reasons_list(min_reasons: int = 1, max_reasons: int = 10, required: bool = True) -> FieldDefinition:
    return _definition(
        Annotated[List[str], Field(min_length=min_reasons, max_length=max_reasons)],
        required,
        f"Between {min_reasons} and {max_reasons} reasons",
    )


def metadata_field(required: bool = False) -> FieldDefinition:
    return _definition(Dict[str, Any], required)


def timestamp(required: bool = False) -> FieldDefinition:
    """ISO 8601 timestamp."""
    return _definition(datetime, required, "ISO 8601 timestamp")


def code_snippet(min_length: int = 1, required: bool = True) -> FieldDefinition:
    return _definition(
        Annotated[str, Field(min_length=min_length)],
        required,
        "Code snippet",
    )


def semver(required: bool = False) -> FieldDefinition:
    return _definition(Annotated[str, Field(pattern=SEMVER_PATTERN)], required, "Semantic version")


def url(required: bool = False) -> FieldDefinition:
    return _definition(AnyUrl, required)


def file_path(required: bool = False) -> FieldDefinition:
    return _definition(str, required, "File path")


def suggestion(data_schema: Any, model_name: str = "Suggestion") -> Type[BaseModel]:
    """
    Schema for a suggestion wrapping a payload.

    Args:
        data_schema: Type of the ``suggestion`` field
        model_name: Name of the generated model

    Returns:
        Model with suggestion, confidence, reasons and metadata fields
    """
    return create_model(
        model_name,
        suggestion=(data_schema, Field(..., description="The suggested content")),
        confidence=confidence_score(),
        reasons=reasons_list(),
        metadata=metadata_field(),
    )


def code_suggestion() -> Type[BaseModel]:
    code = create_model(
        "CodeSnippet",
        code=code_snippet(),
        description=(str, Field(..., min_length=1, description="What the code does")),
        language=(str, Field(..., min_length=1, description="Programming language")),
    )
    return suggestion(code, "CodeSuggestion")


def list_suggestion(item_schema: Any, min_items: int = 1, max_items: int = 10) -> Type[BaseModel]:
    items = create_model(
        "SuggestionList",
        title=(str, Field(..., min_length=1, description="Title of the list")),
        items=(
            Annotated[List[item_schema], Field(min_length=min_items, max_length=max_items)],
            Field(..., description=f"Between {min_items} and {max_items} items"),
        ),
    )
    return suggestion(items, "ListSuggestion")
