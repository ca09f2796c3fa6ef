"""Introspection of tool schemas for prompt examples and payload decoding.

A schema is either a pydantic model class or a plain type annotation
(``str``, ``int``, ``List[Item]``, ``Optional[...]``, ``Literal[...]``).
"""

import enum
import json
import typing
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel


def unwrap_annotation(annotation: Any) -> Tuple[Any, bool]:
    """Strip ``Annotated`` and ``Optional`` wrappers.

    Returns:
        (inner annotation, whether None was allowed)
    """
    optional = False
    while True:
        origin = typing.get_origin(annotation)
        if origin is typing.Annotated:
            annotation = typing.get_args(annotation)[0]
            continue
        if origin is typing.Union or _is_union_type(annotation):
            args = [a for a in typing.get_args(annotation) if a is not type(None)]
            if len(args) < len(typing.get_args(annotation)):
                optional = True
            if len(args) == 1:
                annotation = args[0]
                continue
        return annotation, optional


def _is_union_type(annotation: Any) -> bool:
    # X | Y syntax produces types.UnionType
    return type(annotation).__name__ == "UnionType"


def is_model(annotation: Any) -> bool:
    return isinstance(annotation, type) and issubclass(annotation, BaseModel)


def is_list_type(annotation: Any) -> bool:
    return annotation in (list, List) or typing.get_origin(annotation) in (list, List)


def list_item_type(annotation: Any) -> Any:
    args = typing.get_args(annotation)
    return args[0] if args else Any


def model_field_types(annotation: Any) -> Dict[str, Any]:
    """Map of field name to annotation, empty for non-model schemas."""
    if not is_model(annotation):
        return {}
    return {name: info.annotation for name, info in annotation.model_fields.items()}


def choice_values(annotation: Any) -> Optional[List[str]]:
    """Allowed values of a Literal or Enum annotation, else None."""
    if typing.get_origin(annotation) is typing.Literal:
        return [str(v) for v in typing.get_args(annotation)]
    if isinstance(annotation, type) and issubclass(annotation, enum.Enum):
        return [str(member.value) for member in annotation]
    return None


def example_value(annotation: Any) -> str:
    """Placeholder text shown for a scalar field in prompt examples."""
    annotation, _ = unwrap_annotation(annotation)
    choices = choice_values(annotation)
    if choices:
        return "|".join(choices)
    if annotation is bool:
        return "true|false"
    if annotation in (int, float):
        return "number"
    if annotation is str:
        return "text"
    return "value"


def singular_tag_name(plural_tag: str) -> str:
    if plural_tag.endswith("s"):
        return plural_tag[:-1]
    return plural_tag + "_item"


def xml_from_schema(root_tag: str, schema: Any, indent_level: int = 0) -> str:
    """Render an XML example block for a schema."""
    indent = "  " * indent_level
    child_indent = "  " * (indent_level + 1)
    schema, _ = unwrap_annotation(schema)

    if is_list_type(schema):
        item_tag = singular_tag_name(root_tag)
        return "\n".join([
            f"{indent}<{root_tag}>",
            xml_from_schema(item_tag, list_item_type(schema), indent_level + 1),
            f"{child_indent}<!-- Additional {item_tag} elements as needed -->",
            f"{indent}</{root_tag}>",
        ])

    if is_model(schema):
        lines = [f"{indent}<{root_tag}>"]
        for name, info in schema.model_fields.items():
            field_type, optional = unwrap_annotation(info.annotation)
            if is_model(field_type) or is_list_type(field_type):
                lines.append(xml_from_schema(name, field_type, indent_level + 1))
                continue
            value = example_value(field_type)
            if optional or not info.is_required():
                value += " (optional)"
            lines.append(f"{child_indent}<{name}>{value}</{name}>")
        lines.append(f"{indent}</{root_tag}>")
        return "\n".join(lines)

    return f"{indent}<{root_tag}>{example_value(schema)}</{root_tag}>"


def json_example_from_schema(schema: Any) -> Any:
    """Build a JSON-serializable example value for a schema."""
    schema, _ = unwrap_annotation(schema)
    if is_list_type(schema):
        return [json_example_from_schema(list_item_type(schema))]
    if is_model(schema):
        return {
            name: json_example_from_schema(info.annotation)
            for name, info in schema.model_fields.items()
        }
    if schema is bool:
        return True
    if schema in (int, float):
        return 0
    return example_value(schema)


def json_example(schema: Any) -> str:
    return json.dumps(json_example_from_schema(schema), indent=2, ensure_ascii=False)


def instructions_from_schema(
    schema: Any,
    xml_tag: str,
    custom_instructions: Optional[List[str]] = None,
) -> List[str]:
    """Usage bullets derived from field descriptions, after any custom ones."""
    instructions = list(custom_instructions or [])
    schema, _ = unwrap_annotation(schema)

    if is_list_type(schema):
        instructions.append(f"Provide one or more {singular_tag_name(xml_tag)} elements as needed")
        schema, _ = unwrap_annotation(list_item_type(schema))

    if is_model(schema):
        for name, info in schema.model_fields.items():
            _, optional = unwrap_annotation(info.annotation)
            if info.description and info.is_required() and not optional:
                instructions.append(f"Include {name}: {info.description}")

    return instructions
