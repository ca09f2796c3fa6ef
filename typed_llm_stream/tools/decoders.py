"""Payload decoders: turn a captured block body into the value that is
validated against a tool's schema.

The body of a tagged block is opaque text owned by the tool's contract. A
decoder is the seam where a tool states how that text is read, and how an
example body is rendered in the tool's prompt section.
"""

import json
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List
from xml.etree import ElementTree as ET

from .schema_utils import (
    is_list_type,
    json_example,
    list_item_type,
    model_field_types,
    unwrap_annotation,
    xml_from_schema,
    example_value,
)

_NUMERIC_RE = re.compile(r"^-?\d+(\.\d+)?$")


class PayloadDecoder(ABC):
    """Base class for payload decoders."""

    name = "payload"

    @abstractmethod
    def decode(self, raw: str, schema: Any = None) -> Any:
        """
        Decode a raw block body.

        Args:
            raw: Block content exactly as captured between the tags
            schema: The tool's schema, for decoders that need type hints

        Returns:
            Decoded value, to be validated against the schema

        Raises:
            ValueError: If the body cannot be decoded
        """
        pass

    @abstractmethod
    def example(self, xml_tag: str, schema: Any) -> str:
        """Render an example block for prompt instructions."""
        pass


class TextDecoder(PayloadDecoder):
    """Hands the body through as a string."""

    name = "text"

    def __init__(self, strip: bool = True):
        self.strip = strip

    def decode(self, raw: str, schema: Any = None) -> Any:
        return raw.strip() if self.strip else raw

    def example(self, xml_tag: str, schema: Any) -> str:
        return f"<{xml_tag}>{example_value(schema)}</{xml_tag}>"


class JSONDecoder(PayloadDecoder):
    """Parses the body as a JSON document."""

    name = "json"

    def decode(self, raw: str, schema: Any = None) -> Any:
        text = raw.strip()
        if not text:
            raise ValueError("Empty JSON payload")
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON payload: {e}") from e

    def example(self, xml_tag: str, schema: Any) -> str:
        return f"<{xml_tag}>\n{json_example(schema)}\n</{xml_tag}>"


class XMLFieldsDecoder(PayloadDecoder):
    """Reads child elements of the body into a dict.

    ``<name>x</name><count>2</count>`` decodes to ``{"name": "x", "count": 2}``.
    Repeated children become lists; children of a list-typed field are its
    items. Numeric text is converted unless the schema says the field is a
    string.
    """

    name = "xml"
    _ROOT = "payload"

    def decode(self, raw: str, schema: Any = None) -> Any:
        try:
            root = ET.fromstring(f"<{self._ROOT}>{raw}</{self._ROOT}>")
        except ET.ParseError as e:
            raise ValueError(f"Invalid XML payload: {e}") from e
        return self._convert(root, schema)

    def example(self, xml_tag: str, schema: Any) -> str:
        return xml_from_schema(xml_tag, schema)

    def _convert(self, element: ET.Element, annotation: Any = None) -> Any:
        target, _ = unwrap_annotation(annotation) if annotation is not None else (None, False)
        children = list(element)

        if target is not None and is_list_type(target):
            item_type = list_item_type(target)
            return [self._convert(child, item_type) for child in children]

        if not children:
            return self._scalar(element.text, target)

        fields = model_field_types(target)
        grouped: Dict[str, List[ET.Element]] = {}
        for child in children:
            grouped.setdefault(child.tag, []).append(child)

        data: Dict[str, Any] = {}
        for tag, elements in grouped.items():
            values = [self._convert(e, fields.get(tag)) for e in elements]
            data[tag] = values[0] if len(values) == 1 else values
        return data

    @staticmethod
    def _scalar(text: Any, target: Any) -> Any:
        value = (text or "").strip()
        if target is str:
            return value
        if _NUMERIC_RE.match(value):
            return float(value) if "." in value else int(value)
        return value
