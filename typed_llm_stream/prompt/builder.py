"""Assembly of ordered prompt sections into a single instruction block."""

import re
from typing import Any, Dict, Iterable, List, Optional

from ..types import PromptSection

_PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")
_OPEN_TAG_RE = re.compile(r"<[^/!][^>]*>")
_CLOSE_TAG_RE = re.compile(r"</[^>]+>")


class PromptBuilder:
    """
    Collects prompt sections and renders them in order.

    Example:
        builder = PromptBuilder()
        builder.add_section(PromptSection("a", "A", "Use <a> blocks", order=1))
        prompt = builder.build(prefix="Tools:\\n\\n")
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        self._sections: List[PromptSection] = []
        self._context: Dict[str, Any] = dict(context or {})

    def add_section(self, section: PromptSection) -> "PromptBuilder":
        self._sections.append(section)
        return self

    def add_sections(self, sections: Iterable[PromptSection]) -> "PromptBuilder":
        self._sections.extend(sections)
        return self

    def set_context(self, context: Dict[str, Any]) -> "PromptBuilder":
        """Merge keys into the builder context used for ``{{key}}`` replacement."""
        self._context = {**self._context, **context}
        return self

    def get_context(self) -> Dict[str, Any]:
        return dict(self._context)

    def sorted_sections(self) -> List[PromptSection]:
        """Sections ascending by order; ties keep insertion order."""
        return sorted(self._sections, key=lambda s: s.order)

    def build(
        self,
        prefix: str = "",
        suffix: str = "",
        separator: str = "\n\n",
        numbering: bool = True,
    ) -> str:
        """
        Render the prompt.

        Each section's content has its {{key}} placeholders filled from the
        builder context first; keys missing from the context are left as written.

        Args:
            prefix: Text placed before the first section
            suffix: Text placed after the last section
            separator: Text placed between sections, and before the suffix
            numbering: Prefix each section with "{n}. "

        Returns:
            Assembled prompt, stripped of surrounding whitespace
        """
        rendered = []
        for index, section in enumerate(self.sorted_sections(), start=1):
            content = self.contextual_replace(section.content, self._context)
            rendered.append(f"{index}. {content}" if numbering else content)

        body = separator.join(rendered)
        if rendered and suffix:
            body += separator
        return f"{prefix}{body}{suffix}".strip()

    def clear(self) -> "PromptBuilder":
        self._sections = []
        return self

    def get_sections(self) -> List[PromptSection]:
        return list(self._sections)

    @staticmethod
    def contextual_replace(template: str, context: Dict[str, Any]) -> str:
        """Replace ``{{key}}`` placeholders; unknown keys are left as they are."""

        def _replace(match: "re.Match[str]") -> str:
            value = context.get(match.group(1))
            return match.group(0) if value is None else str(value)

        return _PLACEHOLDER_RE.sub(_replace, template)

    @staticmethod
    def validate_xml_structure(xml_string: str) -> bool:
        """
        Coarse well-formedness check: equal numbers of open and close tags.

        This is a heuristic, not a parser. Nesting, ordering and tag names
        are not checked, and self-closing tags count as open tags.
        """
        open_tags = _OPEN_TAG_RE.findall(xml_string)
        close_tags = _CLOSE_TAG_RE.findall(xml_string)
        return len(open_tags) == len(close_tags)

    @staticmethod
    def optimize_for_llm(prompt: str, model: Optional[str] = None) -> str:
        """Append a model-family specific formatting reminder."""
        model_name = (model or "").lower()
        if "gpt" in model_name:
            return f"{prompt}\n\nPlease respond with well-formed XML as specified above."
        if "claude" in model_name:
            return f"{prompt}\n\nUse the exact XML format shown in the examples."
        return prompt


def contextual_replace(template: str, context: Dict[str, Any]) -> str:
    """Module-level alias of PromptBuilder.contextual_replace."""
    return PromptBuilder.contextual_replace(template, context)
