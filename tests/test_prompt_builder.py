"""Tests for prompt assembly."""

import pytest

from typed_llm_stream.prompt import PromptBuilder, contextual_replace
from typed_llm_stream.types import PromptSection


@pytest.fixture
def builder():
    """Builder with three sections added out of order."""
    builder = PromptBuilder()
    builder.add_section(PromptSection("a", "A", "A", order=2))
    builder.add_section(PromptSection("a2", "A2", "A2", order=1))
    builder.add_section(PromptSection("b", "B", "B", order=1))
    return builder


def test_sections_sorted_stably(builder):
    """Test ordering by order with insertion order for ties."""
    assert [s.id for s in builder.sorted_sections()] == ["a2", "b", "a"]


def test_build_numbered(builder):
    """Test numbered output."""
    assert builder.build() == "1. A2\n\n2. B\n\n3. A"


def test_build_with_prefix_suffix(builder):
    """Test wrapping sections with prefix and suffix."""
    prompt = builder.build(prefix="Tools:\n\n", suffix="Be brief.", separator="\n---\n", numbering=False)

    assert prompt == "Tools:\n\nA2\n---\nB\n---\nA\n---\nBe brief."


def test_build_empty():
    """Test that an empty builder yields only prefix and suffix."""
    assert PromptBuilder().build(prefix="  Start\n\n", suffix="End  ") == "Start\n\nEnd"


def test_build_replaces_context():
    """Test placeholder replacement during build."""
    builder = PromptBuilder({"file": "main.py"})
    builder.add_section(PromptSection("s", "S", "Edit {{file}} at {{line}}"))
    builder.set_context({"line": 3})

    assert builder.build(numbering=False) == "Edit main.py at 3"
    assert builder.get_context() == {"file": "main.py", "line": 3}


def test_build_keeps_unknown_placeholders():
    """Test that placeholders without a context value survive build."""
    builder = PromptBuilder({"file": "main.py"})
    builder.add_section(PromptSection("s", "S", "Edit {{file}} in {{project}}"))

    assert builder.build(numbering=False) == "Edit main.py in {{project}}"


def test_chaining_and_clear():
    """Test chainable mutators."""
    builder = PromptBuilder().add_sections([
        PromptSection("x", "X", "x"),
        PromptSection("y", "Y", "y"),
    ])
    assert len(builder.get_sections()) == 2

    assert builder.clear().get_sections() == []


@pytest.mark.parametrize(
    "template,context,expected",
    [
        ("Hello {{name}}", {"name": "Ann"}, "Hello Ann"),
        ("{{a}}+{{a}}={{b}}", {"a": 1, "b": 2}, "1+1=2"),
        ("Keep {{missing}}", {}, "Keep {{missing}}"),
        ("Keep {{none}}", {"none": None}, "Keep {{none}}"),
        ("Falsy {{zero}}", {"zero": 0}, "Falsy 0"),
        ("No {{ spaced }}", {"spaced": "x"}, "No {{ spaced }}"),
    ],
)
def test_contextual_replace(template, context, expected):
    """Test placeholder replacement rules."""
    assert contextual_replace(template, context) == expected
    assert PromptBuilder.contextual_replace(template, context) == expected


@pytest.mark.parametrize(
    "text,expected",
    [
        ("<a><b>x</b></a>", True),
        ("<a>x", False),
        ("plain text", True),
        ("<a>x</a></b>", False),
        ("<!-- note --><a>x</a>", True),
    ],
)
def test_validate_xml_structure(text, expected):
    """Test the coarse open/close tag count check."""
    assert PromptBuilder.validate_xml_structure(text) is expected


def test_optimize_for_llm():
    """Test model-family hints."""
    assert PromptBuilder.optimize_for_llm("P", "gpt-4o") == (
        "P\n\nPlease respond with well-formed XML as specified above."
    )
    assert PromptBuilder.optimize_for_llm("P", "Claude-3") == (
        "P\n\nUse the exact XML format shown in the examples."
    )
    assert PromptBuilder.optimize_for_llm("P", "llama") == "P"
    assert PromptBuilder.optimize_for_llm("P") == "P"
