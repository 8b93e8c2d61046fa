#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/test_markdown_parser.py
"""Unit tests for MarkdownParser.

Tests cover:
- Block recognition (headings, fences, quotes, lists, breaks, paragraphs)
- Inline recognition and escape handling
- Blank and unusual input
- Custom and failing transformers
- Nesting depth limit

"""

import re

import pytest

from mdxbridge.ast import (
    code_block,
    element,
    emphasis,
    heading,
    image,
    inline_code,
    link,
    list_item,
    list_node,
    paragraph,
    quote,
    root,
    strikethrough,
    strong,
    text,
    thematic_break,
)
from mdxbridge.diagnostics import DiagnosticLog
from mdxbridge.exceptions import InvalidOptionsError, TransformerError
from mdxbridge.options import MarkdownParserOptions, MarkdownRendererOptions
from mdxbridge.parsers import MarkdownParser, parse
from mdxbridge.transformers import BlockTransformer, InlineTransformer, ParseContext, default_transformers


def _blocks(markdown):
    return MarkdownParser().parse(markdown).children


def _inline(markdown):
    [block] = _blocks(markdown)
    return block.children


class MentionTransformer(InlineTransformer):
    name = "mention"
    priority = 90
    node_types = ("mention",)
    pattern = re.compile(r"@(?P<user>\w+)")

    def render(self, node, child_text, context):
        return "@" + node.get("user", "")

    def parse(self, match, context):
        return element("mention", user=match.group("user"))


class ExplodingMention(MentionTransformer):
    name = "exploding_mention"

    def parse(self, match, context):
        raise RuntimeError("boom")


class ExplodingNote(BlockTransformer):
    name = "exploding_note"
    priority = 5
    node_types = ("note",)
    pattern = re.compile(r"^!!! ")

    def render(self, node, child_text, context):
        return f"!!! {child_text}"

    def parse(self, fragment, context):
        raise RuntimeError("boom")


def _with(transformer):
    registry = default_transformers()
    registry.register(transformer)
    return registry


@pytest.mark.unit
class TestDocument:
    """Tests for whole-document parsing."""

    def test_heading_and_paragraph(self):
        doc = MarkdownParser().parse("# Heading\n\nSome *text*.")
        assert doc == root(heading(1, "Heading"), paragraph("Some ", emphasis("text"), "."))

    @pytest.mark.parametrize("markdown", ["", "   ", "\n\n  \n"])
    def test_blank_input(self, markdown):
        assert MarkdownParser().parse(markdown) == root(paragraph())

    def test_blank_input_without_placeholder(self):
        parser = MarkdownParser(options=MarkdownParserOptions(empty_paragraph_for_blank=False))
        assert parser.parse("") == root()

    def test_crlf_input(self):
        assert MarkdownParser().parse("# A\r\n\r\nb\r\nc") == root(heading(1, "A"), paragraph("b\nc"))

    def test_bare_carriage_return_is_a_line_break(self):
        assert MarkdownParser().parse("a\rb\r\r```\rx\r```") == root(paragraph("a\nb"), code_block("x"))

    def test_multiple_blank_lines(self):
        assert _blocks("a\n\n\n\nb") == [paragraph("a"), paragraph("b")]

    def test_convenience_function(self):
        assert parse("**x**") == root(paragraph(strong("x")))

    def test_wrong_options_type(self):
        with pytest.raises(InvalidOptionsError):
            MarkdownParser(options=MarkdownRendererOptions())  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        "markdown",
        ["[", "**", "``", "> ", "-", "1.", "~~~", "\\", "![](", "<>", "* * *\n- [", "```\n", "#" * 10, "__*_*__"],
    )
    def test_parsing_is_total(self, markdown):
        assert MarkdownParser().parse(markdown).type == "root"


@pytest.mark.unit
class TestBlocks:
    """Tests for block-level constructs."""

    def test_heading_levels(self):
        assert _blocks("### Three") == [heading(3, "Three")]

    def test_heading_with_inline(self):
        assert _blocks("# A *b*") == [heading(1, "A ", emphasis("b"))]

    def test_empty_heading(self):
        assert _blocks("#") == [heading(1)]

    @pytest.mark.parametrize("markdown", ["####### seven", "#hashtag"])
    def test_not_a_heading(self, markdown):
        assert _blocks(markdown) == [paragraph(markdown)]

    def test_paragraph_keeps_line_breaks(self):
        assert _blocks("a\nb") == [paragraph("a\nb")]

    def test_heading_interrupts_paragraph(self):
        assert _blocks("text\n# H") == [paragraph("text"), heading(1, "H")]

    def test_list_interrupts_paragraph(self):
        assert _blocks("text\n- item") == [paragraph("text"), list_node("bullet", list_item("item"))]

    def test_code_fence(self):
        assert _blocks("```python\nx = 1\n```") == [code_block("x = 1", "python")]

    def test_tilde_fence(self):
        assert _blocks("~~~\nx\n~~~") == [code_block("x")]

    def test_fence_content_is_literal(self):
        assert _blocks("```\n# not *a* heading\n```") == [code_block("# not *a* heading")]

    def test_longer_closing_fence_required(self):
        assert _blocks("````\na\n```\nb\n````") == [code_block("a\n```\nb")]

    def test_unterminated_fence_runs_to_end(self):
        assert _blocks("```\ncode\n\nmore") == [code_block("code\n\nmore")]

    def test_indented_fence(self):
        assert _blocks("  ```\n  x\n  ```") == [code_block("x")]

    @pytest.mark.parametrize("markdown", ["***", "---", "___", "* * *"])
    def test_thematic_break(self, markdown):
        assert _blocks(markdown) == [thematic_break()]

    def test_quote(self):
        assert _blocks("> Quoted\n> text") == [quote("Quoted\ntext")]

    def test_quote_with_inline(self):
        assert _blocks("> *x*") == [quote(emphasis("x"))]


@pytest.mark.unit
class TestLists:
    """Tests for list parsing."""

    @pytest.mark.parametrize("marker", ["-", "*", "+"])
    def test_bullet_markers(self, marker):
        assert _blocks(f"{marker} a\n{marker} b") == [list_node("bullet", list_item("a"), list_item("b"))]

    def test_number_list(self):
        assert _blocks("1. a\n2. b") == [list_node("number", list_item("a"), list_item("b"))]

    def test_number_list_start(self):
        assert _blocks("3. a\n4. b")[0].get("start") == 3

    def test_check_list(self):
        assert _blocks("- [x] Done\n- [ ] Todo") == [
            list_node("check", list_item("Done", checked=True), list_item("Todo", checked=False))
        ]

    def test_nested_list(self):
        assert _blocks("- a\n  - b\n- c") == [
            list_node(
                "bullet",
                list_item("a", list_node("bullet", list_item("b"))),
                list_item("c"),
            )
        ]

    def test_continuation_line(self):
        assert _blocks("- a\n  continued") == [list_node("bullet", list_item("a\ncontinued"))]

    def test_marker_switch_starts_new_list(self):
        assert _blocks("- a\n1. b") == [
            list_node("bullet", list_item("a")),
            list_node("number", list_item("b")),
        ]

    def test_blank_line_ends_list(self):
        assert _blocks("- a\n\n- b") == [
            list_node("bullet", list_item("a")),
            list_node("bullet", list_item("b")),
        ]


@pytest.mark.unit
class TestInline:
    """Tests for inline constructs."""

    def test_strong_and_emphasis(self):
        assert _inline("**b** *i* __u__ _v_") == [
            strong("b"),
            text(" "),
            emphasis("i"),
            text(" "),
            strong("u"),
            text(" "),
            emphasis("v"),
        ]

    def test_strikethrough(self):
        assert _inline("~~gone~~") == [strikethrough("gone")]

    def test_intraword_underscores_are_text(self):
        assert _inline("snake_case_name") == [text("snake_case_name")]

    def test_unmatched_delimiters_are_text(self):
        assert _inline("**bold") == [text("**bold")]

    def test_escapes_removed(self):
        assert _inline("\\*not\\* \\# emphasis") == [text("*not* # emphasis")]

    def test_code_span_content_literal(self):
        assert _inline("`*x*`") == [inline_code("*x*")]

    def test_padded_code_span(self):
        assert _inline("`` `tick ``") == [inline_code("`tick")]

    def test_link(self):
        assert _inline('[go](https://example.com "T")') == [link("https://example.com", "go", title="T")]

    def test_link_angle_destination(self):
        assert _inline("[go](<my page.md>)") == [link("my page.md", "go")]

    def test_link_with_emphasis(self):
        assert _inline("[*a*](u)") == [link("u", emphasis("a"))]

    def test_image(self):
        assert _inline("![\\*A\\*](a.png)") == [image("a.png", alt="*A*")]

    def test_link_angle_destination_escapes(self):
        assert _inline("[go](<https://x/a\\<b\\>>)") == [link("https://x/a<b>", "go")]
        assert _inline("[go](<a\\\\b c>)") == [link("a\\b c", "go")]

    def test_nested_formatting(self):
        assert _inline("_**x**_") == [emphasis(strong("x"))]

    def test_triple_stars_are_emphasis_inside_strong(self):
        assert _inline("***x***") == [strong(emphasis("x"))]

    def test_underscore_strong_inside_emphasis(self):
        assert _inline("*__x__*") == [emphasis(strong("x"))]

    def test_emphasis_touching_strong(self):
        assert _inline("*a***b**") == [emphasis("a"), strong("b")]
        assert _inline("***a**b*") == [emphasis(strong("a"), "b")]
        assert _inline("**a*b***") == [strong("a", emphasis("b"))]

    def test_code_span_after_escaped_backtick(self):
        assert _inline("\\``c`") == [text("`"), inline_code("c")]


@pytest.mark.unit
class TestDepthLimit:
    """Tests for the inline nesting limit."""

    def test_deep_content_kept_literal(self):
        parser = MarkdownParser(options=MarkdownParserOptions(max_inline_depth=1))
        assert parser.parse("*a _b **c**_*") == root(paragraph(emphasis("a ", emphasis("b **c**"))))

    def test_context_depth(self):
        parser = MarkdownParser()
        context = ParseContext(parser, parser.options, DiagnosticLog(), depth=40)
        assert parser.parse_inline("*a*", context) == [text("*a*")]


@pytest.mark.unit
class TestCustomTransformers:
    """Tests for caller-supplied transformers."""

    def test_custom_inline(self):
        doc = MarkdownParser(_with(MentionTransformer())).parse("Hi @bob")
        assert doc == root(paragraph("Hi ", element("mention", user="bob")))

    def test_failing_inline_keeps_text(self):
        diagnostics = DiagnosticLog()
        doc = MarkdownParser(_with(ExplodingMention())).parse("Hi @bob", diagnostics)
        assert doc == root(paragraph("Hi @bob"))
        assert diagnostics.has_errors

    def test_failing_block_becomes_paragraph(self):
        diagnostics = DiagnosticLog()
        doc = MarkdownParser(_with(ExplodingNote())).parse("!!! note", diagnostics)
        assert doc == root(paragraph("!!! note"))
        assert diagnostics.to_list()[0].details["transformer"] == "exploding_note"

    def test_strict_mode_raises(self):
        parser = MarkdownParser(_with(ExplodingMention()), strict=True)
        with pytest.raises(TransformerError) as exc_info:
            parser.parse("Hi @bob")
        assert exc_info.value.operation == "parse"
