#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/test_markdown_serializer.py
"""Unit tests for MarkdownSerializer.

Tests cover:
- Rendering every built-in node type
- Renderer options (bullets, emphasis symbols, fences, escaping)
- Delimiter switching for nested emphasis
- Fallback rendering for unknown node types
- Transformer failures in lenient and strict mode

"""

import copy
import logging
import re

import pytest

from mdxbridge.ast import (
    Node,
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
from mdxbridge.exceptions import InvalidOptionsError, MalformedTreeError, TransformerError
from mdxbridge.options import MarkdownParserOptions, MarkdownRendererOptions
from mdxbridge.renderers import MarkdownSerializer, serialize
from mdxbridge.transformers import HeadingTransformer, InlineTransformer, default_transformers


def _render(*blocks, **options):
    renderer_options = MarkdownRendererOptions(**options) if options else None
    return MarkdownSerializer(options=renderer_options).serialize(root(*blocks))


class MentionTransformer(InlineTransformer):
    name = "mention"
    priority = 90
    node_types = ("mention",)
    pattern = re.compile(r"@(?P<user>\w+)")

    def render(self, node, child_text, context):
        return "@" + node.get("user", "")

    def parse(self, match, context):
        return element("mention", user=match.group("user"))


class ExplodingHeading(HeadingTransformer):
    name = "exploding_heading"
    priority = 1

    def render(self, node, child_text, context):
        raise RuntimeError("boom")


class DecliningHeading(HeadingTransformer):
    name = "declining_heading"
    priority = 1

    def render(self, node, child_text, context):
        return None


@pytest.mark.unit
class TestDocumentLayout:
    """Tests for block layout at the root."""

    def test_docstring_example(self):
        assert MarkdownSerializer().serialize(root(heading(1, "Title"), paragraph("Body"))) == "# Title\n\nBody"

    def test_empty_document(self):
        assert _render() == ""

    def test_empty_paragraph(self):
        assert _render(paragraph()) == ""

    def test_blank_blocks_skipped(self):
        assert _render(heading(1, "A"), paragraph(), paragraph("B")) == "# A\n\nB"

    def test_no_trailing_newline(self):
        assert not _render(paragraph("x"), code_block("y")).endswith("\n")

    def test_non_root_node(self):
        assert MarkdownSerializer().serialize(paragraph("just ", strong("this"))) == "just **this**"

    def test_tree_not_mutated(self, sample_document):
        before = copy.deepcopy(sample_document)
        MarkdownSerializer().serialize(sample_document)
        assert sample_document == before


@pytest.mark.unit
class TestBlocks:
    """Tests for block-level nodes."""

    def test_headings(self):
        assert _render(heading(1, "One"), heading(6, "Six")) == "# One\n\n###### Six"

    def test_heading_level_clamped(self):
        assert _render(heading(9, "Deep")) == "###### Deep"
        assert _render(Node("heading", {"level": "bad"}, [text("x")])) == "# x"

    def test_heading_joins_lines(self):
        assert _render(heading(2, "a\nb")) == "## a b"

    def test_empty_heading(self):
        assert _render(heading(3)) == "###"

    def test_paragraph_keeps_newlines(self):
        assert _render(paragraph("a\nb")) == "a\nb"

    def test_quote(self):
        assert _render(quote("Quoted\ntext")) == "> Quoted\n> text"

    def test_empty_quote(self):
        assert _render(quote()) == ">"

    def test_code_block(self):
        assert _render(code_block("x = 1", "python")) == "```python\nx = 1\n```"

    def test_empty_code_block(self):
        assert _render(code_block("")) == "```\n```"

    def test_code_block_fence_longer_than_content(self):
        assert _render(code_block("a\n```\nb")) == "````\na\n```\nb\n````"

    def test_code_block_language_with_backtick(self):
        assert _render(code_block("x", "a`b")) == "~~~a`b\nx\n~~~"

    def test_code_block_tilde_option(self):
        assert _render(code_block("x"), code_fence_char="~") == "~~~\nx\n~~~"

    def test_code_text_not_escaped(self):
        assert _render(code_block("*a* # b")) == "```\n*a* # b\n```"

    def test_thematic_break(self):
        assert _render(paragraph("a"), thematic_break(), paragraph("b")) == "a\n\n***\n\nb"

    def test_thematic_break_option(self):
        assert _render(thematic_break(), thematic_break="___") == "___"


@pytest.mark.unit
class TestLists:
    """Tests for list rendering."""

    def test_bullet_list(self):
        assert _render(list_node("bullet", list_item("a"), list_item("b"))) == "- a\n- b"

    def test_bullet_option(self):
        assert _render(list_node("bullet", list_item("a")), bullet="*") == "* a"

    def test_number_list_start(self):
        assert _render(list_node("number", list_item("x"), list_item("y"), start=3)) == "3. x\n4. y"

    def test_check_list(self):
        doc = list_node("check", list_item("Done", checked=True), list_item("Todo", checked=False))
        assert _render(doc) == "- [x] Done\n- [ ] Todo"

    def test_nested_list_indent(self):
        nested = list_node("bullet", list_item("a", list_node("number", list_item("b"), list_item("c"))))
        assert _render(nested) == "- a\n  1. b\n  2. c"

    def test_nested_under_number_marker(self):
        nested = list_node("number", list_item("a", list_node("bullet", list_item("b"))), start=10)
        assert _render(nested) == "10. a\n    - b"

    def test_multiline_item(self):
        assert _render(list_node("bullet", list_item("first\nsecond"))) == "- first\n  second"

    def test_empty_item(self):
        assert _render(list_node("bullet", list_item(), list_item("b"))) == "-\n- b"


@pytest.mark.unit
class TestInline:
    """Tests for inline nodes."""

    def test_formatting(self):
        doc = paragraph(strong("b"), " ", emphasis("i"), " ", strikethrough("s"), " ", inline_code("c"))
        assert _render(doc) == "**b** *i* ~~s~~ `c`"

    def test_symbol_options(self):
        doc = paragraph(strong("b"), " ", emphasis("i"))
        assert _render(doc, strong_symbol="__", emphasis_symbol="_") == "__b__ _i_"

    def test_edge_whitespace_moved_outside(self):
        assert _render(paragraph("a", emphasis(" x "), "b")) == "a *x* b"

    def test_whitespace_only_emphasis(self):
        assert _render(paragraph("a", emphasis(" "), "b")) == "a b"

    def test_emphasis_around_strong_uses_underscore_strong(self):
        assert _render(paragraph(emphasis(strong("x")))) == "*__x__*"
        assert _render(paragraph("a", emphasis(" ", strong("x"), inline_code("")))) == "a *__x__*"

    def test_strong_around_emphasis_uses_triple_stars(self):
        assert _render(paragraph(strong(emphasis("x")))) == "***x***"

    def test_emphasis_sharing_content_with_strong(self):
        assert _render(paragraph(emphasis(strong("a"), "b"))) == "***a**b*"
        assert _render(paragraph(emphasis("a"), strong("b"))) == "*a***b**"

    def test_nested_with_underscore_options(self):
        options = {"strong_symbol": "__", "emphasis_symbol": "_"}
        assert _render(paragraph(emphasis(strong("x"))), **options) == "*__x__*"
        assert _render(paragraph(strong(emphasis("x"))), **options) == "**_x_**"

    def test_touching_code_spans_merged(self):
        assert _render(paragraph(inline_code("a"), inline_code("b"))) == "`ab`"
        assert _render(paragraph(inline_code("a`"), inline_code("b"))) == "``a`b``"

    def test_touching_spans_merged(self):
        assert _render(paragraph(strong("a"), strong("b"))) == "**ab**"
        assert _render(paragraph(emphasis("a"), text(""), emphasis("b"))) == "*ab*"
        assert _render(paragraph(strikethrough("a"), strikethrough(strong("b")))) == "~~a**b**~~"
        assert _render(paragraph(emphasis("a"), emphasis(strong("b")))) == "*a**b***"

    def test_nested_strikethrough_collapsed(self):
        assert _render(paragraph(strikethrough(strikethrough("x")))) == "~~x~~"

    def test_inline_code_with_backticks(self):
        assert _render(paragraph(inline_code("a`b"))) == "``a`b``"

    def test_empty_inline_code(self):
        assert _render(paragraph("a", inline_code(""), "b")) == "ab"

    def test_link(self):
        assert _render(paragraph(link("https://example.com", "go"))) == "[go](https://example.com)"

    def test_link_title_and_spaces(self):
        doc = paragraph(link("docs/my page.md", "go", title='say "hi"'))
        assert _render(doc) == '[go](<docs/my page.md> "say \\"hi\\"")'

    def test_link_destination_with_angle_brackets(self):
        assert _render(paragraph(link("https://x/a<b>", "go"))) == "[go](<https://x/a\\<b\\>>)"

    def test_image(self):
        assert _render(paragraph(image("a.png", alt="*A*", title="T"))) == '![\\*A\\*](a.png "T")'

    def test_text_escaped(self):
        assert _render(paragraph("# not a heading *really*")) == "\\# not a heading \\*really\\*"

    def test_carriage_return_written_as_line_feed(self):
        assert _render(paragraph("a\r# b\r\nc")) == "a\n\\# b\nc"

    def test_marker_after_wide_space_escaped(self):
        assert _render(paragraph("\u3000# x")) == "\\# x"
        assert _render(quote("\u00a0> x")) == "> \\> x"

    def test_escaping_disabled(self):
        assert _render(paragraph("*raw*"), escape_special=False) == "*raw*"


@pytest.mark.unit
class TestFallback:
    """Tests for nodes no transformer handles."""

    def test_unknown_inline_renders_children(self):
        diagnostics = DiagnosticLog()
        doc = root(paragraph("Hi ", element("mention", [text("@bob")])))
        assert MarkdownSerializer().serialize(doc, diagnostics) == "Hi @bob"
        assert diagnostics.by_source("serializer")[0].details["node_type"] == "mention"

    def test_unknown_leaf_uses_text_attribute(self):
        assert _render(paragraph(Node("widget", {"text": "*x*"}))) == "\\*x\\*"

    def test_unknown_empty_leaf(self):
        assert _render(Node("widget")) == ""

    def test_custom_transformer(self):
        registry = default_transformers()
        registry.register(MentionTransformer())
        diagnostics = DiagnosticLog()
        doc = root(paragraph("Hi ", element("mention", user="bob")))
        assert serialize(doc, registry, diagnostics=diagnostics) == "Hi @bob"
        assert not diagnostics

    def test_declining_transformer_falls_through(self):
        registry = default_transformers()
        registry.register(DecliningHeading())
        assert serialize(root(heading(1, "x")), registry) == "# x"

    def test_failing_transformer_falls_through(self, caplog):
        registry = default_transformers()
        registry.register(ExplodingHeading())
        diagnostics = DiagnosticLog()
        with caplog.at_level(logging.WARNING, logger="mdxbridge.renderers.markdown"):
            result = serialize(root(heading(1, "x")), registry, diagnostics=diagnostics)
        assert result == "# x"
        assert diagnostics.has_errors
        assert "exploding_heading" in caplog.text

    def test_failing_transformer_strict(self):
        registry = default_transformers()
        registry.register(ExplodingHeading())
        serializer = MarkdownSerializer(registry, strict=True)
        with pytest.raises(TransformerError) as exc_info:
            serializer.serialize(root(heading(1, "x")))
        assert exc_info.value.transformer_name == "exploding_heading"
        assert exc_info.value.operation == "render"
        assert isinstance(exc_info.value.original_error, RuntimeError)


@pytest.mark.unit
class TestErrors:
    """Tests for caller errors."""

    def test_shared_node_rejected(self):
        shared = text("x")
        with pytest.raises(MalformedTreeError):
            MarkdownSerializer().serialize(root(paragraph(shared), paragraph(shared)))

    def test_wrong_options_type(self):
        with pytest.raises(InvalidOptionsError):
            MarkdownSerializer(options=MarkdownParserOptions())  # type: ignore[arg-type]
