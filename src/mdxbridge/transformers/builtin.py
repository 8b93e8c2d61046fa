#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdxbridge/transformers/builtin.py
"""Built-in markdown transformers.

This module provides the default transformer set used when a caller does not
supply its own. Each transformer owns both directions for its node type, so
what it writes it can also read back.

Block transformers:
    - CodeBlockTransformer: fenced code blocks
    - HeadingTransformer: ATX headings (``#`` to ``######``)
    - ThematicBreakTransformer: horizontal rules
    - QuoteTransformer: ``>`` quotes with inline content
    - ListTransformer: bullet, numbered and check lists (with nesting)

Inline transformers:
    - InlineCodeTransformer: backtick code spans
    - ImageTransformer: ``![alt](url "title")``
    - LinkTransformer: ``[text](url "title")``
    - StrongTransformer: ``**strong**`` / ``__strong__``
    - EmphasisTransformer: ``*emphasis*`` / ``_emphasis_``
    - StrikethroughTransformer: ``~~struck~~``

"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Optional

from mdxbridge.ast.nodes import (
    Node,
    code_block,
    emphasis,
    heading,
    image,
    inline_code,
    link,
    list_item,
    list_node,
    plain_text,
    quote,
    strikethrough,
    strong,
    thematic_break,
)
from mdxbridge.constants import (
    BLOCK_NODE_TYPES,
    MAX_HEADING_LEVEL,
    MIN_CODE_FENCE_LENGTH,
    NODE_CODE,
    NODE_CODE_BLOCK,
    NODE_EMPHASIS,
    NODE_HEADING,
    NODE_IMAGE,
    NODE_LINK,
    NODE_LIST,
    NODE_LIST_ITEM,
    NODE_QUOTE,
    NODE_STRIKETHROUGH,
    NODE_STRONG,
    NODE_TEXT,
    NODE_THEMATIC_BREAK,
    PRIORITY_CODE_BLOCK,
    PRIORITY_EMPHASIS,
    PRIORITY_HEADING,
    PRIORITY_IMAGE,
    PRIORITY_INLINE_CODE,
    PRIORITY_LINK,
    PRIORITY_LIST,
    PRIORITY_QUOTE,
    PRIORITY_STRIKETHROUGH,
    PRIORITY_STRONG,
    PRIORITY_THEMATIC_BREAK,
)
from mdxbridge.transformers.base import (
    BlockTransformer,
    InlineTransformer,
    ParseContext,
    RenderContext,
    Transformer,
)
from mdxbridge.utils.escape import (
    escape_inline_code,
    escape_link_destination,
    escape_link_title,
    longest_run,
    unescape_link_destination,
)

logger = logging.getLogger(__name__)

# Code spans inside other inline constructs are skipped whole so their
# content cannot close the outer construct
_CODE_SPAN = r"(?:``(?:[^`]|`(?!`))+``|`[^`]+`)"

_LINK_DESTINATION = r"\((?P<url><(?:\\.|[^<>\\\n])*>|[^\s()<>]*)(?:[ \t]+\"(?P<title>(?:\\.|[^\"\\])*)\")?[ \t]*\)"


def _wrap(child_text: str, delimiter: str) -> str:
    """Wrap rendered content in a delimiter, keeping edge whitespace outside."""
    core = child_text.strip()
    if not core:
        return child_text
    lead = child_text[: len(child_text) - len(child_text.lstrip())]
    trail = child_text[len(child_text.rstrip()) :]
    return f"{lead}{delimiter}{core}{delimiter}{trail}"


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


# ============================================================================
# Block transformers
# ============================================================================


class HeadingTransformer(BlockTransformer):
    """ATX headings, ``# Title`` through ``###### Title``."""

    name = "heading"
    priority = PRIORITY_HEADING
    node_types = (NODE_HEADING,)
    pattern = re.compile(r"^ {0,3}(?P<marks>#{1,6})(?:[ \t]+(?P<text>.*?))?[ \t]*$")

    def render(self, node: Node, child_text: str, context: RenderContext) -> Optional[str]:
        level = max(1, min(MAX_HEADING_LEVEL, _as_int(node.get("level"), 1)))
        content = " ".join(line.strip() for line in child_text.split("\n")).strip()
        prefix = "#" * level
        return f"{prefix} {content}" if content else prefix

    def parse(self, fragment: str, context: ParseContext) -> Optional[Node]:
        match = self.pattern.match(fragment) if self.pattern else None
        if match is None:
            return None
        content = (match.group("text") or "").strip()
        return heading(len(match.group("marks")), *context.parse_inline(content))


class ThematicBreakTransformer(BlockTransformer):
    """Horizontal rules.

    Written as ``***`` by default; ``---`` is read but never written because
    it doubles as the front matter delimiter.
    """

    name = "thematic_break"
    priority = PRIORITY_THEMATIC_BREAK
    node_types = (NODE_THEMATIC_BREAK,)
    pattern = re.compile(r"^ {0,3}(?:(?:\*[ \t]*){3,}|(?:-[ \t]*){3,}|(?:_[ \t]*){3,})$")

    def render(self, node: Node, child_text: str, context: RenderContext) -> Optional[str]:
        return context.options.thematic_break

    def parse(self, fragment: str, context: ParseContext) -> Optional[Node]:
        return thematic_break()


_FENCE_OPEN = re.compile(r"^(?P<indent> {0,3})(?P<fence>`{3,}|~{3,})(?P<info>.*)$")


def _fence_close_pattern(fence: str) -> re.Pattern[str]:
    return re.compile(rf"^ {{0,3}}{re.escape(fence[0])}{{{len(fence)},}}[ \t]*$")


class CodeBlockTransformer(BlockTransformer):
    """Fenced code blocks.

    The closing fence must use the same character and be at least as long as
    the opening one. An unterminated fence runs to the end of the document.
    """

    name = "code_block"
    priority = PRIORITY_CODE_BLOCK
    node_types = (NODE_CODE_BLOCK,)
    pattern = _FENCE_OPEN

    def matches(self, line: str) -> bool:
        match = _FENCE_OPEN.match(line)
        if match is None:
            return False
        # Backtick fences may not carry backticks in their info string
        return not (match.group("fence")[0] == "`" and "`" in match.group("info"))

    def scan(self, lines: Sequence[str], start: int) -> int:
        if not self.matches(lines[start]):
            return 0
        match = _FENCE_OPEN.match(lines[start])
        if match is None:
            return 0
        closing = _fence_close_pattern(match.group("fence"))
        for index in range(start + 1, len(lines)):
            if closing.match(lines[index]):
                return index - start + 1
        logger.debug("Unterminated code fence at line %d runs to end of document", start + 1)
        return len(lines) - start

    def render(self, node: Node, child_text: str, context: RenderContext) -> Optional[str]:
        code = context.plain_text(node)
        language = str(node.get("language") or "").strip()
        fence_char = context.options.code_fence_char
        if fence_char == "`" and "`" in language:
            fence_char = "~"
        fence = fence_char * max(MIN_CODE_FENCE_LENGTH, longest_run(code, fence_char) + 1)
        if not code:
            return f"{fence}{language}\n{fence}"
        return f"{fence}{language}\n{code}\n{fence}"

    def parse(self, fragment: str, context: ParseContext) -> Optional[Node]:
        lines = fragment.split("\n")
        match = _FENCE_OPEN.match(lines[0])
        if match is None:
            return None

        body = lines[1:]
        if len(lines) > 1 and _fence_close_pattern(match.group("fence")).match(lines[-1]):
            body = lines[1:-1]

        indent = len(match.group("indent"))
        if indent:
            body = [line[min(indent, len(line) - len(line.lstrip(" "))) :] for line in body]

        language = match.group("info").strip() or None
        return code_block("\n".join(body), language)


class QuoteTransformer(BlockTransformer):
    """Block quotes holding inline content, one ``>`` per line."""

    name = "quote"
    priority = PRIORITY_QUOTE
    node_types = (NODE_QUOTE,)
    pattern = re.compile(r"^ {0,3}>")

    _marker = re.compile(r"^ {0,3}> ?")

    def scan(self, lines: Sequence[str], start: int) -> int:
        end = start
        while end < len(lines) and self.matches(lines[end]):
            end += 1
        return end - start

    def render(self, node: Node, child_text: str, context: RenderContext) -> Optional[str]:
        content = child_text.strip()
        if not content:
            return ">"
        return "\n".join(f"> {line}" if line.strip() else ">" for line in content.split("\n"))

    def parse(self, fragment: str, context: ParseContext) -> Optional[Node]:
        content = "\n".join(self._marker.sub("", line, count=1) for line in fragment.split("\n"))
        return quote(*context.parse_inline(content.strip()))


_LIST_ITEM = re.compile(
    r"^(?P<indent>[ \t]*)(?P<marker>[-*+]|\d{1,9}[.)])"
    r"(?:[ \t]+(?:\[(?P<check>[ xX])\](?=[ \t]|$)[ \t]*)?(?P<text>.*))?$"
)


@dataclass
class _ListEntry:
    indent: int
    marker: str
    check: Optional[str]
    lines: list[str] = field(default_factory=list)

    @property
    def kind(self) -> str:
        return "number" if self.marker[0].isdigit() else "bullet"


@dataclass
class _ListLevel:
    indent: int
    node: Node


def _item_indent(match: re.Match[str]) -> int:
    return len(match.group("indent").expandtabs(4))


def _item_kind(match: re.Match[str]) -> str:
    return "number" if match.group("marker")[0].isdigit() else "bullet"


class ListTransformer(BlockTransformer):
    """Bullet, numbered and check lists.

    Renders both ``list`` and ``list_item`` nodes. Nested lists are indented
    by the width of their parent item's marker. A list ends at a blank line,
    at an unindented line that is not an item, or where the top-level marker
    switches between bullets and numbers.
    """

    name = "list"
    priority = PRIORITY_LIST
    node_types = (NODE_LIST, NODE_LIST_ITEM)
    pattern = _LIST_ITEM

    def scan(self, lines: Sequence[str], start: int) -> int:
        first = _LIST_ITEM.match(lines[start])
        if first is None:
            return 0
        top_indent = _item_indent(first)
        top_kind = _item_kind(first)

        end = start + 1
        while end < len(lines):
            line = lines[end]
            if not line.strip():
                break
            match = _LIST_ITEM.match(line)
            if match is not None:
                if _item_indent(match) <= top_indent and _item_kind(match) != top_kind:
                    break
            elif line[:1] not in (" ", "\t"):
                break
            end += 1
        return end - start

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, node: Node, child_text: str, context: RenderContext) -> Optional[str]:
        if node.type == NODE_LIST:
            return child_text
        return self._render_item(node, child_text, context)

    def _marker(self, node: Node, context: RenderContext) -> str:
        parent = context.parent
        list_type = parent.get("list_type", "bullet") if parent is not None and parent.type == NODE_LIST else "bullet"
        bullet = context.options.bullet

        if list_type == "number":
            start = _as_int(parent.get("start"), 1) if parent is not None else 1
            return f"{start + context.index_in_parent(node)}."
        if list_type == "check":
            return f"{bullet} [x]" if node.get("checked") else f"{bullet} [ ]"
        return bullet

    def _render_item(self, node: Node, child_text: str, context: RenderContext) -> str:
        marker = self._marker(node, context)
        if node.children and node.children[0].type in BLOCK_NODE_TYPES:
            child_text = "\n" + child_text

        lines = child_text.split("\n")
        indent = " " * (len(marker) + 1)
        first = f"{marker} {lines[0].strip()}" if lines[0].strip() else marker
        rest = [indent + line for line in lines[1:] if line.strip()]
        return "\n".join([first, *rest])

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse(self, fragment: str, context: ParseContext) -> Optional[Node]:
        entries: list[_ListEntry] = []
        for line in fragment.split("\n"):
            match = _LIST_ITEM.match(line)
            if match is not None:
                entries.append(
                    _ListEntry(
                        indent=_item_indent(match),
                        marker=match.group("marker"),
                        check=match.group("check"),
                        lines=[match.group("text") or ""],
                    )
                )
            elif entries:
                entries[-1].lines.append(line.strip())
            else:
                return None

        stack: list[_ListLevel] = []
        for entry in entries:
            while len(stack) > 1 and entry.indent < stack[-1].indent:
                stack.pop()

            if not stack:
                stack.append(_ListLevel(entry.indent, self._new_list(entry)))
            elif entry.indent > stack[-1].indent and stack[-1].node.children:
                nested = self._new_list(entry)
                stack[-1].node.children[-1].append(nested)
                stack.append(_ListLevel(entry.indent, nested))
            elif len(stack) > 1 and entry.kind != self._kind_of(stack[-1].node):
                sibling = self._new_list(entry)
                stack[-2].node.children[-1].append(sibling)
                stack[-1] = _ListLevel(entry.indent, sibling)

            current = stack[-1].node
            current.append(self._new_item(entry, current, context))

        return stack[0].node if stack else None

    @staticmethod
    def _kind_of(node: Node) -> str:
        return "number" if node.get("list_type") == "number" else "bullet"

    @staticmethod
    def _new_list(entry: _ListEntry) -> Node:
        if entry.check is not None:
            return list_node("check")
        if entry.kind == "number":
            return list_node("number", start=_as_int(entry.marker[:-1], 1))
        return list_node("bullet")

    @staticmethod
    def _new_item(entry: _ListEntry, parent: Node, context: ParseContext) -> Node:
        content = "\n".join(entry.lines).strip()
        children = context.parse_inline(content) if content else []
        checked: Optional[bool] = None
        if entry.check is not None:
            checked = entry.check in "xX"
        elif parent.get("list_type") == "check":
            checked = False
        return list_item(*children, checked=checked)


# ============================================================================
# Inline transformers
# ============================================================================


class InlineCodeTransformer(InlineTransformer):
    """Backtick code spans; content is literal."""

    name = "inline_code"
    priority = PRIORITY_INLINE_CODE
    node_types = (NODE_CODE,)
    pattern = re.compile(r"(?:(?<!`)|(?<=\\`))(?P<fence>`+)(?!`)(?P<body>.+?)(?<!`)(?P=fence)(?!`)", re.DOTALL)

    def render(self, node: Node, child_text: str, context: RenderContext) -> Optional[str]:
        code = context.plain_text(node)
        if not code:
            return ""
        padded, fence = escape_inline_code(code)
        return f"{fence}{padded}{fence}"

    def parse(self, match: re.Match[str], context: ParseContext) -> Optional[Node]:
        body = match.group("body")
        if len(body) >= 2 and body[0] == " " and body[-1] == " " and body.strip():
            body = body[1:-1]
        return inline_code(body)


class ImageTransformer(InlineTransformer):
    """Images, ``![alt](url "title")``."""

    name = "image"
    priority = PRIORITY_IMAGE
    node_types = (NODE_IMAGE,)
    pattern = re.compile(r"!\[(?P<alt>(?:\\.|[^\[\]\\])*)\]" + _LINK_DESTINATION)

    def render(self, node: Node, child_text: str, context: RenderContext) -> Optional[str]:
        alt = context.escape(str(node.get("alt") or ""))
        url = escape_link_destination(str(node.get("url") or ""))
        title = node.get("title")
        title_part = f' "{escape_link_title(str(title))}"' if title else ""
        return f"![{alt}]({url}{title_part})"

    def parse(self, match: re.Match[str], context: ParseContext) -> Optional[Node]:
        title = match.group("title")
        return image(
            unescape_link_destination(match.group("url")),
            alt=context.unescape(match.group("alt")),
            title=context.unescape(title) if title else None,
        )


_LINK_TEXT = rf"(?:\\.|{_CODE_SPAN}|[^\[\]\\`]|\[(?:\\.|{_CODE_SPAN}|[^\[\]\\`])*\])*"


class LinkTransformer(InlineTransformer):
    """Inline links, ``[text](url "title")``."""

    name = "link"
    priority = PRIORITY_LINK
    node_types = (NODE_LINK,)
    pattern = re.compile(rf"\[(?P<text>{_LINK_TEXT})\]" + _LINK_DESTINATION)

    def render(self, node: Node, child_text: str, context: RenderContext) -> Optional[str]:
        url = escape_link_destination(str(node.get("url") or ""))
        title = node.get("title")
        title_part = f' "{escape_link_title(str(title))}"' if title else ""
        return f"[{child_text}]({url}{title_part})"

    def parse(self, match: re.Match[str], context: ParseContext) -> Optional[Node]:
        title = match.group("title")
        return link(
            unescape_link_destination(match.group("url")),
            *context.parse_inline(match.group("text")),
            title=context.unescape(title) if title else None,
        )


class _DelimitedTransformer(InlineTransformer):
    """Inline spans written between paired delimiters.

    Subclasses list one pattern per accepted delimiter; the earliest match of
    any of them is the candidate.
    """

    patterns: tuple[re.Pattern[str], ...] = ()

    def search(self, text: str, pos: int) -> Optional[re.Match[str]]:
        found = [match for match in (pattern.search(text, pos) for pattern in self.patterns) if match]
        return min(found, key=lambda match: match.start(), default=None)


_STAR_BODY = rf"(?:\\.|{_CODE_SPAN}|[^*\\`])"
_UNDERSCORE_BODY = rf"(?:\\.|{_CODE_SPAN}|[^_\\`])"


def _has_visible_content(node: Node) -> bool:
    if node.type == NODE_TEXT:
        return bool(node.text.strip())
    if node.type == NODE_CODE:
        return bool(plain_text(node))
    if node.type in (NODE_STRONG, NODE_EMPHASIS, NODE_STRIKETHROUGH):
        return any(_has_visible_content(child) for child in node.children)
    return True


def _is_only_content_of(node: Node, context: RenderContext, parent_type: str) -> bool:
    """Whether ``node`` is the only visible child of a ``parent_type`` parent."""
    parent = context.parent
    if parent is None or parent.type != parent_type:
        return False
    return all(child is node or not _has_visible_content(child) for child in parent.children)


class StrongTransformer(_DelimitedTransformer):
    """Strong text, ``**strong**`` or ``__strong__``.

    Strong text that is the whole content of an emphasis is written with
    underscores (``*__text__*``), since ``***text***`` reads as emphasis
    inside strong. With ``__`` configured, content starting or ending with an
    underscore switches to ``**``.
    """

    name = "strong"
    priority = PRIORITY_STRONG
    node_types = (NODE_STRONG,)
    patterns = (
        re.compile(
            rf"\*\*(?=\*[^\s*]|[^\s*])"
            rf"(?P<body>(?:{_STAR_BODY}|\*(?!\*){_STAR_BODY}+\*(?=\*\*|(?!\*))|\*\*{_STAR_BODY}+\*\*)+?)"
            r"(?<!\s)\*\*"
        ),
        re.compile(rf"(?<!\w)__(?![\s_])(?P<body>(?:{_UNDERSCORE_BODY}|_(?!_))+?)(?<!\s)__(?!\w)"),
    )
    pattern = patterns[0]

    def render(self, node: Node, child_text: str, context: RenderContext) -> Optional[str]:
        symbol = context.options.strong_symbol
        core = child_text.strip()
        if symbol == "**":
            if _is_only_content_of(node, context, NODE_EMPHASIS):
                symbol = "__"
        elif core.startswith("_") or core.endswith("_"):
            symbol = "**"
        return _wrap(child_text, symbol)

    def parse(self, match: re.Match[str], context: ParseContext) -> Optional[Node]:
        return strong(*context.parse_inline(match.group("body")))


class EmphasisTransformer(_DelimitedTransformer):
    """Emphasis, ``*emphasis*`` or ``_emphasis_``.

    ``*`` emphasis may touch strong delimiters on either side: ``***text***``
    is emphasis inside strong and ``*a***b**`` is emphasis followed by strong.
    With ``_`` configured, content starting or ending with an underscore
    switches to ``*``.
    """

    name = "emphasis"
    priority = PRIORITY_EMPHASIS
    node_types = (NODE_EMPHASIS,)
    patterns = (
        re.compile(
            rf"\*(?=\*\*[^\s*]|[^\s*])(?P<body>(?:{_STAR_BODY}|\*\*{_STAR_BODY}+\*\*)+?)(?<!\s)\*(?=\*\*|(?!\*))"
        ),
        re.compile(
            rf"(?<!\w)_(?![\s_])(?P<body>(?:{_UNDERSCORE_BODY}|__{_UNDERSCORE_BODY}+__)+?)(?<!\s)_(?!\w)"
        ),
    )
    pattern = patterns[0]

    def render(self, node: Node, child_text: str, context: RenderContext) -> Optional[str]:
        symbol = context.options.emphasis_symbol
        core = child_text.strip()
        if symbol == "_" and (core.startswith("_") or core.endswith("_")):
            symbol = "*"
        return _wrap(child_text, symbol)

    def parse(self, match: re.Match[str], context: ParseContext) -> Optional[Node]:
        return emphasis(*context.parse_inline(match.group("body")))


class StrikethroughTransformer(InlineTransformer):
    """Struck-through text, ``~~struck~~``."""

    name = "strikethrough"
    priority = PRIORITY_STRIKETHROUGH
    node_types = (NODE_STRIKETHROUGH,)
    pattern = re.compile(rf"~~(?![\s~])(?P<body>(?:\\.|{_CODE_SPAN}|[^~\\`]|~(?!~))+?)(?<!\s)~~")

    def render(self, node: Node, child_text: str, context: RenderContext) -> Optional[str]:
        core = child_text.strip()
        if core.startswith("~~") and core.endswith("~~"):
            # Already struck through by a nested node
            return child_text
        return _wrap(child_text, "~~")

    def parse(self, match: re.Match[str], context: ParseContext) -> Optional[Node]:
        return strikethrough(*context.parse_inline(match.group("body")))


def builtin_transformers() -> list[Transformer]:
    """Return fresh instances of every built-in transformer."""
    return [
        CodeBlockTransformer(),
        HeadingTransformer(),
        ThematicBreakTransformer(),
        QuoteTransformer(),
        ListTransformer(),
        InlineCodeTransformer(),
        ImageTransformer(),
        LinkTransformer(),
        StrongTransformer(),
        EmphasisTransformer(),
        StrikethroughTransformer(),
    ]


__all__ = [
    "HeadingTransformer",
    "ThematicBreakTransformer",
    "CodeBlockTransformer",
    "QuoteTransformer",
    "ListTransformer",
    "InlineCodeTransformer",
    "ImageTransformer",
    "LinkTransformer",
    "StrongTransformer",
    "EmphasisTransformer",
    "StrikethroughTransformer",
    "builtin_transformers",
]
