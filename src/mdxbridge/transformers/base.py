#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdxbridge/transformers/base.py
"""Base classes for bidirectional markdown transformers.

A transformer is one rule of the conversion engine. It knows how to turn one
kind of tree node into a markdown fragment (export direction) and how to
recognise that fragment in markdown text and rebuild the node (import
direction). The serializer and parser consult the same ordered transformer set,
so a rule that wins in one direction also wins in the other.

Transformer kinds
-----------------
BlockTransformer
    Recognises a block by its first line (``pattern``) and decides how many
    lines the block spans (``scan``). Examples: headings, code fences, lists.
InlineTransformer
    Recognises a span inside paragraph text (``pattern`` searched anywhere).
    Examples: emphasis, links, inline code.

Writing a transformer
---------------------
Subclass one of the kinds, set ``name``, ``priority`` and ``node_types`` and
implement ``render`` and ``parse``. Either method may return None to decline,
in which case the next matching transformer (and finally the built-in
fallback) is tried.

    >>> class MentionTransformer(InlineTransformer):
    ...     name = "mention"
    ...     priority = 90
    ...     node_types = ("mention",)
    ...     pattern = re.compile(r"@(?P<user>\\w+)")
    ...
    ...     def render(self, node, child_text, context):
    ...         return "@" + node.get("user", "")
    ...
    ...     def parse(self, match, context):
    ...         return element("mention", user=match.group("user"))

"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, ClassVar, Optional

from mdxbridge.ast.nodes import Node, plain_text
from mdxbridge.constants import DEFAULT_PRIORITY, TransformerLevel
from mdxbridge.diagnostics import DiagnosticLog
from mdxbridge.options import MarkdownParserOptions, MarkdownRendererOptions
from mdxbridge.utils.escape import escape_markdown, unescape_markdown

if TYPE_CHECKING:
    from mdxbridge.parsers.markdown import MarkdownParser


@dataclass
class RenderContext:
    """Context passed to ``Transformer.render``.

    Parameters
    ----------
    options : MarkdownRendererOptions
        Serializer options
    diagnostics : DiagnosticLog
        Collector for recoverable problems
    ancestors : list of Node, default = empty list
        Path from the root down to the parent of the node being rendered

    """

    options: MarkdownRendererOptions
    diagnostics: DiagnosticLog
    ancestors: list[Node] = field(default_factory=list)

    @property
    def parent(self) -> Optional[Node]:
        """Parent of the node being rendered, or None at the top."""
        return self.ancestors[-1] if self.ancestors else None

    @property
    def depth(self) -> int:
        """Number of ancestors of the node being rendered."""
        return len(self.ancestors)

    def child(self, node: Node) -> RenderContext:
        """Return a context for rendering the children of ``node``."""
        return replace(self, ancestors=[*self.ancestors, node])

    def index_in_parent(self, node: Node) -> int:
        """Position of ``node`` among its parent's children (by identity)."""
        parent = self.parent
        if parent is None:
            return 0
        for index, sibling in enumerate(parent.children):
            if sibling is node:
                return index
        return 0

    def plain_text(self, node: Node) -> str:
        """Unescaped literal text of a subtree (for code and alt text)."""
        return plain_text(node)

    def escape(self, text: str) -> str:
        """Escape markdown-significant characters in literal text."""
        return escape_markdown(text, self.options.escape_special)


@dataclass
class ParseContext:
    """Context passed to ``Transformer.parse``.

    Parameters
    ----------
    parser : MarkdownParser
        Parser driving the conversion, used for recursive parsing
    options : MarkdownParserOptions
        Parser options
    diagnostics : DiagnosticLog
        Collector for recoverable problems
    depth : int, default = 0
        Inline nesting depth of the text being parsed

    """

    parser: MarkdownParser
    options: MarkdownParserOptions
    diagnostics: DiagnosticLog
    depth: int = 0

    def parse_inline(self, text: str) -> list[Node]:
        """Parse a span of text into inline nodes, one level deeper."""
        return self.parser.parse_inline(text, replace(self, depth=self.depth + 1))

    def parse_blocks(self, text: str) -> list[Node]:
        """Parse markdown text into block nodes."""
        return self.parser.parse_blocks(text, self)

    def unescape(self, text: str) -> str:
        """Remove backslash escapes of ASCII punctuation."""
        return unescape_markdown(text)


class Transformer(ABC):
    """Base class for all transformers.

    Attributes
    ----------
    name : str
        Unique name within a registry
    priority : int
        Lower values are consulted first. Ties keep registration order.
    node_types : tuple of str
        Node type tags this transformer renders
    level : {"block", "inline"}
        Whether the markdown fragment is a block or an inline span

    """

    name: ClassVar[str] = ""
    priority: ClassVar[int] = DEFAULT_PRIORITY
    node_types: ClassVar[tuple[str, ...]] = ()
    level: ClassVar[TransformerLevel] = "block"

    def handles(self, node: Node) -> bool:
        """Export predicate: whether this transformer can render ``node``."""
        return node.type in self.node_types

    @abstractmethod
    def render(self, node: Node, child_text: str, context: RenderContext) -> Optional[str]:
        """Render a node to markdown.

        Parameters
        ----------
        node : Node
            Node to render
        child_text : str
            Already rendered markdown of the node's children
        context : RenderContext
            Rendering context

        Returns
        -------
        str or None
            Markdown fragment, or None to decline

        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, priority={self.priority})"


class BlockTransformer(Transformer):
    """Transformer for block-level constructs.

    Attributes
    ----------
    pattern : re.Pattern or None
        Matched against the first line of a candidate block
    interrupts_paragraph : bool
        Whether a line matching ``pattern`` ends a running paragraph

    """

    level: ClassVar[TransformerLevel] = "block"
    pattern: ClassVar[Optional[re.Pattern[str]]] = None
    interrupts_paragraph: ClassVar[bool] = True

    def matches(self, line: str) -> bool:
        """Import predicate on the first line of a block."""
        return self.pattern is not None and self.pattern.match(line) is not None

    def scan(self, lines: Sequence[str], start: int) -> int:
        """Return how many lines starting at ``start`` form this block.

        The default claims a single matching line. Returns 0 when the block
        does not start at ``start``.
        """
        return 1 if self.matches(lines[start]) else 0

    @abstractmethod
    def parse(self, fragment: str, context: ParseContext) -> Optional[Node]:
        """Build a node from the lines claimed by :meth:`scan`.

        Parameters
        ----------
        fragment : str
            Claimed lines joined with ``"\\n"``
        context : ParseContext
            Parsing context

        Returns
        -------
        Node or None
            Parsed node, or None to decline

        """


class InlineTransformer(Transformer):
    """Transformer for inline spans.

    Attributes
    ----------
    pattern : re.Pattern
        Searched within inline text

    """

    level: ClassVar[TransformerLevel] = "inline"
    pattern: ClassVar[re.Pattern[str]]

    def search(self, text: str, pos: int) -> Optional[re.Match[str]]:
        """Find the next candidate span at or after ``pos``."""
        return self.pattern.search(text, pos)

    @abstractmethod
    def parse(self, match: re.Match[str], context: ParseContext) -> Optional[Node]:
        """Build a node from a pattern match, or return None to decline."""


__all__ = [
    "RenderContext",
    "ParseContext",
    "Transformer",
    "BlockTransformer",
    "InlineTransformer",
]
