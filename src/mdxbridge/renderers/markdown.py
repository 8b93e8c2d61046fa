#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdxbridge/renderers/markdown.py
"""Markdown rendering from document trees.

This module provides the MarkdownSerializer class which converts a document
tree to markdown text by consulting an ordered transformer set.

The rendering process is a depth-first traversal. Children are rendered
first, so each transformer receives the already formatted text of its
children and only has to wrap it. At each node the first transformer whose
export predicate accepts the node (and does not decline) wins. Nodes no
transformer accepts fall back to a literal-text renderer: serialization never
fails on unknown or custom node types.

Layout
------
- Blocks directly under the root are separated by one blank line
- The output has no trailing newline; an empty tree renders as ``""``
- Inside other nodes inline children are concatenated; block children
  (such as a nested list) start on their own line
- Touching text, code, strong, emphasis or strikethrough siblings render as
  one span, since markdown would read them back that way
- Whitespace at the edges of a paragraph is dropped

"""

from __future__ import annotations

import logging
from typing import Optional

from mdxbridge.ast.nodes import Node, merge_adjacent_inline, validate_tree
from mdxbridge.constants import BLOCK_NODE_TYPES, BLOCK_SEPARATOR, NODE_PARAGRAPH, NODE_ROOT, NODE_TEXT
from mdxbridge.diagnostics import DiagnosticLog
from mdxbridge.exceptions import InvalidOptionsError, TransformerError
from mdxbridge.options import MarkdownRendererOptions
from mdxbridge.transformers.base import BlockTransformer, RenderContext
from mdxbridge.transformers.registry import TransformerSet, as_registry

logger = logging.getLogger(__name__)

_SOURCE = "serializer"

# Container types rendered by concatenating their children
_INTRINSIC_TYPES = frozenset({NODE_ROOT, NODE_PARAGRAPH, NODE_TEXT})


class MarkdownSerializer:
    """Render document trees to markdown text.

    Parameters
    ----------
    transformers : TransformerRegistry or iterable of Transformer, optional
        Transformer set to consult. Defaults to the built-in set.
    options : MarkdownRendererOptions, optional
        Rendering options
    strict : bool, default = False
        If True, an exception raised by a transformer propagates as
        :class:`TransformerError`. If False, it is logged, recorded as a
        diagnostic, and the next transformer or the fallback is used.

    Examples
    --------
        >>> from mdxbridge.ast import heading, paragraph, root
        >>> MarkdownSerializer().serialize(root(heading(1, "Title"), paragraph("Body")))
        '# Title\\n\\nBody'

    """

    def __init__(
        self,
        transformers: TransformerSet = None,
        options: MarkdownRendererOptions | None = None,
        strict: bool = False,
    ):
        """Initialize the serializer with a transformer set and options."""
        if options is not None and not isinstance(options, MarkdownRendererOptions):
            raise InvalidOptionsError("markdown serializer", MarkdownRendererOptions, type(options))
        self.registry = as_registry(transformers)
        self.options = options or MarkdownRendererOptions()
        self.strict = strict

    def serialize(self, document: Node, diagnostics: Optional[DiagnosticLog] = None) -> str:
        """Render a tree to markdown.

        Parameters
        ----------
        document : Node
            Root of the tree; the tree is only read, never mutated
        diagnostics : DiagnosticLog, optional
            Collector for recoverable problems

        Returns
        -------
        str
            Markdown body text

        Raises
        ------
        MalformedTreeError
            If the tree shares nodes or contains a cycle
        TransformerError
            If a transformer fails and ``strict`` is set

        """
        validate_tree(document)
        document = merge_adjacent_inline(document)
        if diagnostics is None:
            diagnostics = DiagnosticLog()
        context = RenderContext(options=self.options, diagnostics=diagnostics)

        if document.type != NODE_ROOT:
            return self._render_node(document, context).strip("\n")

        child_context = context.child(document)
        blocks = [self._render_node(child, child_context) for child in document.children]
        return BLOCK_SEPARATOR.join(block.strip("\n") for block in blocks if block.strip())

    def _is_block(self, node: Node) -> bool:
        if node.type in BLOCK_NODE_TYPES:
            return True
        return any(isinstance(t, BlockTransformer) for t in self.registry.transformers_for(node))

    def _render_children(self, node: Node, context: RenderContext) -> str:
        child_context = context.child(node)
        parts: list[str] = []
        after_block = False
        for child in node.children:
            rendered = self._render_node(child, child_context)
            if self._is_block(child):
                if parts:
                    parts.append("\n")
                after_block = True
            elif after_block:
                parts.append("\n")
                after_block = False
            parts.append(rendered)
        return "".join(parts)

    def _render_node(self, node: Node, context: RenderContext) -> str:
        child_text = self._render_children(node, context)

        for transformer in self.registry.transformers_for(node):
            try:
                rendered = transformer.render(node, child_text, context)
            except Exception as e:
                if self.strict:
                    raise TransformerError(transformer.name, "render", original_error=e) from e
                logger.warning(
                    "Transformer '%s' failed rendering '%s' node: %s", transformer.name, node.type, e, exc_info=True
                )
                context.diagnostics.add(
                    _SOURCE,
                    f"Transformer '{transformer.name}' failed; using fallback",
                    severity="error",
                    transformer=transformer.name,
                    node_type=node.type,
                )
                continue
            if rendered is not None:
                return rendered

        return self._render_fallback(node, child_text, context)

    def _render_fallback(self, node: Node, child_text: str, context: RenderContext) -> str:
        """Render a node no transformer handled as literal text."""
        if node.type == NODE_TEXT:
            return context.escape(node.text)
        if node.type == NODE_PARAGRAPH:
            return child_text.strip()
        if node.type in _INTRINSIC_TYPES:
            return child_text

        logger.debug("No transformer for node type '%s'; rendering as literal text", node.type)
        context.diagnostics.add(_SOURCE, f"No transformer for node type '{node.type}'", node_type=node.type)
        if child_text:
            return child_text
        literal = node.get("text")
        return context.escape(literal) if isinstance(literal, str) else ""


def serialize(
    document: Node,
    transformers: TransformerSet = None,
    options: MarkdownRendererOptions | None = None,
    diagnostics: Optional[DiagnosticLog] = None,
) -> str:
    """Render a tree to markdown with the given transformer set.

    Convenience wrapper around :class:`MarkdownSerializer`.
    """
    return MarkdownSerializer(transformers, options).serialize(document, diagnostics)


__all__ = ["MarkdownSerializer", "serialize"]
