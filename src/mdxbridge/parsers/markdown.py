#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdxbridge/parsers/markdown.py
"""Markdown to document tree parser.

This module provides the MarkdownParser class which converts markdown text
into a document tree by consulting the same ordered transformer set the
serializer uses.

Line endings are canonicalised first: ``\\r\\n`` and a bare ``\\r`` both become
``\\n``, in code blocks too. A text leaf holding a carriage return therefore
reads back with a line feed in its place; :func:`mdxbridge.ast.normalize`
treats the two as equal.

Parsing runs in two stages:

1. Blocks. Lines are scanned top to bottom. At each non-blank line the block
   transformers are tried in priority order; the first one whose ``scan``
   claims lines and whose ``parse`` returns a node wins. Lines nobody claims
   form a paragraph that runs until a blank line or a line that a
   paragraph-interrupting transformer recognises.
2. Inlines. Paragraph text (and text captured by block transformers) is
   searched by every inline transformer. The earliest match wins; equal
   starts go to the higher-priority transformer. Text between matches becomes
   text leaves with backslash escapes removed.

Parsing is total: no input makes it raise. Unmatched text always ends up in
a fallback paragraph or text leaf.

"""

from __future__ import annotations

import logging
import re
from typing import Optional

from mdxbridge.ast.nodes import Node, paragraph, root, text
from mdxbridge.diagnostics import DiagnosticLog
from mdxbridge.exceptions import InvalidOptionsError, TransformerError
from mdxbridge.options import MarkdownParserOptions
from mdxbridge.transformers.base import BlockTransformer, InlineTransformer, ParseContext, Transformer
from mdxbridge.transformers.registry import TransformerSet, as_registry
from mdxbridge.utils.escape import unescape_markdown

logger = logging.getLogger(__name__)

_SOURCE = "parser"


def _is_escaped(source: str, index: int) -> bool:
    """Whether the character at ``index`` is preceded by an odd number of backslashes."""
    backslashes = 0
    index -= 1
    while index >= 0 and source[index] == "\\":
        backslashes += 1
        index -= 1
    return backslashes % 2 == 1


class MarkdownParser:
    """Parse markdown text into a document tree.

    Parameters
    ----------
    transformers : TransformerRegistry or iterable of Transformer, optional
        Transformer set to consult. Defaults to the built-in set.
    options : MarkdownParserOptions, optional
        Parsing options
    strict : bool, default = False
        If True, an exception raised by a transformer propagates as
        :class:`TransformerError`. If False, it is logged, recorded as a
        diagnostic, and treated as "no match".

    Examples
    --------
        >>> doc = MarkdownParser().parse("# Heading\\n\\nSome *text*.")
        >>> [child.type for child in doc.children]
        ['heading', 'paragraph']

    """

    def __init__(
        self,
        transformers: TransformerSet = None,
        options: MarkdownParserOptions | None = None,
        strict: bool = False,
    ):
        """Initialize the parser with a transformer set and options."""
        if options is not None and not isinstance(options, MarkdownParserOptions):
            raise InvalidOptionsError("markdown parser", MarkdownParserOptions, type(options))
        self.registry = as_registry(transformers)
        self.options = options or MarkdownParserOptions()
        self.strict = strict

    def parse(self, markdown: str, diagnostics: Optional[DiagnosticLog] = None) -> Node:
        """Parse markdown text into a root node.

        Parameters
        ----------
        markdown : str
            Markdown body text (without front matter)
        diagnostics : DiagnosticLog, optional
            Collector for recoverable problems

        Returns
        -------
        Node
            Root node. Blank input yields a root with one empty paragraph
            (or no children when ``empty_paragraph_for_blank`` is off).

        """
        if diagnostics is None:
            diagnostics = DiagnosticLog()
        context = ParseContext(parser=self, options=self.options, diagnostics=diagnostics)

        normalized = markdown.replace("\r\n", "\n").replace("\r", "\n")
        blocks = self.parse_blocks(normalized, context)
        if not blocks and self.options.empty_paragraph_for_blank:
            blocks = [paragraph()]
        return root(*blocks)

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def parse_blocks(self, markdown: str, context: ParseContext) -> list[Node]:
        """Split text into blocks and parse each one."""
        lines = markdown.split("\n")
        block_transformers = self.registry.block_transformers()
        blocks: list[Node] = []

        index = 0
        while index < len(lines):
            if not lines[index].strip():
                index += 1
                continue

            consumed, node = self._parse_block(block_transformers, lines, index, context)
            if node is not None:
                blocks.append(node)
                index += consumed
                continue

            end = index + 1
            while end < len(lines) and lines[end].strip() and not self._interrupts(block_transformers, lines[end]):
                end += 1
            content = "\n".join(lines[index:end]).strip()
            blocks.append(paragraph(*self.parse_inline(content, context)))
            index = end

        return blocks

    def _parse_block(
        self,
        block_transformers: list[BlockTransformer],
        lines: list[str],
        index: int,
        context: ParseContext,
    ) -> tuple[int, Optional[Node]]:
        for transformer in block_transformers:
            try:
                consumed = transformer.scan(lines, index)
                if not consumed or consumed < 0:
                    continue
                consumed = min(consumed, len(lines) - index)
                node = transformer.parse("\n".join(lines[index : index + consumed]), context)
            except Exception as e:
                self._handle_failure(transformer, "parse", e, context, line=index + 1)
                continue
            if node is not None:
                return consumed, node
        return 0, None

    def _interrupts(self, block_transformers: list[BlockTransformer], line: str) -> bool:
        for transformer in block_transformers:
            if not transformer.interrupts_paragraph:
                continue
            try:
                if transformer.matches(line):
                    return True
            except Exception as e:
                logger.debug("Transformer '%s' failed matching line: %s", transformer.name, e)
        return False

    # ------------------------------------------------------------------
    # Inlines
    # ------------------------------------------------------------------

    def parse_inline(self, source: str, context: ParseContext) -> list[Node]:
        """Parse a span of text into inline nodes.

        Parameters
        ----------
        source : str
            Inline markdown
        context : ParseContext
            Parsing context; ``depth`` limits recursion

        Returns
        -------
        list of Node
            Inline nodes in order

        """
        if not source:
            return []
        if context.depth > self.options.max_inline_depth:
            logger.debug("Inline nesting deeper than %d kept as literal text", self.options.max_inline_depth)
            return [text(unescape_markdown(source))]

        inline_transformers = self.registry.inline_transformers()
        candidates: dict[int, Optional[re.Match[str]]] = {
            position: self._search(transformer, source, 0, context)
            for position, transformer in enumerate(inline_transformers)
        }

        nodes: list[Node] = []
        literal_start = 0
        pos = 0
        while pos < len(source):
            best: Optional[tuple[int, int, re.Match[str]]] = None
            for position, transformer in enumerate(inline_transformers):
                match = candidates[position]
                if match is not None and match.start() < pos:
                    match = candidates[position] = self._search(transformer, source, pos, context)
                if match is not None and (best is None or match.start() < best[0]):
                    best = (match.start(), position, match)

            if best is None:
                break

            start, position, match = best
            node = self._apply_inline(inline_transformers[position], match, context)
            if node is None:
                candidates[position] = self._search(inline_transformers[position], source, start + 1, context)
                continue

            if start > literal_start:
                nodes.append(text(unescape_markdown(source[literal_start:start])))
            nodes.append(node)
            pos = literal_start = match.end()

        if literal_start < len(source):
            nodes.append(text(unescape_markdown(source[literal_start:])))
        return nodes

    def _search(
        self,
        transformer: InlineTransformer,
        source: str,
        pos: int,
        context: ParseContext,
    ) -> Optional[re.Match[str]]:
        """Find the next unescaped, non-empty candidate of a transformer."""
        while pos <= len(source):
            try:
                match = transformer.search(source, pos)
            except Exception as e:
                self._handle_failure(transformer, "search", e, context)
                return None
            if match is None:
                return None
            if match.end() > match.start() and not _is_escaped(source, match.start()):
                return match
            pos = match.start() + 1
        return None

    def _apply_inline(
        self, transformer: InlineTransformer, match: re.Match[str], context: ParseContext
    ) -> Optional[Node]:
        try:
            return transformer.parse(match, context)
        except Exception as e:
            self._handle_failure(transformer, "parse", e, context)
            return None

    def _handle_failure(
        self,
        transformer: Transformer,
        operation: str,
        error: Exception,
        context: ParseContext,
        **details: object,
    ) -> None:
        if self.strict:
            raise TransformerError(transformer.name, operation, original_error=error) from error
        logger.warning("Transformer '%s' failed during %s: %s", transformer.name, operation, error, exc_info=True)
        context.diagnostics.add(
            _SOURCE,
            f"Transformer '{transformer.name}' failed during {operation}; using fallback",
            severity="error",
            transformer=transformer.name,
            **details,
        )


def parse(
    markdown: str,
    transformers: TransformerSet = None,
    options: MarkdownParserOptions | None = None,
    diagnostics: Optional[DiagnosticLog] = None,
) -> Node:
    """Parse markdown into a tree with the given transformer set.

    Convenience wrapper around :class:`MarkdownParser`.
    """
    return MarkdownParser(transformers, options).parse(markdown, diagnostics)


__all__ = ["MarkdownParser", "parse"]
