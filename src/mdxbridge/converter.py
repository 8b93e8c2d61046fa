#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdxbridge/converter.py
"""Conversion facade between markup files and document trees.

This module ties the front matter codec, the serializer and the parser
together into the two operations hosts call:

- :func:`file_to_document` splits a markup file into its header block and
  body, decodes the header into entries and parses the body into a tree
- :func:`document_to_file` serializes a tree, encodes the entries as a header
  block and joins the two

Both are pure: no I/O, no shared mutable state. Recoverable problems are
collected in a :class:`DiagnosticLog` returned alongside the result by the
:class:`MarkdownConverter` methods.

File layout
-----------
A file with front matter is ``header + "\\n" + body``, where the header ends
with its closing delimiter line. Reading removes exactly that one separator
newline, so a file written by this module reads back to the same tree.

Examples
--------
    >>> from mdxbridge.ast import paragraph, root
    >>> document_to_file(root(paragraph()), [{"key": "title", "value": "Intro"}])
    '---\\ntitle: Intro\\n---\\n\\n'
    >>> doc, entries = file_to_document("---\\ntitle: Intro\\n---\\n\\n")
    >>> entries[0].value
    'Intro'

"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, NamedTuple, Optional, Union

from mdxbridge.ast.nodes import Node
from mdxbridge.diagnostics import DiagnosticLog
from mdxbridge.exceptions import InvalidOptionsError
from mdxbridge.frontmatter import (
    EntryLike,
    FrontmatterEntry,
    extract_frontmatter,
    frontmatter_to_object,
    normalize_entries,
    object_to_frontmatter,
)
from mdxbridge.options import ConversionOptions
from mdxbridge.parsers.markdown import MarkdownParser
from mdxbridge.renderers.markdown import MarkdownSerializer
from mdxbridge.transformers.registry import TransformerSet, as_registry

logger = logging.getLogger(__name__)

EntriesLike = Union[Iterable[EntryLike], Mapping[str, Any], None]


class ReadResult(NamedTuple):
    """Outcome of reading a markup file.

    Attributes
    ----------
    document : Node
        Best-effort root node
    frontmatter : list of FrontmatterEntry
        Header entries in source order
    diagnostics : DiagnosticLog
        Recoverable problems found while reading

    """

    document: Node
    frontmatter: list[FrontmatterEntry]
    diagnostics: DiagnosticLog


class WriteResult(NamedTuple):
    """Outcome of writing a markup file: the text and any diagnostics."""

    text: str
    diagnostics: DiagnosticLog


def _strip_separator(content: str) -> str:
    if content.startswith("\r\n"):
        return content[2:]
    if content.startswith("\n"):
        return content[1:]
    return content


class MarkdownConverter:
    """Convert between markup files and document trees.

    One converter holds one transformer set and one set of options; both are
    read-only, so a converter may be shared across threads.

    Parameters
    ----------
    transformers : TransformerRegistry or iterable of Transformer, optional
        Transformer set used by both directions. Defaults to the built-in set.
    options : ConversionOptions, optional
        Front matter, renderer and parser options

    """

    def __init__(self, transformers: TransformerSet = None, options: Optional[ConversionOptions] = None) -> None:
        """Initialize the converter with a shared transformer set."""
        if options is not None and not isinstance(options, ConversionOptions):
            raise InvalidOptionsError("markdown converter", ConversionOptions, type(options))
        self.options = options or ConversionOptions()
        self.registry = as_registry(transformers)
        self.serializer = MarkdownSerializer(self.registry, self.options.renderer, strict=self.options.strict)
        self.parser = MarkdownParser(self.registry, self.options.parser, strict=self.options.strict)

    def read(self, markup: str) -> ReadResult:
        """Parse a markup file into a tree and front matter entries.

        Parameters
        ----------
        markup : str
            Whole file content

        Returns
        -------
        ReadResult
            Tree, entries and diagnostics. Never raises on malformed input
            unless ``strict`` is set and a transformer fails.

        """
        diagnostics = DiagnosticLog()
        extracted = extract_frontmatter(markup)

        if extracted.frontmatter is None:
            entries: list[FrontmatterEntry] = []
            content = extracted.content
        else:
            entries = frontmatter_to_object(
                extracted.frontmatter, extracted.format or self.options.frontmatter.format, diagnostics
            )
            content = _strip_separator(extracted.content)

        document = self.parser.parse(content, diagnostics)
        logger.debug(
            "Read document with %d block(s) and %d front matter entr(ies)", len(document.children), len(entries)
        )
        return ReadResult(document, entries, diagnostics)

    def write(self, document: Node, frontmatter: EntriesLike = None) -> WriteResult:
        """Serialize a tree and front matter entries into a markup file.

        Parameters
        ----------
        document : Node
            Root of the tree
        frontmatter : iterable or mapping, optional
            Header entries; when empty no header block is written

        Returns
        -------
        WriteResult
            File text and diagnostics

        Raises
        ------
        MalformedTreeError
            If the tree shares nodes or contains a cycle

        """
        diagnostics = DiagnosticLog()
        body = self.serializer.serialize(document, diagnostics)
        header = object_to_frontmatter(normalize_entries(frontmatter), self.options.frontmatter.format)
        text = f"{header}\n{body}" if header else body
        return WriteResult(text, diagnostics)


def file_to_document(
    markup: Any,
    transformers: TransformerSet = None,
    *,
    options: Optional[ConversionOptions] = None,
    skip_conversion: bool = False,
) -> Any:
    """Convert markup text into ``(tree, entries)``.

    Parameters
    ----------
    markup : str
        Whole file content
    transformers : TransformerRegistry or iterable of Transformer, optional
        Transformer set to parse with
    options : ConversionOptions, optional
        Conversion options
    skip_conversion : bool, default = False
        Bulk-load bypass. When set, ``markup`` is returned unchanged.

    Returns
    -------
    tuple of (Node, list of FrontmatterEntry)
        Parsed tree and header entries, or ``markup`` itself when
        ``skip_conversion`` is set

    """
    if skip_conversion:
        logger.debug("Skipping markup to document conversion")
        return markup
    result = MarkdownConverter(transformers, options).read(markup)
    return result.document, result.frontmatter


def document_to_file(
    document: Any,
    entries: EntriesLike = None,
    transformers: TransformerSet = None,
    *,
    options: Optional[ConversionOptions] = None,
    skip_conversion: bool = False,
) -> Any:
    """Convert a tree and front matter entries into markup text.

    Parameters
    ----------
    document : Node
        Root of the tree
    entries : iterable or mapping, optional
        Header entries
    transformers : TransformerRegistry or iterable of Transformer, optional
        Transformer set to serialize with
    options : ConversionOptions, optional
        Conversion options
    skip_conversion : bool, default = False
        Bulk-load bypass. When set, ``document`` is returned unchanged.

    Returns
    -------
    str
        Markup text, or ``document`` itself when ``skip_conversion`` is set

    """
    if skip_conversion:
        logger.debug("Skipping document to markup conversion")
        return document
    return MarkdownConverter(transformers, options).write(document, entries).text


__all__ = [
    "ReadResult",
    "WriteResult",
    "MarkdownConverter",
    "file_to_document",
    "document_to_file",
]
