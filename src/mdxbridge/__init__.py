"""mdxbridge - bidirectional conversion between rich-text trees and markdown files.

mdxbridge keeps the rich-text content of a document in a markup file on disk:
an optional front matter header block followed by a markdown body. It
converts in both directions:

- A document tree plus an ordered list of front matter entries becomes a
  markup file (:func:`document_to_file`)
- A markup file becomes a document tree plus front matter entries
  (:func:`file_to_document`)

Both directions consult the same ordered set of transformers, one per node
type, so that repeated round-trips stabilise. Conversion is best-effort:
malformed markdown or front matter never raises; problems are collected as
diagnostics.

Examples
--------
Write and read a markup file:

    >>> from mdxbridge import document_to_file, file_to_document
    >>> from mdxbridge.ast import heading, paragraph, root
    >>> text = document_to_file(root(heading(1, "Intro"), paragraph("Hello")), {"title": "Intro"})
    >>> print(text)
    ---
    title: Intro
    ---
    <BLANKLINE>
    # Intro
    <BLANKLINE>
    Hello
    >>> doc, entries = file_to_document(text)

Keep documents in files from a content pipeline:

    >>> from mdxbridge import LocalFileStorage, MarkdownFileHooks, RichTextField
    >>> hooks = MarkdownFileHooks(LocalFileStorage("docs"), [RichTextField("rich_text")])

See Also
--------
mdxbridge.transformers : Transformer rules and registry
mdxbridge.ast : Document tree nodes and editor state serialization

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

# Check Python version before any imports
import sys

if sys.version_info < (3, 10):
    raise ImportError(
        "mdxbridge requires Python 3.10 or later. "
        f"You are using Python {sys.version_info.major}.{sys.version_info.minor}."
    )

__version__ = "1.0.0"

from mdxbridge.ast import Node
from mdxbridge.converter import MarkdownConverter, ReadResult, WriteResult, document_to_file, file_to_document
from mdxbridge.diagnostics import Diagnostic, DiagnosticLog
from mdxbridge.exceptions import (
    ConfigurationError,
    InvalidOptionsError,
    MalformedTreeError,
    MdxBridgeError,
    StorageError,
    TransformerError,
    ValidationError,
)
from mdxbridge.frontmatter import (
    FrontmatterEntry,
    extract_frontmatter,
    frontmatter_to_object,
    object_to_frontmatter,
)
from mdxbridge.hooks import MarkdownFileHooks, markdown_to_editor_state
from mdxbridge.options import ConversionOptions, FrontmatterOptions, MarkdownParserOptions, MarkdownRendererOptions
from mdxbridge.parsers import MarkdownParser, parse
from mdxbridge.renderers import MarkdownSerializer, serialize
from mdxbridge.schema import RichTextField, find_rich_text_field
from mdxbridge.storage import FileStorage, LocalFileStorage
from mdxbridge.transformers import (
    BlockTransformer,
    InlineTransformer,
    Transformer,
    TransformerRegistry,
    default_transformers,
)

__all__ = [
    "__version__",
    # Facade
    "file_to_document",
    "document_to_file",
    "MarkdownConverter",
    "ReadResult",
    "WriteResult",
    # Engine
    "Node",
    "parse",
    "serialize",
    "MarkdownParser",
    "MarkdownSerializer",
    "Transformer",
    "BlockTransformer",
    "InlineTransformer",
    "TransformerRegistry",
    "default_transformers",
    # Front matter
    "FrontmatterEntry",
    "extract_frontmatter",
    "frontmatter_to_object",
    "object_to_frontmatter",
    # Hooks
    "MarkdownFileHooks",
    "markdown_to_editor_state",
    "RichTextField",
    "find_rich_text_field",
    "FileStorage",
    "LocalFileStorage",
    # Options
    "ConversionOptions",
    "FrontmatterOptions",
    "MarkdownParserOptions",
    "MarkdownRendererOptions",
    # Diagnostics and errors
    "Diagnostic",
    "DiagnosticLog",
    "MdxBridgeError",
    "ValidationError",
    "InvalidOptionsError",
    "ConfigurationError",
    "MalformedTreeError",
    "TransformerError",
    "StorageError",
]
