#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdxbridge/transformers/__init__.py
"""Transformer system for bidirectional tree/markdown conversion.

This module provides the rules both conversion directions consult:

- Base classes for block and inline transformers
- The built-in transformer set
- An ordered registry with plugin discovery

Examples
--------
    >>> from mdxbridge.transformers import default_transformers
    >>> registry = default_transformers()
    >>> "heading" in registry
    True

"""

from mdxbridge.transformers.base import (
    BlockTransformer,
    InlineTransformer,
    ParseContext,
    RenderContext,
    Transformer,
)
from mdxbridge.transformers.builtin import (
    CodeBlockTransformer,
    EmphasisTransformer,
    HeadingTransformer,
    ImageTransformer,
    InlineCodeTransformer,
    LinkTransformer,
    ListTransformer,
    QuoteTransformer,
    StrikethroughTransformer,
    StrongTransformer,
    ThematicBreakTransformer,
    builtin_transformers,
)
from mdxbridge.transformers.registry import (
    TransformerRegistry,
    TransformerSet,
    as_registry,
    default_transformers,
)

__all__ = [
    "Transformer",
    "BlockTransformer",
    "InlineTransformer",
    "RenderContext",
    "ParseContext",
    "CodeBlockTransformer",
    "EmphasisTransformer",
    "HeadingTransformer",
    "ImageTransformer",
    "InlineCodeTransformer",
    "LinkTransformer",
    "ListTransformer",
    "QuoteTransformer",
    "StrikethroughTransformer",
    "StrongTransformer",
    "ThematicBreakTransformer",
    "builtin_transformers",
    "TransformerRegistry",
    "TransformerSet",
    "as_registry",
    "default_transformers",
]
