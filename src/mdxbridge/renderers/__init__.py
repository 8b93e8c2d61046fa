#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdxbridge/renderers/__init__.py
"""Renderers converting document trees to markup text."""

from mdxbridge.renderers.markdown import MarkdownSerializer, serialize

__all__ = ["MarkdownSerializer", "serialize"]
