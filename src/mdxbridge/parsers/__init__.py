#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdxbridge/parsers/__init__.py
"""Parsers converting markup text to document trees."""

from mdxbridge.parsers.markdown import MarkdownParser, parse

__all__ = ["MarkdownParser", "parse"]
