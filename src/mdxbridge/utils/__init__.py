#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdxbridge/utils/__init__.py
"""Utility modules for mdxbridge package.

This package contains helpers shared by the serializer and the parser.
"""

from mdxbridge.utils.escape import (
    escape_inline_code,
    escape_link_destination,
    escape_link_title,
    escape_markdown,
    longest_run,
    unescape_link_destination,
    unescape_markdown,
)

__all__ = [
    "escape_inline_code",
    "escape_link_destination",
    "escape_link_title",
    "escape_markdown",
    "longest_run",
    "unescape_link_destination",
    "unescape_markdown",
]
