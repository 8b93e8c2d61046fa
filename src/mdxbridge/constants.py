#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Constants and default values for the mdxbridge library.

Constants are organized by category:
1. Type Definitions - Literal types and type aliases
2. Node Types - Type tags of the built-in document tree nodes
3. Front Matter - Delimiters and formats of the header block
4. Markdown Formatting - Defaults for the serializer
5. Discovery - Plugin entry points and configuration file names
"""

from __future__ import annotations

from typing import Literal

# =============================================================================
# Type Definitions
# =============================================================================

FrontmatterFormat = Literal["yaml", "toml"]
EmphasisSymbol = Literal["*", "_"]
StrongSymbol = Literal["**", "__"]
BulletSymbol = Literal["-", "*", "+"]
CodeFenceChar = Literal["`", "~"]
ListType = Literal["bullet", "number", "check"]
TransformerLevel = Literal["block", "inline"]

# =============================================================================
# Node Types
# =============================================================================

NODE_ROOT = "root"
NODE_PARAGRAPH = "paragraph"
NODE_HEADING = "heading"
NODE_QUOTE = "quote"
NODE_CODE_BLOCK = "code_block"
NODE_LIST = "list"
NODE_LIST_ITEM = "list_item"
NODE_THEMATIC_BREAK = "thematic_break"
NODE_TEXT = "text"
NODE_EMPHASIS = "emphasis"
NODE_STRONG = "strong"
NODE_STRIKETHROUGH = "strikethrough"
NODE_CODE = "code"
NODE_LINK = "link"
NODE_IMAGE = "image"

# Attribute holding the literal string of a text leaf
TEXT_ATTRIBUTE = "text"

# Block node types nested inside other blocks start on their own line
BLOCK_NODE_TYPES: frozenset[str] = frozenset(
    {
        NODE_PARAGRAPH,
        NODE_HEADING,
        NODE_QUOTE,
        NODE_CODE_BLOCK,
        NODE_LIST,
        NODE_LIST_ITEM,
        NODE_THEMATIC_BREAK,
    }
)

# Inline node types, used to place unknown nodes and join children
INLINE_NODE_TYPES: frozenset[str] = frozenset(
    {
        NODE_TEXT,
        NODE_EMPHASIS,
        NODE_STRONG,
        NODE_STRIKETHROUGH,
        NODE_CODE,
        NODE_LINK,
        NODE_IMAGE,
    }
)

# =============================================================================
# Front Matter
# =============================================================================

FRONTMATTER_DELIMITERS: dict[str, str] = {
    "yaml": "---",
    "toml": "+++",
}
DEFAULT_FRONTMATTER_FORMAT: FrontmatterFormat = "yaml"

# =============================================================================
# Markdown Formatting
# =============================================================================

BLOCK_SEPARATOR = "\n\n"
DEFAULT_BULLET: BulletSymbol = "-"
DEFAULT_EMPHASIS_SYMBOL: EmphasisSymbol = "*"
DEFAULT_STRONG_SYMBOL: StrongSymbol = "**"
DEFAULT_THEMATIC_BREAK = "***"
DEFAULT_CODE_FENCE_CHAR: CodeFenceChar = "`"
MIN_CODE_FENCE_LENGTH = 3
MAX_HEADING_LEVEL = 6

# Default transformer priorities, lower runs first
PRIORITY_CODE_BLOCK = 10
PRIORITY_HEADING = 20
PRIORITY_THEMATIC_BREAK = 30
PRIORITY_QUOTE = 40
PRIORITY_LIST = 50
PRIORITY_INLINE_CODE = 100
PRIORITY_IMAGE = 110
PRIORITY_LINK = 120
PRIORITY_STRONG = 130
PRIORITY_EMPHASIS = 140
PRIORITY_STRIKETHROUGH = 150
DEFAULT_PRIORITY = 500

# =============================================================================
# Discovery
# =============================================================================

TRANSFORMER_ENTRY_POINT_GROUP = "mdxbridge.transformers"
CONFIG_FILENAMES = [".mdxbridge.toml", ".mdxbridge.yaml", ".mdxbridge.yml", ".mdxbridge.json"]
PYPROJECT_SECTION = "mdxbridge"
