#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdxbridge/ast/__init__.py
"""Document tree module.

The conversion engine works on a generic typed tree: every node has a type
tag, an attribute mapping and ordered children. The module consists of:

- nodes: the :class:`Node` class, constructors and tree utilities
- serialization: conversion between trees and JSON-compatible editor state

Examples
--------
    >>> from mdxbridge.ast import heading, paragraph, root
    >>> doc = root(heading(1, "Title"), paragraph("Hello world"))
    >>> len(doc.children)
    2

"""

from __future__ import annotations

from mdxbridge.ast.nodes import (
    Node,
    code_block,
    element,
    emphasis,
    heading,
    image,
    inline_code,
    is_empty_document,
    iter_nodes,
    link,
    merge_adjacent_inline,
    list_item,
    list_node,
    nodes_equivalent,
    normalize,
    paragraph,
    plain_text,
    quote,
    root,
    strikethrough,
    strong,
    text,
    thematic_break,
    validate_tree,
)
from mdxbridge.ast.serialization import (
    ast_to_json,
    dict_to_node,
    json_to_ast,
    node_to_dict,
    node_to_editor_state,
)

__all__ = [
    "Node",
    "code_block",
    "element",
    "emphasis",
    "heading",
    "image",
    "inline_code",
    "is_empty_document",
    "iter_nodes",
    "link",
    "merge_adjacent_inline",
    "list_item",
    "list_node",
    "nodes_equivalent",
    "normalize",
    "paragraph",
    "plain_text",
    "quote",
    "root",
    "strikethrough",
    "strong",
    "text",
    "thematic_break",
    "validate_tree",
    "ast_to_json",
    "dict_to_node",
    "json_to_ast",
    "node_to_dict",
    "node_to_editor_state",
]
