#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdxbridge/ast/serialization.py
"""JSON serialization and deserialization for document trees.

The host editor stores its tree as plain JSON-compatible data (the "editor
state"). This module converts between that representation and :class:`Node`
trees. The deserializing side is the only place in the engine where a tree can
be unusable; it reports that with :class:`MalformedTreeError` so callers such
as the persistence hooks can log the problem and continue with an empty tree.

Format
------
Each node is a mapping::

    {"type": "heading", "attributes": {"level": 1}, "children": [...]}

``attributes`` and ``children`` are omitted when empty. Editor state wraps the
root node as ``{"root": {...}}``. Text leaves written by other tools as
``{"type": "text", "text": "..."}`` are accepted.

Examples
--------
    >>> from mdxbridge.ast import heading, root
    >>> data = node_to_dict(root(heading(1, "Title")))
    >>> dict_to_node(data).children[0].get("level")
    1

"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from mdxbridge.ast.nodes import Node
from mdxbridge.constants import NODE_ROOT, NODE_TEXT, TEXT_ATTRIBUTE
from mdxbridge.exceptions import MalformedTreeError

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


def node_to_dict(node: Node) -> dict[str, Any]:
    """Convert a node and its subtree to a JSON-compatible dictionary.

    Parameters
    ----------
    node : Node
        Node to serialize

    Returns
    -------
    dict
        Serialized node

    """
    result: dict[str, Any] = {"type": node.type}
    if node.attributes:
        result["attributes"] = dict(node.attributes)
    if node.children:
        result["children"] = [node_to_dict(child) for child in node.children]
    return result


def _deserialize(data: Any, path: str) -> Node:
    if not isinstance(data, Mapping):
        raise MalformedTreeError(f"Expected a mapping at {path}, got {type(data).__name__}", path=path)

    node_type = data.get("type")
    if not isinstance(node_type, str) or not node_type:
        raise MalformedTreeError(f"Node at {path} has no 'type' field", path=path)

    attributes = data.get("attributes") or {}
    if not isinstance(attributes, Mapping):
        raise MalformedTreeError(f"'attributes' at {path} must be a mapping", path=path)
    attributes = dict(attributes)
    if node_type == NODE_TEXT and TEXT_ATTRIBUTE not in attributes and isinstance(data.get("text"), str):
        attributes[TEXT_ATTRIBUTE] = data["text"]

    children_data = data.get("children") or []
    if not isinstance(children_data, list):
        raise MalformedTreeError(f"'children' at {path} must be a list", path=path)

    children = [_deserialize(child, f"{path}.children[{index}]") for index, child in enumerate(children_data)]
    return Node(node_type, attributes, children)


def dict_to_node(data: Mapping[str, Any]) -> Node:
    """Convert a dictionary representation back to a node.

    Parameters
    ----------
    data : Mapping
        Serialized node, or editor state of the form ``{"root": {...}}``

    Returns
    -------
    Node
        Reconstructed node

    Raises
    ------
    MalformedTreeError
        If the data does not describe a tree

    """
    if isinstance(data, Mapping) and "type" not in data and "root" in data:
        return _deserialize(data["root"], NODE_ROOT)
    return _deserialize(data, "node")


def node_to_editor_state(node: Node) -> dict[str, Any]:
    """Wrap a serialized root node in the editor state envelope."""
    return {"root": node_to_dict(node)}


def ast_to_json(node: Node, indent: int | None = None) -> str:
    """Serialize a node to a JSON string with a schema version.

    Parameters
    ----------
    node : Node
        The node to serialize
    indent : int or None, default = None
        Number of spaces for indentation (None for compact format)

    Returns
    -------
    str
        JSON string of the form ``{"schema_version": 1, "type": ...}``

    """
    versioned = {"schema_version": SCHEMA_VERSION, **node_to_dict(node)}
    return json.dumps(versioned, indent=indent, ensure_ascii=False)


def json_to_ast(json_str: str, validate_schema: bool = True) -> Node:
    """Deserialize a JSON string produced by :func:`ast_to_json`.

    Parameters
    ----------
    json_str : str
        JSON text
    validate_schema : bool, default True
        If True, an unsupported ``schema_version`` raises. If False, a
        mismatch is only logged.

    Returns
    -------
    Node
        Reconstructed node

    Raises
    ------
    MalformedTreeError
        If the JSON is invalid, the schema version is unsupported, or the
        data does not describe a tree

    """
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise MalformedTreeError(f"Invalid JSON tree state: {e}", original_error=e) from e

    if not isinstance(data, dict):
        raise MalformedTreeError(f"Expected a JSON object, got {type(data).__name__}")

    schema_version = data.pop("schema_version", SCHEMA_VERSION)
    if schema_version != SCHEMA_VERSION:
        if validate_schema:
            raise MalformedTreeError(
                f"Unsupported schema version: {schema_version}. Only version {SCHEMA_VERSION} is supported."
            )
        logger.warning("Schema version %s differs from supported version %s", schema_version, SCHEMA_VERSION)

    return dict_to_node(data)


__all__ = [
    "SCHEMA_VERSION",
    "node_to_dict",
    "dict_to_node",
    "node_to_editor_state",
    "ast_to_json",
    "json_to_ast",
]
