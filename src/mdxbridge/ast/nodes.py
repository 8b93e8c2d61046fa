#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdxbridge/ast/nodes.py
"""Document tree nodes.

The rich-text document is a rooted tree of :class:`Node` objects. Every node
carries a type tag, a mapping of type-specific attributes, and an ordered list
of children. The set of type tags is open: hosts may introduce custom node
types, and the conversion engine degrades gracefully for any type no
transformer knows about.

Node Types
----------
Block-level nodes:
    - root, paragraph, heading, quote, code_block
    - list, list_item, thematic_break

Inline nodes:
    - text, emphasis, strong, strikethrough, code, link, image

Invariants
----------
The tree is a strict hierarchy: no node instance appears twice, so there are
no shared subtrees and no cycles. :func:`validate_tree` checks this.

"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any, Optional

from mdxbridge.constants import (
    INLINE_NODE_TYPES,
    NODE_CODE,
    NODE_CODE_BLOCK,
    NODE_EMPHASIS,
    NODE_HEADING,
    NODE_IMAGE,
    NODE_LINK,
    NODE_LIST,
    NODE_LIST_ITEM,
    NODE_PARAGRAPH,
    NODE_QUOTE,
    NODE_ROOT,
    NODE_STRIKETHROUGH,
    NODE_STRONG,
    NODE_TEXT,
    NODE_THEMATIC_BREAK,
    TEXT_ATTRIBUTE,
)
from mdxbridge.exceptions import MalformedTreeError


@dataclass
class Node:
    """A node in the document tree.

    Parameters
    ----------
    type : str
        Type tag (e.g. ``"heading"``)
    attributes : dict, default = empty dict
        Type-specific attributes (e.g. ``{"level": 1}``)
    children : list of Node, default = empty list
        Ordered child nodes; leaves have none

    Examples
    --------
        >>> heading = Node("heading", {"level": 1}, [Node("text", {"text": "Title"})])
        >>> heading.get("level")
        1

    """

    type: str
    attributes: dict[str, Any] = field(default_factory=dict)
    children: list[Node] = field(default_factory=list)

    @property
    def is_text(self) -> bool:
        """Whether this node is a text leaf."""
        return self.type == NODE_TEXT

    @property
    def is_inline(self) -> bool:
        """Whether this node's type is one of the built-in inline types."""
        return self.type in INLINE_NODE_TYPES

    @property
    def text(self) -> str:
        """Literal string of a text leaf, or ``""`` for other nodes."""
        value = self.attributes.get(TEXT_ATTRIBUTE)
        return value if isinstance(value, str) else ""

    def get(self, key: str, default: Any = None) -> Any:
        """Return an attribute value."""
        return self.attributes.get(key, default)

    def append(self, child: Node) -> Node:
        """Append a child and return it for chaining."""
        self.children.append(child)
        return child

    def depth_first(self) -> Iterator[Node]:
        """Traverse the subtree depth-first, yielding self then descendants."""
        yield self
        for child in self.children:
            yield from child.depth_first()


# ============================================================================
# Constructors
# ============================================================================


def text(value: str) -> Node:
    """Create a text leaf."""
    return Node(NODE_TEXT, {TEXT_ATTRIBUTE: value})


def element(node_type: str, children: Optional[Iterable[Node]] = None, **attributes: Any) -> Node:
    """Create an element node with optional children and attributes."""
    return Node(node_type, dict(attributes), list(children or []))


def _inline(children: Iterable[Node | str]) -> list[Node]:
    return [text(child) if isinstance(child, str) else child for child in children]


def root(*children: Node) -> Node:
    """Create a root node."""
    return Node(NODE_ROOT, {}, list(children))


def paragraph(*children: Node | str) -> Node:
    """Create a paragraph; plain strings become text leaves."""
    return Node(NODE_PARAGRAPH, {}, _inline(children))


def heading(level: int, *children: Node | str) -> Node:
    """Create a heading of the given level."""
    return Node(NODE_HEADING, {"level": level}, _inline(children))


def quote(*children: Node | str) -> Node:
    """Create a block quote with inline children."""
    return Node(NODE_QUOTE, {}, _inline(children))


def code_block(code: str, language: Optional[str] = None) -> Node:
    """Create a fenced code block."""
    attributes: dict[str, Any] = {}
    if language:
        attributes["language"] = language
    return Node(NODE_CODE_BLOCK, attributes, [text(code)] if code else [])


def list_node(list_type: str, *items: Node, start: Optional[int] = None) -> Node:
    """Create a list (``bullet``, ``number`` or ``check``)."""
    attributes: dict[str, Any] = {"list_type": list_type}
    if list_type == "number" and start is not None and start != 1:
        attributes["start"] = start
    return Node(NODE_LIST, attributes, list(items))


def list_item(*children: Node | str, checked: Optional[bool] = None) -> Node:
    """Create a list item; ``checked`` is used by check lists."""
    attributes: dict[str, Any] = {}
    if checked is not None:
        attributes["checked"] = checked
    return Node(NODE_LIST_ITEM, attributes, _inline(children))


def thematic_break() -> Node:
    """Create a thematic break (horizontal rule)."""
    return Node(NODE_THEMATIC_BREAK)


def emphasis(*children: Node | str) -> Node:
    """Create emphasized inline content."""
    return Node(NODE_EMPHASIS, {}, _inline(children))


def strong(*children: Node | str) -> Node:
    """Create strong inline content."""
    return Node(NODE_STRONG, {}, _inline(children))


def strikethrough(*children: Node | str) -> Node:
    """Create struck-through inline content."""
    return Node(NODE_STRIKETHROUGH, {}, _inline(children))


def inline_code(code: str) -> Node:
    """Create an inline code span."""
    return Node(NODE_CODE, {}, [text(code)] if code else [])


def link(url: str, *children: Node | str, title: Optional[str] = None) -> Node:
    """Create a hyperlink."""
    attributes: dict[str, Any] = {"url": url}
    if title:
        attributes["title"] = title
    return Node(NODE_LINK, attributes, _inline(children))


def image(url: str, alt: str = "", title: Optional[str] = None) -> Node:
    """Create an image leaf."""
    attributes: dict[str, Any] = {"url": url, "alt": alt}
    if title:
        attributes["title"] = title
    return Node(NODE_IMAGE, attributes)


# ============================================================================
# Tree utilities
# ============================================================================


def iter_nodes(node: Node) -> Iterator[Node]:
    """Traverse a tree depth-first."""
    return node.depth_first()


def plain_text(node: Node) -> str:
    """Concatenate the literal text of every text leaf in a subtree.

    Image alt text is included so that a subtree never loses its visible text.
    """
    if node.type == NODE_TEXT:
        return node.text
    if node.type == NODE_IMAGE:
        return str(node.attributes.get("alt") or "")
    return "".join(plain_text(child) for child in node.children)


def validate_tree(node: Node) -> None:
    """Check that a tree is a strict hierarchy.

    Parameters
    ----------
    node : Node
        Root of the tree to validate

    Raises
    ------
    MalformedTreeError
        If any node instance is reachable more than once (shared subtree or
        cycle), or a child is not a :class:`Node`

    """
    seen: set[int] = set()
    stack: list[tuple[Node, str]] = [(node, node.type)]
    while stack:
        current, path = stack.pop()
        if not isinstance(current, Node):
            raise MalformedTreeError(f"Expected Node at {path}, got {type(current).__name__}", path=path)
        if id(current) in seen:
            raise MalformedTreeError(f"Node reachable more than once at {path}", path=path)
        seen.add(id(current))
        for index, child in enumerate(current.children):
            stack.append((child, f"{path}.children[{index}]"))


def _is_blank_text(node: Node) -> bool:
    return node.type == NODE_TEXT and not node.text


def _merge_text(children: list[Node]) -> list[Node]:
    merged: list[Node] = []
    for child in children:
        if child.type == NODE_TEXT and merged and merged[-1].type == NODE_TEXT:
            merged[-1] = text(merged[-1].text + child.text)
        else:
            merged.append(child)
    return [child for child in merged if not _is_blank_text(child)]


def _strip_edges(children: list[Node]) -> list[Node]:
    if children and children[0].type == NODE_TEXT:
        children[0] = text(children[0].text.lstrip())
    if children and children[-1].type == NODE_TEXT:
        children[-1] = text(children[-1].text.rstrip())
    return [child for child in children if not _is_blank_text(child)]


# Blocks whose inline content is trimmed when comparing
_TRIMMED_BLOCKS = frozenset({NODE_PARAGRAPH, NODE_HEADING, NODE_QUOTE, NODE_LIST_ITEM})

# Delimited spans that markdown reads back as one span when two of them touch
_SPAN_TYPES = frozenset({NODE_STRONG, NODE_EMPHASIS, NODE_STRIKETHROUGH})
_JOINABLE_TYPES = _SPAN_TYPES | {NODE_TEXT, NODE_CODE}


def _is_empty_inline(node: Node) -> bool:
    if node.type == NODE_TEXT:
        return not node.text
    if node.type == NODE_CODE:
        return not plain_text(node)
    return node.type in _SPAN_TYPES and not node.children


def _join_pair(left: Node, right: Node) -> Node:
    if left.type == NODE_TEXT:
        return Node(NODE_TEXT, {**left.attributes, TEXT_ATTRIBUTE: left.text + right.text})
    if left.type == NODE_CODE:
        return Node(NODE_CODE, dict(left.attributes), [text(plain_text(left) + plain_text(right))])
    return Node(left.type, dict(left.attributes), _join_runs(left.children + right.children))


def _join_runs(children: list[Node]) -> list[Node]:
    joined: list[Node] = []
    for child in children:
        if _is_empty_inline(child):
            continue
        if joined and child.type == joined[-1].type and child.type in _JOINABLE_TYPES:
            joined[-1] = _join_pair(joined[-1], child)
        else:
            joined.append(child)
    return joined


def merge_adjacent_inline(node: Node) -> Node:
    """Return a copy of a tree with touching inline runs joined.

    Markdown cannot tell ``**a**`` followed by ``**b**`` from ``**ab**``, nor
    two touching code spans from one, so the serializer renders this copy:

    - adjacent text leaves are concatenated
    - touching inline code spans become one span
    - touching strong, emphasis or strikethrough siblings become one node
      holding both child lists
    - empty text leaves, empty code spans and childless spans are dropped

    Children of the root are blocks and are left as they are.

    Examples
    --------
        >>> merge_adjacent_inline(paragraph(inline_code("a"), inline_code("b"))) == paragraph(inline_code("ab"))
        True

    """
    children = [merge_adjacent_inline(child) for child in node.children]
    if node.type != NODE_ROOT:
        children = _join_runs(children)
    return Node(node.type, dict(node.attributes), children)


def _hoist_whitespace(children: list[Node]) -> list[Node]:
    """Move whitespace at the edges of delimited spans out beside them."""
    hoisted: list[Node] = []
    for child in children:
        if child.type not in _SPAN_TYPES:
            hoisted.append(child)
            continue
        inner = list(child.children)
        leading = trailing = ""
        if inner and inner[0].type == NODE_TEXT:
            content = inner[0].text.lstrip()
            leading = inner[0].text[: len(inner[0].text) - len(content)]
            inner[0] = text(content)
        if inner and inner[-1].type == NODE_TEXT:
            content = inner[-1].text.rstrip()
            trailing = inner[-1].text[len(content) :]
            inner[-1] = text(content)
        inner = [node for node in inner if not _is_blank_text(node)]
        if leading:
            hoisted.append(text(leading))
        if inner:
            hoisted.append(Node(child.type, child.attributes, inner))
        if trailing:
            hoisted.append(text(trailing))
    return hoisted


def _canonical_newlines(value: str) -> str:
    return value.replace("\r\n", "\n").replace("\r", "\n")


def normalize(node: Node) -> Node:
    """Return a copy of a tree in the canonical form used for comparison.

    The canonical form folds away differences markdown cannot express:

    - adjacent text leaves are merged and empty text leaves are dropped
    - touching spans of the same kind are joined, as in
      :func:`merge_adjacent_inline`
    - whitespace at the edges of strong, emphasis and strikethrough spans sits
      outside the span
    - whitespace at the edges of block content is trimmed
    - carriage returns (``\\r\\n`` or a bare ``\\r``) count as line feeds, in
      code too
    - ``None``-valued attributes are removed
    - empty paragraphs directly under the root vanish

    Code text is otherwise left untouched.
    """
    attributes = {key: value for key, value in node.attributes.items() if value is not None}
    if node.type == NODE_TEXT:
        attributes[TEXT_ATTRIBUTE] = _canonical_newlines(node.text)
        return Node(NODE_TEXT, attributes, [])
    if node.type in (NODE_CODE_BLOCK, NODE_CODE):
        code = _canonical_newlines(plain_text(node))
        return Node(node.type, attributes, [text(code)] if code else [])

    children = [normalize(child) for child in node.children]
    if node.type != NODE_ROOT:
        children = _hoist_whitespace(_join_runs(children))
    children = _merge_text(children)
    if node.type in _TRIMMED_BLOCKS:
        children = _strip_edges(children)
    if node.type == NODE_ROOT:
        children = [child for child in children if not (child.type == NODE_PARAGRAPH and not child.children)]
    return Node(node.type, attributes, children)


def nodes_equivalent(left: Node, right: Node) -> bool:
    """Compare two trees ignoring purely cosmetic differences.

    Examples
    --------
        >>> nodes_equivalent(paragraph("a", "b"), paragraph("ab "))
        True

    """
    return normalize(left) == normalize(right)


def is_empty_document(node: Node) -> bool:
    """Whether a tree carries no content at all."""
    return not normalize(node).children
