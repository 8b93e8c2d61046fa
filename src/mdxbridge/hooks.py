#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdxbridge/hooks.py
"""Persistence hooks that keep rich-text documents in markup files.

A content pipeline calls two hooks around its own storage:

- ``before_change`` runs before a document is persisted. It serializes the
  editor state held in the rich-text field, together with the document's
  front matter list, into a markup file and returns ``None`` so nothing is
  stored redundantly. The file is the single source of truth.
- ``after_read`` runs after a document is loaded. It reads the markup file
  back and fills in the rich-text field and the front matter list.

Both hooks return their input untouched when the call context carries a
truthy ``seed`` flag (bulk data import, where files are already correct).

Examples
--------
    >>> hooks = MarkdownFileHooks(LocalFileStorage("docs"), [RichTextField("rich_text")])
    >>> hooks.before_change({"doc_path": "intro.md", "rich_text": state, "front_matter": []})
    >>> doc = hooks.after_read({"doc_path": "intro.md"})

"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from mdxbridge.ast.nodes import Node, root, validate_tree
from mdxbridge.ast.serialization import dict_to_node, node_to_editor_state
from mdxbridge.converter import MarkdownConverter
from mdxbridge.exceptions import MalformedTreeError, ValidationError
from mdxbridge.options import ConversionOptions
from mdxbridge.schema import FieldLike, find_rich_text_field
from mdxbridge.storage import FileStorage
from mdxbridge.transformers.registry import TransformerSet

logger = logging.getLogger(__name__)

SEED_CONTEXT_KEY = "seed"


def _is_seeding(context: Optional[Mapping[str, Any]]) -> bool:
    return bool(context and context.get(SEED_CONTEXT_KEY))


def load_editor_state(value: Any) -> Node:
    """Turn a stored editor state into a tree.

    Accepts a :class:`Node`, editor state as a dict (``{"root": {...}}`` or a
    bare node mapping), or the same as a JSON string. ``None`` yields an empty
    root.

    Raises
    ------
    MalformedTreeError
        If the value does not describe a usable tree

    """
    if value is None:
        return root()
    if isinstance(value, Node):
        validate_tree(value)
        return value
    if isinstance(value, (str, bytes)):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise MalformedTreeError(f"Invalid JSON editor state: {e}", original_error=e) from e
    return dict_to_node(value)


def markdown_to_editor_state(
    markup: str,
    transformers: TransformerSet = None,
    options: Optional[ConversionOptions] = None,
) -> tuple[dict[str, Any], list[dict[str, str]]]:
    """Convert a markup file into editor state and a front matter list.

    Parameters
    ----------
    markup : str
        Whole file content, front matter included
    transformers : TransformerRegistry or iterable of Transformer, optional
        Transformer set of the rich-text field
    options : ConversionOptions, optional
        Conversion options

    Returns
    -------
    tuple of (dict, list of dict)
        ``{"root": {...}}`` editor state and ``[{"key": ..., "value": ...}]``

    """
    result = MarkdownConverter(transformers, options).read(markup)
    return node_to_editor_state(result.document), [entry.to_dict() for entry in result.frontmatter]


class MarkdownFileHooks:
    """Before-change and after-read hooks backed by markup files.

    Parameters
    ----------
    storage : FileStorage
        Where markup files are read and written
    fields : iterable of RichTextField or mapping
        Field declarations of the collection
    rich_text_field : str, default = "rich_text"
        Name of the field holding editor state
    path_field : str, default = "doc_path"
        Document field holding the markup file path, relative to ``storage``
    frontmatter_field : str, default = "front_matter"
        Document field holding the ``[{"key", "value"}]`` front matter list
    options : ConversionOptions, optional
        Conversion options

    Raises
    ------
    ConfigurationError
        If ``fields`` has no rich-text field called ``rich_text_field``

    """

    def __init__(
        self,
        storage: FileStorage,
        fields: Iterable[FieldLike],
        rich_text_field: str = "rich_text",
        path_field: str = "doc_path",
        frontmatter_field: str = "front_matter",
        options: Optional[ConversionOptions] = None,
    ) -> None:
        """Look up the rich-text field and prepare its converter."""
        self.storage = storage
        self.field = find_rich_text_field(fields, rich_text_field)
        self.path_field = path_field
        self.frontmatter_field = frontmatter_field
        self.converter = MarkdownConverter(self.field.transformers, options)

    def _document_path(self, data: Mapping[str, Any]) -> str:
        path = data.get(self.path_field)
        if not path:
            raise ValidationError(
                f"Document has no '{self.path_field}' value", parameter_name=self.path_field, parameter_value=path
            )
        return str(path)

    def before_change(self, data: dict[str, Any], context: Optional[Mapping[str, Any]] = None) -> Optional[dict]:
        """Write the document's rich text and front matter to its markup file.

        Parameters
        ----------
        data : dict
            Incoming document data
        context : mapping, optional
            Hook context; a truthy ``seed`` skips conversion

        Returns
        -------
        dict or None
            ``data`` unchanged while seeding, otherwise None

        Raises
        ------
        ValidationError
            If the document has no markup file path
        StorageError
            If the file cannot be written

        """
        if _is_seeding(context):
            return data

        path = self._document_path(data)
        try:
            document = load_editor_state(data.get(self.field.name))
        except MalformedTreeError as e:
            logger.error("Error parsing editor state for %s: %s", path, e)
            document = root()

        result = self.converter.write(document, data.get(self.frontmatter_field))
        for diagnostic in result.diagnostics:
            logger.debug("%s", diagnostic)

        if result.text.strip():
            self.storage.write_text(path, result.text)
            logger.info("Saved markup file %s", path)
        else:
            logger.debug("Nothing to write for %s", path)

        return None

    def after_read(self, doc: dict[str, Any], context: Optional[Mapping[str, Any]] = None) -> dict[str, Any]:
        """Load rich text and front matter from the document's markup file.

        Returns
        -------
        dict
            Shallow copy of ``doc`` with the rich-text field set to editor
            state and the front matter field set to a list of key/value dicts;
            ``doc`` itself while seeding

        Raises
        ------
        ValidationError
            If the document has no markup file path
        StorageError
            If the file cannot be read

        """
        if _is_seeding(context):
            return doc

        path = self._document_path(doc)
        result = self.converter.read(self.storage.read_text(path))
        if result.diagnostics.has_warnings:
            logger.warning("Read %s with %d diagnostic(s)", path, len(result.diagnostics))

        return {
            **doc,
            self.field.name: node_to_editor_state(result.document),
            self.frontmatter_field: [entry.to_dict() for entry in result.frontmatter],
        }


__all__ = ["MarkdownFileHooks", "load_editor_state", "markdown_to_editor_state", "SEED_CONTEXT_KEY"]
