#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/test_ast_serialization.py
"""Unit tests for editor state serialization."""

import json

import pytest

from mdxbridge.ast import (
    ast_to_json,
    dict_to_node,
    heading,
    json_to_ast,
    link,
    node_to_dict,
    node_to_editor_state,
    paragraph,
    root,
)
from mdxbridge.exceptions import MalformedTreeError


@pytest.mark.unit
class TestNodeToDict:
    """Tests for serializing nodes."""

    def test_empty_members_omitted(self):
        assert node_to_dict(root()) == {"type": "root"}

    def test_nested(self):
        data = node_to_dict(root(heading(2, "Title")))
        assert data == {
            "type": "root",
            "children": [
                {
                    "type": "heading",
                    "attributes": {"level": 2},
                    "children": [{"type": "text", "attributes": {"text": "Title"}}],
                }
            ],
        }

    def test_editor_state_envelope(self):
        assert node_to_editor_state(root()) == {"root": {"type": "root"}}


@pytest.mark.unit
class TestDictToNode:
    """Tests for deserializing nodes."""

    def test_round_trip(self):
        doc = root(paragraph("See ", link("https://example.com", "this", title="T")))
        assert dict_to_node(node_to_dict(doc)) == doc

    def test_editor_state_envelope_accepted(self):
        doc = root(heading(1, "A"))
        assert dict_to_node(node_to_editor_state(doc)) == doc

    def test_short_text_form_accepted(self):
        node = dict_to_node({"type": "paragraph", "children": [{"type": "text", "text": "hi"}]})
        assert node == paragraph("hi")

    @pytest.mark.parametrize(
        "data",
        [
            [],
            {"children": []},
            {"type": ""},
            {"type": "root", "attributes": ["x"]},
            {"type": "root", "children": {"type": "text"}},
            {"type": "root", "children": ["text"]},
        ],
    )
    def test_malformed_data_raises(self, data):
        with pytest.raises(MalformedTreeError):
            dict_to_node(data)

    def test_error_path_points_at_child(self):
        with pytest.raises(MalformedTreeError) as exc_info:
            dict_to_node({"root": {"type": "root", "children": [{"type": "paragraph"}, {}]}})
        assert exc_info.value.path == "root.children[1]"


@pytest.mark.unit
class TestJson:
    """Tests for the versioned JSON form."""

    def test_schema_version_written(self):
        data = json.loads(ast_to_json(root()))
        assert data == {"schema_version": 1, "type": "root"}

    def test_round_trip(self):
        doc = root(heading(1, "Über"))
        assert json_to_ast(ast_to_json(doc, indent=2)) == doc

    def test_invalid_json(self):
        with pytest.raises(MalformedTreeError, match="Invalid JSON"):
            json_to_ast("{not json")

    def test_non_object(self):
        with pytest.raises(MalformedTreeError):
            json_to_ast("[1, 2]")

    def test_unsupported_version(self):
        with pytest.raises(MalformedTreeError, match="Unsupported schema version"):
            json_to_ast('{"schema_version": 99, "type": "root"}')

    def test_unsupported_version_lenient(self, caplog):
        node = json_to_ast('{"schema_version": 99, "type": "root"}', validate_schema=False)
        assert node == root()
        assert "Schema version 99" in caplog.text
