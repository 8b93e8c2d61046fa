#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/test_schema.py
"""Unit tests for rich-text field lookup."""

import pytest

from mdxbridge.exceptions import ConfigurationError
from mdxbridge.schema import RICH_TEXT_FIELD_TYPE, RichTextField, find_rich_text_field
from mdxbridge.transformers import default_transformers


@pytest.mark.unit
class TestFindRichTextField:
    """Tests for find_rich_text_field."""

    def test_field_objects(self):
        field = RichTextField("rich_text")
        assert find_rich_text_field([RichTextField("other"), field]) is field

    def test_mapping_fields(self):
        registry = default_transformers()
        field = find_rich_text_field(
            [{"name": "title", "type": "text"}, {"name": "body", "type": "richText", "transformers": registry}],
            name="body",
        )
        assert field == RichTextField("body", transformers=registry)
        assert field.field_type == RICH_TEXT_FIELD_TYPE

    def test_other_entries_ignored(self):
        field = find_rich_text_field(["not a field", {"type": "richText"}, {"name": "rich_text", "type": "richText"}])
        assert field.name == "rich_text"

    def test_missing_field(self):
        with pytest.raises(ConfigurationError, match="No rich-text field named 'rich_text'") as exc_info:
            find_rich_text_field([{"name": "title", "type": "text"}])
        assert exc_info.value.parameter_name == "fields"

    def test_wrong_type(self):
        with pytest.raises(ConfigurationError, match="expected 'richText'"):
            find_rich_text_field([{"name": "rich_text", "type": "text"}])

    def test_mapping_without_type(self):
        with pytest.raises(ConfigurationError):
            find_rich_text_field([{"name": "rich_text"}])

    def test_empty_schema(self):
        with pytest.raises(ConfigurationError):
            find_rich_text_field([])
