#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdxbridge/schema.py
"""Rich-text field lookup on a host document schema.

A host collection declares its fields as a list. The persistence hooks need
the one rich-text field that holds the editor state, together with the
transformer set its editor is configured with. Fields may be given as
:class:`RichTextField` objects or as plain mappings (``{"name": ...,
"type": "richText", "transformers": [...]}``).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Union

from mdxbridge.exceptions import ConfigurationError
from mdxbridge.transformers.registry import TransformerSet

RICH_TEXT_FIELD_TYPE = "richText"


@dataclass(frozen=True)
class RichTextField:
    """A rich-text field declaration.

    Parameters
    ----------
    name : str
        Field name on the document
    transformers : TransformerRegistry or iterable of Transformer, optional
        Transformer set of the field's editor. None means the built-in set.
    field_type : str, default = "richText"
        Declared field type

    """

    name: str
    transformers: TransformerSet = None
    field_type: str = RICH_TEXT_FIELD_TYPE


FieldLike = Union[RichTextField, Mapping[str, Any]]


def _coerce_field(field: FieldLike) -> RichTextField | None:
    if isinstance(field, RichTextField):
        return field
    if isinstance(field, Mapping) and "name" in field:
        return RichTextField(
            name=field["name"],
            transformers=field.get("transformers"),
            field_type=field.get("type", ""),
        )
    return None


def find_rich_text_field(fields: Iterable[FieldLike], name: str = "rich_text") -> RichTextField:
    """Return the rich-text field called ``name``.

    Parameters
    ----------
    fields : iterable of RichTextField or mapping
        Field declarations of the collection
    name : str, default = "rich_text"
        Name of the field to look up

    Returns
    -------
    RichTextField
        The matching field

    Raises
    ------
    ConfigurationError
        If no field has that name, or the field is not a rich-text field

    """
    for candidate in fields:
        field = _coerce_field(candidate)
        if field is None or field.name != name:
            continue
        if field.field_type != RICH_TEXT_FIELD_TYPE:
            raise ConfigurationError(
                f"Field '{name}' has type '{field.field_type}', expected '{RICH_TEXT_FIELD_TYPE}'",
                parameter_name="fields",
                parameter_value=name,
            )
        return field

    raise ConfigurationError(
        f"No rich-text field named '{name}' in the collection schema",
        parameter_name="fields",
        parameter_value=name,
    )


__all__ = ["RICH_TEXT_FIELD_TYPE", "FieldLike", "RichTextField", "find_rich_text_field"]
