#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Configuration options for front matter, serialization and parsing.

All options are frozen dataclasses: they are immutable configuration shared
read-only across conversions, so one instance can serve concurrent calls.
Use :meth:`CloneFrozenMixin.create_updated` to derive modified copies.
"""
# src/mdxbridge/options.py

from __future__ import annotations

import sys
from dataclasses import dataclass, field, fields, replace
from typing import Any

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from mdxbridge.constants import (
    DEFAULT_BULLET,
    DEFAULT_CODE_FENCE_CHAR,
    DEFAULT_EMPHASIS_SYMBOL,
    DEFAULT_FRONTMATTER_FORMAT,
    DEFAULT_STRONG_SYMBOL,
    DEFAULT_THEMATIC_BREAK,
    FRONTMATTER_DELIMITERS,
    BulletSymbol,
    CodeFenceChar,
    EmphasisSymbol,
    FrontmatterFormat,
    StrongSymbol,
)


@dataclass(frozen=True)
class CloneFrozenMixin:
    """Mixin providing frozen dataclass cloning capabilities."""

    def create_updated(self, **kwargs: Any) -> Self:
        """Create a new instance with updated field values.

        Parameters
        ----------
        **kwargs : Any
            Field names and their new values

        Returns
        -------
        Self
            New instance with specified fields updated

        """
        return replace(self, **kwargs)

    @classmethod
    def field_names(cls) -> set[str]:
        """Return the names of all dataclass fields."""
        return {f.name for f in fields(cls)}  # type: ignore[arg-type]


@dataclass(frozen=True)
class FrontmatterOptions(CloneFrozenMixin):
    """Options for the front-matter header block.

    Parameters
    ----------
    format : {"yaml", "toml"}, default = "yaml"
        Syntax used when writing the header block. Reading recognises both.

    """

    format: FrontmatterFormat = field(
        default=DEFAULT_FRONTMATTER_FORMAT,
        metadata={"help": "Front matter syntax written to files", "choices": ["yaml", "toml"]},
    )

    def __post_init__(self) -> None:
        """Validate the front matter format."""
        if self.format not in FRONTMATTER_DELIMITERS:
            raise ValueError(f"Unsupported front matter format: {self.format!r}")

    @property
    def delimiter(self) -> str:
        """Delimiter line for the configured format."""
        return FRONTMATTER_DELIMITERS[self.format]


@dataclass(frozen=True)
class MarkdownRendererOptions(CloneFrozenMixin):
    r"""Markdown rendering options for converting trees to markdown text.

    Parameters
    ----------
    bullet : {"-", "*", "+"}, default = "-"
        Marker for bullet and check list items
    emphasis_symbol : {"*", "_"}, default = "*"
        Delimiter for emphasis
    strong_symbol : {"**", "__"}, default = "**"
        Delimiter for strong text
    thematic_break : str, default = "***"
        Line written for thematic breaks. ``---`` is rejected because it is
        the front matter delimiter.
    code_fence_char : {"`", "~"}, default = "`"
        Character used for code fences
    escape_special : bool, default = True
        Escape markdown-significant characters in text. Disabling this trades
        round-trip fidelity for raw output.

    """

    bullet: BulletSymbol = field(
        default=DEFAULT_BULLET,
        metadata={"help": "Marker for bullet list items", "choices": ["-", "*", "+"]},
    )
    emphasis_symbol: EmphasisSymbol = field(
        default=DEFAULT_EMPHASIS_SYMBOL,
        metadata={"help": "Delimiter for emphasis", "choices": ["*", "_"]},
    )
    strong_symbol: StrongSymbol = field(
        default=DEFAULT_STRONG_SYMBOL,
        metadata={"help": "Delimiter for strong text", "choices": ["**", "__"]},
    )
    thematic_break: str = field(
        default=DEFAULT_THEMATIC_BREAK,
        metadata={"help": "Line written for thematic breaks"},
    )
    code_fence_char: CodeFenceChar = field(
        default=DEFAULT_CODE_FENCE_CHAR,
        metadata={"help": "Character used for code fences", "choices": ["`", "~"]},
    )
    escape_special: bool = field(
        default=True,
        metadata={"help": "Escape markdown-significant characters in text"},
    )

    def __post_init__(self) -> None:
        """Validate marker choices.

        Raises
        ------
        ValueError
            If a marker is not one of the supported symbols

        """
        if self.bullet not in ("-", "*", "+"):
            raise ValueError(f"bullet must be one of '-', '*', '+', got {self.bullet!r}")
        if self.emphasis_symbol not in ("*", "_"):
            raise ValueError(f"emphasis_symbol must be '*' or '_', got {self.emphasis_symbol!r}")
        if self.strong_symbol not in ("**", "__"):
            raise ValueError(f"strong_symbol must be '**' or '__', got {self.strong_symbol!r}")
        if self.code_fence_char not in ("`", "~"):
            raise ValueError(f"code_fence_char must be '`' or '~', got {self.code_fence_char!r}")
        stripped = self.thematic_break.replace(" ", "")
        if len(stripped) < 3 or len(set(stripped)) != 1 or stripped[0] not in "*_-":
            raise ValueError(f"thematic_break must be three or more of '*', '_' or '-', got {self.thematic_break!r}")
        if stripped[0] == "-":
            raise ValueError("thematic_break may not use '-' because it collides with the front matter delimiter")


@dataclass(frozen=True)
class MarkdownParserOptions(CloneFrozenMixin):
    """Configuration options for markdown-to-tree parsing.

    Parameters
    ----------
    empty_paragraph_for_blank : bool, default = True
        Give blank input a root with one empty paragraph, matching what an
        editor holds for an empty document
    max_inline_depth : int, default = 32
        Nesting limit for recursive inline parsing; deeper content is kept as
        literal text

    """

    empty_paragraph_for_blank: bool = field(
        default=True,
        metadata={"help": "Give blank input a root with one empty paragraph"},
    )
    max_inline_depth: int = field(
        default=32,
        metadata={"help": "Nesting limit for recursive inline parsing", "type": int},
    )

    def __post_init__(self) -> None:
        """Validate numeric ranges."""
        if self.max_inline_depth < 1:
            raise ValueError(f"max_inline_depth must be positive, got {self.max_inline_depth}")


@dataclass(frozen=True)
class ConversionOptions(CloneFrozenMixin):
    """Options for the conversion facade.

    Parameters
    ----------
    frontmatter : FrontmatterOptions
        Header block options
    renderer : MarkdownRendererOptions
        Serializer options
    parser : MarkdownParserOptions
        Parser options
    strict : bool, default = False
        If True, transformer exceptions propagate as ``TransformerError``.
        If False (default), they are logged and the fallback is used.

    """

    frontmatter: FrontmatterOptions = field(default_factory=FrontmatterOptions)
    renderer: MarkdownRendererOptions = field(default_factory=MarkdownRendererOptions)
    parser: MarkdownParserOptions = field(default_factory=MarkdownParserOptions)
    strict: bool = field(
        default=False,
        metadata={"help": "Raise on transformer failures instead of falling back"},
    )


__all__ = [
    "CloneFrozenMixin",
    "FrontmatterOptions",
    "MarkdownRendererOptions",
    "MarkdownParserOptions",
    "ConversionOptions",
]
