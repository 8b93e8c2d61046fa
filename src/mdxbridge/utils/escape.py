#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdxbridge/utils/escape.py
"""Markdown escaping utilities.

Escaping and unescaping are inverses: any literal string passed through
:func:`escape_markdown` and parsed back as inline text yields the original
string. This is what lets arbitrary text leaves survive a round-trip.

"""

from __future__ import annotations

import re

# Backslash escapes of ASCII punctuation
_UNESCAPE_PATTERN = re.compile(r"\\([!-/:-@\[-`{-~])")

# Block markers that are only significant at the start of a line. Any
# leading whitespace counts, since block content is trimmed with str.strip
_LINE_START_MARKER = re.compile(r"(?m)^([^\S\n]*)([#>+\-=|])")
_LINE_START_ORDERED = re.compile(r"(?m)^([^\S\n]*\d+)([.)])")

_ALWAYS_ESCAPE = "\\`*{}[]~"

_DESTINATION_SPECIAL = re.compile(r"[\\<>]")
_DESTINATION_ESCAPE = re.compile(r"\\([\\<>])")


def escape_markdown(text: str, escape_special: bool = True) -> str:
    r"""Escape special markdown characters with context awareness.

    - Backslash, backtick, asterisk, braces, brackets and tilde are always
      escaped
    - Underscores are escaped only at word boundaries, so ``snake_case``
      stays readable
    - Block markers (``#``, ``>``, ``-``, ``+``, ``=``, ``|`` and ordered list
      numbers) are escaped only at the start of a line
    - Carriage returns become line feeds, which is how the parser reads them,
      so markers after them are escaped too
    - A trailing ``!`` is escaped so it cannot join a following link into an
      image

    Parameters
    ----------
    text : str
        Literal text
    escape_special : bool, default = True
        When False the text is returned unchanged

    Returns
    -------
    str
        Escaped text

    Examples
    --------
        >>> escape_markdown("snake_case and *stars*")
        'snake_case and \\*stars\\*'
        >>> escape_markdown("# not a heading")
        '\\# not a heading'

    """
    if not escape_special or not text:
        return text

    text = text.replace("\r\n", "\n").replace("\r", "\n")
    escaped_chars = []
    for i, char in enumerate(text):
        if char in _ALWAYS_ESCAPE:
            escaped_chars.append("\\")
            escaped_chars.append(char)
        elif char == "_":
            prev_alnum = i > 0 and text[i - 1].isalnum()
            next_alnum = i < len(text) - 1 and text[i + 1].isalnum()
            if prev_alnum and next_alnum:
                escaped_chars.append(char)
            else:
                escaped_chars.append("\\")
                escaped_chars.append(char)
        else:
            escaped_chars.append(char)

    result = "".join(escaped_chars)
    result = _LINE_START_MARKER.sub(r"\1\\\2", result)
    result = _LINE_START_ORDERED.sub(r"\1\\\2", result)
    if result.endswith("!"):
        result = result[:-1] + "\\!"
    return result


def unescape_markdown(text: str) -> str:
    """Remove backslash escapes of ASCII punctuation.

    Examples
    --------
        >>> unescape_markdown(r"\\*literal\\* C:\\path")
        '*literal* C:\\\\path'

    """
    return _UNESCAPE_PATTERN.sub(r"\1", text)


def longest_run(text: str, char: str) -> int:
    """Length of the longest run of ``char`` in ``text``."""
    max_consecutive = 0
    current_consecutive = 0
    for c in text:
        if c == char:
            current_consecutive += 1
            max_consecutive = max(max_consecutive, current_consecutive)
        else:
            current_consecutive = 0
    return max_consecutive


def escape_inline_code(code: str, delimiter: str = "`") -> tuple[str, str]:
    """Pad inline code and choose a delimiter that cannot close it early.

    Parameters
    ----------
    code : str
        Code content
    delimiter : str, default = '`'
        Delimiter character

    Returns
    -------
    tuple[str, str]
        (padded_code, delimiter_to_use)

    Examples
    --------
        >>> escape_inline_code("simple code")
        ('simple code', '`')
        >>> escape_inline_code("`tick")
        (' `tick ', '``')

    """
    final_delimiter = delimiter * (longest_run(code, delimiter) + 1)

    # One space on each side is stripped when parsing, so pad whenever the
    # content would otherwise lose or merge characters at its edges
    if (
        code.startswith(delimiter)
        or code.endswith(delimiter)
        or (len(code) >= 2 and code.startswith(" ") and code.endswith(" ") and code.strip())
    ):
        code = " " + code + " "

    return code, final_delimiter


def escape_link_destination(url: str) -> str:
    """Wrap a link destination in angle brackets when it needs them.

    Destinations holding whitespace, parentheses or angle brackets are written
    as ``<...>`` with ``\\``, ``<`` and ``>`` backslash-escaped inside, so
    ``https://x/a<b>`` becomes ``<https://x/a\\<b\\>>``. Other destinations
    are written as they are.
    """
    if not url:
        return url
    if any(c.isspace() or c in "()<>" for c in url):
        return "<" + _DESTINATION_SPECIAL.sub(r"\\\g<0>", url) + ">"
    return url


def unescape_link_destination(raw: str) -> str:
    """Read back a destination written by :func:`escape_link_destination`."""
    if raw.startswith("<") and raw.endswith(">"):
        return _DESTINATION_ESCAPE.sub(r"\1", raw[1:-1])
    return raw


def escape_link_title(title: str) -> str:
    """Escape a link title for use inside double quotes."""
    return title.replace("\\", "\\\\").replace('"', '\\"')


__all__ = [
    "escape_markdown",
    "unescape_markdown",
    "longest_run",
    "escape_inline_code",
    "escape_link_destination",
    "unescape_link_destination",
    "escape_link_title",
]
