#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdxbridge/frontmatter.py
"""Front matter codec.

Converts between an ordered list of key/value entries and the delimited header
block that precedes the markdown body of a markup file::

    ---
    title: Intro
    tags: [guide, basics]
    ---

Quoting rule
------------
Each entry is one top-level ``key: value`` line. Values are text. A value is
written bare when YAML would read it back as a non-string scalar or flow
collection (``5``, ``true``, ``2024-01-01``, ``[a, b]``) whose source text is
the value itself, so that hand-written headers survive a round-trip untouched.
A value that would load as null is written bare only when it is a null
spelling (``null``, ``~``), and text that would start a comment (``#x``,
``a #b``) is always quoted. Every other value is written with PyYAML's string
quoting, or as a JSON double-quoted scalar when PyYAML would need several
lines. The extra line breaks YAML recognises (NEL, LINE SEPARATOR and
PARAGRAPH SEPARATOR) are always escaped.

On read, header lines end at line feeds only. String scalars are unquoted and
every other value keeps its literal source text, located through the node
PyYAML composes for it, so a key containing ``:`` or ``=`` never leaks into
the value. Both directions therefore agree: any entry list with non-empty keys
reads back as itself.

TOML headers (``+++``) follow the same rule using ``tomli_w`` and ``tomllib``.

Duplicate keys
--------------
Keys are unique per document. When a key repeats, the last value wins and the
entry keeps the position of its first occurrence; a warning is logged.

"""

from __future__ import annotations

import json
import logging
import re
import sys
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, NamedTuple, Optional, Union

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found,unused-ignore]

import tomli_w
import yaml

from mdxbridge.constants import DEFAULT_FRONTMATTER_FORMAT, FRONTMATTER_DELIMITERS, FrontmatterFormat
from mdxbridge.diagnostics import DiagnosticLog

logger = logging.getLogger(__name__)

_SOURCE = "frontmatter"

_NULL_SPELLINGS = frozenset({"null", "Null", "NULL", "~"})

# Characters the YAML reader rejects, or reads as line breaks, inside a scalar
_YAML_UNSAFE = re.compile("[\x7f-\x9f\u2028\u2029\ufeff\ufffe\uffff]")

_TOML_KEY_PART = r"""(?:[A-Za-z0-9_-]+|"(?:\\.|[^"\\])*"|'[^']*')"""
_TOML_KEY = re.compile(rf"\s*{_TOML_KEY_PART}(?:\s*\.\s*{_TOML_KEY_PART})*\s*=")


@dataclass(frozen=True)
class FrontmatterEntry:
    """One key/value pair of the header block.

    Parameters
    ----------
    key : str
        Entry key, unique within a document
    value : str
        Entry value as text

    """

    key: str
    value: str

    def to_dict(self) -> dict[str, str]:
        """Return the ``{"key": ..., "value": ...}`` form used by hosts."""
        return {"key": self.key, "value": self.value}


class ExtractedFrontmatter(NamedTuple):
    """Result of splitting a markup file into header and body.

    Attributes
    ----------
    frontmatter : str or None
        Raw header text between the delimiters, or None when there is no block
    content : str
        Everything after the closing delimiter line, or the whole input
    format : str or None
        ``"yaml"`` or ``"toml"`` depending on the delimiter found

    """

    frontmatter: Optional[str]
    content: str
    format: Optional[FrontmatterFormat] = None


EntryLike = Union[FrontmatterEntry, Mapping[str, Any], tuple[Any, Any]]


# ============================================================================
# Entry helpers
# ============================================================================


def _coerce_value(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _coerce_entry(item: EntryLike) -> FrontmatterEntry:
    if isinstance(item, FrontmatterEntry):
        return item
    if isinstance(item, Mapping):
        return FrontmatterEntry(_coerce_value(item.get("key")), _coerce_value(item.get("value")))
    key, value = item
    return FrontmatterEntry(_coerce_value(key), _coerce_value(value))


def _dedupe(entries: Iterable[FrontmatterEntry]) -> list[FrontmatterEntry]:
    positions: dict[str, int] = {}
    result: list[FrontmatterEntry] = []
    for entry in entries:
        if entry.key in positions:
            logger.warning("Duplicate front matter key '%s'; keeping the last value", entry.key)
            result[positions[entry.key]] = entry
        else:
            positions[entry.key] = len(result)
            result.append(entry)
    return result


def normalize_entries(entries: Union[Iterable[EntryLike], Mapping[str, Any], None]) -> list[FrontmatterEntry]:
    """Coerce host data into a de-duplicated list of entries.

    Parameters
    ----------
    entries : iterable or mapping or None
        ``FrontmatterEntry`` objects, ``{"key", "value"}`` dicts, ``(key, value)``
        pairs, or a plain ``{key: value}`` mapping

    Returns
    -------
    list of FrontmatterEntry
        Entries with empty keys removed and duplicates collapsed

    """
    if entries is None:
        return []
    if isinstance(entries, Mapping):
        items: Iterable[EntryLike] = list(entries.items())
    else:
        items = entries
    coerced = [_coerce_entry(item) for item in items]
    return _dedupe(entry for entry in coerced if entry.key)


def entries_to_mapping(entries: Iterable[EntryLike]) -> dict[str, str]:
    """Collapse entries into a plain dict (last write wins)."""
    return {entry.key: entry.value for entry in normalize_entries(entries)}


def mapping_to_entries(mapping: Mapping[str, Any]) -> list[FrontmatterEntry]:
    """Expand a plain dict into entries, preserving its order."""
    return normalize_entries(mapping)


# ============================================================================
# Writing
# ============================================================================


def _loads_line(line: str, fmt: FrontmatterFormat) -> Any:
    if fmt == "toml":
        return tomllib.loads(line)
    return yaml.safe_load(line)


def _is_single_line(text: str) -> bool:
    return text.splitlines() == [text] and "\n" not in text and "\r" not in text


def _json_scalar(text: str) -> str:
    """Quote text as JSON that is also a one-line YAML double-quoted scalar."""
    dumped = json.dumps(text, ensure_ascii=False)
    return _YAML_UNSAFE.sub(lambda match: f"\\u{ord(match.group()):04x}", dumped)


def _is_bare_value(key: str, value: str, fmt: FrontmatterFormat) -> bool:
    """Whether a value reads back verbatim as a non-string when written bare."""
    if not value or value != value.strip() or not _is_single_line(value):
        return False
    if value.startswith("#") or " #" in value:
        return False
    line = f"k = {value}" if fmt == "toml" else f"k: {value}"
    try:
        loaded = _loads_line(line, fmt)
        literal = _literal_value(line, fmt)
    except (yaml.YAMLError, tomllib.TOMLDecodeError, ValueError):
        return False
    if not isinstance(loaded, dict) or len(loaded) != 1 or isinstance(loaded.get("k", ""), str):
        return False
    if loaded["k"] is None and value not in _NULL_SPELLINGS:
        return False
    return literal == value


def _yaml_key(key: str) -> str:
    dumped = yaml.safe_dump({key: ""}, allow_unicode=True, width=float("inf"))
    if len(dumped.splitlines()) == 1 and _is_single_line(key):
        return dumped.rsplit(":", 1)[0]
    return _json_scalar(key)


def _format_yaml_entry(entry: FrontmatterEntry) -> str:
    key = _yaml_key(entry.key)
    if _is_bare_value(entry.key, entry.value, "yaml"):
        return f"{key}: {entry.value}\n"
    dumped = yaml.safe_dump({entry.key: entry.value}, allow_unicode=True, sort_keys=False, width=float("inf"))
    if len(dumped.splitlines()) == 1 and _is_single_line(entry.key):
        return dumped
    # Multi-line values would fold across lines; a JSON string is a valid YAML double-quoted scalar
    return f"{key}: {_json_scalar(entry.value)}\n"


def _format_toml_entry(entry: FrontmatterEntry) -> str:
    if _is_bare_value(entry.key, entry.value, "toml"):
        # Keys may themselves contain " = "; the value placeholder is always last
        key = tomli_w.dumps({entry.key: ""}).rsplit(" = ", 1)[0]
        return f"{key} = {entry.value}\n"
    return tomli_w.dumps({entry.key: entry.value})


def object_to_frontmatter(
    entries: Union[Iterable[EntryLike], Mapping[str, Any], None],
    format: FrontmatterFormat = DEFAULT_FRONTMATTER_FORMAT,
) -> str:
    """Serialize entries as a delimited header block.

    Parameters
    ----------
    entries : iterable or mapping or None
        Ordered entries (see :func:`normalize_entries` for accepted shapes)
    format : {"yaml", "toml"}, default = "yaml"
        Header syntax

    Returns
    -------
    str
        ``"---\\n<lines>---\\n"``, or ``""`` when there are no entries.
        Callers must not prepend an empty block.

    Examples
    --------
        >>> object_to_frontmatter([FrontmatterEntry("title", "Intro")])
        '---\\ntitle: Intro\\n---\\n'
        >>> object_to_frontmatter([])
        ''

    """
    normalized = normalize_entries(entries)
    if not normalized:
        return ""

    delimiter = FRONTMATTER_DELIMITERS[format]
    formatter = _format_toml_entry if format == "toml" else _format_yaml_entry
    body = "".join(formatter(entry) for entry in normalized)
    return f"{delimiter}\n{body}{delimiter}\n"


# ============================================================================
# Reading
# ============================================================================


def _strip_line_ending(line: str) -> str:
    return line.rstrip("\r\n")


def _split_lines(text: str) -> list[str]:
    """Split on line feeds only, keeping the endings."""
    pieces = text.split("\n")
    lines = [piece + "\n" for piece in pieces[:-1]]
    if pieces[-1]:
        lines.append(pieces[-1])
    return lines


def extract_frontmatter(text: str) -> ExtractedFrontmatter:
    """Split a markup file into raw header text and body.

    A header is recognised only when the first line is a delimiter (``---``
    or ``+++``) and a later line repeats it.

    Parameters
    ----------
    text : str
        Whole markup file

    Returns
    -------
    ExtractedFrontmatter
        Raw header (unparsed) and the content after the closing delimiter
        line. Without a header, ``frontmatter`` is None and ``content`` is the
        input, untouched.

    """
    start = 1 if text.startswith("\ufeff") else 0
    lines = _split_lines(text[start:])
    if not lines:
        return ExtractedFrontmatter(None, text)

    opening = _strip_line_ending(lines[0]).rstrip()
    fmt = next((name for name, delim in FRONTMATTER_DELIMITERS.items() if delim == opening), None)
    if fmt is None or not lines[0].endswith("\n"):
        return ExtractedFrontmatter(None, text)

    for index in range(1, len(lines)):
        if _strip_line_ending(lines[index]).rstrip() == opening:
            header = "".join(lines[1:index])
            if header.endswith("\r\n"):
                header = header[:-2]
            elif header.endswith("\n"):
                header = header[:-1]
            content = "".join(lines[index + 1 :])
            return ExtractedFrontmatter(header, content, fmt)  # type: ignore[arg-type]

    return ExtractedFrontmatter(None, text)


def _split_chunks(header: str, diagnostics: Optional[DiagnosticLog]) -> list[tuple[int, str]]:
    """Group header lines into top-level entries with their continuation lines."""
    chunks: list[tuple[int, list[str]]] = []
    for number, raw_line in enumerate(header.split("\n"), start=1):
        line = raw_line.rstrip("\r")
        stripped = line.strip()
        is_continuation = line[:1] in (" ", "\t") or line.startswith("- ") or line == "-"
        if not stripped:
            if chunks:
                chunks[-1][1].append(line)
            continue
        if line.startswith("#"):
            continue
        if is_continuation:
            if chunks:
                chunks[-1][1].append(line)
            else:
                _report(diagnostics, "Skipped orphan continuation line", number, line)
            continue
        chunks.append((number, [line]))
    return [(number, "\n".join(lines).rstrip()) for number, lines in chunks]


def _report(diagnostics: Optional[DiagnosticLog], message: str, line_number: int, line: str) -> None:
    logger.debug("%s at front matter line %d: %r", message, line_number, line)
    if diagnostics is not None:
        diagnostics.add(_SOURCE, message, line=line_number, text=line)


def _yaml_value_node(chunk: str) -> yaml.Node:
    return yaml.compose(chunk, Loader=yaml.SafeLoader).value[0][1]


def _literal_value(chunk: str, fmt: FrontmatterFormat) -> str:
    """Source text of the value in a one-entry chunk."""
    if fmt == "toml":
        match = _TOML_KEY.match(chunk)
        return chunk[match.end() :].strip() if match else ""
    node = _yaml_value_node(chunk)
    return chunk[node.start_mark.index : node.end_mark.index].strip()


def _value_to_text(value: Any, chunk: str, fmt: FrontmatterFormat) -> str:
    if isinstance(value, str):
        return value
    literal = _literal_value(chunk, fmt)
    if "\n" not in literal:
        return literal
    # Block-style collections collapse to their flow form
    if fmt == "yaml":
        return yaml.safe_dump(value, default_flow_style=True, allow_unicode=True, width=float("inf")).strip()
    return json.dumps(value, ensure_ascii=False, default=str)


def frontmatter_to_object(
    header: Optional[str],
    format: FrontmatterFormat = DEFAULT_FRONTMATTER_FORMAT,
    diagnostics: Optional[DiagnosticLog] = None,
) -> list[FrontmatterEntry]:
    """Parse raw header text into ordered entries.

    Never raises: lines that cannot be parsed are skipped and, when a
    diagnostic log is given, recorded there.

    Parameters
    ----------
    header : str or None
        Raw header text as returned by :func:`extract_frontmatter`
    format : {"yaml", "toml"}, default = "yaml"
        Header syntax
    diagnostics : DiagnosticLog, optional
        Collector for skipped lines

    Returns
    -------
    list of FrontmatterEntry
        Entries in source order

    """
    if not header:
        return []

    entries: list[FrontmatterEntry] = []
    for line_number, chunk in _split_chunks(header, diagnostics):
        try:
            loaded = _loads_line(chunk, format)
        except (yaml.YAMLError, tomllib.TOMLDecodeError, ValueError):
            _report(diagnostics, "Skipped malformed front matter line", line_number, chunk)
            continue

        if not isinstance(loaded, dict) or len(loaded) != 1:
            _report(diagnostics, "Skipped front matter line without a single key", line_number, chunk)
            continue

        key, value = next(iter(loaded.items()))
        key_text = _coerce_value(key)
        if not key_text:
            _report(diagnostics, "Skipped front matter line with an empty key", line_number, chunk)
            continue
        entries.append(FrontmatterEntry(key_text, _value_to_text(value, chunk, format)))

    deduped = _dedupe(entries)
    if diagnostics is not None and len(deduped) != len(entries):
        diagnostics.add(_SOURCE, "Duplicate front matter keys collapsed; last value kept")
    return deduped


__all__ = [
    "FrontmatterEntry",
    "ExtractedFrontmatter",
    "normalize_entries",
    "entries_to_mapping",
    "mapping_to_entries",
    "object_to_frontmatter",
    "extract_frontmatter",
    "frontmatter_to_object",
]
