#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdxbridge/cli.py
"""Command-line interface for mdxbridge.

Sub-commands
------------
Read a markup file and print its tree and front matter as JSON::

    $ mdxbridge read docs/intro.md --indent 2

Render a JSON document (as printed by ``read``) back to a markup file::

    $ mdxbridge write intro.json -o docs/intro.md

Normalise a markup file through a full read/write cycle::

    $ mdxbridge roundtrip docs/intro.md
    $ mdxbridge roundtrip docs/intro.md --check

``-`` reads from standard input. Options come from the nearest
``.mdxbridge.toml`` / ``.yaml`` / ``.json`` or ``[tool.mdxbridge]`` table
unless ``--config`` names a file.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from mdxbridge import __version__
from mdxbridge.ast.serialization import node_to_editor_state
from mdxbridge.config import load_config_with_priority, options_from_config
from mdxbridge.converter import MarkdownConverter
from mdxbridge.diagnostics import DiagnosticLog
from mdxbridge.exceptions import (
    MalformedTreeError,
    MdxBridgeError,
    StorageError,
    ValidationError,
)
from mdxbridge.hooks import load_editor_state
from mdxbridge.logging_utils import configure_logging
from mdxbridge.storage import LocalFileStorage
from mdxbridge.transformers.registry import default_transformers

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_VALIDATION_ERROR = 3
EXIT_FILE_ERROR = 4
EXIT_TREE_ERROR = 5

STDIN_MARKER = "-"


def get_exit_code_for_exception(exception: Exception) -> int:
    """Map an exception to a CLI exit code."""
    if isinstance(exception, (StorageError, OSError)):
        return EXIT_FILE_ERROR
    if isinstance(exception, MalformedTreeError):
        return EXIT_TREE_ERROR
    if isinstance(exception, ValidationError):
        return EXIT_VALIDATION_ERROR
    return EXIT_ERROR


def create_parser() -> argparse.ArgumentParser:
    """Build the argument parser with its sub-commands."""
    parser = argparse.ArgumentParser(
        prog="mdxbridge",
        description="Convert between rich-text document trees and markdown files with front matter.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="Configuration file (.toml, .yaml, .json or pyproject.toml)")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING)",
    )
    parser.add_argument("--log-file", help="Also write log output to this file")
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Debug logging for mdxbridge modules, with timestamps and logger names",
    )
    parser.add_argument("--strict", action="store_true", help="Fail on transformer errors instead of falling back")
    parser.add_argument(
        "--plugins", action="store_true", help="Load extra transformers from installed plugins"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    read_parser = subparsers.add_parser("read", help="Print a markup file as JSON tree and front matter")
    read_parser.add_argument("file", help="Markup file, or '-' for standard input")
    read_parser.add_argument("--indent", type=int, default=None, help="JSON indentation")

    write_parser = subparsers.add_parser("write", help="Render a JSON document to a markup file")
    write_parser.add_argument("file", help="JSON file as printed by 'read', or '-' for standard input")
    write_parser.add_argument("-o", "--out", help="Output markup file (default: standard output)")

    roundtrip_parser = subparsers.add_parser("roundtrip", help="Read and re-write a markup file")
    roundtrip_parser.add_argument("file", help="Markup file, or '-' for standard input")
    roundtrip_parser.add_argument(
        "--check", action="store_true", help="Exit 1 if the file is not normalised (trailing newlines ignored)"
    )

    return parser


def _read_input(path: str) -> str:
    if path == STDIN_MARKER:
        return sys.stdin.read()
    source = Path(path)
    return LocalFileStorage(source.parent).read_text(source.name)


def _write_output(text: str, out: Optional[str]) -> None:
    if not out:
        sys.stdout.write(text)
        if text and not text.endswith("\n"):
            sys.stdout.write("\n")
        return
    target = Path(out)
    LocalFileStorage(target.parent).write_text(target.name, text)
    logger.info("Wrote %s", target)


def _report_diagnostics(diagnostics: DiagnosticLog) -> None:
    for diagnostic in diagnostics:
        if diagnostic.severity == "info":
            logger.info("%s", diagnostic)
        else:
            logger.warning("%s", diagnostic)


def _build_converter(parsed_args: argparse.Namespace) -> MarkdownConverter:
    options = options_from_config(load_config_with_priority(parsed_args.config))
    if parsed_args.strict:
        options = options.create_updated(strict=True)
    transformers = default_transformers(discover_plugins=parsed_args.plugins)
    return MarkdownConverter(transformers, options)


def _command_read(converter: MarkdownConverter, parsed_args: argparse.Namespace) -> int:
    result = converter.read(_read_input(parsed_args.file))
    _report_diagnostics(result.diagnostics)
    payload = {
        "frontmatter": [entry.to_dict() for entry in result.frontmatter],
        "document": node_to_editor_state(result.document),
    }
    print(json.dumps(payload, indent=parsed_args.indent, ensure_ascii=False))
    return EXIT_SUCCESS


def _load_payload(raw: str) -> tuple[Any, Any]:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedTreeError(f"Invalid JSON input: {e}", original_error=e) from e
    if not isinstance(payload, dict) or "document" not in payload:
        raise MalformedTreeError("JSON input must be an object with a 'document' member")
    return payload["document"], payload.get("frontmatter")


def _command_write(converter: MarkdownConverter, parsed_args: argparse.Namespace) -> int:
    document_data, frontmatter = _load_payload(_read_input(parsed_args.file))
    result = converter.write(load_editor_state(document_data), frontmatter)
    _report_diagnostics(result.diagnostics)
    _write_output(result.text, parsed_args.out)
    return EXIT_SUCCESS


def _command_roundtrip(converter: MarkdownConverter, parsed_args: argparse.Namespace) -> int:
    original = _read_input(parsed_args.file)
    read_result = converter.read(original)
    write_result = converter.write(read_result.document, read_result.frontmatter)
    _report_diagnostics(read_result.diagnostics)
    _report_diagnostics(write_result.diagnostics)

    if parsed_args.check:
        if write_result.text.rstrip("\n") != original.rstrip("\n"):
            print(f"{parsed_args.file}: not normalised", file=sys.stderr)
            return EXIT_ERROR
        return EXIT_SUCCESS

    _write_output(write_result.text, None)
    return EXIT_SUCCESS


_COMMANDS = {
    "read": _command_read,
    "write": _command_write,
    "roundtrip": _command_roundtrip,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command-line interface.

    Parameters
    ----------
    argv : sequence of str, optional
        Arguments to parse, defaults to ``sys.argv[1:]``

    Returns
    -------
    int
        Process exit code

    """
    parser = create_parser()
    parsed_args = parser.parse_args(argv)

    configure_logging(parsed_args.log_level, log_file=parsed_args.log_file, trace_mode=parsed_args.trace)

    try:
        converter = _build_converter(parsed_args)
        return _COMMANDS[parsed_args.command](converter, parsed_args)
    except MdxBridgeError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e.message}", file=sys.stderr)
        return get_exit_code_for_exception(e)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FILE_ERROR


__all__ = ["main", "create_parser", "get_exit_code_for_exception"]
