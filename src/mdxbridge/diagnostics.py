#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdxbridge/diagnostics.py
"""Best-effort diagnostics collected during conversion.

Conversion never aborts on malformed front matter, unknown node types, or
transformer failures. Instead each recoverable problem is appended to a
:class:`DiagnosticLog` that travels with the conversion and is returned to
the caller alongside the best-effort result, who decides whether to surface
it.

Examples
--------
    >>> log = DiagnosticLog()
    >>> log.add("frontmatter", "Skipped malformed line", line=3)
    >>> log.has_warnings
    True

"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Literal

Severity = Literal["info", "warning", "error"]


@dataclass(frozen=True)
class Diagnostic:
    """A single recoverable problem found while converting.

    Parameters
    ----------
    source : str
        Component that produced the diagnostic (``"frontmatter"``,
        ``"serializer"``, ``"parser"``, ``"tree_state"``)
    message : str
        Human-readable description
    severity : {"info", "warning", "error"}, default = "warning"
        How serious the problem is
    details : dict, default = empty dict
        Structured context (line numbers, node types, transformer names)

    """

    source: str
    message: str
    severity: Severity = "warning"
    details: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format as ``[severity] source: message``."""
        return f"[{self.severity}] {self.source}: {self.message}"


class DiagnosticLog:
    """Ordered, append-only collection of diagnostics for one conversion."""

    def __init__(self) -> None:
        self._entries: list[Diagnostic] = []

    def add(self, source: str, message: str, severity: Severity = "warning", **details: Any) -> Diagnostic:
        """Record a diagnostic and return it."""
        diagnostic = Diagnostic(source=source, message=message, severity=severity, details=dict(details))
        self._entries.append(diagnostic)
        return diagnostic

    def extend(self, diagnostics: "DiagnosticLog | list[Diagnostic]") -> None:
        """Append every diagnostic from another log or list."""
        self._entries.extend(list(diagnostics))

    def by_source(self, source: str) -> list[Diagnostic]:
        """Return diagnostics produced by one component."""
        return [d for d in self._entries if d.source == source]

    @property
    def has_warnings(self) -> bool:
        """Whether any warning or error was recorded."""
        return any(d.severity != "info" for d in self._entries)

    @property
    def has_errors(self) -> bool:
        """Whether any error was recorded."""
        return any(d.severity == "error" for d in self._entries)

    def to_list(self) -> list[Diagnostic]:
        """Return a copy of the recorded diagnostics."""
        return list(self._entries)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)
