#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdxbridge/transformers/registry.py
"""Transformer registry for ordered, bidirectional transformer sets.

This module implements the registry the serializer and the parser consult.
A registry is an ordered collection of :class:`Transformer` instances:

- Iteration yields transformers by ascending priority, ties in registration
  order, so both conversion directions see the same order
- Transformers are looked up by unique name
- Extra transformers can be discovered from installed plugins via the
  ``mdxbridge.transformers`` entry point group

Unlike a process-wide singleton, each registry is owned by the caller that
configures a conversion. Treat a registry as immutable once a conversion uses
it; use :meth:`TransformerRegistry.copy` to derive variants.

Examples
--------
Start from the built-in set and add a custom rule:

    >>> from mdxbridge.transformers import default_transformers
    >>> registry = default_transformers()
    >>> registry.register(MentionTransformer())
    >>> registry.list_transformers()[:2]
    ['code_block', 'heading']

Drop a rule:

    >>> registry.unregister("strikethrough")
    True

"""

from __future__ import annotations

import importlib.metadata
import logging
from collections.abc import Iterable, Iterator
from typing import Optional, Union

from mdxbridge.ast.nodes import Node
from mdxbridge.constants import TRANSFORMER_ENTRY_POINT_GROUP
from mdxbridge.transformers.base import BlockTransformer, InlineTransformer, Transformer
from mdxbridge.transformers.builtin import builtin_transformers

logger = logging.getLogger(__name__)


class TransformerRegistry:
    """Ordered registry of transformers.

    Parameters
    ----------
    transformers : iterable of Transformer, optional
        Initial transformers, registered in the given order

    Notes
    -----
    Registration is not synchronised. Build the registry up front, then share
    it read-only across concurrent conversions.

    """

    def __init__(self, transformers: Optional[Iterable[Transformer]] = None) -> None:
        """Initialize the registry with optional transformers."""
        self._transformers: dict[str, Transformer] = {}
        self._sequence: dict[str, int] = {}
        self._counter = 0
        self._ordered: Optional[list[Transformer]] = None
        for transformer in transformers or ():
            self.register(transformer)

    def register(self, transformer: Transformer) -> None:
        """Register a transformer.

        Parameters
        ----------
        transformer : Transformer
            Transformer to register

        Raises
        ------
        TypeError
            If ``transformer`` is not a :class:`Transformer`
        ValueError
            If the transformer has no name

        Notes
        -----
        If a transformer with the same name is already registered, it will
        be overwritten and a warning will be logged. The replacement keeps
        the registration position of the original.

        """
        if not isinstance(transformer, Transformer):
            raise TypeError(f"Expected a Transformer, got {type(transformer).__name__}")
        if not transformer.name:
            raise ValueError(f"Transformer {type(transformer).__name__} has no name")

        if transformer.name in self._transformers:
            logger.warning("Transformer '%s' already registered, overwriting", transformer.name)
        else:
            self._sequence[transformer.name] = self._counter
            self._counter += 1

        self._transformers[transformer.name] = transformer
        self._ordered = None
        logger.debug("Registered transformer: %s (priority %d)", transformer.name, transformer.priority)

    def unregister(self, name: str) -> bool:
        """Unregister a transformer.

        Parameters
        ----------
        name : str
            Transformer name to unregister

        Returns
        -------
        bool
            True if the transformer was unregistered, False if not found

        """
        if name in self._transformers:
            del self._transformers[name]
            del self._sequence[name]
            self._ordered = None
            logger.debug("Unregistered transformer: %s", name)
            return True
        return False

    def get(self, name: str) -> Transformer:
        """Get a transformer by name.

        Raises
        ------
        KeyError
            If no transformer with that name is registered

        """
        if name not in self._transformers:
            raise KeyError(f"Transformer '{name}' not registered")
        return self._transformers[name]

    def has_transformer(self, name: str) -> bool:
        """Check if a transformer is registered."""
        return name in self._transformers

    def list_transformers(self) -> list[str]:
        """List transformer names in consultation order."""
        return [transformer.name for transformer in self]

    def _sorted(self) -> list[Transformer]:
        if self._ordered is None:
            self._ordered = sorted(
                self._transformers.values(),
                key=lambda t: (t.priority, self._sequence[t.name]),
            )
        return self._ordered

    def __iter__(self) -> Iterator[Transformer]:
        return iter(self._sorted())

    def __len__(self) -> int:
        return len(self._transformers)

    def __contains__(self, name: object) -> bool:
        return name in self._transformers

    def block_transformers(self) -> list[BlockTransformer]:
        """Block transformers in consultation order."""
        return [t for t in self._sorted() if isinstance(t, BlockTransformer)]

    def inline_transformers(self) -> list[InlineTransformer]:
        """Inline transformers in consultation order."""
        return [t for t in self._sorted() if isinstance(t, InlineTransformer)]

    def transformers_for(self, node: Node) -> list[Transformer]:
        """Transformers whose export predicate accepts ``node``, in order."""
        return [t for t in self._sorted() if t.handles(node)]

    def copy(self) -> TransformerRegistry:
        """Return a new registry with the same transformers in the same order."""
        clone = TransformerRegistry()
        for name in sorted(self._sequence, key=self._sequence.__getitem__):
            clone.register(self._transformers[name])
        return clone

    def discover_plugins(self, group: str = TRANSFORMER_ENTRY_POINT_GROUP) -> int:
        """Discover and register transformers from entry points.

        Each entry point may resolve to a :class:`Transformer` instance or a
        :class:`Transformer` subclass, which is instantiated without
        arguments.

        Parameters
        ----------
        group : str, default = "mdxbridge.transformers"
            Entry point group to scan

        Returns
        -------
        int
            Number of transformers discovered and registered

        """
        discovered_count = 0

        for ep in importlib.metadata.entry_points().select(group=group):
            try:
                loaded = ep.load()
                if isinstance(loaded, type) and issubclass(loaded, Transformer):
                    loaded = loaded()

                if not isinstance(loaded, Transformer):
                    logger.warning("Entry point '%s' did not return a Transformer, skipping", ep.name)
                    continue

                self.register(loaded)
                discovered_count += 1
                logger.debug("Discovered transformer from entry point: %s", ep.name)

            except Exception as e:
                logger.warning("Failed to load transformer entry point '%s': %s", ep.name, e)
                continue

        logger.info("Discovered %d transformer(s) from entry points", discovered_count)
        return discovered_count

    def __repr__(self) -> str:
        return f"TransformerRegistry({self.list_transformers()!r})"


TransformerSet = Union[TransformerRegistry, Iterable[Transformer], None]


def default_transformers(discover_plugins: bool = False) -> TransformerRegistry:
    """Return a fresh registry holding the built-in transformers.

    Parameters
    ----------
    discover_plugins : bool, default = False
        Also register transformers from installed plugins

    """
    registry = TransformerRegistry(builtin_transformers())
    if discover_plugins:
        registry.discover_plugins()
    return registry


def as_registry(transformers: TransformerSet) -> TransformerRegistry:
    """Coerce a caller-supplied transformer set into a registry.

    ``None`` means the built-in set; a registry is used as is (not copied);
    any other iterable of transformers is registered in order.
    """
    if transformers is None:
        return default_transformers()
    if isinstance(transformers, TransformerRegistry):
        return transformers
    return TransformerRegistry(transformers)


__all__ = [
    "TransformerRegistry",
    "TransformerSet",
    "default_transformers",
    "as_registry",
]
