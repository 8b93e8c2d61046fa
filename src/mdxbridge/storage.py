#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdxbridge/storage.py
"""File storage for markup files.

The conversion engine only ever sees whole in-memory strings. Reading and
writing the markup file is delegated to a storage object implementing the
small :class:`FileStorage` protocol, so hosts can substitute their own
(object stores, in-memory fakes in tests).

:class:`LocalFileStorage` is the default implementation. It keeps every file
below one base directory and writes atomically: the text goes to a temporary
file in the target directory, is flushed to disk, and then replaces the
target with :func:`os.replace`. A reader therefore sees either the previous
file or the new one, never a partial write.

"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol, Union, runtime_checkable

from mdxbridge.exceptions import StorageError

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


@runtime_checkable
class FileStorage(Protocol):
    """Protocol for reading and writing UTF-8 markup text."""

    def read_text(self, path: PathLike) -> str:
        """Return the whole text stored at ``path``."""
        ...

    def write_text(self, path: PathLike, text: str) -> None:
        """Replace the text stored at ``path``."""
        ...


class LocalFileStorage:
    """Markup files on the local filesystem below a base directory.

    Parameters
    ----------
    base_path : str or PathLike
        Directory that every relative path is resolved against
    encoding : str, default = "utf-8"
        Text encoding for reads and writes

    Examples
    --------
        >>> storage = LocalFileStorage("docs")
        >>> storage.write_text("guide/intro.md", "# Intro")
        >>> storage.read_text("guide/intro.md")
        '# Intro'

    """

    def __init__(self, base_path: PathLike, encoding: str = "utf-8") -> None:
        """Initialize storage rooted at ``base_path``."""
        self.base_path = Path(base_path).resolve()
        self.encoding = encoding

    def resolve(self, path: PathLike) -> Path:
        """Resolve ``path`` against the base directory.

        Raises
        ------
        StorageError
            If the resolved path lies outside the base directory

        """
        candidate = (self.base_path / Path(path)).resolve()
        if candidate != self.base_path and self.base_path not in candidate.parents:
            raise StorageError(f"Path escapes the storage directory: {path}", path=str(path))
        return candidate

    def exists(self, path: PathLike) -> bool:
        """Whether a file exists at ``path``."""
        return self.resolve(path).is_file()

    def read_text(self, path: PathLike) -> str:
        """Read a markup file.

        Line endings are returned as stored; the parser normalises them.

        Raises
        ------
        StorageError
            If the file cannot be read or decoded

        """
        target = self.resolve(path)
        try:
            with open(target, "r", encoding=self.encoding, newline="") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Could not read {target}: {e}", path=str(target), original_error=e) from e
        logger.debug("Read %d characters from %s", len(content), target)
        return content

    def write_text(self, path: PathLike, text: str) -> None:
        """Atomically write a markup file, creating parent directories.

        Raises
        ------
        StorageError
            If the file cannot be written

        """
        target = self.resolve(path)
        temp_path: str | None = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding=self.encoding,
                newline="",
                dir=target.parent,
                prefix=f".{target.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                temp_path = tmp.name
                tmp.write(text)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(temp_path, target)
            temp_path = None
        except (OSError, UnicodeEncodeError) as e:
            raise StorageError(f"Could not write {target}: {e}", path=str(target), original_error=e) from e
        finally:
            if temp_path is not None:
                try:
                    os.unlink(temp_path)
                except OSError:
                    logger.debug("Could not remove temporary file %s", temp_path)
        logger.debug("Wrote %d characters to %s", len(text), target)

    def __repr__(self) -> str:
        return f"LocalFileStorage({str(self.base_path)!r})"


__all__ = ["FileStorage", "LocalFileStorage", "PathLike"]
