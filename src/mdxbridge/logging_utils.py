"""Logging setup for the mdxbridge command line.

Records are shown at the level chosen with ``--log-level``. ``--trace`` opens
only the ``mdxbridge`` loggers down to DEBUG, so transformer fallbacks and
skipped front matter lines show up with their logger name and line number
while PyYAML and other libraries stay at the chosen level.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "mdxbridge"

_PLAIN_FORMAT = "mdxbridge: %(levelname)s: %(message)s"
_TRACE_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s:%(lineno)d] %(message)s"
_TRACE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_log_level(log_level: int | str) -> int:
    """Translate a level name or number into a numeric logging level.

    Unknown names resolve to ``logging.INFO``.
    """
    if isinstance(log_level, int):
        return log_level
    return getattr(logging, str(log_level).upper(), logging.INFO)


def configure_logging(
    log_level: int | str,
    log_file: Optional[str] = None,
    trace_mode: bool = False,
) -> logging.Logger:
    """Install the command line's log handlers on the root logger.

    Parameters
    ----------
    log_level : int | str
        Numeric logging level or string name (e.g., "INFO").
    log_file : str, optional
        Path of a file that receives the same records as stderr.
    trace_mode : bool, default False
        When true, the ``mdxbridge`` loggers emit DEBUG records, formatted
        with a timestamp, logger name and line number. Other loggers keep
        ``log_level``.

    Returns
    -------
    logging.Logger
        The ``mdxbridge`` package logger.

    """
    resolved_level = resolve_log_level(log_level)
    handler_level = logging.DEBUG if trace_mode else resolved_level

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved_level)
    root_logger.handlers.clear()

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(logging.DEBUG if trace_mode else logging.NOTSET)

    if trace_mode:
        formatter = logging.Formatter(_TRACE_FORMAT, datefmt=_TRACE_DATE_FORMAT)
    else:
        formatter = logging.Formatter(_PLAIN_FORMAT)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(handler_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as exc:
            package_logger.warning("Could not create log file %s: %s", log_file, exc)
        else:
            file_handler.setLevel(handler_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
            package_logger.info("Logging to file: %s", log_file)

    return package_logger
