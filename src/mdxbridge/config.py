#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdxbridge/config.py
"""Configuration file discovery and loading.

This module finds mdxbridge configuration files, loads them from TOML, YAML
or JSON, merges them, and turns the result into :class:`ConversionOptions`.

A configuration file mirrors the options dataclasses::

    # .mdxbridge.toml
    strict = false

    [frontmatter]
    format = "yaml"

    [renderer]
    bullet = "*"
    thematic_break = "***"

    [parser]
    max_inline_depth = 16

The same table can live under ``[tool.mdxbridge]`` in ``pyproject.toml``.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found,unused-ignore]

import yaml

from mdxbridge.constants import CONFIG_FILENAMES, PYPROJECT_SECTION
from mdxbridge.exceptions import ConfigurationError
from mdxbridge.options import (
    CloneFrozenMixin,
    ConversionOptions,
    FrontmatterOptions,
    MarkdownParserOptions,
    MarkdownRendererOptions,
)

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "MDXBRIDGE_CONFIG"

_SECTIONS: dict[str, type[CloneFrozenMixin]] = {
    "frontmatter": FrontmatterOptions,
    "renderer": MarkdownRendererOptions,
    "parser": MarkdownParserOptions,
}


def _load_pyproject_section(pyproject_path: Path) -> Dict[str, Any]:
    """Load the ``[tool.mdxbridge]`` table from a pyproject.toml file.

    Returns an empty dict when the table is absent.

    Raises
    ------
    ConfigurationError
        If the file is not valid TOML or the section is not a table

    """
    try:
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(
            f"Invalid TOML in {pyproject_path}: {e}", parameter_name="config", original_error=e
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Error reading {pyproject_path}: {e}", parameter_name="config", original_error=e
        ) from e

    section = data.get("tool", {}).get(PYPROJECT_SECTION)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigurationError(
            f"[tool.{PYPROJECT_SECTION}] in {pyproject_path} must be a table, got {type(section).__name__}",
            parameter_name="config",
        )
    return section


def find_config_in_parents(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Find a configuration file by walking up from ``start_dir``.

    Each directory is checked for ``.mdxbridge.toml``, ``.mdxbridge.yaml``,
    ``.mdxbridge.yml`` and ``.mdxbridge.json``, then for a ``pyproject.toml``
    with a ``[tool.mdxbridge]`` table. The first match wins.

    Parameters
    ----------
    start_dir : Path, optional
        Directory to start from, defaults to the current working directory

    Returns
    -------
    Path or None
        Path to the first config file found

    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        for filename in CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.is_file():
                return config_path

        pyproject_path = current / "pyproject.toml"
        if pyproject_path.is_file():
            try:
                if _load_pyproject_section(pyproject_path):
                    return pyproject_path
            except ConfigurationError as e:
                logger.debug("Ignoring unreadable %s: %s", pyproject_path, e)

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def discover_config_file(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Discover a configuration file in the standard locations.

    Searches parent directories first (see :func:`find_config_in_parents`),
    then the user's home directory.
    """
    found = find_config_in_parents(start_dir)
    if found:
        return found

    home = Path.home()
    for filename in CONFIG_FILENAMES:
        config_path = home / filename
        if config_path.is_file():
            return config_path
    return None


def load_config_file(config_path: Path | str) -> Dict[str, Any]:
    """Load configuration from a TOML, YAML, JSON or pyproject.toml file.

    The format is chosen from the file name and extension.

    Parameters
    ----------
    config_path : Path or str
        Path to the configuration file

    Returns
    -------
    dict
        Raw configuration mapping

    Raises
    ------
    ConfigurationError
        If the file is missing, unreadable, malformed or of an unsupported type

    """
    config_path = Path(config_path)
    if not config_path.is_file():
        raise ConfigurationError(f"Configuration file does not exist: {config_path}", parameter_name="config")

    filename = config_path.name.lower()
    ext = config_path.suffix.lower()

    if filename == "pyproject.toml":
        config = _load_pyproject_section(config_path)
    elif ext == ".toml":
        config = _load_structured(config_path, "TOML")
    elif ext in (".yaml", ".yml"):
        config = _load_structured(config_path, "YAML")
    elif ext == ".json":
        config = _load_structured(config_path, "JSON")
    else:
        raise ConfigurationError(
            f"Unsupported config file format: {ext}. Use .toml, .yaml or .json", parameter_name="config"
        )

    logger.debug("Loaded configuration from %s", config_path)
    return config


def _load_structured(config_path: Path, kind: str) -> Dict[str, Any]:
    try:
        if kind == "TOML":
            with open(config_path, "rb") as f:
                config = tomllib.load(f)
        else:
            with open(config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f) if kind == "YAML" else json.load(f)
    except (tomllib.TOMLDecodeError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(
            f"Invalid {kind} in config file {config_path}: {e}", parameter_name="config", original_error=e
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Error reading config file {config_path}: {e}", parameter_name="config", original_error=e
        ) from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigurationError(
            f"{kind} config file must contain a mapping, got {type(config).__name__}", parameter_name="config"
        )
    return config


def merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge two configuration mappings; ``override`` wins on conflicts.

    Examples
    --------
        >>> merge_configs({"renderer": {"bullet": "*"}}, {"renderer": {"escape_special": False}})
        {'renderer': {'bullet': '*', 'escape_special': False}}

    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value
    return result


def load_config_with_priority(explicit_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from the highest-priority source available.

    Priority order:

    1. ``explicit_path`` (the CLI ``--config`` flag)
    2. The ``MDXBRIDGE_CONFIG`` environment variable
    3. Auto-discovery (:func:`discover_config_file`)

    Returns an empty dict when nothing is found.
    """
    if explicit_path:
        return load_config_file(explicit_path)

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return load_config_file(env_path)

    discovered = discover_config_file()
    if discovered:
        return load_config_file(discovered)

    return {}


def _build_section(name: str, current: CloneFrozenMixin, values: Any) -> CloneFrozenMixin:
    if not isinstance(values, dict):
        raise ConfigurationError(
            f"Config section '{name}' must be a mapping, got {type(values).__name__}", parameter_name=name
        )
    unknown = sorted(set(values) - current.field_names())
    if unknown:
        raise ConfigurationError(
            f"Unknown option(s) in section '{name}': {', '.join(unknown)}",
            parameter_name=name,
            parameter_value=unknown,
        )
    try:
        return current.create_updated(**values)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Invalid value in section '{name}': {e}", parameter_name=name, original_error=e
        ) from e


def options_from_config(config: Dict[str, Any], base: Optional[ConversionOptions] = None) -> ConversionOptions:
    """Build conversion options from a configuration mapping.

    Parameters
    ----------
    config : dict
        Mapping with optional ``frontmatter``, ``renderer`` and ``parser``
        sections and a top-level ``strict`` flag
    base : ConversionOptions, optional
        Options the configuration is applied on top of

    Returns
    -------
    ConversionOptions
        Resulting options

    Raises
    ------
    ConfigurationError
        If the mapping contains unknown keys or invalid values

    """
    options = base or ConversionOptions()
    unknown = sorted(set(config) - set(_SECTIONS) - {"strict"})
    if unknown:
        raise ConfigurationError(
            f"Unknown configuration key(s): {', '.join(unknown)}", parameter_name="config", parameter_value=unknown
        )

    updates: dict[str, Any] = {
        name: _build_section(name, getattr(options, name), config[name]) for name in _SECTIONS if name in config
    }

    if "strict" in config:
        if not isinstance(config["strict"], bool):
            raise ConfigurationError("'strict' must be a boolean", parameter_name="strict")
        updates["strict"] = config["strict"]

    return options.create_updated(**updates) if updates else options


__all__ = [
    "CONFIG_ENV_VAR",
    "find_config_in_parents",
    "discover_config_file",
    "load_config_file",
    "merge_configs",
    "load_config_with_priority",
    "options_from_config",
]
