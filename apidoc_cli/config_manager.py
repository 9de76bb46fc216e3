"""Configuration manager for apidoc using TOML files."""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import toml

from .config import CONFIG_FILE, CONFIG_SECTION, DEFAULT_CONFIG, ExtractionConfig
from .errors import ConfigError

logger = logging.getLogger(__name__)

_SET_KEYS = {"ignore_files", "not_errors"}


def load_full_config(config_file: Optional[Path] = None) -> Dict[str, Any]:
    """Load the entire TOML config (all sections).

    A missing file yields an empty dict; a malformed one is fatal.
    """
    path = config_file or CONFIG_FILE
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            return toml.load(f)
    except toml.TomlDecodeError as exc:
        raise ConfigError(f"Invalid TOML: {exc}", str(path)) from exc


def load_config(config_file: Optional[Path] = None) -> ExtractionConfig:
    """Build an :class:`ExtractionConfig` from the ``[apidoc]`` table.

    Returns:
        The defaults overridden by every recognised key of the table.
    """
    section = load_full_config(config_file).get(CONFIG_SECTION, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{CONFIG_SECTION}] must be a table", str(config_file or CONFIG_FILE))
    return config_from_mapping(section)


def config_from_mapping(values: Dict[str, Any]) -> ExtractionConfig:
    known = {f.name for f in dataclasses.fields(ExtractionConfig)}
    overrides: Dict[str, Any] = {}
    for key, value in values.items():
        if key not in known:
            logger.warning("Ignoring unknown config key '%s'", key)
            continue
        if key in _SET_KEYS:
            if not isinstance(value, list):
                raise ConfigError(f"'{key}' must be a list, got {type(value).__name__}")
            value = frozenset(value)
        overrides[key] = value
    if not overrides:
        return DEFAULT_CONFIG
    logger.debug("Config overrides: %s", ", ".join(sorted(overrides)))
    return dataclasses.replace(DEFAULT_CONFIG, **overrides)
