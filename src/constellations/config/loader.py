"""
constellations.config.loader - Configuration loading and merging.

Configuration is read from ``.constellations.toml`` with tomlkit,
deep-merged over DEFAULT_CONFIG and then overridden from environment
variables named ``CONSTELLATIONS_<SECTION>_<KEY>``.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import ParseError

from constellations.config.defaults import DEFAULT_CONFIG
from constellations.exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".constellations.toml"
ENV_PREFIX = "CONSTELLATIONS_"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def parse_toml_document(content: str) -> tomlkit.TOMLDocument:
    """Parse TOML into a tomlkit document (preserves comments for round-trips)."""
    return tomlkit.parse(content)


def parse_toml(content: str) -> dict[str, Any]:
    """Parse TOML into plain Python dicts and lists."""
    return parse_toml_document(content).unwrap()


def find_config_file(start_dir: Path) -> Path | None:
    """Find .constellations.toml in start_dir or any parent directory.

    Args:
        start_dir: Directory to start searching from.

    Returns:
        Path to the config file, or None if not found.
    """
    current = start_dir.resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if current == current.parent:
            return None
        current = current.parent


def merge_configs(defaults: dict[str, Any], user: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge user config over defaults.

    Nested dicts are merged key by key; any other value in ``user``
    replaces the default outright. Neither input is modified.
    """
    merged = copy.deepcopy(defaults)
    for key, value in user.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _try_parse_env_value(value: str) -> Any:
    """Parse an environment value into a bool, number, list or dict when possible.

    Malformed JSON falls back to the raw string.
    """
    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if value[:1] in ("[", "{"):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    try:
        return int(value)
    except ValueError:
        return value


def apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply CONSTELLATIONS_<SECTION>_<KEY> environment overrides.

    The first underscore-separated part after the prefix names the
    section; the remainder (lower-cased) names the key, so
    CONSTELLATIONS_REPLAY_INTERVAL_MS sets replay.interval_ms.
    """
    for env_name, raw_value in os.environ.items():
        if not env_name.startswith(ENV_PREFIX):
            continue
        rest = env_name[len(ENV_PREFIX) :].lower()
        section, _, key = rest.partition("_")
        if not section or not key:
            continue
        value = _try_parse_env_value(raw_value)
        section_dict = config.setdefault(section, {})
        if isinstance(section_dict, dict):
            section_dict[key] = value
            logger.debug("Config override from %s: %s.%s=%r", env_name, section, key, value)
    return config


def validate_config(config: dict[str, Any]) -> list[str]:
    """Validate a merged config.

    Returns:
        List of error messages (empty if valid).
    """
    errors: list[str] = []

    palette = config.get("palette", {})
    nodes = palette.get("nodes")
    if not isinstance(nodes, list) or not nodes:
        errors.append("palette.nodes must be a non-empty list of colors")
    if not isinstance(palette.get("edges", {}), dict):
        errors.append("palette.edges must be a table of edge type -> color")

    canonical = config.get("ordering", {}).get("canonical_types")
    if not isinstance(canonical, list) or not all(isinstance(t, str) for t in canonical):
        errors.append("ordering.canonical_types must be a list of strings")

    replay = config.get("replay", {})
    bounds = {}
    for key in ("interval_ms", "min_interval_ms", "max_interval_ms"):
        value = replay.get(key)
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            errors.append(f"replay.{key} must be a positive integer")
        else:
            bounds[key] = value
    if len(bounds) == 3 and not (
        bounds["min_interval_ms"] <= bounds["interval_ms"] <= bounds["max_interval_ms"]
    ):
        errors.append("replay.interval_ms must lie between min_interval_ms and max_interval_ms")

    level = str(config.get("logging", {}).get("level", "WARNING")).upper()
    if level not in _LOG_LEVELS:
        errors.append(f"logging.level must be one of {sorted(_LOG_LEVELS)}")

    return errors


def load_config(config_path: Path) -> dict[str, Any]:
    """Load a config file and merge it over the defaults.

    Args:
        config_path: Path to a .constellations.toml file.

    Returns:
        Merged configuration dict (environment overrides not applied).

    Raises:
        ConfigError: If the file cannot be read or is not valid TOML.
    """
    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path}: {e}") from e
    try:
        user_config = parse_toml(content)
    except ParseError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e
    return merge_configs(DEFAULT_CONFIG, user_config)


def get_config(config_path: Path | None = None, start_dir: Path | None = None) -> dict[str, Any]:
    """Resolve, load, override and validate configuration.

    Args:
        config_path: Explicit config file (optional).
        start_dir: Directory to search from when config_path is None
            (defaults to cwd).

    Returns:
        The effective configuration.

    Raises:
        ConfigError: If the config is unreadable or fails validation.
    """
    if config_path is None:
        config_path = find_config_file(start_dir or Path.cwd())

    if config_path is not None:
        config = load_config(config_path)
        logger.debug("Loaded config from %s", config_path)
    else:
        config = copy.deepcopy(DEFAULT_CONFIG)

    config = apply_env_overrides(config)
    errors = validate_config(config)
    if errors:
        raise ConfigError("Invalid configuration: " + "; ".join(errors))
    return config
