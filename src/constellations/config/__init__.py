"""
constellations.config - Configuration loading and defaults
"""

from constellations.config.defaults import DEFAULT_CONFIG
from constellations.config.loader import (
    apply_env_overrides,
    find_config_file,
    get_config,
    load_config,
    merge_configs,
    parse_toml,
    parse_toml_document,
    validate_config,
)

__all__ = [
    "DEFAULT_CONFIG",
    "apply_env_overrides",
    "find_config_file",
    "get_config",
    "load_config",
    "merge_configs",
    "parse_toml",
    "parse_toml_document",
    "validate_config",
]
