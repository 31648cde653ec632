"""
hybrid_matrix.config - Configuration loading and defaults
"""

from hybrid_matrix.config.defaults import CONFIG_FILENAME, DEFAULT_CONFIG
from hybrid_matrix.config.loader import (
    _apply_env_overrides,
    _try_parse_env_value,
    find_config_file,
    load_config,
    load_configuration,
    merge_configs,
    parse_toml,
)

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG",
    "_apply_env_overrides",
    "_try_parse_env_value",
    "find_config_file",
    "load_config",
    "load_configuration",
    "merge_configs",
    "parse_toml",
]
