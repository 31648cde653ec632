"""
hybrid_matrix.config.loader - Find, parse and merge configuration files.

Configuration is resolved in three layers:
1. DEFAULT_CONFIG
2. The nearest .hybrid-matrix.toml (or an explicit --config path)
3. HYBRID_MATRIX_<SECTION>_<KEY> environment variables
"""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError

from hybrid_matrix.config.defaults import CONFIG_FILENAME, DEFAULT_CONFIG
from hybrid_matrix.exceptions import ConfigError

ENV_PREFIX = "HYBRID_MATRIX_"


def parse_toml(content: str) -> dict[str, Any]:
    """Parse TOML text into plain Python containers.

    Args:
        content: TOML document text

    Returns:
        Nested dict with tomlkit wrapper types unwrapped

    Raises:
        ConfigError: If the text is not valid TOML
    """
    try:
        return tomlkit.parse(content).unwrap()
    except TOMLKitError as e:
        raise ConfigError(f"Invalid TOML: {e}") from e


def find_config_file(start_dir: Path) -> Path | None:
    """Find .hybrid-matrix.toml in start_dir or any parent directory."""
    current = Path(start_dir).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if current.parent == current:
            return None
        current = current.parent


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge override into a copy of base.

    Nested dicts are merged key by key; any other value in override
    replaces the value in base.
    """
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def _try_parse_env_value(value: str) -> Any:
    """Decode an environment variable value.

    JSON arrays and objects are decoded, "true"/"false" become booleans,
    anything else (including malformed JSON) is returned unchanged.
    """
    lowered = value.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if value.strip().startswith(("[", "{")):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    return value


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply HYBRID_MATRIX_<SECTION>_<KEY> variables to config.

    The section is matched against existing top-level sections so that
    keys containing underscores (e.g. PATHS_TASK_TREE) resolve to
    ``paths.task_tree``.
    """
    result = copy.deepcopy(config)
    for name, raw in os.environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        rest = name[len(ENV_PREFIX) :].lower()
        for section in sorted(result, key=len, reverse=True):
            if rest.startswith(section + "_") and isinstance(result[section], dict):
                key = rest[len(section) + 1 :]
                result[section][key] = _try_parse_env_value(raw)
                break
    return result


def load_config(config_path: Path) -> dict[str, Any]:
    """Load a config file and merge it over the defaults.

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    try:
        content = Path(config_path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path}: {e}") from e
    user_config = parse_toml(content)
    return _apply_env_overrides(merge_configs(DEFAULT_CONFIG, user_config))


def load_configuration(config_path: Path | None, start_dir: Path) -> dict[str, Any]:
    """Resolve the effective configuration for a workspace.

    Uses config_path when given, otherwise searches upward from start_dir,
    otherwise falls back to the defaults (still honoring env overrides).
    """
    if config_path is None:
        config_path = find_config_file(start_dir)
    if config_path is not None:
        if not Path(config_path).exists():
            raise ConfigError(f"Config file not found: {config_path}")
        return load_config(config_path)
    return _apply_env_overrides(DEFAULT_CONFIG)
