"""
hybrid_matrix.workspace - Workspace root, configuration and document paths.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from hybrid_matrix.config import DEFAULT_CONFIG, load_configuration


@dataclass
class Workspace:
    """
    A source tree under traceability, with its effective configuration.

    Attributes:
        root: Absolute workspace root
        config: Effective configuration (defaults merged with file and env)
    """

    root: Path
    config: dict[str, Any] = field(default_factory=lambda: copy.deepcopy(DEFAULT_CONFIG))

    @classmethod
    def from_directory(cls, directory: Path, config_path: Path | None = None) -> Workspace:
        """
        Initialize a workspace from a directory.

        Loads configuration from --config, else the nearest .hybrid-matrix.toml,
        else the defaults.
        """
        directory = Path(directory).resolve()
        return cls(root=directory, config=load_configuration(config_path, directory))

    def _paths(self) -> dict[str, Any]:
        return {**DEFAULT_CONFIG["paths"], **self.config.get("paths", {})}

    @property
    def state_dir(self) -> Path:
        return self.root / self._paths()["state_dir"]

    @property
    def store_path(self) -> Path:
        return self.state_dir / self._paths()["store"]

    @property
    def snapshot_path(self) -> Path:
        return self.state_dir / self._paths()["snapshot"]

    @property
    def task_tree_path(self) -> Path:
        return self.state_dir / self._paths()["task_tree"]

    @property
    def rationale_map_path(self) -> Path:
        return self.root / self._paths()["rationale_map"]

    def setting(self, section: str, key: str) -> Any:
        """Read one config value, falling back to the built-in default."""
        value = self.config.get(section, {}).get(key)
        if value is None:
            return DEFAULT_CONFIG.get(section, {}).get(key)
        return value

    def resolve(self, file_path: str) -> Path:
        """Resolve a target or patch path against the workspace root."""
        path = Path(file_path)
        if path.is_absolute():
            return path
        return self.root / path

    def same_file(self, a: str, b: str) -> bool:
        """True if two (absolute or relative) paths designate the same file."""
        return os.path.normpath(self.resolve(a)) == os.path.normpath(self.resolve(b))
