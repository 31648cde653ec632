"""
hybrid_matrix.config.defaults - Default configuration values.
"""

CONFIG_FILENAME = ".hybrid-matrix.toml"

DEFAULT_CONFIG = {
    "paths": {
        # State documents live under <workspace>/<state_dir>/
        "state_dir": ".hybrid",
        "store": "hybrid-matrix.json",
        "snapshot": "hybrid-rcp.json",
        "task_tree": "hybrid-tree.json",
        # Relative to the workspace root, not the state dir
        "rationale_map": "genesis-map.json",
    },
    "validation": {
        "strict_drift": False,
    },
    "simulation": {
        "patch_mode": "anchored",
    },
    "parser": {
        "module": "",
    },
    "fingerprint": {
        "length": 16,
        "algorithm": "sha256",
    },
}
