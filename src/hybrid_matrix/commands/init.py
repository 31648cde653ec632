"""
hybrid_matrix.commands.init - Write a starter configuration file.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import tomlkit

from hybrid_matrix.config import CONFIG_FILENAME, DEFAULT_CONFIG


def run(args: argparse.Namespace) -> int:
    """Run the init command."""
    root = Path(getattr(args, "workspace", None) or Path.cwd())
    config_path = root / CONFIG_FILENAME

    if config_path.exists() and not args.force:
        print(
            f"Error: {config_path} already exists (use --force to overwrite)",
            file=sys.stderr,
        )
        return 1

    config_path.write_text(render_default_config(), encoding="utf-8")
    if not args.quiet:
        print(f"Created {config_path}")
    return 0


def _commented(value, comment: str):
    item = tomlkit.item(value)
    item.comment(comment)
    return item


def render_default_config() -> str:
    """Render the default configuration as commented TOML."""
    doc = tomlkit.document()
    doc.add(tomlkit.comment("hybrid-matrix configuration"))
    doc.add(tomlkit.comment("Environment overrides: HYBRID_MATRIX_<SECTION>_<KEY>"))
    doc.add(tomlkit.nl())

    defaults = DEFAULT_CONFIG

    paths = tomlkit.table()
    paths.add(tomlkit.comment("State documents live under <workspace>/<state_dir>/"))
    paths.add("state_dir", defaults["paths"]["state_dir"])
    paths.add("store", defaults["paths"]["store"])
    paths.add("snapshot", defaults["paths"]["snapshot"])
    paths.add("task_tree", defaults["paths"]["task_tree"])
    paths.add(
        "rationale_map",
        _commented(defaults["paths"]["rationale_map"], "relative to the workspace root"),
    )
    doc.add("paths", paths)

    validation = tomlkit.table()
    validation.add(
        "strict_drift",
        _commented(
            defaults["validation"]["strict_drift"], "fail links whose fingerprint drifted"
        ),
    )
    doc.add("validation", validation)

    simulation = tomlkit.table()
    simulation.add(
        "patch_mode", _commented(defaults["simulation"]["patch_mode"], "anchored or substring")
    )
    doc.add("simulation", simulation)

    parser = tomlkit.table()
    parser.add(
        "module", _commented(defaults["parser"]["module"], "empty uses the built-in parser")
    )
    doc.add("parser", parser)

    fingerprint = tomlkit.table()
    fingerprint.add("length", defaults["fingerprint"]["length"])
    fingerprint.add(
        "algorithm", _commented(defaults["fingerprint"]["algorithm"], "sha256, sha1 or md5")
    )
    doc.add("fingerprint", fingerprint)

    return tomlkit.dumps(doc)
