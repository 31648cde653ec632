"""
hybrid_matrix.commands - CLI command implementations
"""

from __future__ import annotations

import argparse
from pathlib import Path

from hybrid_matrix.workspace import Workspace

__all__ = [
    "context_cmd",
    "init",
    "inject_cmd",
    "load_workspace",
    "report_cmd",
    "simulate_cmd",
    "sync",
]


def load_workspace(args: argparse.Namespace) -> Workspace:
    """Build the workspace from --workspace (default: cwd) and --config."""
    root = getattr(args, "workspace", None) or Path.cwd()
    return Workspace.from_directory(root, getattr(args, "config", None))
