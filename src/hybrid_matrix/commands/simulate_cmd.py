"""
hybrid_matrix.commands.simulate_cmd - Check a patch against tracked links.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from hybrid_matrix.commands import load_workspace
from hybrid_matrix.simulation import SimulationStatus, simulate


def run(args: argparse.Namespace) -> int:
    """
    Run the simulate command.

    Returns:
        Exit code (0 when the patch is safe to apply, 1 when it is rejected
        or cannot be read)
    """
    patch_text = _read_patch(args.patch)
    if patch_text is None:
        return 1

    workspace = load_workspace(args)
    result = simulate(workspace, patch_text, mode=args.mode)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    elif not args.quiet or result.violations:
        print(f"Simulation: {result.status.value}")
        for violation in result.violations:
            print(f"  ✗ {violation.matrix_id}: {violation}")

    return 0 if result.status is SimulationStatus.SAFE_TO_APPLY else 1


def _read_patch(source: str | None) -> str | None:
    if source is None or source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.is_file():
        print(f"Error: Patch file not found: {path}", file=sys.stderr)
        return None
    return path.read_text(encoding="utf-8")
