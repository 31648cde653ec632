"""
hybrid_matrix.commands.sync - Re-validate every link and save the store.
"""

from __future__ import annotations

import argparse
import sys

from hybrid_matrix.commands import load_workspace
from hybrid_matrix.core.snapshot import load_snapshot
from hybrid_matrix.core.store import load_store, save_store
from hybrid_matrix.core.validator import LinkValidator


def run(args: argparse.Namespace) -> int:
    """
    Run the sync command.

    Loads the store (empty if absent) and the structural snapshot (if
    present), validates every link and writes the refreshed store back.

    Returns:
        Exit code (0 once the store is written, whatever the link states)
    """
    workspace = load_workspace(args)
    store = load_store(workspace.store_path)
    snapshot = load_snapshot(workspace.snapshot_path)

    if snapshot is None and not args.quiet:
        print(
            f"Warning: No structural snapshot at {workspace.snapshot_path}; "
            "construct checks skipped",
            file=sys.stderr,
        )

    validator = LinkValidator(
        workspace,
        snapshot=snapshot,
        strict_drift=bool(workspace.setting("validation", "strict_drift")),
    )
    report = validator.run(store)
    save_store(report.store, workspace.store_path)

    if args.verbose:
        for check in report.checks:
            print(check)
    else:
        for warning in report.warnings:
            print(f"Warning: {warning}", file=sys.stderr)

    if not args.quiet:
        broken = len({c.matrix_id for c in report.failures})
        if broken:
            print(f"{broken} link(s) BROKEN.")
        print(f"Sync Complete. Validated {len(report.store.links)} links.")
    return 0
