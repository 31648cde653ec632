"""
hybrid_matrix.commands.inject_cmd - Tag the targets of broken links.
"""

from __future__ import annotations

import argparse
import sys

from hybrid_matrix.commands import load_workspace
from hybrid_matrix.core.models import LinkStatus
from hybrid_matrix.core.store import load_store
from hybrid_matrix.injector import TagInjector


def run(args: argparse.Namespace) -> int:
    """Run the inject command.

    Only links the last sync left BROKEN are touched; run sync again
    afterwards to refresh their status.
    """
    workspace = load_workspace(args)
    if not workspace.store_path.exists():
        print(
            f"Error: No link store at {workspace.store_path}. Run 'hybrid-matrix sync' first.",
            file=sys.stderr,
        )
        return 1

    store = load_store(workspace.store_path)
    injector = TagInjector(workspace.root)

    tagged = 0
    for link in store.links:
        if link.status is not LinkStatus.BROKEN:
            continue
        for target in link.targets:
            if injector.inject(target, link.sources):
                tagged += 1
                if args.verbose:
                    print(f"  + {link.matrix_id} {target.describe()}")
            else:
                print(
                    f"Warning: Could not tag {target.describe()} ({link.matrix_id})",
                    file=sys.stderr,
                )

    if not args.quiet:
        print(f"Injection Complete. Tagged {tagged} targets.")
    return 0
