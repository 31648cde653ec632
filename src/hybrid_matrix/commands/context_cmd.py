"""
hybrid_matrix.commands.context_cmd - Print aggregated context for a node.
"""

from __future__ import annotations

import argparse
import json
import sys

from hybrid_matrix.commands import load_workspace
from hybrid_matrix.context import extract_context


def run(args: argparse.Namespace) -> int:
    """Run the context command."""
    workspace = load_workspace(args)
    context = extract_context(workspace, args.node_id)
    if context is None:
        print(f"Error: No context available for {args.node_id}", file=sys.stderr)
        return 1
    print(json.dumps(context.to_dict(), indent=2, ensure_ascii=False))
    return 0
