"""
hybrid_matrix.commands.report_cmd - Summarize link health.
"""

from __future__ import annotations

import argparse
import json

from hybrid_matrix.commands import load_workspace
from hybrid_matrix.core.report import HealthReport
from hybrid_matrix.core.store import load_store


def run(args: argparse.Namespace) -> int:
    """Run the report command.

    Reports the statuses recorded by the last sync; it does not revalidate.
    """
    workspace = load_workspace(args)
    report = HealthReport.from_store(load_store(workspace.store_path))

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(report)
    return 0
