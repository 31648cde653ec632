"""
hybrid_matrix.cli - Command-line interface.

Main entry point for the hybrid-matrix CLI tool.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from hybrid_matrix import __version__
from hybrid_matrix.commands import (
    context_cmd,
    init,
    inject_cmd,
    report_cmd,
    simulate_cmd,
    sync,
)
from hybrid_matrix.simulation import PatchMode


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="hybrid-matrix",
        description="Traceability links between requirements and code",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  hybrid-matrix sync                    # Re-validate every link
  hybrid-matrix inject                  # Tag the targets of broken links
  git diff | hybrid-matrix simulate -   # Would this patch break a link?
  hybrid-matrix context REQ-012         # Why/what/where for one requirement
  hybrid-matrix report                  # Integrity score

Configuration:
  hybrid-matrix init                    # Create .hybrid-matrix.toml here

For detailed command help: hybrid-matrix <command> --help
        """,
    )

    # Global options
    parser.add_argument(
        "--version",
        action="version",
        version=f"hybrid-matrix {__version__}",
    )
    parser.add_argument(
        "-w",
        "--workspace",
        type=Path,
        help="Workspace root (default: current directory)",
        metavar="ROOT",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
        metavar="PATH",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-error output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "sync",
        help="Validate every link and save the refreshed store",
    )

    subparsers.add_parser(
        "inject",
        help="Insert tags into the targets of BROKEN links",
    )

    simulate_parser = subparsers.add_parser(
        "simulate",
        help="Check whether a patch would break a tracked link",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit status:
  0  SAFE_TO_APPLY
  1  REJECTED, or the patch does not apply to the tracked files
""",
    )
    simulate_parser.add_argument(
        "patch",
        nargs="?",
        default="-",
        help="Unified diff file ('-' or omitted reads stdin)",
        metavar="PATCH",
    )
    simulate_parser.add_argument(
        "--mode",
        choices=[m.value for m in PatchMode],
        help="Hunk placement (default: simulation.patch_mode from config)",
    )
    simulate_parser.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Output the verdict as JSON",
    )

    context_parser = subparsers.add_parser(
        "context",
        help="Print why/what/where context for a requirement or task",
    )
    context_parser.add_argument(
        "node_id",
        help="Requirement or task identifier",
        metavar="NODE_ID",
    )

    report_parser = subparsers.add_parser(
        "report",
        help="Show link health and the integrity score",
    )
    report_parser.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Output the report as JSON",
    )

    init_parser = subparsers.add_parser(
        "init",
        help="Create .hybrid-matrix.toml configuration",
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite existing configuration",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()

    # Enable shell tab-completion if argcomplete is installed
    # Install with: pip install hybrid-matrix[completion]
    try:
        import argcomplete

        argcomplete.autocomplete(parser)
    except ImportError:
        pass

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        if args.command == "sync":
            return sync.run(args)
        elif args.command == "inject":
            return inject_cmd.run(args)
        elif args.command == "simulate":
            return simulate_cmd.run(args)
        elif args.command == "context":
            return context_cmd.run(args)
        elif args.command == "report":
            return report_cmd.run(args)
        elif args.command == "init":
            return init.run(args)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled.", file=sys.stderr)
        return 130
    except Exception as e:
        if args.verbose:
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
