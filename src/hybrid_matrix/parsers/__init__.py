"""Structural parser protocol and loading.

The validator, simulator and context aggregator never parse source code
themselves. They consume a StructuralParser, which turns source text into a
Node tree with per-construct fingerprints and can slice out the source of
a named construct.

A parser is either the built-in SourceStructureParser or a custom one
loaded from a module path (configured as ``parser.module``).
"""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from hybrid_matrix.exceptions import ParserLoadError

if TYPE_CHECKING:
    from hybrid_matrix.core.models import Node


@runtime_checkable
class StructuralParser(Protocol):
    """Protocol for structural parsers (built-in and custom).

    Fingerprints produced by one parser are only comparable with
    fingerprints produced by the same parser.
    """

    def parse(self, content: str, module_name: str, file_path: str, kind: str = "file") -> Node:
        """Parse source text into a Node tree.

        Args:
            content: File content to parse.
            module_name: Module name of the file (its stem).
            file_path: Path identity of the file.
            kind: Unit kind; only "file" is defined.

        Returns:
            Root Node for the file.
        """
        ...

    def extract_construct(self, content: str, construct_name: str) -> str | None:
        """Return the literal source of a named construct, or None."""
        ...


def load_parser(module_path: str) -> StructuralParser:
    """Load a parser from a module path.

    The module should have a ``create_parser()`` function that returns a
    parser, or a ``Parser`` class that can be instantiated.

    Args:
        module_path: Dotted module path (e.g., "mytools.rcp_adapter").

    Raises:
        ParserLoadError: If the module cannot be imported or exposes no parser.
    """
    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise ParserLoadError(f"Cannot import parser module {module_path}: {e}") from e

    if hasattr(module, "create_parser"):
        parser = module.create_parser()
    elif hasattr(module, "Parser"):
        parser = module.Parser()
    else:
        raise ParserLoadError(f"{module_path} defines neither create_parser() nor Parser")

    if not isinstance(parser, StructuralParser):
        raise ParserLoadError(f"{module_path} did not produce a StructuralParser")
    return parser


def get_parser(config: dict[str, Any] | None = None) -> StructuralParser:
    """Build the parser selected by configuration.

    Uses ``parser.module`` when set, otherwise the built-in parser
    configured from the ``fingerprint`` section.
    """
    from hybrid_matrix.parsers.source import SourceStructureParser

    config = config or {}
    module_path = config.get("parser", {}).get("module") or ""
    if module_path:
        return load_parser(module_path)

    fingerprint = config.get("fingerprint", {})
    return SourceStructureParser(
        fingerprint_length=fingerprint.get("length", 16),
        fingerprint_algorithm=fingerprint.get("algorithm", "sha256"),
    )


__all__ = ["StructuralParser", "get_parser", "load_parser"]
