"""
hybrid_matrix.context - Aggregate why/what/where context for a node.

Pulls together, for one requirement or task identifier:
- why: label and edge rationales from the rationale map
- what: the task's checklist (or label) from the task tree
- where: every code target linked to the identifier in the store
- a source excerpt of the first linked construct

Aggregation is best effort: any failure yields None and a warning on
stderr, never an exception.
"""

from __future__ import annotations

import json
import sys
from dataclasses import asdict, dataclass, field
from typing import Any

from hybrid_matrix.core.store import load_store
from hybrid_matrix.exceptions import DocumentFormatError
from hybrid_matrix.parsers import StructuralParser, get_parser
from hybrid_matrix.workspace import Workspace

UNKNOWN_RATIONALE = "Unknown"


@dataclass
class CodeLocation:
    """A linked code target: file plus optional construct name."""

    file: str
    construct: str | None = None


@dataclass
class AIContext:
    """
    Aggregated context for one node.

    Attributes:
        node_id: The requirement or task identifier
        why: Label and rationale text, or "Unknown"
        what: Checklist items (or the task label)
        where: Linked code locations, in store order
        code_snippet: Source of the first linked construct, if available
    """

    node_id: str
    why: str = UNKNOWN_RATIONALE
    what: list[str] = field(default_factory=list)
    where: list[CodeLocation] = field(default_factory=list)
    code_snippet: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _read_json(path) -> Any | None:
    if not path.exists():
        return None
    return json.loads(path.read_text(encoding="utf-8"))


def _node_list(document: Any, *keys: str) -> list[Any]:
    if not isinstance(document, dict):
        raise DocumentFormatError("expected a JSON object at top level")
    for key in keys:
        value = document.get(key)
        if value is not None:
            if not isinstance(value, list):
                raise DocumentFormatError(f"'{key}' must be a list")
            return value
    return []


def find_task(nodes: list[Any], node_id: str) -> dict[str, Any] | None:
    """Depth-first search for a task with the given id through children."""
    for node in nodes:
        if not isinstance(node, dict):
            continue
        if node.get("id") == node_id:
            return node
        found = find_task(node.get("children") or [], node_id)
        if found is not None:
            return found
    return None


def collect_rationale(workspace: Workspace, node_id: str) -> str:
    """Label of the node in the rationale map plus rationales of touching edges."""
    document = _read_json(workspace.rationale_map_path)
    if document is None:
        return UNKNOWN_RATIONALE

    nodes = _node_list(document, "nodes")
    node = next((n for n in nodes if isinstance(n, dict) and n.get("id") == node_id), None)
    if node is None:
        return UNKNOWN_RATIONALE

    why = str(node.get("label", node_id))
    rationales = [
        str(edge["rationale"])
        for edge in _node_list(document, "edges")
        if isinstance(edge, dict)
        and node_id in (edge.get("source"), edge.get("target"))
        and edge.get("rationale")
    ]
    if rationales:
        why += " | Rationale: " + "; ".join(rationales)
    return why


def collect_tasks(workspace: Workspace, node_id: str) -> list[str]:
    """Checklist (or label) of the task with this id in the task tree."""
    document = _read_json(workspace.task_tree_path)
    if document is None:
        return []
    task = find_task(_node_list(document, "nodes", "manifest"), node_id)
    if task is None:
        return []
    checklist = task.get("checklist")
    if checklist is not None:
        return [str(item) for item in checklist]
    return [str(task.get("label", node_id))]


def extract_context(
    workspace: Workspace,
    node_id: str,
    parser: StructuralParser | None = None,
) -> AIContext | None:
    """Aggregate context for node_id, or None if anything goes wrong."""
    try:
        context = AIContext(
            node_id=node_id,
            why=collect_rationale(workspace, node_id),
            what=collect_tasks(workspace, node_id),
        )

        store = load_store(workspace.store_path)
        context.where = [
            CodeLocation(file=target.file_path, construct=target.construct_name)
            for link in store.links_for_source(node_id)
            for target in link.targets
        ]

        if context.where:
            first = context.where[0]
            path = workspace.resolve(first.file)
            if first.construct and path.is_file():
                parser = parser or get_parser(workspace.config)
                content = path.read_text(encoding="utf-8")
                context.code_snippet = parser.extract_construct(content, first.construct)

        return context
    except Exception as e:
        print(f"Warning: Could not extract context for {node_id}: {e}", file=sys.stderr)
        return None
