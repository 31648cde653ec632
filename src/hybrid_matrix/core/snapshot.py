"""
hybrid_matrix.core.snapshot - Load the structural snapshot of a workspace.
"""

from __future__ import annotations

import json
from pathlib import Path

from hybrid_matrix.core.models import Node, Snapshot
from hybrid_matrix.exceptions import SnapshotFormatError
from hybrid_matrix.workspace import Workspace


def load_snapshot(path: Path) -> Snapshot | None:
    """Load a snapshot document; None when the file does not exist.

    Raises:
        SnapshotFormatError: If the file exists but cannot be parsed
    """
    path = Path(path)
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SnapshotFormatError(f"Cannot read snapshot {path}: {e}") from e
    return Snapshot.from_dict(data)


def find_file_node(snapshot: Snapshot, workspace: Workspace, file_path: str) -> Node | None:
    """Find the node whose id or filePath designates file_path."""
    for node in snapshot.iter_nodes():
        if node.id == file_path or node.file_path == file_path:
            return node
    for node in snapshot.iter_nodes():
        if workspace.same_file(node.file_path, file_path):
            return node
    return None
