"""Impact simulation - would this patch break a tracked link?

The simulator applies a patch in memory, re-parses every patched file
that a link tracks, and reports three kinds of violation:

- a tracked construct disappears (deleted or renamed),
- a tracked construct's fingerprint changes although it matched the
  recorded fingerprint before the patch,
- a tracked file loses its tag.

It never writes to the workspace, whatever the outcome.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from hybrid_matrix.core.models import Link, Node, Store, Target
from hybrid_matrix.core.store import load_store
from hybrid_matrix.exceptions import ConfigError
from hybrid_matrix.parsers import StructuralParser, get_parser
from hybrid_matrix.simulation.patch import FilePatch, PatchMode, apply_patch, parse_patch
from hybrid_matrix.workspace import Workspace


class SimulationStatus(Enum):
    """Verdict of a simulation."""

    SAFE_TO_APPLY = "SAFE_TO_APPLY"
    REJECTED = "REJECTED"


class ViolationKind(Enum):
    """Class of tracked invariant a patch would break."""

    CONSTRUCT_MISSING = "construct.missing"
    LOGIC_DRIFT = "logic.drift"
    TAG_REMOVED = "tag.removed"


@dataclass
class Violation:
    """
    A tracked invariant the patch would break.

    Attributes:
        kind: Violation class
        matrix_id: Link owning the affected target
        target: The affected target
        message: Human-readable description
    """

    kind: ViolationKind
    matrix_id: str
    target: Target
    message: str

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "matrix_id": self.matrix_id,
            "file_path": self.target.file_path,
            "construct_name": self.target.construct_name,
            "message": self.message,
        }


@dataclass
class SimulationResult:
    """Verdict plus the full list of violations that produced it."""

    violations: list[Violation] = field(default_factory=list)

    @property
    def status(self) -> SimulationStatus:
        return SimulationStatus.REJECTED if self.violations else SimulationStatus.SAFE_TO_APPLY

    @property
    def messages(self) -> list[str]:
        return [v.message for v in self.violations]

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "violations": [v.to_dict() for v in self.violations],
        }


class PatchSimulator:
    """
    Evaluates patches against the links of a store.

    Attributes:
        workspace: Workspace patch and target paths are resolved against
        parser: Structural parser used on original and patched content
        store: Store to check; None reads the workspace's store file
        mode: How hunks are placed on their files
    """

    def __init__(
        self,
        workspace: Workspace,
        parser: StructuralParser,
        store: Store | None = None,
        mode: PatchMode = PatchMode.ANCHORED,
    ):
        self.workspace = workspace
        self.parser = parser
        self.store = store
        self.mode = mode

    def simulate(self, patch_text: str) -> SimulationResult:
        """Evaluate patch_text without modifying any file.

        Raises:
            PatchConflictError: In anchored mode, when a hunk of a tracked
                file cannot be located
            StoreFormatError: If the store file exists but is malformed
        """
        store = self.store
        if store is None:
            if not self.workspace.store_path.exists():
                return SimulationResult()
            store = load_store(self.workspace.store_path)

        violations: list[Violation] = []
        for file_patch in parse_patch(patch_text):
            violations.extend(self._check_file(store, file_patch))
        return SimulationResult(violations=violations)

    def _check_file(self, store: Store, file_patch: FilePatch) -> list[Violation]:
        path = self.workspace.resolve(file_patch.path)
        if not path.is_file():
            return []

        tracked = [
            (link, target)
            for link, target in store.iter_targets()
            if self.workspace.same_file(target.file_path, file_patch.path)
        ]
        if not tracked:
            return []

        original = path.read_text(encoding="utf-8", errors="replace")
        virtual = apply_patch(original, file_patch.hunks, self.mode, file_patch.path)
        virtual_node = self._parse(virtual, path)
        original_node: Node | None = None

        violations: list[Violation] = []
        for link, target in tracked:
            if not target.construct_name:
                continue
            construct = virtual_node.find_construct(target.construct_name)
            if construct is None:
                violations.append(
                    _violation(
                        ViolationKind.CONSTRUCT_MISSING,
                        link,
                        target,
                        f"Target [{target.construct_name}] was DELETED or RENAMED.",
                    )
                )
                continue

            expected = target.expected_fingerprint
            if expected and construct.fingerprint != expected:
                # Only blame the patch if the construct matched before it
                if original_node is None:
                    original_node = self._parse(original, path)
                before = original_node.find_construct(target.construct_name)
                if before is not None and before.fingerprint == expected:
                    violations.append(
                        _violation(
                            ViolationKind.LOGIC_DRIFT,
                            link,
                            target,
                            f"Target [{target.construct_name}] logic changed. "
                            "Matrix expects stability.",
                        )
                    )

        for link, target in tracked:
            if target.expected_tag not in virtual:
                violations.append(
                    _violation(
                        ViolationKind.TAG_REMOVED,
                        link,
                        target,
                        f"Matrix tag [{target.expected_tag}] was REMOVED.",
                    )
                )

        return violations

    def _parse(self, content: str, path: Path) -> Node:
        return self.parser.parse(content, path.stem, str(path), "file")


def _violation(kind: ViolationKind, link: Link, target: Target, message: str) -> Violation:
    return Violation(kind=kind, matrix_id=link.matrix_id, target=target, message=message)


def simulate(
    workspace_root: Path | Workspace,
    patch_text: str,
    parser: StructuralParser | None = None,
    *,
    store: Store | None = None,
    mode: PatchMode | str | None = None,
) -> SimulationResult:
    """Simulate applying patch_text to the workspace.

    Args:
        workspace_root: Workspace root directory or Workspace
        patch_text: Unified-diff subset text
        parser: Structural parser; defaults to the configured parser
        store: Store to check; None reads the workspace's store file
        mode: Patch placement mode; defaults to ``simulation.patch_mode``

    Returns:
        SimulationResult with status SAFE_TO_APPLY or REJECTED
    """
    workspace = (
        workspace_root
        if isinstance(workspace_root, Workspace)
        else Workspace(root=Path(workspace_root).resolve())
    )
    if parser is None:
        parser = get_parser(workspace.config)
    if mode is None:
        mode = workspace.setting("simulation", "patch_mode")
    try:
        mode = PatchMode(mode)
    except ValueError:
        raise ConfigError(f"Unknown patch mode: {mode!r} (expected anchored or substring)")
    simulator = PatchSimulator(workspace, parser, store=store, mode=mode)
    return simulator.simulate(patch_text)
