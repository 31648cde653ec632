"""
hybrid_matrix.core.validator - Link validation.

Re-derives every link's status from the workspace: each target must
exist, carry its tag, and (when a structural snapshot is available) still
declare the construct it names. A link is VALID only if all of its targets
pass.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from hybrid_matrix.core.models import Link, LinkStatus, Snapshot, Store, Target
from hybrid_matrix.core.snapshot import find_file_node
from hybrid_matrix.workspace import Workspace


class TargetFailure(Enum):
    """Why a target failed validation."""

    FILE_MISSING = "file.missing"
    TAG_MISSING = "tag.missing"
    NODE_MISSING = "node.missing"
    CONSTRUCT_MISSING = "construct.missing"
    FINGERPRINT_DRIFT = "fingerprint.drift"


@dataclass
class TargetCheck:
    """
    Outcome of checking one target of one link.

    Attributes:
        matrix_id: Link the target belongs to
        target: The checked target
        failure: First failed check, or None if the target passed
        warnings: Non-fatal findings (fingerprint drift under the default policy)
    """

    matrix_id: str
    target: Target
    failure: TargetFailure | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.failure is None

    def __str__(self) -> str:
        if self.failure is None:
            head = f"✓ {self.matrix_id} {self.target.describe()}"
        else:
            head = f"✗ {self.matrix_id} {self.target.describe()} [{self.failure.value}]"
        return "\n".join([head] + [f"   ⚠ {w}" for w in self.warnings])


@dataclass
class ValidationReport:
    """Validated store plus the per-target findings that produced it."""

    store: Store
    checks: list[TargetCheck] = field(default_factory=list)

    @property
    def failures(self) -> list[TargetCheck]:
        return [c for c in self.checks if not c.passed]

    @property
    def warnings(self) -> list[str]:
        return [w for c in self.checks for w in c.warnings]


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class LinkValidator:
    """
    Validates every link of a store against a workspace.

    Attributes:
        workspace: Workspace the target paths are resolved against
        snapshot: Latest structural snapshot, or None to skip construct checks
        strict_drift: Fail targets whose fingerprint drifted instead of warning
    """

    def __init__(
        self,
        workspace: Workspace,
        snapshot: Snapshot | None = None,
        strict_drift: bool = False,
    ):
        self.workspace = workspace
        self.snapshot = snapshot
        self.strict_drift = strict_drift

    def run(self, store: Store, now: datetime | None = None) -> ValidationReport:
        """Validate all links, returning the refreshed store and findings."""
        timestamp = utc_timestamp(now)
        checks: list[TargetCheck] = []
        links: list[Link] = []

        for link in store.links:
            link_checks = [self.check_target(link.matrix_id, t) for t in link.targets]
            checks.extend(link_checks)
            status = (
                LinkStatus.VALID if all(c.passed for c in link_checks) else LinkStatus.BROKEN
            )
            links.append(dataclasses.replace(link, status=status, last_verified=timestamp))

        return ValidationReport(store=dataclasses.replace(store, links=links), checks=checks)

    def check_target(self, matrix_id: str, target: Target) -> TargetCheck:
        """Run the ordered checks for one target, stopping at the first failure."""
        check = TargetCheck(matrix_id=matrix_id, target=target)
        path = self.workspace.resolve(target.file_path)

        if not path.is_file():
            check.failure = TargetFailure.FILE_MISSING
            return check

        if not _has_tag(path, target.expected_tag):
            check.failure = TargetFailure.TAG_MISSING
            return check

        if self.snapshot is None:
            return check

        node = find_file_node(self.snapshot, self.workspace, target.file_path)
        if node is None:
            check.failure = TargetFailure.NODE_MISSING
            return check

        if not target.construct_name:
            return check

        construct = node.own_construct(target.construct_name)
        if construct is None:
            check.failure = TargetFailure.CONSTRUCT_MISSING
            return check

        if (
            target.expected_fingerprint
            and construct.fingerprint
            and target.expected_fingerprint != construct.fingerprint
        ):
            check.warnings.append(
                f"Fingerprint mismatch for {target.construct_name}: expected "
                f"{target.expected_fingerprint}, found {construct.fingerprint} (logic changed)"
            )
            if self.strict_drift:
                check.failure = TargetFailure.FINGERPRINT_DRIFT

        return check


def _has_tag(path: Path, expected_tag: str) -> bool:
    content = path.read_text(encoding="utf-8", errors="replace")
    return any(expected_tag in line for line in content.split("\n"))


def validate(
    store: Store,
    workspace_root: Path | Workspace,
    snapshot: Snapshot | None = None,
    *,
    strict_drift: bool = False,
    now: datetime | None = None,
) -> Store:
    """Refresh the status and last_verified of every link in store.

    Args:
        store: Store to validate (not modified)
        workspace_root: Workspace root directory or Workspace
        snapshot: Structural snapshot; None degrades to file and tag checks
        strict_drift: Treat fingerprint drift as a target failure
        now: Validation time (defaults to the current UTC time)

    Returns:
        A new Store with refreshed links
    """
    workspace = (
        workspace_root
        if isinstance(workspace_root, Workspace)
        else Workspace(root=Path(workspace_root).resolve())
    )
    validator = LinkValidator(workspace, snapshot=snapshot, strict_drift=strict_drift)
    return validator.run(store, now=now).store
