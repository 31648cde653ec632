"""
hybrid_matrix.core.report - Link health summary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from hybrid_matrix.core.models import LinkStatus, Store


@dataclass
class HealthReport:
    """Counts of link states plus the integrity score derived from them.

    ``broken`` counts every link that is not VALID, pending (ORPHAN) included.
    """

    total: int = 0
    valid: int = 0
    broken: int = 0
    documentation_gaps: int = 0

    @classmethod
    def from_store(cls, store: Store) -> HealthReport:
        return cls(
            total=len(store.links),
            valid=sum(1 for link in store.links if link.status is LinkStatus.VALID),
            broken=sum(1 for link in store.links if link.status is not LinkStatus.VALID),
            documentation_gaps=len(store.orphans.unlinked_sources),
        )

    @property
    def score(self) -> int:
        """Percentage of valid links, rounded half up; 0 with no links."""
        if self.total == 0:
            return 0
        return (self.valid * 200 + self.total) // (self.total * 2)

    @property
    def is_healthy(self) -> bool:
        return self.broken == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "healthy": self.is_healthy,
            "integrity_score": self.score,
            "links": {
                "total": self.total,
                "valid": self.valid,
                "broken": self.broken,
            },
            "documentation_gaps": self.documentation_gaps,
        }

    def __str__(self) -> str:
        lines = [
            "Traceability Health Report",
            f"  Integrity score:     {self.score}%",
            f"  Links:               {self.total} total, {self.valid} valid,"
            f" {self.broken} broken/pending",
            f"  Documentation gaps:  {self.documentation_gaps}",
        ]
        return "\n".join(lines)
