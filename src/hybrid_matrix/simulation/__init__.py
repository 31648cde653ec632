"""
hybrid_matrix.simulation - Patch parsing and impact simulation.
"""

from hybrid_matrix.simulation.patch import FilePatch, Hunk, PatchMode, apply_patch, parse_patch
from hybrid_matrix.simulation.simulator import (
    PatchSimulator,
    SimulationResult,
    SimulationStatus,
    Violation,
    ViolationKind,
    simulate,
)

__all__ = [
    "FilePatch",
    "Hunk",
    "PatchMode",
    "PatchSimulator",
    "SimulationResult",
    "SimulationStatus",
    "Violation",
    "ViolationKind",
    "apply_patch",
    "parse_patch",
    "simulate",
]
