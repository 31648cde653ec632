"""
hybrid-matrix - Deterministic traceability between requirements and code

hybrid-matrix keeps links between requirement identifiers and the code
constructs that implement them, re-validates those links against the
source tree, and simulates patches to tell whether applying them would
silently break a tracked link.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("hybrid-matrix")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed
__license__ = "MIT"

from hybrid_matrix.core.models import Link, LinkStatus, Store, Target
from hybrid_matrix.core.validator import LinkValidator, validate
from hybrid_matrix.injector import TagInjector
from hybrid_matrix.simulation import PatchSimulator, SimulationStatus, simulate

__all__ = [
    "__version__",
    "Link",
    "LinkStatus",
    "LinkValidator",
    "PatchSimulator",
    "SimulationStatus",
    "Store",
    "TagInjector",
    "Target",
    "simulate",
    "validate",
]
