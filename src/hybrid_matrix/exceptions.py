"""
hybrid_matrix.exceptions - Error types raised by the traceability engine.

Missing optional documents are never errors; these exceptions cover
documents that exist but cannot be trusted, and patches that cannot be
placed on the file they claim to modify.
"""


class MatrixError(Exception):
    """Base class for all hybrid-matrix errors."""


class ConfigError(MatrixError):
    """Configuration file could not be read or parsed."""


class StoreFormatError(MatrixError):
    """The link store document is unreadable or has an invalid shape."""


class SnapshotFormatError(MatrixError):
    """The structural snapshot document is unreadable or has an invalid shape."""


class DocumentFormatError(MatrixError):
    """A supporting document (task tree, rationale map) has an invalid shape."""


class ParserLoadError(MatrixError):
    """A custom structural parser module could not be loaded."""


class PatchConflictError(MatrixError):
    """A hunk's old side could not be located in the file it targets.

    Attributes:
        file_path: Path named by the file patch
        hunk_index: Zero-based index of the failing hunk within that file
    """

    def __init__(self, file_path: str, hunk_index: int, message: str):
        self.file_path = file_path
        self.hunk_index = hunk_index
        super().__init__(f"{file_path}: hunk #{hunk_index + 1}: {message}")
