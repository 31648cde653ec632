"""
hybrid_matrix.injector - Insert traceability tags into source files.

A tag is a single comment line such as ``// @MATRIX: REQ-012`` placed
immediately above the construct a target names, or at the top of the file
when the construct cannot be found. Injection is idempotent.
"""

from __future__ import annotations

import re
import sys
from pathlib import Path

from hybrid_matrix.core.models import TAG_MARKER, Language, Target

_COMMENT_PREFIXES = ("//", "#")

# Declaration keywords across the supported languages
_DECLARATION_KEYWORDS = (
    "fn",
    "def",
    "class",
    "struct",
    "enum",
    "trait",
    "interface",
    "type",
    "function",
    "func",
)

# Optional qualifiers that may precede a declaration keyword
_QUALIFIERS = (
    r"(?:(?:pub(?:\([^)]*\))?|export|default|public|private|protected|static|"
    r"abstract|async|unsafe|const|inline|virtual)\s+)*"
)


def declaration_pattern(construct_name: str) -> re.Pattern[str]:
    """Build the pattern matching a declaration line for construct_name."""
    keywords = "|".join(_DECLARATION_KEYWORDS)
    return re.compile(
        rf"^(\s*){_QUALIFIERS}(?:{keywords})\s+(?:\([^)]*\)\s*)?{re.escape(construct_name)}\b"
    )


def compose_tag(language: Language, source_ids: list[str], expected_tag: str | None = None) -> str:
    """Compose the tag line text for a target.

    A pre-formatted expected_tag (already starting with a comment prefix)
    is used verbatim; a bare expected_tag gets the language's comment
    prefix; with no expected_tag the tag is built from source_ids.
    """
    if expected_tag:
        if expected_tag.startswith(_COMMENT_PREFIXES):
            return expected_tag
        return f"{language.comment_prefix} {expected_tag}"
    return f"{language.comment_prefix} {TAG_MARKER} {', '.join(source_ids)}"


class TagInjector:
    """
    Writes tags into target files.

    Attributes:
        workspace_root: Root that relative target paths are resolved against;
                        None resolves them against the current directory
    """

    def __init__(self, workspace_root: Path | None = None):
        self.workspace_root = workspace_root

    def _resolve(self, file_path: str) -> Path:
        path = Path(file_path)
        if path.is_absolute() or self.workspace_root is None:
            return path
        return self.workspace_root / path

    def inject(self, target: Target, source_ids: list[str]) -> bool:
        """Ensure the target's tag is present in its file.

        Returns:
            True if the tag is present after the call (including when it
            already was), False if the file does not exist or cannot be
            rewritten.
        """
        path = self._resolve(target.file_path)
        if not path.is_file():
            return False

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            print(f"Warning: Cannot read {path}: {e}", file=sys.stderr)
            return False

        tag = compose_tag(target.language, source_ids, target.expected_tag)
        if tag in content or (target.expected_tag and target.expected_tag in content):
            return True

        new_content = insert_tag(content, tag, target.construct_name)
        try:
            path.write_text(new_content, encoding="utf-8")
        except OSError as e:
            print(f"Warning: Cannot write {path}: {e}", file=sys.stderr)
            return False
        return True


def insert_tag(content: str, tag: str, construct_name: str | None) -> str:
    """Return content with tag inserted above construct_name, or at the top."""
    lines = content.split("\n")
    if construct_name:
        pattern = declaration_pattern(construct_name)
        for index, line in enumerate(lines):
            match = pattern.match(line)
            if match:
                eol = "\r" if line.endswith("\r") else ""
                lines.insert(index, f"{match.group(1)}{tag}{eol}")
                return "\n".join(lines)

    newline = "\r\n" if lines[0].endswith("\r") else "\n"
    return tag + newline + content


def inject(target: Target, source_ids: list[str], workspace_root: Path | None = None) -> bool:
    """Inject the tag for target; see TagInjector.inject."""
    return TagInjector(workspace_root).inject(target, source_ids)
