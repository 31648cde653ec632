"""Patch parsing and in-memory application.

Understands a subset of unified diff: ``+++ b/<path>`` opens a file
patch, ``@@`` opens a hunk, and hunk bodies use ``+``/``-``/space
prefixes. Nothing here touches the filesystem; applying a patch returns
the would-be file content as a string.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from hybrid_matrix.exceptions import PatchConflictError

FILE_MARKER = "+++ b/"

# @@ -old_start[,old_count] +new_start[,new_count] @@
_HUNK_HEADER = re.compile(r"^@@+\s*-(\d+)(?:,(\d+))?\s+\+(\d+)(?:,(\d+))?\s*@@")

# git metadata lines that separate file patches
_FILE_HEADER_PREFIXES = (
    "diff --git ",
    "index ",
    "new file mode",
    "deleted file mode",
    "similarity index",
    "rename from",
    "rename to",
)


class PatchMode(Enum):
    """How hunks are placed on the file they modify."""

    # Locate each hunk by its header offset and verify its context lines
    ANCHORED = "anchored"
    # Replace the first literal occurrence of the removed lines
    SUBSTRING = "substring"


@dataclass
class Hunk:
    """
    One block of changes within a file patch.

    Attributes:
        header: The ``@@`` line
        lines: Body lines, each still carrying its ``+``/``-``/space prefix
        old_start: First line of the old range (1-based), None for a bare ``@@``
        old_count: Length of the old range
        new_start: First line of the new range
        new_count: Length of the new range
        surplus: Body lines found after the header counts were used up
    """

    header: str
    lines: list[str] = field(default_factory=list)
    old_start: int | None = None
    old_count: int = 0
    new_start: int | None = None
    new_count: int = 0
    surplus: list[str] = field(default_factory=list)

    @property
    def anchored(self) -> bool:
        return self.old_start is not None

    def body(self) -> list[str]:
        """Every body line up to the next marker, surplus included."""
        return self.lines + self.surplus

    def removed_lines(self) -> list[str]:
        return [line[1:] for line in self.body() if line.startswith("-")]

    def added_lines(self) -> list[str]:
        return [line[1:] for line in self.body() if line.startswith("+")]

    def has_surplus_changes(self) -> bool:
        return any(line[:1] in ("+", "-", " ") for line in self.surplus)

    def old_side(self) -> list[str]:
        """Context and removed lines, in order: what the file must contain."""
        return [line[1:] for line in self.lines if not line.startswith("+")]

    def new_side(self) -> list[str]:
        """Context and added lines, in order: what replaces the old side."""
        return [line[1:] for line in self.lines if not line.startswith("-")]


@dataclass
class FilePatch:
    """All hunks for one file, in patch order."""

    path: str
    hunks: list[Hunk] = field(default_factory=list)


def _new_hunk(header: str) -> Hunk:
    match = _HUNK_HEADER.match(header)
    if not match:
        return Hunk(header=header)
    old_start, old_count, new_start, new_count = match.groups()
    return Hunk(
        header=header,
        old_start=int(old_start),
        old_count=int(old_count) if old_count is not None else 1,
        new_start=int(new_start),
        new_count=int(new_count) if new_count is not None else 1,
    )


def _is_file_header(lines: list[str], index: int) -> bool:
    line = lines[index]
    if line.startswith(_FILE_HEADER_PREFIXES):
        return True
    return (
        line.startswith("--- ")
        and index + 1 < len(lines)
        and lines[index + 1].startswith(FILE_MARKER)
    )


def parse_patch(patch_text: str) -> list[FilePatch]:
    """Split patch text into per-file patches and hunks.

    Lines before the first ``+++ b/`` marker are ignored. Every hunk runs
    to the next marker. For a hunk with line ranges in its header, lines
    beyond its counts are kept apart in ``surplus``; git metadata between
    file patches and a ``format-patch`` signature are not body lines.
    """
    lines = patch_text.split("\n")
    patches: list[FilePatch] = []
    current: FilePatch | None = None
    hunk: Hunk | None = None
    old_left = new_left = 0

    for index, line in enumerate(lines):
        if line.startswith(FILE_MARKER):
            current = FilePatch(path=line[len(FILE_MARKER) :].strip())
            patches.append(current)
            hunk = None
            continue

        if line.startswith("@@"):
            if current is None:
                continue
            hunk = _new_hunk(line)
            current.hunks.append(hunk)
            old_left, new_left = hunk.old_count, hunk.new_count
            continue

        if hunk is None or line.startswith("\\"):
            continue

        if hunk.anchored and (old_left > 0 or new_left > 0):
            if line.startswith("-"):
                old_left -= 1
            elif line.startswith("+"):
                new_left -= 1
            else:
                old_left -= 1
                new_left -= 1
            hunk.lines.append(line)
        elif _is_file_header(lines, index):
            continue
        elif line == "-- ":
            # git format-patch signature
            hunk = None
        elif hunk.anchored:
            hunk.surplus.append(line)
        else:
            hunk.lines.append(line)

    for file_patch in patches:
        for h in file_patch.hunks:
            tail = h.surplus if h.anchored else h.lines
            while tail and tail[-1] == "":
                tail.pop()

    return patches


def apply_substring(content: str, hunks: list[Hunk]) -> str:
    """Apply hunks by first-occurrence text replacement.

    Context lines are ignored. The joined removed lines are replaced by
    the joined added lines at their first occurrence; a hunk with nothing
    removed appends its added lines at end of file. A removed block that
    does not occur leaves the content unchanged.
    """
    result = content
    for hunk in hunks:
        removed = hunk.removed_lines()
        added = hunk.added_lines()
        if removed:
            result = result.replace("\n".join(removed), "\n".join(added), 1)
        elif added:
            result += "\n" + "\n".join(added)
    return result


def _matches_at(lines: list[str], block: list[str], pos: int) -> bool:
    if pos < 0 or pos + len(block) > len(lines):
        return False
    return all(
        lines[pos + i].rstrip("\r") == expected.rstrip("\r") for i, expected in enumerate(block)
    )


def _locate(lines: list[str], block: list[str], expected: int | None) -> int | None:
    """Find where block occurs: at expected if it matches there, else nearest."""
    if not block:
        if expected is None:
            return len(lines)
        return max(0, min(expected, len(lines)))
    if expected is not None and _matches_at(lines, block, expected):
        return expected
    candidates = [i for i in range(len(lines) - len(block) + 1) if _matches_at(lines, block, i)]
    if not candidates:
        return None
    if expected is None:
        return candidates[0]
    return min(candidates, key=lambda i: (abs(i - expected), i))


def apply_anchored(content: str, hunks: list[Hunk], file_path: str = "<patch>") -> str:
    """Apply hunks at their header offsets, verifying context.

    Each hunk's old side must occur in the file: at its header offset
    (shifted by earlier hunks) when it matches there, otherwise at the
    nearest exact occurrence. Bare ``@@`` hunks use the first occurrence.
    Inserted lines take CRLF endings when the file uses them.

    Raises:
        PatchConflictError: If a hunk's old side occurs nowhere in the file,
            or its body has change lines beyond its header counts
    """
    trailing_newline = content.endswith("\n")
    lines = content.split("\n")
    if trailing_newline:
        lines.pop()
    if lines == [""]:
        lines = []
    crlf = bool(lines) and lines[0].endswith("\r")

    delta = 0
    for index, hunk in enumerate(hunks):
        if hunk.has_surplus_changes():
            raise PatchConflictError(file_path, index, "hunk body exceeds its header line counts")
        old = hunk.old_side()
        new = hunk.new_side()
        if crlf:
            new = [line if line.endswith("\r") else line + "\r" for line in new]

        base: int | None = None
        if hunk.anchored:
            # A zero-length old range names the line the insertion follows
            base = hunk.old_start if hunk.old_count == 0 else hunk.old_start - 1
        expected = base + delta if base is not None else None

        pos = _locate(lines, old, expected)
        if pos is None:
            raise PatchConflictError(file_path, index, "context does not match file content")

        lines[pos : pos + len(old)] = new
        if base is not None:
            delta = pos - base + len(new) - len(old)

    result = "\n".join(lines)
    if trailing_newline:
        result += "\n"
    return result


def apply_patch(
    content: str,
    hunks: list[Hunk],
    mode: PatchMode = PatchMode.ANCHORED,
    file_path: str = "<patch>",
) -> str:
    """Return content as it would read after applying hunks."""
    if mode is PatchMode.SUBSTRING:
        return apply_substring(content, hunks)
    return apply_anchored(content, hunks, file_path)
