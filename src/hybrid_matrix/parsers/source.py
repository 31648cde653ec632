"""SourceStructureParser - Built-in structural parser.

Recognizes function and type declarations with language-aware line
patterns and measures each construct's extent by indentation (Python) or
by balanced braces (everything else). Good enough to fingerprint the
constructs a link tracks; it is not a compiler front end, and a project
with a real parser should plug that in through ``parser.module``.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from hybrid_matrix.core.models import Construct, ConstructKind, Node
from hybrid_matrix.utilities.hasher import calculate_fingerprint

CALLABLE = ConstructKind.CALLABLE
DATA = ConstructKind.DATA

# Python: def name(, async def name(, class Name: / class Name(
_PYTHON_FUNC = re.compile(r"^(\s*)(?:async\s+)?def\s+(\w+)\s*\(")
_PYTHON_CLASS = re.compile(r"^(\s*)class\s+(\w+)\s*[:(]")

# Rust: pub? const/async/unsafe? fn name(, struct/enum/trait/union/type Name
_RUST_FUNC = re.compile(
    r'^(\s*)(?:pub(?:\([^)]*\))?\s+)?(?:(?:const|async|unsafe)\s+)*(?:extern\s+"[^"]*"\s+)?'
    r"fn\s+(\w+)\s*[(<]"
)
_RUST_TYPE = re.compile(r"^(\s*)(?:pub(?:\([^)]*\))?\s+)?(?:struct|enum|trait|union|type)\s+(\w+)")

# Go: func name(, func (receiver) name(, type Name ...
_GO_FUNC = re.compile(r"^(\s*)func\s+(?:\([^)]*\)\s*)?(\w+)\s*[(\[]")
_GO_TYPE = re.compile(r"^(\s*)type\s+(\w+)\s+")

# JS/TS: function name(, const name = (...) =>, method(...) {, class/interface/enum/type Name
_JS_FUNC = re.compile(
    r"^(\s*)(?:export\s+)?(?:default\s+)?(?:async\s+)?function\s*\*?\s*(\w+)\s*[(<]"
)
_JS_ARROW = re.compile(
    r"^(\s*)(?:export\s+)?(?:const|let|var)\s+(\w+)\s*=\s*(?:async\s+)?(?:\([^)]*\)|\w+)\s*=>"
)
_JS_METHOD = re.compile(
    r"^(\s*)(?:(?:public|private|protected|static|async|readonly|get|set)\s+)*"
    r"(\w+)\s*\([^)]*\)\s*(?::\s*[\w<>\[\]|., ]+)?\s*\{"
)
_JS_TYPE = re.compile(
    r"^(\s*)(?:export\s+)?(?:default\s+)?(?:declare\s+)?(?:abstract\s+)?"
    r"(?:class|interface|enum|type)\s+(\w+)"
)

# C/C++/Java/C#: return_type name(, struct/class/union/enum Name
_C_FUNC = re.compile(
    r"^(\s*)(?:(?:static|public|private|protected|virtual|inline|extern|final)\s+)*"
    r"\w[\w:*&<>, ]*\s+[*&]*(\w+)\s*\("
)
_C_TYPE = re.compile(
    r"^(\s*)(?:(?:typedef|public|private|protected|static|final|abstract)\s+)*"
    r"(?:struct|class|union|interface|enum(?:\s+class)?)\s+(\w+)\b(?!\s*[;*&])"
)

_FAMILY_PATTERNS: dict[str, tuple[tuple[re.Pattern[str], ConstructKind], ...]] = {
    "python": ((_PYTHON_FUNC, CALLABLE), (_PYTHON_CLASS, DATA)),
    "rust": ((_RUST_FUNC, CALLABLE), (_RUST_TYPE, DATA)),
    "go": ((_GO_FUNC, CALLABLE), (_GO_TYPE, DATA)),
    "js": ((_JS_FUNC, CALLABLE), (_JS_ARROW, CALLABLE), (_JS_TYPE, DATA), (_JS_METHOD, CALLABLE)),
    "c": ((_C_TYPE, DATA), (_C_FUNC, CALLABLE)),
}

# Languages tried, in order, when the language cannot be taken from the file name
_FAMILY_ORDER = ("python", "rust", "go", "js", "c")

# Words that look like a call or declaration to the loose patterns above
_NOT_A_NAME = frozenset(
    {"if", "for", "while", "switch", "return", "else", "do", "sizeof", "catch", "new",
     "delete", "function", "typeof", "await", "throw"}
)

# File extension to language family mapping
_LANG_MAP: dict[str, str] = {
    ".py": "python",
    ".pyw": "python",
    ".js": "js",
    ".jsx": "js",
    ".ts": "js",
    ".tsx": "js",
    ".mjs": "js",
    ".cjs": "js",
    ".go": "go",
    ".rs": "rust",
    ".c": "c",
    ".cpp": "c",
    ".cc": "c",
    ".cxx": "c",
    ".h": "c",
    ".hpp": "c",
    ".java": "c",
    ".cs": "c",
    ".kt": "c",
}

_PY_STRING = re.compile(r"\"(?:\\.|[^\"\\])*\"|'(?:\\.|[^'\\])*'")
_CHAR_LITERAL = re.compile(r"'(?:\\.|[^\\'])'")
# Lines that continue a brace-language declaration before its body opens
_CONTINUATION_PREFIXES = ("{", "where", "->", ":", ")", "const", "noexcept", "override", "throws")


@dataclass
class _Declaration:
    name: str
    kind: ConstructKind
    start: int
    end: int  # exclusive


def family_for_path(file_path: str) -> str | None:
    """Return the language family for a file name, or None if unknown."""
    return _LANG_MAP.get(Path(file_path).suffix.lower())


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip())


def _match_declaration(line: str, family: str) -> tuple[str, ConstructKind] | None:
    for pattern, kind in _FAMILY_PATTERNS[family]:
        match = pattern.match(line)
        if not match:
            continue
        name = match.group(2)
        if name in _NOT_A_NAME:
            continue
        if family == "c" and kind is CALLABLE and line.rstrip().endswith(";"):
            continue  # prototype or call statement
        return name, kind
    return None


def _python_extent(lines: list[str], start: int) -> int:
    """End (exclusive) of the Python block declared at lines[start]."""
    indent = _indent(lines[start])
    i = start
    depth = 0
    # Signature may span lines while brackets are open
    while i < len(lines):
        code = _PY_STRING.sub("", lines[i]).split("#", 1)[0]
        depth += sum(code.count(c) for c in "([{") - sum(code.count(c) for c in ")]}")
        i += 1
        if depth <= 0:
            break
    end = i
    while i < len(lines):
        line = lines[i]
        if line.strip():
            if _indent(line) <= indent:
                break
            end = i + 1
        i += 1
    return end


def _strip_c_line(line: str, in_block: bool, quotes: str) -> tuple[str, bool]:
    """Remove comments and literals from one line of brace-language code.

    Returns the remaining code and whether a block comment is still open.
    """
    out: list[str] = []
    i = 0
    n = len(line)
    while i < n:
        if in_block:
            close = line.find("*/", i)
            if close == -1:
                return "".join(out), True
            i = close + 2
            in_block = False
            continue
        if line.startswith("//", i):
            break
        if line.startswith("/*", i):
            in_block = True
            i += 2
            continue
        ch = line[i]
        if ch in quotes:
            j = i + 1
            while j < n and line[j] != ch:
                j += 2 if line[j] == "\\" else 1
            i = j + 1
            continue
        if ch == "'":
            match = _CHAR_LITERAL.match(line, i)
            if match:
                i = match.end()
                continue
        out.append(ch)
        i += 1
    return "".join(out), in_block


def _brace_extent(lines: list[str], start: int, family: str) -> int:
    """End (exclusive) of the brace-delimited construct declared at lines[start]."""
    quotes = "\"'`" if family == "js" else '"`'
    depth = 0
    parens = 0
    opened = False
    in_block = False
    in_where = False
    i = start
    while i < len(lines):
        code, in_block = _strip_c_line(lines[i], in_block, quotes)
        if code.strip().startswith("where"):
            in_where = True
        for ch in code:
            if ch == "{":
                depth += 1
                opened = True
            elif ch == "}":
                depth -= 1
            elif ch in "([":
                parens += 1
            elif ch in ")]":
                parens -= 1
            elif ch == ";" and not opened and parens <= 0:
                return i + 1
        i += 1
        if opened and depth <= 0:
            return i
        if not opened and parens <= 0 and not in_where:
            if code.rstrip().endswith((",", "=", "|", "&")):
                continue
            nxt = i
            while nxt < len(lines) and not lines[nxt].strip():
                nxt += 1
            if nxt >= len(lines) or not lines[nxt].lstrip().startswith(_CONTINUATION_PREFIXES):
                return i
    return len(lines)


class SourceStructureParser:
    """Regex-based StructuralParser for Python, Rust, Go, JS/TS and C-family code.

    Args:
        language: Force a language family ("python", "rust", "go", "js", "c")
                  instead of deriving it from the file name.
        fingerprint_length: Hex characters kept from each fingerprint.
        fingerprint_algorithm: Hash algorithm for fingerprints.
    """

    def __init__(
        self,
        language: str | None = None,
        fingerprint_length: int = 16,
        fingerprint_algorithm: str = "sha256",
    ) -> None:
        if language is not None and language not in _FAMILY_PATTERNS:
            raise ValueError(f"Unknown language family: {language}")
        self.language = language
        self.fingerprint_length = fingerprint_length
        self.fingerprint_algorithm = fingerprint_algorithm

    def parse(self, content: str, module_name: str, file_path: str, kind: str = "file") -> Node:
        """Parse a file into a Node listing its callable and data constructs."""
        if kind != "file":
            raise ValueError(f"Unsupported parse kind: {kind}")
        lines = content.split("\n")
        family = self.language or family_for_path(file_path) or self._guess_family(lines)
        comment_family = "hash" if family == "python" else "slash"

        outputs: list[Construct] = []
        data: list[Construct] = []
        for decl in self._declarations(lines, family):
            text = "\n".join(lines[decl.start : decl.end])
            construct = Construct(
                name=decl.name,
                kind=decl.kind,
                fingerprint=calculate_fingerprint(
                    text,
                    comment_family,
                    self.fingerprint_length,
                    self.fingerprint_algorithm,
                ),
            )
            (outputs if decl.kind is CALLABLE else data).append(construct)

        return Node(id=file_path, file_path=file_path, outputs=tuple(outputs), data=tuple(data))

    def extract_construct(self, content: str, construct_name: str) -> str | None:
        """Return the source text of the first declaration of construct_name."""
        lines = content.split("\n")
        families = (self.language,) if self.language else _FAMILY_ORDER
        for index, line in enumerate(lines):
            for family in families:
                found = _match_declaration(line, family)
                if found and found[0] == construct_name:
                    return "\n".join(lines[index : self._extent(lines, index, family)])
        return None

    def _extent(self, lines: list[str], start: int, family: str) -> int:
        if family == "python":
            return _python_extent(lines, start)
        return _brace_extent(lines, start, family)

    def _declarations(self, lines: list[str], family: str) -> Iterator[_Declaration]:
        for index, line in enumerate(lines):
            found = _match_declaration(line, family)
            if found:
                name, kind = found
                yield _Declaration(name, kind, index, self._extent(lines, index, family))

    def _guess_family(self, lines: list[str]) -> str:
        for family in _FAMILY_ORDER:
            if any(_match_declaration(line, family) for line in lines):
                return family
        return "c"


def create_parser() -> SourceStructureParser:
    """Factory used when this module is named as ``parser.module``."""
    return SourceStructureParser()
