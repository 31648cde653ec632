"""
hybrid_matrix.core.models - Core data models for traceability links.

Provides dataclasses for links, their code targets, the persisted store,
and the structural snapshot produced by a structural parser.

Records are decoded from and encoded to the JSON documents they live in
here, at the boundary; the rest of the package only sees typed records.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from hybrid_matrix.exceptions import SnapshotFormatError, StoreFormatError

STORE_VERSION = "1.0"
TAG_MARKER = "@MATRIX:"


class LinkStatus(Enum):
    """Derived state of a link after a validation pass."""

    VALID = "VALID"
    BROKEN = "BROKEN"
    ORPHAN = "ORPHAN"


class Cardinality(Enum):
    """Intended multiplicity of a link (documentation only)."""

    ONE_TO_ONE = "1:1"
    ONE_TO_MANY = "1:N"
    MANY_TO_ONE = "N:1"
    MANY_TO_MANY = "N:M"


class Language(Enum):
    """Source language of a target, used to pick comment syntax."""

    RUST = "rust"
    CPP = "cpp"
    C = "c"
    PYTHON = "python"
    TYPESCRIPT = "typescript"
    JAVASCRIPT = "javascript"
    GO = "go"
    JAVA = "java"
    RUBY = "ruby"
    SHELL = "shell"

    @property
    def comment_prefix(self) -> str:
        """Line-comment prefix for this language."""
        if self in _HASH_COMMENT_LANGUAGES:
            return "#"
        return "//"


_HASH_COMMENT_LANGUAGES = frozenset({Language.PYTHON, Language.RUBY, Language.SHELL})


class ConstructKind(Enum):
    """The two kinds of construct a structural parser reports."""

    CALLABLE = "outputs"
    DATA = "data"


def _require(record: dict[str, Any], key: str, kind: type, where: str, error: type) -> Any:
    if key not in record:
        raise error(f"{where}: missing required field '{key}'")
    value = record[key]
    if not isinstance(value, kind):
        raise error(f"{where}: field '{key}' must be {kind.__name__}")
    return value


def _optional_str(record: dict[str, Any], key: str, where: str, error: type) -> str | None:
    value = record.get(key)
    if value is not None and not isinstance(value, str):
        raise error(f"{where}: field '{key}' must be a string")
    return value


def _string_list(data: dict[str, Any], key: str) -> list[str]:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise StoreFormatError(f"orphans: '{key}' must be a list of strings")
    return list(value)


def _enum(enum_cls: type[Enum], value: Any, where: str) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise StoreFormatError(f"{where}: invalid value {value!r} (expected one of: {allowed})")


# ─────────────────────────────────────────────────────────────────────────────
# Store records
# ─────────────────────────────────────────────────────────────────────────────

_TARGET_KEYS = ("file_path", "construct_name", "language", "expected_tag", "expected_hash")
_LINK_KEYS = (
    "matrix_id",
    "cardinality",
    "layer1_sources",
    "layer3_targets",
    "status",
    "last_verified",
)
_STORE_KEYS = ("matrix_version", "links", "orphans")
_ORPHAN_KEYS = ("unlinked_requirements", "unlinked_code_tags")


@dataclass
class Target:
    """
    One physical location a link points at.

    Attributes:
        file_path: Absolute or workspace-relative path
        language: Source language (selects comment syntax)
        expected_tag: Line substring that must be present in the file
        construct_name: Function/type within the file; None tracks the file only
        expected_fingerprint: Fingerprint recorded when the link was created
        extras: Unrecognized document fields, carried through unchanged
    """

    file_path: str
    language: Language
    expected_tag: str
    construct_name: str | None = None
    expected_fingerprint: str | None = None
    extras: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Any, where: str = "target") -> Target:
        if not isinstance(data, dict):
            raise StoreFormatError(f"{where}: expected an object")
        language = _enum(Language, _require(data, "language", str, where, StoreFormatError), where)
        return cls(
            file_path=_require(data, "file_path", str, where, StoreFormatError),
            language=language,
            expected_tag=_require(data, "expected_tag", str, where, StoreFormatError),
            construct_name=_optional_str(data, "construct_name", where, StoreFormatError),
            expected_fingerprint=_optional_str(data, "expected_hash", where, StoreFormatError),
            extras={k: v for k, v in data.items() if k not in _TARGET_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"file_path": self.file_path}
        if self.construct_name is not None:
            result["construct_name"] = self.construct_name
        result["language"] = self.language.value
        result["expected_tag"] = self.expected_tag
        if self.expected_fingerprint is not None:
            result["expected_hash"] = self.expected_fingerprint
        result.update(self.extras)
        return result

    def describe(self) -> str:
        """Return file::construct location string."""
        if self.construct_name:
            return f"{self.file_path}::{self.construct_name}"
        return self.file_path


@dataclass
class Link:
    """
    A tracked relationship between requirement IDs and code targets.

    Attributes:
        matrix_id: Unique stable identifier (e.g. "MTX-1042")
        cardinality: Intended multiplicity, not enforced
        sources: Requirement identifiers (non-empty)
        targets: Code targets (non-empty)
        status: Result of the last validation pass
        last_verified: ISO-8601 timestamp of the last validation pass
    """

    matrix_id: str
    cardinality: Cardinality
    sources: list[str]
    targets: list[Target]
    status: LinkStatus = LinkStatus.BROKEN
    last_verified: str | None = None
    extras: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Any, where: str = "link") -> Link:
        if not isinstance(data, dict):
            raise StoreFormatError(f"{where}: expected an object")
        matrix_id = _require(data, "matrix_id", str, where, StoreFormatError)
        where = f"link {matrix_id}"

        sources = _require(data, "layer1_sources", list, where, StoreFormatError)
        if not sources or not all(isinstance(s, str) for s in sources):
            raise StoreFormatError(f"{where}: needs at least one string source")

        raw_targets = _require(data, "layer3_targets", list, where, StoreFormatError)
        if not raw_targets:
            raise StoreFormatError(f"{where}: needs at least one target")
        targets = [
            Target.from_dict(t, f"{where} target #{i + 1}") for i, t in enumerate(raw_targets)
        ]

        return cls(
            matrix_id=matrix_id,
            cardinality=_enum(Cardinality, data.get("cardinality", "1:1"), where),
            sources=list(sources),
            targets=targets,
            status=_enum(LinkStatus, data.get("status", "BROKEN"), where),
            last_verified=_optional_str(data, "last_verified", where, StoreFormatError),
            extras={k: v for k, v in data.items() if k not in _LINK_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "matrix_id": self.matrix_id,
            "cardinality": self.cardinality.value,
            "layer1_sources": list(self.sources),
            "layer3_targets": [t.to_dict() for t in self.targets],
            "status": self.status.value,
        }
        if self.last_verified is not None:
            result["last_verified"] = self.last_verified
        result.update(self.extras)
        return result


@dataclass
class Orphans:
    """Unlinked requirement IDs and code tags, owned by the bridging process."""

    unlinked_sources: list[str] = field(default_factory=list)
    unlinked_tags: list[str] = field(default_factory=list)
    extras: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Any) -> Orphans:
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise StoreFormatError("orphans: expected an object")
        return cls(
            unlinked_sources=_string_list(data, "unlinked_requirements"),
            unlinked_tags=_string_list(data, "unlinked_code_tags"),
            extras={k: v for k, v in data.items() if k not in _ORPHAN_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "unlinked_requirements": list(self.unlinked_sources),
            "unlinked_code_tags": list(self.unlinked_tags),
        }
        result.update(self.extras)
        return result


@dataclass
class Store:
    """The persisted link store: single source of truth for link state."""

    version: str = STORE_VERSION
    links: list[Link] = field(default_factory=list)
    orphans: Orphans = field(default_factory=Orphans)
    extras: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Any) -> Store:
        if not isinstance(data, dict):
            raise StoreFormatError("store: expected a JSON object at top level")
        raw_links = data.get("links", [])
        if not isinstance(raw_links, list):
            raise StoreFormatError("store: 'links' must be a list")
        version = data.get("matrix_version", STORE_VERSION)
        if not isinstance(version, str):
            raise StoreFormatError("store: 'matrix_version' must be a string")
        return cls(
            version=version,
            links=[Link.from_dict(item, f"link #{i + 1}") for i, item in enumerate(raw_links)],
            orphans=Orphans.from_dict(data.get("orphans")),
            extras={k: v for k, v in data.items() if k not in _STORE_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "matrix_version": self.version,
            "links": [link.to_dict() for link in self.links],
            "orphans": self.orphans.to_dict(),
        }
        result.update(self.extras)
        return result

    def links_for_source(self, source_id: str) -> list[Link]:
        """Return every link whose sources include source_id."""
        return [link for link in self.links if source_id in link.sources]

    def iter_targets(self) -> Iterator[tuple[Link, Target]]:
        """Yield (link, target) pairs in store order."""
        for link in self.links:
            for target in link.targets:
                yield link, target


# ─────────────────────────────────────────────────────────────────────────────
# Structural snapshot records
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Construct:
    """A named callable or data declaration reported by a structural parser."""

    name: str
    kind: ConstructKind
    fingerprint: str | None = None

    @classmethod
    def from_dict(cls, data: Any, kind: ConstructKind, where: str) -> Construct:
        if not isinstance(data, dict):
            raise SnapshotFormatError(f"{where}: construct must be an object")
        name = _require(data, "name", str, where, SnapshotFormatError)
        fingerprint = data.get("logicHash", data.get("fingerprint"))
        if fingerprint is not None and not isinstance(fingerprint, str):
            raise SnapshotFormatError(f"{where}: fingerprint of '{name}' must be a string")
        return cls(name=name, kind=kind, fingerprint=fingerprint)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"name": self.name}
        if self.fingerprint is not None:
            result["logicHash"] = self.fingerprint
        return result


@dataclass(frozen=True)
class Node:
    """
    A parsed source unit (normally one file) and its constructs.

    Attributes:
        id: Parser-assigned identity (often the file path)
        file_path: Path of the parsed file
        outputs: Callable constructs (functions, methods)
        data: Data constructs (structs, classes, types)
        children: Nested units
    """

    id: str
    file_path: str
    outputs: tuple[Construct, ...] = ()
    data: tuple[Construct, ...] = ()
    children: tuple[Node, ...] = ()

    @classmethod
    def from_dict(cls, data: Any, where: str = "node") -> Node:
        if not isinstance(data, dict):
            raise SnapshotFormatError(f"{where}: node must be an object")
        node_id = _require(data, "id", str, where, SnapshotFormatError)
        where = f"node {node_id}"
        file_path = data.get("filePath", node_id)
        if not isinstance(file_path, str):
            raise SnapshotFormatError(f"{where}: 'filePath' must be a string")

        def _list(key: str) -> list[Any]:
            value = data.get(key) or []
            if not isinstance(value, list):
                raise SnapshotFormatError(f"{where}: '{key}' must be a list")
            return value

        return cls(
            id=node_id,
            file_path=file_path,
            outputs=tuple(
                Construct.from_dict(c, ConstructKind.CALLABLE, where) for c in _list("outputs")
            ),
            data=tuple(Construct.from_dict(c, ConstructKind.DATA, where) for c in _list("data")),
            children=tuple(Node.from_dict(c, where) for c in _list("children")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "filePath": self.file_path,
            "outputs": [c.to_dict() for c in self.outputs],
            "data": [c.to_dict() for c in self.data],
            "children": [c.to_dict() for c in self.children],
        }

    def walk(self) -> Iterator[Node]:
        """Yield this node and all descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def own_construct(self, name: str) -> Construct | None:
        """Find a construct declared directly on this node (outputs, then data)."""
        for construct in self.outputs:
            if construct.name == name:
                return construct
        for construct in self.data:
            if construct.name == name:
                return construct
        return None

    def find_construct(self, name: str) -> Construct | None:
        """Find a construct anywhere in this subtree.

        Data constructs are preferred over callables at each level, then
        children are searched in order.
        """
        for construct in self.data:
            if construct.name == name:
                return construct
        for construct in self.outputs:
            if construct.name == name:
                return construct
        for child in self.children:
            found = child.find_construct(name)
            if found is not None:
                return found
        return None


@dataclass(frozen=True)
class Snapshot:
    """The latest structural parse of the whole workspace."""

    nodes: tuple[Node, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> Snapshot:
        if not isinstance(data, dict):
            raise SnapshotFormatError("snapshot: expected a JSON object at top level")
        nodes = data.get("nodes", [])
        if not isinstance(nodes, list):
            raise SnapshotFormatError("snapshot: 'nodes' must be a list")
        return cls(nodes=tuple(Node.from_dict(n, f"node #{i + 1}") for i, n in enumerate(nodes)))

    def to_dict(self) -> dict[str, Any]:
        return {"nodes": [n.to_dict() for n in self.nodes]}

    def iter_nodes(self) -> Iterator[Node]:
        for node in self.nodes:
            yield from node.walk()
