"""Shared fixtures: workspaces, link builders and a marker-driven parser."""

from __future__ import annotations

import re

import pytest

from hybrid_matrix.core.models import (
    Cardinality,
    Construct,
    ConstructKind,
    Language,
    Link,
    LinkStatus,
    Node,
    Target,
)

# "fn name ... @fp=<value>" declares a callable, "struct Name ... @fp=<value>" a data construct
_DECLARATION = re.compile(r"^\s*(fn|struct)\s+(\w+)\b.*?(?:@fp=(\w+))?\s*$")


class MarkerParser:
    """StructuralParser whose fingerprints are read from ``@fp=`` markers.

    Lets a test state a construct's fingerprint directly in the file
    content, so drift scenarios do not depend on a real hash.
    """

    def parse(self, content, module_name, file_path, kind="file"):
        outputs = []
        data = []
        for line in content.split("\n"):
            match = _DECLARATION.match(line)
            if not match:
                continue
            keyword, name, fingerprint = match.groups()
            if keyword == "fn":
                outputs.append(Construct(name, ConstructKind.CALLABLE, fingerprint))
            else:
                data.append(Construct(name, ConstructKind.DATA, fingerprint))
        return Node(id=file_path, file_path=file_path, outputs=tuple(outputs), data=tuple(data))

    def extract_construct(self, content, construct_name):
        for line in content.split("\n"):
            match = _DECLARATION.match(line)
            if match and match.group(2) == construct_name:
                return line
        return None


@pytest.fixture
def marker_parser():
    return MarkerParser()


@pytest.fixture
def workspace(tmp_path):
    """Workspace rooted at tmp_path with the default configuration."""
    from hybrid_matrix.workspace import Workspace

    return Workspace(root=tmp_path)


@pytest.fixture
def write_file(tmp_path):
    """Write a file relative to the workspace root, creating parent dirs."""

    def _write(relative_path, content):
        path = tmp_path / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_link():
    """Build a single-target link; keyword arguments override the defaults."""

    def _make(
        matrix_id="MTX-1",
        sources=("REQ-001",),
        file_path="src/lib.rs",
        construct_name=None,
        fingerprint=None,
        tag="// @MATRIX: REQ-001",
        language="rust",
        status=LinkStatus.BROKEN,
    ):
        target = Target(
            file_path=file_path,
            language=Language(language),
            expected_tag=tag,
            construct_name=construct_name,
            expected_fingerprint=fingerprint,
        )
        return Link(
            matrix_id=matrix_id,
            cardinality=Cardinality.ONE_TO_ONE,
            sources=list(sources),
            targets=[target],
            status=status,
        )

    return _make
