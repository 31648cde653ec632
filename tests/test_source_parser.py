"""Tests for the built-in structural parser and parser loading."""

from __future__ import annotations

import pytest

PYTHON_SOURCE = """import os


def compute(x):
    # doubles
    return x * 2


class Widget:
    def size(self):
        return 1
"""

RUST_SOURCE = """use std::fmt;

pub fn compute(x: i32) -> i32 {
    x * 2
}

pub struct Config {
    pub name: String,
}
"""


class TestPythonParsing:
    def test_constructs_by_kind(self):
        from hybrid_matrix.parsers.source import SourceStructureParser

        node = SourceStructureParser().parse(PYTHON_SOURCE, "mod", "pkg/mod.py")
        assert node.id == "pkg/mod.py"
        assert [c.name for c in node.outputs] == ["compute", "size"]
        assert [c.name for c in node.data] == ["Widget"]

    def test_comment_edit_keeps_fingerprint(self):
        from hybrid_matrix.parsers.source import SourceStructureParser

        parser = SourceStructureParser()
        before = parser.parse(PYTHON_SOURCE, "mod", "mod.py").find_construct("compute")
        edited = PYTHON_SOURCE.replace("# doubles", "# twice as much")
        after = parser.parse(edited, "mod", "mod.py").find_construct("compute")
        assert before.fingerprint == after.fingerprint

    def test_logic_edit_changes_fingerprint(self):
        from hybrid_matrix.parsers.source import SourceStructureParser

        parser = SourceStructureParser()
        before = parser.parse(PYTHON_SOURCE, "mod", "mod.py").find_construct("compute")
        edited = PYTHON_SOURCE.replace("x * 2", "x * 3")
        after = parser.parse(edited, "mod", "mod.py").find_construct("compute")
        assert before.fingerprint != after.fingerprint

    def test_edit_outside_construct_keeps_fingerprint(self):
        from hybrid_matrix.parsers.source import SourceStructureParser

        parser = SourceStructureParser()
        before = parser.parse(PYTHON_SOURCE, "mod", "mod.py").find_construct("compute")
        edited = PYTHON_SOURCE.replace("return 1", "return 2")
        after = parser.parse(edited, "mod", "mod.py").find_construct("compute")
        assert before.fingerprint == after.fingerprint

    def test_extract_construct(self):
        from hybrid_matrix.parsers.source import SourceStructureParser

        snippet = SourceStructureParser().extract_construct(PYTHON_SOURCE, "compute")
        assert snippet == "def compute(x):\n    # doubles\n    return x * 2"


class TestRustParsing:
    def test_constructs_by_kind(self):
        from hybrid_matrix.parsers.source import SourceStructureParser

        node = SourceStructureParser().parse(RUST_SOURCE, "lib", "src/lib.rs")
        assert [c.name for c in node.outputs] == ["compute"]
        assert [c.name for c in node.data] == ["Config"]

    def test_extract_construct_uses_braces(self):
        from hybrid_matrix.parsers.source import SourceStructureParser

        snippet = SourceStructureParser().extract_construct(RUST_SOURCE, "compute")
        assert snippet == "pub fn compute(x: i32) -> i32 {\n    x * 2\n}"

    def test_unknown_construct(self):
        from hybrid_matrix.parsers.source import SourceStructureParser

        assert SourceStructureParser().extract_construct(RUST_SOURCE, "missing") is None

    def test_fingerprint_length_setting(self):
        from hybrid_matrix.parsers.source import SourceStructureParser

        node = SourceStructureParser(fingerprint_length=8).parse(RUST_SOURCE, "lib", "lib.rs")
        assert len(node.find_construct("compute").fingerprint) == 8


class TestLanguageSelection:
    def test_family_for_path(self):
        from hybrid_matrix.parsers.source import family_for_path

        assert family_for_path("a/b.py") == "python"
        assert family_for_path("a/b.TSX") == "js"
        assert family_for_path("a/b.rs") == "rust"
        assert family_for_path("Makefile") is None

    def test_unknown_language_rejected(self):
        from hybrid_matrix.parsers.source import SourceStructureParser

        with pytest.raises(ValueError):
            SourceStructureParser(language="cobol")

    def test_go_receiver_method(self):
        from hybrid_matrix.parsers.source import SourceStructureParser

        source = "package x\n\nfunc (s *Server) Start() error {\n\treturn nil\n}\n"
        node = SourceStructureParser().parse(source, "x", "x.go")
        assert [c.name for c in node.outputs] == ["Start"]


class TestParserLoading:
    def test_default_parser(self):
        from hybrid_matrix.config import DEFAULT_CONFIG
        from hybrid_matrix.parsers import StructuralParser, get_parser
        from hybrid_matrix.parsers.source import SourceStructureParser

        parser = get_parser(DEFAULT_CONFIG)
        assert isinstance(parser, SourceStructureParser)
        assert isinstance(parser, StructuralParser)

    def test_module_with_create_parser(self):
        from hybrid_matrix.parsers import get_parser
        from hybrid_matrix.parsers.source import SourceStructureParser

        parser = get_parser({"parser": {"module": "hybrid_matrix.parsers.source"}})
        assert isinstance(parser, SourceStructureParser)

    def test_missing_module(self):
        from hybrid_matrix.exceptions import ParserLoadError
        from hybrid_matrix.parsers import load_parser

        with pytest.raises(ParserLoadError, match="Cannot import"):
            load_parser("no_such_parser_module_xyz")

    def test_module_without_parser(self):
        from hybrid_matrix.exceptions import ParserLoadError
        from hybrid_matrix.parsers import load_parser

        with pytest.raises(ParserLoadError, match="neither"):
            load_parser("hybrid_matrix.exceptions")
