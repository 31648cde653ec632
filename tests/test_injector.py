"""Tests for tag injection."""

from __future__ import annotations


def _target(file_path="src/lib.rs", construct_name=None, tag="// @MATRIX: REQ-001", language="rust"):
    from hybrid_matrix.core.models import Language, Target

    return Target(
        file_path=file_path,
        language=Language(language),
        expected_tag=tag,
        construct_name=construct_name,
    )


class TestComposeTag:
    def test_preformatted_tag_verbatim(self):
        from hybrid_matrix.core.models import Language
        from hybrid_matrix.injector import compose_tag

        assert compose_tag(Language.PYTHON, ["REQ-1"], "// @MATRIX: REQ-1") == "// @MATRIX: REQ-1"

    def test_bare_tag_gets_language_prefix(self):
        from hybrid_matrix.core.models import Language
        from hybrid_matrix.injector import compose_tag

        assert compose_tag(Language.PYTHON, ["REQ-1"], "@MATRIX: REQ-1") == "# @MATRIX: REQ-1"
        assert compose_tag(Language.GO, ["REQ-1"], "@MATRIX: REQ-1") == "// @MATRIX: REQ-1"

    def test_built_from_sources(self):
        from hybrid_matrix.core.models import Language
        from hybrid_matrix.injector import compose_tag

        assert compose_tag(Language.RUST, ["REQ-1", "REQ-2"]) == "// @MATRIX: REQ-1, REQ-2"


class TestInsertTag:
    def test_above_declaration_with_indentation(self):
        from hybrid_matrix.injector import insert_tag

        content = "mod x {\n    pub fn compute() {\n    }\n}\n"
        result = insert_tag(content, "// @MATRIX: REQ-001", "compute")
        assert result == "mod x {\n    // @MATRIX: REQ-001\n    pub fn compute() {\n    }\n}\n"

    def test_name_must_match_whole_word(self):
        from hybrid_matrix.injector import insert_tag

        content = "fn compute_all() {}\nfn compute() {}\n"
        result = insert_tag(content, "// T", "compute")
        assert result == "fn compute_all() {}\n// T\nfn compute() {}\n"

    def test_go_receiver(self):
        from hybrid_matrix.injector import insert_tag

        content = "package x\n\nfunc (s *Server) Start() error {\n\treturn nil\n}\n"
        result = insert_tag(content, "// T", "Start")
        assert result == "package x\n\n// T\nfunc (s *Server) Start() error {\n\treturn nil\n}\n"

    def test_prepends_when_not_found(self):
        from hybrid_matrix.injector import insert_tag

        assert insert_tag("x = 1\n", "# T", "missing") == "# T\nx = 1\n"
        assert insert_tag("x = 1\n", "# T", None) == "# T\nx = 1\n"

    def test_crlf_preserved(self):
        from hybrid_matrix.injector import insert_tag

        assert insert_tag("a\r\nfn f() {}\r\n", "// T", "f") == "a\r\n// T\r\nfn f() {}\r\n"
        assert insert_tag("a\r\n", "// T", None) == "// T\r\na\r\n"


class TestInject:
    def test_inserts_and_is_idempotent(self, tmp_path, write_file):
        from hybrid_matrix.injector import inject

        path = write_file("src/lib.rs", "pub fn compute() {\n}\n")
        target = _target(construct_name="compute")
        assert inject(target, ["REQ-001"], tmp_path) is True
        once = path.read_text()
        assert once == "// @MATRIX: REQ-001\npub fn compute() {\n}\n"
        assert inject(target, ["REQ-001"], tmp_path) is True
        assert path.read_text() == once

    def test_bare_tag_already_present(self, tmp_path, write_file):
        from hybrid_matrix.injector import inject

        path = write_file("app.py", "# see @MATRIX: REQ-9\ndef handler():\n    pass\n")
        target = _target("app.py", "handler", tag="@MATRIX: REQ-9", language="python")
        assert inject(target, ["REQ-9"], tmp_path) is True
        assert path.read_text().count("@MATRIX") == 1

    def test_python_comment_prefix(self, tmp_path, write_file):
        from hybrid_matrix.injector import inject

        path = write_file("app.py", "class App:\n    def handler(self):\n        pass\n")
        target = _target("app.py", "handler", tag="@MATRIX: REQ-9", language="python")
        inject(target, ["REQ-9"], tmp_path)
        assert path.read_text() == (
            "class App:\n    # @MATRIX: REQ-9\n    def handler(self):\n        pass\n"
        )

    def test_missing_file(self, tmp_path):
        from hybrid_matrix.injector import inject

        assert inject(_target(), ["REQ-001"], tmp_path) is False
        assert not (tmp_path / "src" / "lib.rs").exists()


def test_validate_inject_validate_round_trip(tmp_path, write_file, make_link):
    from hybrid_matrix.core.models import LinkStatus, Store
    from hybrid_matrix.core.validator import validate
    from hybrid_matrix.injector import TagInjector

    write_file("src/lib.rs", "pub fn compute() {\n}\n")
    store = validate(Store(links=[make_link(construct_name="compute")]), tmp_path)
    assert store.links[0].status is LinkStatus.BROKEN

    injector = TagInjector(tmp_path)
    for link in store.links:
        for target in link.targets:
            assert injector.inject(target, link.sources)

    assert validate(store, tmp_path).links[0].status is LinkStatus.VALID
