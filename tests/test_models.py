"""Tests for store and snapshot records."""

from __future__ import annotations

import pytest

STORE_DOC = {
    "matrix_version": "1.0",
    "links": [
        {
            "matrix_id": "MTX-1042",
            "cardinality": "1:N",
            "layer1_sources": ["REQ-012", "REQ-013"],
            "layer3_targets": [
                {
                    "file_path": "src/auth.rs",
                    "construct_name": "verify_token",
                    "language": "rust",
                    "expected_tag": "// @MATRIX: REQ-012",
                    "expected_hash": "abc123",
                    "owner": "team-auth",
                },
                {
                    "file_path": "scripts/deploy.sh",
                    "language": "shell",
                    "expected_tag": "# @MATRIX: REQ-013",
                },
            ],
            "status": "VALID",
            "last_verified": "2024-05-01T10:00:00.000Z",
        }
    ],
    "orphans": {"unlinked_requirements": ["REQ-099"], "unlinked_code_tags": []},
    "generator": "bridge",
}


class TestStoreRecords:
    def test_decodes_document(self):
        from hybrid_matrix.core.models import Cardinality, Language, LinkStatus, Store

        store = Store.from_dict(STORE_DOC)
        link = store.links[0]
        assert link.matrix_id == "MTX-1042"
        assert link.cardinality is Cardinality.ONE_TO_MANY
        assert link.sources == ["REQ-012", "REQ-013"]
        assert link.status is LinkStatus.VALID
        assert link.targets[0].expected_fingerprint == "abc123"
        assert link.targets[1].construct_name is None
        assert link.targets[1].language is Language.SHELL
        assert store.orphans.unlinked_sources == ["REQ-099"]

    def test_unknown_fields_survive_round_trip(self):
        from hybrid_matrix.core.models import Store

        assert Store.from_dict(STORE_DOC).to_dict() == STORE_DOC

    def test_missing_sources_rejected(self):
        from hybrid_matrix.core.models import Store
        from hybrid_matrix.exceptions import StoreFormatError

        doc = {"links": [{**STORE_DOC["links"][0], "layer1_sources": []}]}
        with pytest.raises(StoreFormatError, match="MTX-1042"):
            Store.from_dict(doc)

    def test_missing_targets_rejected(self):
        from hybrid_matrix.core.models import Store
        from hybrid_matrix.exceptions import StoreFormatError

        link = {k: v for k, v in STORE_DOC["links"][0].items() if k != "layer3_targets"}
        with pytest.raises(StoreFormatError, match="layer3_targets"):
            Store.from_dict({"links": [link]})

    def test_unknown_language_rejected(self):
        from hybrid_matrix.core.models import Target
        from hybrid_matrix.exceptions import StoreFormatError

        with pytest.raises(StoreFormatError, match="cobol"):
            Target.from_dict({"file_path": "a", "language": "cobol", "expected_tag": "t"})

    def test_links_for_source(self):
        from hybrid_matrix.core.models import Store

        store = Store.from_dict(STORE_DOC)
        assert [link.matrix_id for link in store.links_for_source("REQ-013")] == ["MTX-1042"]
        assert store.links_for_source("REQ-404") == []

    def test_comment_prefix(self):
        from hybrid_matrix.core.models import Language

        assert Language.PYTHON.comment_prefix == "#"
        assert Language.RUBY.comment_prefix == "#"
        assert Language.RUST.comment_prefix == "//"
        assert Language.TYPESCRIPT.comment_prefix == "//"

    def test_describe(self):
        from hybrid_matrix.core.models import Store

        targets = Store.from_dict(STORE_DOC).links[0].targets
        assert targets[0].describe() == "src/auth.rs::verify_token"
        assert targets[1].describe() == "scripts/deploy.sh"

    def test_orphan_string_value_rejected(self):
        from hybrid_matrix.core.models import Store
        from hybrid_matrix.exceptions import StoreFormatError

        with pytest.raises(StoreFormatError, match="unlinked_requirements"):
            Store.from_dict({"links": [], "orphans": {"unlinked_requirements": "REQ-1"}})

    def test_orphan_non_string_items_rejected(self):
        from hybrid_matrix.core.models import Store
        from hybrid_matrix.exceptions import StoreFormatError

        with pytest.raises(StoreFormatError, match="unlinked_code_tags"):
            Store.from_dict({"links": [], "orphans": {"unlinked_code_tags": [1, 2]}})


class TestSnapshotRecords:
    def _node(self):
        from hybrid_matrix.core.models import Node

        return Node.from_dict(
            {
                "id": "src/auth.rs",
                "filePath": "src/auth.rs",
                "outputs": [{"name": "Token", "logicHash": "out"}],
                "data": [{"name": "Token", "fingerprint": "dat"}],
                "children": [
                    {"id": "src/auth.rs#inner", "outputs": [{"name": "helper", "logicHash": "h"}]}
                ],
            }
        )

    def test_own_construct_prefers_outputs(self):
        assert self._node().own_construct("Token").fingerprint == "out"

    def test_find_construct_prefers_data(self):
        assert self._node().find_construct("Token").fingerprint == "dat"

    def test_find_construct_searches_children(self):
        node = self._node()
        assert node.find_construct("helper").fingerprint == "h"
        assert node.own_construct("helper") is None

    def test_child_file_path_defaults_to_id(self):
        child = self._node().children[0]
        assert child.file_path == "src/auth.rs#inner"

    def test_iter_nodes_walks_tree(self):
        from hybrid_matrix.core.models import Snapshot

        snapshot = Snapshot(nodes=(self._node(),))
        assert [n.id for n in snapshot.iter_nodes()] == ["src/auth.rs", "src/auth.rs#inner"]

    def test_malformed_construct_rejected(self):
        from hybrid_matrix.core.models import Snapshot
        from hybrid_matrix.exceptions import SnapshotFormatError

        with pytest.raises(SnapshotFormatError):
            Snapshot.from_dict({"nodes": [{"id": "a", "outputs": [{"logicHash": "x"}]}]})
