"""Tests for content fingerprints."""

from __future__ import annotations

import pytest


class TestCalculateHash:
    def test_default_length(self):
        from hybrid_matrix.utilities.hasher import calculate_hash

        result = calculate_hash("fn main() {}")
        assert len(result) == 16
        assert all(c in "0123456789abcdef" for c in result)

    def test_custom_length_and_algorithm(self):
        from hybrid_matrix.utilities.hasher import calculate_hash

        assert len(calculate_hash("x", length=8, algorithm="md5")) == 8
        assert calculate_hash("x", algorithm="sha1") != calculate_hash("x", algorithm="sha256")

    def test_unsupported_algorithm(self):
        from hybrid_matrix.utilities.hasher import calculate_hash

        with pytest.raises(ValueError, match="crc32"):
            calculate_hash("x", algorithm="crc32")


class TestFingerprint:
    def test_comments_do_not_count(self):
        from hybrid_matrix.utilities.hasher import calculate_fingerprint

        plain = "fn f() {\n    x + 1\n}"
        commented = "// adds one\nfn f() { /* body */\n    x + 1 // sum\n}"
        assert calculate_fingerprint(plain) == calculate_fingerprint(commented)

    def test_whitespace_does_not_count(self):
        from hybrid_matrix.utilities.hasher import calculate_fingerprint

        assert calculate_fingerprint("def f():\n    return 1", "hash") == calculate_fingerprint(
            "def f():\n\n        return   1\n", "hash"
        )

    def test_logic_change_counts(self):
        from hybrid_matrix.utilities.hasher import calculate_fingerprint

        assert calculate_fingerprint("fn f() { x + 1 }") != calculate_fingerprint(
            "fn f() { x + 2 }"
        )

    def test_hash_family_keeps_slashes(self):
        from hybrid_matrix.utilities.hasher import strip_comments

        assert strip_comments("x = a // b  # note", "hash") == "x = a // b  "

    def test_verify_is_case_insensitive(self):
        from hybrid_matrix.utilities.hasher import calculate_fingerprint, verify_fingerprint

        fingerprint = calculate_fingerprint("fn f() {}")
        assert verify_fingerprint("fn f() {}", fingerprint.upper())
        assert not verify_fingerprint("fn g() {}", fingerprint)
