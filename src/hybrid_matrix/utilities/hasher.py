"""Hasher - Content fingerprints for construct drift detection.

A fingerprint hashes a construct's normalized logic, so that reformatting
or editing comments does not count as a change while any edit to the code
itself does.
"""

import hashlib
import re

# Line-comment markers per comment family
_LINE_COMMENT = {
    "hash": re.compile(r"(?<![\"'])#.*$"),
    "slash": re.compile(r"(?<![:\"'])//.*$"),
}
_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_WHITESPACE = re.compile(r"\s+")


def strip_comments(content: str, comment_family: str = "slash") -> str:
    """Remove comments from source text.

    Args:
        content: Source text
        comment_family: "hash" for #-comment languages, "slash" for
                        //-comment languages (block comments removed too)

    Returns:
        Source text without comments; line structure is preserved
    """
    if comment_family == "slash":
        content = _BLOCK_COMMENT.sub("", content)
    pattern = _LINE_COMMENT.get(comment_family, _LINE_COMMENT["slash"])
    return "\n".join(pattern.sub("", line) for line in content.split("\n"))


def normalize_logic(content: str, comment_family: str = "slash") -> str:
    """Normalize source text for fingerprinting.

    Comments are stripped, blank lines dropped and every run of
    whitespace collapsed to a single space.
    """
    stripped = strip_comments(content, comment_family)
    lines = [_WHITESPACE.sub(" ", line).strip() for line in stripped.split("\n")]
    return "\n".join(line for line in lines if line)


def calculate_hash(content: str, length: int = 16, algorithm: str = "sha256") -> str:
    """Calculate a hexadecimal content hash.

    Args:
        content: Text content to hash
        length: Number of hex characters to keep
        algorithm: "sha256", "sha1" or "md5"

    Returns:
        Hexadecimal hash string of the requested length
    """
    if algorithm == "sha256":
        hash_obj = hashlib.sha256(content.encode("utf-8"))
    elif algorithm == "sha1":
        hash_obj = hashlib.sha1(content.encode("utf-8"))
    elif algorithm == "md5":
        hash_obj = hashlib.md5(content.encode("utf-8"))
    else:
        raise ValueError(f"Unsupported hash algorithm: {algorithm}")

    return hash_obj.hexdigest()[:length]


def calculate_fingerprint(
    content: str,
    comment_family: str = "slash",
    length: int = 16,
    algorithm: str = "sha256",
) -> str:
    """Fingerprint a construct's source by hashing its normalized logic."""
    return calculate_hash(normalize_logic(content, comment_family), length, algorithm)


def verify_fingerprint(
    content: str,
    expected: str,
    comment_family: str = "slash",
    length: int = 16,
    algorithm: str = "sha256",
) -> bool:
    """Check that content still has the expected fingerprint (case-insensitive)."""
    actual = calculate_fingerprint(content, comment_family, length, algorithm)
    return actual.lower() == expected.lower()
