"""
Tests for Hash Functions
=========================

Tests cover:
- SHA-256 primitives
- Leaf hashing of the header hash *string*
- Ordered pair hashing
"""

import hashlib

from src.crypto.hash import DIGEST_SIZE, hash_pair, leaf_hash, sha256, sha256_hex


class TestSha256:
    """Tests for the SHA-256 wrappers."""

    def test_known_vector(self):
        """SHA-256 of 'hello' should match the published digest."""
        assert sha256(b"hello").hex() == (
            "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"
        )

    def test_hex_matches_bytes(self):
        assert sha256_hex(b"abc") == sha256(b"abc").hex()

    def test_digest_size(self):
        assert len(sha256(b"")) == DIGEST_SIZE


class TestLeafHash:
    """Tests for the leaf value derived from a header hash."""

    def test_hashes_utf8_string(self):
        """The leaf is SHA-256 of the hash string as text, prefix included."""
        header_hash = "0x" + "ab" * 32
        assert leaf_hash(header_hash) == hashlib.sha256(header_hash.encode("utf-8")).digest()

    def test_not_hash_of_decoded_bytes(self):
        """Hex-decoding the hash first would give a different leaf."""
        header_hash = "0x" + "ab" * 32
        assert leaf_hash(header_hash) != sha256(bytes.fromhex(header_hash[2:]))

    def test_case_sensitive(self):
        assert leaf_hash("0x" + "ab" * 32) != leaf_hash("0x" + "AB" * 32)


class TestHashPair:
    """Tests for parent node hashing."""

    def test_concatenation(self):
        left, right = b"\x01" * 32, b"\x02" * 32
        assert hash_pair(left, right) == hashlib.sha256(left + right).digest()

    def test_order_matters(self):
        """Pairs are never sorted."""
        left, right = b"\x01" * 32, b"\x02" * 32
        assert hash_pair(left, right) != hash_pair(right, left)
