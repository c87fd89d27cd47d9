"""
Header Commitment Hash Functions
=================================

This module implements the hash functions used to commit block headers into
Merkle trees.

Every digest in the system is a single round of **SHA-256**:

- **Leaf hashing**: a header enters a tree as SHA-256 of its ``hash`` field.
  The field is already a digest (the chain's own block hash, hex-encoded with
  a ``0x`` prefix), so a leaf is a *hash of a hash string*. The string is
  hashed exactly as received, as UTF-8 text, not decoded to raw bytes first.
  Changing this layering changes every leaf and therefore every root and
  proof ever produced.

- **Node hashing**: an internal node is SHA-256 of its two children
  concatenated in left-to-right order. Pairs are never sorted.
"""

import hashlib

DIGEST_SIZE = 32
"""Size in bytes of every leaf and node digest."""


def sha256(data: bytes) -> bytes:
    """
    Compute the SHA-256 hash of the input data.

    Args:
        data: The raw bytes to hash.

    Returns:
        The 32-byte SHA-256 digest.

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def sha256_hex(data: bytes) -> str:
    """Compute SHA-256 and return it as a lowercase hex string."""
    return sha256(data).hex()


def leaf_hash(header_hash: str) -> bytes:
    """
    Compute the leaf value committed for a header.

    The header's hash string is encoded as UTF-8 and hashed once with
    SHA-256. The ``0x`` prefix and the letter case are part of the input,
    so ``"0xAB.."`` and ``"0xab.."`` yield different leaves.

    Args:
        header_hash: The header's ``hash`` field as received from the chain.

    Returns:
        The 32-byte leaf digest.
    """
    return sha256(header_hash.encode("utf-8"))


def hash_pair(left: bytes, right: bytes) -> bytes:
    """
    Compute a parent node digest: SHA-256(left || right).

    Args:
        left: Digest of the left child.
        right: Digest of the right child.

    Returns:
        The 32-byte parent digest.
    """
    return sha256(left + right)
