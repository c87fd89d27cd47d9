"""
Block header records.

A header arrives from the chain as five fields:

- **number**: the block height, monotonically increasing along the chain.
- **hash**: the block hash, the header's primary identity.
- **parentHash**, **stateRoot**, **extrinsicsRoot**: digests linking the
  header to its parent, the post-block state and the block body.

Digest fields are hex strings with a ``0x`` prefix, exactly as the node's
JSON-RPC interface reports them. They are kept as strings because the leaf
committed for a header is the hash of the ``hash`` *string*.

Headers are immutable once constructed. Two headers are equal when their
hashes are equal.
"""

from __future__ import annotations

import re
from typing import Optional

from src.config import HEADER_HASH_HEX_LENGTH
from src.crypto.hash import leaf_hash

_DIGEST_RE = re.compile(r"^0x[0-9a-fA-F]{%d}$" % HEADER_HASH_HEX_LENGTH)


class HeaderValidationError(ValueError):
    """
    Raised when a header field does not have the expected format.

    The message names the offending field so that a rejected header can be
    traced back to the source that produced it.
    """
    pass


def is_digest(value) -> bool:
    """Return True if *value* is ``0x`` followed by 64 hex characters."""
    return isinstance(value, str) and _DIGEST_RE.match(value) is not None


def parse_block_number(value) -> int:
    """
    Parse a block number given as an int or a JSON-RPC hex quantity.

    Args:
        value: An int, a decimal string, or a ``0x``-prefixed hex string.

    Returns:
        The block number as an int.

    Raises:
        HeaderValidationError: If the value cannot be parsed.
    """
    if isinstance(value, bool):
        raise HeaderValidationError(f"Invalid block number: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            if value.lower().startswith("0x"):
                return int(value, 16)
            return int(value)
        except ValueError:
            pass
    raise HeaderValidationError(f"Invalid block number: {value!r}")


class BlockHeader:
    """
    A block header as received from the chain.

    Attributes:
        number: Block height.
        hash: Hex-encoded block hash (``0x`` prefixed).
        parent_hash: Hex-encoded hash of the parent block.
        state_root: Hex-encoded state trie root after the block.
        extrinsics_root: Hex-encoded root of the block's extrinsics.
    """

    __slots__ = (
        "_number",
        "_hash",
        "_parent_hash",
        "_state_root",
        "_extrinsics_root",
        "_leaf",
    )

    def __init__(
        self,
        number: int,
        hash: str,
        parent_hash: str,
        state_root: str,
        extrinsics_root: str,
    ) -> None:
        self._number = number
        self._hash = hash
        self._parent_hash = parent_hash
        self._state_root = state_root
        self._extrinsics_root = extrinsics_root
        self._leaf: Optional[bytes] = None

    @property
    def number(self) -> int:
        return self._number

    @property
    def hash(self) -> str:
        return self._hash

    @property
    def parent_hash(self) -> str:
        return self._parent_hash

    @property
    def state_root(self) -> str:
        return self._state_root

    @property
    def extrinsics_root(self) -> str:
        return self._extrinsics_root

    @property
    def leaf(self) -> bytes:
        """
        The leaf value this header contributes to a Merkle tree.

        Computed as SHA-256 of the ``hash`` string and cached, since the
        header is immutable.
        """
        if self._leaf is None:
            self._leaf = leaf_hash(self._hash)
        return self._leaf

    def validate(self) -> None:
        """
        Check that every field has the expected type and width.

        Raises:
            HeaderValidationError: If the number is not a non-negative int or
                a digest field is not ``0x`` + 64 hex characters.
        """
        if isinstance(self._number, bool) or not isinstance(self._number, int):
            raise HeaderValidationError(
                f"Header number must be an integer, got {self._number!r}"
            )
        if self._number < 0:
            raise HeaderValidationError(
                f"Header number cannot be negative: {self._number}"
            )

        for field, value in (
            ("hash", self._hash),
            ("parentHash", self._parent_hash),
            ("stateRoot", self._state_root),
            ("extrinsicsRoot", self._extrinsics_root),
        ):
            if not is_digest(value):
                raise HeaderValidationError(
                    f"Header #{self._number} field {field} is not a "
                    f"{HEADER_HASH_HEX_LENGTH}-digit 0x-prefixed hex digest: {value!r}"
                )

    def to_dict(self) -> dict:
        """
        Convert this header to a JSON-serializable dictionary.

        Keys follow the chain's JSON-RPC naming.
        """
        return {
            'number': self._number,
            'hash': self._hash,
            'parentHash': self._parent_hash,
            'stateRoot': self._state_root,
            'extrinsicsRoot': self._extrinsics_root,
        }

    @classmethod
    def from_dict(cls, data: dict, block_hash: Optional[str] = None) -> BlockHeader:
        """
        Reconstruct a BlockHeader from a dictionary.

        Accepts the output of ``to_dict()`` as well as a raw JSON-RPC header,
        whose ``number`` is a hex quantity and which carries no ``hash``.

        Args:
            data: Dictionary with camelCase header fields.
            block_hash: Hash to use when *data* has no ``hash`` key.

        Returns:
            A new BlockHeader instance (not yet validated).

        Raises:
            HeaderValidationError: If a field is missing or the number cannot
                be parsed.
        """
        try:
            header_hash = data['hash'] if 'hash' in data else block_hash
            if header_hash is None:
                raise KeyError('hash')
            return cls(
                number=parse_block_number(data['number']),
                hash=header_hash,
                parent_hash=data['parentHash'],
                state_root=data['stateRoot'],
                extrinsics_root=data['extrinsicsRoot'],
            )
        except KeyError as e:
            raise HeaderValidationError(f"Header is missing field {e}") from e

    def __repr__(self) -> str:
        return f"BlockHeader(number={self._number}, hash='{str(self._hash)[:18]}...')"

    def __eq__(self, other) -> bool:
        if not isinstance(other, BlockHeader):
            return NotImplemented
        return self._hash == other._hash

    def __hash__(self) -> int:
        return hash(self._hash)
