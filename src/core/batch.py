"""
Sealed header batches.

A batch is a fixed-size, arrival-ordered group of headers committed together
into one Merkle tree. Batches are identified by a sequence index: the first
batch committed is 0, the next 1, and so on without gaps.

A ``Batch`` is only created once its headers are complete and its tree is
built, so it is never mutated afterwards.
"""

from __future__ import annotations

from src.crypto.merkle import MerkleTree


class Batch:
    """
    A committed batch of headers and the Merkle tree built over them.

    Attributes:
        index: Sequence index of the batch in commit order.
        headers: The batch's headers, in arrival order.
        tree: The Merkle tree over the headers' leaf values.
    """

    __slots__ = ("_index", "_headers", "_tree")

    def __init__(self, index: int, headers, tree: MerkleTree) -> None:
        headers = tuple(headers)
        if len(headers) != tree.leaf_count:
            raise ValueError(
                f"Batch {index} has {len(headers)} headers but its tree has "
                f"{tree.leaf_count} leaves"
            )
        self._index = index
        self._headers = headers
        self._tree = tree

    @classmethod
    def build(cls, index: int, headers) -> Batch:
        """
        Build the Merkle tree over *headers* and seal them as a batch.

        Args:
            index: Sequence index the batch will be registered under.
            headers: The headers, in arrival order.

        Returns:
            The sealed Batch.
        """
        headers = tuple(headers)
        tree = MerkleTree([header.leaf for header in headers])
        return cls(index, headers, tree)

    @property
    def index(self) -> int:
        return self._index

    @property
    def headers(self) -> tuple:
        return self._headers

    @property
    def tree(self) -> MerkleTree:
        return self._tree

    @property
    def root_hex(self) -> str:
        return self._tree.root_hex

    @property
    def first_number(self) -> int:
        """Block number of the first header in the batch."""
        return self._headers[0].number

    @property
    def last_number(self) -> int:
        """Block number of the last header in the batch."""
        return self._headers[-1].number

    def __len__(self) -> int:
        return len(self._headers)

    def to_dict(self) -> dict:
        """
        Convert this batch to a JSON-serializable dictionary.

        Returns:
            Dictionary with the index, root, headers and tree leaves.
        """
        return {
            'index': self._index,
            'root': self.root_hex,
            'headers': [header.to_dict() for header in self._headers],
            'tree': self._tree.to_dict(),
        }

    def __repr__(self) -> str:
        return (
            f"Batch(index={self._index}, root='{self.root_hex[:16]}...', "
            f"headers={len(self._headers)})"
        )
