"""
Tree Registry
==============

The registry is the append-only record of every committed batch. Batches are
stored in sequence order: the batch at position ``i`` has sequence index
``i``. Nothing is ever removed or replaced.

Lookups by leaf scan the batches oldest first and stop at the first tree that
contains the leaf. If the same leaf was committed more than once (a header
submitted twice, or two header hashes colliding), only the earliest batch is
ever returned. Later copies are still committed in their own trees but can
not be reached through a leaf lookup.

Registered batches are immutable, so reads need no locking. Only appends are
serialized.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Optional

from src.core.batch import Batch

if TYPE_CHECKING:
    from src.crypto.merkle import MerkleTree

logger = logging.getLogger(__name__)


class TreeRegistry:
    """
    Append-only, order-indexed collection of committed batches.

    Attributes:
        _batches: Committed batches, position equals sequence index.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._batches: list = []
        self._lock = threading.Lock()

    @property
    def next_index(self) -> int:
        """Sequence index the next registered batch must carry."""
        return len(self._batches)

    def register(self, headers) -> "Batch":
        """
        Seal *headers* into a new batch at the next free sequence index.

        The index is chosen and the batch appended while holding the
        registry lock, so accumulators sharing one registry never race for
        the same slot.

        Args:
            headers: The headers of the batch, in arrival order.

        Returns:
            The registered Batch.
        """
        with self._lock:
            batch = Batch.build(len(self._batches), headers)
            self._batches.append(batch)

        logger.debug("Registered batch %d (root=%s)", batch.index, batch.root_hex[:16])
        return batch

    def append(self, batch: "Batch") -> None:
        """
        Register a committed batch.

        Args:
            batch: The batch to register. Its index must equal
                ``next_index``.

        Raises:
            ValueError: If the batch index would leave a gap or reuse a slot.
        """
        with self._lock:
            expected = len(self._batches)
            if batch.index != expected:
                raise ValueError(
                    f"Batch index {batch.index} out of sequence, expected {expected}"
                )
            self._batches.append(batch)

        logger.debug("Registered batch %d (root=%s)", batch.index, batch.root_hex[:16])

    def get_batch(self, index: int) -> Optional["Batch"]:
        """
        Look up a batch by sequence index.

        Args:
            index: The sequence index.

        Returns:
            The Batch, or None if no batch has that index.
        """
        if isinstance(index, bool) or not isinstance(index, int):
            return None
        if index < 0 or index >= len(self._batches):
            return None
        return self._batches[index]

    def get_tree(self, index: int) -> Optional["MerkleTree"]:
        """
        Look up the Merkle tree registered at a sequence index.

        Returns:
            The MerkleTree, or None if no batch has that index.
        """
        batch = self.get_batch(index)
        return batch.tree if batch is not None else None

    def find_batch_containing(self, leaf: bytes) -> Optional["Batch"]:
        """
        Find the earliest batch whose tree contains *leaf*.

        Args:
            leaf: A leaf digest.

        Returns:
            The oldest matching Batch, or None if no tree contains the leaf.
        """
        for batch in list(self._batches):
            if batch.tree.contains(leaf):
                return batch
        return None

    def find_tree_containing(self, leaf: bytes) -> Optional["MerkleTree"]:
        """
        Find the earliest registered tree that contains *leaf*.

        Returns:
            The oldest matching MerkleTree, or None.
        """
        batch = self.find_batch_containing(leaf)
        return batch.tree if batch is not None else None

    def batches(self) -> list:
        """Return a snapshot of all committed batches in sequence order."""
        return list(self._batches)

    def __len__(self) -> int:
        return len(self._batches)

    def __iter__(self):
        return iter(list(self._batches))

    def __repr__(self) -> str:
        return f"TreeRegistry(batches={len(self._batches)})"
