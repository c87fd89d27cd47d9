"""
Header Commitment Management
=============================

This module implements the ``HeaderCommitter`` class that ties the core
components together into one owned object:

- **Header Store**: every received header, indexed by hash and by number.
- **Batch Accumulator**: buffers headers and seals a batch every
  ``batch_size`` headers.
- **Tree Registry**: the append-only list of committed batches and trees.
- **Proofs**: generation and verification of inclusion proofs for any
  committed header.

Data flows one way: headers go into the accumulator, sealed batches into the
registry, and proofs are read from the registry on demand. A committer is an
ordinary object; create one per header stream and pass it to whatever needs
it.

The committer keeps every batch in memory for its whole lifetime. There is
no persistence across restarts and no eviction of old batches; the JSON
export is a snapshot for inspection, not a store to resume from.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import TYPE_CHECKING, Callable, Optional

from src.config import DEFAULT_BATCH_SIZE, CommitterConfig
from src.core.accumulator import BatchAccumulator
from src.core.header_store import HeaderStore
from src.core.proof import generate_proof, verify_proof
from src.core.registry import TreeRegistry

if TYPE_CHECKING:
    from src.core.batch import Batch
    from src.core.header import BlockHeader
    from src.core.proof import MerkleProof
    from src.crypto.merkle import MerkleTree

logger = logging.getLogger(__name__)


class HeaderCommitter:
    """
    Commits a stream of headers into Merkle trees and proves inclusion.

    Attributes:
        batch_size: Headers per committed batch.
        validate_headers: Whether headers are format-checked on arrival.
        registry: The tree registry.
        accumulator: The batch accumulator.
        store: The header lookup index.
    """

    def __init__(
        self,
        batch_size: int = DEFAULT_BATCH_SIZE,
        validate_headers: bool = True,
    ) -> None:
        """
        Initialize a committer with empty state.

        Args:
            batch_size: Headers per batch; must be a positive integer.
            validate_headers: If True, reject headers whose digest fields
                are not ``0x`` + 64 hex characters.

        Raises:
            ConfigurationError: If the batch size is invalid.
        """
        self.registry = TreeRegistry()
        self.accumulator = BatchAccumulator(batch_size, self.registry)
        self.store = HeaderStore()
        self.batch_size: int = self.accumulator.batch_size
        self.validate_headers: bool = validate_headers
        self._listeners: list = []
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config: CommitterConfig) -> HeaderCommitter:
        """Create a committer from a ``CommitterConfig``."""
        return cls(
            batch_size=config.batch_size,
            validate_headers=config.validate_headers,
        )

    def on_commit(self, callback: Callable) -> None:
        """
        Register a callback invoked with every newly sealed batch.

        Callbacks run synchronously, after the batch is registered, in the
        order they were added. They run under the committer's write lock,
        so batches reach them in sequence order even with concurrent
        callers.
        """
        self._listeners.append(callback)

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def add_header(self, header: "BlockHeader") -> Optional["Batch"]:
        """
        Accept the next header of the stream.

        The header is indexed in the header store and appended to the
        accumulator. Duplicates are not filtered: a header seen before is
        buffered again and may be committed into a later batch as well.

        Concurrent callers are serialized, so the header index and the
        listener calls follow the batch sequence.

        Args:
            header: The next header in arrival order.

        Returns:
            The Batch sealed by this header, or None.

        Raises:
            HeaderValidationError: If validation is enabled and the header is
                malformed. A rejected header is not buffered.
        """
        if self.validate_headers:
            header.validate()

        with self._lock:
            self.store.add_header(header)
            batch = self.accumulator.add_header(header)

            if batch is not None:
                for callback in self._listeners:
                    callback(batch)
        return batch

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_tree(self, index: int) -> Optional["MerkleTree"]:
        """Return the tree at sequence *index*, or None if out of range."""
        return self.registry.get_tree(index)

    def get_batch(self, index: int) -> Optional["Batch"]:
        """Return the batch at sequence *index*, or None if out of range."""
        return self.registry.get_batch(index)

    def find_tree_containing(self, leaf: bytes) -> Optional["MerkleTree"]:
        """Return the earliest tree containing *leaf*, or None."""
        return self.registry.find_tree_containing(leaf)

    def generate_proof(self, header: "BlockHeader") -> Optional["MerkleProof"]:
        """
        Build an inclusion proof for *header*.

        Returns:
            The MerkleProof, or None if the header was never committed.
        """
        return generate_proof(self.registry, header)

    def verify_proof(self, proof, header: "BlockHeader") -> bool:
        """
        Verify *proof* for *header* against the tree the header belongs to.

        Returns:
            True only if the proof folds to that tree's root.
        """
        return verify_proof(self.registry, proof, header)

    @property
    def pending_count(self) -> int:
        """Headers waiting for the current batch to fill."""
        return self.accumulator.pending_count

    @property
    def batch_count(self) -> int:
        """Number of committed batches."""
        return len(self.registry)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        """
        Convert the committer state to a JSON-serializable dictionary.

        Returns:
            Dictionary with the batch size, committed batches and the
            headers still pending.
        """
        return {
            'batch_size': self.batch_size,
            'batches': [batch.to_dict() for batch in self.registry],
            'pending': [header.to_dict() for header in self.accumulator.pending],
        }

    def export_json(self, path: str) -> None:
        """
        Write a JSON snapshot of the committer state to *path*.

        Args:
            path: Destination file path.
        """
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info("Exported %d batches to %s", self.batch_count, path)

    def __repr__(self) -> str:
        return (
            f"HeaderCommitter(batch_size={self.batch_size}, "
            f"batches={self.batch_count}, pending={self.pending_count})"
        )
