"""
Batch Accumulator
==================

The accumulator is the write side of the committer. It buffers incoming
headers in arrival order and, the moment the buffer holds ``batch_size``
headers, seals them into a batch:

1. The buffer is cleared.
2. The registry builds the Merkle tree over the headers' leaf values and
   appends the batch at its next sequence index, under its own lock.

Both steps happen inside the accumulator's critical section, so concurrent
callers can neither lose a header nor count one twice. The buffer is
cleared before registration, so a failed registration drops that batch's
headers instead of leaving a full buffer behind. Between calls the buffer
always holds fewer than ``batch_size`` headers.

There is no time-based flush. A partial buffer waits until enough headers
arrive, and a tail that never fills is never committed.

Tree construction runs inline, so a large batch size delays the next
``add_header`` call until the tree is built.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Optional

from src.config import validate_batch_size

if TYPE_CHECKING:
    from src.core.batch import Batch
    from src.core.header import BlockHeader
    from src.core.registry import TreeRegistry

logger = logging.getLogger(__name__)


class BatchAccumulator:
    """
    Buffers headers and commits them in fixed-size batches.

    Attributes:
        batch_size: Number of headers per committed batch.
        registry: The tree registry sealed batches are appended to.
    """

    def __init__(self, batch_size: int, registry: "TreeRegistry") -> None:
        """
        Initialize the accumulator.

        Args:
            batch_size: Headers per batch; must be a positive integer.
            registry: Registry that receives every sealed batch.

        Raises:
            ConfigurationError: If the batch size is invalid.
        """
        self.batch_size: int = validate_batch_size(batch_size)
        self.registry = registry
        self._buffer: list = []
        self._lock = threading.Lock()

    def add_header(self, header: "BlockHeader") -> Optional["Batch"]:
        """
        Append a header to the working buffer, committing a batch when full.

        Args:
            header: The next header in arrival order.

        Returns:
            The sealed Batch if this header completed one, otherwise None.
        """
        with self._lock:
            self._buffer.append(header)
            logger.debug(
                "Buffered header #%s (%d/%d)",
                header.number, len(self._buffer), self.batch_size,
            )

            if len(self._buffer) < self.batch_size:
                return None

            sealed, self._buffer = self._buffer, []
            batch = self.registry.register(sealed)

        logger.info(
            "Merkle tree created for batch %d with root: %s",
            batch.index, batch.root_hex,
        )
        return batch

    @property
    def pending(self) -> tuple:
        """Headers buffered but not yet committed, in arrival order."""
        with self._lock:
            return tuple(self._buffer)

    @property
    def pending_count(self) -> int:
        """Number of headers waiting for the current batch to fill."""
        return len(self._buffer)

    def __repr__(self) -> str:
        return (
            f"BatchAccumulator(batch_size={self.batch_size}, "
            f"pending={len(self._buffer)})"
        )
