"""
Header Ingestion Pipeline
==========================

Connects a header source to a committer. A bounded ``asyncio.Queue`` sits
between one producer task, which drains the source, and one consumer task,
which is the only caller of ``HeaderCommitter.add_header``. A full queue
makes the producer wait, so a fast source cannot outrun the committer.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Optional

from src.config import DEFAULT_QUEUE_SIZE
from src.core.header import HeaderValidationError

if TYPE_CHECKING:
    from src.core.batch import Batch
    from src.core.committer import HeaderCommitter
    from src.core.header import BlockHeader
    from src.feeds.source import HeaderSource

logger = logging.getLogger(__name__)

_END = object()


class HeaderPipeline:
    """
    Moves headers from a source into a committer through a bounded queue.

    One producer task drains the source into the queue and one consumer task
    owns the committer, so headers are committed strictly in arrival order by
    a single writer. When the queue is full the producer waits.

    Malformed headers are logged and skipped; any other error in either task
    stops the pipeline and is raised from ``run()``.
    """

    def __init__(
        self,
        source: "HeaderSource",
        committer: "HeaderCommitter",
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ):
        self.source = source
        self.committer = committer
        self.queue_size = queue_size
        self.accepted = 0
        self.rejected = 0
        self.batches_committed = 0
        self._tasks: list[asyncio.Task] = []
        self._stopping = False

    async def run(self) -> int:
        """
        Run until the source is exhausted or ``stop()`` is called.

        Returns the number of headers accepted by the committer.
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.queue_size)
        self._stopping = False
        self._tasks = [
            asyncio.create_task(self._produce(queue), name="header-producer"),
            asyncio.create_task(self._consume(queue), name="header-consumer"),
        ]
        try:
            await asyncio.gather(*self._tasks)
        except asyncio.CancelledError:
            if not self._stopping:
                raise
            logger.info("Header pipeline stopped")
        finally:
            for task in self._tasks:
                task.cancel()

        logger.info(
            "Pipeline finished: accepted=%d rejected=%d batches=%d pending=%d",
            self.accepted, self.rejected, self.batches_committed, self.committer.pending_count,
        )
        return self.accepted

    def stop(self) -> None:
        """Cancel ingestion. Buffered, uncommitted headers stay pending."""
        self._stopping = True
        for task in self._tasks:
            task.cancel()

    # ------------------------------------------------------------------
    # Producer and consumer
    # ------------------------------------------------------------------

    async def _produce(self, queue: asyncio.Queue) -> None:
        async for header in self.source.headers():
            await queue.put(header)
        await queue.put(_END)

    async def _consume(self, queue: asyncio.Queue) -> None:
        while True:
            header = await queue.get()
            if header is _END:
                return
            batch = self._commit(header)
            if batch is not None:
                self.batches_committed += 1

    def _commit(self, header: "BlockHeader") -> Optional["Batch"]:
        try:
            batch = self.committer.add_header(header)
        except HeaderValidationError as e:
            self.rejected += 1
            logger.warning("Skipping header: %s", e)
            return None
        self.accepted += 1
        return batch
