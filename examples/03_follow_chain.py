"""
Example 03: Following a Live Chain
===================================

This example connects to a public Polkadot RPC endpoint and commits the
next 10 headers in batches of 5. Headers flow through a bounded queue into
a single consumer that owns the committer, so batches are sealed strictly in
chain order.

Requires network access.

Usage:
    python examples/03_follow_chain.py [RPC_URL]
"""

import asyncio
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.config import DEFAULT_RPC_URL
from src.core.committer import HeaderCommitter
from src.feeds.pipeline import HeaderPipeline
from src.feeds.rpc import SubstrateRpcHeaderSource
from src.utils.visualizer import CommitVisualizer


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    url = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_RPC_URL

    committer = HeaderCommitter(batch_size=5)
    source = SubstrateRpcHeaderSource(url=url, max_headers=10)
    pipeline = HeaderPipeline(source, committer, queue_size=32)

    print(f"Following {url} for 10 headers...")
    asyncio.run(pipeline.run())

    visualizer = CommitVisualizer(committer)
    visualizer.print_batches()
    for batch in committer.registry:
        header = batch.headers[0]
        visualizer.print_proof(committer.generate_proof(header))


if __name__ == "__main__":
    main()
