"""
Example 01: Committing Headers
===============================

This example walks through the batch-commit workflow:
1. Create a committer with a batch size of 5.
2. Feed it the five sample Polkadot headers shipped in ``examples/data``.
3. Watch the fifth header seal batch 0 and build its Merkle tree.
4. Feed three more headers and see them wait in the pending buffer.

Headers are only committed in full batches. The three extra headers stay
pending until two more arrive; there is no timer that flushes them.

Usage:
    python examples/01_commit_headers.py
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.core.committer import HeaderCommitter
from src.feeds.source import load_headers
from src.utils.visualizer import CommitVisualizer
from examples.helpers.header_factory import HeaderFactory

DATA_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "polkadot_headers.jsonl")


def main():
    print("=" * 60)
    print("Header Commitment - Committing Headers")
    print("=" * 60)

    # Step 1: One committer owns the buffer, the registry and the index.
    print("\n[Step 1] Creating a committer (batch size 5)...")
    committer = HeaderCommitter(batch_size=5)

    # Step 2: Add the sample headers one at a time, in chain order.
    print("\n[Step 2] Adding sample headers...")
    for header in load_headers(DATA_FILE):
        batch = committer.add_header(header)
        print(f"  #{header.number} {header.hash[:18]}... pending={committer.pending_count}")
        if batch is not None:
            # Step 3: The fifth header completed the batch.
            print(f"\n[Step 3] Batch {batch.index} sealed, root {batch.root_hex}")

    # Step 4: A partial batch is never committed on its own.
    print("\n[Step 4] Adding three more headers...")
    for header in HeaderFactory.make_chain(start=22346177, count=3):
        committer.add_header(header)
    print(f"  Batches: {committer.batch_count}, pending headers: {committer.pending_count}")

    visualizer = CommitVisualizer(committer)
    visualizer.print_batches()
    visualizer.print_batch_details(0)
    visualizer.print_info()


if __name__ == "__main__":
    main()
