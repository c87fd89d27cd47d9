"""
Example 02: Inclusion Proofs
=============================

This example demonstrates proving that a header was committed:
1. Commit 8 headers with a batch size of 4 (two batches).
2. Generate a proof for a header in the second batch.
3. Verify it, then tamper with one sibling and verify again.
4. Ask for a proof of a header that was never committed.

A proof is the list of sibling digests from the header's leaf up to its
batch root, each tagged with the side it sits on. Verification folds the
leaf with the siblings and compares the result with the root of the tree
the header was committed into.

Usage:
    python examples/02_inclusion_proofs.py
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.core.committer import HeaderCommitter
from src.crypto.merkle import ProofStep
from src.utils.visualizer import CommitVisualizer
from examples.helpers.header_factory import HeaderFactory


def main():
    print("=" * 60)
    print("Header Commitment - Inclusion Proofs")
    print("=" * 60)

    committer = HeaderCommitter(batch_size=4)
    visualizer = CommitVisualizer(committer)

    # Step 1: Two full batches.
    print("\n[Step 1] Committing 8 headers in batches of 4...")
    headers = HeaderFactory.make_chain(start=1000, count=8)
    for header in headers:
        committer.add_header(header)
    visualizer.print_batches()

    # Step 2: Prove the header at block 1006 (batch 1, leaf 2).
    target = headers[6]
    print(f"\n[Step 2] Proving header #{target.number}...")
    proof = committer.generate_proof(target)
    visualizer.print_proof(proof, committer.verify_proof(proof, target))

    # Step 3: Flip the first sibling; the folded root no longer matches.
    print("\n[Step 3] Tampering with the first sibling...")
    first = proof.steps[0]
    tampered = [ProofStep(bytes(32), first.side)] + list(proof.steps[1:])
    print(f"  Tampered proof verifies: {committer.verify_proof(tampered, target)}")

    # Step 4: Unknown headers have no proof at all.
    print("\n[Step 4] Proving a header that was never committed...")
    stranger = HeaderFactory.make_header(5000)
    print(f"  Proof: {committer.generate_proof(stranger)}")
    print(f"  Verifies: {committer.verify_proof([], stranger)}")


if __name__ == "__main__":
    main()
