"""
Header Inclusion Proofs
========================

A proof shows that a header was committed into one of the registry's trees.
It is the sibling path from the header's leaf up to the tree root, each
sibling tagged with the side it occupies.

Generation and verification locate the tree the same way: the header's leaf
value is recomputed and the registry is scanned oldest first for a tree that
contains it. Verification therefore always checks a proof against the tree
the header actually belongs to. A proof is not checked against an external
commitment such as a published root.

Outcomes:

- ``generate_proof`` returns ``None`` when no tree contains the header. A
  ``MerkleProof`` with no steps is a *found* result: the header is the only
  leaf of its tree and the leaf is the root.
- ``verify_proof`` returns ``False`` for a missing tree, a malformed proof and
  a digest mismatch alike. Callers that need to tell these apart should call
  ``generate_proof`` first.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from src.crypto.merkle import MerkleTree, ProofStep

if TYPE_CHECKING:
    from src.core.header import BlockHeader
    from src.core.registry import TreeRegistry

logger = logging.getLogger(__name__)


class MerkleProof:
    """
    An inclusion proof for one header.

    Attributes:
        header_hash: The ``hash`` field of the proven header.
        leaf: The header's leaf value.
        batch_index: Sequence index of the batch the proof is rooted in.
        leaf_index: Position of the leaf within that batch's tree.
        root: Root digest of that tree.
        steps: Sibling path from the leaf level to the root.
    """

    __slots__ = ("header_hash", "leaf", "batch_index", "leaf_index", "root", "steps")

    def __init__(
        self,
        header_hash: str,
        leaf: bytes,
        batch_index: int,
        leaf_index: int,
        root: bytes,
        steps,
    ) -> None:
        self.header_hash = header_hash
        self.leaf = leaf
        self.batch_index = batch_index
        self.leaf_index = leaf_index
        self.root = root
        self.steps = tuple(steps)

    def __len__(self) -> int:
        return len(self.steps)

    def __bool__(self) -> bool:
        # A found proof is truthy even with no steps
        return True

    def __iter__(self):
        return iter(self.steps)

    def to_dict(self) -> dict:
        """Convert this proof to a JSON-serializable dictionary."""
        return {
            'header_hash': self.header_hash,
            'leaf': self.leaf.hex(),
            'batch_index': self.batch_index,
            'leaf_index': self.leaf_index,
            'root': self.root.hex(),
            'steps': [step.to_dict() for step in self.steps],
        }

    @classmethod
    def from_dict(cls, data: dict) -> MerkleProof:
        """
        Reconstruct a proof from a dictionary produced by ``to_dict()``.

        Raises:
            KeyError: If a field is missing.
            ValueError: If a digest is not hex or a side is unknown.
        """
        return cls(
            header_hash=data['header_hash'],
            leaf=bytes.fromhex(data['leaf']),
            batch_index=data['batch_index'],
            leaf_index=data['leaf_index'],
            root=bytes.fromhex(data['root']),
            steps=[ProofStep.from_dict(step) for step in data['steps']],
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, MerkleProof):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return (
            f"MerkleProof(batch={self.batch_index}, leaf_index={self.leaf_index}, "
            f"steps={len(self.steps)})"
        )


def generate_proof(registry: "TreeRegistry", header: "BlockHeader") -> Optional[MerkleProof]:
    """
    Build the inclusion proof for a header.

    Args:
        registry: Registry of committed batches.
        header: The header to prove.

    Returns:
        The MerkleProof rooted at the earliest tree containing the header,
        or None if the header was never committed.
    """
    leaf = header.leaf
    batch = registry.find_batch_containing(leaf)
    if batch is None:
        logger.debug("No committed tree contains header %s", header.hash[:18])
        return None

    tree = batch.tree
    leaf_index = tree.get_leaf_index(leaf)
    return MerkleProof(
        header_hash=header.hash,
        leaf=leaf,
        batch_index=batch.index,
        leaf_index=leaf_index,
        root=tree.root,
        steps=tree.get_proof(leaf_index),
    )


def _coerce_steps(proof) -> Optional[list]:
    """
    Normalize the accepted proof forms to a list of ``ProofStep``.

    Accepts a MerkleProof, or a list/tuple whose elements are ``ProofStep``
    or step dictionaries. Returns None for anything malformed.
    """
    if isinstance(proof, MerkleProof):
        return list(proof.steps)
    if not isinstance(proof, (list, tuple)):
        return None

    steps = []
    for element in proof:
        if isinstance(element, ProofStep):
            steps.append(element)
        elif isinstance(element, dict):
            try:
                steps.append(ProofStep.from_dict(element))
            except (KeyError, ValueError, TypeError):
                return None
        else:
            return None
    return steps


def verify_proof(registry: "TreeRegistry", proof, header: "BlockHeader") -> bool:
    """
    Check a proof against the tree the header was committed into.

    The header's leaf is folded with each step, bottom to top, placing the
    sibling on its recorded side. The result must equal the root of the
    earliest tree containing the header.

    Args:
        registry: Registry of committed batches.
        proof: A MerkleProof, or a list of ProofStep or step dictionaries.
        header: The header the proof claims to include.

    Returns:
        True only if the folded value matches the tree root exactly.
    """
    leaf = header.leaf
    batch = registry.find_batch_containing(leaf)
    if batch is None:
        logger.debug("Cannot verify header %s: not committed", header.hash[:18])
        return False

    steps = _coerce_steps(proof)
    if steps is None:
        logger.debug("Rejecting malformed proof for header %s", header.hash[:18])
        return False

    return MerkleTree.verify_proof(leaf, steps, batch.tree.root)
