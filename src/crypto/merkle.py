"""
Header Batch Merkle Tree Implementation
========================================

This module implements the binary Merkle tree that commits one batch of block
headers.

A Merkle tree (also called a hash tree) is a binary tree where:
- **Leaf nodes** are the leaf values of the batch's headers, in arrival order
- **Internal nodes** contain the hash of their two child nodes concatenated
- The **root** is a single hash that summarizes the whole batch

Construction Rules
------------------
- Every node digest is a single **SHA-256** of ``left || right``
- Pairs are taken left-to-right and are **never sorted**, so a proof has to
  record the side each sibling sits on
- When a level has an **odd number** of nodes, the last node is
  **duplicated** and hashed with itself
- A tree with a single leaf has that leaf as its root

The same rules are applied when folding a proof back to the root, so a proof
produced by ``get_proof`` always verifies against the tree it came from.

Merkle Proofs
-------------
A proof for a leaf is the list of sibling digests along the path from the
leaf to the root, each tagged with the sibling's side. With these O(log n)
digests, anyone holding the root can recompute it from the leaf alone.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from .hash import DIGEST_SIZE, hash_pair


class Side(str, Enum):
    """Side a sibling digest occupies relative to the node being folded."""

    LEFT = "left"
    RIGHT = "right"


class ProofStep:
    """
    One element of a Merkle proof: a sibling digest and the side it sits on.

    Attributes:
        sibling: The 32-byte sibling digest at this level.
        side: ``Side.LEFT`` if the sibling is the left operand of the parent
            hash, ``Side.RIGHT`` if it is the right operand.
    """

    __slots__ = ("_sibling", "_side")

    def __init__(self, sibling: bytes, side: Side) -> None:
        self._sibling = bytes(sibling)
        self._side = Side(side)

    @property
    def sibling(self) -> bytes:
        return self._sibling

    @property
    def side(self) -> Side:
        return self._side

    def to_dict(self) -> dict:
        """Convert this step to a JSON-serializable dictionary."""
        return {"sibling": self._sibling.hex(), "side": self._side.value}

    @classmethod
    def from_dict(cls, data: dict) -> ProofStep:
        """
        Reconstruct a step from a dictionary produced by ``to_dict()``.

        Raises:
            ValueError: If the sibling is not hex or the side is unknown.
            KeyError: If a field is missing.
        """
        return cls(bytes.fromhex(data["sibling"]), Side(data["side"]))

    def __eq__(self, other) -> bool:
        if not isinstance(other, ProofStep):
            return NotImplemented
        return self._sibling == other._sibling and self._side == other._side

    def __hash__(self) -> int:
        return hash((self._sibling, self._side))

    def __repr__(self) -> str:
        return f"ProofStep(sibling='{self._sibling.hex()[:16]}...', side={self._side.value!r})"


class MerkleTree:
    """
    An immutable Merkle tree over an ordered list of leaf digests.

    The tree is built once, in the constructor. The layered structure is kept
    so that sibling paths can be extracted for any leaf later on.

    Usage example:
        >>> tree = MerkleTree([leaf_a, leaf_b, leaf_c])
        >>> proof = tree.get_proof(1)  # proof for the second leaf
        >>> MerkleTree.verify_proof(leaf_b, proof, tree.root)
        True
    """

    def __init__(self, leaves: list) -> None:
        """
        Build the Merkle tree from a list of leaf digests.

        The algorithm works bottom-up:
        1. Start with the leaf digests as the first layer
        2. If a layer has an odd number of nodes, duplicate the last node
        3. Pair adjacent nodes and hash each pair: H(left || right)
        4. Repeat until a single root hash remains

        The layers are stored as a list:
        - layers[0] = leaf digests
        - layers[1] = first level of internal nodes
        - ...
        - layers[-1] = [root]

        Args:
            leaves: Leaf digests (bytes), in the order they are committed.

        Raises:
            ValueError: If no leaves are given or a leaf is not a 32-byte digest.
        """
        if not leaves:
            raise ValueError("Cannot build a Merkle tree without leaves")

        current_layer = []
        for leaf in leaves:
            if not isinstance(leaf, (bytes, bytearray)) or len(leaf) != DIGEST_SIZE:
                raise ValueError(
                    f"Leaf must be a {DIGEST_SIZE}-byte digest, got {leaf!r}"
                )
            current_layer.append(bytes(leaf))

        self._layers: list = [tuple(current_layer)]

        # Only the first occurrence of a duplicated leaf is indexed
        self._leaf_index: dict = {}
        for index, leaf in enumerate(current_layer):
            self._leaf_index.setdefault(leaf, index)

        while len(current_layer) > 1:
            if len(current_layer) % 2 != 0:
                current_layer = current_layer + [current_layer[-1]]

            next_layer = [
                hash_pair(current_layer[i], current_layer[i + 1])
                for i in range(0, len(current_layer), 2)
            ]
            self._layers.append(tuple(next_layer))
            current_layer = next_layer

        self._root: bytes = current_layer[0]

    @property
    def leaves(self) -> tuple:
        """The leaf digests in commit order."""
        return self._layers[0]

    @property
    def layers(self) -> tuple:
        """All layers from the leaves (index 0) up to the root layer."""
        return tuple(self._layers)

    @property
    def root(self) -> bytes:
        return self._root

    @property
    def root_hex(self) -> str:
        return self._root.hex()

    @property
    def leaf_count(self) -> int:
        return len(self._layers[0])

    @property
    def depth(self) -> int:
        """Number of hashing levels between the leaves and the root."""
        return len(self._layers) - 1

    def get_leaf_index(self, leaf: bytes) -> Optional[int]:
        """
        Find the position of a leaf digest in this tree.

        Args:
            leaf: The leaf digest to look up.

        Returns:
            The 0-based index of the first matching leaf, or None if the
            digest is not a leaf of this tree.
        """
        return self._leaf_index.get(leaf)

    def contains(self, leaf: bytes) -> bool:
        """Return True if *leaf* is one of this tree's leaves."""
        return leaf in self._leaf_index

    def get_proof(self, index: int) -> list:
        """
        Generate a Merkle proof for the leaf at the given index.

        Walks from the leaf level to the level below the root. At each level
        the sibling of the current node is recorded together with its side.
        A node left over at the end of an odd level is its own sibling.

        Args:
            index: The 0-based index of the leaf to prove.

        Returns:
            A list of ``ProofStep`` from the leaf level up to the root. The
            list is empty for a single-leaf tree.

        Raises:
            IndexError: If the index is out of range.
        """
        if index < 0 or index >= self.leaf_count:
            raise IndexError(
                f"Leaf index {index} out of range [0, {self.leaf_count - 1}]"
            )

        proof = []
        current_index = index

        for layer in self._layers[:-1]:
            if current_index % 2 == 0:
                sibling_index = current_index + 1
                side = Side.RIGHT
                if sibling_index >= len(layer):
                    sibling_index = current_index
            else:
                sibling_index = current_index - 1
                side = Side.LEFT

            proof.append(ProofStep(layer[sibling_index], side))
            current_index //= 2

        return proof

    @staticmethod
    def fold_proof(leaf: bytes, proof) -> bytes:
        """
        Fold a proof onto a leaf digest and return the resulting root.

        Args:
            leaf: The leaf digest to start from.
            proof: An iterable of ``ProofStep``.

        Returns:
            The recomputed root digest.

        Raises:
            TypeError: If an element is not a ``ProofStep``.
        """
        current = leaf
        for step in proof:
            if not isinstance(step, ProofStep):
                raise TypeError(f"Expected ProofStep, got {type(step).__name__}")
            if step.side is Side.LEFT:
                current = hash_pair(step.sibling, current)
            else:
                current = hash_pair(current, step.sibling)
        return current

    @staticmethod
    def verify_proof(leaf: bytes, proof, root: bytes) -> bool:
        """
        Verify a Merkle proof for a leaf digest against a known root.

        The verification process:
        1. Start with the leaf digest
        2. For each step, hash the current value with the sibling, placing the
           sibling on the side the step records
        3. The final result must equal the root exactly

        Args:
            leaf: The 32-byte leaf digest.
            proof: A list of ``ProofStep`` from ``get_proof()``.
            root: The expected root digest.

        Returns:
            True if the recomputed root matches, False otherwise, including
            for malformed proofs.
        """
        try:
            folded = MerkleTree.fold_proof(leaf, proof)
        except TypeError:
            return False
        return folded == root

    def to_dict(self) -> dict:
        """
        Convert this tree to a JSON-serializable dictionary.

        Returns:
            Dictionary with the root, depth and hex-encoded leaves.
        """
        return {
            "root": self.root_hex,
            "depth": self.depth,
            "leaf_count": self.leaf_count,
            "leaves": [leaf.hex() for leaf in self.leaves],
        }

    def __repr__(self) -> str:
        return f"MerkleTree(root='{self.root_hex[:16]}...', leaves={self.leaf_count})"


def compute_merkle_root(leaves: list) -> bytes:
    """
    Compute the Merkle root from a list of leaf digests.

    This is a convenience function that builds a MerkleTree and returns its
    root in a single call.

    Args:
        leaves: Leaf digests in commit order.

    Returns:
        The 32-byte root digest.

    Raises:
        ValueError: If the list is empty.
    """
    return MerkleTree(leaves).root
