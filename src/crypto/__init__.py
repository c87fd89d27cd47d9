# Hash functions and Merkle trees for header batches

from .hash import DIGEST_SIZE, sha256, sha256_hex, leaf_hash, hash_pair
from .merkle import MerkleTree, ProofStep, Side, compute_merkle_root

__all__ = [
    # Hash functions
    'DIGEST_SIZE',
    'sha256',
    'sha256_hex',
    'leaf_hash',
    'hash_pair',
    # Merkle tree
    'MerkleTree',
    'ProofStep',
    'Side',
    'compute_merkle_root',
]
