"""
Shared fixtures for the header commitment tests.

Headers are fabricated deterministically from their block number so that
tests can rebuild the same header and compare leaves and roots by hand.
"""

import hashlib
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from src.core.header import BlockHeader


def digest(label: str, number: int) -> str:
    """A 0x-prefixed 64-digit hex digest derived from *label* and *number*."""
    return "0x" + hashlib.sha256(f"{label}:{number}".encode("utf-8")).hexdigest()


def make_header(number: int, hash: str = None) -> BlockHeader:
    """Build a well-formed header for block *number*."""
    return BlockHeader(
        number=number,
        hash=hash if hash is not None else digest("block", number),
        parent_hash=digest("block", number - 1),
        state_root=digest("state", number),
        extrinsics_root=digest("extrinsics", number),
    )


@pytest.fixture
def header_factory():
    """Callable building a header from a block number."""
    return make_header


@pytest.fixture
def sample_headers():
    """Ten consecutive headers, blocks 100 to 109."""
    return [make_header(n) for n in range(100, 110)]
