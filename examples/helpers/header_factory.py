"""
Header Factory
===============

Builds well-formed, deterministic block headers for examples and demos
without talking to a node. Each digest field is derived from the block
number, so the same number always yields the same header and consecutive
headers link through ``parentHash``.

Usage:
    from examples.helpers.header_factory import HeaderFactory

    headers = HeaderFactory.make_chain(start=100, count=8)
"""

from __future__ import annotations

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from src.core.header import BlockHeader
from src.crypto.hash import sha256_hex


class HeaderFactory:
    """
    Namespace for helpers that fabricate linked chains of headers.

    All methods are static -- no instance state is needed.
    """

    @staticmethod
    def digest(label: str, number: int) -> str:
        """Return a 0x-prefixed digest derived from *label* and *number*."""
        return "0x" + sha256_hex(f"{label}:{number}".encode("utf-8"))

    @staticmethod
    def make_header(number: int) -> BlockHeader:
        """Build the header for block *number*."""
        return BlockHeader(
            number=number,
            hash=HeaderFactory.digest("block", number),
            parent_hash=HeaderFactory.digest("block", number - 1),
            state_root=HeaderFactory.digest("state", number),
            extrinsics_root=HeaderFactory.digest("extrinsics", number),
        )

    @staticmethod
    def make_chain(start: int, count: int) -> list[BlockHeader]:
        """Build *count* consecutive headers beginning at *start*."""
        return [HeaderFactory.make_header(n) for n in range(start, start + count)]
