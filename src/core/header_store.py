"""
Header lookup index.

Keeps every received header addressable by hash and by block number. The
store performs no deduplication: a header whose hash or number was seen
before replaces the earlier entry under that key, and the header is still
forwarded to the accumulator by the committer.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.core.header import BlockHeader

logger = logging.getLogger(__name__)


class HeaderStore:
    """In-memory index of headers by hash and by number."""

    def __init__(self) -> None:
        self.headers_by_hash: dict[str, BlockHeader] = {}
        self.headers_by_number: dict[int, BlockHeader] = {}

    def add_header(self, header: "BlockHeader") -> None:
        """Index *header* under its hash and its number."""
        if header.hash in self.headers_by_hash:
            logger.debug("Header %s seen again", header.hash[:18])
        self.headers_by_hash[header.hash] = header
        self.headers_by_number[header.number] = header

    def get_header_by_hash(self, header_hash: str) -> "BlockHeader | None":
        return self.headers_by_hash.get(header_hash)

    def get_header_by_number(self, number: int) -> "BlockHeader | None":
        return self.headers_by_number.get(number)

    @property
    def size(self) -> int:
        """Number of distinct hashes indexed."""
        return len(self.headers_by_hash)

    def __repr__(self) -> str:
        return f"HeaderStore(size={self.size})"
