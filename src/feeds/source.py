"""
Header Sources
===============

A header source yields block headers in chain order as an async iterator.
The pipeline consumes any object with a ``headers()`` method of that shape.

This module provides:

- **HeaderSource**: the protocol every source satisfies.
- **StaticHeaderSource**: replays an in-memory list of headers.
- **JsonLinesHeaderSource**: streams headers from a JSON-lines file.
- **load_headers**: reads a JSON-lines file or a JSON array eagerly.

Header objects use the node's camelCase field names (``parentHash``,
``stateRoot``, ``extrinsicsRoot``). Input that is not a header object raises
``HeaderValidationError``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import AsyncIterator, Iterable, Protocol

from src.core.header import BlockHeader, HeaderValidationError

logger = logging.getLogger(__name__)


class HeaderSource(Protocol):
    """
    Push-style supplier of block headers.

    Implementations yield headers in chain order and decide on their own when
    the stream ends. Lifecycle (start, stop, reconnect) belongs to the source.
    """

    def headers(self) -> AsyncIterator[BlockHeader]: ...


class StaticHeaderSource:
    """Replays a fixed sequence of headers."""

    def __init__(self, headers: Iterable[BlockHeader]):
        self._headers = list(headers)

    async def headers(self) -> AsyncIterator[BlockHeader]:
        for header in self._headers:
            yield header


class JsonLinesHeaderSource:
    """
    Reads headers from a file holding one JSON header object per line.

    Blank lines are skipped. A line that is not valid JSON or lacks a header
    field raises ``HeaderValidationError`` with the line number.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    async def headers(self) -> AsyncIterator[BlockHeader]:
        with self.path.open("r", encoding="utf-8") as f:
            for lineno, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                yield parse_header_line(line, lineno)


def parse_header_line(line: str, lineno: int = 0) -> BlockHeader:
    """
    Parse one JSON-lines record into a header.

    Raises:
        HeaderValidationError: If the line is not a JSON header object.
    """
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise HeaderValidationError(f"Line {lineno}: invalid JSON ({e.msg})") from e
    if not isinstance(data, dict):
        raise HeaderValidationError(f"Line {lineno}: expected a JSON object")
    return BlockHeader.from_dict(data)


def load_headers(path: str | Path) -> list[BlockHeader]:
    """
    Read a headers file eagerly.

    Accepts either JSON lines or a single JSON array of header objects.

    Args:
        path: The headers file.

    Returns:
        The headers in file order.

    Raises:
        HeaderValidationError: If the file holds something other than
            header objects.
    """
    text = Path(path).read_text(encoding="utf-8")
    stripped = text.lstrip()
    if stripped.startswith("["):
        try:
            items = json.loads(stripped)
        except json.JSONDecodeError as e:
            raise HeaderValidationError(f"Invalid JSON array in {path}: {e.msg}") from e
        if not isinstance(items, list):
            raise HeaderValidationError(f"Expected a JSON array in {path}")
        headers = []
        for position, item in enumerate(items):
            if not isinstance(item, dict):
                raise HeaderValidationError(
                    f"Item {position} in {path}: expected a JSON object"
                )
            headers.append(BlockHeader.from_dict(item))
        return headers

    headers = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if line:
            headers.append(parse_header_line(line, lineno))
    logger.debug("Loaded %d headers from %s", len(headers), path)
    return headers
