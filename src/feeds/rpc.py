"""
Substrate JSON-RPC Source
==========================

Follows a live Substrate chain by polling a node's HTTP JSON-RPC endpoint.
Two methods are used:

- ``chain_getHeader``: the current head, or a header by block hash.
- ``chain_getBlockHash``: the block hash at a given height.

Transport failures are retried with a growing pause and logged as warnings.
A node that stays unreachable, or that answers with a JSON-RPC error,
raises ``RpcError``.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
from typing import Any, AsyncIterator, Optional

import requests

from src.config import DEFAULT_POLL_INTERVAL, DEFAULT_RPC_URL, RPC_TIMEOUT
from src.core.header import BlockHeader, parse_block_number

logger = logging.getLogger(__name__)


class RpcError(RuntimeError):
    """Raised when the node cannot be reached or answers with an error."""


class SubstrateRpcHeaderSource:
    """
    Follows the head of a Substrate chain over HTTP JSON-RPC.

    Every ``poll_interval`` seconds the latest header number is read with
    ``chain_getHeader``; each block between the last yielded one and the
    head is then fetched by number (``chain_getBlockHash`` followed by
    ``chain_getHeader``), so no height is skipped between polls.

    Requests are blocking and run in a worker thread so the event loop keeps
    serving the committer.
    """

    def __init__(
        self,
        url: str = DEFAULT_RPC_URL,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        start_number: Optional[int] = None,
        max_headers: Optional[int] = None,
        retries: int = 3,
        timeout: int = RPC_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.poll_interval = poll_interval
        self.start_number = start_number
        self.max_headers = max_headers
        self.retries = max(1, retries)
        self.timeout = timeout
        self._session = session
        self._ids = itertools.count(1)

    # ------------------------------------------------------------------
    # JSON-RPC
    # ------------------------------------------------------------------

    def call(self, method: str, params: Optional[list] = None) -> Any:
        """
        Perform one JSON-RPC call, retrying transport failures.

        Args:
            method: The JSON-RPC method name.
            params: Positional parameters.

        Returns:
            The ``result`` member of the response.

        Raises:
            RpcError: If every attempt fails or the node returns an error.
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }
        post = self._session.post if self._session is not None else requests.post

        last_exc: Optional[Exception] = None
        for attempt in range(self.retries):
            try:
                resp = post(self.url, json=payload, timeout=self.timeout)
                resp.raise_for_status()
                body = resp.json()
                break
            except (requests.RequestException, ValueError) as e:
                last_exc = e
                logger.warning("%s to %s failed (attempt %s): %s", method, self.url, attempt + 1, e)
                if attempt + 1 < self.retries:
                    time.sleep(1 + attempt)
        else:
            raise RpcError(f"{method} failed after {self.retries} attempts: {last_exc}") from last_exc

        if not isinstance(body, dict):
            raise RpcError(f"{method} returned a non-object response")
        if body.get("error"):
            err = body["error"]
            raise RpcError(f"{method} returned error {err.get('code')}: {err.get('message')}")
        return body.get("result")

    def latest_number(self) -> int:
        """Return the number of the node's current head."""
        head = self.call("chain_getHeader")
        if not head:
            raise RpcError("chain_getHeader returned no header")
        return parse_block_number(head["number"])

    def fetch_header(self, number: int) -> BlockHeader:
        """
        Fetch the header at height *number*.

        Raises:
            RpcError: If the node knows no block at that height.
        """
        block_hash = self.call("chain_getBlockHash", [number])
        if block_hash is None:
            raise RpcError(f"No block hash for #{number}")
        raw = self.call("chain_getHeader", [block_hash])
        if raw is None:
            raise RpcError(f"No header for {block_hash}")
        return BlockHeader.from_dict(raw, block_hash=block_hash)

    # ------------------------------------------------------------------
    # Header stream
    # ------------------------------------------------------------------

    async def headers(self) -> AsyncIterator[BlockHeader]:
        yielded = 0
        next_number = self.start_number
        while True:
            latest = await asyncio.to_thread(self.latest_number)
            if next_number is None:
                next_number = latest
                logger.info("Following %s from #%d", self.url, latest)

            while next_number <= latest:
                header = await asyncio.to_thread(self.fetch_header, next_number)
                yield header
                yielded += 1
                next_number += 1
                if self.max_headers is not None and yielded >= self.max_headers:
                    return

            await asyncio.sleep(self.poll_interval)
