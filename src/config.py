"""
Header Committer Configuration
===============================

Parameters that control how headers are batched and where they come from.

The batch size is the one parameter that affects commitments: every tree has
exactly ``batch_size`` leaves, so two committers only agree on roots when they
run with the same value. The remaining parameters only affect ingestion.

Values can be passed explicitly or read from the environment:

- ``HEADER_BATCH_SIZE``: headers per committed batch
- ``HEADER_QUEUE_SIZE``: capacity of the ingestion queue
- ``HEADER_RPC_URL``: HTTP JSON-RPC endpoint of a Substrate node
- ``HEADER_POLL_INTERVAL``: seconds between polls of the node
- ``HEADER_VALIDATE``: ``0``/``false`` disables header format checks
"""

from __future__ import annotations

import os


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_BATCH_SIZE = 5
"""Headers per batch. Five blocks at ~6 seconds each is about half a minute."""

HEADER_HASH_HEX_LENGTH = 64
"""Hex characters in a header digest after the ``0x`` prefix (32 bytes)."""

DEFAULT_QUEUE_SIZE = 256
"""Headers the ingestion queue buffers before the source is made to wait."""

DEFAULT_RPC_URL = "https://rpc.polkadot.io"
"""Public Polkadot relay chain RPC endpoint."""

DEFAULT_POLL_INTERVAL = 6.0
"""Seconds between RPC polls, matching the relay chain block time."""

RPC_TIMEOUT = 15
"""Seconds before an RPC request is abandoned."""


class ConfigurationError(ValueError):
    """
    Raised when the committer is configured with an unusable parameter.

    Configuration errors are fatal: they are raised at construction time and
    never while headers are being processed.
    """
    pass


def validate_batch_size(batch_size) -> int:
    """
    Check that *batch_size* is a positive integer.

    Args:
        batch_size: The requested batch size.

    Returns:
        The batch size, unchanged.

    Raises:
        ConfigurationError: If the value is not an int, is a bool, or is
            zero or negative.
    """
    if isinstance(batch_size, bool) or not isinstance(batch_size, int):
        raise ConfigurationError(
            f"Batch size must be an integer, got {type(batch_size).__name__}"
        )
    if batch_size <= 0:
        raise ConfigurationError(f"Batch size must be positive, got {batch_size}")
    return batch_size


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() not in ("0", "false", "no", "off", "")


class CommitterConfig:
    """
    Settings for a header committer and its ingestion pipeline.

    Attributes:
        batch_size: Headers per committed batch.
        queue_size: Capacity of the ingestion queue.
        rpc_url: Substrate node HTTP JSON-RPC endpoint.
        poll_interval: Seconds between RPC polls.
        validate_headers: Whether header digests are format-checked.
    """

    def __init__(
        self,
        batch_size: int = DEFAULT_BATCH_SIZE,
        queue_size: int = DEFAULT_QUEUE_SIZE,
        rpc_url: str = DEFAULT_RPC_URL,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        validate_headers: bool = True,
    ) -> None:
        self.batch_size = validate_batch_size(batch_size)
        if queue_size <= 0:
            raise ConfigurationError(f"Queue size must be positive, got {queue_size}")
        if poll_interval < 0:
            raise ConfigurationError(
                f"Poll interval cannot be negative, got {poll_interval}"
            )
        self.queue_size = queue_size
        self.rpc_url = rpc_url
        self.poll_interval = poll_interval
        self.validate_headers = validate_headers

    @classmethod
    def from_env(cls) -> CommitterConfig:
        """
        Build a configuration from ``HEADER_*`` environment variables.

        Unset variables fall back to the module defaults.

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed or is
                out of range.
        """
        try:
            batch_size = int(os.getenv("HEADER_BATCH_SIZE", str(DEFAULT_BATCH_SIZE)))
            queue_size = int(os.getenv("HEADER_QUEUE_SIZE", str(DEFAULT_QUEUE_SIZE)))
            poll_interval = float(
                os.getenv("HEADER_POLL_INTERVAL", str(DEFAULT_POLL_INTERVAL))
            )
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        return cls(
            batch_size=batch_size,
            queue_size=queue_size,
            rpc_url=os.getenv("HEADER_RPC_URL", DEFAULT_RPC_URL).strip(),
            poll_interval=poll_interval,
            validate_headers=_env_flag("HEADER_VALIDATE", True),
        )

    def __repr__(self) -> str:
        return (
            f"CommitterConfig(batch_size={self.batch_size}, "
            f"queue_size={self.queue_size}, rpc_url={self.rpc_url!r})"
        )
