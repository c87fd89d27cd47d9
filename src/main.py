"""
Command-line entry point.

Usage:
    python -m src.main commit headers.jsonl --batch-size 5 --export state.json
    python -m src.main prove headers.jsonl 0x883a...faa3 --json
    python -m src.main follow --url https://rpc.polkadot.io --limit 20

Settings not given on the command line come from ``HEADER_*`` environment
variables (see ``src.config``).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

from src.config import CommitterConfig, ConfigurationError
from src.core.committer import HeaderCommitter
from src.core.header import HeaderValidationError
from src.feeds.pipeline import HeaderPipeline
from src.feeds.rpc import RpcError, SubstrateRpcHeaderSource
from src.feeds.source import load_headers
from src.utils.visualizer import CommitVisualizer

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(name)s %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="header-merkle",
        description="Commit block headers into Merkle trees and prove inclusion.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="cmd", required=True)

    def _common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--batch-size", type=int, help="Headers per committed batch")
        p.add_argument(
            "--no-validate", action="store_true",
            help="Accept headers without checking digest format",
        )

    commitp = sub.add_parser("commit", help="Commit headers from a JSON or JSON-lines file")
    commitp.add_argument("file")
    commitp.add_argument("--export", help="Write a JSON snapshot of all batches")
    _common(commitp)

    provep = sub.add_parser("prove", help="Commit a headers file and prove one header")
    provep.add_argument("file")
    provep.add_argument("hash", help="Hash of the header to prove")
    provep.add_argument("--json", action="store_true", help="Print the proof as JSON")
    _common(provep)

    followp = sub.add_parser("follow", help="Follow a live chain over JSON-RPC")
    followp.add_argument("--url", help="Substrate node HTTP JSON-RPC endpoint")
    followp.add_argument("--poll-interval", type=float)
    followp.add_argument("--queue-size", type=int)
    followp.add_argument("--limit", type=int, help="Stop after this many headers")
    _common(followp)

    return parser


def _config_from_args(args: argparse.Namespace) -> CommitterConfig:
    config = CommitterConfig.from_env()
    return CommitterConfig(
        batch_size=args.batch_size if args.batch_size is not None else config.batch_size,
        queue_size=(
            args.queue_size
            if getattr(args, "queue_size", None) is not None
            else config.queue_size
        ),
        rpc_url=args.url if getattr(args, "url", None) is not None else config.rpc_url,
        poll_interval=(
            args.poll_interval
            if getattr(args, "poll_interval", None) is not None
            else config.poll_interval
        ),
        validate_headers=config.validate_headers and not args.no_validate,
    )


def _commit_file(committer: HeaderCommitter, path: str) -> None:
    for header in load_headers(path):
        try:
            committer.add_header(header)
        except HeaderValidationError as e:
            logger.warning("Skipping header: %s", e)


def cmd_commit(args: argparse.Namespace, config: CommitterConfig) -> int:
    committer = HeaderCommitter.from_config(config)
    _commit_file(committer, args.file)

    visualizer = CommitVisualizer(committer)
    visualizer.print_batches()
    visualizer.print_info()
    if args.export:
        committer.export_json(args.export)
    return 0


def cmd_prove(args: argparse.Namespace, config: CommitterConfig) -> int:
    committer = HeaderCommitter.from_config(config)
    _commit_file(committer, args.file)

    header = committer.store.get_header_by_hash(args.hash)
    if header is None:
        print(f"Header {args.hash} not present in {args.file}", file=sys.stderr)
        return 1

    proof = committer.generate_proof(header)
    verified = committer.verify_proof(proof, header) if proof is not None else False

    if args.json:
        print(json.dumps(
            {"proof": proof.to_dict() if proof is not None else None, "verified": verified},
            indent=2,
        ))
    else:
        CommitVisualizer(committer).print_proof(proof, verified)
    return 0 if proof is not None else 1


def cmd_follow(args: argparse.Namespace, config: CommitterConfig) -> int:
    committer = HeaderCommitter.from_config(config)
    visualizer = CommitVisualizer(committer)
    committer.on_commit(
        lambda batch: visualizer.console.print(
            f"[green]batch {batch.index}[/green] "
            f"#{batch.first_number}-#{batch.last_number} root {batch.root_hex}"
        )
    )

    source = SubstrateRpcHeaderSource(
        url=config.rpc_url,
        poll_interval=config.poll_interval,
        max_headers=args.limit,
    )
    pipeline = HeaderPipeline(source, committer, queue_size=config.queue_size)
    try:
        asyncio.run(pipeline.run())
    except KeyboardInterrupt:
        logger.info("Interrupted")
    except RpcError as e:
        logger.error("RPC failure: %s", e)
        return 1

    visualizer.print_info()
    return 0


COMMANDS = {
    "commit": cmd_commit,
    "prove": cmd_prove,
    "follow": cmd_follow,
}


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    try:
        config = _config_from_args(args)
    except ConfigurationError as e:
        logger.error("Invalid configuration: %s", e)
        return 2
    try:
        return COMMANDS[args.cmd](args, config)
    except (HeaderValidationError, OSError) as e:
        logger.error("Cannot read headers: %s", e)
        return 2


if __name__ == "__main__":
    sys.exit(main())
