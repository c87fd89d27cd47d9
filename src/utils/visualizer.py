"""
Header Commitment Visualizer
=============================

This module provides a rich terminal display of a committer's state, built
with the ``rich`` library. It renders:

- **Batch table**: one row per committed batch with its block range and root.
- **Batch detail**: a tree diagram of one batch, from the root through each
  internal level down to the headers' leaves.
- **Proof table**: the steps of an inclusion proof with the sibling side at
  each level.
- **Committer info**: batch size, number of batches and pending headers.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

if TYPE_CHECKING:
    from src.core.batch import Batch
    from src.core.committer import HeaderCommitter
    from src.core.proof import MerkleProof

logger = logging.getLogger(__name__)


def _truncate_hash(h, length: int = 16) -> str:
    """Return the first *length* characters of a hex hash."""
    if h is None:
        return "None"
    if isinstance(h, (bytes, bytearray)):
        h = h.hex()
    return h[:length]


class CommitVisualizer:
    """
    Rich CLI visualizer for a header committer.

    Attributes:
        committer: The HeaderCommitter to display.
        console: A ``rich.console.Console`` used for all output.
    """

    def __init__(self, committer: "HeaderCommitter", console: Optional[Console] = None) -> None:
        self.committer = committer
        self.console = console if console is not None else Console()

    # ------------------------------------------------------------------
    # Batch table
    # ------------------------------------------------------------------

    def print_batches(self, max_rows: int = 50) -> None:
        """
        Print the committed batches as a rich table.

        Args:
            max_rows: Maximum number of rows to render.
        """
        batches = self.committer.registry.batches()
        if not batches:
            self.console.print("[yellow]No batches committed yet.[/yellow]")
            return

        table = Table(
            title="Committed Batches",
            show_header=True,
            header_style="bold cyan",
            border_style="blue",
        )
        table.add_column("Index", style="bold white", justify="right")
        table.add_column("Blocks", style="magenta")
        table.add_column("Headers", justify="right", style="yellow")
        table.add_column("Root", style="green")

        for rows_added, batch in enumerate(batches):
            if rows_added >= max_rows:
                table.add_row("...", "...", "...", "...")
                break
            table.add_row(
                str(batch.index),
                f"#{batch.first_number} - #{batch.last_number}",
                str(len(batch)),
                _truncate_hash(batch.root_hex, 32),
            )

        self.console.print(table)

    # ------------------------------------------------------------------
    # Batch detail view
    # ------------------------------------------------------------------

    def print_batch_details(self, index: int) -> None:
        """
        Print the Merkle tree of one batch, root first.

        Args:
            index: Sequence index of the batch.
        """
        batch = self.committer.get_batch(index)
        if batch is None:
            self.console.print(f"[red]Batch not found: {index}[/red]")
            return

        self.console.print(
            Panel(self._build_tree(batch), title=f"Batch {batch.index}", border_style="blue")
        )

    def _build_tree(self, batch: "Batch") -> Tree:
        layers = batch.tree.layers
        top = len(layers) - 1

        def _add(node: Tree, level: int, position: int) -> None:
            if level == 0:
                header = batch.headers[position]
                node.add(
                    f"[green]{_truncate_hash(layers[0][position])}[/green] "
                    f"[dim]#{header.number} {_truncate_hash(header.hash, 18)}[/dim]"
                )
                return
            below = layers[level - 1]
            for child in (2 * position, 2 * position + 1):
                if child >= len(below):
                    node.add(f"[dim]{_truncate_hash(below[-1])} (dup)[/dim]")
                    continue
                if level - 1 == 0:
                    _add(node, 0, child)
                else:
                    child_node = node.add(f"[cyan]{_truncate_hash(below[child])}[/cyan]")
                    _add(child_node, level - 1, child)

        root = Tree(f"[bold yellow]root {_truncate_hash(batch.root_hex, 32)}[/bold yellow]")
        _add(root, top, 0)
        return root

    # ------------------------------------------------------------------
    # Proof view
    # ------------------------------------------------------------------

    def print_proof(self, proof: Optional["MerkleProof"], verified: Optional[bool] = None) -> None:
        """
        Print the steps of an inclusion proof.

        Args:
            proof: The proof to show, or None for a header that was not found.
            verified: Optional verification outcome to display.
        """
        if proof is None:
            self.console.print("[red]Header not found in any committed batch.[/red]")
            return

        table = Table(
            title=f"Proof for {_truncate_hash(proof.header_hash, 18)}",
            show_header=True,
            header_style="bold cyan",
            border_style="blue",
        )
        table.add_column("Level", justify="right", style="bold white")
        table.add_column("Side", style="magenta")
        table.add_column("Sibling", style="green")

        for level, step in enumerate(proof.steps):
            table.add_row(str(level), step.side.value, step.sibling.hex())

        self.console.print(table)
        summary = (
            f"[bold]Batch:[/bold] {proof.batch_index}  "
            f"[bold]Leaf index:[/bold] {proof.leaf_index}  "
            f"[bold]Root:[/bold] {proof.root.hex()}"
        )
        if not proof.steps:
            summary += "\n[dim]Single-leaf tree: the leaf is the root.[/dim]"
        if verified is not None:
            status = "[green]valid[/green]" if verified else "[red]INVALID[/red]"
            summary += f"\n[bold]Verification:[/bold] {status}"
        self.console.print(summary)

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    def print_info(self) -> None:
        """Print a summary of the committer state."""
        committer = self.committer
        info = (
            f"[bold]Batch size:[/bold]        {committer.batch_size}\n"
            f"[bold]Batches committed:[/bold] {committer.batch_count}\n"
            f"[bold]Headers pending:[/bold]   {committer.pending_count}\n"
            f"[bold]Headers indexed:[/bold]   {committer.store.size}"
        )
        self.console.print(Panel(info, title="Committer Info", border_style="cyan"))
