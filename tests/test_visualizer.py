"""
Tests for the Commitment Visualizer
====================================

Output is recorded on an in-memory rich console and checked as text.
"""

import pytest
from rich.console import Console

from src.core.committer import HeaderCommitter
from src.utils.visualizer import CommitVisualizer


@pytest.fixture
def committer(sample_headers):
    committer = HeaderCommitter(batch_size=3)
    for header in sample_headers:
        committer.add_header(header)
    return committer


@pytest.fixture
def visualizer(committer):
    return CommitVisualizer(committer, console=Console(record=True, width=200))


def text(visualizer) -> str:
    return visualizer.console.export_text()


class TestVisualizer:

    def test_empty(self):
        vis = CommitVisualizer(HeaderCommitter(), console=Console(record=True, width=200))
        vis.print_batches()
        assert "No batches committed" in text(vis)

    def test_batch_table(self, visualizer, committer):
        visualizer.print_batches()
        out = text(visualizer)
        assert "Committed Batches" in out
        assert "#100 - #102" in out
        assert committer.get_tree(2).root_hex[:32] in out

    def test_batch_details(self, visualizer, committer, sample_headers):
        visualizer.print_batch_details(0)
        out = text(visualizer)
        assert committer.get_tree(0).root_hex[:32] in out
        assert "(dup)" in out
        assert f"#{sample_headers[2].number}" in out

    def test_missing_batch(self, visualizer):
        visualizer.print_batch_details(42)
        assert "Batch not found: 42" in text(visualizer)

    def test_proof(self, visualizer, committer, sample_headers):
        proof = committer.generate_proof(sample_headers[4])
        visualizer.print_proof(proof, verified=True)
        out = text(visualizer)
        assert proof.steps[0].sibling.hex() in out
        assert "valid" in out

    def test_not_found_proof(self, visualizer):
        visualizer.print_proof(None)
        assert "not found" in text(visualizer)

    def test_info(self, visualizer):
        visualizer.print_info()
        out = text(visualizer)
        assert "Batches committed: 3" in out
        assert "Headers pending:   1" in out
