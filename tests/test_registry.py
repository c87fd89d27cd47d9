"""
Tests for Tree Registry
========================

Tests cover:
- Appends in strict sequence order
- Lookup by index with not-found results
- Oldest-first lookup by leaf
"""

import pytest

from src.core.batch import Batch
from src.core.registry import TreeRegistry


@pytest.fixture
def registry(sample_headers):
    """A registry holding two batches of five headers."""
    reg = TreeRegistry()
    reg.append(Batch.build(0, sample_headers[:5]))
    reg.append(Batch.build(1, sample_headers[5:]))
    return reg


class TestAppend:
    def test_gap_rejected(self, sample_headers):
        reg = TreeRegistry()
        with pytest.raises(ValueError):
            reg.append(Batch.build(1, sample_headers[:2]))

    def test_reused_index_rejected(self, registry, sample_headers):
        with pytest.raises(ValueError):
            registry.append(Batch.build(1, sample_headers[:2]))

    def test_next_index(self, registry):
        assert registry.next_index == 2

    def test_register_takes_next_index(self, registry, sample_headers):
        batch = registry.register(sample_headers[:3])
        assert batch.index == 2
        assert registry.get_batch(2) is batch
        assert batch.tree.leaf_count == 3
        assert registry.next_index == 3


class TestLookup:
    def test_get_tree(self, registry, sample_headers):
        assert registry.get_tree(0).leaves == tuple(h.leaf for h in sample_headers[:5])

    def test_get_tree_out_of_range(self, registry):
        """Negative and past-the-end indexes are not found."""
        assert registry.get_tree(2) is None
        assert registry.get_tree(-1) is None
        assert registry.get_batch(True) is None

    def test_find_tree_containing(self, registry, sample_headers):
        assert registry.find_tree_containing(sample_headers[7].leaf) is registry.get_tree(1)
        assert registry.find_batch_containing(sample_headers[0].leaf).index == 0

    def test_find_missing_leaf(self, registry, header_factory):
        assert registry.find_tree_containing(header_factory(999).leaf) is None

    def test_earliest_tree_wins(self, sample_headers):
        """A leaf committed twice resolves to the first tree only."""
        reg = TreeRegistry()
        reg.append(Batch.build(0, sample_headers[0:2]))
        reg.append(Batch.build(1, [sample_headers[0], sample_headers[2]]))
        assert reg.find_batch_containing(sample_headers[0].leaf).index == 0


class TestBatch:
    def test_batch_properties(self, registry, sample_headers):
        batch = registry.get_batch(1)
        assert len(batch) == 5
        assert batch.first_number == sample_headers[5].number
        assert batch.last_number == sample_headers[-1].number
        assert batch.to_dict()["root"] == batch.root_hex

    def test_header_count_must_match_tree(self, registry, sample_headers):
        with pytest.raises(ValueError):
            Batch(5, sample_headers[:3], registry.get_tree(0))
