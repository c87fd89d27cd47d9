"""
Tests for Header Sources and the Ingestion Pipeline
====================================================

The pipeline is asynchronous; each test drives it with ``asyncio.run``.
"""

import asyncio
import json

import pytest

from src.core.committer import HeaderCommitter
from src.core.header import BlockHeader, HeaderValidationError
from src.feeds.pipeline import HeaderPipeline
from src.feeds.source import JsonLinesHeaderSource, StaticHeaderSource, load_headers


class EndlessSource:
    """Yields consecutive headers until cancelled."""

    def __init__(self, factory):
        self.factory = factory

    async def headers(self):
        n = 0
        while True:
            yield self.factory(n)
            n += 1
            await asyncio.sleep(0)


class FailingSource:
    def __init__(self, headers):
        self._headers = headers

    async def headers(self):
        for header in self._headers:
            yield header
        raise RuntimeError("source went away")


class TestPipeline:

    def test_commits_in_order(self, sample_headers):
        committer = HeaderCommitter(batch_size=3)
        pipeline = HeaderPipeline(StaticHeaderSource(sample_headers), committer, queue_size=2)

        accepted = asyncio.run(pipeline.run())

        assert accepted == 10
        assert pipeline.batches_committed == 3
        assert committer.pending_count == 1
        committed = [h for batch in committer.registry for h in batch.headers]
        assert committed == sample_headers[:9]

    def test_skips_invalid_headers(self, sample_headers):
        good = sample_headers[0]
        bad = BlockHeader(1, "0xbad", good.parent_hash, good.state_root, good.extrinsics_root)
        committer = HeaderCommitter(batch_size=2)
        pipeline = HeaderPipeline(
            StaticHeaderSource([sample_headers[0], bad, sample_headers[1]]), committer,
        )

        asyncio.run(pipeline.run())

        assert pipeline.rejected == 1
        assert pipeline.accepted == 2
        assert committer.batch_count == 1

    def test_source_error_propagates(self, sample_headers):
        committer = HeaderCommitter(batch_size=2)
        pipeline = HeaderPipeline(FailingSource(sample_headers[:4]), committer, queue_size=1)
        with pytest.raises(RuntimeError, match="source went away"):
            asyncio.run(pipeline.run())

    def test_stop(self, header_factory):
        committer = HeaderCommitter(batch_size=4)
        pipeline = HeaderPipeline(EndlessSource(header_factory), committer, queue_size=4)
        committer.on_commit(lambda batch: pipeline.stop())

        asyncio.run(pipeline.run())

        assert committer.batch_count >= 1
        assert committer.pending_count < 4


class TestSources:

    def test_json_lines(self, tmp_path, sample_headers):
        path = tmp_path / "headers.jsonl"
        path.write_text(
            "\n".join(json.dumps(h.to_dict()) for h in sample_headers[:3]) + "\n\n",
            encoding="utf-8",
        )

        async def collect():
            return [h async for h in JsonLinesHeaderSource(path).headers()]

        assert asyncio.run(collect()) == sample_headers[:3]

    def test_json_lines_bad_line(self, tmp_path):
        path = tmp_path / "headers.jsonl"
        path.write_text("{not json}\n", encoding="utf-8")

        async def collect():
            return [h async for h in JsonLinesHeaderSource(path).headers()]

        with pytest.raises(HeaderValidationError, match="Line 1"):
            asyncio.run(collect())

    def test_load_json_array(self, tmp_path, sample_headers):
        path = tmp_path / "headers.json"
        path.write_text(json.dumps([h.to_dict() for h in sample_headers]), encoding="utf-8")
        assert load_headers(path) == sample_headers

    def test_load_json_array_of_non_objects(self, tmp_path):
        path = tmp_path / "headers.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(HeaderValidationError, match="Item 0"):
            load_headers(path)

    def test_load_bundled_sample(self):
        import os

        path = os.path.join(
            os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
            "examples", "data", "polkadot_headers.jsonl",
        )
        headers = load_headers(path)
        assert [h.number for h in headers] == list(range(22346172, 22346177))
        for header in headers:
            header.validate()
