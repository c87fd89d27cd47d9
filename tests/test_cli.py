"""
Tests for the command-line interface.
"""

import json
import os

import pytest

from src.main import main

SAMPLE_FILE = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
    "examples", "data", "polkadot_headers.jsonl",
)
SECOND_HASH = "0x490789ed3dfd996480a576b62ae8a92de3fd2d2331285e6e60262e26fb7a2b33"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("HEADER_BATCH_SIZE", "HEADER_QUEUE_SIZE", "HEADER_RPC_URL",
                 "HEADER_POLL_INTERVAL", "HEADER_VALIDATE"):
        monkeypatch.delenv(name, raising=False)


class TestCli:

    def test_commit_and_export(self, tmp_path, capsys):
        export = tmp_path / "state.json"
        assert main(["commit", SAMPLE_FILE, "--batch-size", "2", "--export", str(export)]) == 0
        data = json.loads(export.read_text())
        assert len(data["batches"]) == 2
        assert len(data["pending"]) == 1

    def test_prove_json(self, capsys):
        assert main(["prove", SAMPLE_FILE, SECOND_HASH, "--json"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out["verified"] is True
        assert out["proof"]["batch_index"] == 0
        assert out["proof"]["leaf_index"] == 1
        assert len(out["proof"]["steps"]) == 3

    def test_prove_uncommitted(self, capsys):
        """With batch size 10 the five sample headers stay pending."""
        assert main(["prove", SAMPLE_FILE, SECOND_HASH, "--batch-size", "10", "--json"]) == 1
        out = json.loads(capsys.readouterr().out)
        assert out == {"proof": None, "verified": False}

    def test_prove_unknown_hash(self):
        assert main(["prove", SAMPLE_FILE, "0x" + "00" * 32]) == 1

    def test_bad_batch_size(self):
        assert main(["commit", SAMPLE_FILE, "--batch-size", "0"]) == 2

    def test_missing_file(self, tmp_path):
        assert main(["commit", str(tmp_path / "nope.jsonl")]) == 2

    def test_zero_queue_size_rejected(self):
        assert main(["follow", "--queue-size", "0"]) == 2

    def test_array_of_non_objects(self, tmp_path):
        path = tmp_path / "headers.json"
        path.write_text("[1, 2]")
        assert main(["commit", str(path)]) == 2
