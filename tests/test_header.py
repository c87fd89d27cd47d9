"""
Tests for Block Headers
========================

Tests cover:
- Field validation (digest width, prefix, number)
- Dictionary conversion with camelCase keys and RPC hex numbers
- Leaf value and equality
"""

import hashlib

import pytest

from src.core.header import BlockHeader, HeaderValidationError, parse_block_number


SAMPLE = {
    "number": 22346172,
    "hash": "0x883a4e71538a2978f0f78f250156d6955c289bcc8c9d94e3242f22d2abe1faa3",
    "parentHash": "0x774daeb9ebb23a69b35dd959e6d9aa79e80f1122dfd02c19c25b6d56e0b8994f",
    "stateRoot": "0x51f2e1ca355546864d54b26caf015b58c3621b2b5848e654d93a110e264fc5c9",
    "extrinsicsRoot": "0x44869a1917c0483a7f5e5c79f440642afef10fb884a25d0044c71540969c1b75",
}


class TestValidation:
    """Tests for BlockHeader.validate()."""

    def test_sample_is_valid(self):
        BlockHeader.from_dict(SAMPLE).validate()

    def test_short_hash_rejected(self):
        """Irregular-length hashes are an input error."""
        header = BlockHeader.from_dict({**SAMPLE, "hash": SAMPLE["hash"][:-2]})
        with pytest.raises(HeaderValidationError, match="hash"):
            header.validate()

    def test_missing_prefix_rejected(self):
        header = BlockHeader.from_dict({**SAMPLE, "stateRoot": SAMPLE["stateRoot"][2:]})
        with pytest.raises(HeaderValidationError, match="stateRoot"):
            header.validate()

    def test_non_hex_rejected(self):
        header = BlockHeader.from_dict({**SAMPLE, "parentHash": "0x" + "zz" * 32})
        with pytest.raises(HeaderValidationError):
            header.validate()

    def test_negative_number_rejected(self):
        with pytest.raises(HeaderValidationError):
            BlockHeader.from_dict({**SAMPLE, "number": -1}).validate()

    def test_bool_number_rejected(self, header_factory):
        header = header_factory(1)
        bad = BlockHeader(True, header.hash, header.parent_hash, header.state_root, header.extrinsics_root)
        with pytest.raises(HeaderValidationError):
            bad.validate()

    def test_error_is_value_error(self):
        assert issubclass(HeaderValidationError, ValueError)


class TestDictConversion:
    """Tests for to_dict() / from_dict()."""

    def test_to_dict_keys(self):
        assert BlockHeader.from_dict(SAMPLE).to_dict() == SAMPLE

    def test_hex_number(self):
        header = BlockHeader.from_dict({**SAMPLE, "number": "0x154f9bc"})
        assert header.number == 0x154f9bc

    def test_rpc_header_without_hash(self):
        raw = {k: v for k, v in SAMPLE.items() if k != "hash"}
        header = BlockHeader.from_dict(raw, block_hash=SAMPLE["hash"])
        assert header.hash == SAMPLE["hash"]

    def test_missing_field(self):
        raw = {k: v for k, v in SAMPLE.items() if k != "stateRoot"}
        with pytest.raises(HeaderValidationError, match="stateRoot"):
            BlockHeader.from_dict(raw)

    def test_missing_hash(self):
        raw = {k: v for k, v in SAMPLE.items() if k != "hash"}
        with pytest.raises(HeaderValidationError):
            BlockHeader.from_dict(raw)

    def test_parse_block_number(self):
        assert parse_block_number(7) == 7
        assert parse_block_number("0x10") == 16
        assert parse_block_number("12") == 12
        with pytest.raises(HeaderValidationError):
            parse_block_number("0xnope")
        with pytest.raises(HeaderValidationError):
            parse_block_number(None)


class TestIdentity:
    """Tests for leaf value, equality and immutability."""

    def test_leaf_is_hash_of_hash_string(self):
        header = BlockHeader.from_dict(SAMPLE)
        assert header.leaf == hashlib.sha256(SAMPLE["hash"].encode("utf-8")).digest()

    def test_equality_by_hash(self, header_factory):
        a = header_factory(5)
        b = header_factory(6, hash=a.hash)
        assert a == b
        assert hash(a) == hash(b)
        assert a != header_factory(7)

    def test_read_only(self, header_factory):
        header = header_factory(1)
        with pytest.raises(AttributeError):
            header.hash = "0x" + "00" * 32
