"""Tests for the Pydantic data models: validation, immutability, defaults."""

from __future__ import annotations

import hashlib

import pytest
from pydantic import ValidationError

from gitwide.core.errors import ObjectValidationError
from gitwide.models.digest import Digest
from gitwide.models.objects import (
    Authorship,
    Commit,
    Identity,
    ObjectType,
    StoredObject,
    TreeEntry,
)

_VALUE = hashlib.sha256(b"x").digest()


class TestDigest:
    def test_from_bytes_renders_hex(self):
        digest = Digest.from_bytes(_VALUE)
        assert digest.hex == _VALUE.hex()
        assert digest.size == 32
        assert str(digest) == digest.hex

    def test_shard_and_rest(self):
        digest = Digest.from_bytes(_VALUE)
        assert digest.shard == digest.hex[:2]
        assert digest.rest == digest.hex[2:]
        assert digest.shard + digest.rest == digest.hex

    def test_equality_over_bytes(self):
        assert Digest.from_bytes(_VALUE) == Digest.from_hex(_VALUE.hex())
        assert Digest.from_bytes(_VALUE) != Digest.from_bytes(hashlib.sha256(b"y").digest())

    def test_hashable(self):
        assert len({Digest.from_bytes(_VALUE), Digest.from_hex(_VALUE.hex())}) == 1

    def test_frozen(self):
        digest = Digest.from_bytes(_VALUE)
        with pytest.raises(ValidationError):
            digest.hex = "00"

    def test_mismatched_hex_rejected(self):
        with pytest.raises(ValidationError):
            Digest(value=_VALUE, hex="00" * 32)

    def test_str_value_rejected(self):
        with pytest.raises(ValidationError):
            Digest(value="abcd", hex="61626364")

    def test_from_hex_rejects_uppercase(self):
        with pytest.raises(ObjectValidationError):
            Digest.from_hex(_VALUE.hex().upper())

    def test_from_hex_rejects_odd_length(self):
        with pytest.raises(ObjectValidationError):
            Digest.from_hex("abc")

    def test_from_hex_checks_width(self):
        with pytest.raises(ObjectValidationError, match="expected 20"):
            Digest.from_hex(_VALUE.hex(), width=20)

    def test_from_hex_strips_newline(self):
        assert Digest.from_hex(_VALUE.hex() + "\n").value == _VALUE


class TestObjectModels:
    def test_object_type_values(self):
        assert ObjectType.BLOB == "blob"
        assert ObjectType.TREE == "tree"
        assert ObjectType.COMMIT == "commit"

    def test_tree_entry_directory(self):
        child = Digest.from_bytes(_VALUE)
        assert TreeEntry(mode="40000", name="src", child=child).is_directory
        assert not TreeEntry(mode="100644", name="a", child=child).is_directory

    def test_identity_int_timestamp(self):
        identity = Identity(name="n", email="e", timestamp=1700000000)
        assert identity.timestamp == "1700000000"

    def test_identity_large_timestamp_kept_as_text(self):
        # beyond 32-bit epoch range
        identity = Identity(name="n", email="e", timestamp=2**33)
        assert identity.timestamp == str(2**33)

    def test_identity_requires_timestamp(self):
        with pytest.raises(ValidationError, match="timestamp"):
            Identity(name="n", email="e")

    def test_identity_default_timezone(self):
        assert Identity(name="n", email="e", timestamp="0").tz_offset == "+0000"

    def test_commit_identity_lookup(self):
        author = Identity(name="a", email="a@x", timestamp="0")
        commit = Commit(
            tree=Digest.from_bytes(_VALUE),
            authorship=[Authorship(role="author", identity=author)],
        )
        assert commit.identity("author") == author
        assert commit.identity("committer") is None

    def test_stored_object_size(self):
        obj = StoredObject(type=ObjectType.BLOB, payload=b"abc", digest=Digest.from_bytes(_VALUE))
        assert obj.size == 3
