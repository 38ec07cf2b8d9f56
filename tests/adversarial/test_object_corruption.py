"""Adversarial tests: corrupt objects, interrupted writes and racing writers.

These tests verify that:
1. Tampered, truncated or mis-framed object files are detected on read
2. verify_existing refuses to trust a corrupt existing object
3. A write that fails mid-way leaves no object and no temp file behind
4. Threads storing the same content through one store agree on one file
"""

from __future__ import annotations

import os
import threading
import zlib
from pathlib import Path

import pytest

from gitwide.core import object_store as object_store_module
from gitwide.core.errors import ConsistencyError, StorageIOError
from gitwide.core.hasher import ContentHasher
from gitwide.core.object_store import ObjectStore
from gitwide.models.digest import Digest


def _overwrite(path: Path, data: bytes) -> None:
    os.chmod(path, 0o644)
    path.write_bytes(data)


class TestTamperDetection:
    def test_flipped_payload_detected(self, store: ObjectStore):
        digest = store.store("blob", [b"original content"])
        _overwrite(store.object_path(digest), zlib.compress(b"blob 16\0TAMPERED content"))
        with pytest.raises(ConsistencyError, match="hashes to"):
            store.read(digest)
        assert store.verify(digest) is False

    def test_garbage_file_detected(self, store: ObjectStore):
        digest = store.store("blob", [b"x"])
        _overwrite(store.object_path(digest), b"not zlib at all")
        with pytest.raises(ConsistencyError, match="decompress"):
            store.read(digest)

    def test_truncated_file_detected(self, store: ObjectStore):
        digest = store.store("blob", [b"y" * 4096])
        path = store.object_path(digest)
        raw = path.read_bytes()
        _overwrite(path, raw[: len(raw) // 2])
        with pytest.raises(ConsistencyError):
            store.read(digest)

    def test_length_mismatch_detected(self, store: ObjectStore):
        digest = store.store("blob", [b"abc"])
        _overwrite(store.object_path(digest), zlib.compress(b"blob 99\0abc"))
        with pytest.raises(ConsistencyError, match="declares 99"):
            store.read(digest)

    def test_missing_terminator_detected(self, store: ObjectStore):
        digest = store.store("blob", [b"abc"])
        _overwrite(store.object_path(digest), zlib.compress(b"blob 3 abc"))
        with pytest.raises(ConsistencyError, match="terminator"):
            store.read(digest)

    def test_unknown_type_detected(self, store: ObjectStore):
        digest = store.store("blob", [b"abc"])
        _overwrite(store.object_path(digest), zlib.compress(b"tag 3\0abc"))
        with pytest.raises(ConsistencyError, match="unknown object type"):
            store.read(digest)

    def test_object_under_wrong_name_detected(self, store: ObjectStore):
        """A valid object copied to another address must not verify."""
        real = store.store("blob", [b"real"])
        fake = Digest.from_bytes(b"\x00" * 32)
        path = store.object_path(fake)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(store.object_path(real).read_bytes())
        assert store.verify(fake) is False


class TestVerifyExisting:
    def test_trusting_store_skips_corrupt_existing(self, store: ObjectStore):
        digest = store.store("blob", [b"trust me"])
        _overwrite(store.object_path(digest), b"junk")
        # default mode does not look at existing files
        assert store.store("blob", [b"trust me"]) == digest

    def test_verifying_store_raises_on_corrupt_existing(self, tmp_dir: Path):
        store = ObjectStore(tmp_dir / "v.git", verify_existing=True, fsync=False)
        digest = store.store("blob", [b"check me"])
        _overwrite(store.object_path(digest), b"junk")
        with pytest.raises(ConsistencyError):
            store.store("blob", [b"check me"])

    def test_verifying_store_accepts_good_existing(self, tmp_dir: Path):
        store = ObjectStore(tmp_dir / "v.git", verify_existing=True, fsync=False)
        digest = store.store("blob", [b"fine"])
        assert store.store("blob", [b"fine"]) == digest


class TestInterruptedWrite:
    def test_failed_rename_leaves_nothing(self, store: ObjectStore, monkeypatch: pytest.MonkeyPatch):
        def broken_replace(src, dst):
            raise OSError(28, "No space left on device")

        monkeypatch.setattr(object_store_module.os, "replace", broken_replace)
        with pytest.raises(StorageIOError, match="No space left") as excinfo:
            store.store("blob", [b"never lands"])

        digest = store.compute_digest("blob", [b"never lands"])
        assert excinfo.value.path == store.object_path(digest)
        assert not store.exists(digest)
        assert list(store.object_path(digest).parent.iterdir()) == []

        monkeypatch.undo()
        assert store.store("blob", [b"never lands"]) == digest
        assert store.verify(digest)

    def test_failing_fragment_leaves_nothing(self, store: ObjectStore, monkeypatch: pytest.MonkeyPatch):
        class Boom(Exception):
            pass

        real = zlib.compressobj

        class FailingCompressor:
            def __init__(self, level):
                self._inner = real(level)
                self._calls = 0

            def compress(self, data):
                self._calls += 1
                if self._calls == 3:
                    raise Boom()
                return self._inner.compress(data)

            def flush(self):
                return self._inner.flush()

        monkeypatch.setattr(object_store_module.zlib, "compressobj", FailingCompressor)
        with pytest.raises(Boom):
            store.store("blob", [b"one", b"two", b"three"])
        digest = store.compute_digest("blob", [b"one", b"two", b"three"])
        assert not store.exists(digest)
        assert list(store.object_path(digest).parent.iterdir()) == []

    def test_stale_temp_file_is_ignored(self, store: ObjectStore):
        digest = store.compute_digest("blob", [b"after crash"])
        shard = store.object_path(digest).parent
        shard.mkdir(parents=True)
        (shard / "tmp_obj_leftover").write_bytes(b"half")
        assert store.store("blob", [b"after crash"]) == digest
        assert store.verify(digest)
        assert list(store.iter_digests()) == [digest]


class TestConcurrentWriters:
    def test_threads_store_same_object(self, store: ObjectStore):
        results: list[Digest] = []
        errors: list[BaseException] = []

        def worker() -> None:
            try:
                results.append(store.store("blob", [b"shared" * 1000]))
            except BaseException as exc:  # pragma: no cover - reported below
                errors.append(exc)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(set(results)) == 1
        [digest] = set(results)
        assert list(store.object_path(digest).parent.iterdir()) == [store.object_path(digest)]
        assert store.verify(digest)

    def test_two_stores_share_a_root(self, tmp_dir: Path):
        a = ObjectStore(tmp_dir / "shared.git", fsync=False)
        b = ObjectStore(tmp_dir / "shared.git", hasher=ContentHasher("sha256"), fsync=False)
        assert a.store("blob", [b"both"]) == b.store("blob", [b"both"])
