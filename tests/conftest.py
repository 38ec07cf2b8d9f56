"""Shared test fixtures for gitwide."""

from __future__ import annotations

import zlib
from collections.abc import Callable
from pathlib import Path

import pytest

from gitwide.core.blob import BlobEncoder
from gitwide.core.commit import CommitEncoder
from gitwide.core.hasher import ContentHasher
from gitwide.core.object_store import ObjectStore
from gitwide.core.repository import BareRepository
from gitwide.core.tree import TreeEncoder
from gitwide.models.digest import Digest
from gitwide.models.objects import Identity


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test repositories."""
    return tmp_path


@pytest.fixture
def store(tmp_dir: Path) -> ObjectStore:
    """Provide a fresh SHA-256 ObjectStore in a temp directory (no fsync)."""
    return ObjectStore(tmp_dir / "repo.git", fsync=False)


@pytest.fixture
def sha1_store(tmp_dir: Path) -> ObjectStore:
    """Provide a fresh SHA-1 ObjectStore in a temp directory."""
    return ObjectStore(tmp_dir / "sha1.git", hasher=ContentHasher("sha1"), fsync=False)


@pytest.fixture
def blobs(store: ObjectStore) -> BlobEncoder:
    return BlobEncoder(store)


@pytest.fixture
def trees(store: ObjectStore) -> TreeEncoder:
    return TreeEncoder(store)


@pytest.fixture
def commits(store: ObjectStore) -> CommitEncoder:
    return CommitEncoder(store)


@pytest.fixture
def repository(tmp_dir: Path) -> BareRepository:
    """Provide an initialized SHA-256 bare repository."""
    repo = BareRepository(tmp_dir / "bare.git")
    repo.init("master")
    return repo


@pytest.fixture
def identity() -> Identity:
    """The identity used by the demo repository."""
    return Identity(name="computer", email="computer@example.com", timestamp="0")


@pytest.fixture
def inflate() -> Callable[[ObjectStore, Digest], bytes]:
    """Factory fixture: raw decompressed bytes of a stored object file."""

    def _inflate(store: ObjectStore, digest: Digest) -> bytes:
        return zlib.decompress(store.object_path(digest).read_bytes())

    return _inflate
