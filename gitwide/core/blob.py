"""Blob objects: opaque content with no internal structure."""

from __future__ import annotations

from collections.abc import Iterable

from gitwide.core.object_store import ObjectStore
from gitwide.models.digest import Digest
from gitwide.models.objects import ObjectType


class BlobEncoder:
    """Stores raw content as ``blob`` objects."""

    def __init__(self, store: ObjectStore) -> None:
        self._store = store

    def encode(self, content: bytes | Iterable[bytes]) -> Digest:
        """Store ``content`` (one buffer or ordered fragments) as a blob."""
        if isinstance(content, (bytes, bytearray, memoryview)):
            content = [content]
        return self._store.store(ObjectType.BLOB, content)
