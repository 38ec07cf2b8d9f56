"""Content-addressed, immutable loose object store.

Storage layout: {root}/objects/{hex[0:2]}/{hex[2:]}
File content:   zlib("<type> <payload length>\\0" + payload)

Objects are created once and never mutated. There is no delete method;
removing objects is an administrative action outside this module.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
import zlib
from collections.abc import Iterable, Iterator
from pathlib import Path

from gitwide.config import GitwideConfig
from gitwide.core.errors import (
    ConsistencyError,
    ObjectNotFoundError,
    ObjectValidationError,
    StorageIOError,
)
from gitwide.core.hasher import ContentHasher
from gitwide.models.digest import Digest
from gitwide.models.objects import ObjectType, StoredObject

logger = logging.getLogger(__name__)

_TEMP_PREFIX = "tmp_obj_"
# Loose objects are read-only once in place.
_OBJECT_MODE = 0o444


def _as_fragments(fragments: Iterable[bytes]) -> list[memoryview]:
    views = []
    for fragment in fragments:
        if isinstance(fragment, str):
            raise TypeError("payload fragments must be bytes-like, not str")
        views.append(memoryview(fragment).cast("B"))
    return views


def _object_type(type_tag: ObjectType | str) -> ObjectType:
    try:
        return ObjectType(type_tag)
    except ValueError:
        raise ObjectValidationError(f"unknown object type: {type_tag!r}") from None


def frame_header(type_tag: ObjectType | str, length: int) -> bytes:
    """Return the ``"<type> <length>\\0"`` header for an object."""
    return f"{_object_type(type_tag).value} {length}\0".encode("ascii")


class ObjectStore:
    """Hash-addressed object store rooted at a repository directory.

    Storing the same content twice is a no-op (idempotent). The existence
    check and the create-if-absent decision are serialized per store, so
    threads sharing one store never race on the same object path.

    Parameters
    ----------
    root:
        Repository root; objects live under ``{root}/objects``.
    hasher:
        Hash function wrapper. Defaults to SHA-256.
    compression_level:
        zlib level, ``-1`` for the zlib default.
    verify_existing:
        Read back and re-hash an already present object before trusting it.
    fsync:
        Flush object files to durable storage before moving them in place.
    """

    def __init__(
        self,
        root: Path,
        *,
        hasher: ContentHasher | None = None,
        compression_level: int = zlib.Z_DEFAULT_COMPRESSION,
        verify_existing: bool = False,
        fsync: bool = True,
    ) -> None:
        if not -1 <= compression_level <= 9:
            raise ValueError(f"compression_level must be in -1..9, got {compression_level}")
        self._root = Path(root)
        self._objects = self._root / "objects"
        self._hasher = hasher or ContentHasher()
        self._level = compression_level
        self._verify_existing = verify_existing
        self._fsync = fsync
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, root: Path, config: GitwideConfig) -> ObjectStore:
        """Build a store using the hash and write settings from ``config``."""
        return cls(
            root,
            hasher=ContentHasher(config.hash_algorithm),
            compression_level=config.compression_level,
            verify_existing=config.verify_existing,
            fsync=config.fsync_object_files,
        )

    @property
    def root(self) -> Path:
        return self._root

    @property
    def objects_dir(self) -> Path:
        return self._objects

    @property
    def hasher(self) -> ContentHasher:
        return self._hasher

    @property
    def digest_size(self) -> int:
        return self._hasher.digest_size

    def object_path(self, digest: Digest | str) -> Path:
        """Compute the storage path for a digest.

        Layout: {root}/objects/{hex[0:2]}/{hex[2:]}
        """
        digest = self._coerce(digest)
        return self._objects / digest.shard / digest.rest

    def _coerce(self, digest: Digest | str) -> Digest:
        if isinstance(digest, Digest):
            if digest.size != self.digest_size:
                raise ObjectValidationError(
                    f"digest {digest.hex} is {digest.size} bytes wide, "
                    f"store uses {self.digest_size}"
                )
            return digest
        return Digest.from_hex(digest, width=self.digest_size)

    # ------------------------------------------------------------------
    # Store
    # ------------------------------------------------------------------

    def compute_digest(
        self, type_tag: ObjectType | str, fragments: Iterable[bytes]
    ) -> Digest:
        """Return the digest ``store`` would produce, without writing."""
        views = _as_fragments(fragments)
        header = frame_header(type_tag, sum(v.nbytes for v in views))
        return self._hasher.hash(header, views)

    def store(self, type_tag: ObjectType | str, fragments: Iterable[bytes]) -> Digest:
        """Frame, hash and persist an object; return its digest.

        If the object already exists the write is skipped. With
        ``verify_existing`` the existing file is re-hashed first and a
        :class:`ConsistencyError` raised if it is corrupt.

        Raises
        ------
        ObjectValidationError
            If ``type_tag`` is not a known object type.
        StorageIOError
            If the shard directory or object file cannot be written.
        """
        object_type = _object_type(type_tag)
        views = _as_fragments(fragments)
        header = frame_header(object_type, sum(v.nbytes for v in views))
        digest = self._hasher.hash(header, views)
        path = self._objects / digest.shard / digest.rest

        with self._lock:
            if path.exists():
                if self._verify_existing:
                    self._check_existing(digest, object_type)
                logger.debug("%s %s already stored", object_type.value, digest.hex)
                return digest
            self._write(path, header, views)

        logger.debug("stored %s %s at %s", object_type.value, digest.hex, path)
        return digest

    def _check_existing(self, digest: Digest, object_type: ObjectType) -> None:
        try:
            stored = self.read(digest)
        except ConsistencyError:
            logger.warning("existing object %s is corrupt", digest.hex)
            raise
        if stored.type is not object_type:
            raise ConsistencyError(
                f"stored as {stored.type.value}, requested {object_type.value}",
                digest.hex,
            )

    def _write(self, path: Path, header: bytes, views: list[memoryview]) -> None:
        shard_dir = path.parent
        try:
            shard_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=shard_dir, prefix=_TEMP_PREFIX)
        except OSError as exc:
            raise StorageIOError(shard_dir, exc) from exc

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as f:
                compressor = zlib.compressobj(self._level)
                f.write(compressor.compress(header))
                for view in views:
                    f.write(compressor.compress(view))
                f.write(compressor.flush())
                f.flush()
                if self._fsync:
                    os.fsync(f.fileno())
            os.chmod(tmp_path, _OBJECT_MODE)
            os.replace(tmp_path, path)
        except OSError as exc:
            self._discard(tmp_path)
            raise StorageIOError(path, exc) from exc
        except BaseException:
            self._discard(tmp_path)
            raise

    @staticmethod
    def _discard(tmp_path: Path) -> None:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError:
            logger.warning("could not remove temporary object file %s", tmp_path)

    # ------------------------------------------------------------------
    # Retrieve
    # ------------------------------------------------------------------

    def read(self, digest: Digest | str) -> StoredObject:
        """Read, decompress and re-hash-verify an object.

        Raises
        ------
        ObjectNotFoundError
            If no object is stored under ``digest``.
        StorageIOError
            If the object file exists but cannot be read.
        ConsistencyError
            If the file does not decompress, its header is malformed, its
            declared length is wrong, or it re-hashes to another digest.
        """
        digest = self._coerce(digest)
        path = self.object_path(digest)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            raise ObjectNotFoundError(digest.hex) from None
        except OSError as exc:
            raise StorageIOError(path, exc, "read") from exc

        try:
            data = zlib.decompress(raw)
        except zlib.error as exc:
            raise ConsistencyError(f"cannot decompress: {exc}", digest.hex) from exc

        header, sep, payload = data.partition(b"\0")
        if not sep:
            raise ConsistencyError("missing header terminator", digest.hex)
        tag, space, length = header.partition(b" ")
        if not space or not length.isdigit():
            raise ConsistencyError(f"malformed header {header!r}", digest.hex)
        try:
            object_type = ObjectType(tag.decode("ascii"))
        except (UnicodeDecodeError, ValueError):
            raise ConsistencyError(f"unknown object type {tag!r}", digest.hex) from None
        if int(length) != len(payload):
            raise ConsistencyError(
                f"header declares {int(length)} bytes, payload has {len(payload)}",
                digest.hex,
            )

        actual = self._hasher.hash(header + b"\0", [payload])
        if actual != digest:
            raise ConsistencyError(f"content hashes to {actual.hex}", digest.hex)
        return StoredObject(type=object_type, payload=payload, digest=digest)

    # ------------------------------------------------------------------
    # Check and verify
    # ------------------------------------------------------------------

    def exists(self, digest: Digest | str) -> bool:
        """Check if an object exists in the store."""
        try:
            return self.object_path(digest).exists()
        except ObjectValidationError:
            return False

    def verify(self, digest: Digest | str) -> bool:
        """Re-hash a stored object. Returns False if absent, unreadable or corrupt."""
        try:
            self.read(digest)
        except (ObjectNotFoundError, ConsistencyError, ObjectValidationError, StorageIOError):
            return False
        return True

    def iter_digests(self) -> Iterator[Digest]:
        """Yield the digest of every loose object, in path order.

        Temporary files, non-files and names that are not hex of the right
        width are skipped.
        """
        if not self._objects.is_dir():
            return
        rest_len = 2 * self.digest_size - 2
        for shard in sorted(self._objects.iterdir()):
            if not shard.is_dir() or len(shard.name) != 2:
                continue
            for entry in sorted(shard.iterdir()):
                if entry.name.startswith(_TEMP_PREFIX) or len(entry.name) != rest_len:
                    continue
                if not entry.is_file():
                    continue
                try:
                    yield Digest.from_hex(shard.name + entry.name, width=self.digest_size)
                except ObjectValidationError:
                    continue

    def __repr__(self) -> str:
        return f"ObjectStore({str(self._root)!r}, algorithm={self._hasher.algorithm!r})"
