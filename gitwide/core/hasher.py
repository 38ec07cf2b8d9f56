"""Content hashing for object addressing.

The digest of an object covers its header followed by every payload
fragment, fed incrementally so large payloads are never joined into one
buffer.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterable

from gitwide.models.digest import Digest


class ContentHasher:
    """Wraps a ``hashlib`` algorithm and produces :class:`Digest` values.

    Parameters
    ----------
    algorithm:
        Any fixed-width ``hashlib`` algorithm name. ``sha256`` gives the
        wide object format, ``sha1`` the classic one.
    """

    def __init__(self, algorithm: str = "sha256") -> None:
        try:
            probe = hashlib.new(algorithm)
        except ValueError as exc:
            raise ValueError(f"unknown hash algorithm: {algorithm!r}") from exc
        if probe.digest_size == 0:
            # shake_* have no fixed width
            raise ValueError(f"hash algorithm {algorithm!r} has no fixed digest size")
        self._algorithm = probe.name
        self._digest_size = probe.digest_size

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def digest_size(self) -> int:
        """Width of produced digests in bytes."""
        return self._digest_size

    def hash(self, header: bytes, fragments: Iterable[bytes]) -> Digest:
        """Hash ``header`` followed by each fragment in order."""
        h = hashlib.new(self._algorithm)
        h.update(header)
        for fragment in fragments:
            h.update(fragment)
        return Digest.from_bytes(h.digest())

    def __repr__(self) -> str:
        return f"ContentHasher({self._algorithm!r})"
