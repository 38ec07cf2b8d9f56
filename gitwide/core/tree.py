"""Tree objects: ordered directory listings.

Binary layout, repeated per entry with nothing between entries::

    <mode> SP <name> NUL <child digest, raw bytes>

Entry order is part of the encoding. External tooling only accepts trees
sorted by name bytes, with subdirectories compared as if their name ended
in ``/``; pass ``sort_entries=True`` to get that order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from gitwide.core.errors import ObjectValidationError
from gitwide.core.object_store import ObjectStore
from gitwide.models.digest import Digest
from gitwide.models.objects import ObjectType, TreeEntry

logger = logging.getLogger(__name__)

EntryLike = TreeEntry | tuple[str, str, Digest]


def _coerce_entry(entry: EntryLike) -> TreeEntry:
    if isinstance(entry, TreeEntry):
        return entry
    mode, name, child = entry
    return TreeEntry(mode=mode, name=name, child=child)


def _entry_sort_key(entry: TreeEntry) -> bytes:
    name = entry.name.encode("utf-8", "surrogateescape")
    return name + b"/" if entry.is_directory else name


def sort_tree_entries(entries: Iterable[TreeEntry]) -> list[TreeEntry]:
    """Return ``entries`` in canonical order.

    Raises
    ------
    ObjectValidationError
        If two entries share a name.
    """
    ordered = sorted(entries, key=_entry_sort_key)
    for previous, current in zip(ordered, ordered[1:]):
        if previous.name == current.name:
            raise ObjectValidationError(f"duplicate tree entry name: {current.name!r}")
    return ordered


class TreeEncoder:
    """Stores directory listings as ``tree`` objects.

    Parameters
    ----------
    store:
        Destination store. Child digests must have its digest width.
    sort_entries:
        Sort entries canonically before framing instead of keeping the
        caller's order.
    """

    def __init__(self, store: ObjectStore, *, sort_entries: bool = False) -> None:
        self._store = store
        self._sort_entries = sort_entries

    def _validate(self, entry: TreeEntry) -> None:
        if not entry.mode or " " in entry.mode or "\0" in entry.mode:
            raise ObjectValidationError(f"invalid tree entry mode: {entry.mode!r}")
        if not entry.mode.isascii():
            raise ObjectValidationError(f"tree entry mode must be ASCII: {entry.mode!r}")
        if not entry.name:
            raise ObjectValidationError("tree entry name must not be empty")
        if "\0" in entry.name:
            raise ObjectValidationError(f"tree entry name contains NUL: {entry.name!r}")
        if entry.child.size != self._store.digest_size:
            raise ObjectValidationError(
                f"child {entry.child.hex} of {entry.name!r} is {entry.child.size} bytes, "
                f"store uses {self._store.digest_size}"
            )

    def encode(self, entries: Iterable[EntryLike]) -> Digest:
        """Validate, frame and store ``entries``; return the tree digest.

        All entries are validated before anything is written.
        """
        tree_entries = [_coerce_entry(e) for e in entries]
        for entry in tree_entries:
            self._validate(entry)
        if self._sort_entries:
            tree_entries = sort_tree_entries(tree_entries)

        fragments: list[bytes] = []
        for entry in tree_entries:
            fragments.append(entry.mode.encode("ascii"))
            fragments.append(b" ")
            fragments.append(entry.name.encode("utf-8", "surrogateescape"))
            fragments.append(b"\0")
            fragments.append(entry.child.value)

        digest = self._store.store(ObjectType.TREE, fragments)
        logger.debug("tree %s has %d entries", digest.hex, len(tree_entries))
        return digest


def decode_tree(payload: bytes, digest_size: int) -> list[TreeEntry]:
    """Parse a tree payload back into entries, preserving order.

    Names that are not valid UTF-8 are decoded with ``surrogateescape`` and
    re-encode to the same bytes.

    Raises
    ------
    ObjectValidationError
        If the payload is truncated or an entry is malformed.
    """
    entries = []
    pos = 0
    end = len(payload)
    while pos < end:
        space = payload.find(b" ", pos)
        if space < 0:
            raise ObjectValidationError(f"tree entry at offset {pos} has no mode separator")
        nul = payload.find(b"\0", space + 1)
        if nul < 0:
            raise ObjectValidationError(f"tree entry at offset {pos} has no name terminator")
        child_end = nul + 1 + digest_size
        if child_end > end:
            raise ObjectValidationError(f"tree entry at offset {pos} is truncated")
        try:
            mode = payload[pos:space].decode("ascii")
            name = payload[space + 1:nul].decode("utf-8", "surrogateescape")
        except UnicodeDecodeError as exc:
            raise ObjectValidationError(f"tree entry at offset {pos}: {exc}") from exc
        child = Digest.from_bytes(payload[nul + 1:child_end])
        entries.append(TreeEntry(mode=mode, name=name, child=child))
        pos = child_end
    return entries
