"""Commit objects: tree, parents, authorship and message.

Text layout::

    tree <hex>
    parent <hex>                       (zero or more)
    <role> <name> <<email>> <ts> <tz>  (one or more)

    <message, verbatim>
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from gitwide.core.errors import ObjectValidationError
from gitwide.core.object_store import ObjectStore
from gitwide.models.digest import Digest
from gitwide.models.objects import Authorship, Commit, Identity, ObjectType

logger = logging.getLogger(__name__)

AuthorshipLike = Authorship | tuple[str, Identity]

_ROLE_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*$")
_IDENTITY_RE = re.compile(
    r"^(?P<name>.*) <(?P<email>[^<>]*)> (?P<timestamp>\S+) (?P<tz>\S+)$"
)
_RESERVED_ROLES = frozenset({"tree", "parent"})


def _coerce_authorship(record: AuthorshipLike) -> Authorship:
    if isinstance(record, Authorship):
        return record
    role, identity = record
    return Authorship(role=role, identity=identity)


def _validate_authorship(record: Authorship) -> None:
    if not _ROLE_RE.match(record.role) or record.role in _RESERVED_ROLES:
        raise ObjectValidationError(f"invalid authorship role: {record.role!r}")
    identity = record.identity
    for field, value in (("name", identity.name), ("email", identity.email)):
        if any(c in value for c in "<>\n\0"):
            raise ObjectValidationError(
                f"{record.role} {field} contains a framing character: {value!r}"
            )
    for field, value in (("timestamp", identity.timestamp), ("tz_offset", identity.tz_offset)):
        if not value or not value.isascii() or any(c.isspace() or c == "\0" for c in value):
            raise ObjectValidationError(f"{record.role} {field} is malformed: {value!r}")


class CommitEncoder:
    """Stores snapshot metadata as ``commit`` objects."""

    def __init__(self, store: ObjectStore) -> None:
        self._store = store

    def _check_width(self, label: str, digest: Digest) -> None:
        if digest.size != self._store.digest_size:
            raise ObjectValidationError(
                f"{label} {digest.hex} is {digest.size} bytes, "
                f"store uses {self._store.digest_size}"
            )

    def encode(
        self,
        tree: Digest,
        parents: Iterable[Digest] = (),
        authorship: Iterable[AuthorshipLike] = (),
        message: str | bytes = b"",
    ) -> Digest:
        """Frame and store a commit; return its digest.

        ``message`` is written verbatim, including any trailing newline.
        At least one authorship record is required.
        """
        parents = list(parents)
        records = [_coerce_authorship(r) for r in authorship]
        if not records:
            raise ObjectValidationError("a commit needs at least one authorship record")
        self._check_width("tree", tree)
        for parent in parents:
            self._check_width("parent", parent)
        for record in records:
            _validate_authorship(record)
        if isinstance(message, str):
            message = message.encode("utf-8")

        fragments: list[bytes] = [b"tree ", tree.hex.encode("ascii"), b"\n"]
        for parent in parents:
            fragments += [b"parent ", parent.hex.encode("ascii"), b"\n"]
        for record in records:
            identity = record.identity
            fragments += [
                record.role.encode("ascii"),
                b" ",
                identity.name.encode("utf-8"),
                b" <",
                identity.email.encode("utf-8"),
                b"> ",
                identity.timestamp.encode("ascii"),
                b" ",
                identity.tz_offset.encode("ascii"),
                b"\n",
            ]
        fragments.append(b"\n")
        fragments.append(message)

        digest = self._store.store(ObjectType.COMMIT, fragments)
        logger.debug("commit %s on tree %s (%d parents)", digest.hex, tree.hex, len(parents))
        return digest


def decode_commit(payload: bytes) -> Commit:
    """Parse a commit payload.

    Raises
    ------
    ObjectValidationError
        If a header line is malformed or the tree line is missing.
    """
    head, sep, message = payload.partition(b"\n\n")
    if not sep:
        raise ObjectValidationError("commit has no blank line before the message")
    try:
        lines = head.decode("utf-8").split("\n")
    except UnicodeDecodeError as exc:
        raise ObjectValidationError(f"commit header is not UTF-8: {exc}") from exc

    tree = None
    parents = []
    authorship = []
    for line in lines:
        key, space, value = line.partition(" ")
        if not space:
            raise ObjectValidationError(f"malformed commit header line: {line!r}")
        if key == "tree":
            if tree is not None:
                raise ObjectValidationError("commit has more than one tree line")
            tree = Digest.from_hex(value)
        elif key == "parent":
            parents.append(Digest.from_hex(value))
        else:
            match = _IDENTITY_RE.match(value)
            if match is None:
                raise ObjectValidationError(f"malformed {key} line: {line!r}")
            identity = Identity(
                name=match["name"],
                email=match["email"],
                timestamp=match["timestamp"],
                tz_offset=match["tz"],
            )
            authorship.append(Authorship(role=key, identity=identity))

    if tree is None:
        raise ObjectValidationError("commit has no tree line")
    return Commit(tree=tree, parents=parents, authorship=authorship, message=message)
