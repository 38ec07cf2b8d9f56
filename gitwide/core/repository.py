"""Bare repository scaffolding around the object store.

Writes the plain-text files an external client needs to open the store as
a repository: ``config``, ``HEAD`` and branch refs. Ref updates are plain
writes with no locking.

Layout::

    {root}/
        config
        HEAD
        objects/
        refs/heads/{branch}
        refs/tags/
"""

from __future__ import annotations

import logging
import re
import sys
from pathlib import Path

from gitwide.config import GitwideConfig
from gitwide.core.errors import (
    GitwideError,
    ObjectNotFoundError,
    ObjectValidationError,
    StorageIOError,
)
from gitwide.core.hasher import ContentHasher
from gitwide.core.object_store import ObjectStore
from gitwide.models.digest import Digest

logger = logging.getLogger(__name__)

OBJECT_FORMATS = ("sha1", "sha256")

_OBJECT_FORMAT_RE = re.compile(r"^\s*objectformat\s*=\s*(\S+)\s*$", re.IGNORECASE | re.MULTILINE)
_BAD_BRANCH_CHARS = re.compile(r"[\x00-\x20\x7f~^:?*\[\\]")


class NotARepositoryError(GitwideError):
    """Raised when opening a directory that has no repository config."""


def _validate_branch(branch: str) -> None:
    if (
        not branch
        or branch.startswith(("/", "-", "."))
        or branch.endswith(("/", ".lock", "."))
        or ".." in branch
        or "//" in branch
        or _BAD_BRANCH_CHARS.search(branch)
    ):
        raise ObjectValidationError(f"invalid branch name: {branch!r}")


def _write_if_modified(path: Path, text: str) -> bool:
    """Write ``text`` to ``path`` unless it already holds exactly that."""
    try:
        if path.exists() and path.read_text(encoding="utf-8") == text:
            return False
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8", newline="\n")
    except OSError as exc:
        raise StorageIOError(path, exc) from exc
    return True


class BareRepository:
    """A bare repository directory using ``object_format`` for its objects.

    Parameters
    ----------
    root:
        Repository directory, conventionally ending in ``.git``.
    object_format:
        ``sha256`` (the wide format) or ``sha1``.
    """

    def __init__(self, root: Path, *, object_format: str = "sha256") -> None:
        if object_format not in OBJECT_FORMATS:
            raise ValueError(
                f"object_format must be one of {OBJECT_FORMATS}, got {object_format!r}"
            )
        self._root = Path(root)
        self._object_format = object_format

    @classmethod
    def open(cls, root: Path) -> BareRepository:
        """Open an existing repository, reading its object format from config."""
        config_path = Path(root) / "config"
        try:
            text = config_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise NotARepositoryError(f"not a repository: {root}") from None
        match = _OBJECT_FORMAT_RE.search(text)
        object_format = match.group(1).lower() if match else "sha1"
        return cls(root, object_format=object_format)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def object_format(self) -> str:
        return self._object_format

    @property
    def heads_dir(self) -> Path:
        return self._root / "refs" / "heads"

    def object_store(self, config: GitwideConfig | None = None) -> ObjectStore:
        """Return an object store for this repository's objects directory.

        Write settings come from ``config`` when given; the hash function is
        always the repository's object format.
        """
        hasher = ContentHasher(self._object_format)
        if config is None:
            return ObjectStore(self._root, hasher=hasher)
        return ObjectStore(
            self._root,
            hasher=hasher,
            compression_level=config.compression_level,
            verify_existing=config.verify_existing,
            fsync=config.fsync_object_files,
        )

    # ------------------------------------------------------------------
    # Initialisation
    # ------------------------------------------------------------------

    def config_text(self) -> str:
        """Render the repository ``config`` file."""
        wide = self._object_format != "sha1"
        lines = [
            "[core]",
            f"\trepositoryformatversion = {1 if wide else 0}",
            "\tfilemode = false",
            "\tbare = true",
            "\tlogallrefupdates = true",
            "\tsymlinks = false",
            f"\tignorecase = {'true' if sys.platform == 'win32' else 'false'}",
        ]
        if wide:
            lines += ["[extensions]", f"\tobjectFormat = {self._object_format}"]
        return "\n".join(lines) + "\n"

    def init(self, default_branch: str = "master") -> None:
        """Create the directory skeleton, ``config`` and ``HEAD``.

        Safe to call on an existing repository; files are rewritten only if
        their content differs.
        """
        for directory in (self._root / "objects", self.heads_dir, self._root / "refs" / "tags"):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise StorageIOError(directory, exc) from exc
        _write_if_modified(self._root / "config", self.config_text())
        self.set_head(default_branch)
        logger.info("initialized %s repository at %s", self._object_format, self._root)

    # ------------------------------------------------------------------
    # Refs
    # ------------------------------------------------------------------

    def set_head(self, branch: str) -> None:
        """Point ``HEAD`` at ``refs/heads/<branch>``."""
        _validate_branch(branch)
        _write_if_modified(self._root / "HEAD", f"ref: refs/heads/{branch}\n")

    def head_branch(self) -> str:
        """Return the branch name ``HEAD`` points at."""
        path = self._root / "HEAD"
        try:
            text = path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            raise NotARepositoryError(f"not a repository: {self._root}") from None
        prefix = "ref: refs/heads/"
        if not text.startswith(prefix):
            raise GitwideError(f"HEAD is not a branch reference: {text!r}")
        return text[len(prefix):]

    def update_ref(self, branch: str, digest: Digest) -> Path:
        """Record ``digest`` as the head of ``branch``; return the ref path."""
        _validate_branch(branch)
        if digest.size != ContentHasher(self._object_format).digest_size:
            raise ObjectValidationError(
                f"{digest.hex} is not a {self._object_format} digest"
            )
        path = self.heads_dir / branch
        if _write_if_modified(path, f"{digest.hex}\n"):
            logger.info("refs/heads/%s -> %s", branch, digest.hex)
        return path

    def read_ref(self, branch: str) -> Digest:
        """Return the digest ``branch`` points at.

        Raises
        ------
        ObjectNotFoundError
            If the branch does not exist.
        """
        _validate_branch(branch)
        path = self.heads_dir / branch
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise ObjectNotFoundError(f"refs/heads/{branch}") from None
        width = ContentHasher(self._object_format).digest_size
        return Digest.from_hex(text, width=width)

    def __repr__(self) -> str:
        return f"BareRepository({str(self._root)!r}, object_format={self._object_format!r})"
