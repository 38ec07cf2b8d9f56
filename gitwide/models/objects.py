"""Object models: the three content-addressed record kinds and their parts."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gitwide.models.digest import Digest

# Tree modes that denote a subdirectory. The second form is what older
# tooling emitted; both sort as directories.
DIRECTORY_MODES = frozenset({"40000", "040000"})


class ObjectType(str, Enum):
    """Type tag written into every object header."""

    BLOB = "blob"
    TREE = "tree"
    COMMIT = "commit"


class TreeEntry(BaseModel):
    """One directory entry: a mode, a name and the child's digest."""

    model_config = ConfigDict(frozen=True)

    mode: str
    name: str
    child: Digest

    @property
    def is_directory(self) -> bool:
        return self.mode in DIRECTORY_MODES


class Identity(BaseModel):
    """Who did something, and when.

    ``timestamp`` is seconds since the epoch as a decimal string; integers
    are accepted and rendered. No validation of email syntax or timestamp
    range is performed.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    timestamp: str
    tz_offset: str = "+0000"

    @field_validator("timestamp", mode="before")
    @classmethod
    def _render_timestamp(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class Authorship(BaseModel):
    """An identity paired with its role tag, e.g. ``author`` or ``committer``."""

    model_config = ConfigDict(frozen=True)

    role: str
    identity: Identity


class Commit(BaseModel):
    """Decoded commit: tree, parents, authorship records and message."""

    model_config = ConfigDict(frozen=True)

    tree: Digest
    parents: list[Digest] = Field(default_factory=list)
    authorship: list[Authorship] = Field(default_factory=list)
    message: bytes = b""

    def identity(self, role: str) -> Identity | None:
        """Return the first identity recorded under ``role``."""
        for record in self.authorship:
            if record.role == role:
                return record.identity
        return None


class StoredObject(BaseModel):
    """An object read back from the store, already re-hash-verified."""

    model_config = ConfigDict(frozen=True)

    type: ObjectType
    payload: bytes
    digest: Digest

    @property
    def size(self) -> int:
        return len(self.payload)
