"""gitwide data models: all Pydantic v2, all frozen (immutable)."""

from gitwide.models.digest import Digest
from gitwide.models.objects import (
    DIRECTORY_MODES,
    Authorship,
    Commit,
    Identity,
    ObjectType,
    StoredObject,
    TreeEntry,
)

__all__ = [
    # digest
    "Digest",
    # objects
    "DIRECTORY_MODES",
    "ObjectType",
    "TreeEntry",
    "Identity",
    "Authorship",
    "Commit",
    "StoredObject",
]
