"""gitwide: content-addressed version-control objects under a wide hash.

Stores blobs, trees and commits as zlib-compressed loose objects laid out
the way an external version-control client expects, addressed by SHA-256
(or SHA-1) digests:
  - Domain-separated hashing: "<type> <length>\\0" header folded into the digest
  - Two-level sharded layout, idempotent atomic writes
  - Optional re-hash verification of existing objects
  - Bare repository scaffolding (config, HEAD, refs) and a Typer CLI
"""

__version__ = "0.1.0"
__description__ = "Content-addressed blob/tree/commit store with a wide hash"

from gitwide.core.blob import BlobEncoder
from gitwide.core.commit import CommitEncoder
from gitwide.core.hasher import ContentHasher
from gitwide.core.object_store import ObjectStore
from gitwide.core.repository import BareRepository
from gitwide.core.tree import TreeEncoder
from gitwide.models import Digest, Identity, ObjectType, TreeEntry

__all__ = [
    "BareRepository",
    "BlobEncoder",
    "CommitEncoder",
    "ContentHasher",
    "Digest",
    "Identity",
    "ObjectStore",
    "ObjectType",
    "TreeEncoder",
    "TreeEntry",
    "__version__",
]
