"""Error taxonomy for the object store.

Every error is terminal to the single operation that raised it. There is
no retry layer here; retry policy belongs to the caller.
"""

from __future__ import annotations

from pathlib import Path


class GitwideError(RuntimeError):
    """Base class for all object store errors."""


class ObjectValidationError(GitwideError, ValueError):
    """Raised when caller input is structurally invalid.

    Covers framing delimiters inside tree modes and names, malformed
    commit authorship lines, unknown object types and malformed hex
    digests. Nothing is written when this is raised.
    """


class StorageIOError(GitwideError):
    """Raised when a directory or object file cannot be created, written or read.

    Parameters
    ----------
    path:
        The path that could not be created, written or finalized.
    cause:
        The underlying ``OSError``.
    operation:
        ``"write"`` or ``"read"``; names the failed step in the message.
    """

    def __init__(self, path: Path, cause: OSError, operation: str = "write") -> None:
        self.path = Path(path)
        self.cause = cause
        self.operation = operation
        super().__init__(f"unable to {operation} `{self.path}`: {cause}")


class ObjectNotFoundError(GitwideError, KeyError):
    """Raised when reading an object that is not in the store."""

    def __str__(self) -> str:
        return f"object not found: {self.args[0]}"


class ConsistencyError(GitwideError):
    """Raised when a stored object does not match its address.

    The file may fail to decompress, carry a malformed header, declare a
    length that differs from its payload, or re-hash to another digest.
    """

    def __init__(self, message: str, hex_digest: str = "") -> None:
        self.hex_digest = hex_digest
        if hex_digest:
            message = f"{hex_digest}: {message}"
        super().__init__(message)
