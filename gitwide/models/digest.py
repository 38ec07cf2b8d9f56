"""Digest model: the address and integrity check of every object."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, model_validator

from gitwide.core.errors import ObjectValidationError

_HEX_RE = re.compile(r"^(?:[0-9a-f]{2})+$")


class Digest(BaseModel):
    """Fixed-width hash output plus its lowercase hex rendering.

    Immutable. Equality and hashing are defined over ``value``; ``hex`` is
    always derived from it. Build one with :meth:`from_bytes` (from a hash
    function) or :meth:`from_hex` (from untrusted text, re-validated).
    """

    model_config = ConfigDict(frozen=True)

    value: bytes = Field(strict=True, min_length=1)
    hex: str

    @model_validator(mode="after")
    def _hex_matches_value(self) -> Digest:
        if self.hex != self.value.hex():
            raise ValueError("hex rendering does not match digest bytes")
        return self

    @classmethod
    def from_bytes(cls, value: bytes) -> Digest:
        value = bytes(value)
        return cls(value=value, hex=value.hex())

    @classmethod
    def from_hex(cls, text: str, width: int | None = None) -> Digest:
        """Parse a lowercase hex digest, optionally requiring ``width`` bytes.

        Raises
        ------
        ObjectValidationError
            If ``text`` is not lowercase hex of even length, or its decoded
            width differs from ``width``.
        """
        text = text.strip()
        if not _HEX_RE.match(text):
            raise ObjectValidationError(f"malformed hex digest: {text!r}")
        if width is not None and len(text) != 2 * width:
            raise ObjectValidationError(
                f"digest {text!r} is {len(text) // 2} bytes wide, expected {width}"
            )
        return cls.from_bytes(bytes.fromhex(text))

    @property
    def size(self) -> int:
        """Width of the digest in bytes."""
        return len(self.value)

    @property
    def shard(self) -> str:
        """Name of the shard directory: the first two hex characters."""
        return self.hex[:2]

    @property
    def rest(self) -> str:
        """File name inside the shard directory."""
        return self.hex[2:]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Digest):
            return self.value == other.value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.value)

    def __str__(self) -> str:
        return self.hex
