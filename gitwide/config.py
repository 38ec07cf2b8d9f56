"""Runtime configuration: env-driven.

Centralized config using pydantic-settings for environment variable
support. Reads from .env file and GITWIDE_* environment variables.

Library classes never read this module implicitly; they take explicit
constructor arguments. The CLI and the ``from_config`` constructors bridge
the two.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GitwideConfig(BaseSettings):
    """Object store configuration with environment variable overrides.

    All settings can be overridden via GITWIDE_* environment variables
    or a .env file in the working directory.

    Examples
    --------
    Override via environment::

        export GITWIDE_HASH_ALGORITHM=sha1
        export GITWIDE_LOG_LEVEL=DEBUG
        export GITWIDE_VERIFY_EXISTING=true

    Or via .env file::

        GITWIDE_REPOSITORY_PATH=/srv/mirror.git
        GITWIDE_SORT_TREE_ENTRIES=true
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="GITWIDE_",
        env_file_encoding="utf-8",
    )

    log_level: str = "INFO"

    # Object encoding
    hash_algorithm: str = "sha256"
    compression_level: int = -1  # zlib.Z_DEFAULT_COMPRESSION
    sort_tree_entries: bool = False
    default_timezone: str = "+0000"

    # Write behaviour
    verify_existing: bool = False
    fsync_object_files: bool = True

    # Repository layout
    repository_path: Path = Path("demo.git")
    default_branch: str = "master"

    @field_validator("hash_algorithm")
    @classmethod
    def _known_algorithm(cls, value: str) -> str:
        name = value.lower()
        if name not in hashlib.algorithms_available:
            raise ValueError(f"unknown hash algorithm: {value!r}")
        return name

    @field_validator("compression_level")
    @classmethod
    def _zlib_level(cls, value: int) -> int:
        if not -1 <= value <= 9:
            raise ValueError(f"compression_level must be in -1..9, got {value}")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


# Module-level singleton: import as `from gitwide.config import config`
config = GitwideConfig()
