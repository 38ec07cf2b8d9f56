"""``gitwide hash-object``: compute, and optionally store, a blob digest."""

from __future__ import annotations

from pathlib import Path

import typer

from gitwide.cli.commands._common import fail, open_repository, store_for
from gitwide.config import config
from gitwide.core.blob import BlobEncoder
from gitwide.core.errors import GitwideError
from gitwide.models.objects import ObjectType


def hash_object_cmd(
    file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="File to hash."
    ),
    repo: Path = typer.Option(None, "--repo", "-r", help="Repository directory."),
    write: bool = typer.Option(
        False, "--write", "-w", help="Store the blob in the repository."
    ),
) -> None:
    """Print the blob digest of FILE; with --write, also store it."""
    data = file.read_bytes()
    try:
        if write:
            store = open_repository(repo).object_store(config)
            digest = BlobEncoder(store).encode(data)
        else:
            digest = store_for(repo).compute_digest(ObjectType.BLOB, [data])
    except GitwideError as exc:
        raise fail(str(exc)) from exc

    # Plain output for scripting
    typer.echo(digest.hex)
