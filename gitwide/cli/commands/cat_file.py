"""``gitwide cat-file``: show the type, size or content of an object.

Every read is re-hash-verified, so a corrupt object is reported rather
than printed.
"""

from __future__ import annotations

from pathlib import Path

import typer

from gitwide.cli.commands._common import fail, store_for
from gitwide.core.commit import decode_commit
from gitwide.core.errors import GitwideError
from gitwide.core.tree import decode_tree
from gitwide.models.objects import DIRECTORY_MODES, ObjectType, StoredObject

# Mode of a submodule entry, whose child is a commit.
_GITLINK_MODE = "160000"


def _entry_type(mode: str) -> str:
    if mode in DIRECTORY_MODES:
        return ObjectType.TREE.value
    if mode == _GITLINK_MODE:
        return ObjectType.COMMIT.value
    return ObjectType.BLOB.value


def _pretty(obj: StoredObject, digest_size: int) -> bytes:
    if obj.type is ObjectType.TREE:
        lines = [
            f"{entry.mode.rjust(6, '0')} {_entry_type(entry.mode)} {entry.child.hex}\t{entry.name}\n"
            for entry in decode_tree(obj.payload, digest_size)
        ]
        return "".join(lines).encode("utf-8", "surrogateescape")
    if obj.type is ObjectType.COMMIT:
        # Parse to reject malformed commits; print the stored text as is.
        decode_commit(obj.payload)
    return obj.payload


def cat_file_cmd(
    digest: str = typer.Argument(..., help="Hex digest of the object."),
    repo: Path = typer.Option(None, "--repo", "-r", help="Repository directory."),
    show_type: bool = typer.Option(False, "-t", help="Show the object type."),
    show_size: bool = typer.Option(False, "-s", help="Show the payload size."),
    pretty: bool = typer.Option(False, "-p", help="Pretty-print the content (default)."),
) -> None:
    """Show the type (-t), size (-s) or content (-p) of DIGEST."""
    if show_type + show_size + pretty > 1:
        raise fail("-t, -s and -p are mutually exclusive")

    store = store_for(repo)
    try:
        obj = store.read(digest)
        if show_type:
            typer.echo(obj.type.value)
        elif show_size:
            typer.echo(str(obj.size))
        else:
            typer.echo(_pretty(obj, store.digest_size), nl=False)
    except GitwideError as exc:
        raise fail(str(exc)) from exc
