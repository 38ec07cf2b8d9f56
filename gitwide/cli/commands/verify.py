"""``gitwide verify``: re-hash every loose object in a repository.

Exits with status 1 if any object is corrupt.
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.table import Table

from gitwide.cli.commands._common import console, open_repository
from gitwide.core.errors import ConsistencyError, ObjectNotFoundError, StorageIOError

logger = logging.getLogger(__name__)


def verify_cmd(
    repo: Path = typer.Option(None, "--repo", "-r", help="Repository directory."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only list objects that fail verification."
    ),
) -> None:
    """Decompress and re-hash every object, reporting mismatches."""
    repository = open_repository(repo)
    store = repository.object_store()

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Object", no_wrap=True)
    table.add_column("Type")
    table.add_column("Size", justify="right")
    table.add_column("Status", justify="center")

    checked = 0
    failures = 0
    for digest in store.iter_digests():
        checked += 1
        try:
            obj = store.read(digest)
        except (ConsistencyError, StorageIOError, ObjectNotFoundError) as exc:
            failures += 1
            logger.warning("%s", exc)
            table.add_row(digest.hex, "-", "-", "[red]CORRUPT[/red]")
            continue
        if not quiet:
            table.add_row(digest.hex, obj.type.value, str(obj.size), "[green]OK[/green]")

    if table.row_count:
        console.print(table)
    style = "red" if failures else "green"
    console.print(
        f"[bold {style}]{checked} objects checked, {failures} corrupt[/bold {style}]"
    )
    if failures:
        raise typer.Exit(code=1)
