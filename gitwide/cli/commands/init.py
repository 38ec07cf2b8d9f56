"""``gitwide init``: create a bare repository."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.panel import Panel

from gitwide.cli.commands._common import console, fail
from gitwide.config import config
from gitwide.core.errors import GitwideError
from gitwide.core.repository import BareRepository


def init_cmd(
    path: Path = typer.Argument(
        None, help="Repository directory (defaults to GITWIDE_REPOSITORY_PATH)."
    ),
    hash_algorithm: str = typer.Option(
        None, "--hash", help="Object format: sha256 or sha1."
    ),
    branch: str = typer.Option(
        None, "--branch", "-b", help="Branch HEAD points at."
    ),
) -> None:
    """Create a bare repository: objects/, refs/, config and HEAD.

    Running it again on an existing repository is harmless.
    """
    root = path or config.repository_path
    object_format = hash_algorithm or config.hash_algorithm
    branch = branch or config.default_branch
    try:
        repo = BareRepository(root, object_format=object_format)
        repo.init(branch)
    except (GitwideError, ValueError) as exc:
        raise fail(str(exc)) from exc

    console.print(
        Panel(
            "\n".join([
                "[bold green]Repository initialized[/bold green]",
                "",
                f"[bold]Path:[/bold]          {repo.root}",
                f"[bold]Object format:[/bold] {repo.object_format}",
                f"[bold]HEAD:[/bold]          refs/heads/{branch}",
            ]),
            title="[bold]gitwide[/bold]",
            border_style="green",
        )
    )
