"""Helpers shared by the subcommands."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from gitwide.config import config
from gitwide.core.object_store import ObjectStore
from gitwide.core.repository import BareRepository, NotARepositoryError

console = Console()
err_console = Console(stderr=True)


def fail(message: str) -> typer.Exit:
    """Print ``message`` to stderr and return an ``Exit(1)`` to raise."""
    err_console.print(f"[bold red]error:[/bold red] {escape(message)}", highlight=False)
    return typer.Exit(code=1)


def open_repository(path: Path | None) -> BareRepository:
    """Open the repository at ``path`` (or the configured default)."""
    root = path or config.repository_path
    try:
        return BareRepository.open(root)
    except (NotARepositoryError, ValueError) as exc:
        raise fail(str(exc)) from exc


def store_for(path: Path | None) -> ObjectStore:
    """Return the repository's store, or a config-driven one if none exists.

    Used by read-only commands that should work outside a repository.
    """
    root = path or config.repository_path
    if (root / "config").exists():
        return open_repository(root).object_store(config)
    return ObjectStore.from_config(root, config)
