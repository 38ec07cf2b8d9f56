"""``gitwide demo``: build the hello-world demo repository.

Creates a bare repository holding one blob (``Hello, world!\\n``), one
tree listing it as ``hello-world.txt`` and one root commit, points the
default branch at the commit and optionally clones it with the external
``git`` client to prove the objects are readable.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import typer
from pydantic import BaseModel, ConfigDict
from rich.panel import Panel

from gitwide.cli.commands._common import console, fail
from gitwide.config import GitwideConfig, config
from gitwide.core.blob import BlobEncoder
from gitwide.core.commit import CommitEncoder
from gitwide.core.errors import GitwideError
from gitwide.core.repository import BareRepository
from gitwide.core.tree import TreeEncoder
from gitwide.models.digest import Digest
from gitwide.models.objects import Identity

DEMO_CONTENT = b"Hello, world!\n"
DEMO_FILE_NAME = "hello-world.txt"
DEMO_MESSAGE = "create_demo_git\n"


class DemoObjects(BaseModel):
    """Digests produced by :func:`build_demo`."""

    model_config = ConfigDict(frozen=True)

    repository: Path
    branch: str
    blob: Digest
    tree: Digest
    commit: Digest


def build_demo(
    root: Path,
    *,
    object_format: str = "sha256",
    branch: str = "master",
    settings: GitwideConfig | None = None,
) -> DemoObjects:
    """Write the demo repository at ``root`` and return its digests."""
    settings = settings or config
    repo = BareRepository(root, object_format=object_format)
    repo.init(branch)
    store = repo.object_store(settings)

    blob = BlobEncoder(store).encode([DEMO_CONTENT])
    # typical file mode: 100644, typical dir mode: 40000
    tree = TreeEncoder(store, sort_entries=settings.sort_tree_entries).encode([
        ("100644", DEMO_FILE_NAME, blob),
    ])
    person = Identity(
        name="computer",
        email="computer@example.com",
        timestamp="0",
        tz_offset=settings.default_timezone,
    )
    commit = CommitEncoder(store).encode(
        tree,
        parents=[],
        authorship=[("author", person), ("committer", person)],
        message=DEMO_MESSAGE,
    )
    repo.update_ref(branch, commit)
    return DemoObjects(repository=repo.root, branch=branch, blob=blob, tree=tree, commit=commit)


def checkout_path(root: Path) -> Path:
    """Where ``--clone`` puts the working copy: ``demo.git`` -> ``demo``."""
    if root.suffix == ".git":
        return root.with_suffix("")
    return root.with_name(f"{root.name}-checkout")


def _clone(root: Path, dest: Path) -> None:
    git = shutil.which("git")
    if git is None:
        raise fail("git not found on PATH; cannot clone")
    result = subprocess.run(
        [git, "clone", str(root), str(dest)],
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        raise fail(f"git clone failed:\n{result.stderr.strip()}")
    console.print(f"[green]Cloned into[/green] {dest}")


def demo_cmd(
    path: Path = typer.Argument(Path("demo.git"), help="Where to create the repository."),
    hash_algorithm: str = typer.Option(
        None, "--hash", help="Object format: sha256 or sha1."
    ),
    fresh: bool = typer.Option(
        False, "--fresh", help="Delete an existing demo repository and checkout first."
    ),
    clone: bool = typer.Option(
        False, "--clone", help="Clone the result with the external git client."
    ),
) -> None:
    """Build the demo repository and print the digests it produced."""
    dest = checkout_path(path)
    if fresh:
        for directory in (path, dest):
            if directory.exists():
                shutil.rmtree(directory)

    try:
        objects = build_demo(
            path,
            object_format=hash_algorithm or config.hash_algorithm,
            branch=config.default_branch,
        )
    except (GitwideError, ValueError) as exc:
        raise fail(str(exc)) from exc

    console.print(
        Panel(
            "\n".join([
                f"[bold]Repository:[/bold] {objects.repository}",
                f"[bold]Blob:[/bold]       {objects.blob.hex}",
                f"[bold]Tree:[/bold]       {objects.tree.hex}",
                f"[bold]Commit:[/bold]     {objects.commit.hex}",
                f"[bold]Branch:[/bold]     refs/heads/{objects.branch}",
            ]),
            title="[bold]gitwide demo[/bold]",
            border_style="cyan",
        )
    )

    if clone:
        _clone(path, dest)
