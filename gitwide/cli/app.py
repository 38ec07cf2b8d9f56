"""Main Typer application: imports and registers all CLI commands.

Entry point: ``gitwide`` (configured via pyproject.toml console_scripts).

Commands: init, hash-object, cat-file, verify, demo.
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from gitwide.cli.commands.cat_file import cat_file_cmd
from gitwide.cli.commands.demo import demo_cmd
from gitwide.cli.commands.hash_object import hash_object_cmd
from gitwide.cli.commands.init import init_cmd
from gitwide.cli.commands.verify import verify_cmd
from gitwide.config import config

app = typer.Typer(
    name="gitwide",
    help="gitwide: content-addressed objects with a wide hash.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="init", help="Create a bare repository.")(init_cmd)
app.command(name="hash-object", help="Compute (and optionally store) a blob digest.")(hash_object_cmd)
app.command(name="cat-file", help="Show the type or content of a stored object.")(cat_file_cmd)
app.command(name="verify", help="Re-hash every loose object in a repository.")(verify_cmd)
app.command(name="demo", help="Build the hello-world demo repository.")(demo_cmd)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        config.log_level, "--log-level", help="Logging level (DEBUG, INFO, WARNING...)."
    ),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)],
        force=True,
    )


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
