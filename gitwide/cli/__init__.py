"""gitwide CLI: Typer-based command-line interface.

Provides the ``gitwide`` command with subcommands for creating bare
repositories, hashing and reading objects, verifying a store and building
the demo repository.

All output uses Rich for formatted terminal display.
"""
