"""kminit CLI — Typer-based command-line interface.

Provides the ``kminit`` command with subcommands for the full run, the
tooling bootstrap, base image preparation and version lookup.

All output uses Rich for formatted terminal display.
"""
