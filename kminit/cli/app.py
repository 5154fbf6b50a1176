"""kminit command-line application and its command registrations.

Entry point: ``kminit`` (configured via pyproject.toml project.scripts).
"""

from __future__ import annotations

import typer

from kminit.cli.commands.bootstrap import bootstrap_cmd
from kminit.cli.commands.init import init_cmd
from kminit.cli.commands.prepare import prepare_cmd
from kminit.cli.commands.versions import versions_cmd

app = typer.Typer(
    name="kminit",
    help="kminit: verified acquisition of node-operator images and tooling.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="init", help="Bootstrap tooling, then prepare the base image and assets.")(init_cmd)
app.command(name="bootstrap", help="Install cosign and the signed tooling bundle.")(bootstrap_cmd)
app.command(name="prepare", help="Verify + pull the base image and download release assets.")(prepare_cmd)
app.command(name="versions", help="Show the latest release of each repository.")(versions_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
