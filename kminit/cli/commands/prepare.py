"""``kminit prepare`` — verify and pull the base image, fetch release assets.

The image signature is checked before anything is pulled.  A failed check
aborts the command with a non-zero exit status and nothing is pulled.
"""

from __future__ import annotations

import typer
from rich.panel import Panel

from kminit.cli import runtime
from kminit.cli.commands.versions import print_resolution
from kminit.core.errors import AcquisitionError
from kminit.core.orchestrator import PrepareSummary


def print_prepare_summary(summary: PrepareSummary) -> None:
    runtime.console.print(f"[bold green]Image verified![/bold green] {summary.image_reference}")
    print_resolution(summary.resolution)
    lines = [f"[bold]{slug}[/bold]  {path}" for slug, path in summary.downloads.items()]
    runtime.console.print(
        Panel(
            "\n".join(lines) or "[dim]Nothing downloaded.[/dim]",
            title="[bold]Release assets[/bold]",
            border_style="green",
        )
    )


def prepare_cmd(
    image: str = typer.Option(
        runtime.DEFAULT_IMAGE_VERSION,
        "--image",
        help="Base-image version.",
        callback=runtime.image_version_callback,
    ),
    sekai: bool = typer.Option(False, "--sekai", help="Prepare the sekai container."),
    interx: bool = typer.Option(False, "--interx", help="Prepare the interx container."),
    cosign: str = typer.Option("cosign", "--cosign", help="cosign executable to verify with."),
    log_level: str = typer.Option(None, "--log-level", help="Override KMINIT_LOG_LEVEL."),
) -> None:
    """Verify + pull the base image, resolve versions, download assets."""
    settings = runtime.load_settings(log_level)
    selection = runtime.selection_from_flags(sekai, interx)
    try:
        with runtime.build_orchestrator(settings) as orchestrator:
            summary = orchestrator.prepare(image, selection, cosign_path=cosign)
    except AcquisitionError as exc:
        raise runtime.fail(exc)

    print_prepare_summary(summary)
