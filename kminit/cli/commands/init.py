"""``kminit init`` — the full run: bootstrap, then prepare.

Equivalent to ``kminit bootstrap`` followed by ``kminit prepare``, with the
freshly installed cosign used for the image signature check.
"""

from __future__ import annotations

import typer

from kminit.cli import runtime
from kminit.cli.commands.bootstrap import print_install_report
from kminit.cli.commands.prepare import print_prepare_summary
from kminit.core.errors import AcquisitionError
from kminit.core.host import check_privileges


def init_cmd(
    image: str = typer.Option(
        runtime.DEFAULT_IMAGE_VERSION,
        "--image",
        help="Base-image version.",
        callback=runtime.image_version_callback,
    ),
    sekai: bool = typer.Option(False, "--sekai", help="Prepare the sekai container."),
    interx: bool = typer.Option(False, "--interx", help="Prepare the interx container."),
    log_level: str = typer.Option(None, "--log-level", help="Override KMINIT_LOG_LEVEL."),
) -> None:
    """Install tooling, verify + pull the base image, fetch release assets."""
    settings = runtime.load_settings(log_level)
    selection = runtime.selection_from_flags(sekai, interx)
    try:
        check_privileges()
        with runtime.build_orchestrator(settings) as orchestrator:
            summary = orchestrator.run(image, selection)
    except AcquisitionError as exc:
        raise runtime.fail(exc)

    print_install_report(summary.install)
    print_prepare_summary(summary.prepare)
