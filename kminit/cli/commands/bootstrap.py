"""``kminit bootstrap`` — install the verifier and the signed tooling bundle.

Requires root via sudo.  Installs cosign (checksum-pinned) unless it is
already on PATH, writes the tooling public key, then downloads,
signature-verifies and runs the tooling bundle installer.
"""

from __future__ import annotations

import typer
from rich.table import Table

from kminit.cli import runtime
from kminit.core.errors import AcquisitionError
from kminit.core.host import check_privileges
from kminit.core.install_pipeline import InstallReport


def print_install_report(report: InstallReport) -> None:
    table = Table(title="Bootstrap")
    table.add_column("From", style="dim")
    table.add_column("To", style="cyan")
    table.add_column("Detail")
    for t in report.history:
        table.add_row(t.from_state.value, t.to_state.value, t.detail)
    runtime.console.print(table)
    if report.cosign_checksum is not None and report.cosign_checksum.value == "skipped":
        runtime.console.print(
            "[bold yellow]Warning:[/bold yellow] cosign checksum was not verified "
            "(no digest pinned for this architecture)."
        )


def bootstrap_cmd(
    log_level: str = typer.Option(None, "--log-level", help="Override KMINIT_LOG_LEVEL."),
) -> None:
    """Install cosign and the signed bash-utils bundle."""
    settings = runtime.load_settings(log_level)
    try:
        check_privileges()
        with runtime.build_orchestrator(settings) as orchestrator:
            report = orchestrator.bootstrap()
    except AcquisitionError as exc:
        raise runtime.fail(exc)

    print_install_report(report)
    runtime.console.print(
        f"[bold green]Installed bash-utils {report.bundle_version}[/bold green]"
    )
