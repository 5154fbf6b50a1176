"""``kminit versions`` — show the latest release of each declared repository."""

from __future__ import annotations

import typer
from rich.table import Table

from kminit.cli import runtime
from kminit.core.version_resolver import ResolutionReport


def print_resolution(report: ResolutionReport) -> None:
    table = Table(title="Latest releases")
    table.add_column("Repository", style="cyan")
    table.add_column("Version", style="green")
    table.add_column("Error", style="red")
    for ref in report.requested:
        outcome = report.outcomes.get(ref.key)
        if outcome is None:
            continue
        table.add_row(ref.slug, outcome.version or "-", outcome.error or "")
    runtime.console.print(table)


def versions_cmd(
    sekai: bool = typer.Option(False, "--sekai", help="Only resolve sekai."),
    interx: bool = typer.Option(False, "--interx", help="Only resolve interx."),
    log_level: str = typer.Option(None, "--log-level", help="Override KMINIT_LOG_LEVEL."),
) -> None:
    """Resolve latest versions concurrently.  Failures are reported, not fatal."""
    settings = runtime.load_settings(log_level)
    selection = runtime.selection_from_flags(sekai, interx)
    with runtime.build_orchestrator(settings) as orchestrator:
        repos = orchestrator.config.repository_set(selection or None)
        report = orchestrator.resolve_versions(repos)
    print_resolution(report)
