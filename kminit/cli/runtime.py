"""Shared CLI plumbing — logging setup, orchestrator factory, error exits."""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from kminit.config import Settings
from kminit.core.errors import AcquisitionError
from kminit.core.orchestrator import Orchestrator
from kminit.models.config import LauncherConfig
from kminit.models.versioning import InvalidVersionError, validate_semver

console = Console()
err_console = Console(stderr=True)

DEFAULT_IMAGE_VERSION = LauncherConfig().default_base_image_version


def configure_logging(level: str) -> None:
    """Route all ``kminit`` loggers through a Rich handler at *level*."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=False, show_path=False)],
        force=True,
    )


def load_settings(log_level: str | None) -> Settings:
    settings = Settings()
    configure_logging(log_level or settings.log_level)
    return settings


def build_orchestrator(settings: Settings) -> Orchestrator:
    """Build the production orchestrator.  Tests replace this factory."""
    return Orchestrator(settings=settings)


def image_version_callback(value: str) -> str:
    try:
        return validate_semver(value)
    except InvalidVersionError as exc:
        raise typer.BadParameter(str(exc)) from exc


def selection_from_flags(sekai: bool, interx: bool) -> list[str]:
    """Map the container flags to repository names (empty means all)."""
    selected = []
    if sekai:
        selected.append("sekai")
    if interx:
        selected.append("interx")
    return selected


def fail(exc: AcquisitionError) -> typer.Exit:
    """Print a gate-labelled diagnostic to stderr and return the exit."""
    err_console.print(f"[bold red]\\[{exc.gate}][/bold red] {escape(str(exc))}")
    return typer.Exit(code=1)
