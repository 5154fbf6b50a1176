"""Container pull capability — makes a verified image available locally."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from kminit.core.commands import CommandRunner, SubprocessRunner, run_checked
from kminit.core.errors import ContainerPullError

logger = logging.getLogger(__name__)


@runtime_checkable
class ContainerPuller(Protocol):
    """Protocol for container runtimes that can pull an image."""

    def pull(self, image_reference: str) -> None:
        ...


class DockerPuller:
    """Pulls images with the ``docker`` CLI."""

    def __init__(self, docker_path: str = "docker", runner: CommandRunner | None = None) -> None:
        self._docker = docker_path
        self._runner = runner or SubprocessRunner()

    def pull(self, image_reference: str) -> None:
        logger.info("Pulling image %s", image_reference)
        run_checked(
            self._runner,
            [self._docker, "pull", image_reference],
            description=f"pull {image_reference}",
            error_cls=ContainerPullError,
        )
