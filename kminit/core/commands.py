"""Subprocess seam — every external command goes through a CommandRunner.

The default ``SubprocessRunner`` streams the child's output to the terminal
and returns the exit status.  Tests substitute a recording fake.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from kminit.core.errors import CommandFailedError

logger = logging.getLogger(__name__)


@runtime_checkable
class CommandRunner(Protocol):
    """Protocol for running an external command to completion."""

    def run(self, args: Sequence[str]) -> int:
        """Run *args* and return its exit status.

        Raises ``OSError`` when the command cannot be launched.
        """
        ...


class SubprocessRunner:
    """Runs commands with ``subprocess.run``, inheriting stdout/stderr."""

    def __init__(self, timeout: float | None = None) -> None:
        self._timeout = timeout

    def run(self, args: Sequence[str]) -> int:
        logger.debug("exec: %s", " ".join(args))
        try:
            completed = subprocess.run(list(args), check=False, timeout=self._timeout)
        except subprocess.TimeoutExpired as exc:
            raise OSError(f"{args[0]} timed out after {exc.timeout}s") from exc
        return completed.returncode


def run_checked(
    runner: CommandRunner,
    args: Sequence[str],
    *,
    description: str,
    error_cls: type[CommandFailedError] = CommandFailedError,
) -> None:
    """Run *args* and raise *error_cls* unless it exits zero."""
    command = list(args)
    try:
        returncode = runner.run(command)
    except OSError as exc:
        raise error_cls(
            f"Failed to {description}: cannot run {command[0]}: {exc}",
            command=command,
        ) from exc
    if returncode != 0:
        raise error_cls(
            f"Failed to {description}: {command[0]} exited with status {returncode}",
            command=command,
            returncode=returncode,
        )
