"""Host checks — platform detection and the privilege guard.

Installing into ``/usr/local/bin`` and ``/usr/keys`` needs root, but the
launcher refuses a bare root login: it must be started through ``sudo`` so
the invoking operator is known.
"""

from __future__ import annotations

import logging
import os
import platform as _platform
import sys
from collections.abc import Callable, Mapping

from pydantic import BaseModel, ConfigDict

from kminit.core.errors import PrivilegeError

logger = logging.getLogger(__name__)


class HostPlatform(BaseModel):
    """Target OS and CPU architecture, in release-asset naming."""

    model_config = ConfigDict(frozen=True)

    platform: str  # "linux", "darwin"
    architecture: str  # "amd64", "arm64", ...


def normalise_architecture(machine: str) -> str:
    """Map a machine string to ``arm64`` or ``amd64``.

    Anything ARM-flavoured becomes ``arm64``; everything else is treated as
    ``amd64``.
    """
    machine = machine.lower()
    if "arm" in machine or "aarch" in machine:
        return "arm64"
    return "amd64"


def detect_platform(
    *, architecture: str = "", platform: str = ""
) -> HostPlatform:
    """Detect the host platform; non-empty arguments override detection.

    An explicit *architecture* is used verbatim, without normalisation.
    """
    arch = architecture or normalise_architecture(_platform.machine())
    plat = platform or sys.platform
    if plat.startswith("linux"):
        plat = "linux"
    host = HostPlatform(platform=plat, architecture=arch)
    logger.info("ARCH: %s, PLATFORM: %s", host.architecture, host.platform)
    return host


def _effective_uid() -> int:
    return os.geteuid()


def check_privileges(
    *,
    uid_getter: Callable[[], int] = _effective_uid,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Require root obtained through sudo; return the invoking user.

    Raises
    ------
    PrivilegeError
        If running as plain root or as a non-root user.
    """
    env = os.environ if environ is None else environ
    sudo_user = env.get("SUDO_USER", "")
    if uid_getter() != 0:
        raise PrivilegeError(
            "Non-root user detected. Re-run with sudo to install tooling."
        )
    if not sudo_user:
        raise PrivilegeError("This application should not be run as root. Use sudo.")
    logger.info("Started with sudo by user %s", sudo_user)
    return sudo_user
