"""Checksum gate — compares a file's SHA-256 against a pinned digest.

The pinned table is keyed by CPU architecture.  An architecture with no
pinned digest is SKIPPED rather than failed: the file is accepted without
being hashed, and a WARNING is logged every time this happens.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from kminit.core.errors import ChecksumMismatchError, InstallStepError
from kminit.core.hasher import sha256_file
from kminit.models.trust import PinnedHash

logger = logging.getLogger(__name__)


class ChecksumVerdict(str, Enum):
    VERIFIED = "verified"
    SKIPPED = "skipped"


def check_hash(
    file_path: Path, architecture: str, pinned_table: PinnedHash
) -> ChecksumVerdict:
    """Verify *file_path* against the digest pinned for *architecture*.

    Returns ``ChecksumVerdict.VERIFIED`` on a match and
    ``ChecksumVerdict.SKIPPED`` when the architecture is not pinned.

    Raises
    ------
    ChecksumMismatchError
        If the computed digest differs from the pinned one.
    InstallStepError
        If the file cannot be read.
    """
    expected = pinned_table.expected_for(architecture)
    if expected is None:
        logger.warning(
            "No pinned %s digest for architecture %r (pinned: %s); "
            "skipping checksum verification of %s",
            pinned_table.version,
            architecture,
            ", ".join(pinned_table.architectures) or "none",
            file_path,
        )
        return ChecksumVerdict.SKIPPED

    try:
        actual = sha256_file(Path(file_path))
    except OSError as exc:
        raise InstallStepError(
            f"Cannot read {file_path} for checksum verification: {exc}"
        ) from exc
    if actual != expected:
        raise ChecksumMismatchError(
            f"Invalid checksum for {Path(file_path).name} ({architecture}): "
            f"expected {expected}, got {actual}"
        )
    logger.info("Checksum verified for %s (%s)", file_path, architecture)
    return ChecksumVerdict.VERIFIED
