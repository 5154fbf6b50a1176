"""Trust store — writes trust anchors to their well-known paths.

Writing is idempotent: the key is always overwritten with the embedded
value, so a stale or tampered key on disk is replaced.
"""

from __future__ import annotations

import logging
from pathlib import Path

from kminit.core.errors import InstallStepError
from kminit.models.trust import TrustAnchor

logger = logging.getLogger(__name__)


def write_trust_anchor(anchor: TrustAnchor, path: Path) -> Path:
    """Write *anchor* as PEM to *path*, creating parent directories.

    Raises ``InstallStepError`` on filesystem errors.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(anchor.pem + "\n", encoding="utf-8")
        path.chmod(0o644)
    except OSError as exc:
        raise InstallStepError(f"Error writing public key to {path}: {exc}") from exc
    logger.info("Public key %s (%s) written to %s", anchor.name, anchor.fingerprint, path)
    return path

