"""Image trust gate — a container image is pulled only after this passes.

The default ``CosignImageVerifier`` runs ``cosign verify --key <pem>
<image>`` with the embedded trust anchor written to a private temporary
file for the duration of the call.  Any failure is fatal and not retried.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from kminit.core.commands import CommandRunner, SubprocessRunner
from kminit.core.errors import ImageTrustError
from kminit.models.trust import TrustAnchor

logger = logging.getLogger(__name__)


@runtime_checkable
class ImageVerifier(Protocol):
    """Protocol for container image signature verification backends."""

    def verify_image(self, image_reference: str, trust_anchor: TrustAnchor) -> bool:
        """Return ``True`` only if the image signature verifies.

        May raise for transport or tooling errors.
        """
        ...


class CosignImageVerifier:
    """``ImageVerifier`` backed by ``cosign verify``."""

    def __init__(
        self, cosign_path: str | Path = "cosign", runner: CommandRunner | None = None
    ) -> None:
        self._cosign = str(cosign_path)
        self._runner = runner or SubprocessRunner()

    def verify_image(self, image_reference: str, trust_anchor: TrustAnchor) -> bool:
        fd, key_path = tempfile.mkstemp(prefix="kminit-", suffix=".pub")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(trust_anchor.pem + "\n")
            command = [self._cosign, "verify", "--key", key_path, image_reference]
            return self._runner.run(command) == 0
        finally:
            Path(key_path).unlink(missing_ok=True)


class ImageTrustGate:
    """Approves an image reference against an embedded trust anchor.

    Parameters
    ----------
    verifier:
        Backend performing the verification.  Defaults to
        ``CosignImageVerifier``.
    """

    def __init__(self, verifier: ImageVerifier | None = None) -> None:
        self._verifier = verifier or CosignImageVerifier()

    def verify(self, image_reference: str, trust_anchor: TrustAnchor) -> bool:
        """Return ``True`` if *image_reference* is signed by *trust_anchor*.

        Raises
        ------
        ImageTrustError
            On any verifier error or a negative verdict.  The caller must
            not pull the image.
        """
        logger.info(
            "Verifying image %s against key %s (%s)",
            image_reference, trust_anchor.name, trust_anchor.fingerprint,
        )
        try:
            verified = self._verifier.verify_image(image_reference, trust_anchor)
        except ImageTrustError:
            raise
        except Exception as exc:
            raise ImageTrustError(
                f"Verification of {image_reference} failed: {exc}"
            ) from exc
        if verified is not True:
            raise ImageTrustError(
                f"Signature of {image_reference} did not verify against "
                f"{trust_anchor.name} ({trust_anchor.fingerprint})"
            )
        logger.info("Image %s verified", image_reference)
        return True
