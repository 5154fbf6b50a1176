"""Signature gate — verifies a detached signature with an external tool.

Bridge boundary
---------------
The cryptography is not done here.  ``CosignBlobVerifier`` shells out to
``cosign verify-blob`` and treats exit status 0 as the only success.  The
``SignatureVerifier`` Protocol lets tests (and alternative tools) plug in
without spawning processes.

Two failures are kept distinct:

* ``MissingTrustMaterialError``: the public key is not on disk.  Checked
  before anything is launched.
* ``SignatureVerificationError``: the verifier ran (or could not be
  launched) and did not report success.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from kminit.core.commands import CommandRunner, SubprocessRunner
from kminit.core.errors import MissingTrustMaterialError, SignatureVerificationError

logger = logging.getLogger(__name__)


@runtime_checkable
class SignatureVerifier(Protocol):
    """Protocol for detached-signature verification backends."""

    def verify_detached(
        self, file_path: Path, signature_path: Path, public_key_ref: Path
    ) -> None:
        """Return normally if the signature is valid, raise otherwise."""
        ...


class CosignBlobVerifier:
    """``SignatureVerifier`` backed by ``cosign verify-blob``.

    Parameters
    ----------
    cosign_path:
        Executable to invoke; a bare name is looked up on PATH.
    runner:
        Command runner.  Defaults to ``SubprocessRunner``.
    """

    def __init__(
        self, cosign_path: str | Path = "cosign", runner: CommandRunner | None = None
    ) -> None:
        self._cosign = str(cosign_path)
        self._runner = runner or SubprocessRunner()

    def build_command(
        self, file_path: Path, signature_path: Path, public_key_ref: Path
    ) -> list[str]:
        return [
            self._cosign,
            "verify-blob",
            "--key",
            str(public_key_ref),
            "--signature",
            str(signature_path),
            str(file_path),
        ]

    def verify_detached(
        self, file_path: Path, signature_path: Path, public_key_ref: Path
    ) -> None:
        _require_trust_material(Path(public_key_ref))
        for label, path in (("artifact", file_path), ("signature", signature_path)):
            if not Path(path).is_file():
                raise SignatureVerificationError(f"Cannot verify: {label} {path} does not exist")

        command = self.build_command(file_path, signature_path, public_key_ref)
        try:
            returncode = self._runner.run(command)
        except OSError as exc:
            raise SignatureVerificationError(
                f"Failed to launch {self._cosign} to verify {file_path}: {exc}"
            ) from exc
        if returncode != 0:
            raise SignatureVerificationError(
                f"Signature of {Path(file_path).name} did not verify "
                f"against {public_key_ref} (exit status {returncode})",
                returncode=returncode,
            )
        logger.info("Signature verified for %s", file_path)


def _require_trust_material(public_key_ref: Path) -> None:
    if not public_key_ref.is_file():
        raise MissingTrustMaterialError(
            f"Public key {public_key_ref} is missing; write trust material first"
        )


def verify_detached(
    file_path: Path,
    signature_path: Path,
    public_key_ref: Path,
    verifier: SignatureVerifier | None = None,
) -> None:
    """Gate entry point: verify *file_path* against its detached signature.

    The trust material check runs here as well, so a fake verifier cannot
    mask a missing key.
    """
    _require_trust_material(Path(public_key_ref))
    (verifier or CosignBlobVerifier()).verify_detached(
        Path(file_path), Path(signature_path), Path(public_key_ref)
    )
