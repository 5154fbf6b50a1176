"""Error taxonomy for the acquisition pipeline.

Every fatal error carries a ``gate`` label so an operator can tell from a
single line which check stopped the run.  Trust failures are never
downgraded to warnings; the process exits non-zero.
"""

from __future__ import annotations


class AcquisitionError(RuntimeError):
    """Base class for every error the pipeline reports to the operator."""

    gate = "acquisition"


class ResolutionError(AcquisitionError):
    """A single repository's release lookup failed (non-fatal per repo)."""

    gate = "release-index"


class ReleaseLookupError(ResolutionError):
    """The release index returned an error or an unusable response."""


class DownloadError(AcquisitionError):
    """A download did not complete; the destination must not be trusted."""

    gate = "download"


class AssetNotFoundError(DownloadError):
    """The release exists but carries no asset with the requested name."""


class TrustFailure(AcquisitionError):
    """Base class for provenance failures.  Always fatal."""

    gate = "trust"


class ImageTrustError(TrustFailure):
    """The base image signature could not be verified."""

    gate = "image-trust"


class ChecksumMismatchError(TrustFailure):
    """A downloaded file does not match its pinned digest."""

    gate = "checksum"


class SignatureVerificationError(TrustFailure):
    """A detached signature did not verify, or the verifier could not run."""

    gate = "signature"

    def __init__(self, message: str, *, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode


class MissingTrustMaterialError(TrustFailure):
    """The public key needed for verification is not on disk."""

    gate = "trust-material"


class CommandFailedError(AcquisitionError):
    """An external command could not be launched or exited non-zero."""

    gate = "subprocess"

    def __init__(
        self, message: str, *, command: list[str], returncode: int | None = None
    ) -> None:
        super().__init__(message)
        self.command = command
        self.returncode = returncode


class ContainerPullError(CommandFailedError):
    """The container runtime failed to pull an image."""

    gate = "container-pull"


class PrivilegeError(AcquisitionError):
    """The process is not running with the privileges the install needs."""

    gate = "privilege"


class InstallStepError(AcquisitionError):
    """A filesystem step of the install pipeline failed."""

    gate = "install"
