"""Trust material models — pinned digests, trust anchors, install targets."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator

from kminit.core.hasher import key_fingerprint


class PinnedHash(BaseModel):
    """Expected SHA-256 digests of one tool version, keyed by architecture.

    Only architectures present in ``digests`` are checked.  Anything else is
    reported as not applicable by the checksum gate.
    """

    model_config = ConfigDict(frozen=True)

    version: str
    digests: dict[str, str]

    @field_validator("digests")
    @classmethod
    def _normalise_digests(cls, value: dict[str, str]) -> dict[str, str]:
        normalised: dict[str, str] = {}
        for arch, digest in value.items():
            digest = digest.strip().lower()
            if len(digest) != 64 or any(c not in "0123456789abcdef" for c in digest):
                raise ValueError(f"Pinned digest for {arch!r} is not a SHA-256 hex string")
            normalised[arch] = digest
        return normalised

    def expected_for(self, architecture: str) -> str | None:
        return self.digests.get(architecture)

    @property
    def architectures(self) -> list[str]:
        return sorted(self.digests)


class TrustAnchor(BaseModel):
    """A PEM-encoded public key compiled into the program."""

    model_config = ConfigDict(frozen=True)

    name: str
    pem: str

    @field_validator("pem")
    @classmethod
    def _require_public_key_block(cls, value: str) -> str:
        value = value.strip()
        if not (
            value.startswith("-----BEGIN PUBLIC KEY-----")
            and value.endswith("-----END PUBLIC KEY-----")
        ):
            raise ValueError("Trust anchor must be a PEM 'PUBLIC KEY' block")
        return value

    @property
    def fingerprint(self) -> str:
        """Short fingerprint for logs, never the key itself."""
        return key_fingerprint(self.pem)


class InstallTarget(BaseModel):
    """Where a verified artifact ends up and whether it gets the exec bit."""

    model_config = ConfigDict(frozen=True)

    local_path: Path
    executable: bool = True
