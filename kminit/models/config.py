"""Launcher configuration — the single source of truth for well-known values.

Every path, version, download URL, pinned digest and trust anchor the
pipeline relies on lives here.  The model is frozen and built once at
startup, then handed to each component.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator

from kminit.models.repositories import RepositorySet
from kminit.models.trust import PinnedHash, TrustAnchor
from kminit.models.versioning import validate_semver

KIRA_COSIGN_PUB_PEM = """-----BEGIN PUBLIC KEY-----
MFkwEwYHKoZIzj0CAQYIKoZIzj0DAQcDQgAE/IrzBQYeMwvKa44/DF/HB7XDpnE+
f+mU9F/Qbfq25bBWV2+NlYMJv3KvKHNtu3Jknt6yizZjUV4b8WGfKBzFYw==
-----END PUBLIC KEY-----"""

COSIGN_PINNED_HASHES = PinnedHash(
    version="v2.0.0",
    digests={
        "amd64": "169a53594c437d53ffc401b911b7e70d453f5a2c1f96eb2a736f34f6356c4f2b",
        "arm64": "8132cb2fb99a4c60ba8e03b079e12462c27073028a5d08c07ecda67284e0c88d",
    },
)


class CosignConfig(BaseModel):
    """Where the signature verification tool comes from and goes to."""

    model_config = ConfigDict(frozen=True)

    version: str = "v2.0.0"
    binary_name: str = "cosign"
    url_template: str = (
        "https://github.com/sigstore/cosign/releases/download/"
        "{version}/cosign-{platform}-{architecture}"
    )
    install_path: Path = Path("/usr/local/bin/cosign")
    pinned_hashes: PinnedHash = COSIGN_PINNED_HASHES

    def download_url(self, platform: str, architecture: str) -> str:
        return self.url_template.format(
            version=self.version, platform=platform, architecture=architecture
        )


class ToolingBundleConfig(BaseModel):
    """The signed tooling bundle and how to run its installer."""

    model_config = ConfigDict(frozen=True)

    version: str = "v0.3.42"
    file_name: str = "bash-utils.sh"
    url_template: str = (
        "https://github.com/KiraCore/tools/releases/download/{version}/{file_name}"
    )
    signature_suffix: str = ".sig"
    setup_args: tuple[str, ...] = ("bashUtilsSetup", "/var/kiraglob")
    profile_reload_command: tuple[str, ...] = ("bash", "-c", ". /etc/profile")

    @property
    def signature_name(self) -> str:
        return f"{self.file_name}{self.signature_suffix}"

    @property
    def download_url(self) -> str:
        return self.url_template.format(version=self.version, file_name=self.file_name)

    @property
    def signature_url(self) -> str:
        return self.url_template.format(
            version=self.version, file_name=self.signature_name
        )


class LauncherConfig(BaseModel):
    """Immutable launcher configuration.

    Defaults are the production values.  Tests build their own instance
    with temporary paths; nothing reads these values from globals.
    """

    model_config = ConfigDict(frozen=True)

    # Release index
    release_owner: str = "KiraCore"
    declared_repositories: tuple[str, ...] = ("sekai", "interx")
    asset_name_template: str = "{name}-linux-amd64.deb"

    # Base image
    base_image_repository: str = "ghcr.io/kiracore/docker/base-image"
    default_base_image_version: str = "v0.13.7"

    # Filesystem surface
    keys_dir: Path = Path("/usr/keys")
    tooling_key_path: Path = Path("/usr/keys/kira-cosign.pub")
    work_dir: Path = Path(".kminit/downloads")

    cosign: CosignConfig = CosignConfig()
    bundle: ToolingBundleConfig = ToolingBundleConfig()

    image_trust_anchor: TrustAnchor = TrustAnchor(
        name="kira-base-image", pem=KIRA_COSIGN_PUB_PEM
    )
    tooling_trust_anchor: TrustAnchor = TrustAnchor(
        name="kira-cosign", pem=KIRA_COSIGN_PUB_PEM
    )

    @field_validator("default_base_image_version")
    @classmethod
    def _check_default_version(cls, value: str) -> str:
        return validate_semver(value)

    def base_image_reference(self, version: str) -> str:
        """Return the full image reference for *version* (validated)."""
        return f"{self.base_image_repository}:{validate_semver(version)}"

    def asset_name_for(self, repository_name: str) -> str:
        return self.asset_name_template.format(name=repository_name)

    def repository_set(self, names: list[str] | None = None) -> RepositorySet:
        """Build the declared ``RepositorySet``, optionally narrowed to *names*."""
        repos = RepositorySet()
        for name in self.declared_repositories:
            if names is None or name in names:
                repos = repos.with_repository(self.release_owner, name)
        return repos
