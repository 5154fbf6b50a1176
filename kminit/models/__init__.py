"""kminit data models — all Pydantic v2, all frozen (immutable)."""

from kminit.models.config import CosignConfig, LauncherConfig, ToolingBundleConfig
from kminit.models.install import (
    VALID_INSTALL_TRANSITIONS,
    InstallState,
    InstallTransition,
)
from kminit.models.repositories import (
    Release,
    ReleaseAsset,
    RepoKey,
    RepositoryRef,
    RepositorySet,
)
from kminit.models.trust import InstallTarget, PinnedHash, TrustAnchor
from kminit.models.versioning import InvalidVersionError, validate_semver

__all__ = [
    # config
    "LauncherConfig",
    "CosignConfig",
    "ToolingBundleConfig",
    # repositories
    "RepoKey",
    "RepositoryRef",
    "RepositorySet",
    "Release",
    "ReleaseAsset",
    # trust
    "PinnedHash",
    "TrustAnchor",
    "InstallTarget",
    # install
    "InstallState",
    "InstallTransition",
    "VALID_INSTALL_TRANSITIONS",
    # versioning
    "InvalidVersionError",
    "validate_semver",
]
